"""Payment provider port (abstract interface).

Every provider exposes the same three capabilities: charge, refund and
webhook validation. Failures are reported through the result objects rather
than raised, so callers can surface the provider's message as-is.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentResult:
    """Result of a payment attempt.

    ``redirect`` marks results that did not charge anything yet because the
    customer has to complete the purchase elsewhere (see ``metadata``).
    """

    success: bool
    transaction_id: str | None = None
    error: str | None = None
    metadata: dict | None = None
    redirect: bool = False


@dataclass(frozen=True)
class RefundResult:
    success: bool
    refund_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class WebhookResult:
    valid: bool
    event: dict | None = None
    error: str | None = None


@dataclass
class PaymentProvider(ABC):
    """Abstract payment provider interface."""

    name: str = field(init=False, default="")

    @abstractmethod
    def process_payment(self, amount: float, currency: str, details: dict | None = None) -> PaymentResult:
        """Charge ``amount`` (major units) in ``currency``."""
        ...

    @abstractmethod
    def refund_payment(self, transaction_id: str, amount: float | None = None) -> RefundResult:
        """Refund a previous charge, fully when ``amount`` is None."""
        ...

    @abstractmethod
    def validate_webhook(self, payload: str | bytes, signature: str | None) -> WebhookResult:
        """Check that a webhook payload was sent by the provider."""
        ...
