"""Configurable mock payment provider for development and testing.

Never talks to the network. Behaviour can be steered per call through the
payment details (``simulate_failure``) or for the whole instance through
``configure()``. The most recent calls are kept in ``calls``.
"""

import random
import time
from collections import deque
from dataclasses import dataclass, field

from storefront.payments.port import PaymentProvider, PaymentResult, RefundResult, WebhookResult


def _reference(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{random.randint(100000, 999999)}"


@dataclass
class MockPaymentProvider(PaymentProvider):
    min_amount: float = 1.0
    allow_zero: bool = False
    latency: float = 0.0
    should_succeed: bool = True
    failure_reason: str = "Simulated payment failure"
    history_size: int = 100
    calls: deque = field(init=False, repr=False)

    def __post_init__(self):
        self.name = "mock"
        self.calls = deque(maxlen=self.history_size)

    def configure(self, should_succeed: bool, failure_reason: str = "Simulated payment failure", latency: float = 0.0):
        """Configure provider behaviour at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.latency = latency

    def process_payment(self, amount, currency, details=None):
        details = details or {}
        self.calls.append({"method": "process_payment", "amount": amount, "currency": currency, "details": details})
        self._simulate_latency()

        if not self.allow_zero and amount < self.min_amount:
            return PaymentResult(success=False, error=f"Amount must be at least {self.min_amount} {currency}")
        if details.get("simulate_failure") or not self.should_succeed:
            return PaymentResult(success=False, error=self.failure_reason)

        return PaymentResult(success=True, transaction_id=_reference("mock"))

    def refund_payment(self, transaction_id, amount=None):
        self.calls.append({"method": "refund_payment", "transaction_id": transaction_id, "amount": amount})
        self._simulate_latency()

        if not transaction_id or not transaction_id.startswith("mock_"):
            return RefundResult(success=False, error="Invalid transaction ID for mock provider")
        return RefundResult(success=True, refund_id=_reference("refund_mock"))

    def validate_webhook(self, payload, signature):
        self.calls.append({"method": "validate_webhook", "signature": signature})
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        return WebhookResult(valid=True, event={"type": "mock_webhook", "payload": payload})

    def _simulate_latency(self):
        if self.latency > 0:
            time.sleep(self.latency)
