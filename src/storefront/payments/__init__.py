"""Payment provider factory.

Providers are chosen once from settings at startup:
- MockPaymentProvider for development and testing (default)
- StripePaymentProvider when ``PAYMENT_PROVIDER=stripe`` and an API key is set
- no provider at all for ``PAYMENT_PROVIDER=none``
The Etsy redirect provider is built separately, when the shop is configured.
"""

import structlog

from storefront.config import Settings
from storefront.payments.etsy_adapter import EtsyPaymentProvider
from storefront.payments.mock_adapter import MockPaymentProvider
from storefront.payments.port import PaymentProvider, PaymentResult, RefundResult, WebhookResult
from storefront.payments.stripe_adapter import StripePaymentProvider

logger = structlog.get_logger(__name__)

__all__ = [
    "EtsyPaymentProvider",
    "MockPaymentProvider",
    "PaymentProvider",
    "PaymentResult",
    "RefundResult",
    "StripePaymentProvider",
    "WebhookResult",
    "build_marketplace_provider",
    "build_payment_provider",
]


def build_payment_provider(settings: Settings) -> PaymentProvider | None:
    """Return the configured card/default payment provider, or None."""
    if settings.payment_provider == "none":
        return None

    if settings.payment_provider == "stripe":
        if settings.stripe_api_key:
            return StripePaymentProvider(api_key=settings.stripe_api_key, webhook_secret=settings.stripe_webhook_secret)
        logger.warning("stripe_api_key_missing", fallback="mock")

    return MockPaymentProvider(min_amount=settings.mock_payment_min_amount, allow_zero=False)


def build_marketplace_provider(settings: Settings) -> PaymentProvider | None:
    """Return the Etsy redirect provider when the shop is configured."""
    if settings.etsy_shop_name and settings.etsy_shop_url:
        return EtsyPaymentProvider(
            shop_name=settings.etsy_shop_name,
            shop_url=settings.etsy_shop_url,
            callback_url=settings.etsy_payment_callback_url,
        )
    return None
