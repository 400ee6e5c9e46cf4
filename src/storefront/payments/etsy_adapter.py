"""Etsy marketplace redirect provider.

Does not charge anything: it points the customer at the Etsy listing where
the purchase is completed. Refunds and webhooks are handled on Etsy's side.
"""

import time
from dataclasses import dataclass

from storefront.payments.port import PaymentProvider, PaymentResult, RefundResult, WebhookResult


@dataclass
class EtsyPaymentProvider(PaymentProvider):
    shop_name: str = ""
    shop_url: str = ""
    callback_url: str | None = None

    def __post_init__(self):
        self.name = "etsy"

    def process_payment(self, amount, currency, details=None):
        details = details or {}
        listing_id = details.get("etsy_listing_id")
        if not listing_id:
            return PaymentResult(success=False, error="Etsy listing ID required")

        quantity = details.get("quantity") or 1
        checkout_url = f"{self.shop_url.rstrip('/')}/listing/{listing_id}?quantity={quantity}"
        metadata = {"checkoutUrl": checkout_url, "shopName": self.shop_name}
        if self.callback_url:
            metadata["callbackUrl"] = self.callback_url

        return PaymentResult(
            success=True,
            transaction_id=f"etsy_redirect_{int(time.time() * 1000)}",
            metadata=metadata,
            redirect=True,
        )

    def refund_payment(self, transaction_id, amount=None):
        return RefundResult(success=False, error="Etsy refunds must be processed through Etsy dashboard")

    def validate_webhook(self, payload, signature):
        return WebhookResult(valid=False, error="Etsy webhooks not implemented")
