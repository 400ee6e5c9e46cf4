"""Stripe card-processor adapter built on the stripe-python SDK.

Amounts are sent in minor units. SDK errors are converted into failed
results carrying the SDK's message.
"""

from dataclasses import dataclass

import stripe
import structlog

from storefront.payments.port import PaymentProvider, PaymentResult, RefundResult, WebhookResult
from storefront.shared.money import to_minor_units

logger = structlog.get_logger(__name__)


@dataclass
class StripePaymentProvider(PaymentProvider):
    api_key: str = ""
    webhook_secret: str | None = None

    def __post_init__(self):
        self.name = "stripe"

    def process_payment(self, amount, currency, details=None):
        details = details or {}
        metadata = {
            key: str(details[key]) for key in ("order_id", "order_number", "customer_email") if details.get(key)
        }
        params = {
            "amount": to_minor_units(amount),
            "currency": currency.lower(),
            "confirm": details.get("confirm") is not False,
            "metadata": metadata,
        }
        payment_method = details.get("payment_method") or details.get("payment_method_id")
        if payment_method:
            params["payment_method"] = payment_method

        try:
            intent = stripe.PaymentIntent.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.warning("stripe_payment_failed", error=str(exc), order_id=metadata.get("order_id"))
            return PaymentResult(success=False, error=exc.user_message or str(exc))

        if intent.status == "succeeded":
            return PaymentResult(success=True, transaction_id=intent.id, metadata={"status": intent.status})
        return PaymentResult(
            success=False,
            transaction_id=intent.id,
            error=f"Payment not completed (status: {intent.status})",
            metadata={"status": intent.status, "client_secret": intent.client_secret},
        )

    def refund_payment(self, transaction_id, amount=None):
        params = {"payment_intent": transaction_id}
        if amount is not None:
            params["amount"] = to_minor_units(amount)

        try:
            refund = stripe.Refund.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.warning("stripe_refund_failed", error=str(exc), transaction_id=transaction_id)
            return RefundResult(success=False, error=exc.user_message or str(exc))

        return RefundResult(success=refund.status in ("succeeded", "pending"), refund_id=refund.id)

    def validate_webhook(self, payload, signature):
        if not self.webhook_secret:
            return WebhookResult(valid=False, error="Stripe webhook secret is not configured")
        if not signature:
            return WebhookResult(valid=False, error="Missing Stripe signature")

        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError:
            return WebhookResult(valid=False, error="Invalid payload")
        except stripe.SignatureVerificationError:
            return WebhookResult(valid=False, error="Invalid signature")

        return WebhookResult(valid=True, event={"type": event["type"], "id": event["id"], "data": event["data"]})
