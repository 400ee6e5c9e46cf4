"""Order aggregate with immutable OrderItem snapshots.

An order is written once at checkout. Afterwards only its payment status,
fulfillment status and cancellation tombstone change. Item rows are frozen
copies of the catalogue data at the moment of purchase.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderFulfillmentStatusChanged,
    OrderPaymentStatusChanged,
    OrderPlaced,
)
from storefront.shared.serialization import dump_json, load_json


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class FulfillmentStatus(Enum):
    UNFULFILLED = "unfulfilled"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(required=True, max_length=255)
    variant_name = String(max_length=255)
    sku = String(max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    total_price = Float(required=True, min_value=0.0)


@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20)
    customer_email = String(max_length=255)
    customer_name = String(max_length=255)
    shipping_address = Text()  # JSON object
    billing_address = Text()  # JSON object
    items = HasMany(OrderItem)
    subtotal = Float(required=True, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="EUR")
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_intent_id = String(max_length=255)
    payment_method = String(max_length=50)
    fulfillment_status = String(choices=FulfillmentStatus, default=FulfillmentStatus.UNFULFILLED.value)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()
    deleted_at = DateTime()

    @invariant.post
    def total_is_never_negative(self):
        if self.total is not None and self.total < 0:
            raise ValidationError({"total": ["Order total cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        items_data,
        subtotal,
        tax,
        discount,
        total,
        customer_email=None,
        customer_name=None,
        shipping_address=None,
        billing_address=None,
        payment_method=None,
        notes=None,
        currency="EUR",
    ):
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_email=customer_email,
            customer_name=customer_name,
            shipping_address=dump_json(shipping_address),
            billing_address=dump_json(billing_address if billing_address is not None else shipping_address),
            subtotal=subtotal,
            tax=tax,
            discount=discount,
            total=total,
            currency=currency or "EUR",
            payment_status=PaymentStatus.PENDING.value,
            payment_method=payment_method,
            fulfillment_status=FulfillmentStatus.UNFULFILLED.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.add_items([OrderItem(**item) for item in items_data])

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_email=customer_email,
                item_count=len(items_data),
                total=total,
                currency=order.currency,
                placed_at=now,
            )
        )
        return order

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value

    # -------------------------------------------------------------------
    # Status changes (no transition guard; any status is reachable)
    # -------------------------------------------------------------------
    def set_payment_status(self, status, payment_intent_id=None) -> bool:
        """Change the payment status. Returns True when the order just became paid."""
        new_status = _coerce(PaymentStatus, status, "payment_status")
        previous = self.payment_status

        self.payment_status = new_status
        if payment_intent_id:
            self.payment_intent_id = payment_intent_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderPaymentStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=new_status,
                payment_intent_id=self.payment_intent_id,
            )
        )
        return new_status == PaymentStatus.PAID.value and previous != new_status

    def set_fulfillment_status(self, status) -> bool:
        """Change the fulfillment status. Returns True when the order just shipped."""
        new_status = _coerce(FulfillmentStatus, status, "fulfillment_status")
        previous = self.fulfillment_status

        self.fulfillment_status = new_status
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderFulfillmentStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=new_status,
            )
        )
        return new_status == FulfillmentStatus.FULFILLED.value and previous != new_status

    def cancel(self):
        """Tombstone the order. Payment is left untouched."""
        if self.is_deleted:
            raise ValidationError({"order": ["Order is already cancelled"]})

        now = datetime.now(UTC)
        self.deleted_at = now
        self.updated_at = now
        self.raise_(OrderCancelled(order_id=str(self.id), cancelled_at=now))

    def to_payload(self):
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "customer_email": self.customer_email,
            "customer_name": self.customer_name,
            "shipping_address": load_json(self.shipping_address),
            "billing_address": load_json(self.billing_address),
            "items": [
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "variant_id": str(item.variant_id) if item.variant_id else None,
                    "product_name": item.product_name,
                    "variant_name": item.variant_name,
                    "sku": item.sku,
                    "unit_price": item.unit_price,
                    "quantity": item.quantity,
                    "total_price": item.total_price,
                }
                for item in self.items
            ],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.total,
            "currency": self.currency,
            "payment_status": self.payment_status,
            "payment_intent_id": self.payment_intent_id,
            "payment_method": self.payment_method,
            "fulfillment_status": self.fulfillment_status,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }


def _coerce(status_enum, value, field) -> str:
    try:
        return status_enum(value).value
    except ValueError:
        options = ", ".join(s.value for s in status_enum)
        raise ValidationError({field: [f"Invalid status '{value}'. Expected one of: {options}"]}) from None
