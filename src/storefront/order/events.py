"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=20)
    customer_email = String(max_length=255)
    item_count = Integer(required=True)
    total = Float(required=True)
    currency = String(max_length=3)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(max_length=20)
    previous_status = String(required=True)
    new_status = String(required=True)
    payment_intent_id = String(max_length=255)


@storefront.event(part_of="Order")
class OrderFulfillmentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(max_length=20)
    previous_status = String(required=True)
    new_status = String(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was tombstoned. No refund is implied."""

    __version__ = 1

    order_id = Identifier(required=True)
    cancelled_at = DateTime(required=True)
