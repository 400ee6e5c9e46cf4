"""Shopping cart aggregate, keyed by an opaque session identifier.

A cart is created implicitly the first time a session touches it. Each line
records the unit price at the moment the line was first inserted
(``price_at_time``); merging more units into an existing line keeps that
snapshot. Idle carts expire after a configurable time-to-live.
"""

from datetime import UTC, datetime, timedelta

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront

DEFAULT_TTL_DAYS = 30


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    price_at_time = Float(required=True, min_value=0.0)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    session_id = String(required=True, max_length=255)
    user_id = Identifier()
    items = HasMany(CartItem)
    discount_code = String(max_length=100)
    discount_amount = Float(default=0.0, min_value=0.0)
    expires_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def discount_requires_code(self):
        if self.discount_amount and not self.discount_code:
            raise ValidationError({"discount_code": ["A discount amount needs a discount code"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id, user_id=None, ttl_days=DEFAULT_TTL_DAYS):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            user_id=user_id,
            discount_amount=0.0,
            expires_at=now + timedelta(days=ttl_days),
            created_at=now,
            updated_at=now,
        )

    def is_expired(self, now=None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at

    def touch(self, ttl_days=DEFAULT_TTL_DAYS):
        """Refresh the idle-expiry timer."""
        now = datetime.now(UTC)
        self.expires_at = now + timedelta(days=ttl_days)
        self.updated_at = now

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def find_line(self, product_id, variant_id=None):
        """Return the line for a (product, variant) pair, or None."""
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id) and _same_variant(i.variant_id, variant_id)
            ),
            None,
        )

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def quantity_after_adding(self, product_id, variant_id, quantity) -> int:
        existing = self.find_line(product_id, variant_id)
        return (existing.quantity if existing else 0) + quantity

    def add_item(self, product_id, variant_id, quantity, unit_price):
        """Add units of a product, merging with an existing line for the same pair.

        ``unit_price`` is only recorded when a new line is inserted.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Invalid quantity"]})

        existing = self.find_line(product_id, variant_id)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                price_at_time=unit_price,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                quantity=quantity,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity):
        """Set a line's quantity; zero removes the line."""
        if new_quantity is None or new_quantity < 0:
            raise ValidationError({"quantity": ["Invalid quantity"]})

        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found"]})

        if new_quantity == 0:
            self.remove_item(item_id)
            return None

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )
        return item

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        """Drop every line. The discount is kept so a refilled cart still carries it."""
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Discounts
    # -------------------------------------------------------------------
    def apply_discount(self, code, amount):
        if not code:
            raise ValidationError({"discount_code": ["Discount code is required"]})
        if amount is None or amount < 0:
            raise ValidationError({"discount_amount": ["Discount amount must not be negative"]})

        self.discount_code = code
        self.discount_amount = amount
        self.updated_at = datetime.now(UTC)

    def remove_discount(self):
        self.discount_amount = 0.0
        self.discount_code = None
        self.updated_at = datetime.now(UTC)


def _same_variant(left, right) -> bool:
    if not left and not right:
        return True
    return str(left) == str(right)
