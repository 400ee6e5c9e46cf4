"""Cart application service.

Holds the pricing policy (flat tax rate) and cart time-to-live, and applies
catalogue lookups and stock checks around the Cart aggregate. Cart totals
are always priced from the current catalogue; ``price_at_time`` on a line is
the informational price shown when the line was first added.
"""

from dataclasses import asdict, dataclass

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import DEFAULT_TTL_DAYS, Cart
from storefront.catalogue.product import Product
from storefront.shared.money import round_money
from storefront.shared.serialization import load_json

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartTotals:
    subtotal: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class PricedLine:
    """A cart line resolved against the current catalogue."""

    item: object
    product: Product
    variant: object
    unit_price: float

    @property
    def line_total(self) -> float:
        return round_money(self.unit_price * self.item.quantity)


class CartService:
    def __init__(self, tax_rate: float = 0.0, ttl_days: int = DEFAULT_TTL_DAYS):
        self.tax_rate = tax_rate
        self.ttl_days = ttl_days

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def get_or_create_cart(self, session_id: str) -> Cart:
        repo = current_domain.repository_for(Cart)
        cart = repo.find_by_session(session_id)

        if cart is None:
            cart = Cart.create(session_id=session_id, ttl_days=self.ttl_days)
            repo.add(cart)
            logger.debug("cart_created", session_id=session_id, cart_id=str(cart.id))
        elif cart.is_expired():
            cart.clear()
            cart.remove_discount()
            cart.touch(self.ttl_days)
            repo.add(cart)
            logger.info("cart_expired", session_id=session_id, cart_id=str(cart.id))

        return cart

    def get_cart(self, session_id: str) -> Cart:
        return self.get_or_create_cart(session_id)

    def _resolve(self, product_id, variant_id=None):
        product = current_domain.repository_for(Product).get_live(product_id)
        variant = None
        if variant_id:
            variant = product.variant(variant_id)
            if variant is None:
                raise ObjectNotFoundError("Variant not found")
        return product, variant

    @staticmethod
    def _check_stock(variant, requested: int):
        if variant is not None and requested > variant.stock:
            raise ValidationError(
                {"quantity": [f"Insufficient stock available. Requested: {requested}, Available: {variant.stock}"]}
            )

    # -------------------------------------------------------------------
    # Line items
    # -------------------------------------------------------------------
    def add_item(self, session_id: str, product_id, variant_id=None, quantity: int = 1) -> Cart:
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Invalid quantity"]})

        product, variant = self._resolve(product_id, variant_id)
        cart = self.get_or_create_cart(session_id)

        self._check_stock(variant, cart.quantity_after_adding(product_id, variant_id, quantity))

        cart.add_item(
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            unit_price=product.unit_price(variant),
        )
        cart.touch(self.ttl_days)
        current_domain.repository_for(Cart).add(cart)

        logger.info(
            "cart_item_added",
            session_id=session_id,
            product_id=str(product_id),
            variant_id=str(variant_id) if variant_id else None,
            quantity=quantity,
        )
        return cart

    def update_item(self, session_id: str, item_id, quantity: int) -> Cart:
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Invalid quantity"]})

        cart = self.get_or_create_cart(session_id)
        item = cart.find_item(item_id)
        if item is None:
            raise ObjectNotFoundError("Item not found")

        if quantity > 0 and item.variant_id:
            _, variant = self._resolve(item.product_id, item.variant_id)
            self._check_stock(variant, quantity)

        cart.update_item_quantity(item_id, quantity)
        cart.touch(self.ttl_days)
        current_domain.repository_for(Cart).add(cart)
        return cart

    def remove_item(self, session_id: str, item_id) -> Cart:
        cart = self.get_or_create_cart(session_id)
        if cart.find_item(item_id) is not None:
            cart.remove_item(item_id)
            current_domain.repository_for(Cart).add(cart)
        return cart

    def clear_cart(self, session_id: str) -> Cart:
        cart = self.get_or_create_cart(session_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
        return cart

    # -------------------------------------------------------------------
    # Discounts
    # -------------------------------------------------------------------
    def apply_discount(self, session_id: str, code: str, amount: float) -> Cart:
        cart = self.get_or_create_cart(session_id)
        cart.apply_discount(code, amount)
        current_domain.repository_for(Cart).add(cart)
        return cart

    def remove_discount(self, session_id: str) -> Cart:
        cart = self.get_or_create_cart(session_id)
        cart.remove_discount()
        current_domain.repository_for(Cart).add(cart)
        return cart

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def priced_lines(self, cart: Cart) -> list[PricedLine]:
        """Price every line from the current catalogue, skipping vanished products."""
        repo = current_domain.repository_for(Product)
        lines = []
        for item in cart.items:
            try:
                product = repo.get_live(item.product_id)
            except ObjectNotFoundError:
                logger.warning("cart_product_missing", cart_id=str(cart.id), product_id=str(item.product_id))
                continue
            variant = product.variant(item.variant_id, include_deleted=True) if item.variant_id else None
            lines.append(PricedLine(item=item, product=product, variant=variant, unit_price=product.unit_price(variant)))
        return lines

    def totals_for(self, cart: Cart, lines: list[PricedLine] | None = None) -> CartTotals:
        if not cart.items:
            return CartTotals()

        if lines is None:
            lines = self.priced_lines(cart)

        subtotal = round_money(sum(line.line_total for line in lines))
        tax = round_money(subtotal * self.tax_rate)
        discount = round_money(cart.discount_amount or 0.0)
        total = round_money(max(0.0, subtotal + tax - discount))
        return CartTotals(subtotal=subtotal, tax=tax, discount=discount, total=total)

    def calculate_totals(self, session_id: str) -> CartTotals:
        return self.totals_for(self.get_or_create_cart(session_id))

    # -------------------------------------------------------------------
    # Presentation
    # -------------------------------------------------------------------
    def describe(self, cart: Cart) -> dict:
        """Cart payload with product title, slug, first image and variant name per line."""
        priced = {str(line.item.id): line for line in self.priced_lines(cart)}
        items = []
        for item in cart.items:
            line = priced.get(str(item.id))
            items.append(
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "variant_id": str(item.variant_id) if item.variant_id else None,
                    "quantity": item.quantity,
                    "price_at_time": item.price_at_time,
                    "unit_price": line.unit_price if line else None,
                    "line_total": line.line_total if line else None,
                    "product": {
                        "title": line.product.title,
                        "slug": line.product.slug,
                        "image": line.product.primary_image_url(),
                    }
                    if line
                    else None,
                    "variant": {
                        "name": line.variant.name,
                        "attributes": load_json(line.variant.attributes, default={}),
                    }
                    if line and line.variant
                    else None,
                }
            )

        return {
            "id": str(cart.id),
            "session_id": cart.session_id,
            "discount_code": cart.discount_code,
            "discount_amount": cart.discount_amount or 0.0,
            "expires_at": cart.expires_at.isoformat() if cart.expires_at else None,
            "items": items,
        }
