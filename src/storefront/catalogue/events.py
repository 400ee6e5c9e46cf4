"""Domain events for the catalogue aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    slug = String(required=True, max_length=255)
    title = String(required=True, max_length=255)
    base_price = Float(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDeleted:
    """A product was tombstoned."""

    __version__ = 1

    product_id = Identifier(required=True)
    deleted_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRestored:
    __version__ = 1

    product_id = Identifier(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """The stock count of a variant changed through an inventory adjustment."""

    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)


@storefront.event(part_of="Category")
class CategoryCreated:
    __version__ = 1

    category_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=120)
    parent_id = Identifier()
