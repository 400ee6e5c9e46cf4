"""Product aggregate root with Variant and Image entities."""

import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.shared.money import round_money
from storefront.shared.serialization import dump_json, load_json

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class ProductStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


@storefront.entity(part_of="Product")
class Variant:
    """A purchasable variation of a product (size, colour...) with its own stock."""

    sku: String(max_length=100)
    name: String(required=True, max_length=255)
    attributes: Text()
    price_adjustment: Float(default=0.0)
    stock: Integer(default=0, min_value=0)
    deleted_at: DateTime()

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@storefront.entity(part_of="Product")
class Image:
    url: String(required=True, max_length=500)
    alt_text: String(max_length=255)
    position: Integer(default=0, min_value=0)


@storefront.aggregate
class Product:
    """Product aggregate root.

    Owns price and stock. The effective unit price of a purchase is the
    product's base price plus the chosen variant's price adjustment.
    """

    slug: String(required=True, max_length=255)
    title: String(required=True, max_length=255)
    short_description: Text()
    long_description: Text()
    base_price: Float(required=True, min_value=0.0)
    currency: String(max_length=3, default="EUR")
    sku: String(max_length=100)
    gtin: String(max_length=14)
    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    category_id: Identifier()
    variants: HasMany(Variant)
    images: HasMany(Image)
    created_at: DateTime()
    updated_at: DateTime()
    deleted_at: DateTime()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError({"slug": ["Slug must contain only lowercase alphanumeric characters and hyphens"]})

    @classmethod
    def create(
        cls,
        slug,
        title,
        base_price,
        short_description=None,
        long_description=None,
        currency="EUR",
        sku=None,
        gtin=None,
        status=None,
        category_id=None,
    ):
        from storefront.catalogue.events import ProductCreated

        now = datetime.now(UTC)
        product = cls(
            slug=slug,
            title=title,
            base_price=base_price,
            short_description=short_description,
            long_description=long_description,
            currency=currency or "EUR",
            sku=sku,
            gtin=gtin,
            status=status or ProductStatus.DRAFT.value,
            category_id=category_id,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                slug=slug,
                title=title,
                base_price=base_price,
                created_at=now,
            )
        )
        return product

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_published(self) -> bool:
        return self.status == ProductStatus.PUBLISHED.value

    def update_details(self, **changes):
        """Apply a partial update; keys with a None value are left untouched."""
        editable = (
            "slug",
            "title",
            "short_description",
            "long_description",
            "base_price",
            "currency",
            "sku",
            "gtin",
            "status",
            "category_id",
        )
        for name in editable:
            value = changes.get(name)
            if value is not None:
                setattr(self, name, value)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Soft delete
    # -------------------------------------------------------------------
    def soft_delete(self):
        from storefront.catalogue.events import ProductDeleted

        if self.is_deleted:
            raise ValidationError({"product": ["Product is already deleted"]})

        now = datetime.now(UTC)
        self.deleted_at = now
        self.updated_at = now
        self.raise_(ProductDeleted(product_id=self.id, deleted_at=now))

    def restore(self):
        from storefront.catalogue.events import ProductRestored

        if not self.is_deleted:
            raise ValidationError({"product": ["Product is not deleted"]})

        self.deleted_at = None
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductRestored(product_id=self.id))

    # -------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------
    def variant(self, variant_id, include_deleted=False):
        """Return the variant with the given id, or None."""
        found = next((v for v in self.variants if str(v.id) == str(variant_id)), None)
        if found is not None and found.is_deleted and not include_deleted:
            return None
        return found

    def active_variants(self):
        return [v for v in self.variants if not v.is_deleted]

    def add_variant(self, name, sku=None, attributes=None, price_adjustment=0.0, stock=0):
        variant = Variant(
            name=name,
            sku=sku,
            attributes=dump_json(attributes),
            price_adjustment=price_adjustment or 0.0,
            stock=stock or 0,
        )
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)
        return variant

    def update_variant(self, variant_id, name=None, sku=None, attributes=None, price_adjustment=None, stock=None):
        variant = self._require_variant(variant_id)

        if name is not None:
            variant.name = name
        if sku is not None:
            variant.sku = sku
        if attributes is not None:
            variant.attributes = dump_json(attributes)
        if price_adjustment is not None:
            variant.price_adjustment = price_adjustment
        if stock is not None:
            variant.stock = stock

        self.updated_at = datetime.now(UTC)
        return variant

    def delete_variant(self, variant_id):
        variant = self._require_variant(variant_id)
        variant.deleted_at = datetime.now(UTC)
        self.updated_at = datetime.now(UTC)

    def adjust_stock(self, variant_id, delta):
        from storefront.catalogue.events import StockAdjusted

        variant = self._require_variant(variant_id)
        new_stock = variant.stock + delta
        if new_stock < 0:
            raise ValidationError(
                {"stock": [f"Stock for variant {variant_id} cannot go below zero (current {variant.stock}, adjustment {delta})"]}
            )

        previous = variant.stock
        variant.stock = new_stock
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockAdjusted(
                product_id=self.id,
                variant_id=variant.id,
                previous_stock=previous,
                new_stock=new_stock,
            )
        )

    def _require_variant(self, variant_id):
        variant = self.variant(variant_id)
        if variant is None:
            raise ValidationError({"variant_id": ["Variant not found"]})
        return variant

    # -------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------
    def add_image(self, url, alt_text=None, position=None):
        if position is None:
            position = max((i.position for i in self.images), default=-1) + 1
        image = Image(url=url, alt_text=alt_text, position=position)
        self.add_images(image)
        self.updated_at = datetime.now(UTC)
        return image

    def update_image(self, image_id, alt_text=None, position=None):
        image = next((i for i in self.images if str(i.id) == str(image_id)), None)
        if image is None:
            raise ValidationError({"image_id": ["Image not found"]})
        if alt_text is not None:
            image.alt_text = alt_text
        if position is not None:
            image.position = position
        self.updated_at = datetime.now(UTC)
        return image

    def remove_image(self, image_id):
        image = next((i for i in self.images if str(i.id) == str(image_id)), None)
        if image is None:
            raise ValidationError({"image_id": ["Image not found"]})
        self.remove_images(image)
        self.updated_at = datetime.now(UTC)

    def ordered_images(self):
        return sorted(self.images, key=lambda i: i.position or 0)

    def primary_image_url(self) -> str | None:
        images = self.ordered_images()
        return images[0].url if images else None

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def unit_price(self, variant=None) -> float:
        """Effective price of one unit: base price plus the variant adjustment."""
        adjustment = variant.price_adjustment if variant is not None else 0.0
        return round_money((self.base_price or 0.0) + (adjustment or 0.0))

    def to_payload(self, include_deleted_variants=False):
        variants = self.variants if include_deleted_variants else self.active_variants()
        return {
            "id": str(self.id),
            "slug": self.slug,
            "title": self.title,
            "short_description": self.short_description,
            "long_description": self.long_description,
            "base_price": self.base_price,
            "currency": self.currency,
            "sku": self.sku,
            "gtin": self.gtin,
            "status": self.status,
            "category_id": str(self.category_id) if self.category_id else None,
            "variants": [
                {
                    "id": str(v.id),
                    "sku": v.sku,
                    "name": v.name,
                    "attributes": load_json(v.attributes, default={}),
                    "price_adjustment": v.price_adjustment,
                    "price": self.unit_price(v),
                    "stock": v.stock,
                    "deleted_at": v.deleted_at.isoformat() if v.deleted_at else None,
                }
                for v in variants
            ],
            "images": [
                {"id": str(i.id), "url": i.url, "alt_text": i.alt_text, "position": i.position}
                for i in self.ordered_images()
            ],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }
