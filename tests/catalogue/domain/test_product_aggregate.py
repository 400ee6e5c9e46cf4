"""Tests for the Product aggregate root and its Variant/Image entities."""

import json

import pytest
from protean.exceptions import ValidationError
from protean.utils.reflection import declared_fields
from storefront.catalogue.events import ProductCreated, ProductDeleted, ProductRestored, StockAdjusted
from storefront.catalogue.product import Image, Product, ProductStatus, Variant


def _make_product(**overrides):
    defaults = {
        "slug": "linen-tote",
        "title": "Linen Tote",
        "base_price": 20.0,
        "sku": "TOTE",
    }
    defaults.update(overrides)
    return Product.create(**defaults)


class TestProductConstruction:
    def test_element_type(self):
        from protean.utils import DomainObjects

        assert Product.element_type == DomainObjects.AGGREGATE
        assert Variant.element_type == DomainObjects.ENTITY
        assert Image.element_type == DomainObjects.ENTITY

    def test_declared_fields(self):
        fields = declared_fields(Product)
        for name in ("slug", "title", "base_price", "currency", "status", "category_id", "variants", "deleted_at"):
            assert name in fields

    def test_create_defaults(self):
        product = _make_product()
        assert product.status == ProductStatus.DRAFT.value
        assert product.currency == "EUR"
        assert product.created_at is not None
        assert product.deleted_at is None
        assert product.is_published is False

    def test_create_raises_event(self):
        product = _make_product()
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductCreated)
        assert event.slug == "linen-tote"
        assert event.base_price == 20.0

    def test_slug_must_be_url_safe(self):
        with pytest.raises(ValidationError) as exc:
            _make_product(slug="Not A Slug")
        assert "slug" in exc.value.messages

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(base_price=-1.0)

    def test_status_must_be_known(self):
        with pytest.raises(ValidationError):
            _make_product(status="hidden")


class TestProductUpdates:
    def test_update_details_ignores_none(self):
        product = _make_product()
        product.update_details(title="Canvas Tote", base_price=None)
        assert product.title == "Canvas Tote"
        assert product.base_price == 20.0

    def test_soft_delete_and_restore(self):
        product = _make_product()
        product._events.clear()

        product.soft_delete()
        assert product.is_deleted
        assert isinstance(product._events[-1], ProductDeleted)

        product.restore()
        assert not product.is_deleted
        assert isinstance(product._events[-1], ProductRestored)

    def test_cannot_delete_twice(self):
        product = _make_product()
        product.soft_delete()
        with pytest.raises(ValidationError):
            product.soft_delete()

    def test_cannot_restore_live_product(self):
        with pytest.raises(ValidationError):
            _make_product().restore()


class TestVariants:
    def test_add_variant_serializes_attributes(self):
        product = _make_product()
        variant = product.add_variant(name="Large", attributes={"size": "L"}, price_adjustment=5.0, stock=3)
        assert json.loads(variant.attributes) == {"size": "L"}
        assert product.variant(variant.id) == variant

    def test_unit_price_adds_adjustment(self):
        product = _make_product(base_price=19.99)
        variant = product.add_variant(name="Large", price_adjustment=5.0)
        assert product.unit_price(variant) == 24.99
        assert product.unit_price() == 19.99

    def test_negative_adjustment_lowers_price(self):
        product = _make_product()
        variant = product.add_variant(name="Small", price_adjustment=-2.5)
        assert product.unit_price(variant) == 17.5

    def test_deleted_variant_hidden_by_default(self):
        product = _make_product()
        variant = product.add_variant(name="Large")
        product.delete_variant(variant.id)

        assert product.variant(variant.id) is None
        assert product.variant(variant.id, include_deleted=True) == variant
        assert product.active_variants() == []

    def test_update_unknown_variant(self):
        with pytest.raises(ValidationError) as exc:
            _make_product().update_variant("missing", name="X")
        assert exc.value.messages == {"variant_id": ["Variant not found"]}

    def test_negative_stock_rejected(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.add_variant(name="Large", stock=-1)


class TestStockAdjustment:
    def test_adjust_stock_raises_event(self):
        product = _make_product()
        variant = product.add_variant(name="Large", stock=4)
        product._events.clear()

        product.adjust_stock(variant.id, -3)

        assert product.variant(variant.id).stock == 1
        event = product._events[-1]
        assert isinstance(event, StockAdjusted)
        assert event.previous_stock == 4
        assert event.new_stock == 1

    def test_adjust_stock_below_zero(self):
        product = _make_product()
        variant = product.add_variant(name="Large", stock=2)
        with pytest.raises(ValidationError) as exc:
            product.adjust_stock(variant.id, -3)
        assert "stock" in exc.value.messages
        assert product.variant(variant.id).stock == 2


class TestImages:
    def test_images_are_positioned_in_order(self):
        product = _make_product()
        first = product.add_image("https://cdn.example.com/a.jpg")
        second = product.add_image("https://cdn.example.com/b.jpg")
        assert first.position == 0
        assert second.position == 1
        assert product.primary_image_url() == "https://cdn.example.com/a.jpg"

    def test_reordering_changes_primary_image(self):
        product = _make_product()
        first = product.add_image("https://cdn.example.com/a.jpg")
        product.add_image("https://cdn.example.com/b.jpg", position=0)
        product.update_image(first.id, position=5)
        assert product.primary_image_url() == "https://cdn.example.com/b.jpg"

    def test_remove_image(self):
        product = _make_product()
        image = product.add_image("https://cdn.example.com/a.jpg")
        product.remove_image(image.id)
        assert product.images == []
        assert product.primary_image_url() is None

    def test_remove_unknown_image(self):
        with pytest.raises(ValidationError):
            _make_product().remove_image("missing")


class TestPayload:
    def test_payload_hides_deleted_variants(self):
        product = _make_product(base_price=10.0)
        kept = product.add_variant(name="Blue", price_adjustment=1.0, attributes={"colour": "blue"})
        gone = product.add_variant(name="Red")
        product.delete_variant(gone.id)

        payload = product.to_payload()
        assert [v["id"] for v in payload["variants"]] == [str(kept.id)]
        assert payload["variants"][0]["price"] == 11.0
        assert payload["variants"][0]["attributes"] == {"colour": "blue"}

        assert len(product.to_payload(include_deleted_variants=True)["variants"]) == 2
