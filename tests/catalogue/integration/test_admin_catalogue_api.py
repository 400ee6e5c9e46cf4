"""Integration tests for the admin catalogue endpoints and the public catalogue."""

from protean import current_domain
from storefront.catalogue.product import Product


def _create_product(client, slug="linen-tote", **overrides):
    payload = {"slug": slug, "title": "Linen Tote", "base_price": 20.0, "status": "published"}
    payload.update(overrides)
    response = client.post("/api/admin/shop/products", json=payload)
    assert response.status_code == 201
    return response.json()


class TestAdminProducts:
    def test_create_product(self, client):
        product = _create_product(client)
        assert product["slug"] == "linen-tote"
        assert product["variants"] == []

        stored = current_domain.repository_for(Product).get(product["id"])
        assert stored.title == "Linen Tote"

    def test_create_duplicate_slug(self, client):
        _create_product(client)
        response = client.post(
            "/api/admin/shop/products", json={"slug": "linen-tote", "title": "Again", "base_price": 5.0}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Product with slug 'linen-tote' already exists"

    def test_create_requires_title(self, client):
        response = client.post("/api/admin/shop/products", json={"slug": "x", "base_price": 5.0})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_update_product(self, client):
        product = _create_product(client)
        response = client.patch(f"/api/admin/shop/products/{product['id']}", json={"base_price": 30.0})
        assert response.status_code == 200
        assert response.json()["base_price"] == 30.0

    def test_delete_and_restore(self, client):
        product = _create_product(client)

        response = client.delete(f"/api/admin/shop/products/{product['id']}")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

        assert client.get(f"/api/admin/shop/products/{product['id']}").status_code == 404
        hidden = client.get(f"/api/admin/shop/products/{product['id']}", params={"include_deleted": True})
        assert hidden.status_code == 200
        assert hidden.json()["deleted_at"] is not None

        listing = client.get("/api/admin/shop/products").json()
        assert listing["total"] == 0
        listing = client.get("/api/admin/shop/products", params={"include_deleted": True}).json()
        assert listing["total"] == 1

        restored = client.post(f"/api/admin/shop/products/{product['id']}/restore")
        assert restored.status_code == 200
        assert restored.json()["deleted_at"] is None

    def test_unknown_product(self, client):
        response = client.get("/api/admin/shop/products/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Product not found"}


class TestAdminVariantsAndImages:
    def test_variant_lifecycle(self, client):
        product = _create_product(client)
        base = f"/api/admin/shop/products/{product['id']}/variants"

        response = client.post(base, json={"name": "Large", "attributes": {"size": "L"}, "stock": 4})
        assert response.status_code == 201
        variant_id = response.json()["id"]

        response = client.patch(f"{base}/{variant_id}", json={"price_adjustment": 2.5})
        variant = response.json()["variants"][0]
        assert variant["price"] == 22.5
        assert variant["attributes"] == {"size": "L"}

        assert client.delete(f"{base}/{variant_id}").status_code == 200
        assert client.get(f"/api/admin/shop/products/{product['id']}").json()["variants"] == []

    def test_image_lifecycle(self, client):
        product = _create_product(client)
        base = f"/api/admin/shop/products/{product['id']}/images"

        image_id = client.post(base, json={"url": "https://cdn.example.com/a.jpg"}).json()["id"]
        response = client.patch(f"{base}/{image_id}", json={"alt_text": "Front"})
        assert response.json()["images"][0]["alt_text"] == "Front"

        assert client.delete(f"{base}/{image_id}").status_code == 200
        assert client.get(f"/api/admin/shop/products/{product['id']}").json()["images"] == []

    def test_inventory_adjust(self, client):
        product = _create_product(client)
        variant_id = client.post(
            f"/api/admin/shop/products/{product['id']}/variants", json={"name": "Large", "stock": 2}
        ).json()["id"]

        response = client.post(
            "/api/admin/shop/inventory/adjust",
            json={
                "adjustments": [
                    {"product_id": product["id"], "variant_id": variant_id, "quantity": 5},
                    {"product_id": product["id"], "variant_id": variant_id, "quantity": -1},
                ]
            },
        )
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "variants_adjusted": 1}

        stored = current_domain.repository_for(Product).get(product["id"])
        assert stored.variant(variant_id).stock == 6

    def test_inventory_adjust_below_zero(self, client):
        product = _create_product(client)
        variant_id = client.post(
            f"/api/admin/shop/products/{product['id']}/variants", json={"name": "Large", "stock": 1}
        ).json()["id"]

        response = client.post(
            "/api/admin/shop/inventory/adjust",
            json={"adjustments": [{"product_id": product["id"], "variant_id": variant_id, "quantity": -2}]},
        )
        assert response.status_code == 400


class TestAdminCategories:
    def test_category_crud(self, client):
        response = client.post("/api/admin/categories", json={"name": "Bags", "slug": "bags"})
        assert response.status_code == 201
        category_id = response.json()["id"]

        response = client.patch(f"/api/admin/categories/{category_id}", json={"description": "Totes"})
        assert response.json()["description"] == "Totes"

        assert client.delete(f"/api/admin/categories/{category_id}").status_code == 200
        assert client.get(f"/api/admin/categories/{category_id}").status_code == 404
        assert client.get("/api/admin/categories").json()["total"] == 0

        restored = client.post(f"/api/admin/categories/{category_id}/restore")
        assert restored.status_code == 200
        assert client.get("/api/shop/categories").json()["total"] == 1


class TestShopCatalogue:
    def test_only_published_products_listed(self, client):
        _create_product(client, slug="visible")
        _create_product(client, slug="draft-only", status="draft")

        listing = client.get("/api/shop/products").json()
        assert [p["slug"] for p in listing["products"]] == ["visible"]
        assert listing["total"] == 1

        assert client.get("/api/shop/products/visible").status_code == 200
        assert client.get("/api/shop/products/draft-only").status_code == 404

    def test_filters(self, client):
        category = client.post("/api/admin/categories", json={"name": "Bags", "slug": "bags"}).json()
        _create_product(client, slug="cheap-tote", title="Cheap Tote", base_price=5.0, category_id=category["id"])
        _create_product(client, slug="fancy-print", title="Fancy Print", base_price=50.0)

        by_category = client.get("/api/shop/products", params={"category": "bags"}).json()
        assert [p["slug"] for p in by_category["products"]] == ["cheap-tote"]

        by_search = client.get("/api/shop/products", params={"search": "print"}).json()
        assert [p["slug"] for p in by_search["products"]] == ["fancy-print"]

        by_price = client.get("/api/shop/products", params={"min_price": 10, "max_price": 60}).json()
        assert [p["slug"] for p in by_price["products"]] == ["fancy-print"]

    def test_deleted_products_hidden(self, client):
        product = _create_product(client)
        client.delete(f"/api/admin/shop/products/{product['id']}")
        assert client.get("/api/shop/products/linen-tote").status_code == 404
        assert client.get("/api/shop/products").json()["total"] == 0
