"""Integration tests for the admin order and notification endpoints."""

import pytest

SESSION_HEADERS = {"X-Cart-Session": "session_admin"}


@pytest.fixture
def place_order(client, make_product):
    product = make_product(base_price=10.0, variants=(("Large", 0.0, 100),))

    def _place(email="ada@example.com", quantity=1):
        client.post(
            "/api/shop/cart/items",
            json={"product_id": product.id, "variant_id": product.variants[0].id, "quantity": quantity},
            headers=SESSION_HEADERS,
        )
        response = client.post(
            "/api/shop/checkout", json={"email": email, "payment_method": "mock"}, headers=SESSION_HEADERS
        )
        assert response.status_code == 201
        return response.json()

    return _place


class TestAdminOrders:
    def test_list_and_filter(self, client, place_order):
        first = place_order(email="ada@example.com")
        place_order(email="grace@example.com")
        client.post(f"/api/admin/shop/orders/{first['id']}/status", json={"status": "paid"})

        listing = client.get("/api/admin/shop/orders").json()
        assert listing["total"] == 2

        paid = client.get("/api/admin/shop/orders", params={"status": "paid"}).json()
        assert [o["id"] for o in paid["orders"]] == [first["id"]]

        by_email = client.get("/api/admin/shop/orders", params={"customer_email": "grace@example.com"}).json()
        assert by_email["total"] == 1

    def test_lookup_by_number(self, client, place_order):
        order = place_order()
        response = client.get(f"/api/admin/shop/orders/number/{order['order_number']}")
        assert response.json()["id"] == order["id"]
        assert client.get("/api/admin/shop/orders/number/ORD-99999999").status_code == 404

    def test_payment_status(self, client, place_order):
        order = place_order()
        response = client.post(
            f"/api/admin/shop/orders/{order['id']}/status", json={"status": "paid", "payment_intent_id": "pi_9"}
        )
        assert response.status_code == 200
        assert response.json()["payment_status"] == "paid"
        assert response.json()["payment_intent_id"] == "pi_9"

    def test_audit_trail(self, client, place_order):
        order = place_order()
        client.post(f"/api/admin/shop/orders/{order['id']}/status", json={"status": "paid", "payment_intent_id": "pi_9"})
        client.patch(f"/api/admin/shop/orders/{order['id']}/fulfillment", json={"fulfillment_status": "fulfilled"})

        response = client.get(f"/api/admin/shop/orders/{order['id']}/audit")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert [entry["action"] for entry in body["entries"]] == ["payment_update", "status_update"]
        assert body["entries"][0]["metadata"]["payment_intent_id"] == "pi_9"

        assert client.get("/api/admin/shop/orders/missing/audit").status_code == 404

    def test_invalid_payment_status(self, client, place_order):
        order = place_order()
        response = client.post(f"/api/admin/shop/orders/{order['id']}/status", json={"status": "lost"})
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid status 'lost'")

    def test_fulfillment(self, client, place_order):
        order = place_order()
        response = client.patch(
            f"/api/admin/shop/orders/{order['id']}/fulfillment", json={"fulfillment_status": "fulfilled"}
        )
        assert response.json()["fulfillment_status"] == "fulfilled"

    def test_cancel(self, client, place_order):
        order = place_order()
        response = client.delete(f"/api/admin/shop/orders/{order['id']}")
        assert response.status_code == 200
        assert response.json()["deleted_at"] is not None

        assert client.get(f"/api/admin/shop/orders/{order['id']}").status_code == 404
        hidden = client.get(f"/api/admin/shop/orders/{order['id']}", params={"include_deleted": True})
        assert hidden.status_code == 200

    def test_statistics(self, client, place_order):
        first = place_order(quantity=2)
        place_order()
        client.post(f"/api/admin/shop/orders/{first['id']}/status", json={"status": "paid"})

        stats = client.get("/api/admin/shop/orders/statistics").json()
        assert stats == {"total_orders": 2, "total_revenue": 24.0, "pending_orders": 1, "paid_orders": 1}


class TestAdminNotifications:
    def test_notification_flow(self, client, place_order):
        place_order()
        place_order()

        listing = client.get("/api/admin/notifications").json()
        assert listing["total"] == 2
        assert listing["unread_count"] == 2
        assert listing["notifications"][0]["type"] == "order"

        notification_id = listing["notifications"][0]["id"]
        read = client.patch(f"/api/admin/notifications/{notification_id}/read").json()
        assert read["is_read"] is True
        assert client.get("/api/admin/notifications/unread-count").json() == {"count": 1}

        assert client.post("/api/admin/notifications/read-all").json() == {"status": "ok", "updated": 1}

        assert client.delete(f"/api/admin/notifications/{notification_id}").json() == {"status": "ok"}
        assert client.get(f"/api/admin/notifications/{notification_id}").status_code == 404
