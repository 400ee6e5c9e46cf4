"""Application tests for order status changes, payment, cancellation and reporting."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.notification.notification import Notification
from storefront.order.service import CheckoutDetails

SESSION = "session_orders"


@pytest.fixture
def place_order(services, make_product):
    product = make_product(base_price=10.0, variants=(("Large", 0.0, 100),))

    def _place(quantity=1, email="ada@example.com"):
        services.carts.add_item(SESSION, product.id, product.variants[0].id, quantity)
        return services.orders.create_order_from_cart(
            SESSION, CheckoutDetails(customer_email=email, payment_method="mock")
        )

    return _place


def _titles():
    return sorted(n.title for n in current_domain.repository_for(Notification)._dao.query.all().items)


class TestStatusChanges:
    def test_paid_notification_only_on_transition(self, services, place_order):
        order = place_order()
        services.orders.update_payment_status(order.id, "paid", "pi_1")
        services.orders.update_payment_status(order.id, "paid")

        assert _titles().count("Order Payment Confirmed") == 1
        assert services.orders.get_order(order.id).payment_intent_id == "pi_1"

    def test_shipped_notification(self, services, place_order):
        order = place_order()
        updated = services.orders.update_fulfillment_status(order.id, "fulfilled")
        assert updated.fulfillment_status == "fulfilled"
        assert "Order Shipped" in _titles()

    def test_invalid_status(self, services, place_order):
        order = place_order()
        with pytest.raises(ValidationError):
            services.orders.update_payment_status(order.id, "lost")

    def test_unknown_order(self, services):
        with pytest.raises(ObjectNotFoundError):
            services.orders.update_payment_status("missing", "paid")


class TestProcessPayment:
    def test_successful_payment(self, services, place_order):
        order = place_order()
        outcome = services.orders.process_payment(order.id)
        assert outcome.success
        assert services.orders.get_order(order.id).payment_intent_id == outcome.transaction_id

    def test_paid_order_is_not_charged_again(self, services, place_order, mock_provider):
        order = place_order()
        first = services.orders.process_payment(order.id)
        second = services.orders.process_payment(order.id)

        assert first.success
        assert second.success is False
        assert second.error == "Order already paid"
        assert [call["method"] for call in mock_provider.calls] == ["process_payment"]
        assert services.orders.get_order(order.id).payment_intent_id == first.transaction_id

    def test_unknown_order_does_not_raise(self, services):
        outcome = services.orders.process_payment("missing")
        assert outcome.to_dict() == {"success": False, "transaction_id": None, "error": "Order not found"}

    def test_provider_failure(self, services, place_order, mock_provider):
        order = place_order()
        mock_provider.configure(should_succeed=False, failure_reason="Card declined")
        outcome = services.orders.process_payment(order.id)
        assert outcome.success is False
        assert outcome.error == "Card declined"
        assert services.orders.get_order(order.id).payment_status == "pending"

    def test_provider_exception_becomes_error(self, services, place_order, mock_provider, monkeypatch):
        order = place_order()

        def explode(*args, **kwargs):
            raise RuntimeError("gateway unreachable")

        monkeypatch.setattr(mock_provider, "process_payment", explode)
        outcome = services.orders.process_payment(order.id)
        assert outcome.success is False
        assert outcome.error == "gateway unreachable"


class TestAuditTrail:
    def test_payment_changes_are_recorded(self, services, place_order):
        order = place_order()
        services.orders.update_payment_status(order.id, "paid", "pi_1")

        entries = services.orders.get_audit_trail(order.id)
        assert len(entries) == 1

        payload = entries[0].to_payload()
        assert payload["entity_type"] == "Order"
        assert payload["entity_id"] == str(order.id)
        assert payload["action"] == "payment_update"
        assert payload["changes"] == {"payment_status": {"from": "pending", "to": "paid"}}
        assert payload["metadata"] == {"order_number": order.order_number, "payment_intent_id": "pi_1"}

    def test_fulfillment_changes_are_recorded_in_order(self, services, place_order):
        order = place_order()
        services.orders.update_fulfillment_status(order.id, "fulfilled")
        services.orders.update_fulfillment_status(order.id, "cancelled")

        entries = services.orders.get_audit_trail(order.id)
        assert [e.action for e in entries] == ["status_update", "status_update"]
        assert [e.to_payload()["changes"]["fulfillment_status"] for e in entries] == [
            {"from": "unfulfilled", "to": "fulfilled"},
            {"from": "fulfilled", "to": "cancelled"},
        ]

    def test_rejected_status_is_not_recorded(self, services, place_order):
        order = place_order()
        with pytest.raises(ValidationError):
            services.orders.update_payment_status(order.id, "bogus")
        assert services.orders.get_audit_trail(order.id) == []

    def test_trail_survives_cancellation(self, services, place_order):
        order = place_order()
        services.orders.update_payment_status(order.id, "failed")
        services.orders.cancel_order(order.id)
        assert len(services.orders.get_audit_trail(order.id)) == 1

    def test_unknown_order(self, services):
        with pytest.raises(ObjectNotFoundError):
            services.orders.get_audit_trail("missing")


class TestCancellation:
    def test_cancelled_order_is_hidden(self, services, place_order):
        order = place_order()
        cancelled = services.orders.cancel_order(order.id)
        assert cancelled.deleted_at is not None

        with pytest.raises(ObjectNotFoundError):
            services.orders.get_order(order.id)
        assert services.orders.get_order(order.id, include_deleted=True).is_deleted
        assert services.orders.list_orders()[1] == 0
        assert services.orders.list_orders({"include_deleted": True})[1] == 1


class TestQueries:
    def test_lookup_by_number(self, services, place_order):
        order = place_order()
        assert services.orders.get_order_by_number(order.order_number).id == order.id
        with pytest.raises(ObjectNotFoundError):
            services.orders.get_order_by_number("ORD-99999999")

    def test_orders_by_customer(self, services, place_order):
        place_order(email="ada@example.com")
        place_order(email="grace@example.com")
        orders = services.orders.get_orders_by_customer("grace@example.com")
        assert [o.customer_email for o in orders] == ["grace@example.com"]

    def test_list_filters_and_pagination(self, services, place_order):
        first = place_order()
        place_order()
        place_order()
        services.orders.update_payment_status(first.id, "paid")

        paid, total = services.orders.list_orders({"payment_status": "paid"})
        assert total == 1
        assert paid[0].id == first.id

        page, total = services.orders.list_orders(page=2, per_page=2)
        assert total == 3
        assert len(page) == 1

    def test_statistics(self, services, place_order):
        first = place_order(quantity=2)
        second = place_order(quantity=1)
        third = place_order(quantity=1)
        services.orders.update_payment_status(first.id, "paid")
        services.orders.update_payment_status(second.id, "failed")
        services.orders.cancel_order(third.id)

        stats = services.orders.get_statistics()
        assert stats == {"total_orders": 2, "total_revenue": 24.0, "pending_orders": 0, "paid_orders": 1}

    def test_statistics_date_window(self, services, place_order):
        place_order()
        future = datetime.now(UTC) + timedelta(days=1)
        assert services.orders.get_statistics(date_from=future)["total_orders"] == 0
        assert services.orders.get_statistics(date_to=future)["total_orders"] == 1
