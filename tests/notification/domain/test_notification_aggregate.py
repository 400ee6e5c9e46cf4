"""Tests for the Notification aggregate."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from storefront.notification.notification import Notification, NotificationType


class TestNotification:
    def test_create(self):
        notification = Notification.create(NotificationType.ORDER, "New Order Received", "Order ORD-1 placed.")
        assert notification.notification_type == "order"
        assert notification.is_read is False
        assert notification.expires_at - notification.created_at == timedelta(days=90)

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            Notification.create("urgent", "Title", "Message")

    def test_mark_read_is_idempotent(self):
        notification = Notification.create("info", "Title", "Message")
        notification.mark_read()
        first_read_at = notification.read_at
        notification.mark_read()
        assert notification.is_read
        assert notification.read_at == first_read_at

    def test_expiry(self):
        notification = Notification.create("info", "Title", "Message", ttl_days=1)
        assert not notification.is_expired()
        assert notification.is_expired(now=datetime.now(UTC) + timedelta(days=2))

    def test_payload_exposes_type_and_metadata(self):
        notification = Notification.create("order", "Title", "Message", metadata={"order_id": "o-1"})
        payload = notification.to_payload()
        assert payload["type"] == "order"
        assert payload["metadata"] == {"order_id": "o-1"}
        assert payload["read_at"] is None
