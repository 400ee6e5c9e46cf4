"""Notification service: persistence-only CRUD over Notification records."""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.notification.notification import DEFAULT_TTL_DAYS, Notification, NotificationType
from storefront.shared.pagination import iter_all, paginate

logger = structlog.get_logger(__name__)

ORDER_NOTIFICATIONS = {
    "new": ("New Order Received", "Order {number} has been placed."),
    "paid": ("Order Payment Confirmed", "Payment for order {number} has been confirmed."),
    "shipped": ("Order Shipped", "Order {number} has been shipped."),
}


class NotificationService:
    def __init__(self, ttl_days: int = DEFAULT_TTL_DAYS):
        self.ttl_days = ttl_days

    @property
    def _repo(self):
        return current_domain.repository_for(Notification)

    def create(self, notification_type, title, message, metadata=None) -> Notification:
        notification = Notification.create(
            notification_type=notification_type,
            title=title,
            message=message,
            metadata=metadata,
            ttl_days=self.ttl_days,
        )
        self._repo.add(notification)
        logger.info(
            "notification_created",
            notification_id=str(notification.id),
            notification_type=notification.notification_type,
        )
        return notification

    def create_order_notification(self, order_id, order_number, kind) -> Notification:
        try:
            title, template = ORDER_NOTIFICATIONS[kind]
        except KeyError:
            raise ValidationError({"kind": [f"Unknown order notification kind: {kind}"]}) from None

        return self.create(
            NotificationType.ORDER.value,
            title,
            template.format(number=order_number),
            metadata={"order_id": str(order_id), "order_number": order_number},
        )

    def list_notifications(self, unread_only=False, page=1, per_page=20) -> tuple[list[Notification], int]:
        query = self._repo._dao.query
        if unread_only:
            query = query.filter(is_read=False)
        return paginate(query.order_by("-created_at"), page, per_page)

    def get(self, notification_id) -> Notification:
        try:
            return self._repo.get(notification_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Notification not found") from None

    def mark_as_read(self, notification_id) -> Notification:
        notification = self.get(notification_id)
        notification.mark_read()
        self._repo.add(notification)
        return notification

    def mark_all_as_read(self) -> int:
        repo = self._repo
        unread = list(iter_all(repo._dao.query.filter(is_read=False)))
        for notification in unread:
            notification.mark_read()
            repo.add(notification)
        return len(unread)

    def delete(self, notification_id) -> None:
        notification = self.get(notification_id)
        self._repo._dao.delete(notification)

    def unread_count(self) -> int:
        return self._repo._dao.query.filter(is_read=False).limit(1).all().total

    def purge_expired(self, now=None) -> int:
        """Hard-delete notifications past their expiry."""
        now = now or datetime.now(UTC)
        repo = self._repo
        expired = list(iter_all(repo._dao.query.filter(expires_at__lte=now)))
        for notification in expired:
            repo._dao.delete(notification)
        if expired:
            logger.info("notifications_purged", count=len(expired))
        return len(expired)
