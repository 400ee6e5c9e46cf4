"""Notification aggregate: an admin-facing audit entry for a domain occurrence."""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.fields import Boolean, DateTime, String, Text

from storefront.domain import storefront
from storefront.shared.serialization import dump_json, load_json

DEFAULT_TTL_DAYS = 90


class NotificationType(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    ORDER = "order"
    SYSTEM = "system"


@storefront.aggregate
class Notification:
    notification_type: String(choices=NotificationType, default=NotificationType.INFO.value)
    title: String(required=True, max_length=255)
    message: Text(required=True)
    context: Text()  # JSON object, exposed as "metadata"
    is_read: Boolean(default=False)
    read_at: DateTime()
    created_at: DateTime()
    expires_at: DateTime()

    @classmethod
    def create(cls, notification_type, title, message, metadata=None, ttl_days=DEFAULT_TTL_DAYS):
        now = datetime.now(UTC)
        return cls(
            notification_type=getattr(notification_type, "value", notification_type),
            title=title,
            message=message,
            context=dump_json(metadata),
            is_read=False,
            created_at=now,
            expires_at=now + timedelta(days=ttl_days),
        )

    def is_expired(self, now=None) -> bool:
        return self.expires_at is not None and (now or datetime.now(UTC)) >= self.expires_at

    def mark_read(self):
        if self.is_read:
            return
        self.is_read = True
        self.read_at = datetime.now(UTC)

    def to_payload(self):
        return {
            "id": str(self.id),
            "type": self.notification_type,
            "title": self.title,
            "message": self.message,
            "metadata": load_json(self.context, default={}),
            "is_read": self.is_read,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
