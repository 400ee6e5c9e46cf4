"""Order audit log: an append-only record of payment and fulfillment status changes."""

import uuid
from datetime import UTC, datetime

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderFulfillmentStatusChanged, OrderPaymentStatusChanged
from storefront.order.order import Order
from storefront.shared.serialization import dump_json, load_json


@storefront.projection
class AuditLog:
    entry_id = Identifier(identifier=True, required=True)
    entity_type = String(required=True, max_length=50)
    entity_id = Identifier(required=True)
    action = String(required=True, max_length=50)
    changes = Text()  # JSON: {field: {"from": ..., "to": ...}}
    context = Text()  # JSON, exposed as "metadata"
    created_at = DateTime(required=True)

    def to_payload(self):
        return {
            "id": str(self.entry_id),
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id),
            "action": self.action,
            "changes": load_json(self.changes, {}),
            "metadata": load_json(self.context, {}),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def _record(entity_id, action, field, previous, new, **metadata):
    current_domain.repository_for(AuditLog).add(
        AuditLog(
            entry_id=str(uuid.uuid4()),
            entity_type="Order",
            entity_id=entity_id,
            action=action,
            changes=dump_json({field: {"from": previous, "to": new}}),
            context=dump_json({key: value for key, value in metadata.items() if value is not None}),
            created_at=datetime.now(UTC),
        )
    )


@storefront.projector(projector_for=AuditLog, aggregates=[Order])
class OrderAuditProjector:
    @on(OrderPaymentStatusChanged)
    def on_payment_status_changed(self, event):
        _record(
            event.order_id,
            "payment_update",
            "payment_status",
            event.previous_status,
            event.new_status,
            order_number=event.order_number,
            payment_intent_id=event.payment_intent_id,
        )

    @on(OrderFulfillmentStatusChanged)
    def on_fulfillment_status_changed(self, event):
        _record(
            event.order_id,
            "status_update",
            "fulfillment_status",
            event.previous_status,
            event.new_status,
            order_number=event.order_number,
        )


def audit_trail(order_id) -> list[AuditLog]:
    """Audit entries for an order, oldest first."""
    entries = current_domain.repository_for(AuditLog)._dao.query.filter(entity_id=str(order_id)).all().items
    return sorted(entries, key=lambda entry: entry.created_at)
