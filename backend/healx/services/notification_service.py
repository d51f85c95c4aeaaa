"""
Notification Service

Outbound supplier purchase orders and admin confirmations for auto-restock.

``OutboxNotificationSender`` renders each message and stores it in the
``notification_outbox`` table in its own session, so a failed write never
touches the caller's transaction. Delivering outbox rows (SMTP or otherwise)
belongs to a separate relay process.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Callable, List, Optional, Protocol
from uuid import uuid4

from sqlalchemy.orm import Session

from healx.config import settings
from healx.database import SessionLocal
from healx.models.notification import NotificationOutbox
from healx.repositories.notification_repository import NotificationRepository
from healx.schemas.restock import NotificationResult, NotificationView

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send_supplier_order(self, item, quantity: int, metadata: dict) -> NotificationResult:
        ...

    def send_admin_confirmation(self, item, quantity: int, result_metadata: dict) -> NotificationResult:
        ...


def generate_order_id(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"PO-{now.strftime('%Y%m%d%H%M%S')}-{uuid4().hex[:6].upper()}"


class OutboxNotificationSender:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        admin_email: Optional[str] = None,
        default_supplier_email: Optional[str] = None,
        from_email: Optional[str] = None,
        hospital_name: Optional[str] = None,
    ):
        self._session_factory = session_factory
        self._admin_email = admin_email if admin_email is not None else settings.ADMIN_EMAIL
        self._default_supplier_email = (
            default_supplier_email if default_supplier_email is not None else settings.DEFAULT_SUPPLIER_EMAIL
        )
        self._from_email = from_email or settings.NOTIFICATION_FROM_EMAIL
        self._hospital_name = hospital_name or settings.HOSPITAL_NAME

    def send_supplier_order(self, item, quantity: int, metadata: dict) -> NotificationResult:
        recipient = item.supplier_email or self._default_supplier_email
        if not recipient:
            logger.warning("supplier_order_no_recipient item_id=%s", item.id)
            return NotificationResult(success=False, error=f"No supplier email configured for '{item.name}'")

        order_id = generate_order_id()
        urgency = metadata.get("urgency", "high")
        subject = f"[{urgency.upper()}] Purchase Order {order_id}: {item.name} x {quantity}"
        body = "\n".join(
            [
                f"Dear {item.supplier_name},",
                "",
                f"{self._hospital_name} requests the following replenishment:",
                f"  Order number:   {order_id}",
                f"  Item:           {item.name} ({item.category})",
                f"  Quantity:       {quantity}",
                f"  Unit price:     {item.unit_price}",
                f"  Estimated cost: {metadata.get('restock_value', '')}",
                f"  Current stock:  {metadata.get('current_stock', item.quantity)}",
                f"  Urgency:        {urgency}",
                "",
                "This order was generated automatically by the inventory auto-restock service.",
            ]
        )
        return self._write(
            kind="supplier_order",
            item_id=item.id,
            order_id=order_id,
            recipient=recipient,
            subject=subject,
            body=body,
            metadata=metadata,
        )

    def send_admin_confirmation(self, item, quantity: int, result_metadata: dict) -> NotificationResult:
        if not self._admin_email:
            return NotificationResult(success=False, error="No admin email configured")

        order_id = result_metadata.get("order_id")
        email_sent = result_metadata.get("email_sent", False)
        subject = f"Auto-restock completed: {item.name} +{quantity}"
        body = "\n".join(
            [
                f"Auto-restock applied for {item.name}.",
                f"  Stock:          {result_metadata.get('current_stock')} -> {result_metadata.get('final_stock')}",
                f"  Restock value:  {result_metadata.get('restock_value')}",
                f"  Supplier order: {order_id or 'not sent'}",
                f"  Supplier email: {'sent' if email_sent else 'FAILED, reconcile manually'}",
            ]
        )
        return self._write(
            kind="admin_confirmation",
            item_id=item.id,
            order_id=order_id,
            recipient=self._admin_email,
            subject=subject,
            body=body,
            metadata=result_metadata,
        )

    def _write(self, *, kind, item_id, order_id, recipient, subject, body, metadata) -> NotificationResult:
        db = self._session_factory()
        try:
            db.add(
                NotificationOutbox(
                    kind=kind,
                    item_id=item_id,
                    order_id=order_id,
                    sender=self._from_email,
                    recipient=recipient,
                    subject=subject,
                    body=body,
                    metadata_json=json.dumps(metadata, default=str),
                )
            )
            db.commit()
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            logger.exception("notification_write_failed kind=%s item_id=%s", kind, item_id)
            return NotificationResult(success=False, recipient=recipient, error=str(exc))
        finally:
            db.close()

        logger.info("notification_queued kind=%s item_id=%s order_id=%s", kind, item_id, order_id)
        return NotificationResult(success=True, order_id=order_id, recipient=recipient)


def list_notifications(
    db: Session,
    kind: Optional[str] = None,
    item_id: Optional[int] = None,
    limit: int = 50,
) -> List[NotificationView]:
    rows = NotificationRepository(db).list_filtered(kind=kind, item_id=item_id, limit=limit)
    return [
        NotificationView(
            id=row.id,
            kind=row.kind,
            item_id=row.item_id,
            order_id=row.order_id,
            recipient=row.recipient,
            subject=row.subject,
            body=row.body,
            metadata=json.loads(row.metadata_json) if row.metadata_json else None,
            created_at=row.created_at,
        )
        for row in rows
    ]
