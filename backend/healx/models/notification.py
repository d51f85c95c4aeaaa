from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
    CheckConstraint,
    Index,
    func,
)
from healx.database import Base


class NotificationOutbox(Base):
    __tablename__ = "notification_outbox"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('supplier_order', 'admin_confirmation')",
            name="ck_notification_outbox_kind",
        ),
        Index("ix_notification_outbox_kind_created_at", "kind", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(30), nullable=False)
    item_id = Column(Integer, ForeignKey("surgical_items.id"), nullable=True, index=True)
    order_id = Column(String(64), nullable=True, index=True)
    sender = Column(String(255), nullable=False)
    recipient = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    metadata_json = Column(Text, nullable=True)
    delivered = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
