from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    Numeric,
    DateTime,
    ForeignKey,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from healx.database import Base


class RestockHistoryEntry(Base):
    """Audit row for one applied restock. Rows are insert-only."""

    __tablename__ = "surgical_item_restock_history"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_restock_history_amount_positive"),
        CheckConstraint("new_stock = previous_stock + amount", name="ck_restock_history_stock_balance"),
        Index("ix_restock_history_item_date", "item_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("surgical_items.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    value = Column(Numeric(14, 2), nullable=False)
    date = Column(DateTime, default=func.now(), nullable=False)
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    supplier_order_id = Column(String(64), nullable=True)
    email_sent = Column(Boolean, nullable=False, default=False)
    source = Column(String(20), nullable=False, default="auto_restock")

    item = relationship("SurgicalItem", back_populates="restock_history")
