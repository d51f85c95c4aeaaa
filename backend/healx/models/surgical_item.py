from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    Numeric,
    DateTime,
    Text,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from healx.database import Base


SURGICAL_CATEGORIES = (
    "Cutting Instruments",
    "Grasping Instruments",
    "Hemostatic Instruments",
    "Retractors",
    "Sutures",
    "Disposables",
    "Implants",
    "Monitoring Equipment",
    "Anesthesia Equipment",
    "Sterilization Equipment",
    "Other",
)

STOCK_STATUSES = ("Available", "Low Stock", "Out of Stock", "Discontinued")
RESTOCK_METHODS = ("fixed_quantity", "auto_fill")


class SurgicalItem(Base):
    __tablename__ = "surgical_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_surgical_items_quantity_non_negative"),
        CheckConstraint("min_stock_level >= 0", name="ck_surgical_items_min_stock_non_negative"),
        CheckConstraint("unit_price >= 0", name="ck_surgical_items_unit_price_non_negative"),
        CheckConstraint(
            "status IN ('Available', 'Low Stock', 'Out of Stock', 'Discontinued')",
            name="ck_surgical_items_status",
        ),
        CheckConstraint(
            "auto_restock_method IN ('fixed_quantity', 'auto_fill')",
            name="ck_surgical_items_restock_method",
        ),
        CheckConstraint(
            "auto_restock_max_stock_level >= 0",
            name="ck_surgical_items_max_stock_non_negative",
        ),
        CheckConstraint(
            "auto_restock_reorder_quantity IS NULL OR auto_restock_reorder_quantity >= 0",
            name="ck_surgical_items_reorder_quantity_non_negative",
        ),
        Index("ix_surgical_items_category_status", "category", "status"),
        Index("ix_surgical_items_auto_restock_quantity", "auto_restock_enabled", "quantity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    category = Column(String(50), nullable=False, default="Other")
    description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=10)
    unit_price = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Available")
    is_active = Column(Boolean, nullable=False, default=True)

    supplier_name = Column(String(100), nullable=False)
    supplier_contact = Column(String(100), nullable=True)
    supplier_email = Column(String(255), nullable=True)

    auto_restock_enabled = Column(Boolean, nullable=False, default=False)
    auto_restock_max_stock_level = Column(Integer, nullable=False, default=0)
    auto_restock_reorder_quantity = Column(Integer, nullable=True)
    auto_restock_method = Column(String(20), nullable=False, default="auto_fill")
    last_auto_restock = Column(DateTime, nullable=True)
    auto_restock_count = Column(Integer, nullable=False, default=0)
    last_auto_restock_quantity = Column(Integer, nullable=True)
    last_supplier_order = Column(String(64), nullable=True)
    last_email_sent = Column(Boolean, nullable=True)

    last_restocked = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    restock_history = relationship(
        "RestockHistoryEntry",
        back_populates="item",
        order_by="RestockHistoryEntry.id",
        cascade="all, delete-orphan",
    )
    usage_history = relationship(
        "UsageRecord",
        back_populates="item",
        order_by="UsageRecord.id",
        cascade="all, delete-orphan",
    )

    @property
    def needs_restock(self) -> bool:
        return (self.quantity or 0) <= (self.min_stock_level or 0)
