from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship

from healx.database import Base


class UsageRecord(Base):
    __tablename__ = "surgical_item_usage"
    __table_args__ = (
        CheckConstraint("quantity_used > 0", name="ck_surgical_item_usage_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("surgical_items.id"), nullable=False, index=True)
    date = Column(DateTime, default=func.now(), nullable=False)
    quantity_used = Column(Integer, nullable=False)
    used_by = Column(String(100), nullable=False, default="Unknown")
    purpose = Column(String(255), nullable=False, default="Not specified")

    item = relationship("SurgicalItem", back_populates="usage_history")
