"""
Surgical Item Repository — inventory record store used by the auto-restock core.
"""
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from healx.core.exceptions import BusinessRuleViolation, ConcurrentStockChangeError, EntityNotFoundException
from healx.models.surgical_item import SurgicalItem
from healx.models.restock_history import RestockHistoryEntry
from healx.models.usage_record import UsageRecord
from healx.repositories.base import BaseRepository
from healx.schemas.restock import RestockApplication


def derive_stock_status(quantity: int, min_stock_level: int) -> str:
    if quantity == 0:
        return "Out of Stock"
    if quantity <= min_stock_level:
        return "Low Stock"
    return "Available"


class SurgicalItemRepository(BaseRepository[SurgicalItem]):

    def __init__(self, db: Session):
        super().__init__(SurgicalItem, db)

    def list_filtered(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        low_stock: Optional[bool] = None,
        include_inactive: bool = False,
    ) -> List[SurgicalItem]:
        q = self.db.query(SurgicalItem)
        if not include_inactive:
            q = q.filter(SurgicalItem.is_active.is_(True))
        if category:
            q = q.filter(SurgicalItem.category == category)
        if status:
            q = q.filter(SurgicalItem.status == status)
        if low_stock is True:
            q = q.filter(SurgicalItem.quantity <= SurgicalItem.min_stock_level)
        elif low_stock is False:
            q = q.filter(SurgicalItem.quantity > SurgicalItem.min_stock_level)
        return q.order_by(SurgicalItem.name).all()

    def list_auto_restock_enabled(self) -> List[SurgicalItem]:
        return (
            self.db.query(SurgicalItem)
            .filter(SurgicalItem.auto_restock_enabled.is_(True), SurgicalItem.is_active.is_(True))
            .order_by(SurgicalItem.name)
            .all()
        )

    def _low_stock_auto_restock_query(self, filter_ids: Optional[Sequence[int]]):
        q = self.db.query(SurgicalItem).filter(
            SurgicalItem.auto_restock_enabled.is_(True),
            SurgicalItem.is_active.is_(True),
            SurgicalItem.quantity <= SurgicalItem.min_stock_level,
        )
        if filter_ids is not None:
            q = q.filter(SurgicalItem.id.in_(list(filter_ids)))
        return q

    def find_low_stock_eligible(self, filter_ids: Optional[Sequence[int]] = None) -> List[SurgicalItem]:
        """Auto-restock items at or below their minimum with a positive unit price."""
        return (
            self._low_stock_auto_restock_query(filter_ids)
            .filter(SurgicalItem.unit_price > 0)
            .order_by(SurgicalItem.quantity, SurgicalItem.id)
            .all()
        )

    def find_low_stock_invalid_price(self, filter_ids: Optional[Sequence[int]] = None) -> List[SurgicalItem]:
        return (
            self._low_stock_auto_restock_query(filter_ids)
            .filter(SurgicalItem.unit_price <= 0)
            .order_by(SurgicalItem.id)
            .all()
        )

    def apply_restock(self, item_id: int, application: RestockApplication) -> SurgicalItem:
        """
        Apply a restock as one conditional UPDATE plus one history INSERT.

        The UPDATE only matches while the row still holds ``expected_quantity``;
        a usage recorded in between makes it match nothing and the whole
        transaction is rolled back.
        """
        item = self.get_by_id(item_id)
        if item is None:
            raise EntityNotFoundException("SurgicalItem", item_id)
        min_stock_level = item.min_stock_level or 0

        matched = (
            self.db.query(SurgicalItem)
            .filter(
                SurgicalItem.id == item_id,
                SurgicalItem.quantity == application.expected_quantity,
            )
            .update(
                {
                    SurgicalItem.quantity: application.new_quantity,
                    SurgicalItem.status: derive_stock_status(application.new_quantity, min_stock_level),
                    SurgicalItem.last_restocked: application.restocked_at,
                    SurgicalItem.last_auto_restock: application.restocked_at,
                    SurgicalItem.auto_restock_count: SurgicalItem.auto_restock_count + 1,
                    SurgicalItem.last_auto_restock_quantity: application.restock_quantity,
                    SurgicalItem.last_supplier_order: application.supplier_order_id,
                    SurgicalItem.last_email_sent: application.email_sent,
                },
                synchronize_session=False,
            )
        )
        if matched == 0:
            self.db.rollback()
            raise ConcurrentStockChangeError(
                f"Stock for item {item_id} changed during restock; expected {application.expected_quantity}",
                {"item_id": item_id, "expected_quantity": application.expected_quantity},
            )

        self.db.add(
            RestockHistoryEntry(
                item_id=item_id,
                amount=application.restock_quantity,
                value=application.restock_value,
                date=application.restocked_at,
                previous_stock=application.expected_quantity,
                new_stock=application.new_quantity,
                unit_price=application.unit_price,
                supplier_order_id=application.supplier_order_id,
                email_sent=application.email_sent,
                source="auto_restock",
            )
        )
        self.db.commit()
        self.db.refresh(item)
        return item

    def adjust_stock(
        self,
        item: SurgicalItem,
        delta: int,
        usage: Optional[Tuple[str, str]] = None,
        restocked_at: Optional[datetime] = None,
    ) -> SurgicalItem:
        """
        Manual stock change applied relative to the stored quantity.

        ``usage`` is ``(used_by, purpose)`` for consumption. The UPDATE only
        matches while the stored quantity can absorb ``delta``; otherwise the
        transaction is rolled back and ``BusinessRuleViolation`` is raised.
        """
        item_id = item.id
        values = {SurgicalItem.quantity: SurgicalItem.quantity + delta}
        if restocked_at is not None:
            values[SurgicalItem.last_restocked] = restocked_at

        matched = (
            self.db.query(SurgicalItem)
            .filter(SurgicalItem.id == item_id, SurgicalItem.quantity + delta >= 0)
            .update(values, synchronize_session=False)
        )
        if matched == 0:
            self.db.rollback()
            current = self.get_by_id(item_id)
            raise BusinessRuleViolation(
                "Insufficient stock for this usage",
                {
                    "item_id": item_id,
                    "available": current.quantity if current is not None else None,
                    "requested": -delta,
                },
            )

        # The row stays locked by this transaction until commit.
        self.db.refresh(item)
        item.status = derive_stock_status(item.quantity, item.min_stock_level or 0)
        if usage is not None:
            used_by, purpose = usage
            self.db.add(UsageRecord(item_id=item_id, quantity_used=-delta, used_by=used_by, purpose=purpose))
        self.db.commit()
        self.db.refresh(item)
        return item

    def list_restock_history(self, item_id: int, limit: int = 50) -> List[RestockHistoryEntry]:
        return (
            self.db.query(RestockHistoryEntry)
            .filter(RestockHistoryEntry.item_id == item_id)
            .order_by(RestockHistoryEntry.id.desc())
            .limit(limit)
            .all()
        )
