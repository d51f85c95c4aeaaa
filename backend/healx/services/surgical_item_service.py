"""
Surgical Item Service — Service Layer (SRP / DIP)
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from healx.core.exceptions import BusinessRuleViolation, EntityNotFoundException
from healx.models.surgical_item import SurgicalItem
from healx.repositories.surgical_item_repository import SurgicalItemRepository, derive_stock_status
from healx.schemas.surgical_item import (
    AutoRestockPolicyView,
    StockUpdateRequest,
    StockUpdateResponse,
    SurgicalItemCreate,
    SurgicalItemListResponse,
    SurgicalItemResponse,
)
from healx.schemas.restock import (
    AutoRestockConfigureRequest,
    AutoRestockItemStatus,
    AutoRestockStatusSummary,
    RestockHistoryView,
)

logger = logging.getLogger(__name__)


class SurgicalItemService:

    def __init__(self, db: Session):
        self._repo = SurgicalItemRepository(db)

    def create_item(self, data: SurgicalItemCreate) -> SurgicalItemResponse:
        item = self._repo.create(
            SurgicalItem(
                **data.model_dump(),
                status=derive_stock_status(data.quantity, data.min_stock_level),
                last_restocked=datetime.utcnow(),
            )
        )
        logger.info("surgical_item_created item_id=%s name=%s", item.id, item.name)
        return self.to_response(item)

    def get_item(self, item_id: int) -> SurgicalItem:
        item = self._repo.get_by_id(item_id)
        if not item or not item.is_active:
            raise EntityNotFoundException("SurgicalItem", item_id)
        return item

    def get_item_view(self, item_id: int) -> SurgicalItemResponse:
        return self.to_response(self.get_item(item_id))

    def list_items(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        low_stock: Optional[bool] = None,
    ) -> SurgicalItemListResponse:
        items = self._repo.list_filtered(category=category, status=status, low_stock=low_stock)
        return SurgicalItemListResponse(items=[self.to_response(i) for i in items], total=len(items))

    def update_stock(self, item_id: int, payload: StockUpdateRequest) -> StockUpdateResponse:
        item = self.get_item(item_id)
        amount = abs(payload.quantity_change)

        if payload.type == "restock":
            delta = amount
            item = self._repo.adjust_stock(item, delta, restocked_at=datetime.utcnow())
        else:
            delta = -amount
            item = self._repo.adjust_stock(
                item,
                delta,
                usage=(payload.used_by or "Unknown", payload.purpose or "Not specified"),
            )
        previous = item.quantity - delta

        logger.info(
            "stock_updated item_id=%s type=%s previous=%s new=%s",
            item_id, payload.type, previous, item.quantity,
        )
        return StockUpdateResponse(
            item=self.to_response(item),
            previous_quantity=previous,
            new_quantity=item.quantity,
        )

    def configure_auto_restock(self, item_id: int, payload: AutoRestockConfigureRequest) -> SurgicalItemResponse:
        item = self.get_item(item_id)
        min_stock = item.min_stock_level or 0
        if payload.max_stock_level < min_stock:
            raise BusinessRuleViolation(
                f"max_stock_level ({payload.max_stock_level}) must be at least min_stock_level ({min_stock})",
                {"item_id": item_id},
            )

        updates = {
            "auto_restock_enabled": payload.enabled,
            "auto_restock_max_stock_level": payload.max_stock_level,
            "auto_restock_reorder_quantity": payload.reorder_quantity,
            "auto_restock_method": payload.restock_method,
        }
        if payload.supplier_email is not None:
            updates["supplier_email"] = payload.supplier_email

        item = self._repo.update(item, updates)
        logger.info(
            "auto_restock_configured item_id=%s enabled=%s method=%s",
            item_id, payload.enabled, payload.restock_method,
        )
        return self.to_response(item)

    def get_auto_restock_status(self) -> AutoRestockStatusSummary:
        items = self._repo.list_auto_restock_enabled()
        views = [
            AutoRestockItemStatus(
                id=i.id,
                name=i.name,
                current_stock=i.quantity,
                min_stock=i.min_stock_level,
                max_stock=i.auto_restock_max_stock_level,
                unit_price=i.unit_price,
                needs_restock=i.needs_restock,
                eligible=i.needs_restock and i.unit_price > 0,
                last_auto_restock=i.last_auto_restock,
                restock_count=i.auto_restock_count or 0,
            )
            for i in items
        ]
        return AutoRestockStatusSummary(
            total_auto_restock_items=len(views),
            items_needing_restock=sum(1 for v in views if v.needs_restock),
            items=views,
        )

    def list_restock_history(self, item_id: int, limit: int = 50) -> List[RestockHistoryView]:
        self.get_item(item_id)
        return [RestockHistoryView.model_validate(h) for h in self._repo.list_restock_history(item_id, limit=limit)]

    def to_response(self, item: SurgicalItem) -> SurgicalItemResponse:
        return SurgicalItemResponse(
            id=item.id,
            name=item.name,
            category=item.category,
            description=item.description,
            quantity=item.quantity,
            min_stock_level=item.min_stock_level,
            unit_price=item.unit_price,
            status=item.status,
            is_active=item.is_active,
            supplier_name=item.supplier_name,
            supplier_contact=item.supplier_contact,
            supplier_email=item.supplier_email,
            auto_restock=AutoRestockPolicyView(
                enabled=item.auto_restock_enabled,
                max_stock_level=item.auto_restock_max_stock_level,
                reorder_quantity=item.auto_restock_reorder_quantity,
                restock_method=item.auto_restock_method,
                last_auto_restock=item.last_auto_restock,
                auto_restock_count=item.auto_restock_count or 0,
            ),
            last_restocked=item.last_restocked,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
