"""
Auto-Restock Service — restock orchestration (Service Layer)

One cycle: query low-stock auto-restock items, compute each replenishment,
send the supplier order, apply the stock change, confirm to the admin.

Only one cycle runs per service instance at a time. An overlapping call
returns a skipped report immediately instead of waiting.

Note:
- The guard is process-local. Running several API instances against one
  database needs an external lock or a single designated scheduler instance.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from healx.config import settings
from healx.core.exceptions import (
    ConcurrentStockChangeError,
    HealXException,
    NotificationFailure,
    StoreUnavailableError,
)
from healx.database import SessionLocal
from healx.models.surgical_item import SurgicalItem
from healx.repositories.surgical_item_repository import SurgicalItemRepository
from healx.schemas.restock import (
    BatchReport,
    NotificationResult,
    RestockApplication,
    RestockResult,
    RestockRunOptions,
)
from healx.services.notification_service import NotificationSender, OutboxNotificationSender
from healx.services.restock_policy import compute_restock, urgency_for

logger = logging.getLogger(__name__)


class AutoRestockService:

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        notifier: Optional[NotificationSender] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self._session_factory = session_factory
        self._notifier = notifier or OutboxNotificationSender(session_factory=session_factory)
        self._clock = clock
        self._cycle_lock = threading.Lock()

    @property
    def is_processing(self) -> bool:
        return self._cycle_lock.locked()

    def check_and_restock_items(self, options: Optional[RestockRunOptions] = None) -> BatchReport:
        options = options or RestockRunOptions()

        if not self._cycle_lock.acquire(blocking=False):
            logger.info("auto_restock_skipped reason=cycle_in_progress")
            return BatchReport(
                skipped=True,
                message="Auto-restock cycle already in progress; skipped.",
            )

        started_at = self._clock()
        db = self._session_factory()
        try:
            repo = SurgicalItemRepository(db)
            try:
                eligible = repo.find_low_stock_eligible(options.filter_items)
                invalid_price = repo.find_low_stock_invalid_price(options.filter_items)
            except SQLAlchemyError as exc:
                logger.exception("auto_restock_query_failed")
                raise StoreUnavailableError("Inventory store unavailable; auto-restock cycle did not run") from exc

            invalid_price_ids = [item.id for item in invalid_price]
            if invalid_price_ids:
                logger.warning("auto_restock_invalid_price_items item_ids=%s", invalid_price_ids)

            if not eligible:
                logger.info("auto_restock_nothing_to_do")
                return BatchReport(
                    message="All auto-restock items are well-stocked.",
                    invalid_price_item_ids=invalid_price_ids,
                    started_at=started_at,
                    completed_at=self._clock(),
                )

            logger.info("auto_restock_cycle_started eligible=%s", len(eligible))
            # Snapshot identity before the loop; each commit expires loaded rows.
            targets = [(item, item.id, item.name, int(item.quantity or 0)) for item in eligible]

            results: List[RestockResult] = []
            total_value = Decimal("0")
            for item, item_id, item_name, current_stock in targets:
                try:
                    result = self._restock_item(repo, item, options)
                except HealXException as exc:
                    db.rollback()
                    logger.warning("auto_restock_item_failed item_id=%s error=%s", item_id, exc.message)
                    result = self._failed_result(item_id, item_name, current_stock, exc.message)
                except Exception as exc:  # noqa: BLE001
                    db.rollback()
                    logger.exception("auto_restock_item_error item_id=%s", item_id)
                    result = self._failed_result(item_id, item_name, current_stock, str(exc))

                results.append(result)
                if result.success:
                    total_value += result.restock_value

            failed = sum(1 for r in results if not r.success)
            logger.info(
                "auto_restock_cycle_completed processed=%s failed=%s total_value=%s",
                len(results),
                failed,
                total_value,
            )
            message = f"Auto-restock check completed. Processed {len(results)} items."
            if failed:
                message += f" {failed} item(s) need attention."

            return BatchReport(
                items_processed=len(results),
                items_eligible=len(eligible),
                total_restock_value=total_value,
                results=results,
                message=message,
                invalid_price_item_ids=invalid_price_ids,
                started_at=started_at,
                completed_at=self._clock(),
            )
        finally:
            db.close()
            self._cycle_lock.release()

    def _restock_item(
        self,
        repo: SurgicalItemRepository,
        item: SurgicalItem,
        options: RestockRunOptions,
    ) -> RestockResult:
        item_id = item.id
        item_name = item.name
        current_stock = int(item.quantity or 0)
        unit_price = item.unit_price
        restock_method = item.auto_restock_method

        computation = compute_restock(item, respect_manual_quantities=options.respect_manual_quantities)
        urgency = urgency_for(current_stock)

        supplier = self._send(
            "supplier_order",
            self._notifier.send_supplier_order,
            item,
            computation.restock_quantity,
            {
                "order_type": "auto_restock",
                "urgency": urgency,
                "hospital_name": settings.HOSPITAL_NAME,
                "auto_trigger": True,
                "restock_method": restock_method,
                "respect_manual_quantities": options.respect_manual_quantities,
                "preserve_value": options.preserve_value,
                "current_stock": current_stock,
                "min_stock_level": item.min_stock_level,
                "max_stock_level": item.auto_restock_max_stock_level,
                "restock_value": str(computation.restock_value),
            },
        )
        if not supplier.success:
            logger.warning("supplier_order_failed item_id=%s error=%s", item_id, supplier.error)

        try:
            repo.apply_restock(
                item_id,
                RestockApplication(
                    expected_quantity=current_stock,
                    new_quantity=computation.final_stock,
                    restock_quantity=computation.restock_quantity,
                    restock_value=computation.restock_value,
                    unit_price=unit_price,
                    supplier_order_id=supplier.order_id,
                    email_sent=supplier.success,
                    restocked_at=self._clock(),
                ),
            )
        except ConcurrentStockChangeError as exc:
            # The supplier order is already out; the failed result carries its id.
            error = exc.message
            if supplier.success:
                error = f"{exc.message}; supplier order {supplier.order_id} was sent but stock was not updated"
            logger.warning(
                "auto_restock_orphaned_order item_id=%s order_id=%s email_sent=%s",
                item_id,
                supplier.order_id,
                supplier.success,
            )
            return self._failed_result(item_id, item_name, current_stock, error, supplier=supplier)
        logger.info(
            "auto_restock_applied item_id=%s previous=%s new=%s email_sent=%s",
            item_id,
            current_stock,
            computation.final_stock,
            supplier.success,
        )

        admin = self._send(
            "admin_confirmation",
            self._notifier.send_admin_confirmation,
            item,
            computation.restock_quantity,
            {
                "current_stock": current_stock,
                "final_stock": computation.final_stock,
                "restock_value": str(computation.restock_value),
                "order_id": supplier.order_id,
                "email_sent": supplier.success,
                "supplier_error": supplier.error,
            },
        )
        if not admin.success:
            logger.warning("admin_confirmation_failed item_id=%s error=%s", item_id, admin.error)

        return RestockResult(
            item_id=item_id,
            item_name=item_name,
            success=True,
            current_stock=current_stock,
            restock_quantity=computation.restock_quantity,
            restock_value=computation.restock_value,
            final_stock=computation.final_stock,
            final_total_value=computation.final_total_value,
            urgency=urgency,
            restock_method=restock_method,
            email_sent=supplier.success,
            order_id=supplier.order_id,
        )

    def _send(self, kind: str, send, item, quantity: int, metadata: dict) -> NotificationResult:
        try:
            return send(item, quantity, metadata)
        except NotificationFailure as exc:
            logger.warning("notification_failure kind=%s item_id=%s error=%s", kind, item.id, exc.message)
            return NotificationResult(success=False, error=exc.message)
        except Exception as exc:  # noqa: BLE001
            logger.exception("notification_error kind=%s", kind)
            return NotificationResult(success=False, error=str(exc))

    def _failed_result(
        self,
        item_id: int,
        item_name: str,
        current_stock: int,
        error: str,
        supplier: Optional[NotificationResult] = None,
    ) -> RestockResult:
        return RestockResult(
            item_id=item_id,
            item_name=item_name,
            success=False,
            current_stock=current_stock,
            final_stock=current_stock,
            email_sent=supplier.success if supplier is not None else False,
            order_id=supplier.order_id if supplier is not None else None,
            error_message=error,
        )
