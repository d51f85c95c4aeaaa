"""
Auto-Restock Router — Thin Controller (SRP / DIP)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from healx.database import get_db
from healx.dependencies import get_restock_scheduler, get_surgical_item_service
from healx.schemas.restock import (
    AutoRestockConfigureRequest,
    AutoRestockStatusSummary,
    NotificationView,
    RestockHistoryView,
    RestockRunOptions,
    RestockTriggerResponse,
    SchedulerStatus,
)
from healx.schemas.surgical_item import SurgicalItemResponse
from healx.services.notification_service import list_notifications
from healx.services.restock_scheduler import RestockScheduler
from healx.services.surgical_item_service import SurgicalItemService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auto-restock", tags=["Auto-Restock"])


@router.post("/check-and-restock", response_model=RestockTriggerResponse)
def check_and_restock(
    options: Optional[RestockRunOptions] = Body(None),
    scheduler: RestockScheduler = Depends(get_restock_scheduler),
):
    """
    Run an auto-restock cycle now.
    A StoreUnavailableError propagates to the global handler as HTTP 503.
    """
    logger.info("manual_auto_restock_triggered")
    report = scheduler.trigger(options)
    return RestockTriggerResponse(success=True, message=report.message, data=report)


@router.post("/configure/{item_id}", response_model=SurgicalItemResponse)
def configure_auto_restock(
    item_id: int,
    payload: AutoRestockConfigureRequest,
    service: SurgicalItemService = Depends(get_surgical_item_service),
):
    return service.configure_auto_restock(item_id, payload)


@router.get("/status", response_model=AutoRestockStatusSummary)
def auto_restock_status(
    service: SurgicalItemService = Depends(get_surgical_item_service),
):
    return service.get_auto_restock_status()


@router.get("/history/{item_id}", response_model=list[RestockHistoryView])
def restock_history(
    item_id: int,
    limit: int = Query(50, ge=1, le=500),
    service: SurgicalItemService = Depends(get_surgical_item_service),
):
    return service.list_restock_history(item_id, limit=limit)


@router.get("/notifications", response_model=list[NotificationView])
def restock_notifications(
    kind: Optional[str] = Query(None, pattern="^(supplier_order|admin_confirmation)$"),
    item_id: Optional[int] = None,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return list_notifications(db, kind=kind, item_id=item_id, limit=limit)


@router.get("/scheduler/status", response_model=SchedulerStatus)
def scheduler_status(scheduler: RestockScheduler = Depends(get_restock_scheduler)):
    return scheduler.get_status()


@router.post("/scheduler/start", response_model=SchedulerStatus)
def start_scheduler(scheduler: RestockScheduler = Depends(get_restock_scheduler)):
    scheduler.start()
    return scheduler.get_status()


@router.post("/scheduler/stop", response_model=SchedulerStatus)
def stop_scheduler(scheduler: RestockScheduler = Depends(get_restock_scheduler)):
    scheduler.stop()
    return scheduler.get_status()
