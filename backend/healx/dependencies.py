"""
FastAPI dependencies for the long-lived restock components.

The scheduler (and the service it wraps) is built once at startup and kept on
``app.state``; tests swap it by assigning their own instance there.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from healx.database import get_db
from healx.services.restock_scheduler import RestockScheduler
from healx.services.surgical_item_service import SurgicalItemService


def get_restock_scheduler(request: Request) -> RestockScheduler:
    return request.app.state.restock_scheduler


def get_surgical_item_service(db: Session = Depends(get_db)) -> SurgicalItemService:
    return SurgicalItemService(db)
