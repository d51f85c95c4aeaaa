"""
Surgical Items Router — Thin Controller (SRP / DIP)
"""
from typing import Optional

from fastapi import APIRouter, Depends

from healx.dependencies import get_surgical_item_service
from healx.schemas.surgical_item import (
    StockUpdateRequest,
    StockUpdateResponse,
    SurgicalItemCreate,
    SurgicalItemListResponse,
    SurgicalItemResponse,
)
from healx.services.surgical_item_service import SurgicalItemService

router = APIRouter(prefix="/surgical-items", tags=["Surgical Items"])


@router.get("", response_model=SurgicalItemListResponse)
def list_surgical_items(
    category: Optional[str] = None,
    status: Optional[str] = None,
    low_stock: Optional[bool] = None,
    service: SurgicalItemService = Depends(get_surgical_item_service),
):
    return service.list_items(category=category, status=status, low_stock=low_stock)


@router.post("", response_model=SurgicalItemResponse, status_code=201)
def create_surgical_item(
    payload: SurgicalItemCreate,
    service: SurgicalItemService = Depends(get_surgical_item_service),
):
    return service.create_item(payload)


@router.get("/{item_id}", response_model=SurgicalItemResponse)
def get_surgical_item(
    item_id: int,
    service: SurgicalItemService = Depends(get_surgical_item_service),
):
    return service.get_item_view(item_id)


@router.post("/{item_id}/update-stock", response_model=StockUpdateResponse)
def update_stock(
    item_id: int,
    payload: StockUpdateRequest,
    service: SurgicalItemService = Depends(get_surgical_item_service),
):
    return service.update_stock(item_id, payload)
