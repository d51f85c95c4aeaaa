from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal


class RestockRunOptions(BaseModel):
    filter_items: Optional[List[int]] = None
    respect_manual_quantities: bool = True
    # Reserved for cost-basis accounting; only echoed into notification metadata.
    preserve_value: bool = False


class RestockComputation(BaseModel):
    restock_quantity: int
    restock_value: Decimal
    final_stock: int
    final_total_value: Decimal


class RestockApplication(BaseModel):
    """Everything the store needs to apply one restock in a single write."""

    expected_quantity: int
    new_quantity: int
    restock_quantity: int
    restock_value: Decimal
    unit_price: Decimal
    supplier_order_id: Optional[str] = None
    email_sent: bool = False
    restocked_at: datetime


class RestockResult(BaseModel):
    item_id: int
    item_name: str
    success: bool
    current_stock: int
    restock_quantity: int = 0
    restock_value: Decimal = Decimal("0")
    final_stock: int
    final_total_value: Decimal = Decimal("0")
    urgency: Optional[str] = None
    restock_method: Optional[str] = None
    email_sent: bool = False
    order_id: Optional[str] = None
    error_message: Optional[str] = None


class BatchReport(BaseModel):
    items_processed: int = 0
    items_eligible: int = 0
    total_restock_value: Decimal = Decimal("0")
    results: List[RestockResult] = []
    message: str = ""
    skipped: bool = False
    invalid_price_item_ids: List[int] = []
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)


class RestockTriggerResponse(BaseModel):
    success: bool
    message: str
    data: BatchReport


class NotificationResult(BaseModel):
    success: bool
    order_id: Optional[str] = None
    recipient: Optional[str] = None
    error: Optional[str] = None


class SchedulerStatus(BaseModel):
    is_running: bool
    schedule_period: str
    interval_seconds: int
    next_run_estimate: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    last_run_items_processed: Optional[int] = None
    last_error: Optional[str] = None


class AutoRestockConfigureRequest(BaseModel):
    enabled: bool
    max_stock_level: int = Field(..., ge=0)
    reorder_quantity: Optional[int] = Field(None, ge=0)
    restock_method: str = Field("auto_fill", pattern="^(fixed_quantity|auto_fill)$")
    supplier_email: Optional[str] = Field(None, pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

    @model_validator(mode="after")
    def validate_manual_quantity(self):
        if self.restock_method == "fixed_quantity" and not self.reorder_quantity:
            raise ValueError("reorder_quantity must be greater than 0 for fixed_quantity restocking.")
        return self


class AutoRestockItemStatus(BaseModel):
    id: int
    name: str
    current_stock: int
    min_stock: int
    max_stock: int
    unit_price: Decimal
    needs_restock: bool
    eligible: bool
    last_auto_restock: Optional[datetime] = None
    restock_count: int = 0


class AutoRestockStatusSummary(BaseModel):
    total_auto_restock_items: int
    items_needing_restock: int
    items: List[AutoRestockItemStatus]


class RestockHistoryView(BaseModel):
    id: int
    item_id: int
    amount: int
    value: Decimal
    date: datetime
    previous_stock: int
    new_stock: int
    unit_price: Decimal
    supplier_order_id: Optional[str] = None
    email_sent: bool
    source: str

    class Config:
        from_attributes = True


class NotificationView(BaseModel):
    id: int
    kind: str
    item_id: Optional[int] = None
    order_id: Optional[str] = None
    recipient: str
    subject: str
    body: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
