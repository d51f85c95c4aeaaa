from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


CATEGORY_PATTERN = (
    "^(Cutting Instruments|Grasping Instruments|Hemostatic Instruments|Retractors|Sutures|"
    "Disposables|Implants|Monitoring Equipment|Anesthesia Equipment|Sterilization Equipment|Other)$"
)
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class SurgicalItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field("Other", pattern=CATEGORY_PATTERN)
    description: Optional[str] = Field(None, max_length=500)
    quantity: int = Field(..., ge=0)
    min_stock_level: int = Field(10, ge=0)
    unit_price: Decimal = Field(..., ge=0)
    supplier_name: str = Field(..., min_length=1, max_length=100)
    supplier_contact: Optional[str] = None
    supplier_email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)


class StockUpdateRequest(BaseModel):
    quantity_change: int
    type: str = Field(..., pattern="^(restock|usage)$")
    used_by: Optional[str] = Field(None, max_length=100)
    purpose: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def validate_quantity_change(self):
        if self.quantity_change == 0:
            raise ValueError("quantity_change must not be zero.")
        return self


class AutoRestockPolicyView(BaseModel):
    enabled: bool
    max_stock_level: int
    reorder_quantity: Optional[int] = None
    restock_method: str
    last_auto_restock: Optional[datetime] = None
    auto_restock_count: int = 0


class SurgicalItemResponse(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str] = None
    quantity: int
    min_stock_level: int
    unit_price: Decimal
    status: str
    is_active: bool
    supplier_name: str
    supplier_contact: Optional[str] = None
    supplier_email: Optional[str] = None
    auto_restock: AutoRestockPolicyView
    last_restocked: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StockUpdateResponse(BaseModel):
    item: SurgicalItemResponse
    previous_quantity: int
    new_quantity: int


class SurgicalItemListResponse(BaseModel):
    items: List[SurgicalItemResponse]
    total: int
