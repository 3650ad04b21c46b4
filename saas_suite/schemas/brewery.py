"""
Brewery Inventory Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import date, datetime

from saas_suite.models.brewery import InventoryCategory, LedgerEntryType


class InventoryItemCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    category: InventoryCategory
    unit: str = Field(..., min_length=1, max_length=20)
    reorder_point: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    cost_per_unit: Optional[float] = Field(None, ge=0)
    # Opening stock; recorded as a PURCHASE ledger entry
    quantity: float = Field(0, ge=0)
    metadata: Optional[Dict[str, Any]] = None


class InventoryItemResponse(BaseModel):
    id: str
    sku: str
    name: str
    category: InventoryCategory
    ingredient_type: Optional[str]
    unit: str
    balance: float
    reorder_point: Optional[float]
    supplier: Optional[str]
    cost_per_unit: Optional[float]
    total_value: Optional[float]
    is_low_stock: bool
    is_critical: bool
    is_out_of_stock: bool
    updated_at: datetime
    metadata: Dict[str, Any] = {}


class InventoryListResponse(BaseModel):
    items: list[InventoryItemResponse]


class PurchaseRequest(BaseModel):
    item_id: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    unit_price: Optional[float] = Field(None, ge=0)
    total_amount: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    purchase_date: Optional[date] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    create_expense: bool = True
    is_paid: bool = False
    payment_method: Optional[str] = None


class PurchaseResponse(BaseModel):
    item_id: str
    item_name: str
    quantity: float
    unit: str
    total_amount: float
    new_balance: float
    expense_id: Optional[str]
    ledger_entry_id: str


class AdjustmentRequest(BaseModel):
    """Signed stock correction. Negative quantities remove stock."""
    quantity: float
    type: LedgerEntryType = LedgerEntryType.ADJUSTMENT
    notes: Optional[str] = None


class MovementResponse(BaseModel):
    id: str
    type: LedgerEntryType
    quantity: float
    notes: Optional[str]
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class MovementListResponse(BaseModel):
    item_id: str
    sku: str
    balance: float
    movements: list[MovementResponse]
