"""
Retail Store Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional


class ProductCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=64)
    barcode: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock_quantity: float = Field(0, ge=0)
    low_stock_threshold: Optional[float] = Field(None, ge=0)


class ProductUpdate(BaseModel):
    barcode: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    cost_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[float] = Field(None, ge=0)
    low_stock_threshold: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    id: str
    tenant_id: str
    sku: str
    barcode: Optional[str]
    name: str
    price: float
    cost_price: Optional[float]
    stock_quantity: float
    low_stock_threshold: Optional[float]
    is_active: bool

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int
    page: int
    page_size: int
