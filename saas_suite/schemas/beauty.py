"""
Beauty Salon Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field("general", max_length=50)
    description: Optional[str] = None
    duration: int = Field(60, ge=5, le=600)
    price: float = Field(..., ge=0)


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    duration: Optional[int] = Field(None, ge=5, le=600)
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ServiceResponse(BaseModel):
    id: str
    name: str
    category: str
    description: Optional[str]
    duration: int
    price: float
    is_active: bool

    class Config:
        from_attributes = True
