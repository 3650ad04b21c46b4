"""
Super-Admin Schemas

Organizations are tenants as seen from the platform console.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from saas_suite.models.tenant import Vertical


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=2, max_length=100, pattern="^[a-z0-9][a-z0-9-]*$")
    vertical: Vertical
    plan: str = Field("starter", pattern="^(starter|professional|enterprise)$")
    owner_email: EmailStr
    owner_password: str = Field(..., min_length=8, max_length=100)
    owner_name: Optional[str] = None


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    plan: Optional[str] = Field(None, pattern="^(starter|professional|enterprise)$")
    is_active: Optional[bool] = None


class OrganizationResponse(BaseModel):
    id: str
    name: str
    slug: str
    code: str
    vertical: Vertical
    plan: str
    is_active: bool
    contact_email: Optional[str]
    user_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class OrganizationListResponse(BaseModel):
    organizations: list[OrganizationResponse]
    total: int
    page: int
    page_size: int
