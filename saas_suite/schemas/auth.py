"""
Authentication Schemas

Request/response models for authentication endpoints.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class Token(BaseModel):
    """Session token response."""
    access_token: str
    token_type: str = "bearer"
    tenant_id: str
    role: str


class LoginRequest(BaseModel):
    """
    Login request body.

    `tenant` is the tenant's short code (e.g. hotel code "4821") or slug.
    """
    tenant: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)


class PrincipalResponse(BaseModel):
    user_id: str
    tenant_id: Optional[str]
    organization_id: Optional[str]
    role: str
    is_super_admin: bool
    email: Optional[str]

    class Config:
        from_attributes = True
