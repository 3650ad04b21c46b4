"""
Custom Exceptions

Centralized exception definitions for better error handling.
FastAPI converts these to HTTP responses; main.py adds the
`type` and `correlation_id` fields to every error body.
"""
from typing import Optional

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Raised when no valid session is present."""

    error_type = "authentication_error"

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDenied(HTTPException):
    """Raised when the principal's role lacks a permission."""

    error_type = "permission_denied"

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class TenantIsolationError(HTTPException):
    """
    Raised when code tries to move a row across the tenant boundary.

    The scoping repository never raises this for reads; mismatched rows
    there simply look like missing rows.
    """

    error_type = "tenant_isolation_error"

    def __init__(self, detail: str = "Tenant isolation violation"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """Raised when a row does not exist for the current tenant."""

    error_type = "not_found"

    def __init__(self, entity: str = "Resource", identifier: str = ""):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} not found: {identifier}" if identifier else f"{entity} not found",
        )


class TenantNotFoundError(NotFoundError):
    """Raised when tenant cannot be found."""

    def __init__(self, tenant_identifier: str = ""):
        super().__init__("Tenant", tenant_identifier)


class InvalidInputError(HTTPException):
    """Raised when input validation fails."""

    error_type = "validation_error"

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    """Raised when a write collides with existing data (overlapping booking, duplicate SKU)."""

    error_type = "conflict"

    def __init__(self, detail: str, code: Optional[str] = None):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
        self.code = code


class ConfigurationError(HTTPException):
    """Raised at the call site when a required setting is missing."""

    error_type = "configuration_error"

    def __init__(self, setting_name: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server is missing required configuration: {setting_name}",
        )
        self.setting_name = setting_name
