"""
Tenant Context Resolution

Turns an inbound request into the acting Principal. Only the session
token is consulted; nothing here touches the database, so an
unauthenticated request is rejected before any query runs.

Token sources, in order:
1. Authorization: Bearer <token>
2. session_token cookie (browser dashboards)

Super admins may act on another tenant by sending X-Tenant-ID. The header
is ignored for everyone else.
"""
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from starlette.requests import Request

from saas_suite.core.exceptions import AuthenticationError
from saas_suite.core.security import decode_access_token
from saas_suite.models.user import UserRole

SESSION_COOKIE = "session_token"
TENANT_HEADER = "X-Tenant-ID"


@dataclass(frozen=True)
class Principal:
    """The authenticated actor for one request."""

    user_id: str
    role: UserRole
    tenant_id: Optional[str]
    organization_id: Optional[str] = None
    is_super_admin: bool = False
    email: Optional[str] = None


def extract_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return token
    return request.cookies.get(SESSION_COOKIE) or None


def principal_from_claims(payload: Dict[str, Any]) -> Principal:
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid session")

    try:
        role = UserRole(payload.get("role", UserRole.VIEWER.value))
    except ValueError:
        raise AuthenticationError("Invalid session")

    tenant_id = payload.get("tenant_id") or None
    return Principal(
        user_id=user_id,
        role=role,
        tenant_id=tenant_id,
        # Single-level deployments use the tenant as the organization
        organization_id=payload.get("org_id") or tenant_id,
        is_super_admin=bool(payload.get("super_admin", False)),
        email=payload.get("email"),
    )


def resolve_principal(request: Request) -> Principal:
    """Verified principal, which may lack a tenant (super-admin console)."""
    token = extract_token(request)
    if not token:
        raise AuthenticationError("Authentication required")

    payload = decode_access_token(token)
    if not payload:
        raise AuthenticationError("Invalid or expired session")

    return principal_from_claims(payload)


def resolve_tenant_context(request: Request) -> Principal:
    """
    Verified principal with a tenant id.

    Raises AuthenticationError when there is no valid session or the
    session carries no tenant.
    """
    principal = resolve_principal(request)

    if principal.is_super_admin:
        override = request.headers.get(TENANT_HEADER)
        if override:
            principal = replace(principal, tenant_id=override, organization_id=override)

    if not principal.tenant_id:
        raise AuthenticationError("Session has no tenant")

    request.state.tenant_id = principal.tenant_id
    request.state.user_id = principal.user_id
    return principal
