"""
API Dependencies

Reusable FastAPI dependencies for authentication, tenant scoping and
authorization.

Order matters: get_tenant_context has no database dependency, so a
request without a valid session fails with 401 before a session is
even opened.
"""
from typing import Callable
from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from saas_suite.database import get_db
from saas_suite.core.context import Principal, resolve_principal, resolve_tenant_context
from saas_suite.core.exceptions import PermissionDenied
from saas_suite.core.permissions import require_permission
from saas_suite.core.scoping import TenantScopedRepository, unscoped_session
from saas_suite.models.audit import AuditLog
from saas_suite.utils.logging import get_logger, log_security_event

logger = get_logger(__name__)

MUTATING_METHODS = ("POST", "PUT", "PATCH", "DELETE")


def get_principal(request: Request) -> Principal:
    """Any verified session, with or without a tenant."""
    return resolve_principal(request)


def get_tenant_context(request: Request) -> Principal:
    """Verified session bound to a tenant. 401 otherwise."""
    return resolve_tenant_context(request)


def get_repository(
    context: Principal = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> TenantScopedRepository:
    """Tenant-scoped data access for the current request."""
    return TenantScopedRepository(db, context.tenant_id)


def require(permission: str) -> Callable[..., Principal]:
    """
    Dependency factory: tenant principal holding `permission`.

        @router.post("", dependencies=[Depends(require("rooms:write"))])
    """

    def dependency(context: Principal = Depends(get_tenant_context)) -> Principal:
        require_permission(context, permission)
        return context

    return dependency


def require_super_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_super_admin:
        log_security_event("permission_denied", {"user_id": principal.user_id, "permission": "admin"}, logger)
        raise PermissionDenied("Super admin privileges required")
    return principal


def get_admin_session(
    principal: Principal = Depends(require_super_admin),
    db: Session = Depends(get_db),
) -> Session:
    """Unfiltered session for the platform console. Super admins only."""
    return unscoped_session(db, "admin console", user_id=principal.user_id)


def audit_mutation(
    request: Request,
    context: Principal = Depends(get_tenant_context),
    repo: TenantScopedRepository = Depends(get_repository),
) -> None:
    """
    Record mutating requests in the tenant's audit log.

    The entry is committed before the handler runs, so it survives a
    handler failure. A failed audit write is logged and does not block
    the request.
    """
    if request.method not in MUTATING_METHODS:
        return

    # /api/<vertical>/<entity>/<id>/...
    parts = [part for part in request.url.path.split("/") if part]
    entity_type = parts[2] if len(parts) > 2 else (parts[1] if len(parts) > 1 else "unknown")
    entity_id = parts[3] if len(parts) > 3 else "list"

    try:
        repo.create(
            AuditLog,
            user_id=context.user_id,
            correlation_id=getattr(request.state, "correlation_id", None),
            action=f"{request.method} {request.url.path}",
            entity_type=entity_type,
            entity_id=entity_id,
            audit_metadata={
                "method": request.method,
                "path": request.url.path,
                "user_agent": request.headers.get("user-agent"),
            },
        )
        repo.commit()
    except SQLAlchemyError:
        repo.rollback()
        logger.error(
            "Failed to write audit entry",
            exc_info=True,
            extra={"tenant_id": context.tenant_id, "path": request.url.path},
        )
