"""
Permission System (RBAC)

Permissions are "<resource>:<action>" strings, e.g. "inventory:write".
Each role grants a set of patterns; "*" matches any resource or action.

Role summary:
- owner, admin: everything
- manager: all operational resources, read-only on users
- staff: read everything, write reservations and stock movements
- viewer: read-only
"""
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Dict, FrozenSet
import logging

from saas_suite.core.exceptions import PermissionDenied
from saas_suite.models.user import UserRole
from saas_suite.utils.logging import log_security_event

if TYPE_CHECKING:
    from saas_suite.core.context import Principal

logger = logging.getLogger(__name__)

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[str]] = {
    UserRole.OWNER: frozenset({"*"}),
    UserRole.ADMIN: frozenset({"*"}),
    UserRole.MANAGER: frozenset({
        "rooms:*",
        "reservations:*",
        "inventory:*",
        "tables:*",
        "services:*",
        "products:*",
        "users:read",
    }),
    UserRole.STAFF: frozenset({
        "*:read",
        "reservations:write",
        "inventory:write",
    }),
    UserRole.VIEWER: frozenset({"*:read"}),
}


def has_permission(role: UserRole, permission: str) -> bool:
    return any(fnmatchcase(permission, pattern) for pattern in ROLE_PERMISSIONS.get(role, ()))


def require_permission(principal: "Principal", permission: str) -> None:
    """Raise PermissionDenied if the principal's role does not grant permission."""
    if not has_permission(principal.role, permission):
        log_security_event(
            "permission_denied",
            {"tenant_id": principal.tenant_id, "user_id": principal.user_id, "permission": permission},
            logger,
        )
        raise PermissionDenied(f"Permission denied: {permission}")
