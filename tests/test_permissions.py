"""Tests for the role permission matrix."""

import pytest

from saas_suite.core.context import Principal
from saas_suite.core.exceptions import PermissionDenied
from saas_suite.core.permissions import has_permission, require_permission
from saas_suite.models.user import UserRole


@pytest.mark.parametrize("role", [UserRole.OWNER, UserRole.ADMIN])
def test_owner_and_admin_can_do_anything(role):
    assert has_permission(role, "rooms:delete")
    assert has_permission(role, "users:write")


def test_manager_runs_operations_but_reads_users():
    assert has_permission(UserRole.MANAGER, "inventory:write")
    assert has_permission(UserRole.MANAGER, "reservations:delete")
    assert has_permission(UserRole.MANAGER, "users:read")
    assert not has_permission(UserRole.MANAGER, "users:write")


def test_staff_writes_bookings_and_stock_only():
    assert has_permission(UserRole.STAFF, "rooms:read")
    assert has_permission(UserRole.STAFF, "reservations:write")
    assert has_permission(UserRole.STAFF, "inventory:write")
    assert not has_permission(UserRole.STAFF, "rooms:write")
    assert not has_permission(UserRole.STAFF, "reservations:delete")


def test_viewer_is_read_only():
    assert has_permission(UserRole.VIEWER, "products:read")
    assert not has_permission(UserRole.VIEWER, "products:write")


def test_require_permission_raises_403():
    viewer = Principal(user_id="u1", role=UserRole.VIEWER, tenant_id="t1")

    with pytest.raises(PermissionDenied) as exc_info:
        require_permission(viewer, "rooms:write")

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Permission denied: rooms:write"
