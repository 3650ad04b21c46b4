"""Tests for session token handling and tenant context resolution."""

from datetime import timedelta

import pytest
from starlette.requests import Request

from saas_suite.core.context import (
    Principal,
    extract_token,
    principal_from_claims,
    resolve_principal,
    resolve_tenant_context,
)
from saas_suite.core.exceptions import AuthenticationError
from saas_suite.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from saas_suite.models.user import UserRole


def make_request(headers=None, cookies=None) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        cookie = "; ".join(f"{k}={v}" for k, v in cookies.items())
        raw_headers.append((b"cookie", cookie.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw_headers})


def bearer(**claims) -> dict:
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


class TestSecurity:
    def test_password_hash_roundtrip(self):
        hashed = get_password_hash("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong", hashed)

    def test_token_carries_claims(self):
        payload = decode_access_token(create_access_token({"sub": "u1", "tenant_id": "t1"}))

        assert payload["sub"] == "u1"
        assert payload["tenant_id"] == "t1"
        assert "exp" in payload and "iat" in payload

    def test_expired_token_is_rejected(self):
        token = create_access_token({"sub": "u1"}, expires_delta=timedelta(seconds=-5))
        assert decode_access_token(token) is None

    def test_tampered_token_is_rejected(self):
        header, payload, _ = create_access_token({"sub": "u1"}).split(".")
        foreign_signature = create_access_token({"sub": "u2"}).split(".")[2]

        assert decode_access_token(f"{header}.{payload}.{foreign_signature}") is None


class TestExtractToken:
    def test_bearer_header(self):
        assert extract_token(make_request({"Authorization": "Bearer abc"})) == "abc"

    def test_cookie_fallback(self):
        assert extract_token(make_request(cookies={"session_token": "xyz"})) == "xyz"

    def test_header_wins_over_cookie(self):
        request = make_request({"Authorization": "Bearer abc"}, cookies={"session_token": "xyz"})
        assert extract_token(request) == "abc"

    def test_other_schemes_ignored(self):
        assert extract_token(make_request({"Authorization": "Basic dXNlcjpwYXNz"})) is None


class TestPrincipalFromClaims:
    def test_full_claims(self):
        principal = principal_from_claims({
            "sub": "u1", "tenant_id": "t1", "org_id": "o1", "role": "manager",
            "super_admin": False, "email": "m@example.com",
        })

        assert principal == Principal(
            user_id="u1", role=UserRole.MANAGER, tenant_id="t1",
            organization_id="o1", is_super_admin=False, email="m@example.com",
        )

    def test_organization_defaults_to_tenant(self):
        principal = principal_from_claims({"sub": "u1", "tenant_id": "t1", "role": "staff"})
        assert principal.organization_id == "t1"

    def test_missing_subject(self):
        with pytest.raises(AuthenticationError):
            principal_from_claims({"tenant_id": "t1", "role": "owner"})

    def test_unknown_role(self):
        with pytest.raises(AuthenticationError):
            principal_from_claims({"sub": "u1", "tenant_id": "t1", "role": "emperor"})


class TestResolveTenantContext:
    def test_no_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            resolve_principal(make_request())
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Authentication required"

    def test_invalid_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            resolve_principal(make_request({"Authorization": "Bearer not-a-token"}))
        assert exc_info.value.detail == "Invalid or expired session"

    def test_sets_request_state(self):
        request = make_request(bearer(sub="u1", tenant_id="t1", role="staff"))

        principal = resolve_tenant_context(request)

        assert principal.tenant_id == "t1"
        assert request.state.tenant_id == "t1"
        assert request.state.user_id == "u1"

    def test_session_without_tenant(self):
        request = make_request(bearer(sub="u1", role="admin", super_admin=True))
        with pytest.raises(AuthenticationError):
            resolve_tenant_context(request)

    def test_super_admin_may_switch_tenant(self):
        headers = {**bearer(sub="u1", tenant_id="home", role="admin", super_admin=True), "X-Tenant-ID": "other"}

        principal = resolve_tenant_context(make_request(headers))

        assert principal.tenant_id == "other"
        assert principal.organization_id == "other"

    def test_tenant_header_ignored_for_regular_users(self):
        headers = {**bearer(sub="u1", tenant_id="home", role="owner"), "X-Tenant-ID": "other"}

        principal = resolve_tenant_context(make_request(headers))

        assert principal.tenant_id == "home"
