"""
Authentication Endpoints

Handles login and session inspection.
Login is always scoped to one tenant, identified by its short code
(the "hotel code" printed on staff cards) or its slug.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from saas_suite.database import get_db
from saas_suite.models.user import User
from saas_suite.models.tenant import Tenant
from saas_suite.models.mixins import utcnow
from saas_suite.schemas.auth import LoginRequest, Token, PrincipalResponse
from saas_suite.core.context import Principal, SESSION_COOKIE
from saas_suite.core.security import verify_password, create_access_token
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.core.exceptions import AuthenticationError
from saas_suite.api.deps import get_principal
from saas_suite.config import get_settings
from saas_suite.utils.logging import log_security_event, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Authenticate a user and return a session token.

    Process:
    1. Load tenant by code or slug
    2. Find the user in that tenant by email
    3. Verify password
    4. Issue a token carrying user, tenant and role claims

    The token is returned in the body for API clients and set as an
    HTTP-only cookie for browser dashboards.

    SECURITY: Every failure except an inactive account answers with the
    same message, so tenants and emails cannot be enumerated.
    """
    identifier = credentials.tenant.strip()
    tenant = db.query(Tenant).filter(
        or_(Tenant.code == identifier, Tenant.slug == identifier.lower())
    ).first()

    if not tenant:
        log_security_event(
            "failed_login",
            {"reason": "tenant_not_found", "tenant": identifier},
            logger
        )
        raise AuthenticationError("Invalid credentials")

    if not tenant.is_active:
        log_security_event(
            "failed_login",
            {"reason": "tenant_inactive", "tenant_id": tenant.id},
            logger
        )
        raise AuthenticationError("Tenant account is inactive")

    repo = TenantScopedRepository(db, tenant.id)
    user = repo.find_first(User, email=credentials.email.lower())

    if not user or not verify_password(credentials.password, user.hashed_password):
        log_security_event(
            "failed_login",
            {
                "reason": "user_not_found" if not user else "invalid_password",
                "email": credentials.email,
                "tenant_id": tenant.id,
            },
            logger
        )
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        log_security_event(
            "failed_login",
            {"reason": "user_inactive", "user_id": user.id, "tenant_id": tenant.id},
            logger
        )
        raise AuthenticationError("User account is inactive")

    access_token = create_access_token({
        "sub": user.id,
        "tenant_id": tenant.id,
        "org_id": tenant.id,
        "role": user.role,
        "super_admin": user.is_super_admin,
        "email": user.email,
    })

    user.last_login_at = utcnow()
    repo.commit()

    settings = get_settings()
    response.set_cookie(
        SESSION_COOKIE,
        access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
    )

    logger.info(f"Successful login: user={user.id}, tenant={tenant.id}")

    return Token(access_token=access_token, tenant_id=tenant.id, role=user.role)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout():
    """Clear the session cookie. Bearer tokens simply expire."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/me", response_model=PrincipalResponse)
async def me(principal: Principal = Depends(get_principal)):
    """Claims of the current session."""
    return PrincipalResponse(
        user_id=principal.user_id,
        tenant_id=principal.tenant_id,
        organization_id=principal.organization_id,
        role=principal.role.value,
        is_super_admin=principal.is_super_admin,
        email=principal.email,
    )
