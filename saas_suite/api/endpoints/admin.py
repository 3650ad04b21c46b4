"""
Super-Admin Endpoints

Platform console for managing organizations (tenants). These routes see
every tenant, so they work on the unscoped session handed out by
get_admin_session, and every request is logged as a security event.
"""
from typing import Dict, Iterable, Optional
import secrets

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from saas_suite.models.tenant import Tenant, Vertical
from saas_suite.models.user import User, UserRole
from saas_suite.schemas.admin import (
    OrganizationCreate,
    OrganizationUpdate,
    OrganizationResponse,
    OrganizationListResponse,
)
from saas_suite.api.deps import get_admin_session
from saas_suite.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.core.security import get_password_hash
from saas_suite.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

CODE_ATTEMPTS = 20


def _generate_code(db: Session) -> str:
    """Random unused 4-digit tenant code."""
    for _ in range(CODE_ATTEMPTS):
        code = str(1000 + secrets.randbelow(9000))
        if not db.query(Tenant.id).filter(Tenant.code == code).first():
            return code
    raise ConflictError("Could not allocate a tenant code", code="CODE_EXHAUSTED")


def _user_counts(db: Session, tenant_ids: Iterable[str]) -> Dict[str, int]:
    tenant_ids = list(tenant_ids)
    if not tenant_ids:
        return {}
    rows = (
        db.query(User.tenant_id, func.count(User.id))
        .filter(User.tenant_id.in_(tenant_ids))
        .group_by(User.tenant_id)
        .all()
    )
    return {tenant_id: count for tenant_id, count in rows}


def _organization_response(tenant: Tenant, user_count: int) -> OrganizationResponse:
    response = OrganizationResponse.model_validate(tenant)
    response.user_count = user_count
    return response


@router.get("/organizations", response_model=OrganizationListResponse)
async def list_organizations(
    search: Optional[str] = None,
    vertical: Optional[Vertical] = None,
    org_status: Optional[str] = Query(None, alias="status", pattern="^(active|inactive)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_admin_session)
):
    """List organizations across all tenants."""
    query = db.query(Tenant)

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Tenant.name.ilike(pattern),
            Tenant.slug.ilike(pattern),
            Tenant.code == search,
        ))
    if vertical:
        query = query.filter(Tenant.vertical == vertical.value)
    if org_status:
        query = query.filter(Tenant.is_active.is_(org_status == "active"))

    total = query.count()
    tenants = query.order_by(Tenant.created_at.desc()).offset((page - 1) * page_size).limit(page_size).all()
    counts = _user_counts(db, (t.id for t in tenants))

    return OrganizationListResponse(
        organizations=[_organization_response(t, counts.get(t.id, 0)) for t in tenants],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/organizations", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    org_data: OrganizationCreate,
    db: Session = Depends(get_admin_session)
):
    """
    Create an organization together with its owner account.

    The tenant gets a unique 4-digit login code. Tenant and owner are
    committed together.
    """
    if db.query(Tenant.id).filter(Tenant.slug == org_data.slug).first():
        raise ConflictError(f"Slug already taken: {org_data.slug}", code="DUPLICATE_SLUG")

    owner_email = org_data.owner_email.lower()
    try:
        tenant = Tenant(
            name=org_data.name,
            slug=org_data.slug,
            code=_generate_code(db),
            vertical=org_data.vertical.value,
            plan=org_data.plan,
            contact_email=owner_email,
        )
        db.add(tenant)
        db.flush()

        TenantScopedRepository(db, tenant.id).create(
            User,
            email=owner_email,
            hashed_password=get_password_hash(org_data.owner_password),
            full_name=org_data.owner_name,
            role=UserRole.OWNER.value,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Organization created: {tenant.slug} ({tenant.id}) code={tenant.code}")
    return _organization_response(tenant, 1)


@router.patch("/organizations/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: str,
    org_data: OrganizationUpdate,
    db: Session = Depends(get_admin_session)
):
    """Rename, change plan, or activate/deactivate an organization."""
    tenant = db.get(Tenant, organization_id)
    if not tenant:
        raise NotFoundError("Organization", organization_id)

    changes = {key: value for key, value in org_data.model_dump(exclude_unset=True).items() if value is not None}
    if not changes:
        raise InvalidInputError("No changes supplied")

    for field, value in changes.items():
        setattr(tenant, field, value)
    db.commit()

    if "is_active" in changes:
        logger.warning(
            f"Organization {tenant.slug} {'activated' if tenant.is_active else 'deactivated'}",
            extra={"tenant_id": tenant.id}
        )

    counts = _user_counts(db, [tenant.id])
    return _organization_response(tenant, counts.get(tenant.id, 0))
