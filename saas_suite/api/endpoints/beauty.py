"""
Beauty Salon Endpoints

Service catalogue (cuts, colour, nails...) with duration and price.
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, status

from saas_suite.models.beauty import SalonService
from saas_suite.schemas.beauty import ServiceCreate, ServiceUpdate, ServiceResponse
from saas_suite.api.deps import audit_mutation, get_repository, require
from saas_suite.core.context import Principal
from saas_suite.core.exceptions import NotFoundError
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/beauty", tags=["beauty"], dependencies=[Depends(audit_mutation)])


@router.get("/services", response_model=list[ServiceResponse])
async def list_services(
    category: Optional[str] = None,
    include_inactive: bool = False,
    context: Principal = Depends(require("services:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    filters = {}
    if category:
        filters["category"] = category
    if not include_inactive:
        filters["is_active"] = True
    return repo.find_many(
        SalonService,
        order_by=[SalonService.category, SalonService.name],
        **filters
    )


@router.post("/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    service_data: ServiceCreate,
    context: Principal = Depends(require("services:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    data = service_data.model_dump()
    data["price"] = Decimal(str(data["price"]))

    with repo.transaction():
        service = repo.create(SalonService, **data)

    logger.info(f"Salon service created: {service.id} in tenant {context.tenant_id}")
    return service


@router.patch("/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    service_data: ServiceUpdate,
    context: Principal = Depends(require("services:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """Only the fields sent are changed."""
    changes = {
        key: value
        for key, value in service_data.model_dump(exclude_unset=True).items()
        if value is not None or key == "description"
    }
    if "price" in changes:
        changes["price"] = Decimal(str(changes["price"]))

    with repo.transaction():
        service = repo.update(SalonService, service_id, **changes)
    if not service:
        raise NotFoundError("Service", service_id)

    return service


@router.delete("/services/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: str,
    context: Principal = Depends(require("services:delete")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    with repo.transaction():
        deleted = repo.delete(SalonService, service_id)
    if not deleted:
        raise NotFoundError("Service", service_id)

    logger.info(f"Salon service {service_id} deleted by {context.user_id}")
