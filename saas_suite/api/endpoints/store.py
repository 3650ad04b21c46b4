"""
Retail Store Endpoints

Product catalogue with simple on-hand stock counts.
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_

from saas_suite.models.store import Product
from saas_suite.schemas.store import ProductCreate, ProductUpdate, ProductResponse, ProductListResponse
from saas_suite.api.deps import audit_mutation, get_repository, require
from saas_suite.core.context import Principal
from saas_suite.core.exceptions import ConflictError, NotFoundError
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/store", tags=["store"], dependencies=[Depends(audit_mutation)])

DECIMAL_FIELDS = ("price", "cost_price", "stock_quantity", "low_stock_threshold")
NULLABLE_FIELDS = ("barcode", "cost_price", "low_stock_threshold")


def _to_columns(data: dict) -> dict:
    for field in DECIMAL_FIELDS:
        if data.get(field) is not None:
            data[field] = Decimal(str(data[field]))
    return data


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    search: Optional[str] = None,
    low_stock: bool = False,
    include_inactive: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    context: Principal = Depends(require("products:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    List products.

    low_stock=true keeps products at or below their threshold; products
    without a threshold never count as low.
    """
    criteria = []
    if not include_inactive:
        criteria.append(Product.is_active.is_(True))
    if search:
        pattern = f"%{search}%"
        criteria.append(or_(
            Product.name.ilike(pattern),
            Product.sku.ilike(pattern),
            Product.barcode == search,
        ))
    if low_stock:
        criteria.append(Product.low_stock_threshold.isnot(None))
        criteria.append(Product.stock_quantity <= Product.low_stock_threshold)

    total = repo.count(Product, *criteria)
    products = repo.find_many(
        Product,
        *criteria,
        order_by=[Product.name],
        offset=(page - 1) * page_size,
        limit=page_size,
    )

    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    context: Principal = Depends(require("products:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    if repo.find_first(Product, sku=product_data.sku):
        raise ConflictError(f"SKU {product_data.sku} already exists", code="DUPLICATE_SKU")

    with repo.transaction():
        product = repo.create(Product, **_to_columns(product_data.model_dump()))

    logger.info(f"Product created: {product.id} in tenant {context.tenant_id}")
    return product


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    context: Principal = Depends(require("products:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Get product by ID.

    Another tenant's product id answers 404, exactly like an unknown id.
    """
    product = repo.find_unique(Product, product_id)
    if not product:
        raise NotFoundError("Product", product_id)
    return product


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    context: Principal = Depends(require("products:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    changes = {
        key: value
        for key, value in product_data.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }

    with repo.transaction():
        product = repo.update(Product, product_id, **_to_columns(changes))
    if not product:
        raise NotFoundError("Product", product_id)

    return product


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    context: Principal = Depends(require("products:delete")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    with repo.transaction():
        deleted = repo.delete(Product, product_id)
    if not deleted:
        raise NotFoundError("Product", product_id)

    logger.info(f"Product {product_id} deleted by {context.user_id}")
