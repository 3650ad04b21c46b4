"""
Brewery Inventory Endpoints

Stock is never edited in place. Every change (opening stock, purchase,
consumption, correction) appends an InventoryLedger entry and moves the
item's cached balance in the same transaction.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_

from saas_suite.models.brewery import (
    Expense,
    IngredientType,
    InventoryCategory,
    InventoryItem,
    InventoryLedger,
    LedgerEntryType,
)
from saas_suite.schemas.brewery import (
    AdjustmentRequest,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryListResponse,
    MovementListResponse,
    MovementResponse,
    PurchaseRequest,
    PurchaseResponse,
)
from saas_suite.api.deps import audit_mutation, get_repository, require
from saas_suite.core.context import Principal
from saas_suite.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.models.mixins import utcnow
from saas_suite.services.inventory import (
    detect_ingredient_type,
    expense_category_for,
    record_movement,
    serialize_item,
    to_decimal,
)
from saas_suite.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/brewery", tags=["brewery"], dependencies=[Depends(audit_mutation)])

INGREDIENT_TYPES = {t.value for t in IngredientType}
CATEGORIES = {c.value for c in InventoryCategory}
UNIT_COST_PRECISION = Decimal("0.0001")


def _get_item(repo: TenantScopedRepository, item_id: str) -> InventoryItem:
    item = repo.find_unique(InventoryItem, item_id)
    if not item or not item.is_active:
        raise NotFoundError("Inventory item", item_id)
    return item


@router.get("/inventory", response_model=InventoryListResponse)
async def list_inventory(
    category: Optional[str] = None,
    search: Optional[str] = None,
    low_stock: bool = False,
    context: Principal = Depends(require("inventory:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    List active inventory items.

    `category` accepts an inventory category (RAW_MATERIAL, PACKAGING...)
    or an ingredient type (MALT, HOPS...), which implies RAW_MATERIAL.
    """
    criteria = [InventoryItem.is_active.is_(True)]

    if category:
        category = category.upper()
        if category in INGREDIENT_TYPES:
            criteria.append(InventoryItem.category == InventoryCategory.RAW_MATERIAL.value)
            criteria.append(InventoryItem.ingredient_type == category)
        elif category in CATEGORIES:
            criteria.append(InventoryItem.category == category)
        else:
            raise InvalidInputError(f"Unknown category: {category}")

    if search:
        pattern = f"%{search}%"
        criteria.append(or_(InventoryItem.name.ilike(pattern), InventoryItem.sku.ilike(pattern)))

    if low_stock:
        criteria.append(InventoryItem.reorder_point.isnot(None))
        criteria.append(InventoryItem.cached_balance <= InventoryItem.reorder_point)

    items = repo.find_many(InventoryItem, *criteria, order_by=[InventoryItem.name])
    return InventoryListResponse(items=[serialize_item(item) for item in items])


@router.post("/inventory", response_model=InventoryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    item_data: InventoryItemCreate,
    context: Principal = Depends(require("inventory:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Create an item, optionally with opening stock.

    Opening stock is booked as a PURCHASE ledger entry in the same
    transaction as the item itself.
    """
    sku = item_data.sku.strip().upper()
    if repo.find_first(InventoryItem, sku=sku):
        raise ConflictError(f"SKU {sku} already exists", code="DUPLICATE_SKU")

    ingredient_type = None
    if item_data.category == InventoryCategory.RAW_MATERIAL:
        detected = detect_ingredient_type(sku, item_data.name)
        ingredient_type = detected.value if detected else None

    with repo.transaction():
        item = repo.create(
            InventoryItem,
            sku=sku,
            name=item_data.name,
            category=item_data.category.value,
            ingredient_type=ingredient_type,
            unit=item_data.unit,
            reorder_point=to_decimal(item_data.reorder_point) if item_data.reorder_point is not None else None,
            supplier=item_data.supplier,
            cost_per_unit=to_decimal(item_data.cost_per_unit) if item_data.cost_per_unit is not None else None,
            cached_balance=0,
            specs=item_data.metadata,
        )
        if item_data.quantity > 0:
            record_movement(
                repo, item, item_data.quantity, LedgerEntryType.PURCHASE,
                created_by=context.user_id, notes="Opening stock",
            )

    logger.info(f"Inventory item {sku} created in tenant {context.tenant_id}")
    return serialize_item(item)


@router.post("/inventory/purchase", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
async def record_purchase(
    purchase: PurchaseRequest,
    context: Principal = Depends(require("inventory:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Receive stock from a supplier.

    In one transaction: ledger PURCHASE entry, balance update, cost per
    unit refresh and, unless disabled, an expense for bookkeeping.
    """
    item = _get_item(repo, purchase.item_id)

    quantity = to_decimal(purchase.quantity)
    if purchase.total_amount is not None:
        total_amount = to_decimal(purchase.total_amount)
    elif purchase.unit_price is not None:
        total_amount = to_decimal(purchase.unit_price) * quantity
    else:
        total_amount = to_decimal(item.cost_per_unit or 0) * quantity

    supplier = purchase.supplier or item.supplier
    note_parts = [f"Purchase from {supplier}" if supplier else "Purchase"]
    if purchase.invoice_number:
        note_parts.append(f"invoice {purchase.invoice_number}")
    if purchase.notes:
        note_parts.append(purchase.notes)

    expense_id = None
    with repo.transaction():
        entry = record_movement(
            repo, item, quantity, LedgerEntryType.PURCHASE,
            created_by=context.user_id, notes=" - ".join(note_parts),
        )
        if total_amount > 0:
            item.cost_per_unit = (total_amount / quantity).quantize(UNIT_COST_PRECISION)
        if purchase.supplier:
            item.supplier = purchase.supplier

        if purchase.create_expense and total_amount > 0:
            expense = repo.create(
                Expense,
                category=expense_category_for(item).value,
                amount=total_amount,
                date=purchase.purchase_date or date.today(),
                description=f"{item.name} - {purchase.quantity} {item.unit}",
                invoice_number=purchase.invoice_number,
                is_paid=purchase.is_paid,
                paid_at=utcnow() if purchase.is_paid else None,
                payment_method=purchase.payment_method,
                created_by=context.user_id,
            )
            expense_id = expense.id

    logger.info(
        f"Purchase recorded: {purchase.quantity} {item.unit} of {item.sku}",
        extra={"tenant_id": context.tenant_id}
    )

    return PurchaseResponse(
        item_id=item.id,
        item_name=item.name,
        quantity=float(quantity),
        unit=item.unit,
        total_amount=float(total_amount),
        new_balance=float(item.cached_balance),
        expense_id=expense_id,
        ledger_entry_id=entry.id,
    )


@router.get("/inventory/{item_id}", response_model=InventoryItemResponse)
async def get_inventory_item(
    item_id: str,
    context: Principal = Depends(require("inventory:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    return serialize_item(_get_item(repo, item_id))


@router.get("/inventory/{identifier}/movements", response_model=MovementListResponse)
async def list_movements(
    identifier: str,
    limit: int = Query(100, ge=1, le=500),
    context: Principal = Depends(require("inventory:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """Ledger history of an item, newest first. Accepts an id or a SKU."""
    item = repo.find_first(
        InventoryItem,
        or_(InventoryItem.id == identifier, InventoryItem.sku == identifier.upper()),
        InventoryItem.is_active.is_(True),
    )
    if not item:
        raise NotFoundError("Inventory item", identifier)

    movements = repo.find_many(
        InventoryLedger,
        order_by=[InventoryLedger.created_at.desc()],
        limit=limit,
        item_id=item.id,
    )

    return MovementListResponse(
        item_id=item.id,
        sku=item.sku,
        balance=float(item.cached_balance),
        movements=[MovementResponse.model_validate(m) for m in movements],
    )


@router.post("/inventory/{item_id}/adjust", response_model=InventoryItemResponse)
async def adjust_stock(
    item_id: str,
    adjustment: AdjustmentRequest,
    context: Principal = Depends(require("inventory:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Signed stock correction (counts, consumption, waste).

    Consumption and waste always remove stock, whatever sign is sent.
    An adjustment that would take the balance below zero is rejected.
    """
    item = _get_item(repo, item_id)

    quantity = to_decimal(adjustment.quantity)
    if adjustment.type in (LedgerEntryType.CONSUMPTION, LedgerEntryType.WASTE):
        quantity = -abs(quantity)

    with repo.transaction():
        record_movement(
            repo, item, quantity, adjustment.type,
            created_by=context.user_id, notes=adjustment.notes,
        )

    logger.info(f"Stock adjusted: {item.sku} {quantity:+} {item.unit}")
    return serialize_item(item)
