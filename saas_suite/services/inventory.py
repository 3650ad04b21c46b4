"""
Brewery Inventory Ledger

Stock changes are only ever made by appending a ledger entry and moving
the item's cached balance by the same amount. Callers run these helpers
inside repo.transaction() so the entry and the balance commit together.
"""
from decimal import Decimal
from typing import Any, Dict, Optional

from saas_suite.core.exceptions import InvalidInputError
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.models.brewery import (
    ExpenseCategory,
    IngredientType,
    InventoryCategory,
    InventoryItem,
    InventoryLedger,
    LedgerEntryType,
)
from saas_suite.models.mixins import utcnow

HOP_NAMES = (
    "citra", "cascade", "centennial", "simcoe", "mosaic", "amarillo",
    "hallertau", "saaz", "fuggle", "golding", "tettnang", "chinook",
    "columbus", "warrior", "magnum", "perle", "hop",
)
YEAST_NAMES = ("yeast", "safale", "saflager", "fermentis", "wyeast", "white labs", "lallemand", "mangrove")
MALT_NAMES = ("malt", "pilsner", "munich", "vienna", "crystal", "caramel")

EXPENSE_CATEGORY_BY_INVENTORY = {
    InventoryCategory.RAW_MATERIAL.value: ExpenseCategory.INGREDIENTS,
    InventoryCategory.PACKAGING.value: ExpenseCategory.PACKAGING,
    InventoryCategory.CONSUMABLE.value: ExpenseCategory.MAINTENANCE,
}

# Below this share of the reorder point an item is critical
CRITICAL_RATIO = Decimal("0.5")


def to_decimal(value: Any) -> Decimal:
    # str() keeps float inputs like 0.1 from turning into binary noise
    return value if isinstance(value, Decimal) else Decimal(str(value))


def detect_ingredient_type(sku: str, name: str) -> Optional[IngredientType]:
    """Guess the ingredient type of a raw material from its SKU and name."""
    sku = sku.upper()
    name = name.lower()

    if "HOP" in sku or any(hop in name for hop in HOP_NAMES):
        return IngredientType.HOPS
    if "YEAST" in sku or any(yeast in name for yeast in YEAST_NAMES):
        return IngredientType.YEAST
    if "MALT" in sku or "GRAIN" in sku or any(malt in name for malt in MALT_NAMES):
        return IngredientType.MALT
    if "ADJUNCT" in sku or "adjunct" in name:
        return IngredientType.ADJUNCT
    return None


def expense_category_for(item: InventoryItem) -> ExpenseCategory:
    return EXPENSE_CATEGORY_BY_INVENTORY.get(item.category, ExpenseCategory.OTHER)


def record_movement(
    repo: TenantScopedRepository,
    item: InventoryItem,
    quantity: Any,
    entry_type: LedgerEntryType,
    created_by: str,
    notes: Optional[str] = None,
) -> InventoryLedger:
    """
    Append a ledger entry and move the cached balance.

    Raises InvalidInputError if the movement would leave negative stock.
    """
    quantity = to_decimal(quantity)
    if quantity == 0:
        raise InvalidInputError("Quantity must not be zero")

    new_balance = to_decimal(item.cached_balance or 0) + quantity
    if new_balance < 0:
        raise InvalidInputError(
            f"Insufficient stock for {item.name}: {item.cached_balance} {item.unit} available"
        )

    entry = repo.create(
        InventoryLedger,
        item_id=item.id,
        quantity=quantity,
        type=entry_type.value,
        notes=notes,
        created_by=created_by,
    )
    item.cached_balance = new_balance
    item.balance_updated_at = utcnow()
    return entry


def serialize_item(item: InventoryItem) -> Dict[str, Any]:
    balance = to_decimal(item.cached_balance or 0)
    reorder_point = to_decimal(item.reorder_point) if item.reorder_point is not None else None
    cost = to_decimal(item.cost_per_unit) if item.cost_per_unit is not None else None

    return {
        "id": item.id,
        "sku": item.sku,
        "name": item.name,
        "category": item.category,
        "ingredient_type": item.ingredient_type,
        "unit": item.unit,
        "balance": float(balance),
        "reorder_point": float(reorder_point) if reorder_point is not None else None,
        "supplier": item.supplier,
        "cost_per_unit": float(cost) if cost is not None else None,
        "total_value": float(balance * cost) if cost is not None else None,
        "is_low_stock": reorder_point is not None and balance <= reorder_point,
        "is_critical": reorder_point is not None and balance <= reorder_point * CRITICAL_RATIO,
        "is_out_of_stock": balance <= 0,
        "updated_at": item.balance_updated_at,
        "metadata": item.specs or {},
    }
