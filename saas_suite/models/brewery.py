"""
Brewery Inventory Models

Stock is an append-only ledger per item. InventoryItem.cached_balance is
the running sum of the item's ledger quantities and is updated in the same
transaction as every ledger insert.
"""
from sqlalchemy import Column, String, Numeric, Date, DateTime, Boolean, Text, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from saas_suite.database import Base
from saas_suite.models.mixins import TenantScopedMixin, TimestampMixin, new_id, utcnow
import enum


class InventoryCategory(str, enum.Enum):
    RAW_MATERIAL = "RAW_MATERIAL"
    PACKAGING = "PACKAGING"
    FINISHED_GOOD = "FINISHED_GOOD"
    CONSUMABLE = "CONSUMABLE"


class IngredientType(str, enum.Enum):
    MALT = "MALT"
    HOPS = "HOPS"
    YEAST = "YEAST"
    ADJUNCT = "ADJUNCT"
    WATER_CHEMISTRY = "WATER_CHEMISTRY"


class LedgerEntryType(str, enum.Enum):
    PURCHASE = "PURCHASE"
    CONSUMPTION = "CONSUMPTION"
    ADJUSTMENT = "ADJUSTMENT"
    WASTE = "WASTE"


class ExpenseCategory(str, enum.Enum):
    INGREDIENTS = "INGREDIENTS"
    PACKAGING = "PACKAGING"
    MAINTENANCE = "MAINTENANCE"
    OTHER = "OTHER"


class InventoryItem(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, default=new_id)
    sku = Column(String(64), nullable=False)
    name = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False)
    ingredient_type = Column(String(20), nullable=True)
    unit = Column(String(20), nullable=False)

    reorder_point = Column(Numeric(12, 3), nullable=True)
    supplier = Column(String(255), nullable=True)
    cost_per_unit = Column(Numeric(12, 4), nullable=True)

    cached_balance = Column(Numeric(14, 3), nullable=False, default=0)
    balance_updated_at = Column(DateTime, nullable=False, default=utcnow)

    specs = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    ledger_entries = relationship("InventoryLedger", back_populates="item")

    __table_args__ = (
        Index("idx_inventory_tenant_sku", "tenant_id", "sku", unique=True),
        Index("idx_inventory_tenant_category", "tenant_id", "category"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.reorder_point is not None and self.cached_balance <= self.reorder_point

    def __repr__(self):
        return f"<InventoryItem {self.sku} (tenant={self.tenant_id})>"


class InventoryLedger(TenantScopedMixin, Base):
    __tablename__ = "inventory_ledger"

    id = Column(String(36), primary_key=True, default=new_id)
    item_id = Column(String(36), ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)

    # Signed: purchases are positive, consumption and waste negative
    quantity = Column(Numeric(14, 3), nullable=False)
    type = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(String(36), nullable=False, default="system")
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    item = relationship("InventoryItem", back_populates="ledger_entries")

    def __repr__(self):
        return f"<InventoryLedger {self.type} {self.quantity} item={self.item_id}>"


class Expense(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=new_id)
    category = Column(String(20), nullable=False, default=ExpenseCategory.OTHER.value)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False, default="")
    invoice_number = Column(String(64), nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime, nullable=True)
    payment_method = Column(String(30), nullable=True)
    created_by = Column(String(36), nullable=False, default="system")
