"""
Retail Store Models
"""
from sqlalchemy import Column, String, Numeric, Boolean, Index
from saas_suite.database import Base
from saas_suite.models.mixins import TenantScopedMixin, TimestampMixin, new_id


class Product(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    sku = Column(String(64), nullable=False)
    barcode = Column(String(64), nullable=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    cost_price = Column(Numeric(10, 2), nullable=True)
    stock_quantity = Column(Numeric(12, 3), nullable=False, default=0)
    low_stock_threshold = Column(Numeric(12, 3), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_product_tenant_sku", "tenant_id", "sku", unique=True),
    )

    def __repr__(self):
        return f"<Product {self.sku} (tenant={self.tenant_id})>"
