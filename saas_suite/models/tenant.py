"""
Tenant Model

The tenant is the isolation boundary: one customer organization of one
vertical product. Every business row carries a tenant_id foreign key.
Tenants themselves are not tenant-scoped; only the super-admin console
reads them directly.
"""
from sqlalchemy import Column, String, Boolean, Index
from sqlalchemy.orm import relationship
from saas_suite.database import Base
from saas_suite.models.mixins import TimestampMixin, new_id
import enum


class Vertical(str, enum.Enum):
    HOTEL = "hotel"
    BREWERY = "brewery"
    RESTAURANT = "restaurant"
    BEAUTY = "beauty"
    STORE = "store"


class Tenant(TimestampMixin, Base):
    __tablename__ = "tenants"

    # UUIDs avoid enumeration across tenants
    id = Column(String(36), primary_key=True, default=new_id)

    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)

    # Short human-facing code (the "hotel code" staff type at login)
    code = Column(String(8), unique=True, nullable=False, index=True)

    vertical = Column(String(20), nullable=False, default=Vertical.HOTEL.value)
    plan = Column(String(20), default="starter", nullable=False)  # starter, professional, enterprise
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    contact_email = Column(String(255), nullable=True)

    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_tenant_vertical_active", "vertical", "is_active"),
    )

    def __repr__(self):
        return f"<Tenant {self.code} {self.slug}>"
