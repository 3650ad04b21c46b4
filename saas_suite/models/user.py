"""
User Model

Users belong to exactly one tenant. Super admins still have a home
tenant but may act on others through the X-Tenant-ID header.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Index
from sqlalchemy.orm import relationship
from saas_suite.database import Base
from saas_suite.models.mixins import TenantScopedMixin, TimestampMixin, new_id
import enum


class UserRole(str, enum.Enum):
    """
    Roles shared by every vertical.

    OWNER and ADMIN manage the tenant, MANAGER runs day-to-day operations,
    STAFF records work (bookings, stock movements), VIEWER is read-only.
    """
    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"
    VIEWER = "viewer"


class User(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)

    email = Column(String(255), nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)

    role = Column(String(20), default=UserRole.STAFF.value, nullable=False)
    is_super_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    last_login_at = Column(DateTime, nullable=True)

    tenant = relationship("Tenant", back_populates="users")

    __table_args__ = (
        # Same email may exist in different tenants
        Index("idx_user_tenant_email", "tenant_id", "email", unique=True),
    )

    def __repr__(self):
        return f"<User {self.email} (tenant={self.tenant_id})>"
