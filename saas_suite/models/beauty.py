"""
Beauty Salon Models
"""
from sqlalchemy import Column, String, Integer, Numeric, Boolean, Text
from saas_suite.database import Base
from saas_suite.models.mixins import TenantScopedMixin, TimestampMixin, new_id


class SalonService(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "salon_services"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, default="general")  # hair, nails, face, body...
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False, default=60)  # minutes
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<SalonService {self.name} (tenant={self.tenant_id})>"
