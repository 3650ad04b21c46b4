"""
Audit Log Model

One row per mutating API request, written outside the request's own
transaction so a failed handler still leaves a trace.
"""
from sqlalchemy import Column, String, DateTime, JSON
from saas_suite.database import Base
from saas_suite.models.mixins import TenantScopedMixin, new_id, utcnow


class AuditLog(TenantScopedMixin, Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=True, index=True)
    correlation_id = Column(String(64), nullable=True, index=True)
    action = Column(String(255), nullable=False)  # "POST /api/hotel/reservations"
    entity_type = Column(String(64), nullable=False)
    entity_id = Column(String(64), nullable=False)
    audit_metadata = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
