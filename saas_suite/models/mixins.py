"""
Shared column mixins.

TenantScopedMixin marks a model as carrying the tenant boundary. The
scoping repository only filters models that appear in SCOPED_MODELS
(core/scoping.py); having the column is not enough on its own.
"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import declared_attr


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class TenantScopedMixin:
    # Immutable after insert; see the before_flush guard in core/scoping.py
    @declared_attr
    def tenant_id(cls):
        return Column(
            String(36),
            ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
            active_history=True,
        )


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
