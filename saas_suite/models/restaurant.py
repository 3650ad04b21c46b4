"""
Restaurant Models

Tables and table reservations. A reservation occupies its table from
`time` for `duration` minutes on `date`.
"""
from datetime import datetime, timedelta

from sqlalchemy import Column, String, Integer, Date, Time, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from saas_suite.database import Base
from saas_suite.models.mixins import TenantScopedMixin, TimestampMixin, new_id
import enum


class TableReservationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SEATED = "SEATED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


ALLOWED_DURATIONS = (60, 90, 120, 150, 180)
DEFAULT_DURATION = 120


class RestaurantTable(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "restaurant_tables"

    id = Column(String(36), primary_key=True, default=new_id)
    number = Column(String(10), nullable=False)
    seats = Column(Integer, nullable=False, default=4)
    zone = Column(String(50), nullable=True)

    reservations = relationship("RestaurantReservation", back_populates="table")

    __table_args__ = (
        Index("idx_table_tenant_number", "tenant_id", "number", unique=True),
    )


class RestaurantReservation(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "restaurant_reservations"

    id = Column(String(36), primary_key=True, default=new_id)
    table_id = Column(String(36), ForeignKey("restaurant_tables.id", ondelete="SET NULL"), nullable=True, index=True)

    guest_name = Column(String(255), nullable=False)
    guest_phone = Column(String(50), nullable=True)
    guest_email = Column(String(255), nullable=True)
    guest_count = Column(Integer, nullable=False)

    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    duration = Column(Integer, nullable=False, default=DEFAULT_DURATION)

    status = Column(String(20), nullable=False, default=TableReservationStatus.CONFIRMED.value)
    notes = Column(Text, nullable=True)

    table = relationship("RestaurantTable", back_populates="reservations")

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.time)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration)
