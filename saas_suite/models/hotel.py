"""
Hotel Models

Rooms and reservations for the property management vertical.
"""
from sqlalchemy import Column, String, Integer, Numeric, Date, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from saas_suite.database import Base
from saas_suite.models.mixins import TenantScopedMixin, TimestampMixin, new_id
import enum


class RoomStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    DIRTY = "DIRTY"
    MAINTENANCE = "MAINTENANCE"


class ReservationStatus(str, enum.Enum):
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


# Stays in these states never block a room
INACTIVE_RESERVATION_STATUSES = (ReservationStatus.CANCELLED.value, ReservationStatus.NO_SHOW.value)


class HotelRoom(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "hotel_rooms"

    id = Column(String(36), primary_key=True, default=new_id)
    room_number = Column(String(20), nullable=False)
    room_type = Column(String(50), nullable=False, default="standard")
    floor = Column(Integer, nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=RoomStatus.AVAILABLE.value)

    reservations = relationship("HotelReservation", back_populates="room")

    __table_args__ = (
        Index("idx_room_tenant_number", "tenant_id", "room_number", unique=True),
    )

    def __repr__(self):
        return f"<HotelRoom {self.room_number} (tenant={self.tenant_id})>"


class HotelReservation(TenantScopedMixin, TimestampMixin, Base):
    __tablename__ = "hotel_reservations"

    id = Column(String(36), primary_key=True, default=new_id)
    room_id = Column(String(36), ForeignKey("hotel_rooms.id", ondelete="RESTRICT"), nullable=False, index=True)
    confirmation_number = Column(String(20), nullable=False, index=True)

    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=False, default="")
    guest_phone = Column(String(50), nullable=False, default="")
    guest_country = Column(String(80), nullable=False, default="")

    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    adults = Column(Integer, nullable=False, default=1)
    children = Column(Integer, nullable=False, default=0)

    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=ReservationStatus.CONFIRMED.value, index=True)
    source = Column(String(50), nullable=False, default="direct")
    notes = Column(Text, nullable=False, default="")

    room = relationship("HotelRoom", back_populates="reservations")

    __table_args__ = (
        Index("idx_reservation_tenant_room_dates", "tenant_id", "room_id", "check_in", "check_out"),
    )

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __repr__(self):
        return f"<HotelReservation {self.confirmation_number} (tenant={self.tenant_id})>"
