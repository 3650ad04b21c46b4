"""
Hotel Schemas

Request/response models for rooms, reservations and calendar feeds.
"""
from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional, Union
from datetime import date, datetime

from saas_suite.models.hotel import RoomStatus, ReservationStatus


class RoomCreate(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    room_type: str = Field("standard", max_length=50)
    floor: Optional[int] = None
    base_price: float = Field(..., ge=0)


class RoomResponse(BaseModel):
    id: str
    tenant_id: str
    room_number: str
    room_type: str
    floor: Optional[int]
    base_price: float
    status: RoomStatus

    class Config:
        from_attributes = True


class ReservationCreate(BaseModel):
    room_id: str = Field(..., min_length=1)
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: Optional[EmailStr] = None
    guest_phone: str = ""
    guest_country: str = ""
    check_in: date
    check_out: date
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    # Computed from nights x room base price when omitted
    total_amount: Optional[float] = Field(None, ge=0, le=1_000_000)
    paid_amount: float = Field(0, ge=0, le=1_000_000)
    status: ReservationStatus = ReservationStatus.CONFIRMED
    source: str = "direct"
    notes: str = ""

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("Check-out must be after check-in")
        return self


class ReservationUpdate(BaseModel):
    """All fields optional; only the ones sent are changed."""
    room_id: Optional[str] = None
    guest_name: Optional[str] = Field(None, min_length=1, max_length=255)
    guest_email: Optional[EmailStr] = None
    guest_phone: Optional[str] = None
    guest_country: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: Optional[int] = Field(None, ge=1)
    children: Optional[int] = Field(None, ge=0)
    total_amount: Optional[float] = Field(None, ge=0, le=1_000_000)
    paid_amount: Optional[float] = Field(None, ge=0, le=1_000_000)
    status: Optional[ReservationStatus] = None
    source: Optional[str] = None
    notes: Optional[str] = None


class ReservationResponse(BaseModel):
    id: str
    tenant_id: str
    room_id: str
    confirmation_number: str
    guest_name: str
    guest_email: str
    guest_phone: str
    guest_country: str
    check_in: date
    check_out: date
    nights: int
    adults: int
    children: int
    total_amount: float
    paid_amount: float
    status: ReservationStatus
    source: str
    notes: str
    room_number: Optional[str] = None
    room_type: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    reservations: list[ReservationResponse]
    total: int


class ChannelBookingResponse(BaseModel):
    channel_booking_id: str
    check_in: Union[date, datetime]
    check_out: Union[date, datetime]
    guest_name: str
    status: str

    class Config:
        from_attributes = True


class CalendarImportResponse(BaseModel):
    bookings: list[ChannelBookingResponse]
    total: int


class ExportUrlResponse(BaseModel):
    room_id: str
    url: str
