"""
Restaurant Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
import datetime as dt

from saas_suite.models.restaurant import TableReservationStatus


class TableCreate(BaseModel):
    number: str = Field(..., min_length=1, max_length=10)
    seats: int = Field(4, ge=1, le=50)
    zone: Optional[str] = None


class TableResponse(BaseModel):
    id: str
    number: str
    seats: int
    zone: Optional[str]

    class Config:
        from_attributes = True


class TableReservationCreate(BaseModel):
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_phone: Optional[str] = None
    guest_email: Optional[str] = None
    guest_count: int = Field(..., ge=1)
    date: dt.date
    time: dt.time
    # Snapped to 60/90/120/150/180 minutes; anything else becomes 120
    duration: Optional[int] = None
    table_id: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("time")
    @classmethod
    def check_local_time(cls, value: dt.time) -> dt.time:
        # Seating times are the restaurant's local wall clock
        if value.tzinfo is not None:
            raise ValueError("Time must be a local time without a UTC offset")
        return value


class TableReservationResponse(BaseModel):
    id: str
    table_id: Optional[str]
    table_number: Optional[str] = None
    guest_name: str
    guest_phone: Optional[str]
    guest_email: Optional[str]
    guest_count: int
    date: dt.date
    time: dt.time
    duration: int
    status: TableReservationStatus
    notes: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True
