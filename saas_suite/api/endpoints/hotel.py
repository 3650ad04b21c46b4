"""
Hotel Endpoints

Rooms, reservations and the iCal channel-manager feeds.

Reservation rules:
- a room cannot hold two active stays on overlapping nights (409 OVERLAP);
  cancelled and no-show stays never block
- total_amount defaults to nights x the room's base price
- status CHECKED_IN marks the room OCCUPIED, CHECKED_OUT marks it DIRTY
"""
from datetime import date
from decimal import Decimal
from typing import Optional
import secrets

from fastapi import APIRouter, Depends, Query, Request, Response, status

from saas_suite.models.hotel import (
    HotelReservation,
    HotelRoom,
    ReservationStatus,
    RoomStatus,
    INACTIVE_RESERVATION_STATUSES,
)
from saas_suite.schemas.hotel import (
    RoomCreate,
    RoomResponse,
    ReservationCreate,
    ReservationUpdate,
    ReservationResponse,
    ReservationListResponse,
    ChannelBookingResponse,
    CalendarImportResponse,
    ExportUrlResponse,
)
from saas_suite.api.deps import audit_mutation, get_repository, require
from saas_suite.core.context import Principal
from saas_suite.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.config import require_setting
from saas_suite.services.ical import CalendarEntry, generate_calendar, parse_calendar
from saas_suite.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/hotel", tags=["hotel"], dependencies=[Depends(audit_mutation)])

# Stored string fields that are NOT NULL; an explicit null in a PATCH clears them
CLEARABLE_FIELDS = ("guest_email", "guest_phone", "guest_country", "notes")

ROOM_STATUS_ON_TRANSITION = {
    ReservationStatus.CHECKED_IN.value: RoomStatus.OCCUPIED.value,
    ReservationStatus.CHECKED_OUT.value: RoomStatus.DIRTY.value,
}


def _confirmation_number() -> str:
    return f"RES-{secrets.token_hex(4).upper()}"


def _reservation_response(reservation: HotelReservation) -> ReservationResponse:
    response = ReservationResponse.model_validate(reservation)
    if reservation.room is not None:
        response.room_number = reservation.room.room_number
        response.room_type = reservation.room.room_type
    return response


def _get_room(repo: TenantScopedRepository, room_id: str) -> HotelRoom:
    room = repo.find_unique(HotelRoom, room_id)
    if not room:
        raise NotFoundError("Room", room_id)
    return room


def _ensure_room_free(
    repo: TenantScopedRepository,
    room_id: str,
    check_in: date,
    check_out: date,
    exclude_id: Optional[str] = None,
) -> None:
    """Raise ConflictError if an active stay overlaps [check_in, check_out)."""
    criteria = [
        HotelReservation.room_id == room_id,
        HotelReservation.status.notin_(INACTIVE_RESERVATION_STATUSES),
        HotelReservation.check_in < check_out,
        HotelReservation.check_out > check_in,
    ]
    if exclude_id:
        criteria.append(HotelReservation.id != exclude_id)

    if repo.count(HotelReservation, *criteria):
        raise ConflictError("Room is already booked for these dates", code="OVERLAP")


def _apply_room_transition(repo: TenantScopedRepository, room_id: str, reservation_status: str) -> None:
    room_status = ROOM_STATUS_ON_TRANSITION.get(reservation_status)
    if room_status:
        repo.update(HotelRoom, room_id, status=room_status)


# ============================================================================
# ROOMS
# ============================================================================

@router.get("/rooms", response_model=list[RoomResponse])
async def list_rooms(
    room_status: Optional[RoomStatus] = Query(None, alias="status"),
    context: Principal = Depends(require("rooms:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """List the tenant's rooms ordered by room number."""
    filters = {"status": room_status.value} if room_status else {}
    return repo.find_many(HotelRoom, order_by=[HotelRoom.room_number], **filters)


@router.post("/rooms", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_data: RoomCreate,
    context: Principal = Depends(require("rooms:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """Create a room. Room numbers are unique per tenant."""
    if repo.find_first(HotelRoom, room_number=room_data.room_number):
        raise ConflictError(f"Room {room_data.room_number} already exists", code="DUPLICATE_ROOM")

    with repo.transaction():
        room = repo.create(
            HotelRoom,
            room_number=room_data.room_number,
            room_type=room_data.room_type,
            floor=room_data.floor,
            base_price=Decimal(str(room_data.base_price)),
        )

    logger.info(f"Room created: {room.id} in tenant {context.tenant_id}")
    return room


# ============================================================================
# RESERVATIONS
# ============================================================================

@router.get("/reservations", response_model=ReservationListResponse)
async def list_reservations(
    reservation_status: Optional[ReservationStatus] = Query(None, alias="status"),
    room_id: Optional[str] = None,
    start: Optional[date] = Query(None, alias="from"),
    end: Optional[date] = Query(None, alias="to"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    context: Principal = Depends(require("reservations:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    List reservations.

    `from`/`to` select stays that overlap the window; `search` matches
    guest name or confirmation number.
    """
    criteria = []
    if reservation_status:
        criteria.append(HotelReservation.status == reservation_status.value)
    if room_id:
        criteria.append(HotelReservation.room_id == room_id)
    if start:
        criteria.append(HotelReservation.check_out > start)
    if end:
        criteria.append(HotelReservation.check_in < end)
    if search:
        pattern = f"%{search}%"
        criteria.append(
            HotelReservation.guest_name.ilike(pattern) | HotelReservation.confirmation_number.ilike(pattern)
        )

    total = repo.count(HotelReservation, *criteria)
    reservations = repo.find_many(
        HotelReservation,
        *criteria,
        order_by=[HotelReservation.check_in.desc()],
        offset=(page - 1) * page_size,
        limit=page_size,
    )

    return ReservationListResponse(
        reservations=[_reservation_response(r) for r in reservations],
        total=total,
    )


@router.post("/reservations", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    context: Principal = Depends(require("reservations:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """Book a room. Rejects overlapping stays with 409 OVERLAP."""
    room = _get_room(repo, reservation_data.room_id)
    if reservation_data.status.value not in INACTIVE_RESERVATION_STATUSES:
        _ensure_room_free(repo, room.id, reservation_data.check_in, reservation_data.check_out)

    nights = (reservation_data.check_out - reservation_data.check_in).days
    if reservation_data.total_amount is not None:
        total_amount = Decimal(str(reservation_data.total_amount))
    else:
        total_amount = Decimal(room.base_price or 0) * nights

    with repo.transaction():
        reservation = repo.create(
            HotelReservation,
            room_id=room.id,
            confirmation_number=_confirmation_number(),
            guest_name=reservation_data.guest_name,
            guest_email=reservation_data.guest_email or "",
            guest_phone=reservation_data.guest_phone,
            guest_country=reservation_data.guest_country,
            check_in=reservation_data.check_in,
            check_out=reservation_data.check_out,
            adults=reservation_data.adults,
            children=reservation_data.children,
            total_amount=total_amount,
            paid_amount=Decimal(str(reservation_data.paid_amount)),
            status=reservation_data.status.value,
            source=reservation_data.source,
            notes=reservation_data.notes,
        )
        _apply_room_transition(repo, room.id, reservation.status)

    logger.info(
        f"Reservation {reservation.confirmation_number} created for room {room.room_number}",
        extra={"tenant_id": context.tenant_id}
    )
    return _reservation_response(reservation)


@router.get("/reservations/export.ics")
async def export_reservations(
    room_id: Optional[str] = None,
    context: Principal = Depends(require("reservations:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Active reservations as an iCalendar feed.

    Channel managers poll this URL; pass room_id for a per-room feed.
    """
    calendar_name = "Hotel Reservations"
    filters = {}
    if room_id:
        room = _get_room(repo, room_id)
        filters["room_id"] = room.id
        calendar_name = f"Room {room.room_number}"

    reservations = repo.find_many(
        HotelReservation,
        HotelReservation.status.notin_(INACTIVE_RESERVATION_STATUSES),
        order_by=[HotelReservation.check_in],
        **filters
    )

    body = generate_calendar(
        (
            CalendarEntry(
                id=r.id,
                check_in=r.check_in,
                check_out=r.check_out,
                guest_name=r.guest_name,
                room_number=r.room.room_number if r.room else None,
                status=r.status,
            )
            for r in reservations
        ),
        calendar_name=calendar_name,
    )

    return Response(
        content=body,
        media_type="text/calendar",
        headers={"Content-Disposition": 'attachment; filename="reservations.ics"'},
    )


@router.get("/reservations/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    context: Principal = Depends(require("reservations:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    reservation = repo.find_unique(HotelReservation, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation", reservation_id)
    return _reservation_response(reservation)


@router.patch("/reservations/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: str,
    reservation_data: ReservationUpdate,
    context: Principal = Depends(require("reservations:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Partially update a reservation.

    Moving dates or room re-runs the overlap check, excluding this stay.
    """
    reservation = repo.find_unique(HotelReservation, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation", reservation_id)

    changes = reservation_data.model_dump(exclude_unset=True)
    for field in CLEARABLE_FIELDS:
        if field in changes and changes[field] is None:
            changes[field] = ""
    changes = {key: value for key, value in changes.items() if value is not None}

    room_id = changes.get("room_id", reservation.room_id)
    if room_id != reservation.room_id:
        room_id = _get_room(repo, room_id).id

    check_in = changes.get("check_in", reservation.check_in)
    check_out = changes.get("check_out", reservation.check_out)
    if check_out <= check_in:
        raise InvalidInputError("Check-out must be after check-in")

    new_status = changes["status"].value if "status" in changes else reservation.status
    if new_status not in INACTIVE_RESERVATION_STATUSES and (
        room_id != reservation.room_id
        or check_in != reservation.check_in
        or check_out != reservation.check_out
        or reservation.status in INACTIVE_RESERVATION_STATUSES
    ):
        _ensure_room_free(repo, room_id, check_in, check_out, exclude_id=reservation.id)

    if "status" in changes:
        changes["status"] = new_status
    for field in ("total_amount", "paid_amount"):
        if field in changes:
            changes[field] = Decimal(str(changes[field]))

    status_changed = new_status != reservation.status
    with repo.transaction():
        reservation = repo.update(HotelReservation, reservation.id, **changes)
        if status_changed:
            _apply_room_transition(repo, reservation.room_id, new_status)
    repo.refresh(reservation)

    logger.info(f"Reservation {reservation.id} updated by {context.user_id}")
    return _reservation_response(reservation)


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: str,
    context: Principal = Depends(require("reservations:delete")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    with repo.transaction():
        deleted = repo.delete(HotelReservation, reservation_id)
    if not deleted:
        raise NotFoundError("Reservation", reservation_id)

    logger.info(f"Reservation {reservation_id} deleted by {context.user_id}")


# ============================================================================
# CHANNEL CALENDARS
# ============================================================================

@router.post("/calendar/import", response_model=CalendarImportResponse)
async def import_calendar(
    request: Request,
    start: Optional[date] = None,
    end: Optional[date] = None,
    context: Principal = Depends(require("reservations:read")),
):
    """
    Parse a channel's .ics feed into blocked periods.

    Nothing is stored; the caller decides what to book.
    """
    body = (await request.body()).decode("utf-8", errors="replace")
    if "BEGIN:VCALENDAR" not in body:
        raise InvalidInputError("Request body must be an iCalendar document")

    bookings = parse_calendar(body, start=start, end=end)
    logger.info(f"Parsed {len(bookings)} channel bookings for tenant {context.tenant_id}")

    return CalendarImportResponse(
        bookings=[ChannelBookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/calendar/export-url/{room_id}", response_model=ExportUrlResponse)
async def calendar_export_url(
    room_id: str,
    context: Principal = Depends(require("rooms:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """Public feed URL to paste into a channel manager."""
    base_url = require_setting("PUBLIC_BASE_URL").rstrip("/")
    room = _get_room(repo, room_id)
    return ExportUrlResponse(
        room_id=room.id,
        url=f"{base_url}/api/hotel/reservations/export.ics?room_id={room.id}",
    )
