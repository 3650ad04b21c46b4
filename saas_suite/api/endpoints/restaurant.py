"""
Restaurant Endpoints

Tables and table reservations. Reservation lengths come in fixed slots
(60 to 180 minutes in half-hour steps); a table cannot hold two live
reservations whose slots overlap.
"""
from datetime import timedelta
from typing import Optional
import datetime as dt

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_

from saas_suite.models.restaurant import (
    ALLOWED_DURATIONS,
    DEFAULT_DURATION,
    RestaurantReservation,
    RestaurantTable,
    TableReservationStatus,
)
from saas_suite.schemas.restaurant import (
    TableCreate,
    TableResponse,
    TableReservationCreate,
    TableReservationResponse,
)
from saas_suite.api.deps import audit_mutation, get_repository, require
from saas_suite.core.context import Principal
from saas_suite.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from saas_suite.core.scoping import TenantScopedRepository
from saas_suite.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/restaurant", tags=["restaurant"], dependencies=[Depends(audit_mutation)])

FREED_STATUSES = (TableReservationStatus.CANCELLED.value, TableReservationStatus.NO_SHOW.value)


def snap_duration(duration: Optional[int]) -> int:
    """Unsupported or missing durations fall back to the default slot."""
    return duration if duration in ALLOWED_DURATIONS else DEFAULT_DURATION


def _reservation_response(reservation: RestaurantReservation) -> TableReservationResponse:
    response = TableReservationResponse.model_validate(reservation)
    if reservation.table is not None:
        response.table_number = reservation.table.number
    return response


def _ensure_table_free(
    repo: TenantScopedRepository,
    table_id: str,
    starts_at: dt.datetime,
    duration: int,
) -> None:
    ends_at = starts_at + timedelta(minutes=duration)
    existing = repo.find_many(
        RestaurantReservation,
        RestaurantReservation.status.notin_(FREED_STATUSES),
        table_id=table_id,
        date=starts_at.date(),
    )
    for other in existing:
        if starts_at < other.ends_at and other.starts_at < ends_at:
            raise InvalidInputError(
                f"Table is already reserved from {other.time.strftime('%H:%M')} "
                f"for {other.duration} minutes"
            )


# ============================================================================
# TABLES
# ============================================================================

@router.get("/tables", response_model=list[TableResponse])
async def list_tables(
    context: Principal = Depends(require("tables:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    return repo.find_many(RestaurantTable, order_by=[RestaurantTable.number])


@router.post("/tables", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
async def create_table(
    table_data: TableCreate,
    context: Principal = Depends(require("tables:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    if repo.find_first(RestaurantTable, number=table_data.number):
        raise ConflictError(f"Table {table_data.number} already exists", code="DUPLICATE_TABLE")

    with repo.transaction():
        table = repo.create(RestaurantTable, **table_data.model_dump())

    logger.info(f"Table {table.number} created in tenant {context.tenant_id}")
    return table


# ============================================================================
# RESERVATIONS
# ============================================================================

@router.get("/reservations", response_model=list[TableReservationResponse])
async def list_reservations(
    date: Optional[dt.date] = None,
    reservation_status: Optional[TableReservationStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    context: Principal = Depends(require("reservations:read")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Reservations for one service day, in seating order.

    `search` matches guest name or phone, case-insensitively.
    """
    if date is None:
        raise InvalidInputError("Query parameter 'date' is required")

    filters = {"date": date}
    if reservation_status:
        filters["status"] = reservation_status.value

    criteria = []
    if search:
        pattern = f"%{search}%"
        criteria.append(or_(
            RestaurantReservation.guest_name.ilike(pattern),
            RestaurantReservation.guest_phone.ilike(pattern),
        ))

    reservations = repo.find_many(
        RestaurantReservation,
        *criteria,
        order_by=[RestaurantReservation.time],
        **filters
    )
    return [_reservation_response(r) for r in reservations]


@router.post("/reservations", response_model=TableReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: TableReservationCreate,
    context: Principal = Depends(require("reservations:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    """
    Book a table.

    The table is optional (walk-in lists, waitlists); when given it must
    belong to the tenant and be free for the whole slot.
    """
    duration = snap_duration(reservation_data.duration)

    table_id = None
    if reservation_data.table_id:
        table = repo.find_unique(RestaurantTable, reservation_data.table_id)
        if not table:
            raise NotFoundError("Table", reservation_data.table_id)
        table_id = table.id
        _ensure_table_free(
            repo,
            table_id,
            dt.datetime.combine(reservation_data.date, reservation_data.time),
            duration,
        )

    with repo.transaction():
        reservation = repo.create(
            RestaurantReservation,
            table_id=table_id,
            guest_name=reservation_data.guest_name,
            guest_phone=reservation_data.guest_phone,
            guest_email=reservation_data.guest_email,
            guest_count=reservation_data.guest_count,
            date=reservation_data.date,
            time=reservation_data.time,
            duration=duration,
            status=TableReservationStatus.CONFIRMED.value,
            notes=reservation_data.notes,
        )

    logger.info(
        f"Table reservation {reservation.id} for {reservation.date} {reservation.time}",
        extra={"tenant_id": context.tenant_id}
    )
    return _reservation_response(reservation)


@router.post("/reservations/{reservation_id}/cancel", response_model=TableReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    context: Principal = Depends(require("reservations:write")),
    repo: TenantScopedRepository = Depends(get_repository)
):
    with repo.transaction():
        reservation = repo.update(
            RestaurantReservation,
            reservation_id,
            status=TableReservationStatus.CANCELLED.value,
        )
    if not reservation:
        raise NotFoundError("Reservation", reservation_id)

    logger.info(f"Table reservation {reservation_id} cancelled by {context.user_id}")
    return _reservation_response(reservation)
