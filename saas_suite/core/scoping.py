"""
Tenant-Scoped Data Access

TenantScopedRepository wraps one SQLAlchemy session for one tenant. Route
handlers build it once per request and never query scoped models on the
raw session, so the tenant filter cannot be forgotten at a call site.

Rules for models in SCOPED_MODELS:
- reads (find_many, find_first, count, aggregate) get `tenant_id == current`
  added to the caller's criteria
- find_unique runs the plain primary-key lookup, then hides rows owned by
  another tenant (returns None)
- create/create_many stamp tenant_id on every record, whatever the payload says
- update/delete (single and bulk) filter by tenant, so a foreign row is a
  zero-row no-op rather than an error

Models outside SCOPED_MODELS pass through untouched. The list is explicit;
a new business model must be added here to be protected. Code that really
needs to see every tenant (the super-admin console) goes through the named
escape hatch, unscoped_session() or repo.unscoped(), which logs each use.
"""
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional
import logging

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from saas_suite.core.exceptions import TenantIsolationError
from saas_suite.models import (
    AuditLog,
    Expense,
    HotelReservation,
    HotelRoom,
    InventoryItem,
    InventoryLedger,
    Product,
    RestaurantReservation,
    RestaurantTable,
    SalonService,
    User,
)
from saas_suite.utils.logging import log_security_event

logger = logging.getLogger(__name__)

SCOPED_MODELS = frozenset({
    User,
    HotelRoom,
    HotelReservation,
    InventoryItem,
    InventoryLedger,
    Expense,
    RestaurantTable,
    RestaurantReservation,
    SalonService,
    Product,
    AuditLog,
})

TENANT_COLUMN = "tenant_id"


def is_scoped(model: type) -> bool:
    return model in SCOPED_MODELS


def _primary_key(model: type):
    return inspect(model).primary_key[0]


def _without_tenant(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if key != TENANT_COLUMN}


def unscoped_session(session: Session, reason: str, **details) -> Session:
    """Hand out the unfiltered session, leaving a security log entry behind."""
    log_security_event("unscoped_access", {"reason": reason, **details}, logger)
    return session


class TenantScopedRepository:
    """
    Data access for one tenant.

    Writes are flushed, not committed; call commit() or use transaction()
    to make them durable.
    """

    def __init__(self, session: Session, tenant_id: str):
        if not tenant_id:
            raise ValueError("tenant_id is required for scoped data access")
        self._session = session
        self._tenant_id = tenant_id

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    def _query(self, model: type, criteria: Iterable = (), filters: Optional[Dict[str, Any]] = None):
        query = self._session.query(model)
        if is_scoped(model):
            query = query.filter(getattr(model, TENANT_COLUMN) == self._tenant_id)
        criteria = tuple(criteria)
        if criteria:
            query = query.filter(*criteria)
        if filters:
            query = query.filter_by(**filters)
        return query

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_many(
        self,
        model: type,
        *criteria,
        order_by: Optional[Iterable] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        **filters,
    ) -> List[Any]:
        query = self._query(model, criteria, filters)
        if order_by is not None:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def find_first(self, model: type, *criteria, order_by: Optional[Iterable] = None, **filters) -> Optional[Any]:
        query = self._query(model, criteria, filters)
        if order_by is not None:
            query = query.order_by(*order_by)
        return query.first()

    def find_unique(self, model: type, identifier: Any) -> Optional[Any]:
        """
        Primary-key lookup.

        The lookup itself is unfiltered; a row owned by another tenant is
        reported as missing so ids cannot be probed across tenants.
        """
        row = self._session.get(model, identifier)
        if row is None:
            return None
        if is_scoped(model) and getattr(row, TENANT_COLUMN) != self._tenant_id:
            logger.debug(
                "Hid %s %s from tenant %s",
                model.__name__, identifier, self._tenant_id,
                extra={"tenant_id": self._tenant_id},
            )
            return None
        return row

    def count(self, model: type, *criteria, **filters) -> int:
        return self._query(model, criteria, filters).count()

    def aggregate(self, model: type, aggregates: Dict[str, Any], *criteria, **filters) -> Dict[str, Any]:
        """
        Run labelled aggregate expressions over the tenant's rows.

            repo.aggregate(Expense, {"total": func.sum(Expense.amount)}, Expense.is_paid.is_(False))
        """
        columns = [expression.label(label) for label, expression in aggregates.items()]
        query = self._session.query(*columns).select_from(model)
        if is_scoped(model):
            query = query.filter(getattr(model, TENANT_COLUMN) == self._tenant_id)
        if criteria:
            query = query.filter(*criteria)
        if filters:
            query = query.filter_by(**filters)
        row = query.one()
        return dict(row._mapping)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, model: type, **data) -> Any:
        if is_scoped(model):
            data[TENANT_COLUMN] = self._tenant_id
        row = model(**data)
        self._session.add(row)
        self._session.flush()
        return row

    def create_many(self, model: type, records: Iterable[Dict[str, Any]]) -> List[Any]:
        rows = []
        for record in records:
            record = dict(record)
            if is_scoped(model):
                record[TENANT_COLUMN] = self._tenant_id
            rows.append(model(**record))
        self._session.add_all(rows)
        self._session.flush()
        return rows

    def update(self, model: type, identifier: Any, **changes) -> Optional[Any]:
        """Update one row; returns None when the tenant has no such row."""
        row = self._query(model, (_primary_key(model) == identifier,)).first()
        if row is None:
            return None
        for field, value in _without_tenant(changes).items():
            setattr(row, field, value)
        self._session.flush()
        return row

    def update_many(self, model: type, values: Dict[str, Any], *criteria, **filters) -> int:
        """Bulk update; returns the number of affected rows."""
        values = _without_tenant(values)
        if not values:
            return 0
        return self._query(model, criteria, filters).update(values, synchronize_session="fetch")

    def delete(self, model: type, identifier: Any) -> bool:
        row = self._query(model, (_primary_key(model) == identifier,)).first()
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def delete_many(self, model: type, *criteria, **filters) -> int:
        return self._query(model, criteria, filters).delete(synchronize_session="fetch")

    def unscoped(self, reason: str) -> Session:
        """Raw session for cross-tenant work. Logged every time."""
        return unscoped_session(self._session, reason, tenant_id=self._tenant_id)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()

    def refresh(self, row: Any) -> Any:
        self._session.refresh(row)
        return row

    @contextmanager
    def transaction(self) -> Iterator["TenantScopedRepository"]:
        """Group several writes; commit on success, roll back and re-raise on error."""
        try:
            yield self
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise


@event.listens_for(Session, "before_flush")
def _forbid_tenant_reassignment(session, flush_context, instances):
    """A scoped row's tenant_id is fixed once it has been persisted."""
    for row in session.dirty:
        if not is_scoped(type(row)):
            continue
        history = inspect(row).attrs.tenant_id.history
        previous = [value for value in history.deleted if value is not None]
        if previous and list(history.added) != previous:
            log_security_event(
                "tenant_isolation_violation",
                {"model": type(row).__name__, "from_tenant": previous[0], "to_tenant": history.added},
                logger,
            )
            raise TenantIsolationError("Records cannot be moved to another tenant")
