"""
Database Configuration and Session Management

One SQLAlchemy engine (and therefore one connection pool) per process.
The engine is built lazily on first use so importing the package never
opens connections, and uvicorn's reloader cannot leave a second pool behind.

NOTE: Sessions handed out here are raw. Tenant isolation is applied by
wrapping the session in a TenantScopedRepository (see core/scoping.py).
"""
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from saas_suite.config import get_settings
import logging

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def _set_connection_timezone(dbapi_connection, connection_record):
    """Set connection-level configuration on new connections."""
    # SQLite doesn't support SET TIME ZONE, so only PostgreSQL gets it
    if get_settings().DATABASE_URL.startswith("postgresql"):
        cursor = dbapi_connection.cursor()
        cursor.execute("SET TIME ZONE 'UTC'")
        cursor.close()
    logger.debug("New database connection established")


@lru_cache()
def get_engine() -> Engine:
    """
    Process-wide engine accessor.

    Pool sizing only applies to server databases; SQLite uses its own pool.
    """
    settings = get_settings()
    kwargs = {"pool_pre_ping": True, "echo": settings.DEBUG}
    if not settings.DATABASE_URL.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )

    engine = create_engine(settings.DATABASE_URL, **kwargs)
    event.listen(engine, "connect", _set_connection_timezone)
    logger.info("Database engine created")
    return engine


@lru_cache()
def get_session_factory() -> sessionmaker:
    # expire_on_commit=False lets handlers serialize rows after commit
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=get_engine(),
        expire_on_commit=False,
    )


def get_db() -> Iterator[Session]:
    """
    Dependency function that provides a database session.

    The session is closed after the request completes. Uncommitted work
    is rolled back by close().
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def dispose_engine() -> None:
    """Release pooled connections on shutdown."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
        logger.info("Database engine disposed")


def init_db() -> None:
    """
    Create all tables.

    Development and test convenience only; schema migrations are managed
    outside this application.
    """
    # Import models so every table is registered on Base.metadata
    import saas_suite.models  # noqa: F401

    logger.warning("init_db() called - creating tables directly")
    Base.metadata.create_all(bind=get_engine())
