"""Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. The API client swaps
the process engine out through a get_db dependency override, so no test
ever needs a PostgreSQL server.
"""

import os

# Must be set before saas_suite.config is imported anywhere
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import saas_suite.models  # noqa: F401  registers every table on Base.metadata
from saas_suite.config import get_settings
from saas_suite.core.security import create_access_token, get_password_hash
from saas_suite.database import Base, get_db
from saas_suite.main import app
from saas_suite.models import Tenant, User, UserRole

OWNER_PASSWORD = "correct-horse-battery"


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    """Session for arranging and inspecting data directly."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """API client whose requests use the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def settings_env(monkeypatch):
    """Set environment variables for one test and rebuild cached settings."""

    def apply(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()

    yield apply
    get_settings.cache_clear()


def _user(db, tenant, email, role, **extra):
    user = User(
        tenant_id=tenant.id,
        email=email,
        # Only the login tests need a real hash; bcrypt is slow
        hashed_password=extra.pop("hashed_password", "not-a-real-hash"),
        role=role.value,
        **extra,
    )
    db.add(user)
    return user


@pytest.fixture
def seed(db):
    """
    Two hotel tenants plus one brewery tenant.

    tenant_a ("1001", alpha-hotel): owner (real password), staff, viewer
    tenant_b ("2002", bravo-hotel): owner, platform super admin
    brewery  ("3003", copper-kettle): owner
    """
    tenant_a = Tenant(name="Alpha Hotel", slug="alpha-hotel", code="1001", vertical="hotel")
    tenant_b = Tenant(name="Bravo Hotel", slug="bravo-hotel", code="2002", vertical="hotel")
    brewery = Tenant(name="Copper Kettle", slug="copper-kettle", code="3003", vertical="brewery")
    db.add_all([tenant_a, tenant_b, brewery])
    db.flush()

    data = SimpleNamespace(
        tenant_a=tenant_a,
        tenant_b=tenant_b,
        brewery=brewery,
        owner_a=_user(
            db, tenant_a, "owner@alphahotel.com", UserRole.OWNER,
            hashed_password=get_password_hash(OWNER_PASSWORD),
        ),
        staff_a=_user(db, tenant_a, "staff@alphahotel.com", UserRole.STAFF),
        viewer_a=_user(db, tenant_a, "viewer@alphahotel.com", UserRole.VIEWER),
        owner_b=_user(db, tenant_b, "owner@bravohotel.com", UserRole.OWNER),
        super_admin=_user(db, tenant_b, "root@saas-suite.io", UserRole.ADMIN, is_super_admin=True),
        brewer=_user(db, brewery, "brewer@copperkettle.com", UserRole.OWNER),
    )
    db.commit()
    return data


def token_for(user: User) -> str:
    return create_access_token({
        "sub": user.id,
        "tenant_id": user.tenant_id,
        "org_id": user.tenant_id,
        "role": user.role,
        "super_admin": user.is_super_admin,
        "email": user.email,
    })


@pytest.fixture
def auth():
    """auth(user) -> Authorization headers for that user's session."""

    def headers(user: User, **extra) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}", **extra}

    return headers
