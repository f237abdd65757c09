"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own database (in-memory SQLite unless
  ``TEST_DATABASE_URL`` points elsewhere) wrapped in an outer transaction.
- The session joins that transaction through SAVEPOINTs, so service code
  that commits still leaves nothing behind after the rollback.
"""

import os
import uuid
from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from casa.auth.jwt import create_token_pair
from casa.database import Base, get_db
from casa.main import app
from casa.models.property import Property
from casa.models.user import UserProfile

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine():
    if not TEST_DATABASE_URL.startswith("sqlite"):
        return create_async_engine(TEST_DATABASE_URL, echo=False, pool_pre_ping=True)

    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN.
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


# ---------------------------------------------------------------------------
# Per-test: fresh schema and transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create an engine with all tables, dropped again after the test."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(
            bind=connection,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: profiles and tokens
# ---------------------------------------------------------------------------


def _unique_phone() -> str:
    return "+9198" + str(uuid.uuid4().int)[:8]


async def make_user(db: AsyncSession, role: str = "guest", **overrides) -> UserProfile:
    """Create a verified profile directly in the DB."""
    user = UserProfile(
        phone=overrides.pop("phone", _unique_phone()),
        full_name=overrides.pop("full_name", "Test Guest"),
        email=overrides.pop("email", f"guest-{uuid.uuid4().hex[:8]}@test.com"),
        role=role,
        is_verified=True,
        **overrides,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


def headers_for(user: UserProfile) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), role=user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> UserProfile:
    return await make_user(db_session)


@pytest_asyncio.fixture
async def auth_headers(test_user: UserProfile) -> dict[str, str]:
    """Return Authorization headers for the test guest."""
    return headers_for(test_user)


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> UserProfile:
    return await make_user(db_session, role="admin", full_name="Casa Admin")


@pytest_asyncio.fixture
async def admin_headers(admin_user: UserProfile) -> dict[str, str]:
    """Return Authorization headers for the admin."""
    return headers_for(admin_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: properties and booking payloads
# ---------------------------------------------------------------------------


async def make_property(db: AsyncSession, **overrides) -> Property:
    """Create a property directly in the DB (The Bandra Cottage by default)."""
    data = {
        "name": "The Bandra Cottage",
        "location": "Bandra West, Mumbai",
        "description": "A restored Portuguese cottage with a walled garden.",
        "guests": 4,
        "bedrooms": 2,
        "bathrooms": 2,
        "price_per_night_paise": 620_000,
        "category": "Heritage",
        "aesthetic": "colonial grandeur",
        "images": ["/images/bandra-cottage/garden.jpg"],
        "features": {"amenities": ["wifi", "garden"], "pet_friendly": True},
    }
    data.update(overrides)
    prop = Property(**data)
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return prop


@pytest_asyncio.fixture
async def test_property(db_session: AsyncSession) -> Property:
    return await make_property(db_session)


def booking_payload(property_id, check_in, check_out, **overrides) -> dict:
    """JSON body for ``POST /api/v1/bookings``."""
    payload = {
        "property_id": str(property_id),
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": 2,
        "pets": 0,
        "guest_details": {
            "full_name": "Test Guest",
            "email": "guest@test.com",
            "phone": "+919812345678",
        },
    }
    payload.update(overrides)
    return payload
