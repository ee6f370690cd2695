"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own engine and a connection-level transaction that
  rolls back after the test.
- ``TEST_DATABASE_URL`` selects the database; it defaults to an in-memory
  SQLite database so the suite runs without a server.
- Sessions opened by jobs and background tasks share the test connection,
  so their commits stay inside the rolled-back transaction.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from inkbook.auth.jwt import create_access_token
from inkbook.core.clock import FixedClock, get_clock
from inkbook.database import Base, get_db, get_session_factory
from inkbook.main import app
from inkbook.models.booking import Booking
from inkbook.models.user import User

_test_db_url = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

# Wednesday mid-morning, far from any DST change.
NOW = datetime(2026, 3, 11, 10, 0, 0)


def _make_engine():
    if _test_db_url.startswith("sqlite"):
        return create_async_engine(
            _test_db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(_test_db_url, echo=False, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Per-test: fresh schema and transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create an engine with all tables; drop them afterwards."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def connection(test_engine):
    """A connection wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as conn:
        transaction = await conn.begin()
        try:
            yield conn
        finally:
            await transaction.rollback()


@pytest_asyncio.fixture
async def db_session(connection) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session joined to the test transaction."""
    session = AsyncSession(bind=connection, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def session_factory(connection) -> async_sessionmaker[AsyncSession]:
    """Factory for the independent sessions used by sweeps and messaging."""
    return async_sessionmaker(bind=connection, expire_on_commit=False)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    clock: FixedClock,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB and a pinned clock."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users and tokens
# ---------------------------------------------------------------------------


async def _create_user(db_session: AsyncSession, role: str = "client", is_active: bool = True) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        name=f"Test {role.capitalize()}",
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


async def _create_booking(db_session: AsyncSession, client: User, artist: User, **fields) -> Booking:
    fields.setdefault("status", "pending")
    fields.setdefault("subject", "Test tattoo")
    fields.setdefault("created_at", NOW)
    fields.setdefault("updated_at", fields["created_at"])
    booking = Booking(client_id=client.id, artist_id=artist.id, **fields)
    db_session.add(booking)
    await db_session.flush()
    await db_session.refresh(booking)
    return booking


def auth_headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest_asyncio.fixture
async def test_client_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "client")


@pytest_asyncio.fixture
async def test_artist(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "artist")


@pytest_asyncio.fixture
async def outsider(db_session: AsyncSession) -> User:
    """A client with no part in the bookings under test."""
    return await _create_user(db_session, "client")


@pytest.fixture
def client_headers(test_client_user: User) -> dict[str, str]:
    return auth_headers_for(test_client_user)


@pytest.fixture
def artist_headers(test_artist: User) -> dict[str, str]:
    return auth_headers_for(test_artist)


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory: ``await make_user("artist")`` creates a user directly in the DB."""

    async def _make(role: str = "client", is_active: bool = True) -> User:
        return await _create_user(db_session, role, is_active)

    return _make


@pytest.fixture
def make_booking(db_session: AsyncSession):
    """Factory inserting a booking row as-is, bypassing the lifecycle rules."""

    async def _make(client: User, artist: User, **fields) -> Booking:
        return await _create_booking(db_session, client, artist, **fields)

    return _make


@pytest.fixture
def headers_for():
    """Authorization headers for any user."""
    return auth_headers_for
