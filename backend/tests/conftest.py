"""
PalmPay Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Unit tests (no database):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    └── fake_clock:      controllable time source for the enrollment cache

    API tests (fresh in-memory SQLite per test):
    ├── test_engine:     aiosqlite engine with every table created
    ├── session_factory: sessions bound to that engine (seeding, assertions)
    ├── token_cache:     enrollment cache on fake_clock, swapped into palm_service
    └── client:          HTTPX AsyncClient with get_db_session overridden
"""

import os

# Must be set before palmpay.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import palmpay.models  # noqa: F401
from palmpay.database import Base, get_db_session
from palmpay.enrollment import EnrollmentTokenCache
from palmpay.main import app
from palmpay.services.palm_service import palm_service


class FakeClock:
    """Callable returning a settable epoch time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_user(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
            result = await user_service.get_user(mock_db_session, user_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def fake_clock():
    return FakeClock()


# ══════════════════════════════════════════════════════════════════════════
# API Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_engine():
    # StaticPool: every session shares the one in-memory database
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def token_cache(fake_clock, monkeypatch):
    cache = EnrollmentTokenCache(ttl=600, clock=fake_clock)
    monkeypatch.setattr(palm_service, "cache", cache)
    return cache


@pytest_asyncio.fixture
async def client(session_factory, token_cache) -> AsyncGenerator[AsyncClient, None]:
    """
    FastAPI test client with the DB dependency overridden.

    The override keeps the production commit/rollback behaviour so that
    a failed request leaves nothing behind.
    """
    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Seeding helpers ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def device(client):
    """A registered kiosk: {"id", "name", "location", "apiToken", ...}."""
    response = await client.post(
        "/api/palm/register",
        json={"name": "Front Counter", "location": "Store 1"},
    )
    assert response.status_code == 200
    return response.json()["device"]


@pytest.fixture
def device_headers(device):
    return {"Authorization": f"Bearer {device['apiToken']}"}


@pytest_asyncio.fixture
async def products(client):
    """Two active products: coffee (2.50) and sandwich (7.00)."""
    created = []
    for payload in (
        {"name": "Coffee", "price": "2.50", "stock": 100},
        {"name": "Sandwich", "price": "7.00", "stock": 20},
    ):
        response = await client.post("/api/products", json=payload)
        assert response.status_code == 200
        created.append(response.json()["product"])
    return created


@pytest_asyncio.fixture
async def user(client):
    response = await client.post(
        "/api/v1/users",
        json={"displayName": "Alice Smith", "email": "alice@example.com"},
    )
    assert response.status_code == 200
    return response.json()["user"]
