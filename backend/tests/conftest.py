"""Pytest configuration and fixtures for branch onboarding tests.

Each test gets its own SQLite database file (aiosqlite driver) with all
tables created from the ORM metadata, so no external services are needed.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, get_db
from app.main import app
from app.models import Branch  # noqa: F401  (also registers every table on Base.metadata)


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a fresh database with every table."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden database dependency."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest_asyncio.fixture
async def test_branch(db_session: AsyncSession) -> Branch:
    """Create a regular branch with no setup process."""
    branch = Branch(id="B1", code="BR-001", name="Branch One", branch_type="branch")
    db_session.add(branch)
    await db_session.commit()
    return branch


@pytest.fixture
def step_payloads() -> dict:
    """A valid `data` object for every setup step, keyed by step key."""
    return {
        "basic_info": {
            "operatingHours": [
                {"day": "Monday", "open": "08:00", "close": "22:00", "isOpen": True},
                {"day": "Tuesday", "open": "08:00", "close": "22:00", "isOpen": True},
                {"day": "Wednesday", "open": "08:00", "close": "22:00", "isOpen": True},
                {"day": "Thursday", "open": "08:00", "close": "22:00", "isOpen": True},
                {"day": "Friday", "open": "08:00", "close": "22:00", "isOpen": True},
                {"day": "Saturday", "open": "08:00", "close": "23:00", "isOpen": True},
                {"day": "Sunday", "open": "09:00", "close": "21:00", "isOpen": False},
            ],
        },
        "modules": {
            "modules": [
                {"code": "tables", "isEnabled": False},
                {"code": "reservations", "isEnabled": True},
            ],
        },
        "users": {
            "users": [
                {"name": "Rina", "email": "rina@example.com", "role": "branch_manager", "phone": "+6281234567"},
                {"name": "Budi", "email": "budi@example.com", "role": "cashier"},
            ],
        },
        "inventory": {"syncFromHQ": True, "lowStockThreshold": 5, "autoReorder": False},
        "payment": {
            "paymentMethods": [
                {"code": "cash", "name": "Cash", "enabled": True},
                {"code": "qris", "name": "QRIS", "enabled": True},
                {"code": "transfer", "name": "Bank transfer", "enabled": False},
            ],
        },
        "printer": {
            "printers": [
                {"name": "Cashier printer", "type": "receipt", "ip": "192.168.1.50", "port": "9100", "isDefault": True},
            ],
        },
    }


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "integration: Integration tests")
