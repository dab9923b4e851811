"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
PostgreSQL / Redis.  The snapshot table has no backend-specific columns,
so the production models are used as-is.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from todadispatch.domain.coordinator import DispatchCoordinator
from todadispatch.infrastructure.database import Base
from todadispatch.infrastructure import models  # noqa: F401


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


class FakeClock:
    """Deterministic clock; advances one minute per reading."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 10, 17, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(minutes=1)
        return current


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fleet(clock) -> DispatchCoordinator:
    return DispatchCoordinator(clock=clock)


@pytest.fixture
def on_duty_fleet(fleet) -> DispatchCoordinator:
    """Three registered vehicles, V1 and V2 on duty (in that order)."""
    fleet.register("V1", "Juan", "0917-000-0001")
    fleet.register("V2", "Pedro", "0917-000-0002")
    fleet.register("V3", "Jose", "0917-000-0003")
    fleet.go_on_duty("V1")
    fleet.go_on_duty("V2")
    return fleet


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables, yield the session factory, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield TestSessionFactory

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
