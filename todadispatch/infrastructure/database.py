"""
Async SQLAlchemy engine and session factory.

Defaults to SQLite via ``aiosqlite`` for a single-terminal install; point
``TODA_DATABASE_URL`` at ``postgresql+asyncpg://...`` for a shared server.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from todadispatch.config import settings

engine = create_async_engine(settings.database_url, echo=False)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


async def init_db() -> None:
    """Create missing tables (Alembic remains the path for schema changes)."""
    from . import models  # noqa: F401  -- registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
