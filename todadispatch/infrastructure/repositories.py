"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

The repository receives an ``AsyncSession`` (unit-of-work) and exposes
snapshot-relevant queries only.  It stores payloads as opaque JSON text;
decoding belongs to ``SnapshotStore``.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import SnapshotModel


class SnapshotRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(
        self, service_date: str, payload: str, schema_version: int
    ) -> SnapshotModel:
        """Insert the day's snapshot, or overwrite it if one exists."""
        row = await self.get_by_date(service_date)
        if row is None:
            row = SnapshotModel(
                service_date=service_date,
                payload=payload,
                schema_version=schema_version,
            )
            self.session.add(row)
        else:
            row.payload = payload
            row.schema_version = schema_version
        await self.session.flush()
        return row

    async def get_by_date(self, service_date: str) -> Optional[SnapshotModel]:
        result = await self.session.execute(
            select(SnapshotModel).where(SnapshotModel.service_date == service_date)
        )
        return result.scalar_one_or_none()

    async def get_latest(self) -> Optional[SnapshotModel]:
        # ISO date labels sort lexically in date order
        result = await self.session.execute(
            select(SnapshotModel)
            .order_by(SnapshotModel.service_date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_dates(self) -> list[str]:
        result = await self.session.execute(
            select(SnapshotModel.service_date).order_by(SnapshotModel.service_date)
        )
        return list(result.scalars().all())
