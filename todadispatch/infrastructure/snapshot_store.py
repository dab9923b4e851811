"""
Load / save boundary between the coordinator and the snapshot table.

``load`` never returns partial state: any problem with the stored
snapshot (missing, unparsable, wrong schema version, dangling references,
broken invariants) is logged and answered with a fresh, empty fleet.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .repositories import SnapshotRepository
from todadispatch.domain.coordinator import DispatchCoordinator
from todadispatch.domain.errors import PersistenceError
from todadispatch.domain.snapshot import SCHEMA_VERSION, FleetSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        coordinator_kwargs: Optional[dict[str, Any]] = None,
        today: Callable[[], date] = date.today,
    ):
        self.session_factory = session_factory
        self.coordinator_kwargs = coordinator_kwargs or {}
        self.today = today

    def empty(self) -> DispatchCoordinator:
        return DispatchCoordinator(**self.coordinator_kwargs)

    async def load(self, service_date: str | None = None) -> DispatchCoordinator:
        """Load the latest (or the given day's) snapshot, else an empty fleet."""
        try:
            return await self._load(service_date)
        except PersistenceError as exc:
            logger.error("Could not load snapshot (%s); starting a new, empty fleet", exc)
            return self.empty()

    async def _load(self, service_date: str | None) -> DispatchCoordinator:
        try:
            async with self.session_factory() as session:
                repo = SnapshotRepository(session)
                row = (
                    await repo.get_by_date(service_date)
                    if service_date
                    else await repo.get_latest()
                )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"snapshot table unreadable: {exc}") from exc

        if row is None:
            logger.info("No saved fleet found. Starting a new system.")
            return self.empty()

        try:
            snapshot = FleetSnapshot.model_validate_json(row.payload)
        except SchemaError as exc:
            raise PersistenceError(
                f"snapshot {row.service_date} is corrupt: {exc.error_count()} error(s)"
            ) from exc

        coordinator = DispatchCoordinator.from_snapshot(
            snapshot, **self.coordinator_kwargs
        )
        logger.info("Fleet loaded from snapshot %s", row.service_date)
        return coordinator

    async def save(
        self, coordinator: DispatchCoordinator, service_date: str | None = None
    ) -> str:
        """Persist the fleet under *service_date* (default: today).  Returns the label."""
        label = service_date or self.today().isoformat()
        payload = coordinator.to_snapshot().model_dump_json()
        try:
            async with self.session_factory() as session:
                await SnapshotRepository(session).upsert(label, payload, SCHEMA_VERSION)
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"could not save snapshot {label}: {exc}") from exc
        logger.info("Fleet saved to snapshot %s", label)
        return label

    async def available_dates(self) -> list[str]:
        async with self.session_factory() as session:
            return await SnapshotRepository(session).list_dates()
