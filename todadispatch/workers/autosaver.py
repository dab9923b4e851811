"""
Background Autosave Worker
==========================

Runs every ``AUTOSAVE_INTERVAL_SECONDS`` (default 60 s) and writes the
fleet snapshot for the current date label.

Concurrency safety
------------------
* The snapshot is taken under the coordinator's own lock, so it is always
  a consistent view (no trip created but not yet linked to its vehicle).
* A **Redis distributed lock** per date label ensures only one process
  writes a given day's snapshot at a time.  If Redis is unreachable the
  cycle is logged and skipped; the final save on shutdown does not need
  the lock.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from todadispatch.config import settings
from todadispatch.domain.coordinator import DispatchCoordinator
from todadispatch.infrastructure.locks import DistributedLock
from todadispatch.infrastructure.redis_client import get_redis
from todadispatch.infrastructure.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_autosave_loop(
    coordinator: DispatchCoordinator, store: SnapshotStore
) -> None:
    global _task, _stop_event
    if settings.autosave_interval_seconds <= 0:
        logger.info("Autosave disabled")
        return
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop(coordinator, store))
    logger.info(
        "Autosave worker started (interval=%ds)", settings.autosave_interval_seconds
    )


async def stop_autosave_loop() -> None:
    global _task, _stop_event
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    _task, _stop_event = None, None
    logger.info("Autosave worker stopped")


# ── Internals ─────────────────────────────────────────────────────────


async def _loop(coordinator: DispatchCoordinator, store: SnapshotStore) -> None:
    """Periodic loop: sleep for the interval, then save."""
    assert _stop_event is not None
    while not _stop_event.is_set():
        try:
            await asyncio.wait_for(
                _stop_event.wait(), timeout=settings.autosave_interval_seconds
            )
            break
        except asyncio.TimeoutError:
            pass  # interval elapsed
        try:
            await run_autosave_cycle(coordinator, store)
        except Exception:
            logger.exception("Unhandled error in autosave cycle")


async def run_autosave_cycle(
    coordinator: DispatchCoordinator, store: SnapshotStore
) -> Optional[str]:
    """Save once.  Returns the date label written, or None if skipped."""
    label = store.today().isoformat()
    redis = await get_redis()
    lock = DistributedLock(redis, f"snapshot:{label}", ttl_seconds=30)

    if not await lock.acquire():
        logger.debug("Snapshot lock held by another process – skipping cycle")
        return None

    try:
        return await store.save(coordinator, label)
    finally:
        await lock.release()
