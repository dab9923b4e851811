"""FastAPI dependency injection helpers."""

from fastapi import Request

from todadispatch.domain.coordinator import DispatchCoordinator
from todadispatch.infrastructure.snapshot_store import SnapshotStore


def get_coordinator(request: Request) -> DispatchCoordinator:
    """The fleet loaded at startup; one coordinator per process."""
    return request.app.state.coordinator


def get_store(request: Request) -> SnapshotStore:
    return request.app.state.store
