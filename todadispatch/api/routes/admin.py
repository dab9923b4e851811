"""
Admin / observability endpoints
===============================

POST /api/v1/admin/end-of-day -- archive completed trips, maybe reset the counter
GET  /api/v1/admin/broadcast  -- current announcement
PUT  /api/v1/admin/broadcast  -- post an announcement (empty clears it)
GET  /api/v1/admin/stats      -- dashboard counters
POST /api/v1/admin/snapshot   -- save the fleet now
GET  /api/v1/admin/health     -- simple health check
"""

from fastapi import APIRouter, Depends, Request

from todadispatch.api.dependencies import get_coordinator, get_store
from todadispatch.api.middleware import limiter
from todadispatch.api.schemas import (
    BroadcastRequest,
    BroadcastResponse,
    DayEndResponse,
    HealthResponse,
    SnapshotSavedResponse,
    StatsResponse,
)
from todadispatch.domain.coordinator import DispatchCoordinator
from todadispatch.infrastructure.snapshot_store import SnapshotStore

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/end-of-day",
    response_model=DayEndResponse,
    summary="Run the end-of-day report",
)
@limiter.limit("10/minute")
async def end_of_day(
    request: Request,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return DayEndResponse.of(fleet.end_of_day())


@router.get("/broadcast", response_model=BroadcastResponse, summary="Current announcement")
@limiter.limit("100/minute")
async def get_broadcast(
    request: Request,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return BroadcastResponse(message=fleet.broadcast_message)


@router.put("/broadcast", response_model=BroadcastResponse, summary="Post an announcement")
@limiter.limit("100/minute")
async def set_broadcast(
    request: Request,
    body: BroadcastRequest,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return BroadcastResponse(message=fleet.set_broadcast_message(body.message))


@router.get("/stats", response_model=StatsResponse, summary="Dashboard counters")
@limiter.limit("100/minute")
async def stats(
    request: Request,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return StatsResponse.of(fleet.stats(), fleet.next_trip_id)


@router.post(
    "/snapshot",
    response_model=SnapshotSavedResponse,
    summary="Save the fleet snapshot now",
)
@limiter.limit("10/minute")
async def save_snapshot(
    request: Request,
    fleet: DispatchCoordinator = Depends(get_coordinator),
    store: SnapshotStore = Depends(get_store),
):
    return SnapshotSavedResponse(service_date=await store.save(fleet))


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
