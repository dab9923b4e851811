"""
Trip endpoints
==============

POST /api/v1/trips              -- start a trip for a vehicle (201)
GET  /api/v1/trips              -- today's trips (``?active=true|false``)
GET  /api/v1/trips/archive      -- archived trips from previous days
GET  /api/v1/trips/{trip_id}    -- one of today's trips
POST /api/v1/trips/{trip_id}/end -- complete a trip, requeue or release the vehicle
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from todadispatch.api.dependencies import get_coordinator
from todadispatch.api.middleware import limiter
from todadispatch.api.schemas import (
    TripEndRequest,
    TripResponse,
    TripStartRequest,
    TripStartResponse,
)
from todadispatch.domain.coordinator import DispatchCoordinator

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post(
    "",
    status_code=201,
    response_model=TripStartResponse,
    summary="Start a trip",
    responses={
        201: {"description": "Trip started; ``warnings`` lists queue drift."},
        409: {"description": "Vehicle is already on a trip."},
    },
)
@limiter.limit("100/minute")
async def start_trip(
    request: Request,
    body: TripStartRequest,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    result = fleet.start_trip(
        body.plate,
        body.passenger_count,
        body.origin,
        body.destination,
        fare_per_passenger=body.fare_per_passenger,
    )
    return TripStartResponse(trip=TripResponse.of(result.trip), warnings=result.warnings)


@router.get("", response_model=list[TripResponse], summary="Today's trips")
@limiter.limit("100/minute")
async def list_trips(
    request: Request,
    active: Optional[bool] = None,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return [TripResponse.of(t) for t in fleet.todays_trips(active)]


@router.get("/archive", response_model=list[TripResponse], summary="Archived trips")
@limiter.limit("100/minute")
async def list_archive(
    request: Request,
    service_date: Optional[str] = None,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return [
        TripResponse.of(t)
        for t in fleet.archive()
        if service_date is None or t.service_date == service_date
    ]


@router.get("/{trip_id}", response_model=TripResponse, summary="Get one of today's trips")
@limiter.limit("100/minute")
async def get_trip(
    request: Request,
    trip_id: int,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return TripResponse.of(fleet.get_trip(trip_id))


@router.post(
    "/{trip_id}/end",
    response_model=TripResponse,
    summary="Complete a trip",
    description=(
        "Marks the trip arrived.  The vehicle then rejoins the end of the "
        "queue (``REQUEUE``) or goes off duty (``OFF_DUTY``).  Ending a "
        "completed trip is a no-op."
    ),
)
@limiter.limit("100/minute")
async def end_trip(
    request: Request,
    trip_id: int,
    body: Optional[TripEndRequest] = None,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    then = (body or TripEndRequest()).then
    return TripResponse.of(fleet.end_trip(trip_id, then=then))
