"""
Vehicle & queue endpoints
=========================

POST   /api/v1/vehicles                   -- register a vehicle + operator
GET    /api/v1/vehicles                   -- roster (``?search=``, ``?status=``)
GET    /api/v1/vehicles/{plate}           -- one vehicle
PATCH  /api/v1/vehicles/{plate}           -- edit operator / plate / fare
DELETE /api/v1/vehicles/{plate}           -- deregister (idempotent)
POST   /api/v1/vehicles/{plate}/on-duty   -- join the end of the queue
POST   /api/v1/vehicles/{plate}/off-duty  -- leave the queue
GET    /api/v1/vehicles/{plate}/contact   -- operator contact card
GET    /api/v1/queue                      -- waiting queue in dispatch order
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from todadispatch.api.dependencies import get_coordinator
from todadispatch.api.middleware import limiter
from todadispatch.api.schemas import (
    ContactResponse,
    QueueEntryResponse,
    VehicleCreateRequest,
    VehicleResponse,
    VehicleUpdateRequest,
)
from todadispatch.domain.coordinator import DispatchCoordinator
from todadispatch.domain.enums import VehicleStatus

router = APIRouter(tags=["vehicles"])


@router.post(
    "/vehicles",
    status_code=201,
    response_model=VehicleResponse,
    summary="Register a vehicle and its operator",
    responses={409: {"description": "Plate already registered."}},
)
@limiter.limit("100/minute")
async def register_vehicle(
    request: Request,
    body: VehicleCreateRequest,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    vehicle = fleet.register(
        body.plate, body.operator_name, body.contact, fare_rate=body.fare_rate
    )
    return VehicleResponse.of(vehicle)


@router.get(
    "/vehicles",
    response_model=list[VehicleResponse],
    summary="List registered vehicles",
)
@limiter.limit("100/minute")
async def list_vehicles(
    request: Request,
    search: str = "",
    status: Optional[VehicleStatus] = None,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return [VehicleResponse.of(v) for v in fleet.roster(search, status)]


@router.get("/vehicles/{plate}", response_model=VehicleResponse, summary="Get a vehicle")
@limiter.limit("100/minute")
async def get_vehicle(
    request: Request,
    plate: str,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return VehicleResponse.of(fleet.get_vehicle(plate))


@router.patch(
    "/vehicles/{plate}",
    response_model=VehicleResponse,
    summary="Edit operator details, plate or fare",
    description="Rejected with 409 while the vehicle is on an active trip.",
)
@limiter.limit("100/minute")
async def update_vehicle(
    request: Request,
    plate: str,
    body: VehicleUpdateRequest,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    vehicle = fleet.update_vehicle(
        plate,
        operator_name=body.operator_name,
        contact=body.contact,
        new_plate=body.plate,
        fare_rate=body.fare_rate,
    )
    return VehicleResponse.of(vehicle)


@router.delete("/vehicles/{plate}", status_code=204, summary="Deregister a vehicle")
@limiter.limit("100/minute")
async def deregister_vehicle(
    request: Request,
    plate: str,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    fleet.deregister(plate)
    return Response(status_code=204)


@router.post(
    "/vehicles/{plate}/on-duty",
    response_model=VehicleResponse,
    summary="Go on duty (join the end of the waiting queue)",
)
@limiter.limit("100/minute")
async def go_on_duty(
    request: Request,
    plate: str,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return VehicleResponse.of(fleet.go_on_duty(plate))


@router.post(
    "/vehicles/{plate}/off-duty",
    response_model=VehicleResponse,
    summary="Go off duty (leave the waiting queue)",
)
@limiter.limit("100/minute")
async def go_off_duty(
    request: Request,
    plate: str,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return VehicleResponse.of(fleet.go_off_duty(plate))


@router.get(
    "/vehicles/{plate}/contact",
    response_model=ContactResponse,
    summary="Operator contact card",
)
@limiter.limit("100/minute")
async def get_contact(
    request: Request,
    plate: str,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    vehicle = fleet.get_vehicle(plate)
    return ContactResponse(plate=vehicle.plate, contact_info=vehicle.operator.contact_info)


@router.get(
    "/queue",
    response_model=list[QueueEntryResponse],
    summary="Waiting queue in dispatch order",
)
@limiter.limit("100/minute")
async def get_queue(
    request: Request,
    fleet: DispatchCoordinator = Depends(get_coordinator),
):
    return [
        QueueEntryResponse(position=i, vehicle=VehicleResponse.of(v))
        for i, v in enumerate(fleet.waiting_queue(), start=1)
    ]
