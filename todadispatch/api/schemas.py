"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from todadispatch.domain.coordinator import FleetStats
from todadispatch.domain.entities import Trip, Vehicle
from todadispatch.domain.enums import AfterTrip, TripStatus, VehicleStatus
from todadispatch.domain.ledger import DayEndSummary


# ── Requests ──────────────────────────────────────────────────────────


class VehicleCreateRequest(BaseModel):
    plate: str = Field(..., max_length=20)
    operator_name: str = Field(..., max_length=120)
    contact: str = Field(..., max_length=40)
    fare_rate: Optional[float] = Field(
        None, gt=0, description="Fare per passenger; defaults to the terminal rate."
    )


class VehicleUpdateRequest(BaseModel):
    plate: Optional[str] = Field(None, max_length=20)
    operator_name: Optional[str] = Field(None, max_length=120)
    contact: Optional[str] = Field(None, max_length=40)
    fare_rate: Optional[float] = Field(None, gt=0)


class TripStartRequest(BaseModel):
    plate: str
    passenger_count: int = Field(1, ge=1)
    origin: str = Field(..., max_length=120)
    destination: str = Field(..., max_length=120)
    fare_per_passenger: Optional[float] = Field(
        None, gt=0, description="Overrides the vehicle's fare rate for this trip."
    )


class TripEndRequest(BaseModel):
    then: AfterTrip = Field(
        AfterTrip.REQUEUE,
        description="REQUEUE keeps the driver on duty at the end of the queue.",
    )


class BroadcastRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=500)


# ── Responses ─────────────────────────────────────────────────────────


class VehicleResponse(BaseModel):
    plate: str
    operator_name: str
    contact: str
    operator_available: bool
    fare_rate: float
    status: VehicleStatus
    current_trip_id: Optional[int] = None

    @classmethod
    def of(cls, vehicle: Vehicle) -> "VehicleResponse":
        return cls(
            plate=vehicle.plate,
            operator_name=vehicle.operator.name,
            contact=vehicle.operator.contact,
            operator_available=vehicle.operator.is_available,
            fare_rate=vehicle.fare_rate,
            status=vehicle.status,
            current_trip_id=vehicle.current_trip.id if vehicle.current_trip else None,
        )


class QueueEntryResponse(BaseModel):
    position: int
    vehicle: VehicleResponse


class ContactResponse(BaseModel):
    plate: str
    contact_info: str


class TripResponse(BaseModel):
    id: int
    vehicle_plate: str
    operator_name: str
    passenger_count: int
    origin: str
    destination: str
    total_fare: float
    status: TripStatus
    active: bool
    departed_at: Optional[datetime] = None
    arrived_at: Optional[datetime] = None
    service_date: Optional[str] = None

    @classmethod
    def of(cls, trip: Trip) -> "TripResponse":
        return cls(
            id=trip.id,
            vehicle_plate=trip.vehicle_plate,
            operator_name=trip.operator_name,
            passenger_count=trip.passenger_count,
            origin=trip.origin,
            destination=trip.destination,
            total_fare=trip.total_fare,
            status=trip.status,
            active=trip.active,
            departed_at=trip.departed_at,
            arrived_at=trip.arrived_at,
            service_date=trip.service_date,
        )


class TripStartResponse(BaseModel):
    trip: TripResponse
    warnings: list[str] = []


class DayEndResponse(BaseModel):
    service_date: str
    archived_count: int
    total_fares: float
    counter_reset: bool
    remaining_active: int
    report: str

    @classmethod
    def of(cls, summary: DayEndSummary) -> "DayEndResponse":
        return cls(
            service_date=summary.service_date,
            archived_count=summary.archived_count,
            total_fares=summary.total_fares,
            counter_reset=summary.counter_reset,
            remaining_active=summary.remaining_active,
            report=summary.report,
        )


class BroadcastResponse(BaseModel):
    message: str


class StatsResponse(BaseModel):
    registered: int
    off_duty: int
    waiting: int
    on_trip: int
    active_trips: int
    completed_today: int
    archived: int
    next_trip_id: int

    @classmethod
    def of(cls, stats: FleetStats, next_trip_id: int) -> "StatsResponse":
        return cls(
            registered=stats.registered,
            off_duty=stats.off_duty,
            waiting=stats.waiting,
            on_trip=stats.on_trip,
            active_trips=stats.active_trips,
            completed_today=stats.completed_today,
            archived=stats.archived,
            next_trip_id=next_trip_id,
        )


class SnapshotSavedResponse(BaseModel):
    service_date: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
