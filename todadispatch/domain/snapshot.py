"""
Versioned snapshot schema.

A snapshot is the whole fleet state as plain records: roster, queue
(by plate), today's trips, archive, broadcast message and counter.
Vehicles and trips refer to each other by plate / trip id only; the
coordinator rebuilds the object links on load.

Serialized as JSON through pydantic so stored snapshots stay
human-inspectable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .enums import TripStatus, VehicleStatus

SCHEMA_VERSION = 1


class OperatorRecord(BaseModel):
    name: str
    contact: str
    is_available: bool = False


class VehicleRecord(BaseModel):
    plate: str
    operator: OperatorRecord
    fare_rate: float = Field(gt=0)
    status: VehicleStatus = VehicleStatus.UNAVAILABLE
    current_trip_id: Optional[int] = None


class TripRecord(BaseModel):
    id: int = Field(ge=1)
    day: int = Field(1, ge=1)
    vehicle_plate: str
    operator_name: str
    passenger_count: int = Field(ge=1)
    origin: str
    destination: str
    total_fare: float
    status: TripStatus
    departed_at: Optional[datetime] = None
    arrived_at: Optional[datetime] = None
    service_date: Optional[str] = None


class LedgerRecord(BaseModel):
    next_trip_id: int = Field(1, ge=1)
    day: int = Field(1, ge=1)
    today: list[TripRecord] = []
    archive: list[TripRecord] = []


class FleetSnapshot(BaseModel):
    schema_version: Literal[1] = SCHEMA_VERSION
    vehicles: list[VehicleRecord] = []
    queue: list[str] = []
    ledger: LedgerRecord = Field(default_factory=LedgerRecord)
    broadcast_message: Optional[str] = None
