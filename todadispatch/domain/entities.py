"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Trip``: enforces valid lifecycle transitions
  (ACTIVE -> COMPLETED).
- ``Vehicle`` owns its ``Operator`` (1:1) and holds a reference to its
  current trip; trips refer back to the vehicle by plate only, so the
  object graph never needs identity-preserving serialization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .enums import TRIP_TRANSITIONS, TripStatus, VehicleStatus
from .errors import InvalidStateTransition


def normalize_plate(plate: str) -> str:
    return plate.strip().upper()


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Operator:
    name: str
    contact: str
    is_available: bool = False

    @property
    def contact_info(self) -> str:
        return f"Name: {self.name}, Contact: {self.contact}"


@dataclass
class Trip:
    id: int
    vehicle_plate: str
    operator_name: str
    passenger_count: int
    origin: str
    destination: str
    total_fare: float
    status: TripStatus = TripStatus.ACTIVE
    departed_at: Optional[datetime] = None
    arrived_at: Optional[datetime] = None
    day: int = 1  # ledger day the id was issued in
    service_date: Optional[str] = None  # set when archived

    @property
    def active(self) -> bool:
        return self.status == TripStatus.ACTIVE

    def transition_to(self, new_status: TripStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = TRIP_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition trip #{self.id} from {self.status.value} "
                f"to {new_status.value}"
            )
        self.status = new_status

    def complete(self, at: datetime) -> bool:
        """Mark the trip arrived.  Returns False if it was already completed."""
        if not self.active:
            return False
        self.transition_to(TripStatus.COMPLETED)
        self.arrived_at = at
        return True


@dataclass
class Vehicle:
    plate: str
    operator: Operator
    fare_rate: float = 20.0
    status: VehicleStatus = VehicleStatus.UNAVAILABLE
    current_trip: Optional[Trip] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.plate = normalize_plate(self.plate)

    @property
    def has_active_trip(self) -> bool:
        return self.current_trip is not None and self.current_trip.active

    def mark_waiting(self) -> None:
        self.status = VehicleStatus.WAITING
        self.operator.is_available = True

    def mark_unavailable(self) -> None:
        self.status = VehicleStatus.UNAVAILABLE
        self.operator.is_available = False

    def assign(self, trip: Trip) -> None:
        self.current_trip = trip
        self.status = VehicleStatus.ON_TRIP
        self.operator.is_available = True

    def release_trip(self) -> None:
        self.current_trip = None

    def __str__(self) -> str:
        return f"{self.plate} ({self.operator.name})"
