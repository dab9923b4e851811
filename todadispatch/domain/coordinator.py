"""
Dispatch Coordinator  (Facade)
==============================

The only mutation surface for a fleet.  Composes the ``Roster``, the
``WaitingQueue`` and the ``TripLedger`` and keeps them in agreement:

* ``WAITING``     <=> queued and no current trip
* ``ON_TRIP``     <=> not queued and exactly one active current trip
* ``UNAVAILABLE`` <=> not queued and no current trip

Concurrency
-----------
Single writer: every public method runs under one re-entrant lock, and
every check happens before the first write, so a rejected request leaves
no trace.  Read accessors return deep copies taken under the same lock.
"""

from __future__ import annotations

import copy
import logging
import threading
import warnings
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .entities import Operator, Trip, Vehicle, normalize_plate
from .enums import AfterTrip, TripStatus, VehicleStatus
from .errors import (
    ConsistencyWarning,
    DuplicatePlateError,
    InvariantViolation,
    NotFoundError,
    PersistenceError,
    ValidationError,
    VehicleBusyError,
)
from .ledger import DayEndSummary, TripLedger
from .pricing import FareCalculator
from .roster import Roster, WaitingQueue
from .snapshot import (
    FleetSnapshot,
    LedgerRecord,
    OperatorRecord,
    TripRecord,
    VehicleRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_BROADCAST = "No announcements at this time."


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _require_text(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} cannot be empty.")
    return value.strip()


def coordinator_options(settings) -> dict:
    """Constructor keyword arguments taken from ``Settings``."""
    return {
        "default_fare": settings.default_fare_per_passenger,
        "currency_symbol": settings.currency_symbol,
        "default_broadcast": settings.no_announcement_message,
        "strict_queue_membership": settings.strict_queue_membership,
    }


@dataclass
class TripStartResult:
    trip: Trip
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FleetStats:
    registered: int
    off_duty: int
    waiting: int
    on_trip: int
    active_trips: int
    completed_today: int
    archived: int


class DispatchCoordinator:
    def __init__(
        self,
        *,
        default_fare: float = 20.0,
        currency_symbol: str = "₱",
        default_broadcast: str = DEFAULT_BROADCAST,
        strict_queue_membership: bool = False,
        fare_calculator: FareCalculator | None = None,
        clock: Callable[[], datetime] = _local_now,
    ):
        self.default_fare = default_fare
        self.currency_symbol = currency_symbol
        self.default_broadcast = default_broadcast
        self.strict_queue_membership = strict_queue_membership
        self.fares = fare_calculator or FareCalculator()
        self.clock = clock

        self._lock = threading.RLock()
        self._roster = Roster()
        self._queue = WaitingQueue()
        self._ledger = TripLedger()
        self._broadcast = default_broadcast

    # ── Roster ────────────────────────────────────────────────────────

    def register(
        self,
        plate: str,
        operator_name: str,
        contact: str,
        fare_rate: float | None = None,
    ) -> Vehicle:
        plate = _require_text(plate, "Plate number")
        name = _require_text(operator_name, "Operator name")
        contact = _require_text(contact, "Contact number")
        rate = self.default_fare if fare_rate is None else fare_rate
        if rate <= 0:
            raise ValidationError("Fare must be greater than zero.")

        vehicle = Vehicle(plate=plate, operator=Operator(name, contact), fare_rate=rate)
        with self._lock:
            self._roster.add(vehicle)
            logger.info("Registered new vehicle %s", vehicle)
            return copy.deepcopy(vehicle)

    def deregister(self, plate: str) -> bool:
        """Remove a vehicle and its queue entry.  Unknown plates are a no-op."""
        with self._lock:
            vehicle = self._roster.find(plate)
            if vehicle is None:
                logger.debug("Deregister: %s not registered, nothing to do", plate)
                return False
            if vehicle.has_active_trip:
                raise VehicleBusyError(
                    f"{vehicle.plate} is on trip #{vehicle.current_trip.id}"
                )
            self._queue.remove(vehicle)
            self._roster.remove(vehicle.plate)
            logger.info("Deleted vehicle %s", vehicle)
            return True

    def update_vehicle(
        self,
        plate: str,
        *,
        operator_name: str | None = None,
        contact: str | None = None,
        new_plate: str | None = None,
        fare_rate: float | None = None,
    ) -> Vehicle:
        name = None if operator_name is None else _require_text(operator_name, "Operator name")
        contact = None if contact is None else _require_text(contact, "Contact number")
        target = None if new_plate is None else normalize_plate(_require_text(new_plate, "Plate number"))
        if fare_rate is not None and fare_rate <= 0:
            raise ValidationError("Fare must be greater than zero.")

        with self._lock:
            vehicle = self._roster.get(plate)
            if vehicle.has_active_trip:
                raise VehicleBusyError(
                    f"{vehicle.plate} is on trip #{vehicle.current_trip.id}"
                )
            if target and target != vehicle.plate and target in self._roster:
                raise DuplicatePlateError(f"Plate {target} is already registered")

            if target and target != vehicle.plate:
                old = vehicle.plate
                self._queue.rekey(old, target)
                self._roster.rekey(old, target)
            if name is not None:
                vehicle.operator.name = name
            if contact is not None:
                vehicle.operator.contact = contact
            if fare_rate is not None:
                vehicle.fare_rate = fare_rate
            logger.info("Updated details for %s", vehicle)
            return copy.deepcopy(vehicle)

    # ── Duty ──────────────────────────────────────────────────────────

    def go_on_duty(self, plate: str) -> Vehicle:
        with self._lock:
            vehicle = self._roster.get(plate)
            self._go_on_duty(vehicle)
            return copy.deepcopy(vehicle)

    def go_off_duty(self, plate: str) -> Vehicle:
        with self._lock:
            vehicle = self._roster.get(plate)
            if vehicle.has_active_trip:
                raise VehicleBusyError(
                    f"{vehicle.plate} is on trip #{vehicle.current_trip.id}"
                )
            self._go_off_duty(vehicle)
            return copy.deepcopy(vehicle)

    def _go_on_duty(self, vehicle: Vehicle) -> None:
        if vehicle.has_active_trip:
            raise VehicleBusyError(
                f"{vehicle.plate} is on trip #{vehicle.current_trip.id}"
            )
        if not self._queue.enqueue(vehicle):
            logger.debug("%s is already in the waiting queue", vehicle)
            return
        vehicle.mark_waiting()
        logger.info("%s went ON DUTY.", vehicle.operator.name)

    def _go_off_duty(self, vehicle: Vehicle) -> None:
        self._queue.remove(vehicle)
        vehicle.mark_unavailable()
        logger.info("%s went OFF DUTY.", vehicle.operator.name)

    # ── Trips ─────────────────────────────────────────────────────────

    def start_trip(
        self,
        plate: str,
        passenger_count: int,
        origin: str,
        destination: str,
        fare_per_passenger: float | None = None,
    ) -> TripStartResult:
        origin = _require_text(origin, "From")
        destination = _require_text(destination, "Destination")
        if passenger_count < 1:
            raise ValidationError("Passenger count must be at least 1.")

        with self._lock:
            vehicle = self._roster.get(plate)
            rate = vehicle.fare_rate if fare_per_passenger is None else fare_per_passenger
            total = self.fares.total_fare(passenger_count, rate)
            if vehicle.has_active_trip:
                raise VehicleBusyError(
                    f"{vehicle.plate} is already on trip #{vehicle.current_trip.id}"
                )

            notes: list[str] = []
            if vehicle not in self._queue:
                msg = (
                    f"{vehicle.plate} was not in the waiting queue "
                    "but is starting a trip."
                )
                if self.strict_queue_membership:
                    raise NotFoundError(msg)
                warnings.warn(msg, ConsistencyWarning, stacklevel=2)
                logger.warning(msg)
                notes.append(msg)
            self._queue.remove(vehicle)

            trip = Trip(
                id=self._ledger.issue_id(),
                day=self._ledger.day,
                vehicle_plate=vehicle.plate,
                operator_name=vehicle.operator.name,
                passenger_count=passenger_count,
                origin=origin,
                destination=destination,
                total_fare=total,
                status=TripStatus.ACTIVE,
                departed_at=self.clock(),
            )
            vehicle.assign(trip)
            self._ledger.record(trip)
            logger.info(
                "%s started trip #%d to %s", vehicle.operator.name, trip.id, destination
            )
            return TripStartResult(trip=copy.deepcopy(trip), warnings=notes)

    def end_trip(self, trip_id: int, then: AfterTrip = AfterTrip.REQUEUE) -> Trip:
        """
        Complete an active trip and apply the dispatcher's choice for the
        vehicle (*then*).  Ending a completed trip is a no-op.
        """
        with self._lock:
            trip = self._ledger.get(trip_id)
            if not trip.active:
                logger.debug("Trip #%d already completed", trip.id)
                return copy.deepcopy(trip)

            vehicle = self._roster.get(trip.vehicle_plate)
            trip.complete(self.clock())
            vehicle.release_trip()
            logger.info("%s completed Trip #%d", trip.operator_name, trip.id)

            if then == AfterTrip.OFF_DUTY:
                self._go_off_duty(vehicle)
            else:
                self._go_on_duty(vehicle)
                logger.info("%s returned to queue.", vehicle.operator.name)
            return copy.deepcopy(trip)

    def end_of_day(self) -> DayEndSummary:
        with self._lock:
            label = self.clock().date().isoformat()
            summary = self._ledger.close_day(label, self.currency_symbol)
            logger.info(
                "End of day %s: archived %d trips (%s%.2f), counter reset=%s",
                label,
                summary.archived_count,
                self.currency_symbol,
                summary.total_fares,
                summary.counter_reset,
            )
            return summary

    # ── Broadcast ─────────────────────────────────────────────────────

    @property
    def broadcast_message(self) -> str:
        return self._broadcast

    def set_broadcast_message(self, message: Optional[str]) -> str:
        with self._lock:
            if message is None or not message.strip():
                self._broadcast = self.default_broadcast
            else:
                self._broadcast = message
            logger.info("Broadcast message updated")
            return self._broadcast

    # ── Reads ─────────────────────────────────────────────────────────

    def get_vehicle(self, plate: str) -> Vehicle:
        with self._lock:
            return copy.deepcopy(self._roster.get(plate))

    def roster(self, search: str = "", status: VehicleStatus | None = None) -> list[Vehicle]:
        with self._lock:
            return copy.deepcopy(self._roster.search(search, status))

    def waiting_queue(self) -> list[Vehicle]:
        with self._lock:
            return copy.deepcopy(list(self._queue))

    def next_in_queue(self) -> Optional[Vehicle]:
        with self._lock:
            return copy.deepcopy(self._queue.peek())

    def todays_trips(self, active: bool | None = None) -> list[Trip]:
        with self._lock:
            trips = self._ledger.today
            if active is not None:
                trips = [t for t in trips if t.active == active]
            return copy.deepcopy(trips)

    def archive(self) -> list[Trip]:
        with self._lock:
            return copy.deepcopy(self._ledger.archive)

    def get_trip(self, trip_id: int) -> Trip:
        with self._lock:
            return copy.deepcopy(self._ledger.get(trip_id))

    @property
    def next_trip_id(self) -> int:
        return self._ledger.next_id

    def stats(self) -> FleetStats:
        with self._lock:
            vehicles = list(self._roster)
            return FleetStats(
                registered=len(vehicles),
                off_duty=sum(v.status == VehicleStatus.UNAVAILABLE for v in vehicles),
                waiting=len(self._queue),
                on_trip=sum(v.status == VehicleStatus.ON_TRIP for v in vehicles),
                active_trips=len(self._ledger.active_trips()),
                completed_today=len(self._ledger.completed_trips()),
                archived=len(self._ledger.archive),
            )

    # ── Invariants ────────────────────────────────────────────────────

    def check_invariants(self) -> None:
        """Raise ``InvariantViolation`` if roster, queue and ledger disagree."""
        with self._lock:
            for vehicle in self._roster:
                queued = vehicle in self._queue
                trip = vehicle.current_trip
                if vehicle.status == VehicleStatus.WAITING:
                    ok = queued and trip is None
                elif vehicle.status == VehicleStatus.ON_TRIP:
                    ok = not queued and trip is not None and trip.active
                else:
                    ok = not queued and trip is None
                if not ok:
                    raise InvariantViolation(
                        f"{vehicle.plate}: status={vehicle.status.value} "
                        f"queued={queued} current_trip={trip.id if trip else None}"
                    )
                if trip is not None and self._ledger.find(trip.id) is not trip:
                    raise InvariantViolation(
                        f"{vehicle.plate}: current trip #{trip.id} not in today's trips"
                    )

            for vehicle in self._queue:
                if self._roster.find(vehicle.plate) is not vehicle:
                    raise InvariantViolation(f"{vehicle.plate} queued but not registered")

            owners: dict[str, int] = {}
            for trip in self._ledger.active_trips():
                if trip.vehicle_plate in owners:
                    raise InvariantViolation(
                        f"{trip.vehicle_plate} has active trips "
                        f"#{owners[trip.vehicle_plate]} and #{trip.id}"
                    )
                owners[trip.vehicle_plate] = trip.id
                vehicle = self._roster.find(trip.vehicle_plate)
                if vehicle is None or vehicle.current_trip is not trip:
                    raise InvariantViolation(
                        f"Active trip #{trip.id} is not linked to its vehicle"
                    )

            seen: set[tuple[int, int]] = set()
            for trip in self._ledger.today + self._ledger.archive:
                key = (trip.day, trip.id)
                if key in seen:
                    raise InvariantViolation(f"Duplicate trip id #{trip.id} (day {trip.day})")
                seen.add(key)
            if any(t.active for t in self._ledger.archive):
                raise InvariantViolation("Archive contains an active trip")
            if any(
                t.id >= self._ledger.next_id
                for t in self._ledger.today + self._ledger.archive
                if t.day == self._ledger.day
            ):
                raise InvariantViolation("Trip counter is behind an issued id")

    # ── Snapshots ─────────────────────────────────────────────────────

    def to_snapshot(self) -> FleetSnapshot:
        with self._lock:
            return FleetSnapshot(
                vehicles=[
                    VehicleRecord(
                        plate=v.plate,
                        operator=OperatorRecord(
                            name=v.operator.name,
                            contact=v.operator.contact,
                            is_available=v.operator.is_available,
                        ),
                        fare_rate=v.fare_rate,
                        status=v.status,
                        current_trip_id=v.current_trip.id if v.current_trip else None,
                    )
                    for v in self._roster
                ],
                queue=self._queue.plates(),
                ledger=LedgerRecord(
                    next_trip_id=self._ledger.next_id,
                    day=self._ledger.day,
                    today=[_trip_record(t) for t in self._ledger.today],
                    archive=[_trip_record(t) for t in self._ledger.archive],
                ),
                broadcast_message=self._broadcast,
            )

    @classmethod
    def from_snapshot(cls, snapshot: FleetSnapshot, **kwargs) -> "DispatchCoordinator":
        """
        Rebuild a coordinator, relinking vehicles to their trips by id.

        Raises ``PersistenceError`` if the snapshot is internally
        inconsistent; nothing partially loaded escapes.
        """
        coordinator = cls(**kwargs)
        try:
            ledger = coordinator._ledger
            ledger.today = [_trip_from_record(r) for r in snapshot.ledger.today]
            ledger.archive = [_trip_from_record(r) for r in snapshot.ledger.archive]
            ledger.restore_counter(snapshot.ledger.next_trip_id, snapshot.ledger.day)

            for record in snapshot.vehicles:
                vehicle = Vehicle(
                    plate=record.plate,
                    operator=Operator(
                        record.operator.name,
                        record.operator.contact,
                        record.operator.is_available,
                    ),
                    fare_rate=record.fare_rate,
                    status=record.status,
                )
                if record.current_trip_id is not None:
                    trip = ledger.find(record.current_trip_id)
                    if trip is None or trip.vehicle_plate != vehicle.plate:
                        raise PersistenceError(
                            f"{vehicle.plate} refers to unknown trip "
                            f"#{record.current_trip_id}"
                        )
                    vehicle.current_trip = trip
                coordinator._roster.add(vehicle)

            for plate in snapshot.queue:
                vehicle = coordinator._roster.get(plate)
                if not coordinator._queue.enqueue(vehicle):
                    raise PersistenceError(f"{vehicle.plate} queued twice")

            coordinator.set_broadcast_message(snapshot.broadcast_message)
            coordinator.check_invariants()
        except PersistenceError:
            raise
        except (DuplicatePlateError, NotFoundError, InvariantViolation) as exc:
            raise PersistenceError(f"Inconsistent snapshot: {exc}") from exc
        return coordinator


def _trip_record(trip: Trip) -> TripRecord:
    return TripRecord(
        id=trip.id,
        day=trip.day,
        vehicle_plate=trip.vehicle_plate,
        operator_name=trip.operator_name,
        passenger_count=trip.passenger_count,
        origin=trip.origin,
        destination=trip.destination,
        total_fare=trip.total_fare,
        status=trip.status,
        departed_at=trip.departed_at,
        arrived_at=trip.arrived_at,
        service_date=trip.service_date,
    )


def _trip_from_record(record: TripRecord) -> Trip:
    return Trip(
        id=record.id,
        day=record.day,
        vehicle_plate=record.vehicle_plate,
        operator_name=record.operator_name,
        passenger_count=record.passenger_count,
        origin=record.origin,
        destination=record.destination,
        total_fare=record.total_fare,
        status=record.status,
        departed_at=record.departed_at,
        arrived_at=record.arrived_at,
        service_date=record.service_date,
    )
