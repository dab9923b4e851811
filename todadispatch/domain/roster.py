"""
Roster and waiting queue.

* ``Roster`` -- master collection of registered vehicles, keyed by
  normalised plate (insertion ordered).
* ``WaitingQueue`` -- FIFO of on-duty vehicles.  Insertion order is the
  dispatch priority; a vehicle appears at most once.

Neither class changes vehicle status; the coordinator moves status and
membership together.

Complexity: add / remove / lookup are O(1); listing is O(n).
"""

from __future__ import annotations

from typing import Iterator, Optional

from .entities import Vehicle, normalize_plate
from .enums import VehicleStatus
from .errors import DuplicatePlateError, NotFoundError


class Roster:
    def __init__(self) -> None:
        self._vehicles: dict[str, Vehicle] = {}

    def add(self, vehicle: Vehicle) -> None:
        if vehicle.plate in self._vehicles:
            raise DuplicatePlateError(f"Plate {vehicle.plate} is already registered")
        self._vehicles[vehicle.plate] = vehicle

    def remove(self, plate: str) -> Optional[Vehicle]:
        """Drop a vehicle; returns it, or None if it was not registered."""
        return self._vehicles.pop(normalize_plate(plate), None)

    def rekey(self, old_plate: str, new_plate: str) -> None:
        """Re-register a vehicle under a new plate, keeping its position."""
        old_plate, new_plate = normalize_plate(old_plate), normalize_plate(new_plate)
        if old_plate == new_plate:
            return
        if new_plate in self._vehicles:
            raise DuplicatePlateError(f"Plate {new_plate} is already registered")
        self._vehicles = {
            (new_plate if key == old_plate else key): v
            for key, v in self._vehicles.items()
        }
        self._vehicles[new_plate].plate = new_plate

    def find(self, plate: str) -> Optional[Vehicle]:
        return self._vehicles.get(normalize_plate(plate))

    def get(self, plate: str) -> Vehicle:
        vehicle = self.find(plate)
        if vehicle is None:
            raise NotFoundError(f"Vehicle {normalize_plate(plate)} is not registered")
        return vehicle

    def search(self, term: str = "", status: VehicleStatus | None = None) -> list[Vehicle]:
        """Case-insensitive substring match on plate or operator name."""
        needle = term.strip().lower()
        return [
            v
            for v in self._vehicles.values()
            if (status is None or v.status == status)
            and (
                not needle
                or needle in v.plate.lower()
                or needle in v.operator.name.lower()
            )
        ]

    def __contains__(self, plate: object) -> bool:
        return isinstance(plate, str) and normalize_plate(plate) in self._vehicles

    def __iter__(self) -> Iterator[Vehicle]:
        return iter(list(self._vehicles.values()))

    def __len__(self) -> int:
        return len(self._vehicles)


class WaitingQueue:
    def __init__(self) -> None:
        # dicts keep insertion order, which doubles as queue order
        self._entries: dict[str, Vehicle] = {}

    def enqueue(self, vehicle: Vehicle) -> bool:
        """Append to the tail.  Returns False if already queued."""
        if vehicle.plate in self._entries:
            return False
        self._entries[vehicle.plate] = vehicle
        return True

    def remove(self, vehicle: Vehicle) -> bool:
        """Remove from wherever it sits.  Returns False if it was not queued."""
        return self._entries.pop(vehicle.plate, None) is not None

    def rekey(self, old_plate: str, new_plate: str) -> None:
        if old_plate not in self._entries:
            return
        self._entries = {
            (new_plate if key == old_plate else key): v
            for key, v in self._entries.items()
        }

    def peek(self) -> Optional[Vehicle]:
        return next(iter(self._entries.values()), None)

    def plates(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, vehicle: object) -> bool:
        return isinstance(vehicle, Vehicle) and self._entries.get(vehicle.plate) is vehicle

    def __iter__(self) -> Iterator[Vehicle]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)
