"""
Trip ledger and day-end archival
================================

Holds today's trips (active and completed, in start order), the
long-term archive (completed only) and the trip-id counter.

Counter rules
-------------
* ``issue_id`` hands out strictly increasing ids.
* At day end the counter goes back to 1 **only** if no active trip is left
  in today's list.  An open trip keeps its id across the boundary, so
  resetting would let a new trip collide with it.
* Every reset starts a new ledger ``day``.  Trips carry the day their id
  was issued in, so ``(day, id)`` is unique across today's list and the
  archive for the lifetime of the ledger.

Complexity: ``issue_id`` O(1), ``close_day`` O(n) over today's trips.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .entities import Trip
from .errors import NotFoundError

REPORT_HEADER = "--- End of Day Report ---"
RESET_NOTE = "Trip counter has been reset to 1 for the new day."
NO_RESET_NOTE = "Active trips remain. Trip counter will not be reset to avoid ID conflicts."


@dataclass(frozen=True)
class DayEndSummary:
    service_date: str
    archived_count: int
    total_fares: float
    counter_reset: bool
    remaining_active: int
    currency_symbol: str = "₱"

    @property
    def counter_note(self) -> str:
        return RESET_NOTE if self.counter_reset else NO_RESET_NOTE

    @property
    def report(self) -> str:
        return (
            f"{REPORT_HEADER}\n\n"
            f"Total Completed Trips: {self.archived_count}\n"
            f"Total Fares Earned: {self.currency_symbol}{self.total_fares:.2f}\n\n"
            f"All completed trips have been archived.\n"
            f"{self.counter_note}"
        )


class TripLedger:
    def __init__(self, next_id: int = 1, day: int = 1) -> None:
        self._next_id = next_id
        self._day = day
        self.today: list[Trip] = []
        self.archive: list[Trip] = []

    # ── Counter ───────────────────────────────────────────────────────

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def day(self) -> int:
        return self._day

    def issue_id(self) -> int:
        trip_id = self._next_id
        self._next_id += 1
        return trip_id

    def reset_counter(self) -> bool:
        """Start a new day at id 1.  Refuses (returns False) while trips are open."""
        if self.active_trips():
            return False
        if self._next_id != 1:
            self._next_id = 1
            self._day += 1
        return True

    def restore_counter(self, next_id: int, day: int = 1) -> None:
        """Set the counter from a snapshot, never below an id issued this day."""
        highest = max(
            (t.id for t in self.today + self.archive if t.day == day), default=0
        )
        self._next_id = max(next_id, highest + 1, 1)
        self._day = max(day, 1)

    # ── Trips ─────────────────────────────────────────────────────────

    def record(self, trip: Trip) -> None:
        self.today.append(trip)

    def find(self, trip_id: int) -> Optional[Trip]:
        for trip in self.today:
            if trip.id == trip_id:
                return trip
        return None

    def get(self, trip_id: int) -> Trip:
        trip = self.find(trip_id)
        if trip is None:
            raise NotFoundError(f"Trip #{trip_id} is not in today's trips")
        return trip

    def active_trips(self) -> list[Trip]:
        return [t for t in self.today if t.active]

    def completed_trips(self) -> list[Trip]:
        return [t for t in self.today if not t.active]

    # ── Day end ───────────────────────────────────────────────────────

    def close_day(self, service_date: str, currency_symbol: str = "₱") -> DayEndSummary:
        """Archive completed trips and reset the counter when it is safe."""
        completed: list[Trip] = []
        remaining: list[Trip] = []
        for trip in self.today:
            (remaining if trip.active else completed).append(trip)

        if completed:
            for trip in completed:
                trip.service_date = service_date
            self.archive.extend(completed)
            self.today = remaining

        counter_reset = self.reset_counter()

        return DayEndSummary(
            service_date=service_date,
            archived_count=len(completed),
            total_fares=round(sum(t.total_fare for t in completed), 2),
            counter_reset=counter_reset,
            remaining_active=len(remaining),
            currency_symbol=currency_symbol,
        )
