"""
Seed script -- writes a sample fleet snapshot for reviewers.

Run once (tables are created if missing):
    python seed.py

Creates today's snapshot with:
  - 8 registered tricycles with drivers
  - 5 of them on duty in the waiting queue
  - 2 active trips and 1 completed trip
  - a broadcast announcement
"""

import asyncio

from todadispatch.config import settings
from todadispatch.domain.coordinator import DispatchCoordinator, coordinator_options
from todadispatch.domain.enums import AfterTrip
from todadispatch.infrastructure.database import async_session_factory, engine, init_db
from todadispatch.infrastructure.snapshot_store import SnapshotStore


DRIVERS = [
    {"plate": "TRC-101", "name": "Juan Dela Cruz", "contact": "0917-555-0101"},
    {"plate": "TRC-102", "name": "Pedro Santos", "contact": "0917-555-0102"},
    {"plate": "TRC-103", "name": "Jose Reyes", "contact": "0917-555-0103"},
    {"plate": "TRC-104", "name": "Andres Bautista", "contact": "0917-555-0104"},
    {"plate": "TRC-105", "name": "Ramon Garcia", "contact": "0917-555-0105"},
    {"plate": "TRC-106", "name": "Carlos Mendoza", "contact": "0917-555-0106"},
    {"plate": "TRC-107", "name": "Miguel Torres", "contact": "0917-555-0107"},
    {"plate": "TRC-108", "name": "Antonio Villanueva", "contact": "0917-555-0108"},
]

ON_DUTY = ["TRC-101", "TRC-102", "TRC-103", "TRC-104", "TRC-105"]

TRIPS = [
    # (plate, passengers, from, to, completed)
    ("TRC-101", 2, "TSU San Isidro", "Public Market", True),
    ("TRC-102", 3, "TSU San Isidro", "Capitol", False),
    ("TRC-103", 1, "TSU San Isidro", "Bus Terminal", False),
]


async def seed():
    store = SnapshotStore(async_session_factory, coordinator_options(settings))
    label = store.today().isoformat()
    if label in await store.available_dates():
        print(f"Snapshot {label} already exists. Skipping.")
        return

    fleet = DispatchCoordinator(**coordinator_options(settings))

    # ── Roster ────────────────────────────────────────────────────────
    for d in DRIVERS:
        fleet.register(d["plate"], d["name"], d["contact"])
    print(f"  Registered {len(DRIVERS)} tricycles")

    # ── Queue ─────────────────────────────────────────────────────────
    for plate in ON_DUTY:
        fleet.go_on_duty(plate)
    print(f"  {len(ON_DUTY)} drivers on duty")

    # ── Trips ─────────────────────────────────────────────────────────
    for plate, passengers, origin, destination, completed in TRIPS:
        trip = fleet.start_trip(plate, passengers, origin, destination).trip
        if completed:
            fleet.end_trip(trip.id, then=AfterTrip.REQUEUE)
    print(f"  Started {len(TRIPS)} trips")

    fleet.set_broadcast_message("Terminal closes at 9 PM tonight.")
    fleet.check_invariants()

    await store.save(fleet, label)
    print(f"\nSeed complete! Snapshot {label}")


async def main():
    print("Seeding database...")
    await init_db()
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
