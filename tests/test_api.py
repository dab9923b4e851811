"""
Integration tests for the REST API endpoints.

The coordinator and snapshot store are overridden through FastAPI's
dependency overrides, so no lifespan (snapshot load, autosave) runs and
every test starts from a fresh fleet.  The store writes to in-memory
SQLite.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from todadispatch.domain.coordinator import DispatchCoordinator
from todadispatch.infrastructure.snapshot_store import SnapshotStore


# ── Fixture ───────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client(session_factory, clock):
    fleet = DispatchCoordinator(clock=clock)
    store = SnapshotStore(session_factory, today=lambda: date(2026, 10, 17))

    with (
        patch(
            "todadispatch.workers.autosaver.start_autosave_loop",
            new_callable=AsyncMock,
        ),
        patch(
            "todadispatch.workers.autosaver.stop_autosave_loop",
            new_callable=AsyncMock,
        ),
    ):
        from todadispatch.api.app import create_app
        from todadispatch.api.dependencies import get_coordinator, get_store
        from todadispatch.api.middleware import limiter

        app = create_app()
        app.dependency_overrides[get_coordinator] = lambda: fleet
        app.dependency_overrides[get_store] = lambda: store
        limiter.reset()

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


async def _register(client: AsyncClient, plate: str, name: str = "Juan") -> dict:
    resp = await client.post(
        "/api/v1/vehicles",
        json={"plate": plate, "operator_name": name, "contact": "0917-555-0101"},
    )
    assert resp.status_code == 201
    return resp.json()


async def _start(client: AsyncClient, plate: str, **overrides):
    body = {"plate": plate, "passenger_count": 2, "origin": "Gate", "destination": "Market"}
    body.update(overrides)
    return await client.post("/api/v1/trips", json=body)


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_register_vehicle_returns_201(client: AsyncClient):
    data = await _register(client, "abc-1")
    assert data["plate"] == "ABC-1"
    assert data["status"] == "UNAVAILABLE"
    assert data["fare_rate"] == 20.0
    assert data["current_trip_id"] is None


@pytest.mark.asyncio
async def test_register_duplicate_plate_conflicts(client: AsyncClient):
    await _register(client, "ABC-1")
    resp = await client.post(
        "/api/v1/vehicles",
        json={"plate": "abc-1", "operator_name": "Pedro", "contact": "0918"},
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_register_blank_name_rejected(client: AsyncClient):
    resp = await client.post(
        "/api/v1/vehicles",
        json={"plate": "ABC-1", "operator_name": "   ", "contact": "0918"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_unknown_vehicle(client: AsyncClient):
    resp = await client.get("/api/v1/vehicles/NOPE")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_full_trip_flow(client: AsyncClient):
    await _register(client, "ABC-1")
    resp = await client.post("/api/v1/vehicles/ABC-1/on-duty")
    assert resp.json()["status"] == "WAITING"

    resp = await _start(client, "ABC-1", fare_per_passenger=20)
    assert resp.status_code == 201
    body = resp.json()
    assert body["warnings"] == []
    trip = body["trip"]
    assert trip["id"] == 1
    assert trip["total_fare"] == 40.0
    assert trip["status"] == "ACTIVE"

    queue = (await client.get("/api/v1/queue")).json()
    assert queue == []

    resp = await client.post(f"/api/v1/trips/{trip['id']}/end", json={"then": "OFF_DUTY"})
    assert resp.status_code == 200
    assert resp.json()["active"] is False
    assert resp.json()["arrived_at"] is not None

    vehicle = (await client.get("/api/v1/vehicles/ABC-1")).json()
    assert vehicle["status"] == "UNAVAILABLE"

    resp = await client.post("/api/v1/admin/end-of-day")
    assert resp.status_code == 200
    report = resp.json()
    assert report["archived_count"] == 1
    assert report["counter_reset"] is True
    assert "Total Fares Earned: ₱40.00" in report["report"]

    archive = (await client.get("/api/v1/trips/archive")).json()
    assert [t["id"] for t in archive] == [1]
    assert (await client.get("/api/v1/trips")).json() == []


@pytest.mark.asyncio
async def test_end_trip_defaults_to_requeue(client: AsyncClient):
    await _register(client, "V1")
    await _register(client, "V2", "Pedro")
    await client.post("/api/v1/vehicles/V1/on-duty")
    await client.post("/api/v1/vehicles/V2/on-duty")
    trip_id = (await _start(client, "V1")).json()["trip"]["id"]

    resp = await client.post(f"/api/v1/trips/{trip_id}/end")

    assert resp.status_code == 200
    queue = (await client.get("/api/v1/queue")).json()
    assert [(e["position"], e["vehicle"]["plate"]) for e in queue] == [(1, "V2"), (2, "V1")]


@pytest.mark.asyncio
async def test_start_trip_for_unqueued_vehicle_reports_warning(client: AsyncClient):
    await _register(client, "ABC-1")
    with pytest.warns(Warning):
        resp = await _start(client, "ABC-1")
    assert resp.status_code == 201
    assert len(resp.json()["warnings"]) == 1


@pytest.mark.asyncio
async def test_start_trip_validation(client: AsyncClient):
    await _register(client, "ABC-1")
    await client.post("/api/v1/vehicles/ABC-1/on-duty")

    resp = await _start(client, "ABC-1", passenger_count=0)
    assert resp.status_code == 422
    resp = await _start(client, "ABC-1", destination="   ")
    assert resp.status_code == 422

    assert (await client.get("/api/v1/trips")).json() == []
    assert len((await client.get("/api/v1/queue")).json()) == 1


@pytest.mark.asyncio
async def test_start_second_trip_conflicts(client: AsyncClient):
    await _register(client, "ABC-1")
    await client.post("/api/v1/vehicles/ABC-1/on-duty")
    await _start(client, "ABC-1")
    resp = await _start(client, "ABC-1")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_end_trip_not_found(client: AsyncClient):
    resp = await client.post("/api/v1/trips/999/end")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_end_trip_twice_is_noop(client: AsyncClient):
    await _register(client, "ABC-1")
    await client.post("/api/v1/vehicles/ABC-1/on-duty")
    trip_id = (await _start(client, "ABC-1")).json()["trip"]["id"]
    first = await client.post(f"/api/v1/trips/{trip_id}/end")
    second = await client.post(f"/api/v1/trips/{trip_id}/end")
    assert second.status_code == 200
    assert second.json()["arrived_at"] == first.json()["arrived_at"]


@pytest.mark.asyncio
async def test_deregister_is_idempotent(client: AsyncClient):
    await _register(client, "ABC-1")
    assert (await client.delete("/api/v1/vehicles/ABC-1")).status_code == 204
    assert (await client.delete("/api/v1/vehicles/ABC-1")).status_code == 204
    assert (await client.get("/api/v1/vehicles")).json() == []


@pytest.mark.asyncio
async def test_update_vehicle(client: AsyncClient):
    await _register(client, "ABC-1")
    resp = await client.patch(
        "/api/v1/vehicles/ABC-1", json={"plate": "XYZ-9", "contact": "0999"}
    )
    assert resp.status_code == 200
    assert resp.json()["plate"] == "XYZ-9"
    contact = (await client.get("/api/v1/vehicles/XYZ-9/contact")).json()
    assert contact["contact_info"] == "Name: Juan, Contact: 0999"


@pytest.mark.asyncio
async def test_vehicle_search_and_status_filter(client: AsyncClient):
    await _register(client, "TRC-101", "Juan Dela Cruz")
    await _register(client, "TRC-202", "Pedro Santos")
    await client.post("/api/v1/vehicles/TRC-202/on-duty")

    found = (await client.get("/api/v1/vehicles", params={"search": "santos"})).json()
    assert [v["plate"] for v in found] == ["TRC-202"]
    off_duty = (
        await client.get("/api/v1/vehicles", params={"status": "UNAVAILABLE"})
    ).json()
    assert [v["plate"] for v in off_duty] == ["TRC-101"]


@pytest.mark.asyncio
async def test_broadcast(client: AsyncClient):
    resp = await client.get("/api/v1/admin/broadcast")
    assert resp.json()["message"] == "No announcements at this time."

    resp = await client.put("/api/v1/admin/broadcast", json={"message": "Closed at 9 PM"})
    assert resp.json()["message"] == "Closed at 9 PM"

    resp = await client.put("/api/v1/admin/broadcast", json={"message": "  "})
    assert resp.json()["message"] == "No announcements at this time."


@pytest.mark.asyncio
async def test_stats(client: AsyncClient):
    await _register(client, "V1")
    await _register(client, "V2", "Pedro")
    await client.post("/api/v1/vehicles/V1/on-duty")

    stats = (await client.get("/api/v1/admin/stats")).json()

    assert stats["registered"] == 2
    assert stats["waiting"] == 1
    assert stats["off_duty"] == 1
    assert stats["next_trip_id"] == 1


@pytest.mark.asyncio
async def test_save_snapshot(client: AsyncClient, session_factory):
    await _register(client, "V1")
    resp = await client.post("/api/v1/admin/snapshot")
    assert resp.status_code == 200
    assert resp.json()["service_date"] == "2026-10-17"

    restored = await SnapshotStore(session_factory).load()
    assert [v.plate for v in restored.roster()] == ["V1"]


@pytest.mark.asyncio
async def test_large_party_accepted(client: AsyncClient):
    await _register(client, "ABC-1")
    await client.post("/api/v1/vehicles/ABC-1/on-duty")
    resp = await _start(client, "ABC-1", passenger_count=15, fare_per_passenger=10)
    assert resp.status_code == 201
    assert resp.json()["trip"]["total_fare"] == 150.0


@pytest.mark.asyncio
async def test_error_body_documented(client: AsyncClient):
    schema = (await client.get("/openapi.json")).json()
    assert "ErrorResponse" in schema["components"]["schemas"]
    missing = schema["paths"]["/api/v1/vehicles/{plate}"]["get"]["responses"]["404"]
    assert missing["content"]["application/json"]["schema"]["$ref"].endswith(
        "/ErrorResponse"
    )
