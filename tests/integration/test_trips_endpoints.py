"""
Integration tests for trip endpoints
"""
import pytest
from httpx import AsyncClient


def _trip_body(traveller_id, departure="2024-03-12", return_date="2024-03-15", **extra):
    body = {
        "traveller_id": traveller_id,
        "name": "Jane Doe",
        "email": "jane@example.com",
        "departure_date": departure,
        "return_date": return_date,
    }
    body.update(extra)
    return body


@pytest.mark.asyncio
async def test_requires_authentication(async_client: AsyncClient):
    r = await async_client.get("/trips")
    assert r.status_code == 401
    body = r.json()
    assert body["error_code"] == "AUTHENTICATION_FAILED"
    assert "request_id" in body

    r = await async_client.get("/trips", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_create_and_get_trip(async_client: AsyncClient, staff_headers, test_user):
    r = await async_client.post("/trips", json=_trip_body(test_user.id), headers=staff_headers)
    assert r.status_code == 201, r.text
    created = r.json()["data"]
    assert created["status"] == "UPCOMING"
    assert created["version"] == 1

    r = await async_client.get(f"/trips/{created['trip_id']}", headers=staff_headers)
    assert r.status_code == 200
    trip = r.json()["data"]
    assert trip["departure_date"] == "2024-03-12"
    assert trip["traveller_username"] == "traveller"


@pytest.mark.asyncio
async def test_create_accepts_browser_timestamps(async_client: AsyncClient, staff_headers, test_user):
    body = _trip_body(
        test_user.id,
        departure="2024-03-10T09:00:00.000Z",
        return_date="2024-03-11T09:00:00.000Z",
    )
    r = await async_client.post("/trips", json=body, headers=staff_headers)
    assert r.status_code == 201, r.text
    assert r.json()["data"]["status"] == "ACTIVE"


@pytest.mark.asyncio
async def test_late_utc_timestamp_uses_app_calendar(async_client: AsyncClient, staff_headers, test_user):
    """The app runs on UTC here, so 20:00Z is still the 10th, not the next day in Sydney"""
    body = _trip_body(
        test_user.id,
        departure="2024-03-10T20:00:00Z",
        return_date="2024-03-10T23:30:00Z",
    )
    r = await async_client.post("/trips", json=body, headers=staff_headers)
    assert r.status_code == 201, r.text
    created = r.json()["data"]
    assert created["status"] == "ACTIVE"

    r = await async_client.get(f"/trips/{created['trip_id']}", headers=staff_headers)
    trip = r.json()["data"]
    assert trip["departure_date"] == "2024-03-10"
    assert trip["return_date"] == "2024-03-10"

    r = await async_client.put(
        f"/trips/{created['trip_id']}",
        json={"expected_version": 1, "return_date": "2024-03-11T23:59:00Z"},
        headers=staff_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["return_date"] == "2024-03-11"


@pytest.mark.asyncio
async def test_inverted_dates_rejected(async_client: AsyncClient, staff_headers, test_user):
    body = _trip_body(test_user.id, departure="2025-05-10", return_date="2025-05-01")
    r = await async_client.post("/trips", json=body, headers=staff_headers)
    assert r.status_code == 400
    assert r.json()["error_code"] == "INVALID_DATE_RANGE"

    r = await async_client.get("/trips", headers=staff_headers)
    assert r.json()["data"] == []


@pytest.mark.asyncio
async def test_malformed_input_is_400(async_client: AsyncClient, staff_headers, test_user):
    body = _trip_body(test_user.id, departure="next tuesday")
    r = await async_client.post("/trips", json=body, headers=staff_headers)
    assert r.status_code == 400
    assert r.json()["error_code"] == "VALIDATION_ERROR"

    body = _trip_body(test_user.id, email="not-an-email")
    r = await async_client.post("/trips", json=body, headers=staff_headers)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_conflict_returns_server_copy(async_client: AsyncClient, staff_headers, test_user):
    r = await async_client.post("/trips", json=_trip_body(test_user.id), headers=staff_headers)
    trip_id = r.json()["data"]["trip_id"]

    r = await async_client.put(
        f"/trips/{trip_id}", json={"expected_version": 1, "notes": "first"}, headers=staff_headers
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"]["version"] == 2

    r = await async_client.put(
        f"/trips/{trip_id}", json={"expected_version": 1, "notes": "stale"}, headers=staff_headers
    )
    assert r.status_code == 409
    body = r.json()
    assert body["error_code"] == "VERSION_CONFLICT"
    assert body["details"]["server_copy"]["version"] == 2
    assert body["details"]["server_copy"]["notes"] == "first"


@pytest.mark.asyncio
async def test_update_requires_expected_version(async_client: AsyncClient, staff_headers, test_user):
    r = await async_client.post("/trips", json=_trip_body(test_user.id), headers=staff_headers)
    trip_id = r.json()["data"]["trip_id"]

    r = await async_client.put(f"/trips/{trip_id}", json={"notes": "x"}, headers=staff_headers)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_missing_trip_is_404(async_client: AsyncClient, staff_headers):
    r = await async_client.get("/trips/999", headers=staff_headers)
    assert r.status_code == 404
    assert r.json()["error_code"] == "NOT_FOUND"

    r = await async_client.put("/trips/999", json={"expected_version": 1}, headers=staff_headers)
    assert r.status_code == 404

    r = await async_client.delete("/trips/999", headers=staff_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_mark_returned_and_listings(async_client: AsyncClient, staff_headers, test_user):
    r = await async_client.post(
        "/trips",
        json=_trip_body(test_user.id, departure="2024-03-08", return_date="2024-03-20"),
        headers=staff_headers,
    )
    trip_id = r.json()["data"]["trip_id"]

    r = await async_client.get("/trips/active", headers=staff_headers)
    assert [t["id"] for t in r.json()["data"]] == [trip_id]

    r = await async_client.post(f"/trips/{trip_id}/return", headers=staff_headers)
    assert r.status_code == 200, r.text
    returned = r.json()["data"]
    assert returned["status"] == "COMPLETED"
    assert returned["return_date"] == "2024-03-10"
    assert returned["version"] == 2

    r = await async_client.get("/trips/active", headers=staff_headers)
    assert r.json()["data"] == []
    r = await async_client.get("/trips/completed", headers=staff_headers)
    assert [t["id"] for t in r.json()["data"]] == [trip_id]
    r = await async_client.get("/trips", params={"view": "completed"}, headers=staff_headers)
    assert [t["id"] for t in r.json()["data"]] == [trip_id]


@pytest.mark.asyncio
async def test_delete_trip(async_client: AsyncClient, staff_headers, test_user):
    r = await async_client.post("/trips", json=_trip_body(test_user.id), headers=staff_headers)
    trip_id = r.json()["data"]["trip_id"]

    r = await async_client.delete(f"/trips/{trip_id}", headers=staff_headers)
    assert r.status_code == 200

    r = await async_client.get(f"/trips/{trip_id}", headers=staff_headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_request_id_header(async_client: AsyncClient):
    r = await async_client.get("/", headers={"X-Request-ID": "abc-123"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "abc-123"
