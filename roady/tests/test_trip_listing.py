"""
Integration tests for the trip listing.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from roady.app.core.exceptions import ValidationError
from roady.app.models.trip import Trip
from roady.app.models.trip_enums import TripStatus
from roady.app.services.trip_query import list_trips


async def add_trip(db_session, user_id: str, name, start_time: datetime, **fields) -> Trip:
    trip = Trip(
        user_id=uuid.UUID(user_id),
        name=name,
        start_time=start_time,
        status=fields.pop("status", TripStatus.ACTIVE.value),
        distance=0.0,
        **fields
    )
    db_session.add(trip)
    await db_session.commit()
    return trip


@pytest.mark.asyncio
async def test_listing_is_newest_first(client, signup, db_session):
    user_id, headers = await signup()
    base = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    for offset, name in ((1, "middle"), (0, "oldest"), (2, "newest")):
        await add_trip(db_session, user_id, name, base + timedelta(hours=offset))

    response = await client.get("/trips", params={"userId": user_id}, headers=headers)
    assert response.status_code == 200
    trips = response.json()
    assert [t["name"] for t in trips] == ["newest", "middle", "oldest"]
    assert all(t["route"] == [] for t in trips)


@pytest.mark.asyncio
async def test_listing_only_shows_own_trips(client, signup, start_trip):
    owner_id, owner_headers = await signup("owner")
    other_id, other_headers = await signup("other")
    mine = await start_trip(owner_id, owner_headers)
    await start_trip(other_id, other_headers)

    response = await client.get("/trips", params={"userId": owner_id}, headers=owner_headers)
    trips = response.json()
    assert [t["id"] for t in trips] == [mine["tripId"]]
    assert trips[0]["userId"] == owner_id


@pytest.mark.asyncio
async def test_listing_another_user_is_forbidden(client, signup):
    owner_id, _ = await signup("owner")
    _, other_headers = await signup("other")

    response = await client.get("/trips", params={"userId": owner_id}, headers=other_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_active_trip_omits_end_fields(client, signup, start_trip):
    user_id, headers = await signup()
    await start_trip(user_id, headers)

    response = await client.get("/trips", params={"userId": user_id}, headers=headers)
    trip = response.json()[0]
    assert trip["status"] == "active"
    assert "endTime" not in trip
    assert "duration" not in trip
    assert trip["distance"] == 0


@pytest.mark.asyncio
async def test_completed_trip_in_listing_has_no_route(client, signup, start_trip):
    user_id, headers = await signup()
    trip_id = (await start_trip(user_id, headers))["tripId"]
    await client.post("/tracking/points", json={
        "userId": user_id,
        "tripId": trip_id,
        "points": [{"latitude": 1.0, "longitude": 2.0, "timestamp": datetime.now(timezone.utc).isoformat()}]
    }, headers=headers)
    await client.post("/tracking/stop", json={"userId": user_id, "tripId": trip_id}, headers=headers)

    response = await client.get("/trips", params={"userId": user_id}, headers=headers)
    trip = response.json()[0]
    assert trip["status"] == "completed"
    assert trip["route"] == []
    assert trip["duration"] >= 0


@pytest.mark.asyncio
async def test_missing_user_id_is_400(client, signup):
    _, headers = await signup()

    response = await client.get("/trips", headers=headers)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "userId is required"}


@pytest.mark.asyncio
async def test_user_without_trips_gets_empty_list(client, signup):
    user_id, headers = await signup()

    response = await client.get("/trips", params={"userId": user_id}, headers=headers)
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_unknown_user_has_no_trips(db_session):
    assert await list_trips(db_session, uuid.uuid4()) == []


@pytest.mark.asyncio
async def test_list_without_user_raises(db_session):
    with pytest.raises(ValidationError):
        await list_trips(db_session, None)


@pytest.mark.asyncio
async def test_malformed_row_is_skipped(client, signup, db_session):
    user_id, headers = await signup()
    now = datetime.now(timezone.utc)
    await add_trip(db_session, user_id, "good", now)
    # Rows written before names were mandatory
    await add_trip(db_session, user_id, None, now - timedelta(days=1))

    response = await client.get("/trips", params={"userId": user_id}, headers=headers)
    assert response.status_code == 200
    assert [t["name"] for t in response.json()] == ["good"]


@pytest.mark.asyncio
async def test_row_with_unknown_status_is_skipped(client, signup, db_session):
    user_id, headers = await signup()
    now = datetime.now(timezone.utc)
    await add_trip(db_session, user_id, "first", now - timedelta(hours=2))
    await add_trip(db_session, user_id, "odd", now - timedelta(hours=1), status="paused")
    await add_trip(db_session, user_id, "second", now)

    response = await client.get("/trips", params={"userId": user_id}, headers=headers)
    assert response.status_code == 200
    assert [t["name"] for t in response.json()] == ["second", "first"]


@pytest.mark.asyncio
async def test_unknown_user_without_token_gets_empty_list(client):
    response = await client.get("/trips", params={"userId": str(uuid.uuid4())})
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_listing_storage_failure_keeps_envelope_and_cors(client, signup, mocker):
    user_id, headers = await signup()
    mocker.patch(
        "roady.app.services.trip_query.list_user_trips",
        side_effect=OperationalError("SELECT", {}, Exception("connection reset")),
    )

    response = await client.get(
        "/trips", params={"userId": user_id}, headers={**headers, "Origin": "http://localhost:5173"}
    )
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Could not load trips"}
    assert response.headers["access-control-allow-origin"] == "*"
