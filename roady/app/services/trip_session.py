"""
Trip session service.

Opens trips and closes them exactly once, returning the finished trip with
its reconstructed route.
"""

import logging
import uuid
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import set_committed_value

from roady.app.core.clock import utcnow
from roady.app.core.exceptions import NotFoundError, StorageError, TripAlreadyCompletedError
from roady.app.models.trip import Trip
from roady.app.models.trip_enums import TripStatus
from roady.app.schemas.tracking import VehicleSchema
from roady.app.schemas.trip import GPSPointResponse, TripResponse
from roady.app.services.point_store import fetch_route
from roady.app.services.trip_store import get_owned_trip, insert_trip, mark_completed

logger = logging.getLogger(__name__)


def default_trip_name(start_time) -> str:
    return f"Trip {start_time.date().isoformat()}"


async def start_trip(
    db: AsyncSession,
    user_id: uuid.UUID,
    name: Optional[str] = None,
    source: Optional[str] = None,
    destination: Optional[str] = None,
    vehicle: Optional[VehicleSchema] = None
) -> Trip:
    """
    Start a trip for ``user_id``.

    The start time always comes from the server clock. Without a name the
    trip is called ``"Trip <ISO date>"``.

    Raises:
        ReferentialError: unknown user
        StorageError: insert failed
    """
    start_time = utcnow()
    trip = await insert_trip(
        db,
        user_id=user_id,
        name=name or default_trip_name(start_time),
        start_time=start_time,
        source=source,
        destination=destination,
        vehicle=vehicle,
    )
    logger.info(
        "Trip started",
        extra={"trip_id": str(trip.id), "user_id": str(user_id), "has_vehicle": vehicle is not None},
    )
    return trip


async def stop_trip(
    db: AsyncSession,
    user_id: uuid.UUID,
    trip_id: uuid.UUID
) -> TripResponse:
    """
    Stop an active trip and attach its route.

    Validates:
    - Trip exists and belongs to ``user_id`` (otherwise "Trip not found")
    - Trip is still ACTIVE

    Actions:
    - Set end_time, status COMPLETED and duration in one conditional update
    - Read the route back ordered by sample timestamp

    A failure while reading the route is logged and yields an empty route;
    the completion itself is already committed.

    Raises:
        NotFoundError: no trip with this id for this user
        TripAlreadyCompletedError: trip was stopped before (or concurrently)
        StorageError: the update could not be committed
    """
    trip = await get_owned_trip(db, trip_id, user_id)
    if trip is None:
        raise NotFoundError("Trip")
    if trip.status == TripStatus.COMPLETED.value:
        raise TripAlreadyCompletedError(trip_id)

    end_time = utcnow()
    try:
        duration = await mark_completed(db, trip, end_time)
        if duration is None:
            await db.rollback()
            raise TripAlreadyCompletedError(trip_id)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError("Could not complete trip") from exc

    # Mirror the committed row without another round trip
    set_committed_value(trip, "end_time", end_time)
    set_committed_value(trip, "status", TripStatus.COMPLETED.value)
    set_committed_value(trip, "duration", duration)

    # Snapshot before the route read; a rollback there expires the instance
    completed = TripResponse.from_trip(trip)

    try:
        route = await fetch_route(db, completed.id)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("Route read failed for completed trip %s: %s", completed.id, exc)
        route = []

    completed.route = [GPSPointResponse.model_validate(p) for p in route]
    logger.info(
        "Trip completed",
        extra={"trip_id": str(completed.id), "duration_s": completed.duration, "points": len(route)},
    )
    return completed
