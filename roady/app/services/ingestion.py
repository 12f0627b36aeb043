"""
Telemetry ingestion service.

A batch of points is stored as one unit: all rows or none. Batches carrying a
client ``batch_id`` are recorded so a re-sent batch is skipped instead of
duplicating the route.
"""

import logging
import uuid
from typing import NamedTuple, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from roady.app.core.exceptions import NotFoundError, StorageError, TripAlreadyCompletedError
from roady.app.models.trip_enums import TripStatus
from roady.app.schemas.tracking import GPSPointIn
from roady.app.services.point_store import add_batch, find_batch, insert_points
from roady.app.services.trip_store import get_owned_trip, hold_active

logger = logging.getLogger(__name__)


class IngestResult(NamedTuple):
    stored: int
    duplicate: bool = False


async def upload_points(
    db: AsyncSession,
    user_id: uuid.UUID,
    trip_id: uuid.UUID,
    points: Sequence[GPSPointIn],
    batch_id: Optional[str] = None
) -> IngestResult:
    """
    Append a batch of points to an active trip.

    Validates:
    - Trip exists and belongs to ``user_id``
    - Trip is ACTIVE

    Raises:
        NotFoundError: no trip with this id for this user
        TripAlreadyCompletedError: trip no longer accepts points
        StorageError: the batch was rejected; nothing was stored
    """
    trip = await get_owned_trip(db, trip_id, user_id)
    if trip is None:
        raise NotFoundError("Trip")
    if trip.status != TripStatus.ACTIVE.value:
        raise TripAlreadyCompletedError(trip_id)

    if not points:
        return IngestResult(stored=0)

    try:
        if batch_id is not None:
            if await find_batch(db, trip_id, batch_id) is not None:
                logger.info("Duplicate batch skipped", extra={"trip_id": str(trip_id), "batch_id": batch_id})
                return IngestResult(stored=0, duplicate=True)
            await add_batch(db, trip_id, batch_id, len(points))
        stored = await insert_points(db, trip_id, points)
        # A stop may have committed since the status check above
        if not await hold_active(db, trip_id):
            await db.rollback()
            raise TripAlreadyCompletedError(trip_id)
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        # A concurrent request may have stored the same batch first
        if batch_id is not None and await find_batch(db, trip_id, batch_id) is not None:
            logger.info("Duplicate batch skipped", extra={"trip_id": str(trip_id), "batch_id": batch_id})
            return IngestResult(stored=0, duplicate=True)
        logger.warning("Batch of %d points rejected for trip %s: %s", len(points), trip_id, exc)
        raise StorageError("Failed to store points; no points from this batch were saved") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("Batch of %d points rejected for trip %s: %s", len(points), trip_id, exc)
        raise StorageError("Failed to store points; no points from this batch were saved") from exc

    logger.info("Points stored", extra={"trip_id": str(trip_id), "points": stored})
    return IngestResult(stored=stored)
