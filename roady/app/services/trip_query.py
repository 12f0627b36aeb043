"""
Trip listing.

List views never carry routes; only stopping a trip returns one.
"""

import logging
import uuid
from typing import List, Optional
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from roady.app.core.exceptions import StorageError, ValidationError
from roady.app.schemas.trip import TripResponse
from roady.app.services.trip_store import list_user_trips

logger = logging.getLogger(__name__)


async def list_trips(db: AsyncSession, user_id: Optional[uuid.UUID]) -> List[TripResponse]:
    """
    Trips of ``user_id``, most recently started first, routes empty.

    Rows that cannot be converted are skipped so one bad record does not
    hide the rest. An unknown user simply has no trips.
    """
    if user_id is None:
        raise ValidationError("userId is required")

    try:
        trips = await list_user_trips(db, user_id)
    except SQLAlchemyError as exc:
        raise StorageError("Could not load trips") from exc

    listing = []
    for trip in trips:
        try:
            listing.append(TripResponse.from_trip(trip))
        except SchemaValidationError as exc:
            logger.warning("Skipping malformed trip row %s: %s", trip.id, exc.errors())
    return listing
