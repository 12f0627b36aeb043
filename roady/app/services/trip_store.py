"""
Trip store.

Durable trip records keyed by owner. Every lookup is scoped by
``(trip_id, user_id)`` so a caller cannot observe another user's trips.
"""

import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from roady.app.core.clock import as_utc
from roady.app.core.exceptions import ReferentialError, StorageError
from roady.app.models.trip import Trip
from roady.app.models.trip_enums import TripStatus
from roady.app.schemas.tracking import VehicleSchema


async def insert_trip(
    db: AsyncSession,
    user_id: uuid.UUID,
    name: str,
    start_time: datetime,
    source: Optional[str] = None,
    destination: Optional[str] = None,
    vehicle: Optional[VehicleSchema] = None
) -> Trip:
    """
    Insert a new ACTIVE trip and commit.

    Raises:
        ReferentialError: ``user_id`` does not reference an existing user
        StorageError: any other database failure
    """
    trip = Trip(
        user_id=user_id,
        name=name,
        start_time=start_time,
        status=TripStatus.ACTIVE.value,
        distance=0.0,
        source=source,
        destination=destination,
    )
    if vehicle is not None:
        trip.vehicle_make = vehicle.make
        trip.vehicle_model = vehicle.model
        trip.vehicle_year = vehicle.year

    db.add(trip)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ReferentialError(f"User {user_id} does not exist") from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError("Could not create trip") from exc

    return trip


async def get_owned_trip(
    db: AsyncSession,
    trip_id: uuid.UUID,
    user_id: uuid.UUID
) -> Optional[Trip]:
    """
    Return the trip only if it belongs to ``user_id``.

    Raises:
        StorageError: the lookup could not be executed
    """
    try:
        result = await db.execute(
            select(Trip).where(Trip.id == trip_id, Trip.user_id == user_id)
        )
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError("Could not load trip") from exc
    return result.scalar_one_or_none()


async def mark_completed(
    db: AsyncSession,
    trip: Trip,
    end_time: datetime
) -> Optional[float]:
    """
    Conditionally move an ACTIVE trip to COMPLETED.

    The WHERE clause repeats the identity and ownership check and requires the
    trip to still be ACTIVE, so of two racing stops only one matches a row.
    Does not commit.

    Returns:
        The stored duration in seconds, or None if no row matched
    """
    duration = (end_time - as_utc(trip.start_time)).total_seconds()
    result = await db.execute(
        update(Trip)
        .where(
            Trip.id == trip.id,
            Trip.user_id == trip.user_id,
            Trip.status == TripStatus.ACTIVE.value,
        )
        .values(end_time=end_time, status=TripStatus.COMPLETED.value, duration=duration)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return None
    return duration


async def hold_active(db: AsyncSession, trip_id: uuid.UUID) -> bool:
    """
    Confirm inside the current transaction that the trip is still ACTIVE.

    The no-op update row-locks the trip until commit, so a stop either
    committed before this call (returns False) or waits for the caller's
    commit. Does not commit.
    """
    result = await db.execute(
        update(Trip)
        .where(Trip.id == trip_id, Trip.status == TripStatus.ACTIVE.value)
        .values(status=TripStatus.ACTIVE.value)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def list_user_trips(db: AsyncSession, user_id: uuid.UUID) -> List[Trip]:
    """All trips of a user, most recently started first."""
    result = await db.execute(
        select(Trip).where(Trip.user_id == user_id).order_by(Trip.start_time.desc())
    )
    return list(result.scalars().all())
