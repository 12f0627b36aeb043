"""
Point store.

Append-only GPS samples keyed by trip. Writes here never commit; the
ingestion service owns the transaction so a batch lands all at once.
"""

import uuid
from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import insert, select

from roady.app.models.gps_point import GPSPoint
from roady.app.models.point_batch import PointBatch
from roady.app.schemas.tracking import GPSPointIn


async def find_batch(
    db: AsyncSession,
    trip_id: uuid.UUID,
    batch_id: str
) -> Optional[PointBatch]:
    result = await db.execute(
        select(PointBatch).where(PointBatch.trip_id == trip_id, PointBatch.batch_id == batch_id)
    )
    return result.scalar_one_or_none()


async def add_batch(
    db: AsyncSession,
    trip_id: uuid.UUID,
    batch_id: str,
    point_count: int
) -> PointBatch:
    """
    Record a batch receipt in the current transaction.

    Raises:
        IntegrityError: the ``(trip_id, batch_id)`` pair already exists
    """
    batch = PointBatch(trip_id=trip_id, batch_id=batch_id, point_count=point_count)
    db.add(batch)
    await db.flush()
    return batch


async def insert_points(
    db: AsyncSession,
    trip_id: uuid.UUID,
    points: Sequence[GPSPointIn]
) -> int:
    """
    Insert every point of a batch in the current transaction.

    Returns:
        Number of rows written
    """
    rows = [
        {
            "trip_id": trip_id,
            "latitude": p.latitude,
            "longitude": p.longitude,
            "altitude": p.altitude,
            "accuracy": p.accuracy,
            "speed": p.speed,
            "heading": p.heading,
            "timestamp": p.timestamp,
        }
        for p in points
    ]
    if rows:
        await db.execute(insert(GPSPoint), rows)
    return len(rows)


async def fetch_route(db: AsyncSession, trip_id: uuid.UUID) -> List[GPSPoint]:
    """
    A trip's route: all of its points, oldest sample first.

    Arrival order is irrelevant; samples with equal timestamps keep insertion order.
    """
    result = await db.execute(
        select(GPSPoint)
        .where(GPSPoint.trip_id == trip_id)
        .order_by(GPSPoint.timestamp.asc(), GPSPoint.id.asc())
    )
    return list(result.scalars().all())
