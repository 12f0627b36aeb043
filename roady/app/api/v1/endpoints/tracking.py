"""
Trip tracking API endpoints.

Start a trip, stream point batches while it is active, stop it.
"""

import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from roady.app.db.session import get_db
from roady.app.core.dependencies import ensure_caller, get_caller_id
from roady.app.schemas.tracking import (
    StartTripRequest, StartTripResponse, StopTripRequest, UploadPointsRequest
)
from roady.app.schemas.trip import StopTripResponse
from roady.app.services import ingestion, trip_session

router = APIRouter(prefix="/tracking", tags=["Tracking"])


@router.post("/start", response_model=StartTripResponse)
async def start_trip(
    request: StartTripRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Start a trip.

    Returns the new trip id and the server-side start time the client should
    align its local timer with.
    """
    ensure_caller(caller_id, request.user_id)

    trip = await trip_session.start_trip(
        db,
        user_id=request.user_id,
        name=request.name,
        source=request.source,
        destination=request.destination,
        vehicle=request.vehicle,
    )
    return StartTripResponse(trip_id=trip.id, start_time=trip.start_time)


@router.post("/stop", response_model=StopTripResponse, response_model_exclude_none=True)
async def stop_trip(
    request: StopTripRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Stop an active trip.

    Returns the completed trip with its route ordered by sample time.
    """
    ensure_caller(caller_id, request.user_id)

    trip = await trip_session.stop_trip(db, user_id=request.user_id, trip_id=request.trip_id)
    return StopTripResponse(trip=trip)


@router.post("/points", status_code=status.HTTP_200_OK, response_class=Response)
async def upload_points(
    request: UploadPointsRequest,
    caller_id: Optional[uuid.UUID] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload a batch of GPS points for an active trip.

    The whole batch is stored or none of it is. Empty body on success.
    """
    ensure_caller(caller_id, request.user_id)

    await ingestion.upload_points(
        db,
        user_id=request.user_id,
        trip_id=request.trip_id,
        points=request.points,
        batch_id=request.batch_id,
    )
    return Response(status_code=status.HTTP_200_OK)
