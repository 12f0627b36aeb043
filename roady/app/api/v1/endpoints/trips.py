"""
Trip history endpoint.
"""

import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from roady.app.db.session import get_db
from roady.app.core.dependencies import ensure_caller, get_caller_id
from roady.app.schemas.trip import TripResponse
from roady.app.services.trip_query import list_trips

router = APIRouter(tags=["Trips"])


@router.get("/trips", response_model=List[TripResponse], response_model_exclude_none=True)
async def get_trips(
    user_id: Optional[uuid.UUID] = Query(None, alias="userId", description="Owner of the trips"),
    caller_id: Optional[uuid.UUID] = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db)
):
    """
    List the user's trips, newest first. Routes are always empty here.
    """
    if user_id is not None:
        ensure_caller(caller_id, user_id)
    return await list_trips(db, user_id)
