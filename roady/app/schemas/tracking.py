"""
Trip session and telemetry ingestion schemas.
"""

import uuid
from typing import Any, Dict, List, Optional
from pydantic import Field
from roady.app.schemas.common import CamelModel, UTCDateTime


class VehicleSchema(CamelModel):
    """Vehicle descriptor. Stored as a whole or not at all."""
    make: str = Field(..., max_length=100)
    model: str = Field(..., max_length=100)
    year: int


class StartTripRequest(CamelModel):
    """Body of POST /tracking/start."""
    user_id: uuid.UUID
    metadata: Optional[Dict[str, Any]] = None
    source: Optional[str] = None
    destination: Optional[str] = None
    vehicle: Optional[VehicleSchema] = None

    @property
    def name(self) -> Optional[str]:
        """Display name from ``metadata.name`` when it is a non-blank string."""
        if not self.metadata:
            return None
        name = self.metadata.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None


class StartTripResponse(CamelModel):
    """Echoes the generated id and the server's start time."""
    success: bool = True
    trip_id: uuid.UUID
    start_time: UTCDateTime


class StopTripRequest(CamelModel):
    """Body of POST /tracking/stop."""
    user_id: uuid.UUID
    trip_id: uuid.UUID


class GPSPointIn(CamelModel):
    """One telemetry sample as sent by the client."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    altitude: Optional[float] = None
    accuracy: Optional[float] = Field(None, ge=0)
    speed: Optional[float] = None
    heading: Optional[float] = None
    timestamp: UTCDateTime


class UploadPointsRequest(CamelModel):
    """
    Body of POST /tracking/points.

    ``batch_id`` is an optional client key; a batch re-sent with the same key
    for the same trip is accepted without storing its points again.
    """
    user_id: uuid.UUID
    trip_id: uuid.UUID
    batch_id: Optional[str] = Field(None, min_length=1, max_length=128)
    points: List[GPSPointIn] = Field(default_factory=list)
