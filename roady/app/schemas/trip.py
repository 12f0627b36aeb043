"""
Trip response schemas.
"""

import uuid
from typing import List, Optional, Sequence
from roady.app.models.trip import Trip
from roady.app.models.gps_point import GPSPoint
from roady.app.models.trip_enums import TripStatus
from roady.app.schemas.common import CamelModel, UTCDateTime
from roady.app.schemas.tracking import VehicleSchema


class GPSPointResponse(CamelModel):
    """One point of a route."""
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    heading: Optional[float] = None
    timestamp: UTCDateTime


class TripResponse(CamelModel):
    """Schema for trip response. ``route`` is only populated by stop."""
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    start_time: UTCDateTime
    end_time: Optional[UTCDateTime] = None
    distance: float
    duration: Optional[float] = None
    status: TripStatus
    route: List[GPSPointResponse] = []
    source: Optional[str] = None
    destination: Optional[str] = None
    vehicle: Optional[VehicleSchema] = None

    @classmethod
    def from_trip(cls, trip: Trip, route: Sequence[GPSPoint] = ()) -> "TripResponse":
        vehicle = None
        if trip.has_vehicle:
            vehicle = VehicleSchema(
                make=trip.vehicle_make or "",
                model=trip.vehicle_model or "",
                year=trip.vehicle_year or 0,
            )
        return cls(
            id=trip.id,
            user_id=trip.user_id,
            name=trip.name,
            start_time=trip.start_time,
            end_time=trip.end_time,
            distance=trip.distance,
            duration=trip.duration,
            status=trip.status,
            route=[GPSPointResponse.model_validate(p) for p in route],
            source=trip.source,
            destination=trip.destination,
            vehicle=vehicle,
        )


class StopTripResponse(CamelModel):
    """Completed trip with its ordered route."""
    success: bool = True
    trip: TripResponse
