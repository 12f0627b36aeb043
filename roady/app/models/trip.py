"""
Trip database model.

A trip is opened by its owner, collects GPS points while active and is
closed exactly once.
"""

import uuid
from sqlalchemy import Column, Float, ForeignKey, DateTime, Integer, String, Text, Uuid
from sqlalchemy.sql import func
from roady.app.db.session import Base
from roady.app.models.trip_enums import TripStatus


class Trip(Base):
    """
    Trip model.

    ``end_time`` and ``duration`` stay NULL until the trip is stopped.
    ``distance`` is kept at its initial value; it is not derived from points.
    The vehicle columns are written together or not at all.
    """
    __tablename__ = "trips"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Ownership - Trip belongs to the user who started it
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=True)

    # Lifecycle; stored as the TripStatus value and checked when rows are read out
    status = Column(
        String(16),
        default=TripStatus.ACTIVE.value,
        nullable=False,
        index=True,
    )
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    distance = Column(Float, default=0.0, nullable=False)
    duration = Column(Float, nullable=True)  # seconds

    # Free-text labels
    source = Column(Text, nullable=True)
    destination = Column(Text, nullable=True)

    # Optional vehicle descriptor
    vehicle_make = Column(String(100), nullable=True)
    vehicle_model = Column(String(100), nullable=True)
    vehicle_year = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def has_vehicle(self) -> bool:
        return any(v is not None for v in (self.vehicle_make, self.vehicle_model, self.vehicle_year))

    def __repr__(self):
        return f"<Trip(id={self.id}, user_id={self.user_id}, status='{self.status}')>"
