"""
GPS point database model.

Append-only telemetry samples; a trip's route is its points ordered by
``timestamp``.
"""

from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Uuid
from sqlalchemy.sql import func
from roady.app.db.session import Base


class GPSPoint(Base):
    """
    GPS Point model.

    ``timestamp`` is the client sample time and drives route ordering;
    ``created_at`` is when the row was stored. Rows are never updated.
    """
    __tablename__ = "points"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    trip_id = Column(Uuid, ForeignKey("trips.id"), nullable=False, index=True)

    # GPS coordinates
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    altitude = Column(Float, nullable=True)
    accuracy = Column(Float, nullable=True)  # meters
    speed = Column(Float, nullable=True)  # m/s
    heading = Column(Float, nullable=True)  # degrees

    # Timing
    timestamp = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<GPSPoint(trip_id={self.trip_id}, lat={self.latitude}, lng={self.longitude})>"
