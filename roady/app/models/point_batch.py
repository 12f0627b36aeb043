"""
Point batch receipts.

One row per accepted batch that carried a client batch id, so a re-sent
batch can be recognised and skipped.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from roady.app.db.session import Base


class PointBatch(Base):
    __tablename__ = "point_batches"
    __table_args__ = (
        UniqueConstraint("trip_id", "batch_id", name="uq_point_batches_trip_batch"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(Uuid, ForeignKey("trips.id"), nullable=False, index=True)
    batch_id = Column(String(128), nullable=False)
    point_count = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<PointBatch(trip_id={self.trip_id}, batch_id='{self.batch_id}', points={self.point_count})>"
