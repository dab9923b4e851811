"""
SQLAlchemy ORM models.

Tables
------
* ``fleet_snapshots`` -- one JSON snapshot of the whole fleet per
  calendar date label (``YYYY-MM-DD``).

Indexes
-------
* **Unique B-Tree** on ``service_date`` -- "latest" is the highest label,
  and saving the same day twice overwrites in place.
"""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, func

from .database import Base


class SnapshotModel(Base):
    __tablename__ = "fleet_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_date = Column(String(10), nullable=False, unique=True)
    schema_version = Column(Integer, nullable=False, default=1)
    payload = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_snapshots_date", "service_date"),)
