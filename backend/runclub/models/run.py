from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from runclub.db import Base

class Run(Base):
    __tablename__ = "runs"
    __table_args__ = (Index("ix_runs_user_id_date", "user_id", "date"),)

    id = Column(Integer, primary_key=True, index=True)

    # Owner; runs never change hands
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    distance = Column(Float, nullable=False)  # meters
    duration = Column(Float, nullable=False)  # minutes
    pace = Column(Float, nullable=True)       # km/h, as reported by the client

    date = Column(DateTime(timezone=True), nullable=False)

    # "Start → End"
    location = Column(String(500), nullable=True)

    # Source of run data
    source = Column(
        String(20),
        nullable=False,
        server_default="manual",  # manual entry or gpx import
    )

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # The GPS path is only used to cross-check distance and is NOT stored
