from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.sql import func
from runclub.db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    user_name = Column(String, nullable=False)
    email = Column(String, nullable=True)

    # runner, coach, admin
    role = Column(String(20), nullable=False, server_default="runner")

    # Target cumulative distance (meters)
    goal = Column(Float, nullable=False, default=1.0)

    # Cached sum of this user's run distances (meters).
    # Never written directly; see services.progress.
    progress = Column(Float, nullable=False, default=0.0)

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
