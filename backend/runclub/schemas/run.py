from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


def _number_or_nan(v):
    """Coerce to float; unparseable input becomes NaN for the validator to reject."""
    if v is None or isinstance(v, float):
        return v
    if isinstance(v, bool):
        return float("nan")
    try:
        return float(v)
    except (TypeError, ValueError):
        return float("nan")


class PathPoint(BaseModel):
    # Incomplete or unreadable samples are kept as None and skipped
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _unreadable_to_none(cls, v):
        if v is None or isinstance(v, bool):
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None


class RunSubmission(BaseModel):
    """Body of a run submission.

    Every field is optional at this layer so that missing or out-of-range
    values are reported by the run validator with a specific error code
    instead of a generic schema error.
    """

    distance: Optional[float] = None  # meters
    duration: Optional[float] = None  # minutes
    pace: Optional[float] = None      # km/h
    date: Optional[datetime] = None   # defaults to submission time
    location: Optional[str] = None    # "Start → End"
    path: Optional[list[PathPoint]] = None

    # Be lenient with extra fields from clients
    model_config = ConfigDict(extra="ignore")

    @field_validator("distance", "duration", "pace", mode="before")
    @classmethod
    def _coerce_number(cls, v):
        return _number_or_nan(v)

    # The path is advisory, so a malformed one is dropped rather than rejected
    @field_validator("path", mode="before")
    @classmethod
    def _drop_malformed_path(cls, v: Any):
        if not isinstance(v, list):
            return None
        return [p for p in v if isinstance(p, (dict, PathPoint))]


class RunRead(BaseModel):
    """Schema returned when reading a run."""

    id: int
    user_id: int
    distance: float
    duration: float
    duration_hhmmss: str  # e.g. "00:30:00"
    pace: Optional[float] = None
    avg_speed_kmh: float
    date: datetime
    location: Optional[str] = None
    source: Optional[str] = None
    created_at: Optional[datetime] = None
    # Relative GPS/reported distance gap, only set on submission responses
    path_discrepancy: Optional[float] = None
