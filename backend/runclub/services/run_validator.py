"""
Run submission validator.

Decides whether a submitted run is physically plausible and normalizes it
into a `ValidatedRun`. Checks run in a fixed order and the first failure
wins, so a run with a bad distance is always reported as such regardless of
its other fields.

Units: distance in meters, duration in minutes, pace and speeds in km/h.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple
import logging
import math

from runclub.core.constants import (
    MAX_LOCATION_LENGTH,
    MAX_PACE_KMH,
    MAX_SPEED_KMH,
    MIN_DISTANCE_M,
    MIN_PACE_KMH,
    MIN_SPEED_KMH,
    PATH_DISTANCE_TOLERANCE,
)
from runclub.core.errors import (
    DurationTooLong,
    DurationTooShort,
    InvalidDistance,
    InvalidDuration,
    InvalidPace,
    LocationTooLong,
)
from runclub.core.geo import is_valid_coordinate, path_distance_m
from runclub.core.time_utils import ensure_utc, utcnow
from runclub.schemas.run import PathPoint, RunSubmission

logger = logging.getLogger(__name__)

# Relative slack when comparing a duration with a speed bound
BOUND_REL_TOL = 1e-9


@dataclass
class PathCheck:
    """Outcome of comparing a GPS path with the reported distance."""

    computed_m: float
    reported_m: float
    discrepancy: float  # |computed - reported| / reported

    @property
    def within_tolerance(self) -> bool:
        return self.discrepancy <= PATH_DISTANCE_TOLERANCE


@dataclass
class ValidatedRun:
    user_id: int
    distance: float
    duration: float
    date: datetime
    pace: Optional[float] = None
    location: Optional[str] = None
    path_check: Optional[PathCheck] = None

    @property
    def path_discrepancy(self) -> Optional[float]:
        return self.path_check.discrepancy if self.path_check else None


def duration_bounds(distance_m: float) -> Tuple[float, float]:
    """Return (min, max) plausible duration in minutes for a distance.

    Example: 5000 m -> (20.0, 600.0)
    """
    minimum = (distance_m / 1000) / MAX_SPEED_KMH * 60
    maximum = (distance_m / 1000) / MIN_SPEED_KMH * 60
    return minimum, maximum


def _on_bound(value: float, bound: float) -> bool:
    # Float rounding in the bound must not push an exact boundary outside
    return math.isclose(value, bound, rel_tol=BOUND_REL_TOL)


def check_path(path: Iterable[PathPoint], reported_m: float) -> Optional[PathCheck]:
    """Cross-check a GPS path against the reported distance.

    Returns None when fewer than two usable points remain after dropping
    incomplete or out-of-range coordinates. Never raises for a mismatch:
    GPS noise legitimately disagrees with what the runner typed.
    """
    coords = [
        (p.latitude, p.longitude)
        for p in path
        if p.latitude is not None
        and p.longitude is not None
        and is_valid_coordinate(p.latitude, p.longitude)
    ]
    if len(coords) < 2 or reported_m <= 0:
        return None

    computed = path_distance_m(coords)
    return PathCheck(
        computed_m=computed,
        reported_m=reported_m,
        discrepancy=abs(computed - reported_m) / reported_m,
    )


def validate_run(
    user_id: int,
    submission: RunSubmission,
    now: Optional[datetime] = None,
) -> ValidatedRun:
    """Validate a submission and return the normalized run.

    Raises a `RunValidationError` subclass on the first failed rule.
    """
    distance = submission.distance
    if distance is None:
        raise InvalidDistance("Distance is required", field="distance")
    if math.isnan(distance):
        raise InvalidDistance("Distance must be a number", field="distance")
    if not distance >= MIN_DISTANCE_M:
        raise InvalidDistance(
            f"Distance must be at least {MIN_DISTANCE_M:g} meters", field="distance"
        )

    duration = submission.duration
    if duration is None:
        raise InvalidDuration("Duration is required", field="duration")
    if math.isnan(duration):
        raise InvalidDuration("Duration must be a number", field="duration")
    if not duration > 0:
        raise InvalidDuration("Duration must be greater than 0", field="duration")

    pace = submission.pace
    if pace is not None and not (MIN_PACE_KMH <= pace <= MAX_PACE_KMH):
        raise InvalidPace(
            f"Pace must be between {MIN_PACE_KMH:g} and {MAX_PACE_KMH:g} km/h",
            field="pace",
        )

    location = submission.location
    if location is not None and len(location) > MAX_LOCATION_LENGTH:
        raise LocationTooLong(
            f"Location string cannot exceed {MAX_LOCATION_LENGTH} characters",
            field="location",
        )

    min_minutes, max_minutes = duration_bounds(distance)
    if duration < min_minutes and not _on_bound(duration, min_minutes):
        raise DurationTooShort(
            f"Duration of {duration:g} min is too short for {distance:g} m "
            f"(minimum {min_minutes:.1f} min at {MAX_SPEED_KMH:g} km/h)",
            field="duration",
        )
    if duration > max_minutes and not _on_bound(duration, max_minutes):
        raise DurationTooLong(
            f"Duration of {duration:g} min is too long for {distance:g} m "
            f"(maximum {max_minutes:.1f} min at {MIN_SPEED_KMH:g} km/h)",
            field="duration",
        )

    path_result = None
    if submission.path:
        path_result = check_path(submission.path, distance)
        if path_result is not None and not path_result.within_tolerance:
            logger.warning(
                "GPS path distance %.0f m disagrees with reported %.0f m (%.0f%%) for user %s",
                path_result.computed_m,
                path_result.reported_m,
                path_result.discrepancy * 100,
                user_id,
                extra={
                    "extra_fields": {
                        "user_id": user_id,
                        "computed_m": path_result.computed_m,
                        "reported_m": path_result.reported_m,
                        "discrepancy": path_result.discrepancy,
                    }
                },
            )

    return ValidatedRun(
        user_id=user_id,
        distance=float(distance),
        duration=float(duration),
        pace=float(pace) if pace is not None else None,
        date=ensure_utc(submission.date) if submission.date else (now or utcnow()),
        location=location,
        path_check=path_result,
    )
