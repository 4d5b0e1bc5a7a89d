import math
from typing import Iterable, Optional, Tuple

from runclub.core.constants import EARTH_RADIUS_M


def haversine(lat1, lon1, lat2, lon2):
    """Return great-circle distance in meters between two WGS84 points.

    Uses the standard haversine formula; sufficient for per-point distances
    over a typical GPS activity track.
    """
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def is_valid_coordinate(lat, lon) -> bool:
    return abs(lat) <= 90 and abs(lon) <= 180


def path_distance_m(points: Iterable[Tuple[float, float]]) -> float:
    """Sum haversine segments along an ordered (lat, lon) sequence.

    Points outside the WGS84 range are skipped; the segment is measured
    between the surrounding valid points.
    """
    total = 0.0
    prev: Optional[Tuple[float, float]] = None
    for lat, lon in points:
        if not is_valid_coordinate(lat, lon):
            continue
        if prev is not None:
            total += haversine(prev[0], prev[1], lat, lon)
        prev = (lat, lon)
    return total
