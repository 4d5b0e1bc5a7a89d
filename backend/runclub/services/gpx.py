from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import gpxpy
import gpxpy.gpx

from runclub.core.errors import InvalidGpx
from runclub.core.geo import path_distance_m
from runclub.schemas.run import PathPoint


@dataclass
class GpxTrack:
    points: list[PathPoint] = field(default_factory=list)
    distance_m: float = 0.0
    duration_min: Optional[float] = None
    started_at: Optional[datetime] = None


def parse_gpx_track(data: bytes) -> GpxTrack:
    """Flatten every track segment of a GPX document into one path.

    Duration spans the first to the last timestamped point.
    """
    try:
        gpx = gpxpy.parse(data.decode("utf-8"))
    except (gpxpy.gpx.GPXException, UnicodeDecodeError, ValueError) as e:
        raise InvalidGpx(f"Invalid GPX file: {e}", field="file") from e

    points: list[PathPoint] = []
    first_time = None
    last_time = None

    for track in gpx.tracks:
        for segment in track.segments:
            for p in segment.points:
                points.append(PathPoint(latitude=p.latitude, longitude=p.longitude))
                if p.time:
                    if first_time is None:
                        first_time = p.time
                    last_time = p.time

    if len(points) < 2:
        raise InvalidGpx("GPX file must contain a track with at least two points", field="file")
    if first_time is None or last_time is None:
        raise InvalidGpx("GPX track has no timestamps; duration cannot be derived", field="file")

    return GpxTrack(
        points=points,
        distance_m=path_distance_m((p.latitude, p.longitude) for p in points),
        duration_min=(last_time - first_time).total_seconds() / 60,
        started_at=first_time,
    )
