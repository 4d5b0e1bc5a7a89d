from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def minutes_to_hhmmss(minutes: float) -> str:
    """
    Convert a duration in minutes -> 'HH:MM:SS'.
    Example: 45.5 -> '00:45:30'
    """
    total_seconds = int(round(minutes * 60))
    hours = total_seconds // 3600
    mins = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{mins:02d}:{seconds:02d}"


def compute_speed_kmh(distance_m: float, duration_min: float) -> float:
    """
    Average speed in km/h.
    Example: distance=5000, duration=30 -> 10.0
    """
    if duration_min <= 0:
        return 0.0
    return (distance_m / 1000) / (duration_min / 60)
