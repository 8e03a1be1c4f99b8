from __future__ import annotations

from ..core.constants import MINUTES_PER_DAY


def wall_clock_to_minutes(value: str) -> int:
    """
    Convert an "HH:MM" (or "HH:MM:SS") wall-clock string to minutes since midnight.

    "24:00" is accepted as the end-of-day sentinel and returns 1440.
    Seconds are truncated; the engine works at minute granularity.
    """
    parts = (value or "").strip().split(":")
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid wall-clock time: {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    if hours == 24 and minutes == 0:
        return MINUTES_PER_DAY
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Invalid wall-clock time: {value!r}")
    return hours * 60 + minutes


def minutes_to_time_str(minutes: int) -> str:
    """
    Convert minutes since midnight to HH:MM.

    1440 is rendered as "24:00".
    """
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    if minutes == MINUTES_PER_DAY:
        return "24:00"
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_wall_clock(value: str) -> str:
    """Canonical "HH:MM" form of a stored wall-clock string ("09:00:00" -> "09:00")."""
    return minutes_to_time_str(wall_clock_to_minutes(value))
