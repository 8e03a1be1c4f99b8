"""
Timezone utilities for the booking engine.

Availability is authored as wall-clock "HH:MM" strings in the instructor
timezone, while appointments, course sessions and calendar busy times are
UTC instants. Every crossing between the two goes through this module.

DST handling is deterministic:
- a wall-clock time inside a spring-forward gap does not exist and raises
  NonexistentLocalTimeError
- a wall-clock time repeated by a fall-back transition resolves to the
  earlier instant (the daylight-saving offset)
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from ..utils.time_utils import wall_clock_to_minutes
from .config import settings
from .exceptions import NonexistentLocalTimeError


def get_instructor_timezone(timezone_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Get the timezone availability is interpreted in.

    Args:
        timezone_name: Optional IANA name; defaults to the configured engine timezone

    Returns:
        pytz timezone object
    """
    return pytz.timezone(timezone_name or settings.instructor_timezone)


def ensure_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime (naive values are assumed to be UTC)."""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def to_local(instant: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Convert a UTC instant to an aware datetime in tz."""
    return ensure_utc(instant).astimezone(tz)


def to_local_wall_clock(instant: datetime, tz: pytz.BaseTzInfo) -> str:
    """"HH:MM" wall-clock reading of a UTC instant in tz (seconds are truncated)."""
    return to_local(instant, tz).strftime("%H:%M")


def localize_wall_clock(naive: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """
    Attach tz to a naive local datetime using the engine's DST rule.

    Raises:
        NonexistentLocalTimeError: If the wall-clock time falls in a DST gap
    """
    try:
        return tz.localize(naive, is_dst=None)
    except pytz.exceptions.AmbiguousTimeError:
        # Fall-back overlap: the daylight-saving reading is the earlier instant
        return tz.localize(naive, is_dst=True)
    except pytz.exceptions.NonExistentTimeError:
        raise NonexistentLocalTimeError(naive.strftime("%Y-%m-%d %H:%M"), str(tz))


def local_wall_clock_to_utc(day: date, wall_clock: str, tz: pytz.BaseTzInfo) -> datetime:
    """
    Convert a wall-clock time on a local calendar day to a UTC instant.

    "24:00" maps to midnight at the start of the following day.

    Args:
        day: Local calendar date
        wall_clock: "HH:MM" string
        tz: Timezone the wall-clock time is expressed in

    Returns:
        Aware UTC datetime

    Raises:
        NonexistentLocalTimeError: If the wall-clock time falls in a DST gap
        ValueError: If the wall-clock string is malformed
    """
    minutes = wall_clock_to_minutes(wall_clock)
    naive = datetime.combine(day, time(0, 0)) + timedelta(minutes=minutes)
    return localize_wall_clock(naive, tz).astimezone(pytz.UTC)


def local_day_bounds_utc(
    start_day: date, end_day: date, tz: pytz.BaseTzInfo
) -> tuple[datetime, datetime]:
    """
    UTC instants spanning local midnight of start_day to local midnight after end_day.

    Used to turn an inclusive local date range into a half-open UTC range.
    """
    start_naive = datetime.combine(start_day, time(0, 0))
    end_naive = datetime.combine(end_day + timedelta(days=1), time(0, 0))
    return (
        _localize_boundary(start_naive, tz).astimezone(pytz.UTC),
        _localize_boundary(end_naive, tz).astimezone(pytz.UTC),
    )


def _localize_boundary(naive: datetime, tz: pytz.BaseTzInfo) -> datetime:
    # Some zones skip midnight itself; a range boundary rolls forward past the gap
    try:
        return localize_wall_clock(naive, tz)
    except NonexistentLocalTimeError:
        return tz.normalize(tz.localize(naive, is_dst=False))
