"""Wall-clock to UTC conversion, including DST transitions."""

from datetime import date, datetime

import pytest
import pytz

from booking_engine.core.exceptions import NonexistentLocalTimeError
from booking_engine.core.timezone_utils import (
    ensure_utc,
    get_instructor_timezone,
    local_day_bounds_utc,
    local_wall_clock_to_utc,
    to_local,
    to_local_wall_clock,
)

DENVER = pytz.timezone("America/Denver")


class TestLocalWallClockToUtc:
    def test_winter_offset(self):
        assert local_wall_clock_to_utc(date(2026, 1, 5), "09:00", DENVER) == pytz.UTC.localize(
            datetime(2026, 1, 5, 16, 0)
        )

    def test_end_of_day_sentinel_is_next_midnight(self):
        assert local_wall_clock_to_utc(date(2026, 1, 5), "24:00", DENVER) == pytz.UTC.localize(
            datetime(2026, 1, 6, 7, 0)
        )

    def test_spring_forward_gap_raises(self):
        with pytest.raises(NonexistentLocalTimeError) as exc_info:
            local_wall_clock_to_utc(date(2024, 3, 10), "02:30", DENVER)
        assert exc_info.value.code == "NONEXISTENT_LOCAL_TIME"

    def test_fall_back_resolves_to_earlier_instant(self):
        # 01:30 happens twice; the first (MDT, UTC-6) wins
        assert local_wall_clock_to_utc(date(2024, 11, 3), "01:30", DENVER) == pytz.UTC.localize(
            datetime(2024, 11, 3, 7, 30)
        )


class TestDayBounds:
    def test_spring_forward_day_is_23_hours(self):
        start, end = local_day_bounds_utc(date(2024, 3, 10), date(2024, 3, 10), DENVER)
        assert (end - start).total_seconds() == 23 * 3600

    def test_range_covers_every_day(self):
        start, end = local_day_bounds_utc(date(2026, 1, 5), date(2026, 1, 6), DENVER)
        assert start == pytz.UTC.localize(datetime(2026, 1, 5, 7, 0))
        assert end == pytz.UTC.localize(datetime(2026, 1, 7, 7, 0))


def test_ensure_utc_treats_naive_as_utc():
    assert ensure_utc(datetime(2026, 1, 5, 9, 0)).tzinfo is not None
    assert ensure_utc(datetime(2026, 1, 5, 9, 0)).hour == 9


def test_to_local_round_trips_wall_clock():
    local = to_local(pytz.UTC.localize(datetime(2026, 1, 5, 16, 0)), DENVER)
    assert (local.hour, local.minute) == (9, 0)


class TestToLocalWallClock:
    def test_round_trips_with_local_wall_clock_to_utc(self):
        for day in (date(2026, 1, 5), date(2024, 3, 10), date(2024, 11, 3)):
            for wall_clock in ("00:30", "09:15", "23:45"):
                instant = local_wall_clock_to_utc(day, wall_clock, DENVER)
                assert to_local_wall_clock(instant, DENVER) == wall_clock

    def test_seconds_truncated(self):
        instant = pytz.UTC.localize(datetime(2026, 1, 5, 16, 5, 59))
        assert to_local_wall_clock(instant, DENVER) == "09:05"


def test_default_timezone_comes_from_settings():
    assert get_instructor_timezone().zone
