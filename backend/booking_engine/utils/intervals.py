"""
Interval arithmetic shared by the resolver, slot generator and validator.

All intervals are half-open [start, end): an interval ending at T and one
starting at T do not overlap, which is what lets bookings sit back to back.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, List, Protocol, TypeVar

from ..schemas.availability import AvailabilityBlock
from .time_utils import minutes_to_time_str, wall_clock_to_minutes


class _Comparable(Protocol):
    def __lt__(self, other: "_Comparable", /) -> bool:
        ...


C = TypeVar("C", bound=_Comparable)


def overlaps(a_start: C, a_end: C, b_start: C, b_end: C) -> bool:
    """Strict half-open overlap test."""
    return a_start < b_end and b_start < a_end


def subtract_interval(
    block: AvailabilityBlock, remove_start: str, remove_end: str
) -> List[AvailabilityBlock]:
    """
    Remove a wall-clock window from a block.

    Returns:
        [block] when the window is disjoint, one remainder when it covers an
        edge, two remainders when it sits strictly inside, [] when it covers
        the whole block.
    """
    block_start = block.start_minutes
    block_end = block.end_minutes
    cut_start = wall_clock_to_minutes(remove_start)
    cut_end = wall_clock_to_minutes(remove_end)
    if cut_end <= cut_start:
        raise ValueError(f"Removal window {remove_start}-{remove_end} is empty")

    if cut_end <= block_start or cut_start >= block_end:
        return [block]

    remainders: List[AvailabilityBlock] = []
    if cut_start > block_start:
        remainders.append(block.model_copy(update={"end_time": minutes_to_time_str(cut_start)}))
    if cut_end < block_end:
        remainders.append(block.model_copy(update={"start_time": minutes_to_time_str(cut_end)}))
    return remainders


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """Yield every calendar day from start_date to end_date inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def day_of_week(day: date) -> int:
    """Day index with 0 = Sunday, matching the stored weekly templates."""
    return (day.weekday() + 1) % 7


def date_key(day: date) -> str:
    return day.isoformat()
