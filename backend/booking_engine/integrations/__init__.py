"""External calendar integrations."""

from .calendar_provider import (
    CalendarProvider,
    CalendarProviderError,
    NullCalendarProvider,
    create_calendar_provider,
)

__all__ = [
    "CalendarProvider",
    "CalendarProviderError",
    "NullCalendarProvider",
    "create_calendar_provider",
]
