"""
External calendar collaborator interface.

Busy-time lookups and event mirroring go through one CalendarProvider
interface with interchangeable backends (hosted InstructorOps service or the
Google Calendar API). Every backend treats "instructor not connected" as a
normal answer: an empty busy list, no conflict, no event id. Transport and
server failures raise CalendarProviderError; callers decide how to degrade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
import json
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import httpx

from ..schemas.calendar import (
    BusyInterval,
    CalendarConflictCheck,
    CalendarEventData,
    CalendarEventUpdate,
)
from ..utils.intervals import overlaps

if TYPE_CHECKING:
    from ..core.config import Settings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[str], Optional[str]]


class CalendarProviderError(RuntimeError):
    """Raised when the calendar service cannot be reached or answers with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        error_body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_body = error_body


class CalendarProvider(ABC):
    """Per-instructor busy-time lookups and event mirroring."""

    name: str = "calendar"

    @abstractmethod
    def get_busy_intervals(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> List[BusyInterval]:
        """Busy windows intersecting [start, end); [] when not connected."""

    @abstractmethod
    def create_event(self, instructor_id: str, event: CalendarEventData) -> Optional[str]:
        """Create an event and return its id, or None when not connected."""

    @abstractmethod
    def update_event(
        self, instructor_id: str, event_id: str, update: CalendarEventUpdate
    ) -> bool:
        """Move or edit an event; False when not connected or unknown."""

    @abstractmethod
    def delete_event(
        self, instructor_id: str, event_id: str, calendar_id: Optional[str] = None
    ) -> bool:
        """Delete an event; False when not connected or unknown."""

    def check_conflict(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> CalendarConflictCheck:
        """Fresh lookup of a busy window overlapping [start, end)."""
        for busy in self.get_busy_intervals(instructor_id, start, end):
            if overlaps(start, end, busy.start, busy.end):
                return CalendarConflictCheck(has_conflict=True, conflicting_event=busy)
        return CalendarConflictCheck(has_conflict=False)


class NullCalendarProvider(CalendarProvider):
    """Backend used when no calendar service is configured."""

    name = "none"

    def get_busy_intervals(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> List[BusyInterval]:
        return []

    def create_event(self, instructor_id: str, event: CalendarEventData) -> Optional[str]:
        return None

    def update_event(
        self, instructor_id: str, event_id: str, update: CalendarEventUpdate
    ) -> bool:
        return False

    def delete_event(
        self, instructor_id: str, event_id: str, calendar_id: Optional[str] = None
    ) -> bool:
        return False


class HttpCalendarProvider(CalendarProvider):
    """Shared request handling for the HTTP calendar backends."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Dict[str, Any] | None = None,
        params: Dict[str, Any] | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Optional[Any]:
        """
        Perform a request and return the parsed JSON payload.

        Returns:
            Parsed JSON, {} for an empty body, or None when the service answers 404

        Raises:
            CalendarProviderError: On transport failure, any other error status,
                or a malformed body
        """
        url = f"{self._base_url}{path}"
        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        ) as client:
            request = client.build_request(
                method, url, json=json_body, params=params, headers=headers
            )
            try:
                response = client.send(request)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status == 404:
                    logger.info(
                        "%s answered 404 for %s %s; treating as not connected",
                        self.name,
                        method,
                        path,
                    )
                    return None
                logger.error(
                    "%s API error %s for %s %s: %s",
                    self.name,
                    status,
                    method,
                    path,
                    exc.response.text[:500],
                )
                raise CalendarProviderError(
                    f"{self.name} responded with status {status}",
                    status_code=status,
                    error_body=exc.response.text[:500],
                ) from exc
            except httpx.RequestError as exc:
                logger.error("%s request failure for %s %s: %s", self.name, method, path, str(exc))
                raise CalendarProviderError(f"Failed to reach {self.name}") from exc

        if not response.content:
            return {}
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from %s for %s %s", self.name, method, path)
            raise CalendarProviderError(f"Received malformed JSON from {self.name}") from exc

    @staticmethod
    def _parse_busy(
        items: Any, *, label_key: str, calendar_id: Optional[str] = None
    ) -> List[BusyInterval]:
        if not isinstance(items, list):
            raise CalendarProviderError("Busy-time payload is not a list")
        intervals: List[BusyInterval] = []
        for item in items:
            try:
                intervals.append(
                    BusyInterval(
                        start=item["start"],
                        end=item["end"],
                        label=item.get(label_key),
                        calendar_id=item.get("calendarId", calendar_id),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed busy interval %r: %s", item, exc)
        return intervals


def create_calendar_provider(
    config: Optional["Settings"] = None,
    *,
    token_provider: Optional[TokenProvider] = None,
    transport: httpx.BaseTransport | None = None,
) -> CalendarProvider:
    """
    Build the configured calendar backend.

    Args:
        config: Settings to read; defaults to the global settings
        token_provider: Access-token lookup, required by the Google backend
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """
    if config is None:
        from ..core.config import settings as config

    provider = config.calendar_provider
    if provider == "instructor_ops":
        from .instructor_ops_client import InstructorOpsClient

        return InstructorOpsClient(
            base_url=config.instructor_ops_base_url,
            api_key=config.instructor_ops_api_key,
            timeout=config.calendar_timeout_seconds,
            transport=transport,
        )
    if provider == "google":
        if token_provider is None:
            logger.warning(
                "Google calendar backend selected without a token provider; calendar disabled"
            )
            return NullCalendarProvider()
        from .google_calendar_client import GoogleCalendarClient

        return GoogleCalendarClient(
            token_provider=token_provider,
            base_url=config.google_calendar_base_url,
            timeout=config.calendar_timeout_seconds,
            transport=transport,
        )
    return NullCalendarProvider()
