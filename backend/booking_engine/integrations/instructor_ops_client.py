"""Client for the hosted InstructorOps calendar service."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import SecretStr

from ..schemas.calendar import BusyInterval, CalendarEventData, CalendarEventUpdate
from .calendar_provider import CalendarProviderError, HttpCalendarProvider

logger = logging.getLogger(__name__)


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


class InstructorOpsClient(HttpCalendarProvider):
    """
    Thin client for the InstructorOps REST API.

    The service holds each instructor's calendar credentials; requests only
    name the instructor. A 404 means the instructor never connected.
    """

    name = "InstructorOps"

    def __init__(
        self,
        *,
        base_url: str = "https://auth.instructorops.com",
        api_key: str | SecretStr | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        secret_value = api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        self._headers: Dict[str, str] = (
            {"Authorization": f"Bearer {secret_value}"} if secret_value else {}
        )

    def get_busy_intervals(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> List[BusyInterval]:
        payload = self._request(
            "GET",
            "/api/calendars/busy",
            params={"instructorId": instructor_id, "start": _iso(start), "end": _iso(end)},
            headers=self._headers,
        )
        if payload is None:
            return []
        return self._parse_busy(payload, label_key="summary")

    def create_event(self, instructor_id: str, event: CalendarEventData) -> Optional[str]:
        body: Dict[str, Any] = {
            "instructorId": instructor_id,
            "start": _iso(event.start),
            "end": _iso(event.end),
            "summary": event.summary,
            "description": event.description,
            "attendees": event.attendees,
            "calendarId": event.calendar_id,
        }
        payload = self._request(
            "POST",
            "/api/events/create",
            json_body={key: value for key, value in body.items() if value is not None},
            headers=self._headers,
        )
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise CalendarProviderError("Unexpected create-event payload from InstructorOps")
        return payload.get("eventId") or None

    def update_event(
        self, instructor_id: str, event_id: str, update: CalendarEventUpdate
    ) -> bool:
        body: Dict[str, Any] = {"instructorId": instructor_id}
        if update.start is not None:
            body["start"] = _iso(update.start)
        if update.end is not None:
            body["end"] = _iso(update.end)
        if update.calendar_id is not None:
            body["calendarId"] = update.calendar_id
        payload = self._request(
            "PATCH", f"/api/events/{event_id}", json_body=body, headers=self._headers
        )
        return payload is not None

    def delete_event(
        self, instructor_id: str, event_id: str, calendar_id: Optional[str] = None
    ) -> bool:
        body: Dict[str, Any] = {"instructorId": instructor_id}
        if calendar_id:
            body["calendarId"] = calendar_id
        payload = self._request(
            "DELETE", f"/api/events/{event_id}", json_body=body, headers=self._headers
        )
        return payload is not None
