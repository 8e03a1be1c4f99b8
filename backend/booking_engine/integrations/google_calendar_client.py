"""
Google Calendar v3 backend.

Busy times come from the freeBusy endpoint; mirrored appointments are events
on the instructor's primary calendar (or the one they selected). Access
tokens are looked up per instructor; no token means not connected.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..schemas.calendar import BusyInterval, CalendarEventData, CalendarEventUpdate
from .calendar_provider import CalendarProviderError, HttpCalendarProvider, TokenProvider

logger = logging.getLogger(__name__)

PRIMARY_CALENDAR = "primary"


class GoogleCalendarClient(HttpCalendarProvider):
    """Thin client for the Google Calendar REST API."""

    name = "Google Calendar"

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        base_url: str = "https://www.googleapis.com/calendar/v3",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self._token_provider = token_provider

    def _auth_headers(self, instructor_id: str) -> Optional[Dict[str, str]]:
        token = self._token_provider(instructor_id)
        if not token:
            return None
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _events_path(calendar_id: Optional[str], event_id: Optional[str] = None) -> str:
        path = f"/calendars/{quote(calendar_id or PRIMARY_CALENDAR, safe='')}/events"
        if event_id:
            path = f"{path}/{quote(event_id, safe='')}"
        return path

    def get_busy_intervals(
        self, instructor_id: str, start: datetime, end: datetime
    ) -> List[BusyInterval]:
        headers = self._auth_headers(instructor_id)
        if headers is None:
            return []
        payload = self._request(
            "POST",
            "/freeBusy",
            json_body={
                "timeMin": start.isoformat(),
                "timeMax": end.isoformat(),
                "items": [{"id": PRIMARY_CALENDAR}],
            },
            headers=headers,
        )
        if payload is None:
            return []
        calendar = (payload.get("calendars") or {}).get(PRIMARY_CALENDAR) or {}
        if calendar.get("errors"):
            raise CalendarProviderError(
                "Google freeBusy reported calendar errors", error_body=calendar["errors"]
            )
        return self._parse_busy(
            calendar.get("busy", []), label_key="summary", calendar_id=PRIMARY_CALENDAR
        )

    def create_event(self, instructor_id: str, event: CalendarEventData) -> Optional[str]:
        headers = self._auth_headers(instructor_id)
        if headers is None:
            return None
        body: Dict[str, Any] = {
            "summary": event.summary,
            "start": {"dateTime": event.start.isoformat()},
            "end": {"dateTime": event.end.isoformat()},
        }
        if event.description:
            body["description"] = event.description
        if event.attendees:
            body["attendees"] = [{"email": email} for email in event.attendees]
        payload = self._request(
            "POST", self._events_path(event.calendar_id), json_body=body, headers=headers
        )
        if payload is None:
            return None
        return payload.get("id") or None

    def update_event(
        self, instructor_id: str, event_id: str, update: CalendarEventUpdate
    ) -> bool:
        headers = self._auth_headers(instructor_id)
        if headers is None:
            return False
        body: Dict[str, Any] = {}
        if update.start is not None:
            body["start"] = {"dateTime": update.start.isoformat()}
        if update.end is not None:
            body["end"] = {"dateTime": update.end.isoformat()}
        payload = self._request(
            "PATCH",
            self._events_path(update.calendar_id, event_id),
            json_body=body,
            headers=headers,
        )
        return payload is not None

    def delete_event(
        self, instructor_id: str, event_id: str, calendar_id: Optional[str] = None
    ) -> bool:
        headers = self._auth_headers(instructor_id)
        if headers is None:
            return False
        try:
            payload = self._request(
                "DELETE", self._events_path(calendar_id, event_id), headers=headers
            )
        except CalendarProviderError as exc:
            # 410 Gone: already deleted on the calendar side
            if exc.status_code == 410:
                return True
            raise
        return payload is not None
