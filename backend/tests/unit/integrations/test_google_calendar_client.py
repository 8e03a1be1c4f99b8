"""Google Calendar backend against a mocked transport."""

from datetime import datetime, timezone
import json

import httpx
import pytest

from booking_engine.integrations.calendar_provider import CalendarProviderError
from booking_engine.integrations.google_calendar_client import GoogleCalendarClient
from booking_engine.schemas.calendar import CalendarEventData

START = datetime(2026, 1, 5, 16, 0, tzinfo=timezone.utc)
END = datetime(2026, 1, 5, 17, 0, tzinfo=timezone.utc)


def _client(handler, token="tok") -> GoogleCalendarClient:
    return GoogleCalendarClient(
        token_provider=lambda instructor_id: token,
        base_url="https://google.test/calendar/v3",
        transport=httpx.MockTransport(handler),
    )


def _unreachable(request):
    raise AssertionError("no request expected")


class TestFreeBusy:
    def test_busy_windows_from_primary_calendar(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/calendar/v3/freeBusy"
            assert request.headers["Authorization"] == "Bearer tok"
            assert json.loads(request.content)["items"] == [{"id": "primary"}]
            return httpx.Response(
                200,
                json={
                    "calendars": {
                        "primary": {
                            "busy": [
                                {"start": "2026-01-05T16:00:00Z", "end": "2026-01-05T16:30:00Z"}
                            ]
                        }
                    }
                },
            )

        intervals = _client(handler).get_busy_intervals("inst-1", START, END)
        assert [(item.start, item.calendar_id) for item in intervals] == [(START, "primary")]

    def test_calendar_errors_raise(self):
        payload = {"calendars": {"primary": {"errors": [{"reason": "notFound"}]}}}
        client = _client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(CalendarProviderError):
            client.get_busy_intervals("inst-1", START, END)

    def test_no_token_means_not_connected(self):
        client = _client(_unreachable, token=None)
        assert client.get_busy_intervals("inst-1", START, END) == []
        assert client.create_event(
            "inst-1", CalendarEventData(summary="x", start=START, end=END)
        ) is None
        assert client.delete_event("inst-1", "evt-1") is False


class TestEvents:
    def test_create_on_selected_calendar(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/calendar/v3/calendars/cal-42/events"
            body = json.loads(request.content)
            assert body["attendees"] == [{"email": "sam@example.com"}]
            return httpx.Response(200, json={"id": "g-evt"})

        event = CalendarEventData(
            summary="Piano Lesson - Sam Lee",
            start=START,
            end=END,
            attendees=["sam@example.com"],
            calendar_id="cal-42",
        )
        assert _client(handler).create_event("inst-1", event) == "g-evt"

    def test_delete_gone_event_counts_as_deleted(self):
        client = _client(lambda request: httpx.Response(410, json={"error": "deleted"}))
        assert client.delete_event("inst-1", "evt-1") is True

    def test_delete_server_error_raises(self):
        client = _client(lambda request: httpx.Response(503))
        with pytest.raises(CalendarProviderError):
            client.delete_event("inst-1", "evt-1")
