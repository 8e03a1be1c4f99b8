"""Selecting the calendar backend from settings."""

from booking_engine.core.config import Settings
from booking_engine.integrations.calendar_provider import (
    NullCalendarProvider,
    create_calendar_provider,
)
from booking_engine.integrations.google_calendar_client import GoogleCalendarClient
from booking_engine.integrations.instructor_ops_client import InstructorOpsClient


def test_instructor_ops_backend():
    provider = create_calendar_provider(Settings(calendar_provider="instructor_ops"))
    assert isinstance(provider, InstructorOpsClient)


def test_google_backend_needs_token_provider():
    config = Settings(calendar_provider="google")
    assert isinstance(create_calendar_provider(config), NullCalendarProvider)
    provider = create_calendar_provider(config, token_provider=lambda instructor_id: "tok")
    assert isinstance(provider, GoogleCalendarClient)


def test_disabled_backend():
    provider = create_calendar_provider(Settings(calendar_provider="none"))
    assert isinstance(provider, NullCalendarProvider)
    assert provider.get_busy_intervals("inst-1", None, None) == []
    assert not provider.check_conflict("inst-1", None, None).has_conflict
