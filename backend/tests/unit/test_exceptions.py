"""Domain exceptions and their HTTP mapping."""

from fastapi import HTTPException
import pytest

from booking_engine.core.exceptions import (
    BookingConflictException,
    InvalidStatusTransitionException,
    NonexistentLocalTimeError,
    NotFoundException,
    OutOfWindowException,
    PolicyViolationException,
    ServiceException,
    ValidationException,
)


@pytest.mark.parametrize(
    "exc,status_code,code",
    [
        (ValidationException("bad input"), 400, "ValidationException"),
        (NotFoundException("missing"), 404, "NotFoundException"),
        (BookingConflictException(), 409, "BOOKING_CONFLICT"),
        (PolicyViolationException("too short"), 422, "POLICY_VIOLATION"),
        (OutOfWindowException("outside"), 422, "OUT_OF_WINDOW"),
        (ServiceException("boom"), 500, "ServiceException"),
    ],
)
def test_to_http_exception(exc, status_code, code):
    http_exc = exc.to_http_exception()
    assert isinstance(http_exc, HTTPException)
    assert http_exc.status_code == status_code
    assert http_exc.detail["code"] == code
    assert http_exc.detail["message"] == exc.message


def test_booking_conflict_default_message():
    assert "conflicts" in BookingConflictException().message


def test_invalid_transition_details():
    exc = InvalidStatusTransitionException("appt-1", "cancelled", "confirmed")
    assert exc.details == {
        "appointment_id": "appt-1",
        "current_status": "cancelled",
        "target_status": "confirmed",
    }
    assert exc.to_http_exception().status_code == 422


def test_nonexistent_local_time_is_a_validation_error():
    exc = NonexistentLocalTimeError("2024-03-10 02:30", "America/Denver")
    assert isinstance(exc, ValidationException)
    assert exc.details["timezone"] == "America/Denver"
