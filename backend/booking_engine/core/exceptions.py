# backend/booking_engine/core/exceptions.py
"""
Domain-specific exceptions for the booking engine.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Booking validation itself never raises; it reports failures as a
ValidationResult carrying one of the codes defined here.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to the HTTPException the thin API layer raises."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when request input is malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class PolicyViolationException(BusinessRuleException):
    """Raised when a requested duration or party size breaks the appointment type policy."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="POLICY_VIOLATION", details=details or {})


class OutOfWindowException(BusinessRuleException):
    """Raised when a requested interval does not fit any availability block."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="OUT_OF_WINDOW", details=details or {})


class BookingConflictException(ConflictException):
    """Raised when a booking conflicts with existing commitments."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class InvalidStatusTransitionException(BusinessRuleException):
    """Raised when an appointment cannot move from its current status."""

    def __init__(self, appointment_id: str, current_status: str, target_status: str):
        super().__init__(
            message=f"Appointment cannot move from {current_status} to {target_status}",
            code="INVALID_STATUS_TRANSITION",
            details={
                "appointment_id": appointment_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class NonexistentLocalTimeError(ValidationException):
    """Raised when a wall-clock time falls inside a DST spring-forward gap."""

    def __init__(self, local_value: str, timezone_name: str):
        super().__init__(
            message=f"{local_value} does not exist in {timezone_name} (daylight saving gap)",
            code="NONEXISTENT_LOCAL_TIME",
            details={"local_time": local_value, "timezone": timezone_name},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
