# backend/booking_engine/schemas/booking.py
"""
Booking schemas for the booking engine.

Validation outcomes are values, not exceptions, so callers can render the
specific reason to the student. BookingResult carries the created ORM
appointment back to the caller.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ..models.appointment import Appointment


class ValidationFailure(str, Enum):
    """Error taxonomy for a rejected booking request."""

    NOT_FOUND = "NOT_FOUND"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    CONFLICT = "CONFLICT"
    OUT_OF_WINDOW = "OUT_OF_WINDOW"
    INVALID_REQUEST = "INVALID_REQUEST"


class ValidationResult(BaseModel):
    """Outcome of validating a booking request."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: Optional[str] = None
    code: Optional[ValidationFailure] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, code: ValidationFailure, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason, code=code)


class BookingExtras(BaseModel):
    """Optional booking inputs gathered upstream (notes, party, verified payment)."""

    model_config = ConfigDict(extra="forbid")

    student_notes: Optional[str] = Field(default=None, max_length=2000)
    party_size: int = Field(default=1, ge=1)
    actual_duration_minutes: Optional[int] = Field(default=None, gt=0)
    total_price: Optional[Decimal] = Field(default=None, ge=0)
    payment_intent_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    tax_amount: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None


@dataclass
class BookingResult:
    """Result of a booking attempt."""

    success: bool
    appointment: Optional["Appointment"] = None
    error: Optional[str] = None
    code: Optional[ValidationFailure] = None
