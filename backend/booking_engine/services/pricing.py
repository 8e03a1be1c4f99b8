"""Booking price calculation from an appointment type's pricing mode."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..models.appointment_type import AppointmentType

CENTS = Decimal("0.01")


def calculate_price(appointment_type: AppointmentType, duration_minutes: int) -> Optional[Decimal]:
    """
    Price of a booking.

    Fixed types cost their flat price; variable types cost price_per_hour
    for the booked hours, rounded half-up to cents.

    Returns:
        The price, or None when the type carries no price for its mode
    """
    unit_price = appointment_type.unit_price()
    if unit_price is None:
        return None

    amount = Decimal(str(unit_price))
    if appointment_type.is_variable_duration:
        amount = amount * Decimal(duration_minutes) / Decimal(60)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
