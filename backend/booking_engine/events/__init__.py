"""Appointment events exposed as notification triggers."""

from .booking_events import (
    AppointmentApproved,
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentRejected,
    AppointmentRescheduled,
)
from .publisher import EventPublisher, LoggingNotificationDispatcher, NotificationDispatcher

__all__ = [
    "AppointmentApproved",
    "AppointmentBooked",
    "AppointmentCancelled",
    "AppointmentRejected",
    "AppointmentRescheduled",
    "EventPublisher",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
]
