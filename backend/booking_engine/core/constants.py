"""User-facing messages and fixed values for the booking engine."""

from __future__ import annotations

# Slot listing
UNAVAILABLE_SLOT_REASON = "Slot already booked or conflicts with course"

# Validation reasons (rendered directly to students)
TYPE_NOT_FOUND_REASON = "Appointment type not found or inactive"
TYPE_WRONG_INSTRUCTOR_REASON = "Appointment type does not belong to this instructor"
INVALID_RANGE_REASON = "End time must be after start time"
WHOLE_MINUTE_REASON = "Start and end times must fall on whole minutes"
APPOINTMENT_CONFLICT_REASON = "Time slot conflicts with existing appointment"
DAY_UNAVAILABLE_REASON = "Instructor is not available on this date"
OUT_OF_WINDOW_REASON = "Time is outside instructor availability"
COURSE_CONFLICT_REASON = "Time conflicts with instructor course schedule"
CALENDAR_EVENT_FALLBACK_NAME = "a calendar event"

# Booking orchestration
PARTY_SIZE_MESSAGE = "Party size exceeds the maximum of {max_party_size} for this appointment type"

# Text constraints
MAX_REASON_LENGTH = 1000

# Wall-clock minutes in a day; "24:00" is the end-of-day sentinel
MINUTES_PER_DAY = 24 * 60
