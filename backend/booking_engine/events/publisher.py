"""Event publisher - hands appointment events to the notification dispatcher."""
from datetime import datetime
import json
import logging
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


class NotificationDispatcher(Protocol):
    """Delivery collaborator (email, SMS, queue) that receives serialized events."""

    def dispatch(self, event_type: str, payload: str) -> None:
        ...


class LoggingNotificationDispatcher:
    """Default dispatcher: records events in the log only."""

    def dispatch(self, event_type: str, payload: str) -> None:
        logger.info("Notification event %s: %s", event_type, payload)


class EventPublisher:
    """Publishes appointment events to the notification dispatcher."""

    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None):
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()

    def publish(self, event: Event) -> None:
        """
        Serialize an event and hand it to the dispatcher.

        Delivery is the dispatcher's responsibility; callers wrap this in
        their own error handling so delivery failures never fail a booking.
        """
        event_type = type(event).__name__
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for JSON serialization
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        self.dispatcher.dispatch(f"event:{event_type}", json.dumps(payload))
