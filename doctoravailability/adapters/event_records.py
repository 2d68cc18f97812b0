"""
Parsing of raw event records into domain events.

Record format (shared by the JSON file and HTTP sources):
{
    "doctorId": 1,
    "type": "Opening",            # or "Appointment"
    "start": "2025-03-12T09:00:00",
    "end": "2025-03-12T12:00:00"
}
"""

import logging
from typing import Any, Dict, Iterable, List

import pendulum
from pendulum import DateTime

from ..domain.models import Event, EventType

logger = logging.getLogger(__name__)


def parse_datetime(value: str, timezone: str) -> DateTime:
    """
    Parse an ISO 8601 string to a pendulum DateTime in the given timezone.

    Naive strings are interpreted in ``timezone``.
    """
    dt = pendulum.parse(value, tz=timezone)

    if isinstance(dt, DateTime):
        return dt.in_timezone(timezone)

    raise ValueError(f"Could not parse datetime: {value}")


def parse_event_type(value: str) -> EventType:
    for kind in EventType:
        if kind.value.lower() == str(value).lower():
            return kind
    raise ValueError(f"Unknown event type: {value}")


def parse_event(record: Dict[str, Any], timezone: str) -> Event:
    """
    Build an Event from a raw record.

    Raises:
        KeyError: If a required field is missing
        ValueError: If a field cannot be parsed
    """
    return Event(
        doctor_id=int(record["doctorId"]),
        kind=parse_event_type(record["type"]),
        start=parse_datetime(record["start"], timezone),
        end=parse_datetime(record["end"], timezone),
    )


def parse_events(records: Iterable[Dict[str, Any]], timezone: str) -> List[Event]:
    """Parse records, skipping the ones that can't be read."""
    events: List[Event] = []

    for record in records:
        try:
            events.append(parse_event(record, timezone))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unreadable event record %r: %s", record, e)
            continue

    return events


def in_window(event: Event, start_time: DateTime, end_time: DateTime) -> bool:
    """Check whether an event starts in or overlaps ``[start_time, end_time)``."""
    starts_inside = start_time <= event.start < end_time
    overlaps = event.start < end_time and event.end > start_time
    return starts_inside or overlaps
