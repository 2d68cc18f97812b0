"""
Domain models for calendar events and free intervals.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List

import pendulum
from pendulum import DateTime


DEFAULT_DAY_KEY_FORMAT = "YYYY-MM-DD"


class EventType(str, Enum):
    """Kind of a calendar event."""
    OPENING = "Opening"
    APPOINTMENT = "Appointment"


@dataclass(frozen=True)
class Event:
    """
    A scheduled block belonging to a doctor.

    ``start <= end`` is not guaranteed by event sources; zero-length and
    inverted events are tolerated and simply contribute nothing.
    """
    doctor_id: int
    kind: EventType
    start: DateTime
    end: DateTime

    @property
    def is_opening(self) -> bool:
        return self.kind is EventType.OPENING

    @property
    def is_appointment(self) -> bool:
        return self.kind is EventType.APPOINTMENT

    def day(self, timezone=None) -> date:
        """
        Calendar date the event is bucketed under.

        With ``timezone`` the start is read in that zone instead of its own.
        """
        if timezone is None:
            return calendar_day(self.start)
        return calendar_day(self.start.in_timezone(timezone))


@dataclass(frozen=True)
class Interval:
    """
    Half-open time range ``[start, end)`` used while subtracting appointments.
    """
    start: DateTime
    end: DateTime

    @property
    def is_empty(self) -> bool:
        return self.start >= self.end

    def overlaps(self, other: "Interval") -> bool:
        """Check for overlap with positive measure; touching ranges don't count."""
        return self.start < other.end and other.start < self.end

    def subtract(self, other: "Interval") -> List["Interval"]:
        """
        Remove ``other`` from this interval.

        Yields zero (fully covered), one (one end trimmed) or two (split in the
        middle) intervals. An empty ``other`` removes nothing.
        """
        if other.is_empty or not self.overlaps(other):
            return [self]

        remainder: List[Interval] = []
        if self.start < other.start:
            remainder.append(Interval(start=self.start, end=other.start))
        if other.end < self.end:
            remainder.append(Interval(start=other.end, end=self.end))
        return remainder


@dataclass(frozen=True)
class Availability:
    """
    A free interval ``[start, end)`` within one day.
    """
    start: DateTime
    end: DateTime

    @classmethod
    def from_interval(cls, interval: Interval) -> "Availability":
        return cls(start=interval.start, end=interval.end)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def format_display(self) -> str:
        """Format: HH:mm – HH:mm (N min)"""
        return (
            f"{self.start.format('HH:mm')} – {self.end.format('HH:mm')} "
            f"({self.duration_minutes()} min)"
        )

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass
class AvailabilitiesResponse:
    """
    Free intervals for one doctor, keyed by day in chronological order.
    """
    doctor_id: int
    available_slots: Dict[str, List[Availability]] = field(default_factory=dict)

    def total_slots(self) -> int:
        return sum(len(slots) for slots in self.available_slots.values())


def calendar_day(moment: DateTime) -> date:
    """Plain calendar date of a moment, in the moment's own timezone."""
    return date(moment.year, moment.month, moment.day)


def format_day_key(day: date, fmt: str = DEFAULT_DAY_KEY_FORMAT) -> str:
    """
    Format a calendar date as a day key.

    The default four-digit year keeps keys unique and sortable across
    centuries; ``YY-MM-DD`` is kept for callers that still expect it.
    """
    return pendulum.date(day.year, day.month, day.day).format(fmt)
