"""
Application service for finding a doctor's free appointment slots.

The service validates the request, fetches events for the whole lookahead
window through an event source adapter, and delegates the per-day interval
subtraction to the domain-level ``compute_day_availability``. The event
source is described by a simple protocol so tests can plug in a stub.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import date
from typing import Callable, Dict, List, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..domain.availability_engine import compute_day_availability
from ..domain.exceptions import EventSourceError
from ..domain.models import (
    DEFAULT_DAY_KEY_FORMAT,
    Availability,
    Event,
    calendar_day,
    format_day_key,
)
from ..domain.results import AvailabilityResult, NotFound, SlotsFound, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_DAYS = 7

START_DATE_IN_PAST_MESSAGE = "start date cannot be in the past"


class EventSourceProtocol(Protocol):
    """Protocol describing the event source behaviour needed by the service."""

    async def get_events_by_doctor_id_order_by_start(
        self,
        doctor_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Event]:
        """Return the doctor's events intersecting ``[start_time, end_time)``."""


Clock = Callable[[], date]


def utc_today() -> date:
    return calendar_day(pendulum.now("UTC"))


class AvailabilityFinderService:
    """
    Orchestrates event retrieval and per-day availability calculation.
    """

    def __init__(
        self,
        event_source: EventSourceProtocol,
        clock: Clock = utc_today,
        *,
        day_key_format: str = DEFAULT_DAY_KEY_FORMAT,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self._event_source = event_source
        self._clock = clock
        self._day_key_format = day_key_format
        self._timeout_seconds = timeout_seconds

    async def find_available_slots(
        self,
        doctor_id: int,
        start_date: DateTime,
        lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
    ) -> AvailabilityResult:
        """
        Compute free intervals for each day of the lookahead window.

        Returns:
            SlotsFound with exactly ``lookahead_days`` chronological entries,
            NotFound when the window holds no events at all, or
            ValidationError when ``start_date`` lies before today.

        Raises:
            EventSourceError: If the event source fails or times out
        """
        if calendar_day(start_date) < self._clock():
            logger.debug("Rejected start date %s for doctor %s", start_date, doctor_id)
            return ValidationError(START_DATE_IN_PAST_MESSAGE)

        end_date = start_date.add(days=lookahead_days)

        events = await self.fetch_events(
            doctor_id=doctor_id,
            start_date=start_date,
            end_date=end_date,
        )

        if not events:
            logger.debug(
                "No events for doctor %s between %s and %s",
                doctor_id,
                start_date,
                end_date,
            )
            return NotFound()

        return SlotsFound(
            slots=self.calculate_slots(
                events=events,
                start_date=start_date,
                lookahead_days=lookahead_days,
            )
        )

    async def fetch_events(
        self,
        *,
        doctor_id: int,
        start_date: DateTime,
        end_date: DateTime,
    ) -> List[Event]:
        """Fetch all events for the window in a single event source call."""
        call = self._event_source.get_events_by_doctor_id_order_by_start(
            doctor_id,
            start_date,
            end_date,
        )

        if self._timeout_seconds is None:
            events = await call
        else:
            try:
                events = await asyncio.wait_for(call, timeout=self._timeout_seconds)
            except asyncio.TimeoutError as exc:
                raise EventSourceError(
                    f"Event source did not respond within {self._timeout_seconds}s"
                ) from exc

        events = list(events)
        logger.debug("Fetched %d events for doctor %s", len(events), doctor_id)
        return events

    def calculate_slots(
        self,
        *,
        events: Sequence[Event],
        start_date: DateTime,
        lookahead_days: int,
    ) -> Dict[str, List[Availability]]:
        """Group events by day and run the availability engine for each day."""
        events_by_day = self._group_by_day(events, start_date.timezone)

        slots: Dict[str, List[Availability]] = {}
        for offset in range(lookahead_days):
            day = calendar_day(start_date.add(days=offset))
            day_key = format_day_key(day, self._day_key_format)
            slots[day_key] = compute_day_availability(events_by_day.get(day, []))

        return slots

    @staticmethod
    def _group_by_day(events: Sequence[Event], timezone) -> Dict[date, List[Event]]:
        """
        Bucket events by the calendar date of their start, read in the
        request's timezone so buckets line up with the window's days.

        Keys are dates rather than formatted strings, so grouping never
        depends on the day key format.
        """
        buckets: Dict[date, List[Event]] = defaultdict(list)
        for event in events:
            buckets[event.day(timezone)].append(event)
        return dict(buckets)
