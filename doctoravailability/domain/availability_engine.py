"""
Core business logic for computing a doctor's free intervals on one day.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O).
"""

from typing import Iterable, List, Sequence, Tuple

from .models import Availability, Event, Interval


def partition_events(events: Iterable[Event]) -> Tuple[List[Event], List[Event]]:
    """
    Split events into openings and appointments, each sorted by start time.

    The sort is stable, so events starting at the same instant keep the order
    the event source returned them in.
    """
    openings: List[Event] = []
    appointments: List[Event] = []

    for event in events:
        if event.is_opening:
            openings.append(event)
        elif event.is_appointment:
            appointments.append(event)

    openings.sort(key=lambda e: e.start)
    appointments.sort(key=lambda e: e.start)
    return openings, appointments


def subtract_appointments(
    opening: Interval,
    appointments: Sequence[Interval],
) -> List[Interval]:
    """
    Subtract appointments from a single opening.

    Start with the whole opening as the working list; every appointment is
    applied against the current working list, which is rebuilt from the
    pieces left over. Overlapping appointments therefore compound correctly
    without being merged first.

    Example:
    Opening: 09:00 - 12:00
    Appointments: [09:30-10:00, 09:45-10:30]
    Result: [09:00-09:30, 10:30-12:00]
    """
    if opening.is_empty:
        return []

    intervals: List[Interval] = [opening]

    for appointment in appointments:
        if appointment.is_empty:
            continue

        remaining: List[Interval] = []
        for interval in intervals:
            remaining.extend(interval.subtract(appointment))
        intervals = remaining

        # Nothing left to carve up
        if not intervals:
            break

    return intervals


def compute_day_availability(events: Iterable[Event]) -> List[Availability]:
    """
    Compute free intervals for one day's events.

    All events are expected to fall on the same calendar day; the caller
    groups them. Openings are processed independently in start order and
    their remainders are reported as-is, so overlapping openings may yield
    adjacent or identical intervals.

    Args:
        events: Openings and appointments of a single day, in any order

    Returns:
        List of Availability objects, opening by opening, left to right
    """
    openings, appointments = partition_events(events)

    if not openings:
        return []

    busy = [Interval(start=a.start, end=a.end) for a in appointments]

    availabilities: List[Availability] = []
    for opening in openings:
        free = subtract_appointments(
            Interval(start=opening.start, end=opening.end),
            busy,
        )
        availabilities.extend(Availability.from_interval(i) for i in free)

    return availabilities
