"""
Tests for the per-day availability engine.
"""

import random
from typing import List, Set, Tuple

import pendulum
import pytest

from doctoravailability.domain.availability_engine import (
    compute_day_availability,
    partition_events,
    subtract_appointments,
)
from doctoravailability.domain.models import Availability, Event, EventType, Interval

DAY = pendulum.datetime(2025, 3, 12, tz="UTC")


def _at(hour: int, minute: int = 0):
    return DAY.add(hours=hour, minutes=minute)


def _opening(start, end) -> Event:
    return Event(doctor_id=1, kind=EventType.OPENING, start=start, end=end)


def _appointment(start, end) -> Event:
    return Event(doctor_id=1, kind=EventType.APPOINTMENT, start=start, end=end)


def _hm(slots: List[Availability]) -> List[Tuple[str, str]]:
    return [(s.start.format("HH:mm"), s.end.format("HH:mm")) for s in slots]


class TestScenarios:
    """Worked examples on a single day."""

    def test_appointment_after_opening_leaves_full_opening(self):
        events = [_opening(_at(9), _at(12)), _appointment(_at(12, 1), _at(13))]

        assert _hm(compute_day_availability(events)) == [("09:00", "12:00")]

    def test_appointment_in_middle_splits_opening(self):
        events = [_opening(_at(9), _at(12)), _appointment(_at(9, 30), _at(10))]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "09:30"),
            ("10:00", "12:00"),
        ]

    def test_appointment_covering_opening_leaves_nothing(self):
        events = [_opening(_at(9), _at(12)), _appointment(_at(9), _at(12))]

        assert compute_day_availability(events) == []

    def test_multiple_openings_and_appointments(self):
        events = [
            _opening(_at(9), _at(11)),
            _opening(_at(13), _at(15)),
            _appointment(_at(9, 30), _at(10)),
            _appointment(_at(13, 30), _at(14)),
        ]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "09:30"),
            ("10:00", "11:00"),
            ("13:00", "13:30"),
            ("14:00", "15:00"),
        ]

    def test_boundary_touching_appointments_change_nothing(self):
        events = [
            _opening(_at(9), _at(12)),
            _appointment(_at(8), _at(9)),
            _appointment(_at(12), _at(13)),
        ]

        assert _hm(compute_day_availability(events)) == [("09:00", "12:00")]


class TestEdgeCases:
    """Degenerate and unusual inputs."""

    def test_no_events(self):
        assert compute_day_availability([]) == []

    def test_appointments_without_openings(self):
        events = [_appointment(_at(9), _at(10))]

        assert compute_day_availability(events) == []

    def test_opening_without_appointments(self):
        events = [_opening(_at(8), _at(17))]

        assert _hm(compute_day_availability(events)) == [("08:00", "17:00")]

    def test_zero_length_appointment_is_ignored(self):
        events = [_opening(_at(9), _at(12)), _appointment(_at(10), _at(10))]

        assert _hm(compute_day_availability(events)) == [("09:00", "12:00")]

    def test_inverted_appointment_is_ignored(self):
        events = [_opening(_at(9), _at(12)), _appointment(_at(11), _at(10))]

        assert _hm(compute_day_availability(events)) == [("09:00", "12:00")]

    def test_zero_length_and_inverted_openings_yield_nothing(self):
        events = [_opening(_at(9), _at(9)), _opening(_at(12), _at(10))]

        assert compute_day_availability(events) == []

    def test_overlapping_appointments_compound(self):
        events = [
            _opening(_at(9), _at(12)),
            _appointment(_at(9, 30), _at(10, 30)),
            _appointment(_at(10), _at(11)),
        ]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "09:30"),
            ("11:00", "12:00"),
        ]

    def test_nested_appointments(self):
        events = [
            _opening(_at(9), _at(12)),
            _appointment(_at(9, 30), _at(11, 30)),
            _appointment(_at(10), _at(10, 30)),
        ]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "09:30"),
            ("11:30", "12:00"),
        ]

    def test_appointment_spanning_two_openings(self):
        events = [
            _opening(_at(9), _at(11)),
            _opening(_at(12), _at(14)),
            _appointment(_at(10), _at(13)),
        ]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "10:00"),
            ("13:00", "14:00"),
        ]

    def test_back_to_back_appointments_consume_opening(self):
        events = [
            _opening(_at(9), _at(11)),
            _appointment(_at(9), _at(10)),
            _appointment(_at(10), _at(11)),
        ]

        assert compute_day_availability(events) == []

    def test_many_small_appointments(self):
        events = [_opening(_at(9), _at(10))] + [
            _appointment(_at(9, minute), _at(9, minute + 5))
            for minute in range(5, 60, 10)
        ]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "09:05"),
            ("09:10", "09:15"),
            ("09:20", "09:25"),
            ("09:30", "09:35"),
            ("09:40", "09:45"),
            ("09:50", "09:55"),
        ]

    def test_overlapping_openings_are_reported_independently(self):
        events = [
            _opening(_at(9), _at(12)),
            _opening(_at(10), _at(13)),
            _appointment(_at(11), _at(11, 30)),
        ]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "11:00"),
            ("11:30", "12:00"),
            ("10:00", "11:00"),
            ("11:30", "13:00"),
        ]

    def test_identical_openings_are_not_deduplicated(self):
        events = [_opening(_at(9), _at(10)), _opening(_at(9), _at(10))]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "10:00"),
            ("09:00", "10:00"),
        ]

    def test_input_order_does_not_matter(self):
        events = [
            _appointment(_at(13, 30), _at(14)),
            _opening(_at(13), _at(15)),
            _appointment(_at(9, 30), _at(10)),
            _opening(_at(9), _at(11)),
        ]

        assert _hm(compute_day_availability(events)) == [
            ("09:00", "09:30"),
            ("10:00", "11:00"),
            ("13:00", "13:30"),
            ("14:00", "15:00"),
        ]

    def test_input_list_is_not_mutated(self):
        events = [
            _appointment(_at(10), _at(11)),
            _opening(_at(9), _at(12)),
        ]
        snapshot = list(events)

        compute_day_availability(events)

        assert events == snapshot


class TestHelpers:
    """Tests for partitioning and single-opening subtraction."""

    def test_partition_sorts_by_start_and_keeps_ties_stable(self):
        first = _appointment(_at(10), _at(11))
        second = _appointment(_at(10), _at(10, 30))
        early = _appointment(_at(9), _at(9, 15))
        opening = _opening(_at(8), _at(12))

        openings, appointments = partition_events([first, opening, second, early])

        assert openings == [opening]
        assert appointments == [early, first, second]

    def test_subtract_appointments_stops_on_empty_opening(self):
        opening = Interval(start=_at(9), end=_at(10))
        busy = [
            Interval(start=_at(9), end=_at(10)),
            Interval(start=_at(9, 15), end=_at(9, 45)),
        ]

        assert subtract_appointments(opening, busy) == []

    def test_subtract_appointments_empty_opening(self):
        opening = Interval(start=_at(10), end=_at(9))

        assert subtract_appointments(opening, []) == []


# Property checks over randomly generated days, on a one-minute grid.

def _random_day(rng: random.Random, disjoint_openings: bool, min_openings: int = 0) -> List[Event]:
    """The first ``min_openings`` disjoint openings are at least a minute long."""
    events: List[Event] = []

    if disjoint_openings:
        cursor = rng.randint(0, 120)
        for index in range(rng.randint(min_openings, 4)):
            length = rng.randint(1 if index < min_openings else 0, 180)
            events.append(_opening(DAY.add(minutes=cursor), DAY.add(minutes=cursor + length)))
            cursor += length + rng.randint(0, 90)
    else:
        for _ in range(rng.randint(0, 4)):
            start = rng.randint(0, 1200)
            events.append(_opening(DAY.add(minutes=start), DAY.add(minutes=start + rng.randint(-30, 240))))

    for _ in range(rng.randint(0, 8)):
        start = rng.randint(0, 1300)
        # Some appointments are zero-length or inverted on purpose
        events.append(_appointment(DAY.add(minutes=start), DAY.add(minutes=start + rng.randint(-20, 120))))

    rng.shuffle(events)
    return events


def _minutes(start, end) -> Set[int]:
    first = int((start - DAY).total_seconds() // 60)
    last = int((end - DAY).total_seconds() // 60)
    return set(range(first, last))


def _busy_minutes(events: List[Event]) -> Set[int]:
    busy: Set[int] = set()
    for event in events:
        if event.is_appointment:
            busy |= _minutes(event.start, event.end)
    return busy


SEEDS = range(60)


@pytest.mark.parametrize("seed", SEEDS)
def test_free_intervals_are_disjoint_and_inside_openings(seed):
    events = _random_day(random.Random(seed), disjoint_openings=True)
    openings = [e for e in events if e.is_opening]

    slots = compute_day_availability(events)

    for slot in slots:
        assert slot.start < slot.end
        assert any(o.start <= slot.start and slot.end <= o.end for o in openings)

    for i, a in enumerate(slots):
        for b in slots[i + 1:]:
            assert not (a.start < b.end and b.start < a.end)


@pytest.mark.parametrize("seed", SEEDS)
def test_free_intervals_never_intersect_appointments(seed):
    events = _random_day(random.Random(seed), disjoint_openings=False)
    appointments = [e for e in events if e.is_appointment and e.start < e.end]

    for slot in compute_day_availability(events):
        for appointment in appointments:
            assert not (slot.start < appointment.end and appointment.start < slot.end)


@pytest.mark.parametrize("seed", SEEDS)
def test_free_time_is_exactly_opening_minus_appointments(seed):
    """Per opening, free minutes are the opening's minutes not booked."""
    events = _random_day(random.Random(seed), disjoint_openings=True)
    busy = _busy_minutes(events)

    expected: Set[int] = set()
    for opening in (e for e in events if e.is_opening):
        expected |= _minutes(opening.start, opening.end) - busy

    covered: Set[int] = set()
    for slot in compute_day_availability(events):
        covered |= _minutes(slot.start, slot.end)

    assert covered == expected


@pytest.mark.parametrize("seed", SEEDS)
def test_results_within_an_opening_run_left_to_right(seed):
    events = _random_day(random.Random(seed), disjoint_openings=True)

    slots = compute_day_availability(events)

    for earlier, later in zip(slots, slots[1:]):
        assert earlier.end <= later.start


@pytest.mark.parametrize("seed", SEEDS)
def test_no_op_appointments_do_not_change_output(seed):
    rng = random.Random(seed)
    events = _random_day(rng, disjoint_openings=True)
    baseline = compute_day_availability(events)

    openings = [e for e in events if e.is_opening]

    def outside_openings(appointment):
        return not any(appointment.start < o.end and o.start < appointment.end for o in openings)

    noise = [
        _appointment(_at(10), _at(10)),
        _appointment(_at(15), _at(14)),
        # Later than any generated opening
        _appointment(DAY.add(hours=23, minutes=50), DAY.add(hours=23, minutes=55)),
    ]
    # Touching an opening boundary; dropped where it would reach a neighbouring opening
    for opening in (o for o in openings if o.start < o.end):
        for candidate in (
            _appointment(opening.start.subtract(minutes=30), opening.start),
            _appointment(opening.end, opening.end.add(minutes=30)),
        ):
            if outside_openings(candidate):
                noise.append(candidate)

    noisy = list(events)
    for appointment in noise:
        noisy.insert(rng.randint(0, len(noisy)), appointment)

    assert compute_day_availability(noisy) == baseline


@pytest.mark.parametrize("seed", SEEDS)
def test_exact_cover_empties_that_opening(seed):
    events = _random_day(random.Random(seed), disjoint_openings=True, min_openings=1)
    openings = [e for e in events if e.is_opening and e.start < e.end]
    assert openings

    target = openings[0]
    covered = events + [_appointment(target.start, target.end)]

    for slot in compute_day_availability(covered):
        assert not (target.start <= slot.start and slot.end <= target.end)
