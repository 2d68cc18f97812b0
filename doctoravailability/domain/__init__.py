"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability_engine import compute_day_availability, subtract_appointments
from .models import (
    Availability,
    AvailabilitiesResponse,
    Event,
    EventType,
    Interval,
    format_day_key,
)
from .results import AvailabilityResult, NotFound, SlotsFound, ValidationError

__all__ = [
    "Availability",
    "AvailabilitiesResponse",
    "AvailabilityResult",
    "Event",
    "EventType",
    "Interval",
    "NotFound",
    "SlotsFound",
    "ValidationError",
    "compute_day_availability",
    "format_day_key",
    "subtract_appointments",
]
