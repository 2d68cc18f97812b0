"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_finder import (
    AvailabilityFinderService,
    EventSourceProtocol,
    START_DATE_IN_PAST_MESSAGE,
)

__all__ = ["AvailabilityFinderService", "EventSourceProtocol", "START_DATE_IN_PAST_MESSAGE"]
