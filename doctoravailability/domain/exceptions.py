"""
Domain-specific exception hierarchy for the doctor availability package.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class EventSourceError(AvailabilityError):
    """Raised when events cannot be fetched or parsed."""
