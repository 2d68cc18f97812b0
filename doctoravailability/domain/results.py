"""
Outcomes of an availability search.

Callers branch on the outcome type rather than catching exceptions; a
missing calendar and a bad request are ordinary answers, not faults.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Union

from .models import Availability


@dataclass(frozen=True)
class SlotsFound:
    """Free intervals per day key, one entry for every day in the window."""
    slots: Dict[str, List[Availability]] = field(default_factory=dict)


@dataclass(frozen=True)
class NotFound:
    """The doctor has no events anywhere in the requested window."""


@dataclass(frozen=True)
class ValidationError:
    """The request was rejected before any events were fetched."""
    message: str


AvailabilityResult = Union[SlotsFound, NotFound, ValidationError]
