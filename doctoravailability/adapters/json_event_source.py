"""
Event source reading a doctor's calendar from a local JSON file.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from pendulum import DateTime

from ..domain.exceptions import EventSourceError
from ..domain.models import Event
from .event_records import in_window, parse_events

logger = logging.getLogger(__name__)


class JsonEventSource:
    """
    Event source backed by a JSON file holding a list of event records.

    Useful for local runs and demos without a calendar backend. The file is
    read on every call so edits show up without restarting.
    """

    def __init__(self, events_file: Path, timezone: str = "UTC"):
        """
        Initialize the JSON event source.

        Args:
            events_file: Path to the JSON file with event records
            timezone: IANA timezone for naive timestamps
        """
        self.events_file = Path(events_file)
        self.timezone = timezone

    def close(self) -> None:
        """Nothing to release; the file is opened per call."""

    def __enter__(self) -> "JsonEventSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _load_records(self) -> List[Dict[str, Any]]:
        """Load raw event records from the JSON file."""
        try:
            with open(self.events_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise EventSourceError(f"Events file not found: {self.events_file}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise EventSourceError(f"Could not read events file {self.events_file}: {exc}") from exc

        if isinstance(data, dict):
            data = data.get("events", [])

        if not isinstance(data, list):
            raise EventSourceError(
                f"Events file {self.events_file} must contain a list of events"
            )

        return data

    def load_events(self) -> List[Event]:
        """Load and parse every event in the file."""
        return parse_events(self._load_records(), self.timezone)

    async def get_events_by_doctor_id_order_by_start(
        self,
        doctor_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Event]:
        """
        Return the doctor's events intersecting the window, ordered by start.

        Args:
            doctor_id: Doctor whose calendar is read
            start_time: Start of the time window
            end_time: End of the time window (exclusive)

        Returns:
            List of Event objects sorted by start time
        """
        events = await asyncio.to_thread(self.load_events)

        selected = [
            event for event in events
            if event.doctor_id == doctor_id and in_window(event, start_time, end_time)
        ]
        selected.sort(key=lambda e: e.start)

        logger.debug(
            "Loaded %d of %d events for doctor %s from %s",
            len(selected),
            len(events),
            doctor_id,
            self.events_file,
        )
        return selected
