"""
HTTP client for fetching a doctor's calendar events from a REST backend.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests
from pendulum import DateTime

from ..domain.exceptions import EventSourceError
from ..domain.models import Event
from .event_records import parse_events

logger = logging.getLogger(__name__)


class HttpEventSource:
    """
    Client for a calendar backend exposing doctors' events over HTTP.

    Uses the ``/doctors/{doctor_id}/events`` endpoint, which returns the
    events intersecting the requested window ordered by start time.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timezone: str = "UTC",
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP event source.

        Args:
            base_url: Root URL of the calendar backend
            api_token: Optional bearer token
            timezone: IANA timezone for naive timestamps in responses
            timeout_seconds: Socket timeout for each request
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip("/")
        self.timezone = timezone
        self.timeout_seconds = timeout_seconds
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}
        if api_token:
            self.headers["Authorization"] = f"Bearer {api_token}"

    def close(self) -> None:
        """Close the HTTP session, unless it was passed in by the caller."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "HttpEventSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    async def get_events_by_doctor_id_order_by_start(
        self,
        doctor_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> List[Event]:
        """
        Fetch the doctor's events intersecting ``[start_time, end_time)``.

        The blocking request runs in a worker thread so the awaiting task can
        still be cancelled.

        Raises:
            EventSourceError: If the API call fails or returns an invalid payload
        """
        data = await asyncio.to_thread(
            self._fetch,
            doctor_id,
            start_time,
            end_time,
        )
        events = parse_events(self._extract_records(data), self.timezone)
        events.sort(key=lambda e: e.start)
        return events

    def _fetch(self, doctor_id: int, start_time: DateTime, end_time: DateTime) -> Any:
        url = f"{self.base_url}/doctors/{doctor_id}/events"
        params = {
            "start": start_time.to_iso8601_string(),
            "end": end_time.to_iso8601_string(),
            "orderBy": "start",
        }

        logger.debug("GET %s params=%s", url, params)

        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            raise EventSourceError(f"Failed to fetch events for doctor {doctor_id}: {e}") from e
        except ValueError as e:
            raise EventSourceError(f"Event backend returned invalid JSON: {e}") from e

    @staticmethod
    def _extract_records(data: Any) -> List[Dict[str, Any]]:
        """
        Accept either a bare list of records or ``{"events": [...]}``.
        """
        if isinstance(data, dict):
            data = data.get("events", [])

        if not isinstance(data, list):
            raise EventSourceError("Event backend response must contain a list of events")

        return data
