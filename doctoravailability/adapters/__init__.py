"""
Adapters layer - External integrations (event sources).
"""

from pathlib import Path
from typing import Optional

from ..config import AppConfig
from .http_event_source import HttpEventSource
from .json_event_source import JsonEventSource


def build_event_source(config: AppConfig, events_file: Optional[Path] = None):
    """
    Create the event source described by the configuration.

    An explicit ``events_file`` overrides the configured source.
    """
    source = config.event_source

    if events_file is not None:
        return JsonEventSource(events_file=events_file, timezone=config.timezone)

    if source.kind == "http":
        return HttpEventSource(
            base_url=source.base_url,
            api_token=source.api_token,
            timezone=config.timezone,
            timeout_seconds=source.timeout_seconds,
        )

    return JsonEventSource(events_file=source.events_file, timezone=config.timezone)


__all__ = ["HttpEventSource", "JsonEventSource", "build_event_source"]
