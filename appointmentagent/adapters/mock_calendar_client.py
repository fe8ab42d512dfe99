"""
Mock Google Calendar client for running without a service account.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock client that simulates the Google Calendar API.

    Busy times come from mock_calendar_data.json (or an explicit list of
    events); events created through ``insert_event`` are kept in memory and
    show up as busy in later queries on the same instance.

    Under ``serve --mock`` one instance is shared by every request, so booked
    events accumulate in memory for the life of the process. The Google
    client keeps no such state.
    """

    def __init__(
        self,
        events: Optional[List[Dict[str, Any]]] = None,
        data_file: Optional[Path] = None,
    ):
        """
        Initialize the mock client.

        Args:
            events: Calendar events to serve instead of the JSON file. Each
                event has "calendarId", "start" and "end" (ISO 8601).
            data_file: Alternative JSON file to load events from
        """
        if events is not None:
            self.calendar_events = list(events)
        else:
            self.calendar_events = self._load_calendar_data(data_file or DEFAULT_DATA_FILE)
        self.inserted_events: List[Dict[str, Any]] = []

    @staticmethod
    def _load_calendar_data(data_file: Path) -> List[Dict[str, Any]]:
        """Load mock calendar data from JSON file."""
        if not data_file.exists():
            # Fallback to empty if file doesn't exist
            return []
        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)

    def query_busy(
        self,
        start: DateTime,
        end: DateTime,
        timezone: str,
        calendar_id: str,
    ) -> List[Dict[str, Any]]:
        """
        Return busy intervals of ``calendar_id`` overlapping ``[start, end]``.

        Events without a usable start/end are passed through untouched, the way
        a real backend could report them.
        """
        busy: List[Dict[str, Any]] = []

        for event in self.calendar_events:
            if event.get("calendarId", "primary") != calendar_id:
                continue

            try:
                event_start = pendulum.parse(event["start"], tz=timezone).in_timezone(timezone)
                event_end = pendulum.parse(event["end"], tz=timezone).in_timezone(timezone)
            except (KeyError, TypeError, ValueError):
                busy.append({"start": event.get("start"), "end": event.get("end")})
                continue

            if event_start < end and event_end > start:
                busy.append({
                    "start": event_start.to_iso8601_string(),
                    "end": event_end.to_iso8601_string(),
                })

        logger.debug("Mock calendar %s: %d busy interval(s)", calendar_id, len(busy))
        return busy

    def insert_event(
        self,
        calendar_id: str,
        summary: str,
        description: str,
        start: str,
        end: str,
        timezone: str,
        attendee: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Record the event and return a Google-shaped event resource."""
        event_id = uuid.uuid4().hex
        resource = {
            "id": event_id,
            "status": "confirmed",
            "summary": summary,
            "description": description,
            "start": {
                "dateTime": pendulum.parse(start, tz=timezone).to_iso8601_string(),
                "timeZone": timezone,
            },
            "end": {
                "dateTime": pendulum.parse(end, tz=timezone).to_iso8601_string(),
                "timeZone": timezone,
            },
            "htmlLink": f"https://calendar.example.invalid/event?eid={event_id}",
        }
        if attendee:
            resource["extendedProperties"] = {"private": dict(attendee)}

        self.inserted_events.append(resource)
        self.calendar_events.append({
            "calendarId": calendar_id,
            "start": resource["start"]["dateTime"],
            "end": resource["end"]["dateTime"],
        })
        return resource
