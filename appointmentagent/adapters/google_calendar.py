"""
Google Calendar API client for reading busy times and creating events.
"""

import logging
from typing import Any, Dict, List, Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from pendulum import DateTime

from ..domain.exceptions import CollaboratorError
from .google_authenticator import GoogleAuthenticator

logger = logging.getLogger(__name__)

# Errors raised by googleapiclient/httplib2 for API, auth and transport failures
_API_ERRORS = (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError)


class GoogleCalendarClient:
    """
    Client for Google Calendar v3 operations.

    Uses ``freebusy.query`` to fetch busy intervals and ``events.insert`` to
    create appointments.
    """

    def __init__(
        self,
        authenticator: Optional[GoogleAuthenticator] = None,
        service: Any = None,
    ):
        """
        Initialize the Calendar API client.

        Args:
            authenticator: Supplies service-account credentials
            service: Prebuilt ``calendar`` v3 resource (skips discovery)
        """
        if authenticator is None and service is None:
            raise ValueError("GoogleCalendarClient needs an authenticator or a service")
        self.authenticator = authenticator
        self._service = service

    @property
    def service(self):
        if self._service is None:
            credentials = self.authenticator.get_credentials()
            self._service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        return self._service

    def query_busy(
        self,
        start: DateTime,
        end: DateTime,
        timezone: str,
        calendar_id: str,
    ) -> List[Dict[str, Any]]:
        """
        Get busy intervals of one calendar.

        Args:
            start: Start of the time window
            end: End of the time window
            timezone: IANA timezone identifier used in the response
            calendar_id: Calendar to inspect

        Returns:
            List of {"start": iso, "end": iso} dicts, possibly empty

        Raises:
            CollaboratorError: If the API call fails or reports calendar errors
        """
        body = {
            "timeMin": start.to_iso8601_string(),
            "timeMax": end.to_iso8601_string(),
            "timeZone": timezone,
            "items": [{"id": calendar_id}],
        }
        logger.info(
            "Querying free/busy for %s between %s and %s",
            calendar_id, body["timeMin"], body["timeMax"],
        )

        try:
            response = self.service.freebusy().query(body=body).execute()
        except _API_ERRORS as exc:
            raise CollaboratorError(f"Failed to fetch free/busy from Google Calendar: {exc}") from exc

        return self._parse_freebusy_response(response, calendar_id)

    def _parse_freebusy_response(
        self,
        response_data: Dict[str, Any],
        calendar_id: str,
    ) -> List[Dict[str, Any]]:
        """
        Parse the freebusy.query response.

        Response format:
        {
            "kind": "calendar#freeBusy",
            "timeMin": "...",
            "timeMax": "...",
            "calendars": {
                "primary": {
                    "busy": [{"start": "...", "end": "..."}],
                    "errors": [{"domain": "global", "reason": "notFound"}]
                }
            }
        }
        """
        calendar = (response_data.get("calendars") or {}).get(calendar_id) or {}

        errors = calendar.get("errors") or []
        if errors:
            reasons = ", ".join(str(err.get("reason", err)) for err in errors)
            raise CollaboratorError(
                f"Google Calendar reported errors for calendar {calendar_id}: {reasons}"
            )

        busy = list(calendar.get("busy") or [])
        logger.debug("Calendar %s reported %d busy interval(s)", calendar_id, len(busy))
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
        """
        Create an event.

        Args:
            calendar_id: Target calendar
            summary: Event title
            description: Event body text
            start: Local wall-clock start, e.g. 2025-06-20T15:30:00
            end: Local wall-clock end
            timezone: IANA timezone the wall-clock times refer to
            attendee: Optional {"name": ..., "phone": ...} of the person booking

        Returns:
            The created event resource

        Raises:
            CollaboratorError: If the API call fails
        """
        event: Dict[str, Any] = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start, "timeZone": timezone},
            "end": {"dateTime": end, "timeZone": timezone},
        }
        if attendee:
            # Service accounts cannot invite attendees without domain-wide delegation
            event["extendedProperties"] = {
                "private": {
                    f"attendee{key.capitalize()}": value
                    for key, value in attendee.items()
                    if value
                }
            }

        logger.info("Inserting event %r into %s at %s (%s)", summary, calendar_id, start, timezone)

        try:
            created = self.service.events().insert(calendarId=calendar_id, body=event).execute()
        except _API_ERRORS as exc:
            raise CollaboratorError(f"Failed to create event in Google Calendar: {exc}") from exc

        logger.info("Created event %s", created.get("id"))
        return created
