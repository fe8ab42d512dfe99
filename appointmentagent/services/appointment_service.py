"""
Application service for finding open slots and booking appointments.

The service coordinates fetching busy times via a calendar client adapter and
delegates the actual availability calculation to the domain-level
``SlotCalculator``. The calendar dependency is a simple protocol, so the
Google adapter, the mock adapter or a test stub can be plugged in.
"""

from __future__ import annotations

import logging
from datetime import date as Date, time as Time
from typing import Any, Dict, List, Optional, Protocol, Union

from pendulum import DateTime

from ..adapters.google_authenticator import GoogleAuthenticator
from ..adapters.google_calendar import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..config import AppConfig
from ..domain.exceptions import InvalidInputError
from ..domain.models import BookedEvent, BookingRequest, TimeRange
from ..domain.parsing import parse_date, parse_instant, parse_time
from ..domain.slot_calculator import SlotCalculator, validate_duration
from ..domain.timezones import ensure_timezone, format_wall_clock, to_instant

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    def query_busy(
        self,
        start: DateTime,
        end: DateTime,
        timezone: str,
        calendar_id: str,
    ) -> List[Dict[str, Any]]:
        """Return busy {"start", "end"} ISO 8601 intervals of the calendar."""

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
        """Create an event from local wall-clock times and return its resource."""


class AppointmentService:
    """
    Orchestrates busy-time retrieval, slot calculation and booking.

    Holds no per-request state: every call recomputes from the calendar, so
    repeated calls with the same inputs give the same answer. Booking does not
    check for conflicts; two callers can book the same slot concurrently.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        config: AppConfig,
        slot_calculator: Optional[SlotCalculator] = None,
    ) -> None:
        self._calendar_client = calendar_client
        self._config = config
        self._slot_calculator = slot_calculator or SlotCalculator(
            strict_busy_data=config.strict_busy_data
        )

    @property
    def config(self) -> AppConfig:
        return self._config

    def get_availability(
        self,
        date: Union[str, Date],
        duration_minutes: Optional[int] = None,
        timezone: Optional[str] = None,
    ) -> List[TimeRange]:
        """
        Find the open slots of one day.

        Args:
            date: Calendar date (date object or a supported literal)
            duration_minutes: Slot length, defaults to ``slot_granularity``
            timezone: IANA timezone of the working window, defaults to config

        Returns:
            Chronologically ordered free slots

        Raises:
            InvalidDateError, InvalidDurationError, InvalidInputError: Before
                any calendar call
            CollaboratorError: If the calendar backend fails
        """
        day = parse_date(date)
        duration = validate_duration(
            self._config.slot_granularity if duration_minutes is None else duration_minutes
        )
        tz = ensure_timezone(timezone or self._config.timezone)

        window = self._config.working_hours(timezone=tz).window_for(day)

        raw_busy = self._calendar_client.query_busy(
            start=window.day_start,
            end=window.day_end,
            timezone=tz,
            calendar_id=self._config.calendar_id,
        )
        busy = self._slot_calculator.normalize_busy(raw_busy or [])

        slots = self._slot_calculator.find_available_slots(
            window=window,
            busy_ranges=busy,
            duration_minutes=duration,
        )
        logger.info(
            "%s: %d busy interval(s), %d free %d-minute slot(s)",
            day.isoformat(), len(busy), len(slots), duration,
        )
        return slots

    def book_appointment(
        self,
        request: BookingRequest,
        timezone: Optional[str] = None,
    ) -> BookedEvent:
        """
        Write one appointment to the calendar.

        Raises:
            InvalidInputError: If the request is incomplete or end <= start
            CollaboratorError: If the calendar backend fails
        """
        request.validate()
        tz = ensure_timezone(timezone or self._config.timezone)

        summary = self._config.summary_template.format(name=request.name.strip())
        description = request.description or self._config.default_description
        attendee = None
        if request.phone:
            description = f"{description}\nTel: {request.phone}"
            attendee = {"name": request.name.strip(), "phone": request.phone}

        resource = self._calendar_client.insert_event(
            calendar_id=self._config.calendar_id,
            summary=summary,
            description=description,
            start=format_wall_clock(request.start, tz),
            end=format_wall_clock(request.end, tz),
            timezone=tz,
            attendee=attendee,
        )
        return BookedEvent.from_event_resource(resource or {})

    def build_booking_request(
        self,
        date: Union[str, Date],
        time: Union[str, Time],
        name: Optional[str],
        phone: Optional[str] = None,
        description: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        timezone: Optional[str] = None,
    ) -> BookingRequest:
        """
        Turn the loose date/time strings of a caller into a BookingRequest.

        The appointment lasts ``duration_minutes`` (default
        ``slot_granularity``) from the given local time.

        Raises:
            InvalidDateError, InvalidTimeError, InvalidDurationError,
            InvalidInputError
        """
        day = parse_date(date)
        wall_time = parse_time(time)
        duration = validate_duration(
            self._config.slot_granularity if duration_minutes is None else duration_minutes
        )
        tz = ensure_timezone(timezone or self._config.timezone)

        start = to_instant(day, wall_time, tz)
        return BookingRequest(
            name=name,
            start=start,
            end=start.add(minutes=duration),
            phone=phone,
            description=description,
        )

    def request_from_instants(
        self,
        start: Union[str, DateTime],
        end: Union[str, DateTime],
        name: Optional[str],
        phone: Optional[str] = None,
        description: Optional[str] = None,
        timezone: Optional[str] = None,
    ) -> BookingRequest:
        """Build a BookingRequest from ISO 8601 start/end instants."""
        missing = [
            field_name
            for field_name, value in (("start", start), ("end", end))
            if value is None
        ]
        if missing:
            raise InvalidInputError(f"Missing required booking field(s): {', '.join(missing)}")
        tz = ensure_timezone(timezone or self._config.timezone)
        return BookingRequest(
            name=name,
            start=parse_instant(start, tz),
            end=parse_instant(end, tz),
            phone=phone,
            description=description,
        )


def create_service(config: AppConfig, mock: bool = False) -> AppointmentService:
    """Wire the service to the Google Calendar adapter, or to the mock one."""
    if mock:
        return AppointmentService(calendar_client=MockCalendarClient(), config=config)

    authenticator = GoogleAuthenticator(
        credentials_json=config.credentials_json,
        credentials_file=config.credentials_file,
    )
    return AppointmentService(
        calendar_client=GoogleCalendarClient(authenticator=authenticator),
        config=config,
    )
