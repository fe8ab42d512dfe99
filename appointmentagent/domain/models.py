"""
Domain models for time range, working window and booking.
"""

from dataclasses import dataclass, field
from datetime import date as Date, time
from typing import Any, Dict, Optional

from pendulum import DateTime

from .exceptions import InvalidInputError
from .timezones import format_instant, to_instant, to_local


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Check if this range overlaps with another.

        The end is exclusive, so ranges that merely touch (09:00-09:30 and
        09:30-10:00) do not overlap.
        """
        return self.start < other.end and other.start < self.end

    def to_dict(self, timezone: str) -> Dict[str, str]:
        """Serialize as ISO 8601 strings in ``timezone``."""
        return {
            "start": format_instant(self.start, timezone),
            "end": format_instant(self.end, timezone),
        }

    def format_display(self, timezone: str) -> str:
        """
        Format the range for display.
        Format: Weekday, DD.MM.YYYY | HH:mm - HH:mm
        """
        start = to_local(self.start, timezone)
        end = to_local(self.end, timezone)
        return f"{start.format('dddd, DD.MM.YYYY')} | {start.format('HH:mm')} - {end.format('HH:mm')}"

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class WorkingWindow(TimeRange):
    """The span of one day during which slots may be offered."""

    @property
    def day_start(self) -> DateTime:
        return self.start

    @property
    def day_end(self) -> DateTime:
        return self.end


@dataclass
class WorkingHours:
    """
    Configuration for working hours.
    """
    start_time: time
    end_time: time
    timezone: str = "Europe/Madrid"

    def window_for(self, day: Date) -> WorkingWindow:
        """
        Get the working window for a specific calendar day.

        Opening and closing times are wall-clock times in ``self.timezone``.
        """
        return WorkingWindow(
            start=to_instant(day, self.start_time, self.timezone),
            end=to_instant(day, self.end_time, self.timezone),
        )


@dataclass
class BookingRequest:
    """An appointment to be written to the calendar."""
    name: Optional[str]
    start: Optional[DateTime]
    end: Optional[DateTime]
    phone: Optional[str] = None
    description: Optional[str] = None

    def validate(self) -> None:
        """
        Raises:
            InvalidInputError: If name, start or end is missing, or end <= start
        """
        missing = [
            field_name
            for field_name in ("name", "start", "end")
            if not _has_value(getattr(self, field_name))
        ]
        if missing:
            raise InvalidInputError(f"Missing required booking field(s): {', '.join(missing)}")
        if self.end <= self.start:
            raise InvalidInputError(
                f"Booking end {self.end} must be after start {self.start}"
            )


@dataclass
class BookedEvent:
    """Descriptor of an event created in the calendar backend."""
    event_id: str
    summary: str
    start: Optional[str]
    end: Optional[str]
    html_link: Optional[str] = None
    status: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_event_resource(cls, resource: Dict[str, Any]) -> "BookedEvent":
        """
        Build from a calendar event resource such as::

            {
                "id": "abc123",
                "summary": "Cita - Ana",
                "start": {"dateTime": "2025-06-20T15:30:00+02:00", "timeZone": "Europe/Madrid"},
                "end": {"dateTime": "2025-06-20T16:00:00+02:00", "timeZone": "Europe/Madrid"},
                "htmlLink": "https://www.google.com/calendar/event?eid=...",
                "status": "confirmed"
            }
        """
        return cls(
            event_id=resource.get("id", ""),
            summary=resource.get("summary", ""),
            start=(resource.get("start") or {}).get("dateTime"),
            end=(resource.get("end") or {}).get("dateTime"),
            html_link=resource.get("htmlLink"),
            status=resource.get("status"),
            raw=resource,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.event_id,
            "summary": self.summary,
            "start": self.start,
            "end": self.end,
            "htmlLink": self.html_link,
            "status": self.status,
        }


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True
