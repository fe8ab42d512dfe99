"""
Core business logic for calculating open appointment slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import timedelta
from typing import Any, Iterable, List, Mapping, Optional

import pendulum
from pendulum import DateTime

from .exceptions import CollaboratorError, InvalidDurationError
from .models import TimeRange, WorkingWindow

logger = logging.getLogger(__name__)


class SlotCalculator:
    """
    Calculates open appointment slots from a working window and busy times.

    Algorithm:
    1. Walk the working window in steps of the slot duration
    2. Drop every candidate that overlaps a busy interval
    3. Return the survivors in chronological order
    """

    def __init__(self, strict_busy_data: bool = False):
        """
        Args:
            strict_busy_data: Raise CollaboratorError on malformed busy entries
                instead of dropping them
        """
        self.strict_busy_data = strict_busy_data

    def find_available_slots(
        self,
        window: WorkingWindow,
        busy_ranges: Iterable[TimeRange],
        duration_minutes: int,
    ) -> List[TimeRange]:
        """
        Find all open slots of ``duration_minutes`` inside ``window``.

        Args:
            window: Working window of the requested day
            busy_ranges: Already committed time on the calendar
            duration_minutes: Length of each slot

        Returns:
            Chronologically ordered list of free TimeRange slots
        """
        candidates = self.generate_candidates(window, duration_minutes)
        return self.filter_busy(candidates, busy_ranges)

    def generate_candidates(
        self,
        window: WorkingWindow,
        duration_minutes: int,
    ) -> List[TimeRange]:
        """
        Split the window into back-to-back slots of ``duration_minutes``.

        The last slot must fit entirely inside the window; a remainder shorter
        than one slot is discarded. Steps are taken in absolute time.

        Raises:
            InvalidDurationError: If the duration is not a positive integer
        """
        validate_duration(duration_minutes)

        step = timedelta(minutes=duration_minutes)
        slots: List[TimeRange] = []

        current = window.start
        while current + step <= window.end:
            slots.append(TimeRange(start=current, end=current + step))
            current = current + step

        return slots

    def filter_busy(
        self,
        candidates: Iterable[TimeRange],
        busy_ranges: Iterable[TimeRange],
    ) -> List[TimeRange]:
        """
        Keep the candidates that overlap no busy range.

        Candidate order is preserved.
        """
        busy = list(busy_ranges)
        return [
            slot for slot in candidates
            if not any(slot.overlaps(b) for b in busy)
        ]

    def normalize_busy(self, entries: Iterable[Mapping[str, Any]]) -> List[TimeRange]:
        """
        Convert raw busy entries into TimeRange objects.

        Entry format (as reported by the calendar backend):
            {"start": "2025-06-20T07:00:00Z", "end": "2025-06-20T08:00:00Z"}

        Entries with a missing or unparseable boundary, or whose end is not
        after their start, are malformed: they are dropped with a warning, or
        rejected with CollaboratorError when ``strict_busy_data`` is set.
        """
        busy: List[TimeRange] = []

        for entry in entries:
            time_range = _parse_busy_entry(entry)
            if time_range is not None:
                busy.append(time_range)
                continue

            if self.strict_busy_data:
                raise CollaboratorError(f"Malformed busy interval from calendar: {entry!r}")
            logger.warning("Ignoring malformed busy interval: %r", entry)

        return busy


def validate_duration(duration_minutes: Any) -> int:
    """
    Raises:
        InvalidDurationError: If ``duration_minutes`` is not a positive integer
    """
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise InvalidDurationError(
            f"Slot duration must be a whole number of minutes, got {duration_minutes!r}"
        )
    if duration_minutes <= 0:
        raise InvalidDurationError(
            f"Slot duration must be greater than zero, got {duration_minutes}"
        )
    return duration_minutes


def _parse_busy_entry(entry: Any) -> Optional[TimeRange]:
    if not isinstance(entry, Mapping):
        return None

    start = _parse_timestamp(entry.get("start"))
    end = _parse_timestamp(entry.get("end"))
    if start is None or end is None or start >= end:
        return None

    return TimeRange(start=start, end=end)


def _parse_timestamp(value: Any) -> Optional[DateTime]:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = pendulum.parse(value)
    except ValueError:
        return None
    # ISO durations parse to Duration, not DateTime
    if not isinstance(parsed, DateTime):
        return None
    return parsed
