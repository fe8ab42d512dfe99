"""
Parsing of the loosely formatted date/time literals sent by the voice agent.

Only a fixed set of literal formats is understood; there is no
natural-language parsing ("next Tuesday" is rejected).
"""

import re
from datetime import date as Date, datetime, time as Time
from typing import Tuple, Union

import pendulum
from pendulum import DateTime

from .exceptions import InvalidDateError, InvalidInputError, InvalidTimeError

DATE_FORMATS: Tuple[str, ...] = (
    "YYYY-MM-DD",
    "YYYY/MM/DD",
    "DD/MM/YYYY",
    "DD-MM-YYYY",
    "DD.MM.YYYY",
)

TIME_FORMATS: Tuple[str, ...] = (
    "H:mm:ss",
    "H:mm",
    "HHmm",
)

# pendulum tokens also match single digits, so the exact shapes are checked first
DATE_SHAPE = re.compile(
    r"\d{4}-\d{2}-\d{2}|\d{4}/\d{2}/\d{2}|\d{2}/\d{2}/\d{4}|\d{2}-\d{2}-\d{4}|\d{2}\.\d{2}\.\d{4}"
)
TIME_SHAPE = re.compile(r"\d{1,2}:\d{2}(:\d{2})?|\d{4}")


def parse_date(value: Union[str, Date]) -> Date:
    """
    Parse a calendar date.

    Accepts a ``date`` object, one of DATE_FORMATS, or an ISO 8601 timestamp
    whose date part is used.

    Raises:
        InvalidDateError: If the value is not a recognized calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, Date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(f"Not a calendar date: {value!r}")

    text = value.strip()
    if DATE_SHAPE.fullmatch(text):
        for fmt in DATE_FORMATS:
            try:
                return pendulum.from_format(text, fmt).date()
            except ValueError:
                continue

    if "T" in text:
        try:
            parsed = pendulum.parse(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, DateTime):
            return parsed.date()

    raise InvalidDateError(
        f"Not a calendar date: {value!r} (expected e.g. 2025-06-20 or 20/06/2025)"
    )


def parse_time(value: Union[str, Time]) -> Time:
    """
    Parse a 24-hour wall-clock time such as ``15:30``, ``9:05`` or ``15:30:00``.

    Raises:
        InvalidTimeError: If the value is not a recognized 24-hour time
    """
    if isinstance(value, Time):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimeError(f"Not a 24-hour time: {value!r}")

    text = value.strip()
    if not TIME_SHAPE.fullmatch(text):
        raise InvalidTimeError(f"Not a 24-hour time: {value!r} (expected e.g. 15:30)")

    for fmt in TIME_FORMATS:
        try:
            return pendulum.from_format(text, fmt).time()
        except ValueError:
            continue

    raise InvalidTimeError(f"Not a 24-hour time: {value!r} (expected e.g. 15:30)")


def parse_instant(value: Union[str, datetime], timezone: str) -> DateTime:
    """
    Parse an ISO 8601 instant; naive values are read as wall-clock time in ``timezone``.

    Raises:
        InvalidInputError: If the value is not an ISO 8601 date-time
    """
    if isinstance(value, datetime):
        return pendulum.instance(value, tz=timezone)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"Not an ISO 8601 date-time: {value!r}")

    try:
        parsed = pendulum.parse(value.strip(), tz=timezone)
    except ValueError as exc:
        raise InvalidInputError(f"Not an ISO 8601 date-time: {value!r}") from exc

    if not isinstance(parsed, DateTime):
        raise InvalidInputError(f"Not an ISO 8601 date-time: {value!r}")
    return parsed
