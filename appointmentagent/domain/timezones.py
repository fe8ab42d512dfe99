"""
Conversion between wall-clock date/time in a named timezone and absolute instants.

Every place that needs to turn "2025-06-20 15:30 in Europe/Madrid" into a
point in time (or back) goes through this module.
"""

from datetime import date as Date, time as Time

import pendulum
from pendulum import DateTime

from .exceptions import InvalidInputError

WALL_CLOCK_FORMAT = "%Y-%m-%dT%H:%M:%S"


def is_valid_timezone(name: str) -> bool:
    """Return True if ``name`` is a known IANA timezone identifier."""
    if not isinstance(name, str) or not name.strip():
        return False
    try:
        pendulum.timezone(name)
    except (ValueError, KeyError):
        return False
    return True


def ensure_timezone(name: str) -> str:
    """Return ``name`` unchanged, or raise InvalidInputError if it is unknown."""
    if not is_valid_timezone(name):
        raise InvalidInputError(f"Unknown timezone: {name!r}")
    return name


def to_instant(day: Date, wall_time: Time, timezone: str) -> DateTime:
    """
    Combine a calendar date and a wall-clock time in ``timezone``.

    Args:
        day: Calendar date
        wall_time: Local wall-clock time
        timezone: IANA timezone identifier

    Returns:
        Timezone-aware pendulum DateTime for that local moment
    """
    return pendulum.datetime(
        day.year,
        day.month,
        day.day,
        wall_time.hour,
        wall_time.minute,
        wall_time.second,
        tz=timezone,
    )


def to_local(instant: DateTime, timezone: str) -> DateTime:
    """Express an absolute instant as wall-clock time in ``timezone``."""
    return pendulum.instance(instant).in_timezone(timezone)


def format_instant(instant: DateTime, timezone: str) -> str:
    """ISO 8601 with the UTC offset of ``timezone``, e.g. 2025-06-20T15:30:00+02:00."""
    return to_local(instant, timezone).to_iso8601_string()


def format_wall_clock(instant: DateTime, timezone: str) -> str:
    """Local wall-clock time without offset, e.g. 2025-06-20T15:30:00."""
    return to_local(instant, timezone).strftime(WALL_CLOCK_FORMAT)
