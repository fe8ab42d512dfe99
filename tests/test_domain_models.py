"""
Tests for domain models.
"""

import pendulum
import pytest
from datetime import date, time

from appointmentagent.domain.exceptions import InvalidInputError
from appointmentagent.domain.models import BookedEvent, BookingRequest, TimeRange, WorkingHours

TZ = "Europe/Madrid"


def _at(text: str, tz: str = TZ):
    return pendulum.parse(text, tz=tz)


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = _at("2025-06-20 09:00")
        end = _at("2025-06-20 18:00")

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 540  # 9 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = _at("2025-06-20 18:00")
        end = _at("2025-06-20 09:00")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_empty_time_range_raises_error(self):
        """Test that a zero-length range is rejected."""
        moment = _at("2025-06-20 09:00")

        with pytest.raises(ValueError):
            TimeRange(start=moment, end=moment)

    def test_overlaps(self):
        """Test overlap detection."""
        tr1 = TimeRange(start=_at("2025-06-20 09:00"), end=_at("2025-06-20 12:00"))
        tr2 = TimeRange(start=_at("2025-06-20 11:00"), end=_at("2025-06-20 14:00"))
        tr3 = TimeRange(start=_at("2025-06-20 14:00"), end=_at("2025-06-20 17:00"))

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)

    def test_touching_ranges_do_not_overlap(self):
        """Back-to-back ranges share an endpoint but do not overlap."""
        first = TimeRange(start=_at("2025-06-20 09:00"), end=_at("2025-06-20 09:30"))
        second = TimeRange(start=_at("2025-06-20 09:30"), end=_at("2025-06-20 10:00"))

        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_contained_range_overlaps(self):
        """A range inside another overlaps it."""
        outer = TimeRange(start=_at("2025-06-20 09:00"), end=_at("2025-06-20 12:00"))
        inner = TimeRange(start=_at("2025-06-20 10:00"), end=_at("2025-06-20 10:15"))

        assert outer.overlaps(inner)
        assert inner.overlaps(outer)

    def test_overlap_compares_absolute_time(self):
        """Ranges expressed in different timezones are compared as instants."""
        madrid = TimeRange(start=_at("2025-06-20 09:00"), end=_at("2025-06-20 10:00"))
        # 07:30-08:00 UTC is 09:30-10:00 in Madrid (CEST)
        utc = TimeRange(
            start=pendulum.parse("2025-06-20T07:30:00Z"),
            end=pendulum.parse("2025-06-20T08:00:00Z"),
        )

        assert madrid.overlaps(utc)

    def test_to_dict_formats_in_timezone(self):
        """Serialization applies the requested timezone offset."""
        tr = TimeRange(
            start=pendulum.parse("2025-06-20T07:00:00Z"),
            end=pendulum.parse("2025-06-20T07:30:00Z"),
        )

        assert tr.to_dict(TZ) == {
            "start": "2025-06-20T09:00:00+02:00",
            "end": "2025-06-20T09:30:00+02:00",
        }


class TestWorkingHours:
    """Tests for WorkingHours model."""

    def test_window_for_day(self):
        """Test getting the working window for a specific day."""
        working_hours = WorkingHours(start_time=time(9, 0), end_time=time(18, 0), timezone=TZ)

        window = working_hours.window_for(date(2025, 6, 20))

        assert window.day_start == _at("2025-06-20 09:00")
        assert window.day_end == _at("2025-06-20 18:00")
        assert window.day_start.timezone_name == TZ

    def test_window_uses_winter_offset(self):
        """The UTC offset follows the date, not the current season."""
        working_hours = WorkingHours(start_time=time(9, 0), end_time=time(18, 0), timezone=TZ)

        window = working_hours.window_for(date(2025, 1, 15))

        assert window.day_start.in_timezone("UTC").hour == 8

    def test_window_rejects_inverted_hours(self):
        """Closing before opening cannot form a window."""
        working_hours = WorkingHours(start_time=time(18, 0), end_time=time(9, 0), timezone=TZ)

        with pytest.raises(ValueError):
            working_hours.window_for(date(2025, 6, 20))


class TestBookingRequest:
    """Tests for BookingRequest validation."""

    def test_valid_request(self):
        """A complete request passes validation."""
        request = BookingRequest(
            name="Ana García",
            start=_at("2025-06-20 15:30"),
            end=_at("2025-06-20 16:00"),
        )

        request.validate()

    @pytest.mark.parametrize("field_name", ["name", "start", "end"])
    def test_missing_field(self, field_name):
        """Each required field is enforced."""
        values = {
            "name": "Ana García",
            "start": _at("2025-06-20 15:30"),
            "end": _at("2025-06-20 16:00"),
        }
        values[field_name] = None

        with pytest.raises(InvalidInputError, match=field_name):
            BookingRequest(**values).validate()

    def test_blank_name_is_missing(self):
        """Whitespace does not count as a name."""
        request = BookingRequest(
            name="   ",
            start=_at("2025-06-20 15:30"),
            end=_at("2025-06-20 16:00"),
        )

        with pytest.raises(InvalidInputError, match="name"):
            request.validate()

    def test_end_not_after_start(self):
        """end <= start is rejected."""
        request = BookingRequest(
            name="Ana García",
            start=_at("2025-06-20 16:00"),
            end=_at("2025-06-20 16:00"),
        )

        with pytest.raises(InvalidInputError, match="must be after start"):
            request.validate()


class TestBookedEvent:
    """Tests for BookedEvent."""

    def test_from_event_resource(self):
        """The descriptor keeps id and echoed times."""
        resource = {
            "id": "evt-1",
            "summary": "Cita - Ana García",
            "status": "confirmed",
            "htmlLink": "https://calendar.example/evt-1",
            "start": {"dateTime": "2025-06-20T15:30:00+02:00", "timeZone": TZ},
            "end": {"dateTime": "2025-06-20T16:00:00+02:00", "timeZone": TZ},
        }

        event = BookedEvent.from_event_resource(resource)

        assert event.to_dict() == {
            "id": "evt-1",
            "summary": "Cita - Ana García",
            "start": "2025-06-20T15:30:00+02:00",
            "end": "2025-06-20T16:00:00+02:00",
            "htmlLink": "https://calendar.example/evt-1",
            "status": "confirmed",
        }
        assert event.raw is resource
