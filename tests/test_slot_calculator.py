"""
Tests for slot calculator.
"""

import pendulum
import pytest
from datetime import date, time

from appointmentagent.domain.exceptions import CollaboratorError, InvalidDurationError
from appointmentagent.domain.models import TimeRange, WorkingHours
from appointmentagent.domain.slot_calculator import SlotCalculator

TZ = "Europe/Madrid"


def _at(text: str):
    return pendulum.parse(text, tz=TZ)


def _busy(start: str, end: str) -> TimeRange:
    return TimeRange(start=_at(start), end=_at(end))


@pytest.fixture
def window():
    working_hours = WorkingHours(start_time=time(9, 0), end_time=time(18, 0), timezone=TZ)
    return working_hours.window_for(date(2025, 6, 20))


@pytest.fixture
def calculator():
    return SlotCalculator()


class TestSlotGeneration:
    """Tests for candidate generation."""

    def test_full_day_of_half_hour_slots(self, calculator, window):
        """09:00-18:00 in 30 minute steps gives 18 slots."""
        slots = calculator.generate_candidates(window, 30)

        assert len(slots) == 18
        assert slots[0] == _busy("2025-06-20 09:00", "2025-06-20 09:30")
        assert slots[-1] == _busy("2025-06-20 17:30", "2025-06-20 18:00")

    def test_slots_are_contiguous_and_exact(self, calculator, window):
        """Every slot has the requested length and starts where the last ended."""
        slots = calculator.generate_candidates(window, 45)

        assert all(slot.duration_minutes() == 45 for slot in slots)
        for current, following in zip(slots, slots[1:]):
            assert current.end == following.start

    def test_no_partial_trailing_slot(self, calculator, window):
        """A remainder shorter than one slot is discarded."""
        slots = calculator.generate_candidates(window, 120)

        # 09-11, 11-13, 13-15, 15-17; 17-18 is too short
        assert len(slots) == 4
        assert slots[-1].end == _at("2025-06-20 17:00")

    def test_duration_longer_than_window(self, calculator, window):
        """A slot that cannot fit yields an empty result, not an error."""
        assert calculator.generate_candidates(window, 600) == []

    def test_duration_equal_to_window(self, calculator, window):
        """A slot exactly as long as the window fits once."""
        slots = calculator.generate_candidates(window, 540)

        assert len(slots) == 1

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration(self, calculator, window, duration):
        """Zero and negative durations are rejected."""
        with pytest.raises(InvalidDurationError):
            calculator.generate_candidates(window, duration)

    @pytest.mark.parametrize("duration", [30.5, "30", True])
    def test_non_integer_duration(self, calculator, window, duration):
        """Only whole minutes are accepted."""
        with pytest.raises(InvalidDurationError):
            calculator.generate_candidates(window, duration)

    def test_dst_day_keeps_slot_length(self, calculator):
        """Across the spring-forward gap every slot still lasts the full duration."""
        working_hours = WorkingHours(start_time=time(0, 0), end_time=time(6, 0), timezone=TZ)
        # Clocks jump from 02:00 to 03:00 on 2025-03-30 in Madrid
        window = working_hours.window_for(date(2025, 3, 30))

        slots = calculator.generate_candidates(window, 60)

        assert len(slots) == 5
        assert all(slot.duration_minutes() == 60 for slot in slots)


class TestBusyFilter:
    """Tests for busy-set filtering."""

    def test_no_busy_times(self, calculator, window):
        """Without busy times every candidate is free."""
        slots = calculator.find_available_slots(window, [], 30)

        assert len(slots) == 18

    def test_busy_hour_removes_two_slots(self, calculator, window):
        """Busy 09:00-10:00 leaves 10:00-10:30 as the first free slot."""
        busy = [_busy("2025-06-20 09:00", "2025-06-20 10:00")]

        slots = calculator.find_available_slots(window, busy, 30)

        assert len(slots) == 16
        assert slots[0] == _busy("2025-06-20 10:00", "2025-06-20 10:30")

    def test_touching_busy_interval_keeps_candidate(self, calculator, window):
        """Busy 09:30-10:00 does not exclude 09:00-09:30."""
        busy = [_busy("2025-06-20 09:30", "2025-06-20 10:00")]

        slots = calculator.find_available_slots(window, busy, 30)

        assert slots[0] == _busy("2025-06-20 09:00", "2025-06-20 09:30")
        assert _busy("2025-06-20 09:30", "2025-06-20 10:00") not in slots
        assert slots[1] == _busy("2025-06-20 10:00", "2025-06-20 10:30")

    def test_partial_overlap_excludes_candidate(self, calculator, window):
        """A busy interval clipping a slot by one minute removes it."""
        busy = [_busy("2025-06-20 12:29", "2025-06-20 12:31")]

        slots = calculator.find_available_slots(window, busy, 30)

        assert _busy("2025-06-20 12:00", "2025-06-20 12:30") not in slots
        assert _busy("2025-06-20 12:30", "2025-06-20 13:00") not in slots
        assert len(slots) == 16

    def test_busy_covering_window(self, calculator, window):
        """A busy set covering the whole window leaves nothing."""
        busy = [_busy("2025-06-20 08:00", "2025-06-20 19:00")]

        assert calculator.find_available_slots(window, busy, 30) == []

    def test_busy_pieces_covering_window(self, calculator, window):
        """Several busy intervals together can cover the window."""
        busy = [
            _busy("2025-06-20 13:00", "2025-06-20 18:00"),
            _busy("2025-06-20 09:00", "2025-06-20 13:00"),
        ]

        assert calculator.find_available_slots(window, busy, 30) == []

    def test_duplicates_and_order_are_irrelevant(self, calculator, window):
        """Unordered and repeated busy intervals give the same answer."""
        a = _busy("2025-06-20 11:00", "2025-06-20 12:00")
        b = _busy("2025-06-20 15:15", "2025-06-20 15:45")

        reference = calculator.find_available_slots(window, [a, b], 30)
        shuffled = calculator.find_available_slots(window, [b, a, b, a], 30)

        assert shuffled == reference

    def test_result_never_overlaps_busy(self, calculator, window):
        """No returned slot overlaps any busy interval."""
        busy = [
            _busy("2025-06-20 09:10", "2025-06-20 09:20"),
            _busy("2025-06-20 12:45", "2025-06-20 14:05"),
            _busy("2025-06-20 17:59", "2025-06-20 20:00"),
        ]

        slots = calculator.find_available_slots(window, busy, 15)

        assert slots
        assert not any(slot.overlaps(b) for slot in slots for b in busy)
        assert all(a.start < b.start for a, b in zip(slots, slots[1:]))

    def test_busy_outside_window_is_ignored(self, calculator, window):
        """Busy time on the evening before does not matter."""
        busy = [
            TimeRange(
                start=pendulum.parse("2025-06-19 20:00", tz=TZ),
                end=pendulum.parse("2025-06-20 09:00", tz=TZ),
            )
        ]

        slots = calculator.find_available_slots(window, busy, 30)

        assert len(slots) == 18


class TestNormalizeBusy:
    """Tests for busy entry normalization."""

    def test_parses_iso_entries(self, calculator):
        """ISO 8601 entries become TimeRange objects."""
        busy = calculator.normalize_busy([
            {"start": "2025-06-20T07:00:00Z", "end": "2025-06-20T08:00:00Z"},
        ])

        assert busy == [_busy("2025-06-20 09:00", "2025-06-20 10:00")]

    def test_malformed_entries_are_dropped(self, calculator, caplog):
        """Entries missing a boundary are skipped with a warning."""
        entries = [
            {"start": "2025-06-20T07:00:00Z"},
            {"end": "2025-06-20T08:00:00Z"},
            {"start": None, "end": "2025-06-20T08:00:00Z"},
            {"start": "not a date", "end": "2025-06-20T08:00:00Z"},
            {"start": "2025-06-20T09:00:00Z", "end": "2025-06-20T08:00:00Z"},
            {"start": "2025-06-20T10:00:00Z", "end": "2025-06-20T11:00:00Z"},
        ]

        with caplog.at_level("WARNING"):
            busy = calculator.normalize_busy(entries)

        assert len(busy) == 1
        assert busy[0].start == pendulum.parse("2025-06-20T10:00:00Z")
        assert caplog.text.count("Ignoring malformed busy interval") == 5

    def test_strict_mode_raises(self):
        """With strict_busy_data a malformed entry is a collaborator failure."""
        calculator = SlotCalculator(strict_busy_data=True)

        with pytest.raises(CollaboratorError, match="Malformed busy interval"):
            calculator.normalize_busy([{"start": "2025-06-20T07:00:00Z"}])
