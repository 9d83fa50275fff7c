"""Unit tests for day-window event lookup."""
from datetime import date, datetime

from layout.interval_index import events_for_day
from layout.models import Event


def make_event(start, end, summary="Shift"):
    return Event(start=start, end=end, summary=summary)


class TestEventsForDay:
    """Test cases for events_for_day."""

    def test_event_inside_day(self):
        """Test an event contained in the day."""
        event = make_event(datetime(2024, 3, 5, 8), datetime(2024, 3, 5, 16))

        assert events_for_day([event], date(2024, 3, 5)) == [event]
        assert events_for_day([event], date(2024, 3, 4)) == []
        assert events_for_day([event], date(2024, 3, 6)) == []

    def test_overnight_event_touches_both_days(self):
        """Test that an event spanning midnight belongs to both days."""
        event = make_event(datetime(2024, 3, 5, 19), datetime(2024, 3, 6, 7))

        assert events_for_day([event], date(2024, 3, 5)) == [event]
        assert events_for_day([event], date(2024, 3, 6)) == [event]

    def test_multi_day_event_covers_middle_days(self):
        """Test an event that starts before and ends after the day."""
        event = make_event(datetime(2024, 3, 1), datetime(2024, 3, 10), "On Vacation")

        assert events_for_day([event], date(2024, 3, 5)) == [event]

    def test_bounds_are_inclusive(self):
        """Test that touching the day window at either edge counts."""
        ends_at_midnight = make_event(datetime(2024, 3, 4, 20), datetime(2024, 3, 5, 0, 0))
        starts_at_last_instant = make_event(
            datetime(2024, 3, 5, 23, 59, 59, 999000),
            datetime(2024, 3, 6, 2)
        )

        result = events_for_day(
            [ends_at_midnight, starts_at_last_instant],
            date(2024, 3, 5)
        )

        assert result == [ends_at_midnight, starts_at_last_instant]

    def test_event_ending_just_before_day_is_excluded(self):
        """Test that an event ending before midnight does not leak into the next day."""
        event = make_event(datetime(2024, 3, 4, 20), datetime(2024, 3, 4, 23, 59, 59))

        assert events_for_day([event], date(2024, 3, 5)) == []

    def test_events_without_bounds_are_excluded(self):
        """Test that unschedulable events are skipped silently."""
        missing_start = make_event(None, datetime(2024, 3, 5, 16))
        missing_end = make_event(datetime(2024, 3, 5, 8), None)
        valid = make_event(datetime(2024, 3, 5, 8), datetime(2024, 3, 5, 16))

        result = events_for_day([missing_start, valid, missing_end], date(2024, 3, 5))

        assert result == [valid]

    def test_preserves_input_order(self):
        """Test that matches keep their relative order and are not re-sorted."""
        late = make_event(datetime(2024, 3, 5, 18), datetime(2024, 3, 5, 20), "Late")
        early = make_event(datetime(2024, 3, 5, 6), datetime(2024, 3, 5, 8), "Early")
        other_day = make_event(datetime(2024, 3, 7, 6), datetime(2024, 3, 7, 8), "Other")

        result = events_for_day([late, other_day, early], date(2024, 3, 5))

        assert [event.summary for event in result] == ["Late", "Early"]

    def test_empty_input(self):
        """Test that an empty list yields no events."""
        assert events_for_day([], date(2024, 3, 5)) == []
