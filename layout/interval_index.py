"""Day-window overlap lookup over an event list."""
from datetime import date
from typing import Iterable, List

from layout.calendar_math import end_of_day, start_of_day
from layout.models import Event


def events_for_day(events: Iterable[Event], day: date) -> List[Event]:
    """
    Select the events whose interval touches the given calendar day.

    Both ends are inclusive: an event ending exactly at midnight still
    counts for the day that starts at that midnight. Events without a
    start or end are never returned.

    Args:
        events: Events in caller order
        day: Calendar day to test

    Returns:
        Matching events in their input order
    """
    day_start = start_of_day(day)
    day_end = end_of_day(day)

    return [
        event for event in events
        if event.is_schedulable
        and not (event.end < day_start or event.start > day_end)
    ]
