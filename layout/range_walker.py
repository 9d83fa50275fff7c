"""Multi-month iteration over a schedule window."""
import logging
from datetime import date
from typing import Iterator, List, Optional, Sequence

from layout.calendar_math import DateLike, add_months, start_of_month
from layout.models import Event, MonthGrid, ScheduleWindow
from layout.month_grid import build_month

logger = logging.getLogger(__name__)


def months_in_range(
    schedule_window: Optional[ScheduleWindow],
    current_month: DateLike
) -> Iterator[date]:
    """
    Yield the first day of every month touched by the schedule window.

    When the window is missing either bound, only the currently viewed
    month is yielded. An inverted window yields nothing.

    Args:
        schedule_window: Window to walk, or None
        current_month: Month shown when the window is not fully bounded

    Yields:
        Month start dates in ascending order
    """
    if schedule_window is None or not schedule_window.is_bounded:
        yield start_of_month(current_month)
        return

    month = start_of_month(schedule_window.start)
    last_month = start_of_month(schedule_window.end)
    while month <= last_month:
        yield month
        month = add_months(month, 1)


def build_months(
    events: Sequence[Event],
    schedule_window: Optional[ScheduleWindow],
    current_month: DateLike
) -> List[MonthGrid]:
    """
    Build one grid per month of the window, in chronological order.

    Args:
        events: Full event list
        schedule_window: Window to export, or None
        current_month: Month used when the window is not fully bounded

    Returns:
        List of MonthGrid objects
    """
    grids = [
        build_month(month, events, schedule_window)
        for month in months_in_range(schedule_window, current_month)
    ]
    logger.info(f"Built {len(grids)} month grids")
    return grids
