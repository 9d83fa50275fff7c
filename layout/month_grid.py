"""Month grid assembly."""
import logging
from typing import Optional, Sequence

from layout.calendar_math import (
    DateLike,
    add_days,
    day_of_week,
    end_of_day,
    start_of_month,
)
from layout.classifier import classify
from layout.interval_index import events_for_day
from layout.models import GRID_SIZE, DayCell, Event, MonthGrid, ScheduleWindow

logger = logging.getLogger(__name__)


def build_month(
    month_date: DateLike,
    events: Sequence[Event],
    schedule_window: Optional[ScheduleWindow] = None
) -> MonthGrid:
    """
    Lay out the 6x7 grid for the month containing month_date.

    Days outside the month and days after the schedule end are emitted
    without events, even when events overlap them, so that an event is
    never drawn twice across adjacent month views and nothing is shown
    beyond the known schedule.

    Args:
        month_date: Any date or datetime inside the month to render
        events: Full event list, in caller order
        schedule_window: Optional active schedule range

    Returns:
        MonthGrid with exactly 42 cells starting on a Sunday
    """
    month_start = start_of_month(month_date)
    grid_start = add_days(month_start, -day_of_week(month_start))
    schedule_end = schedule_window.end if schedule_window else None

    cells = []
    for offset in range(GRID_SIZE):
        day = add_days(grid_start, offset)
        in_month = day.month == month_start.month
        past_schedule_end = (
            schedule_end is not None and end_of_day(day) > schedule_end
        )

        if not in_month or past_schedule_end:
            cells.append(DayCell(
                date=day,
                in_month=in_month,
                past_schedule_end=past_schedule_end
            ))
            continue

        day_events = events_for_day(events, day)
        classification = classify(day_events)
        cells.append(DayCell(
            date=day,
            in_month=True,
            past_schedule_end=False,
            events=tuple(day_events),
            label=classification.label if classification else None,
            style_tag=classification.style_tag if classification else None
        ))

    logger.debug(
        f"Built grid for {month_start:%Y-%m} with "
        f"{sum(1 for cell in cells if cell.has_event)} event days"
    )
    return MonthGrid(month_start=month_start, cells=tuple(cells))
