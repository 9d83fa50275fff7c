"""Data models for calendar layout."""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional, Tuple

GRID_SIZE = 42

LAST_INSTANT = time(23, 59, 59, 999000)


class StyleTag(str, Enum):
    """Visual category attached to a classified day."""
    REGULAR_SHIFT = "regular-shift"
    ON_VACATION = "on-vacation"
    EDUCATIONAL_EVENT = "educational-event"
    PERSONAL_EVENT = "personal-event"
    PAYDAY = "payday"


@dataclass(frozen=True)
class Event:
    """Calendar event normalized to the reference time scale."""
    start: Optional[datetime]
    end: Optional[datetime]
    summary: str = ""
    uid: str = ""
    description: str = ""
    location: Optional[str] = None

    @property
    def is_schedulable(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class ScheduleWindow:
    """Active schedule range, both bounds inclusive and optional."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def from_dates(
        cls,
        start_date: Optional[date],
        end_date: Optional[date]
    ) -> "ScheduleWindow":
        """
        Build a window covering whole calendar days.

        Args:
            start_date: First scheduled day, or None
            end_date: Last scheduled day, or None

        Returns:
            ScheduleWindow starting at midnight and ending at the last
            instant of end_date
        """
        start = datetime.combine(start_date, time.min) if start_date else None
        end = datetime.combine(end_date, LAST_INSTANT) if end_date else None
        return cls(start=start, end=end)

    @property
    def is_bounded(self) -> bool:
        return self.start is not None and self.end is not None


@dataclass(frozen=True)
class Classification:
    """Canonical label chosen for a day."""
    label: str
    style_tag: Optional[StyleTag] = None


@dataclass(frozen=True)
class DayCell:
    """One day square of a month grid."""
    date: date
    in_month: bool
    past_schedule_end: bool
    events: Tuple[Event, ...] = ()
    label: Optional[str] = None
    style_tag: Optional[StyleTag] = None

    @property
    def muted(self) -> bool:
        return not self.in_month

    @property
    def has_event(self) -> bool:
        return len(self.events) > 0


@dataclass(frozen=True)
class MonthGrid:
    """Six weeks of day cells starting on the Sunday on or before month_start."""
    month_start: date
    cells: Tuple[DayCell, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if len(self.cells) != GRID_SIZE:
            raise ValueError(
                f"MonthGrid requires {GRID_SIZE} cells, got {len(self.cells)}"
            )

    @property
    def title(self) -> str:
        return self.month_start.strftime('%B %Y')

    @property
    def weeks(self) -> Tuple[Tuple[DayCell, ...], ...]:
        return tuple(
            self.cells[row:row + 7] for row in range(0, GRID_SIZE, 7)
        )
