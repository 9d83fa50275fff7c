"""Currently displayed month, as an immutable value."""
from dataclasses import dataclass
from datetime import date

from layout.calendar_math import DateLike, add_months, start_of_month


@dataclass(frozen=True)
class MonthCursor:
    """Month being browsed; navigation returns a new cursor."""
    month: date

    def __post_init__(self):
        # Pinned to day 1 so month steps never overflow.
        object.__setattr__(self, 'month', start_of_month(self.month))

    @classmethod
    def for_date(cls, value: DateLike) -> "MonthCursor":
        return cls(month=value)

    def advance(self) -> "MonthCursor":
        return MonthCursor(month=add_months(self.month, 1))

    def retreat(self) -> "MonthCursor":
        return MonthCursor(month=add_months(self.month, -1))
