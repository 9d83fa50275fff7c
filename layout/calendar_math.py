"""Pure calendar arithmetic on immutable date values."""
from datetime import date, datetime, time, timedelta
from typing import Union

from layout.models import LAST_INSTANT

DateLike = Union[date, datetime]


def as_date(value: DateLike) -> date:
    """Drop the time component of a datetime, pass dates through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_month(value: DateLike) -> date:
    """Return the first day of the month containing value."""
    return as_date(value).replace(day=1)


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def add_months(value: DateLike, months: int) -> date:
    """
    Shift to the first day of the month `months` away from value.

    Args:
        value: Any date inside the reference month
        months: Number of months to move, negative to go back

    Returns:
        First day of the target month
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    return date(year, month + 1, 1)


def day_of_week(day: date) -> int:
    """Weekday index with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    """Last representable instant of day (23:59:59.999)."""
    return datetime.combine(day, LAST_INSTANT)
