"""Calendar arithmetic over local calendar dates.

Everything here works on ``datetime.date`` values: no times, no timezones,
so adding or counting days never drifts across a DST change or midnight.
Day-of-week numbering is 0 = Sunday .. 6 = Saturday.
"""

from dataclasses import dataclass
from datetime import date, timedelta

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class WeekBounds:
    """Inclusive 7-day window."""

    start: date
    end: date


def today() -> date:
    """Return the local calendar date."""
    return date.today()


def day_of_week(day: date) -> int:
    """0 = Sunday, 1 = Monday, ..., 6 = Saturday."""
    # isoweekday() is 1 = Monday .. 7 = Sunday
    return day.isoweekday() % 7


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def subtract_days(day: date, n: int) -> date:
    return add_days(day, -n)


def days_between(a: date, b: date) -> int:
    """Signed day count, positive when ``a`` is after ``b``."""
    return (a - b).days


def week_bounds(day: date, week_start_day: int = 1) -> WeekBounds:
    """Return the week containing ``day`` that starts on ``week_start_day``."""
    days_to_start = (day_of_week(day) - week_start_day) % DAYS_PER_WEEK
    start = subtract_days(day, days_to_start)
    return WeekBounds(start=start, end=add_days(start, DAYS_PER_WEEK - 1))


def is_same_day(a: date, b: date) -> bool:
    return a == b


def parse_local_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    return date.fromisoformat(value)


def date_range(start: date, end: date) -> list[date]:
    """All dates from ``start`` to ``end``, both inclusive."""
    return [add_days(start, i) for i in range(days_between(end, start) + 1)]
