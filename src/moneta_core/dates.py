"""Calendar-local date arithmetic.

All engine dates are plain ``datetime.date`` values: a year, month and day
with no time-of-day or timezone component, so two records on the same
calendar day always compare equal regardless of where they came from.

Month-based steps use ``dateutil.relativedelta``, which clamps to the last
valid day of a shorter month (Jan 31 + 1 month -> Feb 28/29).
"""

from calendar import monthrange
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Union

from dateutil.relativedelta import relativedelta

from .models.financial import Frequency


class DateOrder(str, Enum):
    """Result of comparing two calendar dates."""

    BEFORE = "before"
    SAME = "same"
    AFTER = "after"


FREQUENCY_STEPS: dict[Frequency, relativedelta] = {
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.BIWEEKLY: relativedelta(weeks=2),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.YEARLY: relativedelta(years=1),
}


def to_local_date(value: Union[date, datetime]) -> date:
    """Reduce a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_period(value: date, frequency: Frequency, count: int = 1) -> date:
    """Add ``count`` frequency steps to a date.

    Args:
        value: Starting calendar date
        frequency: Step size
        count: Number of steps (may be negative)

    Returns:
        The shifted calendar date, clamped to the end of a shorter month
    """
    step = FREQUENCY_STEPS[Frequency(frequency)]
    return to_local_date(value) + step * count


def add_days(value: date, days: int) -> date:
    """Add a number of days to a calendar date."""
    return to_local_date(value) + timedelta(days=days)


def add_months(value: date, months: int) -> date:
    """Add calendar months with end-of-month clamping."""
    return to_local_date(value) + relativedelta(months=months)


def compare(a: date, b: date) -> DateOrder:
    """Compare two calendar dates."""
    a, b = to_local_date(a), to_local_date(b)
    if a < b:
        return DateOrder.BEFORE
    if a > b:
        return DateOrder.AFTER
    return DateOrder.SAME


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (negative if end is earlier)."""
    return (to_local_date(end) - to_local_date(start)).days


def period_key(value: date) -> str:
    """Year-month key (``YYYY-MM``) used to bucket records by month."""
    return to_local_date(value).strftime("%Y-%m")


def parse_period_key(key: str) -> tuple[int, int]:
    """Split a ``YYYY-MM`` key into (year, month)."""
    year, month = key.split("-")
    return int(year), int(month)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def next_period_key(key: str) -> str:
    """Key of the month following ``key``."""
    year, month = parse_period_key(key)
    return period_key(date(year, month, 1) + relativedelta(months=1))


def years_before(value: date, years: int) -> date:
    """The same calendar day ``years`` years earlier (Feb 29 clamps to Feb 28)."""
    return to_local_date(value) - relativedelta(years=years)
