"""Tests for calendar-local date arithmetic."""

from datetime import date, datetime

import pytest

from moneta_core.dates import (
    DateOrder,
    add_days,
    add_period,
    compare,
    days_between,
    month_bounds,
    next_period_key,
    parse_period_key,
    period_key,
    to_local_date,
    years_before,
)
from moneta_core.models import Frequency


class TestAddPeriod:
    """Test suite for add_period."""

    def test_weekly_adds_seven_days(self):
        """Weekly steps are exactly seven days."""
        assert add_period(date(2024, 1, 1), Frequency.WEEKLY) == date(2024, 1, 8)

    def test_biweekly_adds_fourteen_days(self):
        """Biweekly steps are exactly fourteen days."""
        assert add_period(date(2024, 1, 1), Frequency.BIWEEKLY) == date(2024, 1, 15)

    def test_monthly_clamps_to_leap_february(self):
        """Jan 31 + 1 month lands on Feb 29 in a leap year."""
        assert add_period(date(2024, 1, 31), Frequency.MONTHLY) == date(2024, 2, 29)

    def test_monthly_clamps_to_short_february(self):
        """Jan 31 + 1 month lands on Feb 28 outside leap years."""
        assert add_period(date(2023, 1, 31), Frequency.MONTHLY) == date(2023, 2, 28)

    def test_quarterly_adds_three_months(self):
        """Quarterly steps are three calendar months."""
        assert add_period(date(2024, 11, 30), Frequency.QUARTERLY) == date(2025, 2, 28)

    def test_yearly_from_leap_day(self):
        """Feb 29 + 1 year clamps to Feb 28."""
        assert add_period(date(2024, 2, 29), Frequency.YEARLY) == date(2025, 2, 28)

    def test_count_multiplies_step(self):
        """A count of three monthly steps is three months."""
        assert add_period(date(2024, 1, 15), Frequency.MONTHLY, count=3) == date(2024, 4, 15)

    def test_accepts_string_frequency(self):
        """Frequency values are accepted by their string value."""
        assert add_period(date(2024, 1, 1), "weekly") == date(2024, 1, 8)

    def test_rejects_unknown_frequency(self):
        """Unknown frequencies raise ValueError."""
        with pytest.raises(ValueError):
            add_period(date(2024, 1, 1), "fortnightly")

    def test_datetime_reduced_to_date(self):
        """A datetime input is reduced to its calendar date."""
        result = add_period(datetime(2024, 1, 1, 23, 30), Frequency.WEEKLY)
        assert result == date(2024, 1, 8)
        assert not isinstance(result, datetime)


class TestCompare:
    """Test suite for compare."""

    def test_before(self):
        assert compare(date(2024, 1, 1), date(2024, 1, 2)) == DateOrder.BEFORE

    def test_after(self):
        assert compare(date(2024, 1, 3), date(2024, 1, 2)) == DateOrder.AFTER

    def test_same_day_ignores_time(self):
        """Two moments on the same calendar day compare as the same."""
        assert compare(datetime(2024, 1, 2, 1, 0), datetime(2024, 1, 2, 23, 0)) == DateOrder.SAME


class TestHelpers:
    """Test suite for the smaller date helpers."""

    def test_to_local_date_passes_dates_through(self):
        assert to_local_date(date(2025, 1, 1)) == date(2025, 1, 1)

    def test_add_days(self):
        assert add_days(date(2024, 2, 28), 2) == date(2024, 3, 1)

    def test_days_between(self):
        assert days_between(date(2024, 1, 1), date(2024, 3, 1)) == 60
        assert days_between(date(2024, 3, 1), date(2024, 1, 1)) == -60

    def test_period_keys(self):
        """Period keys are zero-padded year-month strings."""
        assert period_key(date(2025, 3, 31)) == "2025-03"
        assert parse_period_key("2025-03") == (2025, 3)
        assert next_period_key("2025-12") == "2026-01"

    def test_month_bounds(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))

    def test_years_before(self):
        assert years_before(date(2025, 6, 1), 10) == date(2015, 6, 1)
        assert years_before(date(2024, 2, 29), 1) == date(2023, 2, 28)
