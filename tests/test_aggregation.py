"""Tests for monthly and annual aggregation."""

from datetime import date
from decimal import Decimal

import pytest

from moneta_core.aggregation import aggregate_by_month, aggregate_by_year, half_year_trend
from moneta_core.exceptions import ValidationError
from moneta_core.models import MonetaryRecord, RecordKind, TrendDirection


def _record(record_id, amount, on, category="Food", kind=RecordKind.EXPENSE) -> MonetaryRecord:
    return MonetaryRecord(
        id=record_id,
        kind=kind,
        amount=Decimal(amount),
        category=category,
        occurred_on=on,
    )


@pytest.fixture
def expenses() -> list[MonetaryRecord]:
    return [
        _record("e1", "100", date(2025, 1, 10)),
        _record("e2", "50", date(2025, 1, 20), category="Transportation"),
        _record("e3", "300", date(2025, 3, 5), category="Bills"),
        _record("e4", "999", date(2024, 12, 31)),
    ]


@pytest.fixture
def incomes() -> list[MonetaryRecord]:
    return [
        _record("i1", "2000", date(2025, 1, 1), category="Salary", kind=RecordKind.INCOME),
        _record("i2", "2000", date(2025, 2, 1), category="Salary", kind=RecordKind.INCOME),
        _record("i3", "500", date(2025, 2, 15), category="Freelance", kind=RecordKind.INCOME),
    ]


class TestAggregateByMonth:
    """Test suite for aggregate_by_month."""

    def test_always_twelve_months(self):
        months = aggregate_by_month([], [], 2025)

        assert len(months) == 12
        assert [m.month for m in months] == list(range(1, 13))
        assert all(m.total_expense == 0 and m.total_income == 0 for m in months)
        assert months[0].period_key == "2025-01"
        assert months[11].label == "December 2025"

    def test_totals_and_breakdowns(self, expenses, incomes):
        january = aggregate_by_month(expenses, incomes, 2025)[0]

        assert january.total_expense == Decimal("150")
        assert january.total_income == Decimal("2000")
        assert january.net_flow == Decimal("1850")
        assert january.per_category_expense == {"Food": Decimal("100"), "Transportation": Decimal("50")}
        assert january.expense_count == 2
        assert january.income_count == 1
        assert january.average_per_day == Decimal("150") / 31

    def test_other_years_ignored(self, expenses, incomes):
        months = aggregate_by_month(expenses, incomes, 2025)
        assert sum(m.expense_count for m in months) == 3

    def test_top_category(self, expenses, incomes):
        january = aggregate_by_month(expenses, incomes, 2025)[0]

        assert january.top_category.category == "Food"
        assert january.top_category.amount == Decimal("100")
        assert january.top_category.percentage == Decimal("100") / Decimal("150") * 100

    def test_top_category_absent_for_empty_month(self, expenses, incomes):
        april = aggregate_by_month(expenses, incomes, 2025)[3]
        assert april.top_category is None
        assert april.top_income_source is None

    def test_january_has_no_delta(self, expenses, incomes):
        months = aggregate_by_month(expenses, incomes, 2025)

        assert months[0].delta_from_previous is None
        assert all(m.delta_from_previous is not None for m in months[1:])

    def test_delta_against_previous_month(self, expenses, incomes):
        months = aggregate_by_month(expenses, incomes, 2025)
        february = months[1].delta_from_previous
        march = months[2].delta_from_previous

        assert february.expense_delta == Decimal("-150")
        assert february.expense_percentage == Decimal("-100")
        assert february.income_delta == Decimal("500")
        assert february.net_flow_delta == Decimal("650")
        # February had no expenses, so there is no base for a percentage
        assert march.expense_delta == Decimal("300")
        assert march.expense_percentage == Decimal("0")


def _year(expense_by_month: list[str], income_by_month: list[str] = None) -> list:
    income_by_month = income_by_month or ["0"] * 12
    expenses = [
        _record(f"e{m}", amount, date(2025, m, 1))
        for m, amount in enumerate(expense_by_month, start=1)
        if Decimal(amount) > 0
    ]
    incomes = [
        _record(f"i{m}", amount, date(2025, m, 1), category="Salary", kind=RecordKind.INCOME)
        for m, amount in enumerate(income_by_month, start=1)
        if Decimal(amount) > 0
    ]
    return aggregate_by_month(expenses, incomes, 2025)


class TestAggregateByYear:
    """Test suite for aggregate_by_year."""

    def test_totals(self, expenses, incomes):
        annual = aggregate_by_year(aggregate_by_month(expenses, incomes, 2025))

        assert annual.year == 2025
        assert annual.total_expense == Decimal("450")
        assert annual.total_income == Decimal("4500")
        assert annual.net_flow == Decimal("4050")
        assert annual.category_totals["Bills"] == Decimal("300")
        assert annual.income_totals == {"Salary": Decimal("4000"), "Freelance": Decimal("500")}
        assert annual.average_monthly_expense == Decimal("450") / 12

    def test_extreme_months(self, expenses, incomes):
        annual = aggregate_by_year(aggregate_by_month(expenses, incomes, 2025))

        assert annual.highest_expense_month.period_key == "2025-03"
        assert annual.highest_expense_month.amount == Decimal("300")
        assert annual.highest_income_month.label == "February 2025"
        # Several months have zero spend; the earliest wins the tie
        assert annual.lowest_expense_month.period_key == "2025-02"

    def test_increasing_trend(self):
        annual = aggregate_by_year(_year(["100"] * 6 + ["150"] * 6))

        assert annual.expense_trend.direction == TrendDirection.INCREASING
        assert annual.expense_trend.percentage == Decimal("50")

    def test_decreasing_trend(self):
        annual = aggregate_by_year(_year(["200"] * 6 + ["100"] * 6))
        assert annual.expense_trend.direction == TrendDirection.DECREASING
        assert annual.expense_trend.percentage == Decimal("50")

    def test_stable_within_band(self):
        annual = aggregate_by_year(_year(["100"] * 6 + ["104"] * 6))
        assert annual.expense_trend.direction == TrendDirection.STABLE

    def test_zero_first_half_is_stable(self):
        annual = aggregate_by_year(_year(["0"] * 6 + ["100"] * 6))
        assert annual.expense_trend.direction == TrendDirection.STABLE
        assert annual.expense_trend.percentage == Decimal("0")

    def test_income_trend(self):
        annual = aggregate_by_year(_year(["10"] * 12, ["1000"] * 6 + ["1200"] * 6))
        assert annual.income_trend.direction == TrendDirection.INCREASING

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            aggregate_by_year([])

    def test_mixed_years_rejected(self):
        months = aggregate_by_month([], [], 2024)[:6] + aggregate_by_month([], [], 2025)[6:]
        with pytest.raises(ValidationError) as exc_info:
            aggregate_by_year(months)
        assert exc_info.value.field == "monthly"

    def test_partial_year_rejected(self):
        with pytest.raises(ValidationError):
            aggregate_by_year(aggregate_by_month([], [], 2025)[:11])


class TestHalfYearTrend:
    """Test suite for half_year_trend."""

    def test_custom_band(self):
        values = [Decimal("100")] * 6 + [Decimal("104")] * 6
        assert half_year_trend(values, Decimal("3")).direction == TrendDirection.INCREASING
