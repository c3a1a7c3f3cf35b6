"""Monthly and annual roll-ups of expense and income records."""

from calendar import month_name
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

import structlog

from .config import ProjectionConfig
from .dates import month_bounds, period_key
from .exceptions import ValidationError
from .models import (
    AnnualAggregate,
    CategoryShare,
    MonetaryRecord,
    MonthlyAggregate,
    PeriodAmount,
    PeriodDelta,
    TrendDirection,
    TrendSummary,
)

logger = structlog.get_logger()

MONTHS_PER_YEAR = 12


def _top_share(totals: dict[str, Decimal], grand_total: Decimal) -> Optional[CategoryShare]:
    """Largest category; the first one seen wins ties."""
    top: Optional[tuple[str, Decimal]] = None
    for category, amount in totals.items():
        if top is None or amount > top[1]:
            top = (category, amount)
    if top is None:
        return None
    percentage = top[1] / grand_total * 100 if grand_total > 0 else Decimal("0")
    return CategoryShare(category=top[0], amount=top[1], percentage=percentage)


def _delta(current: MonthlyAggregate, previous: MonthlyAggregate) -> PeriodDelta:
    expense_delta = current.total_expense - previous.total_expense
    if previous.total_expense > 0:
        expense_percentage = expense_delta / previous.total_expense * 100
    else:
        expense_percentage = Decimal("0")
    return PeriodDelta(
        expense_delta=expense_delta,
        expense_percentage=expense_percentage,
        income_delta=current.total_income - previous.total_income,
        net_flow_delta=current.net_flow - previous.net_flow,
    )


def _build_monthly_aggregate(
    year: int,
    month: int,
    expenses: list[MonetaryRecord],
    incomes: list[MonetaryRecord],
) -> MonthlyAggregate:
    """Build a MonthlyAggregate from the records of one month."""
    expense_totals: dict[str, Decimal] = defaultdict(Decimal)
    income_totals: dict[str, Decimal] = defaultdict(Decimal)

    for expense in expenses:
        expense_totals[expense.category] += expense.amount
    for income in incomes:
        income_totals[income.category] += income.amount

    total_expense = sum(expense_totals.values(), Decimal("0"))
    total_income = sum(income_totals.values(), Decimal("0"))
    first_day, last_day = month_bounds(year, month)

    return MonthlyAggregate(
        period_key=period_key(first_day),
        year=year,
        month=month,
        label=f"{month_name[month]} {year}",
        total_expense=total_expense,
        total_income=total_income,
        per_category_expense=dict(expense_totals),
        per_category_income=dict(income_totals),
        expense_count=len(expenses),
        income_count=len(incomes),
        average_per_day=total_expense / last_day.day,
        top_category=_top_share(expense_totals, total_expense),
        top_income_source=_top_share(income_totals, total_income),
    )


def aggregate_by_month(
    expenses: Iterable[MonetaryRecord],
    incomes: Iterable[MonetaryRecord],
    year: int,
) -> list[MonthlyAggregate]:
    """
    Aggregate a year's records into twelve monthly entries.

    Months without records are zero-filled. January carries no change
    figures; every later month is compared with the month before it.

    Args:
        expenses: Expense records (any year; others are ignored)
        incomes: Income records (any year; others are ignored)
        year: Calendar year to aggregate

    Returns:
        Exactly twelve MonthlyAggregate entries, January first
    """
    expenses_by_month: dict[int, list[MonetaryRecord]] = defaultdict(list)
    incomes_by_month: dict[int, list[MonetaryRecord]] = defaultdict(list)

    for expense in expenses:
        if expense.occurred_on.year == year:
            expenses_by_month[expense.occurred_on.month].append(expense)
    for income in incomes:
        if income.occurred_on.year == year:
            incomes_by_month[income.occurred_on.month].append(income)

    aggregates: list[MonthlyAggregate] = []
    for month in range(1, MONTHS_PER_YEAR + 1):
        aggregate = _build_monthly_aggregate(
            year, month, expenses_by_month[month], incomes_by_month[month]
        )
        if aggregates:
            aggregate = aggregate.model_copy(
                update={"delta_from_previous": _delta(aggregate, aggregates[-1])}
            )
        aggregates.append(aggregate)

    logger.debug(
        "monthly_aggregation_complete",
        year=year,
        expense_records=sum(a.expense_count for a in aggregates),
        income_records=sum(a.income_count for a in aggregates),
    )
    return aggregates


def half_year_trend(values: Sequence[Decimal], band_percent: Decimal) -> TrendSummary:
    """Compare the average of the first six months with the last six."""
    first_half = sum(values[:6], Decimal("0")) / 6
    second_half = sum(values[6:12], Decimal("0")) / 6
    if first_half > 0:
        change = (second_half - first_half) / first_half * 100
    else:
        change = Decimal("0")

    direction = TrendDirection.STABLE
    if abs(change) > band_percent:
        direction = TrendDirection.INCREASING if change > 0 else TrendDirection.DECREASING
    return TrendSummary(direction=direction, percentage=abs(change))


def _period_amount(aggregate: MonthlyAggregate, amount: Decimal) -> PeriodAmount:
    return PeriodAmount(period_key=aggregate.period_key, label=aggregate.label, amount=amount)


def aggregate_by_year(
    monthly: Sequence[MonthlyAggregate],
    config: Optional[ProjectionConfig] = None,
) -> AnnualAggregate:
    """
    Roll twelve monthly aggregates up into annual figures.

    Args:
        monthly: The twelve months of one year, as built by aggregate_by_month
        config: Supplies the stability band for the half-year trend

    Returns:
        AnnualAggregate with totals, extreme months and half-year trends

    Raises:
        ValidationError: If the months are empty, span several years or are
            not the twelve distinct months of a year
    """
    config = config or ProjectionConfig()

    if not monthly:
        raise ValidationError(
            "Cannot aggregate a year from no months",
            field="monthly",
            value=0,
            constraint="twelve monthly aggregates",
        )
    years = {m.year for m in monthly}
    if len(years) != 1:
        raise ValidationError(
            "Monthly aggregates span more than one year",
            field="monthly",
            value=sorted(years),
            constraint="single year",
        )
    if sorted(m.month for m in monthly) != list(range(1, MONTHS_PER_YEAR + 1)):
        raise ValidationError(
            "Annual aggregation needs each month of the year exactly once",
            field="monthly",
            value=len(monthly),
            constraint="months 1-12",
        )

    ordered = sorted(monthly, key=lambda m: m.month)
    total_expense = sum((m.total_expense for m in ordered), Decimal("0"))
    total_income = sum((m.total_income for m in ordered), Decimal("0"))

    category_totals: dict[str, Decimal] = defaultdict(Decimal)
    income_totals: dict[str, Decimal] = defaultdict(Decimal)
    for m in ordered:
        for category, amount in m.per_category_expense.items():
            category_totals[category] += amount
        for category, amount in m.per_category_income.items():
            income_totals[category] += amount

    # max/min return the first of equal values, so earlier months win ties
    highest = max(ordered, key=lambda m: m.total_expense)
    lowest = min(ordered, key=lambda m: m.total_expense)
    best_income = max(ordered, key=lambda m: m.total_income)

    return AnnualAggregate(
        year=ordered[0].year,
        total_expense=total_expense,
        total_income=total_income,
        monthly=ordered,
        category_totals=dict(category_totals),
        income_totals=dict(income_totals),
        average_monthly_expense=total_expense / MONTHS_PER_YEAR,
        average_monthly_income=total_income / MONTHS_PER_YEAR,
        highest_expense_month=_period_amount(highest, highest.total_expense),
        lowest_expense_month=_period_amount(lowest, lowest.total_expense),
        highest_income_month=_period_amount(best_income, best_income.total_income),
        expense_trend=half_year_trend(
            [m.total_expense for m in ordered], config.stability_band_percent
        ),
        income_trend=half_year_trend(
            [m.total_income for m in ordered], config.stability_band_percent
        ),
    )
