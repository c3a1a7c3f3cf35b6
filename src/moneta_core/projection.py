"""Trend- and seasonally-adjusted spending and income projection.

The projection looks at the trailing window of monthly aggregates:

    trend_factor  = avg(last three) / avg(first three)    (1 when the first is 0)
    next estimate = avg(window) * trend_factor
    confidence    = clamp(1 - |trend_factor - 1|, floor, ceiling)

Months beyond the first projected step are scaled by the seasonal table.
The table describes spending; income estimates are not seasonally adjusted.
"""

from decimal import Decimal
from typing import Optional, Sequence

import structlog

from .config import ProjectionConfig
from .dates import next_period_key, parse_period_key
from .exceptions import ConfigurationError
from .models import MonthlyAggregate, ProjectedPeriod, TrendForecast

logger = structlog.get_logger()

TREND_SAMPLE = 3


def _average(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return Decimal("0")
    return sum(values, Decimal("0")) / len(values)


def trend_factor(values: Sequence[Decimal]) -> Decimal:
    """Ratio of the trailing three values' average to the leading three's."""
    leading = _average(values[:TREND_SAMPLE])
    if leading == 0:
        return Decimal("1")
    return _average(values[-TREND_SAMPLE:]) / leading


class TrendProjector:
    """
    Extrapolate next-period and year-end figures from recent months.

    Short histories are accepted: with fewer than six months the available
    ones are used, and an empty history yields zero estimates.
    """

    def __init__(self, config: Optional[ProjectionConfig] = None):
        self.config = config or ProjectionConfig()
        self._validate_seasonal_table()

    def _validate_seasonal_table(self) -> None:
        for month, factor in self.config.seasonal_multipliers.items():
            if not 1 <= month <= 12:
                raise ConfigurationError(
                    f"Seasonal multiplier given for invalid month {month}",
                    config_key="projection.seasonal_multipliers",
                    expected="month numbers 1-12",
                    actual=month,
                )
            if factor <= 0:
                raise ConfigurationError(
                    f"Seasonal multiplier for month {month} must be positive",
                    config_key="projection.seasonal_multipliers",
                    expected="positive multiplier",
                    actual=str(factor),
                )

    def _confidence(self, factor: Decimal) -> float:
        raw = 1.0 - abs(float(factor) - 1.0)
        return max(self.config.confidence_floor, min(self.config.confidence_ceiling, raw))

    def project(
        self,
        recent_aggregates: Sequence[MonthlyAggregate],
        horizon: int = 6,
    ) -> TrendForecast:
        """
        Project forward from the most recent monthly aggregates.

        Args:
            recent_aggregates: Monthly aggregates in any order; only the most
                recent ``history_window`` are used
            horizon: Number of forward months to list in projected_periods

        Returns:
            TrendForecast with next-period, per-category and year-end estimates
        """
        window = sorted(recent_aggregates, key=lambda a: a.period_key)[
            -self.config.history_window:
        ]

        if not window:
            logger.debug("projection_skipped", reason="empty_history")
            return TrendForecast(history_size=0, confidence=self.config.confidence_floor)

        expenses = [a.total_expense for a in window]
        incomes = [a.total_income for a in window]

        factor = trend_factor(expenses)
        income_factor = trend_factor(incomes)
        next_expense = _average(expenses) * factor
        next_income = _average(incomes) * income_factor

        categories = sorted({c for a in window for c in a.per_category_expense})
        per_category = {
            category: _average(
                [a.per_category_expense.get(category, Decimal("0")) for a in window]
            )
            * factor
            for category in categories
        }

        first_key = next_period_key(window[-1].period_key)
        first_year, first_month = parse_period_key(first_key)
        steps_to_december = 12 - first_month + 1
        periods = self._forward_periods(
            first_key, max(horizon, steps_to_december), next_expense, next_income
        )
        year_end = sum(
            (p.expense_estimate for p in periods[:steps_to_december]),
            Decimal("0"),
        )

        forecast = TrendForecast(
            history_size=len(window),
            next_period_key=first_key,
            trend_factor=factor,
            next_period_estimate=next_expense,
            next_period_income_estimate=next_income,
            income_trend_factor=income_factor,
            confidence=self._confidence(factor),
            year_end_estimate=year_end,
            per_category_forecast=per_category,
            projected_periods=periods[:horizon],
        )

        logger.debug(
            "projection_complete",
            history_size=forecast.history_size,
            trend_factor=str(factor),
            year=first_year,
        )
        return forecast

    def _forward_periods(
        self,
        first_key: str,
        count: int,
        expense_estimate: Decimal,
        income_estimate: Decimal,
    ) -> list[ProjectedPeriod]:
        periods: list[ProjectedPeriod] = []
        key = first_key
        for step in range(1, count + 1):
            _, month = parse_period_key(key)
            seasonal = self.config.seasonal_factor(month) if step > 1 else Decimal("1")
            periods.append(
                ProjectedPeriod(
                    period_key=key,
                    step=step,
                    seasonal_factor=seasonal,
                    expense_estimate=expense_estimate * seasonal,
                    income_estimate=income_estimate,
                )
            )
            key = next_period_key(key)
        return periods
