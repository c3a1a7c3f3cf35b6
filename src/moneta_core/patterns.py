"""Recurring-spend and anomaly detection.

Two independent passes run per expense category:

1. Recurring: expenses are snapped to an amount band; a band with enough
   members whose day intervals are consistent is reported as recurring.
2. Anomaly: expenses further than the z-score threshold from the category
   mean are reported individually.

Results are derived only and recomputed on every call.
"""

import statistics
from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

import structlog
from dateutil.relativedelta import relativedelta

from .config import PatternConfig
from .dates import days_between
from .models import MonetaryRecord, PatternFrequency, PatternKind, SpendingPattern

logger = structlog.get_logger()

PATTERN_STEPS: dict[PatternFrequency, relativedelta] = {
    PatternFrequency.DAILY: relativedelta(days=1),
    PatternFrequency.WEEKLY: relativedelta(weeks=1),
    PatternFrequency.MONTHLY: relativedelta(months=1),
    PatternFrequency.YEARLY: relativedelta(years=1),
}


def classify_interval(mean_interval: float) -> PatternFrequency:
    """Map a mean day interval to a cadence."""
    if mean_interval <= 2:
        return PatternFrequency.DAILY
    if mean_interval <= 10:
        return PatternFrequency.WEEKLY
    if mean_interval <= 40:
        return PatternFrequency.MONTHLY
    return PatternFrequency.YEARLY


def amount_bucket(amount: Decimal, band: Decimal) -> Decimal:
    """Round an amount half-up to the nearest multiple of ``band``."""
    return (amount / band).quantize(Decimal("1"), rounding=ROUND_HALF_UP) * band


class PatternDetector:
    """
    Detect recurring spending and outliers in a list of expenses.

    Example:
        ```python
        detector = PatternDetector()
        for pattern in detector.detect(expenses):
            print(pattern.kind, pattern.category, pattern.confidence)
        ```
    """

    def __init__(self, config: Optional[PatternConfig] = None):
        self.config = config or PatternConfig()

    def detect(self, expenses: Iterable[MonetaryRecord]) -> list[SpendingPattern]:
        """
        Run both passes over every category.

        Args:
            expenses: Expense records in any order

        Returns:
            Patterns sorted by confidence (highest first), then kind,
            category and id
        """
        by_category: dict[str, list[MonetaryRecord]] = defaultdict(list)
        for expense in expenses:
            by_category[expense.category].append(expense)

        patterns: list[SpendingPattern] = []
        for category in sorted(by_category):
            ordered = sorted(by_category[category], key=lambda e: (e.occurred_on, e.id))
            patterns.extend(self._recurring(category, ordered))
            patterns.extend(self._anomalies(category, ordered))

        patterns.sort(key=lambda p: (-p.confidence, p.kind.value, p.category, p.id))
        logger.debug("patterns_detected", count=len(patterns))
        return patterns

    def _recurring(self, category: str, expenses: list[MonetaryRecord]) -> list[SpendingPattern]:
        buckets: dict[Decimal, list[MonetaryRecord]] = defaultdict(list)
        for expense in expenses:
            buckets[amount_bucket(expense.amount, self.config.amount_band)].append(expense)

        patterns = []
        for bucket, group in buckets.items():
            if len(group) < self.config.min_recurring_occurrences:
                continue

            intervals = [
                days_between(earlier.occurred_on, later.occurred_on)
                for earlier, later in zip(group, group[1:])
            ]
            mean_interval = statistics.fmean(intervals)
            variance = statistics.pvariance(intervals)

            # Strict comparison also rejects same-day clusters (mean and variance 0)
            if not variance < self.config.interval_variance_ratio * mean_interval:
                continue

            frequency = classify_interval(mean_interval)
            average = sum((e.amount for e in group), Decimal("0")) / len(group)
            last = group[-1].occurred_on

            patterns.append(
                SpendingPattern(
                    id=f"recurring-{category}-{bucket}",
                    kind=PatternKind.RECURRING,
                    category=category,
                    description=f"Regular {category.lower()} expense of ~{average:,.2f}",
                    confidence=min(0.9, 0.3 + 0.1 * len(group)),
                    frequency=frequency,
                    average_amount=average,
                    occurrence_count=len(group),
                    last_occurrence=last,
                    next_predicted=self._next_predicted(last, frequency),
                )
            )
        return patterns

    def _anomalies(self, category: str, expenses: list[MonetaryRecord]) -> list[SpendingPattern]:
        if len(expenses) < self.config.min_anomaly_samples:
            return []

        amounts = [float(e.amount) for e in expenses]
        mean = statistics.fmean(amounts)
        std = statistics.pstdev(amounts)
        if std == 0:
            logger.debug("anomaly_check_skipped", category=category, reason="zero_stddev")
            return []

        patterns = []
        for expense, amount in zip(expenses, amounts):
            z_score = abs(amount - mean) / std
            if z_score <= self.config.anomaly_z_threshold:
                continue
            direction = "above" if amount > mean else "below"
            patterns.append(
                SpendingPattern(
                    id=f"anomaly-{expense.id}",
                    kind=PatternKind.ANOMALY,
                    category=category,
                    description=(
                        f"Unusual {category.lower()} expense: {expense.amount:,.2f} "
                        f"({z_score:.1f} standard deviations {direction} normal)"
                    ),
                    confidence=min(0.95, z_score / 3),
                    frequency=PatternFrequency.MONTHLY,
                    average_amount=expense.amount,
                    occurrence_count=1,
                    last_occurrence=expense.occurred_on,
                    z_score=z_score,
                )
            )
        return patterns

    @staticmethod
    def _next_predicted(last: date, frequency: PatternFrequency) -> date:
        return last + PATTERN_STEPS[frequency]
