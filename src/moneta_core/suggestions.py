"""Actionable spending suggestions from aggregates and patterns."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

import structlog

from .models import (
    Impact,
    MonthlyAggregate,
    PatternKind,
    SpendingPattern,
    SpendingSuggestion,
    SuggestionType,
)

logger = structlog.get_logger()

HIGH_SPENDING_RATIO = Decimal("1.2")
CATEGORY_SPIKE_RATIO = Decimal("1.3")
RECURRING_REVIEW_MINIMUM = Decimal("50")
# Share of a recurring expense assumed avoidable when reviewed
RECURRING_SAVINGS_SHARE = Decimal("0.3")


def _round(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _category_impact(amount: Decimal) -> Impact:
    if amount > 200:
        return Impact.HIGH
    if amount > 100:
        return Impact.MEDIUM
    return Impact.LOW


def _spending_alerts(monthly: Sequence[MonthlyAggregate]) -> list[SpendingSuggestion]:
    """Compare the latest month with the average of the two before it."""
    if len(monthly) < 2:
        return []

    current = monthly[-1]
    previous = monthly[-3:-1]
    suggestions = []

    average = sum((m.total_expense for m in previous), Decimal("0")) / len(previous)
    if average > 0 and current.total_expense > average * HIGH_SPENDING_RATIO:
        increase = _round((current.total_expense - average) / average * 100)
        suggestions.append(
            SpendingSuggestion(
                id="high-spending-alert",
                type=SuggestionType.CATEGORY_WARNING,
                title="Higher than usual spending",
                description=(
                    f"You've spent {current.total_expense:,.2f} this month, "
                    f"{increase}% more than your recent average."
                ),
                impact=Impact.HIGH,
                potential_savings=current.total_expense - average,
                action_required=(
                    "Review your expenses and consider reducing non-essential spending"
                ),
                priority=9,
            )
        )

    for category, amount in current.per_category_expense.items():
        category_average = sum(
            (m.per_category_expense.get(category, Decimal("0")) for m in previous),
            Decimal("0"),
        ) / len(previous)
        # A category with no history has nothing to compare against
        if category_average == 0 or amount <= category_average * CATEGORY_SPIKE_RATIO:
            continue

        excess = amount - category_average
        suggestions.append(
            SpendingSuggestion(
                id=f"category-optimization-{category}",
                type=SuggestionType.BUDGET_OPTIMIZATION,
                title=f"Reduce {category} spending",
                description=(
                    f"Your {category.lower()} spending is "
                    f"{_round(excess / category_average * 100)}% higher than usual."
                ),
                impact=_category_impact(amount),
                potential_savings=excess,
                action_required=(
                    f"Look for alternatives or reduce frequency of {category.lower()} expenses"
                ),
                category=category,
                priority=min(10, _round(excess / 50)),
            )
        )
    return suggestions


def _recurring_reviews(patterns: Sequence[SpendingPattern]) -> list[SpendingSuggestion]:
    return [
        SpendingSuggestion(
            id=f"recurring-review-{pattern.id}",
            type=SuggestionType.HABIT_CHANGE,
            title=f"Review recurring {pattern.category} expense",
            description=(
                f"You spend ~{pattern.average_amount:,.2f} {pattern.frequency.value} on "
                f"{pattern.category.lower()}. Consider if this is still necessary."
            ),
            impact=Impact.HIGH if pattern.average_amount > 200 else Impact.MEDIUM,
            potential_savings=pattern.average_amount * RECURRING_SAVINGS_SHARE,
            action_required="Evaluate if this recurring expense can be reduced or eliminated",
            category=pattern.category,
            priority=min(8, _round(pattern.average_amount / 50)),
        )
        for pattern in patterns
        if pattern.kind == PatternKind.RECURRING
        and pattern.average_amount > RECURRING_REVIEW_MINIMUM
    ]


def generate_suggestions(
    monthly: Sequence[MonthlyAggregate],
    patterns: Sequence[SpendingPattern],
    limit: int = 8,
) -> list[SpendingSuggestion]:
    """
    Build spending suggestions, highest priority first.

    Args:
        monthly: Monthly aggregates in chronological order; the last one is
            treated as the current month
        patterns: Output of PatternDetector.detect
        limit: Maximum number of suggestions returned

    Returns:
        Up to ``limit`` suggestions sorted by priority (stable for ties)
    """
    suggestions = _spending_alerts(monthly) + _recurring_reviews(patterns)
    suggestions.sort(key=lambda s: s.priority, reverse=True)
    logger.debug("suggestions_generated", count=len(suggestions), limit=limit)
    return suggestions[:limit]
