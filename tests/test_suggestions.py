"""Tests for spending suggestions."""

from datetime import date
from decimal import Decimal

from moneta_core.models import (
    Impact,
    MonthlyAggregate,
    PatternFrequency,
    PatternKind,
    SpendingPattern,
    SuggestionType,
)
from moneta_core.suggestions import generate_suggestions


def _month(month: int, total: str, categories: dict) -> MonthlyAggregate:
    return MonthlyAggregate(
        period_key=f"2025-{month:02d}",
        year=2025,
        month=month,
        label=f"Month {month}",
        total_expense=Decimal(total),
        per_category_expense={k: Decimal(v) for k, v in categories.items()},
    )


def _pattern(pattern_id: str, amount: str, kind: PatternKind = PatternKind.RECURRING) -> SpendingPattern:
    return SpendingPattern(
        id=pattern_id,
        kind=kind,
        category="Subscriptions",
        description="Recurring Subscriptions expense",
        confidence=0.8,
        frequency=PatternFrequency.MONTHLY,
        average_amount=Decimal(amount),
        occurrence_count=4 if kind == PatternKind.RECURRING else 1,
        last_occurrence=date(2025, 3, 1),
    )


class TestSpendingAlerts:
    """Test suite for month-over-month spending alerts."""

    def test_high_spending_alert(self):
        monthly = [
            _month(1, "100", {"Food": "50"}),
            _month(2, "100", {"Food": "50"}),
            _month(3, "200", {"Food": "150"}),
        ]
        suggestions = generate_suggestions(monthly, [])
        alert = suggestions[0]

        assert alert.id == "high-spending-alert"
        assert alert.type == SuggestionType.CATEGORY_WARNING
        assert alert.impact == Impact.HIGH
        assert alert.priority == 9
        assert alert.potential_savings == Decimal("100")
        assert "100% more" in alert.description

    def test_category_spike(self):
        monthly = [
            _month(1, "100", {"Food": "50"}),
            _month(2, "100", {"Food": "50"}),
            _month(3, "200", {"Food": "150"}),
        ]
        spike = next(s for s in generate_suggestions(monthly, []) if s.category == "Food")

        assert spike.id == "category-optimization-Food"
        assert spike.type == SuggestionType.BUDGET_OPTIMIZATION
        assert spike.impact == Impact.MEDIUM
        assert spike.potential_savings == Decimal("100")
        assert spike.priority == 2
        assert "200% higher" in spike.description

    def test_no_alert_within_threshold(self):
        monthly = [
            _month(1, "100", {"Food": "50"}),
            _month(2, "100", {"Food": "50"}),
            _month(3, "115", {"Food": "60"}),
        ]
        assert generate_suggestions(monthly, []) == []

    def test_new_category_is_not_a_spike(self):
        """Categories with no spending in the comparison months are skipped."""
        monthly = [
            _month(1, "100", {"Food": "100"}),
            _month(2, "100", {"Food": "100"}),
            _month(3, "110", {"Food": "90", "Travel": "20"}),
        ]
        assert generate_suggestions(monthly, []) == []

    def test_single_month_has_no_alerts(self):
        assert generate_suggestions([_month(1, "500", {"Food": "500"})], []) == []

    def test_compares_against_two_preceding_months(self):
        monthly = [
            _month(1, "1000", {}),
            _month(2, "100", {}),
            _month(3, "100", {}),
            _month(4, "130", {}),
        ]
        assert [s.id for s in generate_suggestions(monthly, [])] == ["high-spending-alert"]


class TestRecurringReviews:
    """Test suite for recurring-expense review suggestions."""

    def test_review_above_minimum(self):
        suggestions = generate_suggestions([], [_pattern("recurring-Subscriptions-80", "80")])

        assert len(suggestions) == 1
        review = suggestions[0]
        assert review.id == "recurring-review-recurring-Subscriptions-80"
        assert review.type == SuggestionType.HABIT_CHANGE
        assert review.impact == Impact.MEDIUM
        assert review.potential_savings == Decimal("24.0")
        assert review.priority == 2
        assert "monthly" in review.description

    def test_small_recurring_ignored(self):
        assert generate_suggestions([], [_pattern("recurring-Subscriptions-40", "40")]) == []

    def test_anomalies_ignored(self):
        anomaly = _pattern("anomaly-e1", "900", kind=PatternKind.ANOMALY)
        assert generate_suggestions([], [anomaly]) == []

    def test_large_recurring_is_high_impact(self):
        review = generate_suggestions([], [_pattern("p", "1200")])[0]
        assert review.impact == Impact.HIGH
        assert review.priority == 8


class TestOrderingAndLimit:
    """Suggestions are ordered by priority and truncated to the limit."""

    def test_sorted_by_priority(self):
        monthly = [
            _month(1, "100", {"Food": "50"}),
            _month(2, "100", {"Food": "50"}),
            _month(3, "200", {"Food": "150"}),
        ]
        patterns = [_pattern("p", "300")]
        priorities = [s.priority for s in generate_suggestions(monthly, patterns)]
        assert priorities == sorted(priorities, reverse=True)
        assert len(priorities) == 3

    def test_limit(self):
        patterns = [_pattern(f"p{i}", "100") for i in range(12)]
        assert len(generate_suggestions([], patterns)) == 8
        assert len(generate_suggestions([], patterns, limit=3)) == 3
