"""Tests for subscription billing."""

from datetime import date
from decimal import Decimal

import pytest

from moneta_core.models import Frequency, MonetaryRecord, Subscription
from moneta_core.subscriptions import (
    bill_due_subscriptions,
    monthly_recurring_total,
    next_billing_date,
    subscription_stats,
    upcoming_bills,
    upcoming_subscriptions,
)


@pytest.fixture
def subscriptions() -> list[Subscription]:
    """A small mix of active and inactive subscriptions."""
    return [
        Subscription(
            id="music",
            name="Music",
            amount=Decimal("10"),
            frequency=Frequency.MONTHLY,
            start_date=date(2025, 1, 5),
        ),
        Subscription(
            id="cloud",
            name="Cloud",
            amount=Decimal("120"),
            frequency=Frequency.YEARLY,
            start_date=date(2024, 6, 1),
        ),
        Subscription(
            id="paper",
            name="Paper",
            amount=Decimal("3"),
            frequency=Frequency.WEEKLY,
            start_date=date(2025, 1, 1),
            is_active=False,
        ),
    ]


class TestUpcoming:
    """Test suite for upcoming subscription queries."""

    def test_next_billing_date(self, subscriptions):
        assert next_billing_date(subscriptions[0]) == date(2025, 2, 5)

    def test_upcoming_subscriptions_sorted_and_active_only(self, subscriptions):
        due = upcoming_subscriptions(subscriptions, as_of=date(2025, 1, 20), days_ahead=30)
        assert [s.id for s in due] == ["music"]

    def test_upcoming_includes_later_bills_with_wider_window(self, subscriptions):
        due = upcoming_subscriptions(subscriptions, as_of=date(2025, 1, 20), days_ahead=200)
        assert [s.id for s in due] == ["music", "cloud"]

    def test_upcoming_bills_days_until_due(self, subscriptions):
        bills = upcoming_bills(subscriptions, as_of=date(2025, 1, 20))
        assert len(bills) == 1
        assert bills[0].due_date == date(2025, 2, 5)
        assert bills[0].days_until_due == 16


class TestMonthlyRecurringTotal:
    """Test suite for monthly_recurring_total."""

    def test_active_only(self, subscriptions):
        # 10 monthly + 120 yearly / 12; the weekly one is inactive
        assert monthly_recurring_total(subscriptions) == Decimal("20")

    def test_empty(self):
        assert monthly_recurring_total([]) == Decimal("0")


class TestBillDueSubscriptions:
    """Test suite for bill_due_subscriptions."""

    def test_catches_up_every_due_bill(self, subscriptions):
        run = bill_due_subscriptions(subscriptions, [], as_of=date(2025, 4, 10))

        music_bills = [e for e in run.expenses if e.subscription_id == "music"]
        assert [e.occurred_on for e in music_bills] == [
            date(2025, 2, 5),
            date(2025, 3, 5),
            date(2025, 4, 5),
        ]
        assert music_bills[0].id == "auto-music-2025-02-05"
        assert music_bills[0].description == "Music (Auto-generated)"

        updated = {s.id: s for s in run.subscriptions}
        assert updated["music"].last_billed == date(2025, 4, 5)
        assert updated["music"].next_billing == date(2025, 5, 5)

    def test_nothing_due(self, subscriptions):
        run = bill_due_subscriptions(subscriptions, [], as_of=date(2025, 2, 1))
        assert run.generated == 0
        assert run.subscriptions == subscriptions

    def test_skips_already_recorded_bill(self, subscriptions):
        existing = MonetaryRecord(
            id="manual",
            amount=Decimal("10"),
            category="Bills",
            description="Music",
            occurred_on=date(2025, 2, 5),
            subscription_id="music",
        )
        run = bill_due_subscriptions(subscriptions[:1], [existing], as_of=date(2025, 3, 10))

        assert [e.occurred_on for e in run.expenses] == [date(2025, 3, 5)]
        assert run.subscriptions[0].last_billed == date(2025, 3, 5)

    def test_rerun_generates_nothing_new(self, subscriptions):
        first = bill_due_subscriptions(subscriptions, [], as_of=date(2025, 4, 10))
        second = bill_due_subscriptions(first.subscriptions, first.expenses, as_of=date(2025, 4, 10))
        assert second.generated == 0

    def test_ended_subscription_deactivated(self):
        sub = Subscription(
            id="trial",
            name="Trial",
            amount=Decimal("5"),
            frequency=Frequency.MONTHLY,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 2, 15),
        )
        run = bill_due_subscriptions([sub], [], as_of=date(2025, 5, 1))

        assert [e.occurred_on for e in run.expenses] == [date(2025, 2, 1)]
        assert run.deactivated == ["trial"]
        assert run.subscriptions[0].is_active is False

    def test_manual_subscription_not_billed(self, subscriptions):
        manual = subscriptions[0].model_copy(update={"auto_generate": False})
        run = bill_due_subscriptions([manual], [], as_of=date(2025, 6, 1))
        assert run.generated == 0


class TestSubscriptionStats:
    """Test suite for subscription_stats."""

    def test_stats(self, subscriptions):
        stats = subscription_stats(subscriptions, as_of=date(2025, 1, 20))

        assert stats.active_subscriptions == 2
        assert stats.auto_generating_subscriptions == 2
        assert stats.monthly_recurring_total == Decimal("20")
        assert stats.next_upcoming is not None
        assert stats.next_upcoming.name == "Music"

    def test_no_upcoming(self):
        stats = subscription_stats([], as_of=date(2025, 1, 20))
        assert stats.next_upcoming is None
        assert stats.active_subscriptions == 0
