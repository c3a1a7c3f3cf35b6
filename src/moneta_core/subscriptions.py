"""Subscription billing.

Bills are generated on demand: an external scheduler calls
``bill_due_subscriptions`` with an explicit ``as_of`` date and persists the
returned expenses and updated subscriptions.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

import structlog

from .dates import add_days, days_between
from .models import (
    BillingRun,
    MonetaryRecord,
    RecordKind,
    Subscription,
    SubscriptionStats,
    UpcomingBill,
)
from .recurrence import monthly_equivalent

logger = structlog.get_logger()


def next_billing_date(subscription: Subscription) -> date:
    """Next billing date: last billed (or start) date plus one step."""
    return subscription.next_billing


def upcoming_bills(
    subscriptions: Iterable[Subscription],
    as_of: date,
    days_ahead: int = 30,
) -> list[UpcomingBill]:
    """Active subscriptions due on or before ``as_of + days_ahead``, soonest first."""
    cutoff = add_days(as_of, days_ahead)
    bills = [
        UpcomingBill(
            subscription_id=sub.id,
            name=sub.name,
            due_date=sub.next_billing,
            amount=sub.amount,
            days_until_due=days_between(as_of, sub.next_billing),
        )
        for sub in subscriptions
        if sub.is_active and sub.next_billing <= cutoff
    ]
    return sorted(bills, key=lambda b: b.due_date)


def upcoming_subscriptions(
    subscriptions: Iterable[Subscription],
    as_of: date,
    days_ahead: int = 30,
) -> list[Subscription]:
    """Active subscriptions billing before ``as_of + days_ahead``, soonest first."""
    cutoff = add_days(as_of, days_ahead)
    due = [sub for sub in subscriptions if sub.is_active and sub.next_billing < cutoff]
    return sorted(due, key=lambda s: s.next_billing)


def monthly_recurring_total(subscriptions: Iterable[Subscription]) -> Decimal:
    """Monthly cost of all active subscriptions."""
    return sum(
        (monthly_equivalent(sub.amount, sub.frequency) for sub in subscriptions if sub.is_active),
        Decimal("0"),
    )


def _bill(subscription: Subscription, due: date) -> MonetaryRecord:
    return MonetaryRecord(
        id=f"auto-{subscription.id}-{due.isoformat()}",
        kind=RecordKind.EXPENSE,
        amount=subscription.amount,
        category=subscription.category,
        description=f"{subscription.name} (Auto-generated)",
        occurred_on=due,
        is_recurring=True,
        frequency=subscription.frequency,
        subscription_id=subscription.id,
    )


def bill_due_subscriptions(
    subscriptions: Sequence[Subscription],
    existing_expenses: Iterable[MonetaryRecord],
    as_of: date,
) -> BillingRun:
    """Generate every bill that has fallen due up to ``as_of``.

    For each active, auto-generating subscription, bills are produced for
    each due date in turn until the next billing date passes ``as_of``.
    A bill already recorded for the same subscription and date is not
    generated again, but ``last_billed`` still advances past it. A due date
    beyond the subscription's end date switches the subscription off.

    Returns:
        BillingRun with the new expenses and every subscription, updated
    """
    billed = {
        (expense.subscription_id, expense.occurred_on)
        for expense in existing_expenses
        if expense.subscription_id is not None
    }
    expenses: list[MonetaryRecord] = []
    updated: list[Subscription] = []
    deactivated: list[str] = []

    for subscription in subscriptions:
        current = subscription
        if current.is_active and current.auto_generate:
            while current.next_billing <= as_of:
                due = current.next_billing
                if current.end_date is not None and due > current.end_date:
                    current = current.model_copy(update={"is_active": False})
                    deactivated.append(current.id)
                    break
                if (current.id, due) not in billed:
                    expenses.append(_bill(current, due))
                    billed.add((current.id, due))
                current = current.model_copy(update={"last_billed": due})
        updated.append(current)

    if expenses or deactivated:
        logger.info(
            "subscriptions_billed",
            generated=len(expenses),
            deactivated=len(deactivated),
            as_of=as_of.isoformat(),
        )
    return BillingRun(
        as_of=as_of,
        expenses=expenses,
        subscriptions=updated,
        deactivated=deactivated,
    )


def subscription_stats(subscriptions: Sequence[Subscription], as_of: date) -> SubscriptionStats:
    """Count active subscriptions and find the next bill within 30 days."""
    active = [sub for sub in subscriptions if sub.is_active]
    upcoming = upcoming_bills(active, as_of)

    return SubscriptionStats(
        active_subscriptions=len(active),
        auto_generating_subscriptions=sum(1 for sub in active if sub.auto_generate),
        monthly_recurring_total=monthly_recurring_total(active),
        next_upcoming=upcoming[0] if upcoming else None,
    )
