"""Recurrence expansion for recurring income and subscriptions.

Turns a (start, frequency, end) triple into concrete occurrence dates and
materializes recurring definitions into individual records. Every expansion
requires a finite end date; there is no expand-forever mode.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence, Union

import structlog

from .dates import add_period, to_local_date, years_before
from .exceptions import RecurrenceError
from .models import (
    Frequency,
    MonetaryRecord,
    RecordKind,
    RecurringPreview,
    RecurringStats,
    Subscription,
)

logger = structlog.get_logger()

RecurringDefinition = Union[MonetaryRecord, Subscription]

# Occurrences per year; monthly equivalent = amount * occurrences / 12
OCCURRENCES_PER_YEAR: dict[Frequency, int] = {
    Frequency.WEEKLY: 52,
    Frequency.BIWEEKLY: 26,
    Frequency.MONTHLY: 12,
    Frequency.QUARTERLY: 4,
    Frequency.YEARLY: 1,
}

PREVIEW_SAMPLE_SIZE = 5


def expand(
    start: date,
    frequency: Frequency,
    end_inclusive: date,
    include_start: bool = True,
) -> list[date]:
    """Expand a recurrence into its occurrence dates.

    Each occurrence is the previous one plus one frequency step, so month
    clamping carries forward (Jan 31 -> Feb 28 -> Mar 28).

    Args:
        start: Seed date of the series
        frequency: Calendar step between occurrences
        end_inclusive: No occurrence falls after this date
        include_start: Whether the seed date itself is an occurrence

    Returns:
        Strictly ascending list of dates; empty when start is after end
    """
    start = to_local_date(start)
    end_inclusive = to_local_date(end_inclusive)
    frequency = Frequency(frequency)

    if start > end_inclusive:
        return []

    occurrences: list[date] = []
    if include_start:
        occurrences.append(start)

    current = start
    while True:
        current = add_period(current, frequency)
        if current > end_inclusive:
            break
        occurrences.append(current)

    return occurrences


def _require_frequency(definition: RecurringDefinition) -> Frequency:
    """Return the definition's frequency or raise RecurrenceError."""
    if isinstance(definition, MonetaryRecord) and not definition.is_recurring:
        raise RecurrenceError(
            "Record is not marked as recurring",
            definition_id=definition.id,
        )
    if definition.frequency is None:
        raise RecurrenceError(
            "Frequency is required for recurring entries",
            definition_id=definition.id,
        )
    return definition.frequency


def expand_income_definition(
    definition: MonetaryRecord,
    end: date,
) -> list[MonetaryRecord]:
    """Materialize a recurring income (or expense) seed up to ``end``.

    The first occurrence keeps the seed's description; later occurrences are
    described as "<description> (Recurring)". Ids are derived from the seed
    id and the occurrence date so repeated expansion yields identical records.
    """
    frequency = _require_frequency(definition)
    dates = expand(definition.occurred_on, frequency, end)

    return [
        definition.model_copy(
            update={
                "id": f"{definition.id}-recurring-{occurrence.isoformat()}",
                "occurred_on": occurrence,
                "description": (
                    definition.description
                    if index == 0
                    else f"{definition.description} (Recurring)"
                ),
            }
        )
        for index, occurrence in enumerate(dates)
    ]


def expand_subscription(subscription: Subscription, end: date) -> list[MonetaryRecord]:
    """Materialize a subscription's billing history as expense records.

    Expansion stops at the earlier of ``end`` and the subscription's own
    end date.
    """
    frequency = _require_frequency(subscription)
    stop = min(end, subscription.end_date) if subscription.end_date else end
    dates = expand(subscription.start_date, frequency, stop)

    return [
        MonetaryRecord(
            id=f"sub-{subscription.id}-{occurrence.isoformat()}",
            kind=RecordKind.EXPENSE,
            amount=subscription.amount,
            category=subscription.category,
            description=f"{subscription.name} (Subscription)",
            occurred_on=occurrence,
            is_recurring=True,
            frequency=subscription.frequency,
            subscription_id=subscription.id,
        )
        for occurrence in dates
    ]


def expand_definition(definition: RecurringDefinition, end: date) -> list[MonetaryRecord]:
    """Expand either kind of recurring definition."""
    if isinstance(definition, Subscription):
        return expand_subscription(definition, end)
    return expand_income_definition(definition, end)


def seed_date(definition: RecurringDefinition) -> date:
    """Date a recurring definition starts from."""
    if isinstance(definition, Subscription):
        return definition.start_date
    return definition.occurred_on


def monthly_equivalent(amount: Decimal, frequency: Frequency) -> Decimal:
    """Convert a per-occurrence amount to its monthly equivalent."""
    return amount * OCCURRENCES_PER_YEAR[Frequency(frequency)] / 12


def recurring_stats(
    records: Sequence[MonetaryRecord],
    frequency: Frequency,
) -> RecurringStats:
    """Summarize a materialized series."""
    if not records:
        return RecurringStats(
            total_entries=0,
            total_amount=Decimal("0"),
            average_per_entry=Decimal("0"),
            monthly_equivalent=Decimal("0"),
        )

    total = sum((r.amount for r in records), Decimal("0"))
    average = total / len(records)
    ordered = sorted(r.occurred_on for r in records)
    return RecurringStats(
        total_entries=len(records),
        total_amount=total,
        average_per_entry=average,
        monthly_equivalent=monthly_equivalent(average, frequency),
        first_date=ordered[0],
        last_date=ordered[-1],
    )


def preview(definition: RecurringDefinition, end: date) -> RecurringPreview:
    """Preview how many entries a definition would expand to by ``end``."""
    records = expand_definition(definition, end)
    dates = [r.occurred_on for r in records]
    return RecurringPreview(
        total_entries=len(dates),
        first_date=dates[0] if dates else None,
        last_date=dates[-1] if dates else None,
        sample_dates=dates[:PREVIEW_SAMPLE_SIZE],
        estimated_total=definition.amount * len(dates),
    )


def validate_recurring_entry(
    definition: RecurringDefinition,
    as_of: date,
    horizon_years: int = 10,
) -> list[str]:
    """Check a definition before historical generation.

    Returns:
        Human-readable problems; empty when the definition is fine
    """
    errors: list[str] = []

    if isinstance(definition, MonetaryRecord) and not definition.is_recurring:
        return errors

    if definition.frequency is None:
        errors.append("Frequency is required for recurring entries")

    start = seed_date(definition)
    if start > as_of:
        errors.append("Start date cannot be in the future for historical generation")
    if start < years_before(as_of, horizon_years):
        errors.append(f"Start date cannot be more than {horizon_years} years in the past")

    if errors:
        logger.debug(
            "recurring_entry_invalid",
            definition_id=definition.id,
            problems=len(errors),
        )
    return errors


def next_occurrence_after(
    definition: RecurringDefinition,
    after: date,
    end: Optional[date] = None,
) -> Optional[date]:
    """First occurrence strictly after ``after`` (and not after ``end``)."""
    frequency = _require_frequency(definition)
    current = seed_date(definition)
    while current <= after:
        current = add_period(current, frequency)
    if end is not None and current > end:
        return None
    return current
