"""Bulk recurring materialization models."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from .financial import MonetaryRecord, RecordKind, Subscription


class MaterializationOptions(BaseModel):
    """Options for a bulk materialization run."""

    end_date: Optional[date] = Field(
        default=None,
        description="Last date to expand to (inclusive); defaults to as_of",
    )
    dry_run: bool = Field(
        default=False,
        description="Compute everything but write nothing",
    )
    skip_existing: bool = Field(
        default=True,
        description="Drop occurrences matching an existing (date, description, amount)",
    )


class GeneratedCounts(BaseModel):
    """Number of generated records per kind."""

    income: int = Field(default=0, ge=0)
    expense: int = Field(default=0, ge=0)

    @computed_field
    @property
    def total(self) -> int:
        """Income plus expense entries."""
        return self.income + self.expense


class MaterializationResult(BaseModel):
    """Outcome of a bulk materialization run.

    ``records`` holds the new occurrences in both dry and real runs; only a
    real run hands them to the repository.
    """

    generated_counts: GeneratedCounts = Field(default_factory=GeneratedCounts)
    errors: list[str] = Field(default_factory=list)
    records: list[MonetaryRecord] = Field(default_factory=list)
    dry_run: bool = False
    committed: bool = False

    @computed_field
    @property
    def total_added(self) -> int:
        """Total records generated across kinds."""
        return self.generated_counts.total

    @computed_field
    @property
    def success(self) -> bool:
        """True when no definition failed."""
        return not self.errors


class RecurringAnalysis(BaseModel):
    """Preview of what a bulk run would generate."""

    recurring_incomes: list[MonetaryRecord] = Field(default_factory=list)
    subscriptions: list[Subscription] = Field(default_factory=list)
    potential_entries: GeneratedCounts = Field(default_factory=GeneratedCounts)
    errors: list[str] = Field(default_factory=list)


class BulkValidation(BaseModel):
    """Non-fatal warnings about a prospective bulk run."""

    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def is_valid(self) -> bool:
        """True when nothing was flagged. Callers may proceed either way."""
        return not self.warnings


class DeduplicationResult(BaseModel):
    """Records kept after removing exact duplicates."""

    records: list[MonetaryRecord] = Field(default_factory=list)
    removed: dict[RecordKind, int] = Field(
        default_factory=lambda: {RecordKind.INCOME: 0, RecordKind.EXPENSE: 0}
    )

    @computed_field
    @property
    def total_removed(self) -> int:
        """Duplicates removed across kinds."""
        return sum(self.removed.values())


class RecurringPreview(BaseModel):
    """Preview of expanding a single recurring definition."""

    total_entries: int = Field(ge=0)
    first_date: Optional[date] = None
    last_date: Optional[date] = None
    sample_dates: list[date] = Field(default_factory=list)
    estimated_total: Decimal = Decimal("0")


class RecurringStats(BaseModel):
    """Totals and monthly equivalent of a set of occurrences."""

    total_entries: int = Field(ge=0)
    total_amount: Decimal
    average_per_entry: Decimal
    monthly_equivalent: Decimal
    first_date: Optional[date] = None
    last_date: Optional[date] = None


class BillingRun(BaseModel):
    """Outcome of billing due subscriptions up to a given date."""

    as_of: date
    expenses: list[MonetaryRecord] = Field(default_factory=list)
    subscriptions: list[Subscription] = Field(
        default_factory=list,
        description="Every input subscription, updated where billed or ended",
    )
    deactivated: list[str] = Field(
        default_factory=list,
        description="Ids of subscriptions switched off because they ended",
    )

    @computed_field
    @property
    def generated(self) -> int:
        """Number of expenses generated."""
        return len(self.expenses)


class UpcomingBill(BaseModel):
    """A subscription charge falling due within a look-ahead window."""

    subscription_id: str
    name: str
    due_date: date
    amount: Decimal
    days_until_due: int


class SubscriptionStats(BaseModel):
    """Headline figures for a set of subscriptions."""

    active_subscriptions: int = Field(ge=0)
    auto_generating_subscriptions: int = Field(ge=0)
    monthly_recurring_total: Decimal
    next_upcoming: Optional[UpcomingBill] = None
