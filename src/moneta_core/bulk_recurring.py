"""Bulk materialization of recurring income and subscription history.

This module expands every eligible recurring definition into concrete
records in one pass:
- Recurring income seeds become dated income records
- Subscriptions become dated expense records
- Occurrences already on file (same kind, date, description and amount)
  are skipped so repeated runs are idempotent

Dry runs perform the full planning pass and report the exact records a real
run would write, without touching the repository.
"""

from collections import defaultdict
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import structlog

from .config import RecurrenceConfig
from .dates import years_before
from .exceptions import MonetaError, RecurrenceError
from .models import (
    BulkValidation,
    DeduplicationResult,
    GeneratedCounts,
    MaterializationOptions,
    MaterializationResult,
    MonetaryRecord,
    RecordKind,
    RecurringAnalysis,
    Subscription,
)
from .recurrence import RecurringDefinition, expand_definition, seed_date
from .repository import ChangeEvent, ChangeType, Listener, RecordRepository, notify

logger = structlog.get_logger()

RawDefinition = Union[MonetaryRecord, Subscription, Mapping[str, Any]]


def coerce_definition(raw: RawDefinition) -> RecurringDefinition:
    """Validate a raw definition into a record or subscription.

    Mappings carrying a ``name`` or ``start_date`` are read as subscriptions,
    anything else as a monetary record.

    Raises:
        pydantic.ValidationError: If the mapping does not describe a valid model
    """
    if isinstance(raw, (MonetaryRecord, Subscription)):
        return raw
    if "name" in raw or "start_date" in raw:
        return Subscription.model_validate(raw)
    return MonetaryRecord.model_validate(raw)


def _label(raw: RawDefinition) -> str:
    if isinstance(raw, Subscription):
        return raw.name
    if isinstance(raw, MonetaryRecord):
        return raw.description or raw.id
    return str(raw.get("name") or raw.get("description") or raw.get("id") or "unknown")


def _is_eligible(definition: RecurringDefinition, as_of: date) -> bool:
    """Only recurring definitions seeded strictly before ``as_of`` expand."""
    if isinstance(definition, MonetaryRecord):
        if not definition.is_recurring or definition.frequency is None:
            return False
    return seed_date(definition) < as_of


def _kind_of(definition: RecurringDefinition) -> RecordKind:
    if isinstance(definition, Subscription):
        return RecordKind.EXPENSE
    return definition.kind


class _Plan:
    """Working state of a single planning pass."""

    def __init__(self):
        self.records: list[MonetaryRecord] = []
        self.counts: dict[RecordKind, int] = defaultdict(int)
        self.errors: list[str] = []
        self.incomes: list[MonetaryRecord] = []
        self.subscriptions: list[Subscription] = []

    @property
    def generated_counts(self) -> GeneratedCounts:
        return GeneratedCounts(
            income=self.counts[RecordKind.INCOME],
            expense=self.counts[RecordKind.EXPENSE],
        )


class BulkRecurrenceOrchestrator:
    """Expand recurring definitions in bulk with deduplication.

    The dedup set of a run lives only for that call; the orchestrator holds
    no state between calls apart from its collaborators.

    Example:
        ```python
        orchestrator = BulkRecurrenceOrchestrator(repository=repo)
        result = orchestrator.materialize_all(
            definitions,
            as_of=date(2025, 3, 15),
            options=MaterializationOptions(dry_run=True),
        )
        print(result.total_added, result.errors)
        ```
    """

    def __init__(
        self,
        config: Optional[RecurrenceConfig] = None,
        repository: Optional[RecordRepository] = None,
        listeners: Sequence[Listener] = (),
    ):
        self.config = config or RecurrenceConfig()
        self.repository = repository
        self.listeners = list(listeners)

    def _existing(self, materialized: Optional[Iterable[MonetaryRecord]]) -> list[MonetaryRecord]:
        if materialized is not None:
            return list(materialized)
        if self.repository is not None:
            return self.repository.list_records(RecordKind.INCOME) + self.repository.list_records(
                RecordKind.EXPENSE
            )
        return []

    def _default_options(self) -> MaterializationOptions:
        return MaterializationOptions(skip_existing=self.config.skip_existing)

    def _plan(
        self,
        definitions: Iterable[RawDefinition],
        existing: list[MonetaryRecord],
        as_of: date,
        options: MaterializationOptions,
    ) -> _Plan:
        plan = _Plan()
        end = options.end_date or as_of
        seen = {record.dedup_key for record in existing}

        for raw in definitions:
            try:
                definition = coerce_definition(raw)
                if not _is_eligible(definition, as_of):
                    continue
                occurrences = expand_definition(definition, end)
            except (ValueError, MonetaError) as exc:
                message = f"Error generating entries for {_label(raw)}: {exc}"
                plan.errors.append(message)
                logger.warning("definition_failed", definition=_label(raw), error=str(exc))
                continue

            if isinstance(definition, Subscription):
                plan.subscriptions.append(definition)
            else:
                plan.incomes.append(definition)

            kind = _kind_of(definition)
            for occurrence in occurrences:
                if options.skip_existing:
                    if occurrence.dedup_key in seen:
                        continue
                    seen.add(occurrence.dedup_key)
                plan.records.append(occurrence)
                plan.counts[kind] += 1

        return plan

    def materialize_all(
        self,
        definitions: Iterable[RawDefinition],
        as_of: date,
        materialized: Optional[Iterable[MonetaryRecord]] = None,
        options: Optional[MaterializationOptions] = None,
    ) -> MaterializationResult:
        """Expand every eligible definition and commit the new records.

        Args:
            definitions: Recurring income records, subscriptions or raw mappings
            as_of: Reference date; seeds on or after it are ignored
            materialized: Records already on file; loaded from the repository
                when omitted
            options: End date, dry-run and skip-existing switches

        Returns:
            MaterializationResult with per-kind counts, errors and the records
        """
        options = options or self._default_options()

        plan = self._plan(definitions, self._existing(materialized), as_of, options)

        committed = False
        if not options.dry_run and self.repository is not None and plan.records:
            self.repository.add_records(plan.records)
            committed = True
            notify(
                self.listeners,
                ChangeEvent(
                    change_type=ChangeType.RECORDS_ADDED,
                    kinds=sorted({r.kind for r in plan.records}, key=lambda k: k.value),
                    count=len(plan.records),
                ),
            )

        result = MaterializationResult(
            generated_counts=plan.generated_counts,
            errors=plan.errors,
            records=plan.records,
            dry_run=options.dry_run,
            committed=committed,
        )

        logger.info(
            "materialization_complete",
            total_added=result.total_added,
            income=result.generated_counts.income,
            expense=result.generated_counts.expense,
            errors=len(result.errors),
            dry_run=options.dry_run,
            committed=committed,
        )
        return result

    def analyze(
        self,
        definitions: Iterable[RawDefinition],
        as_of: date,
        materialized: Optional[Iterable[MonetaryRecord]] = None,
        options: Optional[MaterializationOptions] = None,
    ) -> RecurringAnalysis:
        """Report what a bulk run would generate without committing anything."""
        options = options or self._default_options()
        plan = self._plan(definitions, self._existing(materialized), as_of, options)

        return RecurringAnalysis(
            recurring_incomes=plan.incomes,
            subscriptions=plan.subscriptions,
            potential_entries=plan.generated_counts,
            errors=plan.errors,
        )

    def validate(
        self,
        definitions: Iterable[RawDefinition],
        as_of: date,
        materialized: Optional[Iterable[MonetaryRecord]] = None,
    ) -> BulkValidation:
        """Flag bulk runs that are unusually large, old or include inactive bills.

        Warnings are advisory; a caller may proceed regardless.
        """
        analysis = self.analyze(definitions, as_of, materialized)
        warnings: list[str] = []
        recommendations: list[str] = []

        total = analysis.potential_entries.total
        if total > self.config.max_projected_entries:
            warnings.append(f"This will generate {total} entries, which may impact performance.")
            recommendations.append(
                "Consider filtering by date range or reviewing your recurring entries."
            )

        horizon = self.config.seed_horizon_years
        threshold = years_before(as_of, horizon)
        old_seeds = [
            d
            for d in [*analysis.recurring_incomes, *analysis.subscriptions]
            if seed_date(d) < threshold
        ]
        if old_seeds:
            warnings.append(
                f"{len(old_seeds)} entries have start dates more than {horizon} years ago."
            )
            recommendations.append(
                "Consider updating start dates to more recent periods "
                "if historical data is not needed."
            )

        inactive = [s for s in analysis.subscriptions if not s.is_active]
        if inactive:
            warnings.append(f"{len(inactive)} inactive subscriptions will generate expenses.")
            recommendations.append(
                "Review inactive subscriptions before generating historical entries."
            )

        return BulkValidation(warnings=warnings, recommendations=recommendations)

    def deduplicate(
        self,
        records: Optional[Iterable[MonetaryRecord]] = None,
    ) -> DeduplicationResult:
        """Drop exact duplicates, keeping the first record of each key.

        Only a pass over the stored records is written back: explicit
        ``records`` are cleaned and returned without touching the repository.

        Args:
            records: Records to clean; loaded from the repository when omitted

        Returns:
            DeduplicationResult with the kept records and per-kind removal counts
        """
        from_repository = records is None
        if from_repository:
            if self.repository is None:
                raise RecurrenceError("No records given and no repository configured")
            records = self._existing(None)

        kept: list[MonetaryRecord] = []
        removed = {RecordKind.INCOME: 0, RecordKind.EXPENSE: 0}
        seen = set()

        for record in records:
            if record.dedup_key in seen:
                removed[record.kind] += 1
                continue
            seen.add(record.dedup_key)
            kept.append(record)

        if from_repository:
            for kind, count in removed.items():
                if count == 0:
                    continue
                self.repository.replace_records(kind, [r for r in kept if r.kind == kind])
                notify(
                    self.listeners,
                    ChangeEvent(
                        change_type=ChangeType.RECORDS_REPLACED,
                        kinds=[kind],
                        count=count,
                    ),
                )

        result = DeduplicationResult(records=kept, removed=removed)
        logger.info("deduplication_complete", total_removed=result.total_removed)
        return result


__all__ = [
    "BulkRecurrenceOrchestrator",
    "coerce_definition",
]
