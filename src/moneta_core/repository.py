"""Storage and change-notification interfaces for the engine.

The engine never owns storage. Callers hand it an object satisfying one of
the protocols below; any class with matching method signatures is
compatible, no explicit inheritance required.

Example Usage:
    ```python
    from moneta_core.repository import InMemoryRecordRepository

    repo = InMemoryRecordRepository(existing_records)
    orchestrator = BulkRecurrenceOrchestrator(repository=repo)
    ```
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from .models import MonetaryRecord, NetWorthSnapshot, RecordKind


# =============================================================================
# PROTOCOLS
# =============================================================================

@runtime_checkable
class RecordRepository(Protocol):
    """Contract for persisting expense and income records."""

    def list_records(self, kind: RecordKind) -> list[MonetaryRecord]:
        """Return every stored record of the given kind."""
        ...

    def add_records(self, records: list[MonetaryRecord]) -> None:
        """Append new records.

        Implementations should treat the call as a single commit: either all
        records are stored or none are.
        """
        ...

    def replace_records(self, kind: RecordKind, records: list[MonetaryRecord]) -> None:
        """Replace the full set of records of one kind."""
        ...


@runtime_checkable
class SnapshotRepository(Protocol):
    """Contract for persisting net worth history."""

    def save(self, snapshot: NetWorthSnapshot) -> None:
        """Store a snapshot, replacing any existing one for the same date."""
        ...

    def history(self) -> list[NetWorthSnapshot]:
        """All snapshots in ascending date order."""
        ...

    def latest_before(self, on: date) -> Optional[NetWorthSnapshot]:
        """Most recent snapshot strictly before ``on``."""
        ...


# =============================================================================
# CHANGE NOTIFICATION
# =============================================================================

class ChangeType(str, Enum):
    """What happened to stored records."""

    RECORDS_ADDED = "records_added"
    RECORDS_REPLACED = "records_replaced"
    SNAPSHOT_SAVED = "snapshot_saved"


class ChangeEvent(BaseModel):
    """Notification delivered to listeners after a successful commit."""

    change_type: ChangeType
    kinds: list[RecordKind] = Field(default_factory=list)
    count: int = Field(default=0, ge=0, description="Number of records affected")
    occurred_at: datetime = Field(default_factory=datetime.now)


Listener = Callable[[ChangeEvent], None]
"""Caller-owned callback invoked once per committed change."""


def notify(listeners: Iterable[Listener], event: ChangeEvent) -> None:
    """Deliver an event to every listener in order."""
    for listener in listeners:
        listener(event)


# =============================================================================
# IN-MEMORY IMPLEMENTATIONS
# =============================================================================

class InMemoryRecordRepository:
    """RecordRepository backed by per-kind lists."""

    def __init__(self, records: Iterable[MonetaryRecord] = ()):
        self._records: dict[RecordKind, list[MonetaryRecord]] = {
            RecordKind.EXPENSE: [],
            RecordKind.INCOME: [],
        }
        for record in records:
            self._records[record.kind].append(record)

    def list_records(self, kind: RecordKind) -> list[MonetaryRecord]:
        return list(self._records[kind])

    def add_records(self, records: list[MonetaryRecord]) -> None:
        for record in records:
            self._records[record.kind].append(record)

    def replace_records(self, kind: RecordKind, records: list[MonetaryRecord]) -> None:
        self._records[kind] = [r for r in records if r.kind == kind]

    def all_records(self) -> list[MonetaryRecord]:
        """Expenses followed by incomes."""
        return self._records[RecordKind.EXPENSE] + self._records[RecordKind.INCOME]


class InMemorySnapshotRepository:
    """SnapshotRepository keyed by snapshot date."""

    def __init__(self):
        self._by_date: dict[date, NetWorthSnapshot] = {}

    def save(self, snapshot: NetWorthSnapshot) -> None:
        self._by_date[snapshot.snapshot_date] = snapshot

    def history(self) -> list[NetWorthSnapshot]:
        return [self._by_date[d] for d in sorted(self._by_date)]

    def latest_before(self, on: date) -> Optional[NetWorthSnapshot]:
        earlier = [d for d in self._by_date if d < on]
        if not earlier:
            return None
        return self._by_date[max(earlier)]


__all__ = [
    "RecordRepository",
    "SnapshotRepository",
    "ChangeType",
    "ChangeEvent",
    "Listener",
    "notify",
    "InMemoryRecordRepository",
    "InMemorySnapshotRepository",
]
