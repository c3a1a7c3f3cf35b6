"""Net worth snapshots and history."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

import structlog

from .exceptions import ConfigurationError
from .models import Asset, Liability, NetWorthDelta, NetWorthSnapshot
from .repository import ChangeEvent, ChangeType, Listener, SnapshotRepository, notify

logger = structlog.get_logger()


def _breakdown(pairs: Iterable[tuple[str, Decimal]]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for category, amount in pairs:
        totals[category] += amount
    return dict(totals)


def compute_delta(current: NetWorthSnapshot, previous: NetWorthSnapshot) -> NetWorthDelta:
    """Change from ``previous`` to ``current``.

    The percentage is relative to the magnitude of the previous net worth
    and is 0 when that net worth was exactly zero.
    """
    net_worth_delta = current.net_worth - previous.net_worth
    if previous.net_worth == 0:
        percentage = Decimal("0")
    else:
        percentage = net_worth_delta / abs(previous.net_worth) * 100

    return NetWorthDelta(
        assets_delta=current.total_assets - previous.total_assets,
        liabilities_delta=current.total_liabilities - previous.total_liabilities,
        net_worth_delta=net_worth_delta,
        percentage=percentage,
    )


class NetWorthCalculator:
    """Roll assets and liabilities up into dated snapshots.

    With a SnapshotRepository the calculator can also keep the history:
    ``record`` diffs against the latest stored snapshot and saves the result.
    """

    def __init__(
        self,
        repository: Optional[SnapshotRepository] = None,
        listeners: Sequence[Listener] = (),
    ):
        self.repository = repository
        self.listeners = list(listeners)

    def snapshot(
        self,
        assets: Iterable[Asset],
        liabilities: Iterable[Liability],
        as_of: date,
        previous: Optional[NetWorthSnapshot] = None,
    ) -> NetWorthSnapshot:
        """
        Build a snapshot for ``as_of``.

        Args:
            assets: Owned items at their current value
            liabilities: Debts at their current balance
            as_of: Snapshot date
            previous: Earlier snapshot to compute the change against

        Returns:
            NetWorthSnapshot with per-category breakdowns and optional delta
        """
        assets = list(assets)
        liabilities = list(liabilities)

        snapshot = NetWorthSnapshot(
            snapshot_date=as_of,
            total_assets=sum((a.current_value for a in assets), Decimal("0")),
            total_liabilities=sum((debt.current_balance for debt in liabilities), Decimal("0")),
            asset_breakdown=_breakdown((a.category, a.current_value) for a in assets),
            liability_breakdown=_breakdown(
                (debt.category, debt.current_balance) for debt in liabilities
            ),
        )

        if previous is not None:
            snapshot = snapshot.model_copy(
                update={"delta_from_previous": compute_delta(snapshot, previous)}
            )

        logger.debug(
            "net_worth_snapshot",
            snapshot_date=as_of.isoformat(),
            net_worth=str(snapshot.net_worth),
        )
        return snapshot

    def record(
        self,
        assets: Iterable[Asset],
        liabilities: Iterable[Liability],
        as_of: date,
    ) -> NetWorthSnapshot:
        """
        Build a snapshot against the stored history and save it.

        The delta is taken against the latest stored snapshot strictly before
        ``as_of``. Saving replaces any snapshot already stored for that date.

        Raises:
            ConfigurationError: If the calculator has no repository
        """
        if self.repository is None:
            raise ConfigurationError(
                "Recording a snapshot requires a snapshot repository",
                config_key="repository",
                expected="SnapshotRepository",
            )

        previous = self.repository.latest_before(as_of)
        snapshot = self.snapshot(assets, liabilities, as_of, previous=previous)
        self.repository.save(snapshot)
        notify(self.listeners, ChangeEvent(change_type=ChangeType.SNAPSHOT_SAVED, count=1))

        logger.info(
            "net_worth_recorded",
            snapshot_date=as_of.isoformat(),
            has_previous=previous is not None,
        )
        return snapshot


def record_snapshot(
    history: Iterable[NetWorthSnapshot],
    snapshot: NetWorthSnapshot,
) -> list[NetWorthSnapshot]:
    """Add a snapshot to a history, replacing any snapshot on the same date.

    Returns:
        New history list in ascending date order
    """
    by_date = {s.snapshot_date: s for s in history}
    by_date[snapshot.snapshot_date] = snapshot
    return [by_date[d] for d in sorted(by_date)]


def rebuild_deltas(history: Iterable[NetWorthSnapshot]) -> list[NetWorthSnapshot]:
    """Recompute every snapshot's delta against its predecessor by date."""
    ordered = sorted(history, key=lambda s: s.snapshot_date)
    rebuilt: list[NetWorthSnapshot] = []
    for index, snapshot in enumerate(ordered):
        delta = compute_delta(snapshot, ordered[index - 1]) if index > 0 else None
        rebuilt.append(snapshot.model_copy(update={"delta_from_previous": delta}))
    return rebuilt
