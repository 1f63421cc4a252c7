"""Published view of the most recent successful scan."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping

from .ingest.report import ScanReport
from .model import Account, Strategy


class EntityKind(str, Enum):
    """Top-level entity served by a deployment."""

    ACCOUNTS = "accounts"
    STRATEGIES = "strategies"


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable result of one scan cycle.

    ``version`` is 0 for the empty snapshot served before the first publish.
    """

    accounts: Mapping[str, Account] = field(
        default_factory=lambda: MappingProxyType({}))
    version: int = 0
    published_at: datetime | None = None
    report: ScanReport | None = None

    def account_list(self) -> List[Account]:
        return list(self.accounts.values())

    def strategy_list(self) -> List[Strategy]:
        return [
            strategy
            for account in self.accounts.values()
            for strategy in account.strategies.values()
        ]


class SnapshotStore:
    """Holds the current :class:`Snapshot` and swaps it atomically.

    A single scanning thread publishes; any number of threads read. Readers
    take the current handle once and work on it, so they see either the
    previous or the new cycle in full.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current = Snapshot()

    def current(self) -> Snapshot:
        with self._lock:
            return self._current

    def publish(self, accounts: Mapping[str, Account], report: ScanReport | None = None) -> Snapshot:
        """Replace the published snapshot with ``accounts``.

        The mapping is copied, so later changes to the caller's dictionary are
        not visible to readers.
        """

        published_at = datetime.now(timezone.utc)
        with self._lock:
            snapshot = Snapshot(
                accounts=MappingProxyType(dict(accounts)),
                version=self._current.version + 1,
                published_at=published_at,
                report=report,
            )
            self._current = snapshot
        return snapshot

    def get_accounts(self) -> List[Account]:
        return self.current().account_list()

    def get_strategies(self) -> List[Strategy]:
        return self.current().strategy_list()

    def get_entities(self, kind: EntityKind) -> List[Account] | List[Strategy]:
        snapshot = self.current()
        if kind is EntityKind.STRATEGIES:
            return snapshot.strategy_list()
        return snapshot.account_list()
