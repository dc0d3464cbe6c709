"""Rolling per-pair trade cache with id dedup and time-based retention.

Records are kept in arrival order: each fetch appends its new records in
feed order after the existing ones. The cache is never re-sorted, so readers
must not assume global timestamp ordering.

Access is serialized by the orchestrator (one pass at a time), so no lock
is held here.
"""

from collections.abc import Iterable

from alpha_monitor.logging import get_logger
from alpha_monitor.models import TradeRecord

logger = get_logger(__name__)


class TradeWindowCache:
    """Deduplicated, time-bounded store of trade records keyed by pair.

    Entries are created lazily on the first merge for a pair and live for
    the lifetime of the monitoring session.
    """

    def __init__(self) -> None:
        self._trades: dict[str, list[TradeRecord]] = {}
        self._ids: dict[str, set[int | str]] = {}

    def merge(self, pair: str, records: Iterable[TradeRecord]) -> int:
        """Append records whose id is not yet cached for this pair.

        Args:
            pair: Raw pair identifier.
            records: New records in upstream feed order.

        Returns:
            Number of records actually appended.
        """
        trades = self._trades.setdefault(pair, [])
        seen = self._ids.setdefault(pair, set())

        added = 0
        for record in records:
            if record.id in seen:
                continue
            seen.add(record.id)
            trades.append(record)
            added += 1
        return added

    def prune(self, pair: str, now_ms: int, retention_ms: int) -> int:
        """Drop records older than ``now_ms - retention_ms``.

        Returns:
            Number of records removed.
        """
        trades = self._trades.get(pair)
        if not trades:
            return 0

        cutoff = now_ms - retention_ms
        kept = [t for t in trades if t.timestamp >= cutoff]
        removed = len(trades) - len(kept)
        if removed:
            self._trades[pair] = kept
            self._ids[pair] = {t.id for t in kept}
        return removed

    def merge_and_prune(
        self,
        pair: str,
        records: Iterable[TradeRecord],
        now_ms: int,
        retention_ms: int,
    ) -> None:
        """Merge new records, then enforce retention."""
        added = self.merge(pair, records)
        removed = self.prune(pair, now_ms, retention_ms)
        logger.debug(
            "trade_cache_updated",
            pair=pair,
            added=added,
            removed=removed,
            size=len(self._trades.get(pair, [])),
        )

    def snapshot(self, pair: str) -> list[TradeRecord]:
        """Return a copy of the cached records for a pair in arrival order."""
        return list(self._trades.get(pair, []))

    def pairs(self) -> list[str]:
        """Return all pairs that have a cache entry."""
        return list(self._trades)

    def __len__(self) -> int:
        return sum(len(trades) for trades in self._trades.values())
