"""Minute-bucket aggregation of trade records into price klines.

Pure function: the kline sequence for a pair is recomputed from the trade
cache on every pass, no incremental state is kept between passes.

CRITICAL: All computations use Decimal. Never use float.
"""

from collections.abc import Iterable
from decimal import Decimal

from alpha_monitor.models import MinuteKline, TradeRecord

MINUTE_MS = 60_000


def minute_bucket(timestamp_ms: int) -> int:
    """Truncate a millisecond timestamp to the start of its minute."""
    return (timestamp_ms // MINUTE_MS) * MINUTE_MS


def aggregate_minute_klines(
    trades: Iterable[TradeRecord],
    window_minutes: int,
    now_ms: int,
) -> list[MinuteKline]:
    """Group trades inside the window into per-minute max/min/avg klines.

    Only trades with ``timestamp >= now_ms - window_minutes * 60000`` are
    considered. ``avg`` is the plain arithmetic mean of trade prices, quantity
    is not weighted in. Minutes without trades are omitted.

    Args:
        trades: Trade records in any order.
        window_minutes: Length of the monitoring window in minutes.
        now_ms: Reference time in Unix milliseconds.

    Returns:
        Klines sorted ascending by ``minute_start``. Empty if no trade qualifies.
    """
    window_start = now_ms - window_minutes * MINUTE_MS
    buckets: dict[int, list[Decimal]] = {}

    for trade in trades:
        if trade.timestamp < window_start:
            continue
        buckets.setdefault(minute_bucket(trade.timestamp), []).append(trade.price)

    klines = []
    for minute_start in sorted(buckets):
        prices = buckets[minute_start]
        klines.append(
            MinuteKline(
                minute_start=minute_start,
                max=max(prices),
                min=min(prices),
                avg=sum(prices, Decimal("0")) / Decimal(len(prices)),
            )
        )
    return klines


def price_range(klines: list[MinuteKline]) -> tuple[Decimal | None, Decimal | None]:
    """Return the (high, low) across all klines, or (None, None) when empty."""
    if not klines:
        return None, None
    return max(k.max for k in klines), min(k.min for k in klines)
