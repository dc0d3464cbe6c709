"""Stability verdict and edge-triggered stability notification.

A clean uptrend is judged by its per-minute jitter; a sideways window is
judged by its global range. DOWN trends are never stable.

CRITICAL: All comparisons use Decimal. Never use float.
"""

from decimal import Decimal

from alpha_monitor.models import MinuteKline, TrendDirection
from alpha_monitor.signals.trend import classify_trend
from alpha_monitor.signals.volatility import overall_volatility, per_minute_volatility


def is_stable(
    klines: list[MinuteKline],
    required_minutes: int,
    threshold: Decimal,
    trend: TrendDirection | None = None,
) -> bool:
    """Decide whether the kline window counts as stable.

    Args:
        klines: Klines ordered ascending by minute.
        required_minutes: Minimum number of klines before any verdict.
        threshold: Maximum volatility ratio (e.g. Decimal("0.001") = 0.1%).
        trend: Precomputed classification of ``klines``; computed when None.

    Returns:
        False with fewer than ``required_minutes`` klines. For UP, True iff
        every kline's per-minute volatility is <= threshold. For SIDEWAYS,
        True iff the overall volatility is <= threshold. False otherwise.
    """
    if len(klines) < required_minutes:
        return False

    if trend is None:
        trend = classify_trend(klines)

    if trend is TrendDirection.UP:
        return all(per_minute_volatility(k) <= threshold for k in klines)
    if trend is TrendDirection.SIDEWAYS:
        return overall_volatility(klines) <= threshold
    return False


class StabilityNotifier:
    """Per-pair latch turning stability verdicts into one-shot notifications.

    A pair is notified on the first stable pass of an episode and re-armed
    by the first unstable pass after it.
    """

    def __init__(self) -> None:
        self._notified: dict[str, bool] = {}

    def advance(self, pair: str, stable: bool) -> bool:
        """Feed the current verdict for a pair.

        Returns:
            True exactly when the latch moves from not-notified to notified.
        """
        if stable and not self._notified.get(pair, False):
            self._notified[pair] = True
            return True
        if not stable:
            self._notified[pair] = False
        return False

    def is_notified(self, pair: str) -> bool:
        """Return the current latch state for a pair."""
        return self._notified.get(pair, False)
