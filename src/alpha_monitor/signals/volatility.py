"""Relative price range (volatility) over klines.

Prices are assumed strictly positive; a zero ``min`` is undefined input.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

from alpha_monitor.models import MinuteKline


def per_minute_volatility(kline: MinuteKline) -> Decimal:
    """Return ``(max - min) / min`` for a single kline."""
    return (kline.max - kline.min) / kline.min


def overall_volatility(klines: list[MinuteKline]) -> Decimal:
    """Return ``(global_max - global_min) / global_min`` across all klines.

    ``global_max`` is taken over every kline's ``max`` and ``global_min`` over
    every kline's ``min``. An empty sequence has volatility 0.
    """
    if not klines:
        return Decimal("0")
    global_max = max(k.max for k in klines)
    global_min = min(k.min for k in klines)
    return (global_max - global_min) / global_min
