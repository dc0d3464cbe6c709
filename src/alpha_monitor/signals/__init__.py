"""Signal computation for the stability monitor.

Pure functions over trade records and minute klines: aggregation, trend
classification, volatility, the stability verdict, and the notification latch.
"""

from alpha_monitor.signals.klines import aggregate_minute_klines, minute_bucket, price_range
from alpha_monitor.signals.stability import StabilityNotifier, is_stable
from alpha_monitor.signals.trend import classify_trend
from alpha_monitor.signals.volatility import overall_volatility, per_minute_volatility

__all__ = [
    "StabilityNotifier",
    "aggregate_minute_klines",
    "classify_trend",
    "is_stable",
    "minute_bucket",
    "overall_volatility",
    "per_minute_volatility",
    "price_range",
]
