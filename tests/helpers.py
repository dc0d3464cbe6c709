"""Builders and constants shared by the test modules."""

from decimal import Decimal

from alpha_monitor.models import MinuteKline, TradeRecord

#: Fixed reference time used by the tests (a minute boundary).
NOW_MS = 1_700_000_040_000
MINUTE = 60_000


def make_trade(id: int, timestamp: int, price: str, quantity: str = "1") -> TradeRecord:
    """Build a TradeRecord from string prices."""
    return TradeRecord(
        id=id, timestamp=timestamp, price=Decimal(price), quantity=Decimal(quantity)
    )


def make_kline(minute_start: int, low: str, high: str, avg: str | None = None) -> MinuteKline:
    """Build a MinuteKline; avg defaults to the midpoint of low and high."""
    lo, hi = Decimal(low), Decimal(high)
    return MinuteKline(
        minute_start=minute_start,
        max=hi,
        min=lo,
        avg=Decimal(avg) if avg is not None else (lo + hi) / 2,
    )
