"""Shared data models for the stability monitor.

CRITICAL: All prices, quantities and volatility ratios use Decimal. Never use float.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class TrendDirection(str, Enum):
    """Short-term price trend over a kline window."""

    INSUFFICIENT = "insufficient"
    UP = "up"
    DOWN = "down"
    SIDEWAYS = "sideways"


@dataclass(frozen=True)
class TradeRecord:
    """A single executed (aggregate) trade from the upstream trade feed.

    ``id`` is the upstream aggregate-trade id, unique within a pair's history.
    """

    id: int | str
    timestamp: int  # Unix milliseconds
    price: Decimal
    quantity: Decimal


@dataclass(frozen=True)
class MinuteKline:
    """Price summary over all trades in one 60-second bucket."""

    minute_start: int  # Unix milliseconds, aligned to a minute boundary
    max: Decimal
    min: Decimal
    avg: Decimal


@dataclass(frozen=True)
class TokenInfo:
    """Catalog entry mapping an opaque alpha id to a readable ticker."""

    alpha_id: str
    symbol: str
    name: str = ""


@dataclass
class PairResult:
    """Outcome of evaluating one pair in one monitoring pass."""

    pair: str
    display_name: str
    price: Decimal
    klines: list[MinuteKline]
    trend: TrendDirection
    overall_volatility: Decimal
    stable: bool
    just_notified: bool
    high: Decimal | None = None
    low: Decimal | None = None
    recent_trades: list[TradeRecord] = field(default_factory=list)
    evaluated_at: float = field(default_factory=time.time)
