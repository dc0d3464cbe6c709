"""Presentation of per-pair monitoring results through structured logging."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from alpha_monitor.logging import get_logger
from alpha_monitor.models import PairResult, TradeRecord

logger = get_logger(__name__)

RECENT_TRADES_SHOWN = 10


def format_timestamp(ts_ms: int) -> str:
    """Render a millisecond timestamp as ``YYYY-MM-DD HH:MM:SS.mmm`` (UTC)."""
    dt = datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S.") + f"{dt.microsecond // 1000:03d}"


def format_percent(ratio: Decimal, places: int = 3) -> str:
    """Render a fractional ratio as a percentage string (0.0015 -> '0.150%')."""
    return f"{ratio * 100:.{places}f}%"


def trade_to_dict(trade: TradeRecord) -> dict[str, Any]:
    """Serialize a trade for logs and the dashboard API."""
    return {
        "id": trade.id,
        "time": format_timestamp(trade.timestamp),
        "price": str(trade.price),
        "quantity": str(trade.quantity),
    }


def result_to_dict(result: PairResult) -> dict[str, Any]:
    """Serialize a PairResult to JSON-safe primitives (Decimals as strings)."""
    return {
        "pair": result.pair,
        "display_name": result.display_name,
        "price": str(result.price),
        "trend": result.trend.value,
        "overall_volatility": str(result.overall_volatility),
        "stable": result.stable,
        "just_notified": result.just_notified,
        "high": str(result.high) if result.high is not None else None,
        "low": str(result.low) if result.low is not None else None,
        "klines": [
            {
                "minute_start": k.minute_start,
                "max": str(k.max),
                "min": str(k.min),
                "avg": str(k.avg),
            }
            for k in result.klines
        ],
        "recent_trades": [trade_to_dict(t) for t in result.recent_trades],
        "evaluated_at": result.evaluated_at,
    }


def log_pair_result(result: PairResult, monitor_minutes: int) -> None:
    """Log one pair's result, plus a stable-state event on notification."""
    logger.info(
        "pair_result",
        pair=result.display_name,
        price=f"{result.price:.8f}",
        window_minutes=monitor_minutes,
        volatility=format_percent(result.overall_volatility),
        trend=result.trend.value,
        stable=result.stable,
        high=f"{result.high:.8f}" if result.high is not None else None,
        low=f"{result.low:.8f}" if result.low is not None else None,
        klines=len(result.klines),
    )
    logger.debug(
        "recent_trades",
        pair=result.display_name,
        trades=[trade_to_dict(t) for t in result.recent_trades[-RECENT_TRADES_SHOWN:]],
    )
    if result.just_notified:
        logger.warning(
            "stable_state_detected",
            pair=result.display_name,
            trend=result.trend.value,
            volatility=format_percent(result.overall_volatility),
        )
