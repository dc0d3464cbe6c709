"""Tests for result formatting and logging."""

from decimal import Decimal

import structlog

from helpers import MINUTE, NOW_MS, make_kline, make_trade

from alpha_monitor.models import PairResult, TrendDirection
from alpha_monitor.reporting import (
    format_percent,
    format_timestamp,
    log_pair_result,
    result_to_dict,
)


def _result(just_notified: bool = False, klines: list | None = None) -> PairResult:
    if klines is None:
        klines = [
            make_kline(NOW_MS - 2 * MINUTE, "100", "100.05"),
            make_kline(NOW_MS - MINUTE, "100.02", "100.06"),
        ]
    return PairResult(
        pair="ALPHA_1USDT",
        display_name="ABCUSDT",
        price=Decimal("100.04"),
        klines=klines,
        trend=TrendDirection.UP,
        overall_volatility=Decimal("0.0006"),
        stable=just_notified,
        just_notified=just_notified,
        high=Decimal("100.06") if klines else None,
        low=Decimal("100") if klines else None,
        recent_trades=[make_trade(i, NOW_MS - i, "100.04") for i in range(12)],
        evaluated_at=NOW_MS / 1000,
    )


class TestFormatting:
    """Tests for timestamp and percentage rendering."""

    def test_format_timestamp_millis(self) -> None:
        assert format_timestamp(1_700_000_000_123) == "2023-11-14 22:13:20.123"

    def test_format_percent(self) -> None:
        assert format_percent(Decimal("0.0015")) == "0.150%"
        assert format_percent(Decimal("0"), places=1) == "0.0%"


class TestResultToDict:
    """Tests for JSON serialization of results."""

    def test_decimals_are_strings(self) -> None:
        data = result_to_dict(_result())

        assert data["price"] == "100.04"
        assert data["overall_volatility"] == "0.0006"
        assert data["trend"] == "up"
        assert data["high"] == "100.06"
        assert data["klines"][0] == {
            "minute_start": NOW_MS - 2 * MINUTE,
            "max": "100.05",
            "min": "100",
            "avg": "100.025",
        }
        assert data["recent_trades"][0]["price"] == "100.04"

    def test_empty_window_has_null_range(self) -> None:
        data = result_to_dict(_result(klines=[]))
        assert data["high"] is None
        assert data["low"] is None
        assert data["klines"] == []


class TestLogPairResult:
    """Tests for the structured log events."""

    def test_logs_result_without_notification(self) -> None:
        with structlog.testing.capture_logs() as logs:
            log_pair_result(_result(), monitor_minutes=3)

        events = [e["event"] for e in logs]
        assert events == ["pair_result", "recent_trades"]
        assert logs[0]["pair"] == "ABCUSDT"
        assert logs[0]["volatility"] == "0.060%"
        assert len(logs[1]["trades"]) == 10

    def test_notification_logged_as_warning(self) -> None:
        with structlog.testing.capture_logs() as logs:
            log_pair_result(_result(just_notified=True), monitor_minutes=3)

        notice = [e for e in logs if e["event"] == "stable_state_detected"]
        assert len(notice) == 1
        assert notice[0]["log_level"] == "warning"
        assert notice[0]["trend"] == "up"
