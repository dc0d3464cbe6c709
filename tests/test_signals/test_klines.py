"""Tests for minute-bucket kline aggregation.

All prices use Decimal (project convention).
"""

from decimal import Decimal

from helpers import MINUTE, NOW_MS, make_trade

from alpha_monitor.signals.klines import aggregate_minute_klines, minute_bucket, price_range


class TestMinuteBucket:
    """Tests for timestamp truncation."""

    def test_aligned_timestamp_unchanged(self) -> None:
        assert minute_bucket(1_700_000_040_000) == 1_700_000_040_000

    def test_truncates_within_minute(self) -> None:
        assert minute_bucket(1_700_000_099_999) == 1_700_000_040_000

    def test_zero(self) -> None:
        assert minute_bucket(0) == 0


class TestAggregateMinuteKlines:
    """Tests for aggregate_minute_klines."""

    def test_empty_input_yields_empty(self) -> None:
        assert aggregate_minute_klines([], window_minutes=3, now_ms=NOW_MS) == []

    def test_single_bucket_max_min_avg(self) -> None:
        start = NOW_MS - MINUTE
        trades = [
            make_trade(1, start + 1_000, "100"),
            make_trade(2, start + 2_000, "102"),
            make_trade(3, start + 3_000, "101"),
        ]
        klines = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)

        assert len(klines) == 1
        k = klines[0]
        assert k.minute_start == start
        assert k.max == Decimal("102")
        assert k.min == Decimal("100")
        assert k.avg == Decimal("101")

    def test_avg_is_not_quantity_weighted(self) -> None:
        start = NOW_MS - MINUTE
        trades = [
            make_trade(1, start, "100", quantity="1000"),
            make_trade(2, start + 1, "200", quantity="1"),
        ]
        klines = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)
        assert klines[0].avg == Decimal("150")

    def test_filters_trades_before_window(self) -> None:
        window_start = NOW_MS - 3 * MINUTE
        trades = [
            make_trade(1, window_start - 1, "90"),
            make_trade(2, window_start, "100"),
        ]
        klines = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)

        assert len(klines) == 1
        assert klines[0].min == Decimal("100")

    def test_sorted_ascending_regardless_of_input_order(self) -> None:
        trades = [
            make_trade(1, NOW_MS - 1 * MINUTE, "103"),
            make_trade(2, NOW_MS - 3 * MINUTE, "101"),
            make_trade(3, NOW_MS - 2 * MINUTE, "102"),
        ]
        klines = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)

        starts = [k.minute_start for k in klines]
        assert starts == sorted(starts)
        assert len(set(starts)) == len(starts)
        assert [k.avg for k in klines] == [Decimal("101"), Decimal("102"), Decimal("103")]

    def test_empty_minutes_are_not_filled(self) -> None:
        trades = [
            make_trade(1, NOW_MS - 3 * MINUTE, "100"),
            make_trade(2, NOW_MS - 1 * MINUTE, "100"),
        ]
        klines = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)
        assert len(klines) == 2

    def test_deterministic(self) -> None:
        trades = [
            make_trade(i, NOW_MS - 170_000 + i * 7_000, str(100 + i % 5))
            for i in range(25)
        ]
        first = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)
        second = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)
        assert first == second


class TestPriceRange:
    """Tests for price_range."""

    def test_empty_returns_none(self) -> None:
        assert price_range([]) == (None, None)

    def test_high_and_low_across_klines(self) -> None:
        trades = [
            make_trade(1, NOW_MS - 2 * MINUTE, "100"),
            make_trade(2, NOW_MS - 2 * MINUTE + 1, "105"),
            make_trade(3, NOW_MS - MINUTE, "99"),
        ]
        klines = aggregate_minute_klines(trades, window_minutes=3, now_ms=NOW_MS)
        assert price_range(klines) == (Decimal("105"), Decimal("99"))
