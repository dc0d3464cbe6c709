"""Monitoring orchestrator -- runs stability passes over the selected pairs.

Each pass walks the pairs in a fixed order. Per pair:
  1. FETCH: ticker price, then aggregate trades since the retention cutoff
  2. CACHE: merge new trades into the rolling cache, prune expired ones
  3. AGGREGATE: minute klines over the monitoring window
  4. CLASSIFY: trend and overall volatility
  5. DECIDE: stability verdict, advance the notification latch
  6. REPORT: build and log a PairResult

A fetch failure skips that pair for the current pass only.

Passes are serialized: the scheduler loop awaits each pass before waiting
for the next tick, and run_pass is guarded by a lock. A trigger that arrives
while a pass is in flight is skipped rather than queued.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from alpha_monitor.config import MonitorSettings
from alpha_monitor.exceptions import FetchError
from alpha_monitor.exchange.client import MarketDataClient
from alpha_monitor.logging import get_logger
from alpha_monitor.market_data.symbol_resolver import SymbolResolver
from alpha_monitor.market_data.trade_cache import TradeWindowCache
from alpha_monitor.models import PairResult
from alpha_monitor.reporting import RECENT_TRADES_SHOWN, log_pair_result
from alpha_monitor.signals.klines import MINUTE_MS, aggregate_minute_klines, price_range
from alpha_monitor.signals.stability import StabilityNotifier, is_stable
from alpha_monitor.signals.trend import classify_trend
from alpha_monitor.signals.volatility import overall_volatility

logger = get_logger(__name__)


@dataclass
class MonitorState:
    """Per-session state keyed by pair, owned by the orchestrator."""

    trade_cache: TradeWindowCache = field(default_factory=TradeWindowCache)
    notifier: StabilityNotifier = field(default_factory=StabilityNotifier)
    latest_results: dict[str, PairResult] = field(default_factory=dict)
    pass_count: int = 0
    skipped_triggers: int = 0
    last_pass_at: float | None = None
    last_pass_duration: float | None = None


class MonitorOrchestrator:
    """Runs monitoring passes on a fixed interval.

    Args:
        settings: Monitoring windows, threshold and refresh interval.
        client: Market data client (alpha REST or ccxt).
        resolver: Alpha id to ticker lookup for display names.
        state: Session state; a fresh one is created when omitted.
        clock: Returns the current Unix time in seconds.
    """

    def __init__(
        self,
        settings: MonitorSettings,
        client: MarketDataClient,
        resolver: SymbolResolver,
        state: MonitorState | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._client = client
        self._resolver = resolver
        self._state = state or MonitorState()
        self._clock = clock
        self._pairs: list[str] = []
        self._running = False
        self._stop_event = asyncio.Event()
        self._pass_lock = asyncio.Lock()

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def pairs(self) -> list[str]:
        return list(self._pairs)

    async def start(self, pairs: list[str]) -> None:
        """Run the scheduler loop over ``pairs`` until stop() is called."""
        self._pairs = list(pairs)
        self._running = True
        self._stop_event.clear()
        logger.info(
            "monitor_starting",
            pairs=[self._resolver.display_name(p) for p in self._pairs],
            refresh_interval=self._settings.refresh_interval,
            threshold=str(self._settings.stable_threshold),
            monitor_minutes=self._settings.monitor_minutes,
            cache_minutes=self._settings.cache_minutes,
        )
        try:
            await self._run_loop()
        finally:
            self._running = False
            logger.info("monitor_stopped", passes=self._state.pass_count)

    async def stop(self) -> None:
        """Signal the scheduler loop to exit after the current pass."""
        logger.info("monitor_stopping")
        self._running = False
        self._stop_event.set()

    async def _run_loop(self) -> None:
        """Trigger a pass, then wait one refresh interval (or until stopped)."""
        interval = self._settings.refresh_interval
        while self._running:
            try:
                await self.trigger_pass()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("monitor_pass_error", error=str(e), exc_info=True)

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break

    async def trigger_pass(self) -> list[PairResult] | None:
        """Run one pass unless another is in flight.

        Returns:
            The pass results, or None when the trigger was skipped.
        """
        if self._pass_lock.locked():
            self._state.skipped_triggers += 1
            logger.warning("monitor_pass_skipped", reason="pass_in_flight")
            return None
        return await self.run_pass(self._pairs)

    async def run_pass(self, pairs: list[str]) -> list[PairResult]:
        """Evaluate every pair once, in order. Fetch failures skip the pair."""
        async with self._pass_lock:
            started = time.monotonic()
            results: list[PairResult] = []

            for pair in pairs:
                display = self._resolver.display_name(pair)
                with structlog.contextvars.bound_contextvars(pair=display):
                    try:
                        result = await self.evaluate_pair(pair)
                    except FetchError as e:
                        logger.warning(
                            "pair_skipped",
                            error_type=type(e).__name__,
                            error=str(e),
                        )
                        continue
                results.append(result)
                self._state.latest_results[pair] = result
                log_pair_result(result, self._settings.monitor_minutes)

            duration = time.monotonic() - started
            self._state.pass_count += 1
            self._state.last_pass_at = self._clock()
            self._state.last_pass_duration = duration

            logger.info(
                "monitor_pass_complete",
                evaluated=len(results),
                skipped=len(pairs) - len(results),
                stable=sum(1 for r in results if r.stable),
                duration_seconds=round(duration, 3),
            )
            if duration > self._settings.refresh_interval:
                logger.warning(
                    "monitor_pass_overran",
                    duration_seconds=round(duration, 3),
                    refresh_interval=self._settings.refresh_interval,
                )
            return results

    async def evaluate_pair(self, pair: str) -> PairResult:
        """Fetch, update the cache, and run the stability pipeline for one pair.

        Raises:
            FetchError: If the price or trade fetch fails.
        """
        settings = self._settings
        retention_ms = settings.cache_minutes * MINUTE_MS

        price = await self._client.fetch_ticker_price(pair)

        since_ms = int(self._clock() * 1000) - retention_ms
        trades = await self._client.fetch_recent_trades(
            pair, since_ms, limit=settings.trade_limit
        )
        fresh = [t for t in trades if t.timestamp >= since_ms]

        now_ms = int(self._clock() * 1000)
        cache = self._state.trade_cache
        cache.merge_and_prune(pair, fresh, now_ms, retention_ms)
        cached = cache.snapshot(pair)

        klines = aggregate_minute_klines(cached, settings.monitor_minutes, now_ms)
        trend = classify_trend(klines)
        volatility = overall_volatility(klines)
        stable = is_stable(
            klines, settings.monitor_minutes, settings.stable_threshold, trend=trend
        )
        just_notified = self._state.notifier.advance(pair, stable)
        high, low = price_range(klines)

        return PairResult(
            pair=pair,
            display_name=self._resolver.display_name(pair),
            price=price,
            klines=klines,
            trend=trend,
            overall_volatility=volatility,
            stable=stable,
            just_notified=just_notified,
            high=high,
            low=low,
            recent_trades=cached[-RECENT_TRADES_SHOWN:],
            evaluated_at=now_ms / 1000,
        )

    def get_status(self) -> dict[str, Any]:
        """Return a summary of the monitoring session."""
        state = self._state
        return {
            "running": self._running,
            "pass_in_flight": self._pass_lock.locked(),
            "pairs": [
                {"pair": p, "display_name": self._resolver.display_name(p)}
                for p in self._pairs
            ],
            "pass_count": state.pass_count,
            "skipped_triggers": state.skipped_triggers,
            "last_pass_at": state.last_pass_at,
            "last_pass_duration": state.last_pass_duration,
            "cached_trades": len(state.trade_cache),
            "cached_pairs": state.trade_cache.pairs(),
            "notified_pairs": [p for p in self._pairs if state.notifier.is_notified(p)],
            "stable_pairs": [
                p for p, r in state.latest_results.items() if r.stable
            ],
            "settings": {
                "refresh_interval": self._settings.refresh_interval,
                "stable_threshold": str(self._settings.stable_threshold),
                "monitor_minutes": self._settings.monitor_minutes,
                "cache_minutes": self._settings.cache_minutes,
            },
        }
