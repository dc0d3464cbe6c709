"""Entry point for the alpha stability monitor.

Wires all components together, optionally embeds the FastAPI dashboard,
and starts the monitoring loop. When the dashboard is enabled the monitor
and dashboard share a single asyncio event loop via uvicorn's programmatic
API and FastAPI's lifespan context manager.

Handles SIGINT/SIGTERM for graceful shutdown.

Startup order:
1. AppSettings (configuration)
2. Logging setup
3. MarketDataClient (alpha REST or ccxt)
4. SymbolResolver (token catalog)
5. Pair resolution against the exchange pair list
6. MonitorOrchestrator (scheduler loop)
"""

import asyncio
import signal
import sys
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from alpha_monitor.config import AppSettings
from alpha_monitor.exceptions import (
    CatalogUnavailableError,
    FetchError,
    MonitorError,
    NoPairsToMonitorError,
)
from alpha_monitor.exchange import create_client
from alpha_monitor.exchange.client import MarketDataClient
from alpha_monitor.logging import get_logger, setup_logging
from alpha_monitor.market_data.symbol_resolver import SymbolResolver
from alpha_monitor.orchestrator import MonitorOrchestrator

#: Refresh intervals below this risk upstream rate limiting.
_MIN_SAFE_REFRESH_SECONDS = 5.0


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build the client, resolver and orchestrator from settings.

    Does NOT connect the client -- that happens in _prepare_pairs().
    """
    client = create_client(settings.exchange)
    resolver = SymbolResolver()
    orchestrator = MonitorOrchestrator(settings.monitor, client, resolver)
    return {
        "client": client,
        "resolver": resolver,
        "orchestrator": orchestrator,
    }


async def _prepare_pairs(
    settings: AppSettings, client: MarketDataClient, resolver: SymbolResolver
) -> list[str]:
    """Connect, load the token catalog, and resolve the configured pairs.

    Raises:
        NoPairsToMonitorError: If no pairs are configured or none resolve.
        CatalogUnavailableError: If the exchange pair list cannot be loaded.
    """
    logger = get_logger("alpha_monitor.main")

    if not settings.monitor.pairs:
        raise NoPairsToMonitorError(
            'No pairs configured; set MONITOR_PAIRS, e.g. MONITOR_PAIRS=\'["ALPHA_175USDT"]\''
        )

    await client.connect()
    await resolver.load(client)

    try:
        available = await client.fetch_pairs()
    except FetchError as e:
        raise CatalogUnavailableError(f"Failed to load pair list: {e}") from e
    if not available:
        raise CatalogUnavailableError("Exchange returned no tradable pairs")

    logger.info("pair_list_loaded", count=len(available))
    pairs = resolver.resolve_pairs(settings.monitor.pairs, available)
    logger.info(
        "pairs_selected",
        pairs=[resolver.display_name(p) for p in pairs],
    )
    return pairs


def _setup_signal_handlers(orchestrator: MonitorOrchestrator) -> None:
    """Register SIGINT/SIGTERM to stop the monitor gracefully.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("alpha_monitor.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(orchestrator.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _graceful_handler)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            logger.debug("signal_handler_unsupported", signal=sig.name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage monitor lifecycle within the FastAPI application.

    On startup: starts the orchestrator and the dashboard update loop as
    background tasks. On shutdown: cancels both and closes the client.
    """
    from alpha_monitor.dashboard.update_loop import dashboard_update_loop

    logger = get_logger("alpha_monitor.main")
    settings: AppSettings = app.state.settings
    components = app.state.components
    orchestrator: MonitorOrchestrator = components["orchestrator"]

    app.state.orchestrator = orchestrator
    app.state.resolver = components["resolver"]
    app.state.update_interval = settings.dashboard.update_interval

    monitor_task = asyncio.create_task(orchestrator.start(app.state.pairs))
    update_task = asyncio.create_task(dashboard_update_loop(app))

    logger.info("lifespan_started", pairs=len(app.state.pairs))

    yield

    update_task.cancel()
    try:
        await update_task
    except asyncio.CancelledError:
        pass

    await orchestrator.stop()
    monitor_task.cancel()
    try:
        await monitor_task
    except asyncio.CancelledError:
        pass

    await components["client"].close()
    logger.info("alpha_monitor_stopped")


async def run() -> None:
    """Run the stability monitor.

    When the dashboard is enabled (DASHBOARD_ENABLED=true) the monitor runs
    inside uvicorn's event loop and the lifespan manages shutdown. Otherwise
    the monitor loop runs directly.
    """
    settings = AppSettings()

    setup_logging(settings.log_level)
    logger = get_logger("alpha_monitor.main")

    if settings.monitor.refresh_interval < _MIN_SAFE_REFRESH_SECONDS:
        logger.warning(
            "refresh_interval_below_recommended",
            refresh_interval=settings.monitor.refresh_interval,
            recommended=_MIN_SAFE_REFRESH_SECONDS,
        )

    components = _build_components(settings)
    client = components["client"]
    orchestrator = components["orchestrator"]

    try:
        pairs = await _prepare_pairs(settings, client, components["resolver"])
    except BaseException:
        await client.close()
        raise

    if settings.dashboard.enabled:
        from alpha_monitor.dashboard.app import create_dashboard_app

        app = create_dashboard_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components
        app.state.pairs = pairs

        logger.info(
            "starting_with_dashboard",
            host=settings.dashboard.host,
            port=settings.dashboard.port,
        )

        config = uvicorn.Config(
            app,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        _setup_signal_handlers(orchestrator)
        logger.info("starting_without_dashboard", source=settings.exchange.source)
        try:
            await orchestrator.start(pairs)
        finally:
            await client.close()
            logger.info("alpha_monitor_stopped")


def main() -> None:
    """Synchronous entry point."""
    try:
        asyncio.run(run())
    except MonitorError as e:
        get_logger("alpha_monitor.main").error("startup_failed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
