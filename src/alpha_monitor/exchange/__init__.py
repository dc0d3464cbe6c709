"""Exchange client layer -- Binance Alpha REST via aiohttp, other exchanges via ccxt."""

from alpha_monitor.config import ExchangeSettings
from alpha_monitor.exchange.alpha_client import AlphaClient
from alpha_monitor.exchange.ccxt_client import CcxtClient
from alpha_monitor.exchange.client import MarketDataClient


def create_client(settings: ExchangeSettings) -> MarketDataClient:
    """Build the market data client selected by ``settings.source``."""
    if settings.source == "ccxt":
        return CcxtClient(settings)
    return AlphaClient(settings)


__all__ = ["AlphaClient", "CcxtClient", "MarketDataClient", "create_client"]
