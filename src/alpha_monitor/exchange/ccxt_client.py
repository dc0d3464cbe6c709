"""Generic exchange client via ccxt async.

Lets the monitor watch ordinary spot pairs on any ccxt exchange (Binance
by default) using the same contract as the alpha REST client. ccxt
exceptions are mapped onto the FetchError taxonomy.
"""

from decimal import Decimal

import ccxt.async_support as ccxt_async

from alpha_monitor.config import ExchangeSettings
from alpha_monitor.exceptions import (
    FetchError,
    FetchTimeoutError,
    FetchUnavailableError,
    MalformedResponseError,
    PairNotFoundError,
)
from alpha_monitor.exchange.client import MarketDataClient
from alpha_monitor.exchange.types import to_positive_decimal
from alpha_monitor.logging import get_logger
from alpha_monitor.models import TokenInfo, TradeRecord

logger = get_logger(__name__)


def _map_ccxt_error(e: Exception, pair: str | None) -> FetchError:
    """Translate a ccxt exception into the monitor's error taxonomy."""
    if isinstance(e, ccxt_async.RequestTimeout):
        return FetchTimeoutError(str(e), pair)
    if isinstance(e, ccxt_async.BadSymbol):
        return PairNotFoundError(str(e), pair)
    if isinstance(e, ccxt_async.BadResponse):
        return MalformedResponseError(str(e), pair)
    return FetchUnavailableError(str(e), pair)


def _trade_id(raw: object) -> int | str:
    text = str(raw)
    return int(text) if text.isdigit() else text


class CcxtClient(MarketDataClient):
    """Concrete market data client backed by a ccxt async exchange."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings

        config: dict = {
            "enableRateLimit": True,
            "timeout": int(settings.request_timeout * 1000),  # ccxt wants ms
        }
        if settings.proxy_url is not None:
            config["aiohttp_proxy"] = settings.proxy_url.get_secret_value()

        exchange_class = getattr(ccxt_async, settings.ccxt_exchange)
        self._exchange = exchange_class(config)
        self._markets: dict = {}

    @property
    def exchange(self) -> ccxt_async.Exchange:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def connect(self) -> None:
        """Initialize connection by loading markets."""
        logger.info("connecting_to_exchange", exchange=self._settings.ccxt_exchange)
        try:
            self._markets = await self._exchange.load_markets()
        except ccxt_async.BaseError as e:
            raise _map_ccxt_error(e, None) from e
        logger.info(
            "exchange_connected",
            exchange=self._settings.ccxt_exchange,
            market_count=len(self._markets),
        )

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        await self._exchange.close()
        logger.info("exchange_connection_closed", exchange=self._settings.ccxt_exchange)

    async def fetch_ticker_price(self, pair: str) -> Decimal:
        """Return the ticker's ``last`` price."""
        try:
            ticker = await self._exchange.fetch_ticker(pair)
        except ccxt_async.BaseError as e:
            raise _map_ccxt_error(e, pair) from e

        last = ticker.get("last")
        if last is None:
            raise MalformedResponseError("ticker has no last price", pair)
        return to_positive_decimal(last, "last", pair)

    async def fetch_recent_trades(
        self, pair: str, since_ms: int, limit: int = 1000
    ) -> list[TradeRecord]:
        """Fetch public trades since ``since_ms`` via ccxt fetch_trades."""
        try:
            trades = await self._exchange.fetch_trades(pair, since=since_ms, limit=limit)
        except ccxt_async.BaseError as e:
            raise _map_ccxt_error(e, pair) from e

        records = []
        for t in trades:
            if any(t.get(k) is None for k in ("id", "timestamp", "price", "amount")):
                raise MalformedResponseError(f"incomplete trade: {t!r}", pair)
            records.append(
                TradeRecord(
                    id=_trade_id(t["id"]),
                    timestamp=int(t["timestamp"]),
                    price=to_positive_decimal(t["price"], "price", pair),
                    quantity=to_positive_decimal(t["amount"], "amount", pair),
                )
            )
        return records

    async def fetch_pairs(self) -> list[str]:
        """Return all active spot symbols from the loaded markets."""
        if not self._markets:
            await self.connect()
        return [
            symbol
            for symbol, market in self._markets.items()
            if market.get("spot") and market.get("active", True)
        ]

    async def fetch_token_catalog(self) -> list[TokenInfo]:
        """Exchange symbols are already readable; there is no alpha catalog."""
        return []
