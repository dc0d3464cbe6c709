"""Binance Alpha public REST client via aiohttp.

Wraps the alpha-trade ticker, agg-trades and exchange-info endpoints plus
the alpha token list. Every request carries the configured timeout and,
when set, the configured HTTP proxy. Transport failures are mapped onto
the FetchError taxonomy so callers never see aiohttp exceptions.
"""

import asyncio
from decimal import Decimal
from typing import Any

import aiohttp

from alpha_monitor.config import ExchangeSettings
from alpha_monitor.exceptions import (
    FetchTimeoutError,
    FetchUnavailableError,
    MalformedResponseError,
    PairNotFoundError,
)
from alpha_monitor.exchange.client import MarketDataClient
from alpha_monitor.exchange.types import (
    parse_agg_trade,
    parse_token,
    to_positive_decimal,
    unwrap_envelope,
)
from alpha_monitor.logging import get_logger
from alpha_monitor.models import TokenInfo, TradeRecord

logger = get_logger(__name__)

_TICKER_PATH = "/alpha-trade/ticker"
_AGG_TRADES_PATH = "/alpha-trade/agg-trades"
_EXCHANGE_INFO_PATH = "/alpha-trade/get-exchange-info"
_TOKEN_LIST_PATH = "/wallet-direct/buw/wallet/cex/alpha/all/token/list"


class AlphaClient(MarketDataClient):
    """Concrete Binance Alpha client using a shared aiohttp session."""

    def __init__(
        self,
        settings: ExchangeSettings,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = settings.base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=settings.request_timeout)
        self._proxy = (
            settings.proxy_url.get_secret_value() if settings.proxy_url else None
        )
        self._session = session
        self._owns_session = session is None

    async def connect(self) -> None:
        """Create the HTTP session if one was not injected."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        logger.info(
            "alpha_client_connected",
            base_url=self._base_url,
            proxy=self._proxy is not None,
        )

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
        logger.info("alpha_client_closed")

    async def fetch_ticker_price(self, pair: str) -> Decimal:
        """Return ``lastPrice`` from the alpha ticker endpoint."""
        data = await self._get(_TICKER_PATH, {"symbol": pair}, pair=pair)
        if not isinstance(data, dict) or "lastPrice" not in data:
            raise MalformedResponseError("ticker has no lastPrice", pair)
        return to_positive_decimal(data["lastPrice"], "lastPrice", pair)

    async def fetch_recent_trades(
        self, pair: str, since_ms: int, limit: int = 1000
    ) -> list[TradeRecord]:
        """Fetch aggregate trades starting at ``since_ms`` in feed order."""
        data = await self._get(
            _AGG_TRADES_PATH,
            {"symbol": pair, "startTime": since_ms, "limit": limit},
            pair=pair,
        )
        if not isinstance(data, list):
            raise MalformedResponseError("agg trades payload is not a list", pair)
        return [parse_agg_trade(row, pair) for row in data]

    async def fetch_pairs(self) -> list[str]:
        """Return every raw pair id listed by exchange-info."""
        data = await self._get(_EXCHANGE_INFO_PATH, {})
        symbols = data.get("symbols") if isinstance(data, dict) else None
        if not isinstance(symbols, list):
            raise MalformedResponseError("exchange info has no symbols list")
        pairs = [s["symbol"] for s in symbols if isinstance(s, dict) and s.get("symbol")]
        logger.debug("fetched_alpha_pairs", count=len(pairs))
        return pairs

    async def fetch_token_catalog(self) -> list[TokenInfo]:
        """Return the alpha token list, skipping rows without ids."""
        data = await self._get(_TOKEN_LIST_PATH, {})
        if not isinstance(data, list):
            raise MalformedResponseError("token list payload is not a list")
        tokens = [t for t in (parse_token(row) for row in data) if t is not None]
        return tokens

    async def _get(self, path: str, params: dict[str, Any], pair: str | None = None) -> Any:
        """GET ``path`` and return the unwrapped envelope data."""
        if self._session is None:
            await self.connect()
        assert self._session is not None

        url = f"{self._base_url}{path}"
        try:
            async with self._session.get(
                url,
                params=params,
                proxy=self._proxy,
                timeout=self._timeout,
            ) as resp:
                if resp.status == 404:
                    raise PairNotFoundError(
                        f"{path} returned 404 (pair missing or no trades)", pair
                    )
                if resp.status >= 400:
                    raise FetchUnavailableError(f"{path} returned HTTP {resp.status}", pair)
                try:
                    payload = await resp.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponseError(f"{path} returned invalid JSON", pair) from e
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(
                f"{path} timed out after {self._settings.request_timeout}s", pair
            ) from e
        except aiohttp.ClientError as e:
            raise FetchUnavailableError(f"{path} failed: {e}", pair) from e

        return unwrap_envelope(payload, pair)
