"""Abstract market data client interface.

Defines the contract the monitor depends on. The orchestrator only sees
this interface, keeping transport details (aiohttp REST, ccxt) isolated in
the concrete implementations.

Every fetch method raises a subclass of FetchError on failure:
FetchTimeoutError, FetchUnavailableError, PairNotFoundError or
MalformedResponseError.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from alpha_monitor.models import TokenInfo, TradeRecord


class MarketDataClient(ABC):
    """Abstract base class for market data API clients."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying session."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying session."""
        ...

    @abstractmethod
    async def fetch_ticker_price(self, pair: str) -> Decimal:
        """Return the last traded price for a pair."""
        ...

    @abstractmethod
    async def fetch_recent_trades(
        self, pair: str, since_ms: int, limit: int = 1000
    ) -> list[TradeRecord]:
        """Fetch aggregate trades executed at or after ``since_ms``.

        Results are in feed order and not guaranteed exhaustive beyond
        ``limit``. Implementations may return older rows; callers filter.
        """
        ...

    @abstractmethod
    async def fetch_pairs(self) -> list[str]:
        """Return all tradable raw pair ids."""
        ...

    @abstractmethod
    async def fetch_token_catalog(self) -> list[TokenInfo]:
        """Return the alpha id -> ticker catalog."""
        ...
