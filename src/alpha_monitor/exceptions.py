"""Custom exceptions for the stability monitor.

Fetch-layer errors are raised by the market data clients and caught at the
orchestrator boundary, where they degrade to "skip this pair this pass".
Startup errors are raised while resolving what to monitor.
"""


class MonitorError(Exception):
    """Base exception for all monitor errors."""


class FetchError(MonitorError):
    """Base for failures talking to the market data API."""

    def __init__(self, message: str, pair: str | None = None) -> None:
        super().__init__(message)
        self.pair = pair


class FetchTimeoutError(FetchError):
    """Raised when a request exceeds its timeout."""


class FetchUnavailableError(FetchError):
    """Raised on network errors or server-side failures."""


class PairNotFoundError(FetchError):
    """Raised when a pair is unknown upstream or has no trade history."""


class MalformedResponseError(FetchError):
    """Raised when a response does not have the expected payload shape."""


class CatalogUnavailableError(MonitorError):
    """Raised when the token catalog or pair list cannot be loaded."""


class NoPairsToMonitorError(MonitorError):
    """Raised when none of the configured pairs can be resolved."""
