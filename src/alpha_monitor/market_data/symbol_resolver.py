"""Alpha id to ticker resolution for display and pair selection.

Alpha pairs are quoted with opaque base ids (e.g. "ALPHA_175USDT"). The
token catalog maps each alpha id to a readable ticker, which is only used
for display and for matching user-configured names; monitoring always runs
on the raw pair id.
"""

import re

from alpha_monitor.exchange.client import MarketDataClient
from alpha_monitor.exceptions import FetchError, NoPairsToMonitorError
from alpha_monitor.logging import get_logger
from alpha_monitor.models import TokenInfo

logger = get_logger(__name__)

#: Raw pair = base id followed by one of the supported quote assets.
_PAIR_PATTERN = re.compile(r"^([A-Z0-9_]+)(USDT|USDC|BTC|ETH|BNB)$")


class SymbolResolver:
    """Lookup table from alpha ids to tickers, populated once at startup."""

    def __init__(self, tokens: list[TokenInfo] | None = None) -> None:
        self._id_to_symbol: dict[str, str] = {}
        self._available: list[str] = []
        if tokens:
            self.add_tokens(tokens)

    def add_tokens(self, tokens: list[TokenInfo]) -> None:
        """Register catalog entries."""
        for token in tokens:
            self._id_to_symbol[token.alpha_id] = token.symbol

    async def load(self, client: MarketDataClient) -> int:
        """Populate the table from the remote catalog.

        A catalog failure is not fatal: display names fall back to raw ids.

        Returns:
            Number of tokens loaded.
        """
        try:
            tokens = await client.fetch_token_catalog()
        except FetchError as e:
            logger.warning("token_catalog_unavailable", error=str(e))
            return 0

        self.add_tokens(tokens)
        logger.info("token_catalog_loaded", count=len(tokens))
        return len(tokens)

    def __len__(self) -> int:
        return len(self._id_to_symbol)

    def display_name(self, pair: str) -> str:
        """Replace the alpha id base of a raw pair with its ticker.

        Falls back to the raw pair when it does not parse or the base id
        is unknown.
        """
        if not pair:
            return ""

        match = _PAIR_PATTERN.match(pair)
        if match:
            base, quote = match.groups()
            symbol = self._id_to_symbol.get(base)
            if symbol:
                return f"{symbol}{quote}"
        return pair

    def resolve_pairs(self, requested: list[str], available: list[str]) -> list[str]:
        """Map configured pair names onto raw pair ids.

        Each requested entry may be a raw pair id or a display name; matching
        is case-insensitive. Order follows ``requested`` and duplicates are
        dropped. Unresolvable entries are logged with up to five close matches
        and skipped. ``available`` is kept for later searches.

        Raises:
            NoPairsToMonitorError: If nothing could be resolved.
        """
        self._available = list(available)
        by_raw = {p.upper(): p for p in available}
        by_display = {self.display_name(p).upper(): p for p in available}

        resolved: list[str] = []
        for name in requested:
            key = name.strip().upper()
            pair = by_raw.get(key) or by_display.get(key)
            if pair is None:
                logger.warning(
                    "pair_not_resolved",
                    requested=name,
                    suggestions=[
                        self.display_name(p) for p in self.search(_base_of(key))[:5]
                    ],
                )
                continue
            if pair not in resolved:
                resolved.append(pair)

        if not resolved:
            raise NoPairsToMonitorError(
                f"None of the configured pairs could be resolved: {requested}"
            )
        return resolved

    @property
    def available(self) -> list[str]:
        """Raw pair ids seen by the last resolve_pairs call."""
        return list(self._available)

    def search(self, keyword: str, available: list[str] | None = None) -> list[str]:
        """Return raw pairs whose raw id or display name contains ``keyword``.

        Searches ``available`` or, when omitted, the pairs kept by resolve_pairs.
        An empty keyword matches nothing.
        """
        needle = keyword.strip().upper()
        if not needle:
            return []
        candidates = self._available if available is None else available
        return [
            p
            for p in candidates
            if needle in p.upper() or needle in self.display_name(p).upper()
        ]


def _base_of(name: str) -> str:
    """Strip a supported quote suffix so "KOGUSDT" searches for "KOG"."""
    match = _PAIR_PATTERN.match(name)
    return match.group(1) if match else name
