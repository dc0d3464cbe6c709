"""Tests for alpha id resolution and pair selection."""

from unittest.mock import AsyncMock

import pytest
import structlog

from alpha_monitor.exceptions import FetchUnavailableError, NoPairsToMonitorError
from alpha_monitor.market_data.symbol_resolver import SymbolResolver
from alpha_monitor.models import TokenInfo

TOKENS = [
    TokenInfo(alpha_id="ALPHA_175", symbol="KOGE"),
    TokenInfo(alpha_id="ALPHA_22", symbol="ZKJ"),
]

AVAILABLE = ["ALPHA_175USDT", "ALPHA_22USDT", "ALPHA_99USDC"]


@pytest.fixture
def resolver() -> SymbolResolver:
    return SymbolResolver(TOKENS)


class TestDisplayName:
    """Tests for display_name."""

    def test_known_base_is_replaced(self, resolver: SymbolResolver) -> None:
        assert resolver.display_name("ALPHA_175USDT") == "KOGEUSDT"

    def test_unknown_base_falls_back(self, resolver: SymbolResolver) -> None:
        assert resolver.display_name("ALPHA_99USDC") == "ALPHA_99USDC"

    def test_unsupported_quote_falls_back(self, resolver: SymbolResolver) -> None:
        assert resolver.display_name("ALPHA_175EUR") == "ALPHA_175EUR"

    def test_empty(self, resolver: SymbolResolver) -> None:
        assert resolver.display_name("") == ""

    def test_empty_catalog_returns_raw(self) -> None:
        assert SymbolResolver().display_name("ALPHA_175USDT") == "ALPHA_175USDT"


class TestLoad:
    """Tests for loading the catalog from a client."""

    @pytest.mark.asyncio
    async def test_load_populates_table(self) -> None:
        client = AsyncMock()
        client.fetch_token_catalog.return_value = TOKENS
        resolver = SymbolResolver()

        count = await resolver.load(client)

        assert count == 2
        assert len(resolver) == 2
        assert resolver.display_name("ALPHA_22USDT") == "ZKJUSDT"

    @pytest.mark.asyncio
    async def test_load_failure_degrades_to_raw_names(self) -> None:
        client = AsyncMock()
        client.fetch_token_catalog.side_effect = FetchUnavailableError("down")
        resolver = SymbolResolver()

        assert await resolver.load(client) == 0
        assert resolver.display_name("ALPHA_22USDT") == "ALPHA_22USDT"


class TestResolvePairs:
    """Tests for resolve_pairs."""

    def test_raw_and_display_names(self, resolver: SymbolResolver) -> None:
        pairs = resolver.resolve_pairs(["ALPHA_22USDT", "kogeusdt"], AVAILABLE)
        assert pairs == ["ALPHA_22USDT", "ALPHA_175USDT"]

    def test_duplicates_dropped(self, resolver: SymbolResolver) -> None:
        pairs = resolver.resolve_pairs(["KOGEUSDT", "ALPHA_175USDT"], AVAILABLE)
        assert pairs == ["ALPHA_175USDT"]

    def test_unknown_entries_skipped(self, resolver: SymbolResolver) -> None:
        pairs = resolver.resolve_pairs(["NOPEUSDT", "ZKJUSDT"], AVAILABLE)
        assert pairs == ["ALPHA_22USDT"]

    def test_nothing_resolvable_raises(self, resolver: SymbolResolver) -> None:
        with pytest.raises(NoPairsToMonitorError):
            resolver.resolve_pairs(["NOPEUSDT"], AVAILABLE)


class TestSearch:
    """Tests for keyword search."""

    def test_matches_display_name(self, resolver: SymbolResolver) -> None:
        assert resolver.search("koge", AVAILABLE) == ["ALPHA_175USDT"]

    def test_matches_raw_id(self, resolver: SymbolResolver) -> None:
        assert resolver.search("usdc", AVAILABLE) == ["ALPHA_99USDC"]

    def test_defaults_to_pairs_from_resolve(self, resolver: SymbolResolver) -> None:
        resolver.resolve_pairs(["KOGEUSDT"], AVAILABLE)
        assert resolver.available == AVAILABLE
        assert resolver.search("zkj") == ["ALPHA_22USDT"]

    def test_empty_keyword_matches_nothing(self, resolver: SymbolResolver) -> None:
        assert resolver.search("  ", AVAILABLE) == []

    def test_unresolved_entry_logs_suggestions(self, resolver: SymbolResolver) -> None:
        with structlog.testing.capture_logs() as logs:
            resolver.resolve_pairs(["KOGUSDT", "ZKJUSDT"], AVAILABLE)

        warning = next(e for e in logs if e["event"] == "pair_not_resolved")
        assert warning["requested"] == "KOGUSDT"
        assert warning["suggestions"] == ["KOGEUSDT"]
