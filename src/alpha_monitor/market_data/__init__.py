"""Market data layer -- rolling trade cache and alpha symbol resolution."""

from alpha_monitor.market_data.symbol_resolver import SymbolResolver
from alpha_monitor.market_data.trade_cache import TradeWindowCache

__all__ = ["SymbolResolver", "TradeWindowCache"]
