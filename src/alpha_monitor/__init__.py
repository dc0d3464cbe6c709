"""Trade-window stability monitor for Binance Alpha trading pairs."""

__version__ = "0.1.0"
