"""Exchange client layer -- Binance market data via ccxt."""

from scanner.exchange.binance_client import BinanceClient
from scanner.exchange.client import MarketDataClient

__all__ = ["BinanceClient", "MarketDataClient"]
