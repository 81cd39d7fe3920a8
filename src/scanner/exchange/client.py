"""Abstract market-data client interface.

Defines the read-only contract the scanner needs from an exchange.
Indicator and pipeline code depends only on this interface, keeping
Binance-specific details isolated in the concrete implementation.

Every method either returns parsed models or raises UpstreamUnavailable;
implementations must never turn an upstream failure into an empty result.
"""

from abc import ABC, abstractmethod

from scanner.models import CandleSeries, ListingInfo, TickerSnapshot


class MarketDataClient(ABC):
    """Abstract base class for market-data API clients."""

    @abstractmethod
    async def close(self) -> None:
        """Clean up network resources (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_snapshot(self) -> list[TickerSnapshot]:
        """Fetch the 24h ticker for every trading pair in one call."""
        ...

    @abstractmethod
    async def fetch_candles(
        self,
        symbol: str,
        interval: str,
        limit: int,
        start_time: int | None = None,
    ) -> CandleSeries:
        """Fetch OHLCV candles, returned oldest first.

        Args:
            symbol: Exchange symbol (e.g. "FOOUSDT").
            interval: Candle interval (e.g. "5m", "1h", "1d").
            limit: Maximum number of candles.
            start_time: Optional start in Unix milliseconds.
        """
        ...

    @abstractmethod
    async def fetch_exchange_info(self) -> list[ListingInfo]:
        """Return symbol metadata with onboard dates for new-listing detection."""
        ...
