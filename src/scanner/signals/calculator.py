"""Indicator calculator: fetches candles per symbol and applies the indicator math.

For one symbol the five candle fetches (short change, long change, RSI,
volume baseline, volatility window) are independent and issued concurrently.
Each indicator catches its own UpstreamUnavailable / InsufficientData and
falls back to its documented default, so one bad fetch never blocks or
fails the others. Compression is derived from the volatility standard
deviation and needs no fetch of its own.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from decimal import Decimal

from scanner.config import IndicatorSettings
from scanner.exceptions import InsufficientData, UpstreamUnavailable
from scanner.exchange.client import MarketDataClient
from scanner.logging import get_logger
from scanner.models import IndicatorSet, TickerSnapshot
from scanner.signals.indicators import (
    DEFAULT_PERCENT_CHANGE,
    DEFAULT_RSI,
    DEFAULT_VOLATILITY,
    DEFAULT_VOLUME_RATIO,
    average_volume,
    compute_percent_change,
    compute_rsi,
    compute_volatility,
    compute_volume_ratio,
    is_compressed,
)

logger = get_logger(__name__)

_MS_PER_DAY = 86_400_000


class IndicatorCalculator:
    """Computes an IndicatorSet for a symbol from fresh candle data.

    Args:
        client: Market-data client used for every candle fetch.
        settings: Indicator lookbacks, intervals and thresholds.
        clock: Returns Unix seconds; used for the volume lookback start time.
    """

    def __init__(
        self,
        client: MarketDataClient,
        settings: IndicatorSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._settings = settings
        self._clock = clock

    async def compute(
        self,
        ticker: TickerSnapshot,
        short_interval: str,
        long_interval: str,
        is_new_listing: bool = False,
    ) -> IndicatorSet:
        """Compute every indicator for one ticker, fetching concurrently."""
        symbol = ticker.symbol
        change_short, change_long, rsi, volume_ratio, std_dev = await asyncio.gather(
            self.percent_change(symbol, short_interval),
            self.percent_change(symbol, long_interval),
            self.rsi(symbol),
            self.volume_ratio(symbol, ticker.volume_24h),
            self._std_dev(symbol, self._settings.volatility_window),
        )

        if std_dev is None:
            volatility = DEFAULT_VOLATILITY
            compressed = False
        else:
            volatility = std_dev
            compressed = is_compressed(std_dev, self._settings.compression_threshold)

        return IndicatorSet(
            symbol=symbol,
            rsi=rsi,
            change_percent={short_interval: change_short, long_interval: change_long},
            volume_ratio=volume_ratio,
            volatility=volatility,
            is_compressed=compressed,
            is_new_listing=is_new_listing,
        )

    async def percent_change(self, symbol: str, interval: str) -> Decimal:
        """Percent change of the most recent candle of ``interval``; 0 on failure."""
        try:
            closes = await self._fetch_closes(symbol, interval, limit=2, required=2)
        except (UpstreamUnavailable, InsufficientData) as e:
            return self._fallback("percent_change", symbol, e, DEFAULT_PERCENT_CHANGE)
        return compute_percent_change(closes)

    async def rsi(self, symbol: str, period: int | None = None) -> Decimal:
        """RSI over ``period + 1`` candles of the RSI interval; 50 on failure."""
        period = period or self._settings.rsi_period
        try:
            closes = await self._fetch_closes(
                symbol,
                self._settings.rsi_interval,
                limit=period + 1,
                required=period + 1,
            )
        except (UpstreamUnavailable, InsufficientData) as e:
            return self._fallback("rsi", symbol, e, DEFAULT_RSI)
        return compute_rsi(closes, period)

    async def volume_ratio(
        self,
        symbol: str,
        current_volume: Decimal,
        lookback_days: int | None = None,
    ) -> Decimal:
        """Current 24h volume relative to the daily average over the lookback; 1 on failure."""
        lookback_days = lookback_days or self._settings.volume_lookback_days
        start_time = int(self._clock() * 1000) - lookback_days * _MS_PER_DAY
        try:
            series = await self._client.fetch_candles(
                symbol, "1d", limit=lookback_days, start_time=start_time
            )
            if len(series) == 0:
                raise InsufficientData(symbol, required=1, available=0)
        except (UpstreamUnavailable, InsufficientData) as e:
            return self._fallback("volume_ratio", symbol, e, DEFAULT_VOLUME_RATIO)
        return compute_volume_ratio(current_volume, average_volume(series.volumes))

    async def volatility(self, symbol: str, window: int | None = None) -> Decimal:
        """Std dev of short-interval percent changes; 10 on failure."""
        std_dev = await self._std_dev(symbol, window or self._settings.volatility_window)
        return DEFAULT_VOLATILITY if std_dev is None else std_dev

    async def compression_detected(
        self,
        symbol: str,
        threshold: Decimal | None = None,
        window: int | None = None,
    ) -> bool:
        """True when volatility is below ``threshold``; False on failure."""
        std_dev = await self._std_dev(symbol, window or self._settings.volatility_window)
        if std_dev is None:
            return False
        if threshold is None:
            threshold = self._settings.compression_threshold
        return is_compressed(std_dev, threshold)

    async def _std_dev(self, symbol: str, window: int) -> Decimal | None:
        """Volatility std dev, or None when the candles could not be obtained."""
        try:
            closes = await self._fetch_closes(
                symbol,
                self._settings.volatility_interval,
                limit=window,
                required=3,
            )
        except (UpstreamUnavailable, InsufficientData) as e:
            self._fallback("volatility", symbol, e, DEFAULT_VOLATILITY)
            return None
        return compute_volatility(closes)

    async def _fetch_closes(
        self, symbol: str, interval: str, limit: int, required: int
    ) -> list[Decimal]:
        """Fetch closes, raising InsufficientData if the upstream returns too few."""
        series = await self._client.fetch_candles(symbol, interval, limit=limit)
        if len(series) < required:
            raise InsufficientData(symbol, required=required, available=len(series))
        return series.closes

    @staticmethod
    def _fallback(indicator: str, symbol: str, error: Exception, default):
        logger.debug(
            "indicator_fallback",
            indicator=indicator,
            symbol=symbol,
            default=str(default),
            error=str(error),
        )
        return default
