"""Binance market-data client implementation via ccxt async.

Uses ccxt's raw ("implicit") Binance REST endpoints rather than the unified
API so the upstream field names (lastPrice, quoteVolume, count, onboardDate)
reach the parser untouched:

- GET /api/v3/ticker/24hr   -> publicGetTicker24hr
- GET /api/v3/klines        -> publicGetKlines
- GET /fapi/v1/exchangeInfo -> fapiPublicGetExchangeInfo (carries onboardDate)

Every call runs under a shared asyncio.Semaphore so a run fanning out over
many symbols never has more than ``max_concurrent_requests`` calls in flight,
and under asyncio.wait_for so no call outlives ``request_timeout``.
"""

import asyncio
from collections.abc import Awaitable, Callable
from decimal import Decimal, InvalidOperation
from typing import Any

import ccxt.async_support as ccxt_async

from scanner.config import ExchangeSettings
from scanner.exceptions import UpstreamUnavailable
from scanner.exchange.client import MarketDataClient
from scanner.logging import get_logger
from scanner.models import Candle, CandleSeries, ListingInfo, TickerSnapshot

logger = get_logger(__name__)


def _finite(value: object) -> Decimal:
    """Decimal(str(value)), rejecting NaN and Infinity."""
    result = Decimal(str(value))
    if not result.is_finite():
        raise ValueError(f"non-finite value: {value!r}")
    return result


def parse_ticker(raw: dict) -> TickerSnapshot:
    """Convert one raw /ticker/24hr entry into a TickerSnapshot.

    Raises:
        KeyError, InvalidOperation, ValueError: on malformed or non-finite fields.
    """
    return TickerSnapshot(
        symbol=raw["symbol"],
        last_price=_finite(raw["lastPrice"]),
        price_change_percent_24h=_finite(raw["priceChangePercent"]),
        quote_volume_24h=_finite(raw["quoteVolume"]),
        volume_24h=_finite(raw.get("volume", "0")),
        trade_count=int(raw.get("count", 0)),
        timestamp=int(raw.get("closeTime", 0)),
    )


def parse_kline(raw: list) -> Candle:
    """Convert one raw kline tuple [openTime, open, high, low, close, volume, ...].

    Raises:
        IndexError, InvalidOperation, ValueError: on malformed or non-finite fields.
    """
    return Candle(
        open_time=int(raw[0]),
        open=_finite(raw[1]),
        high=_finite(raw[2]),
        low=_finite(raw[3]),
        close=_finite(raw[4]),
        volume=_finite(raw[5]),
    )


class BinanceClient(MarketDataClient):
    """Concrete Binance market-data client using ccxt async."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings

        config: dict = {
            "enableRateLimit": True,
            "timeout": int(settings.request_timeout * 1000),
        }
        api_key = settings.api_key.get_secret_value()
        if api_key:
            config["apiKey"] = api_key

        self._exchange = ccxt_async.binance(config)
        self._semaphore = asyncio.Semaphore(settings.max_concurrent_requests)

    @property
    def exchange(self) -> ccxt_async.binance:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_binance_connection")
        await self._exchange.close()

    async def fetch_snapshot(self) -> list[TickerSnapshot]:
        """Fetch all 24h tickers. Duplicate symbols keep their first occurrence."""
        payload = await self._call("ticker_24hr", self._exchange.publicGetTicker24hr)
        if not isinstance(payload, list):
            raise UpstreamUnavailable("ticker/24hr: expected a list of tickers")

        snapshot: list[TickerSnapshot] = []
        seen: set[str] = set()
        for raw in payload:
            try:
                ticker = parse_ticker(raw)
            except (KeyError, TypeError, ValueError, InvalidOperation):
                logger.warning("invalid_ticker_skipped", raw=raw)
                continue
            if ticker.symbol in seen:
                continue
            seen.add(ticker.symbol)
            snapshot.append(ticker)

        logger.debug("snapshot_fetched", count=len(snapshot))
        return snapshot

    async def fetch_candles(
        self,
        symbol: str,
        interval: str,
        limit: int,
        start_time: int | None = None,
    ) -> CandleSeries:
        """Fetch klines. Binance returns them oldest first already."""
        params: dict[str, Any] = {"symbol": symbol, "interval": interval, "limit": limit}
        if start_time is not None:
            params["startTime"] = start_time

        payload = await self._call("klines", self._exchange.publicGetKlines, params)
        try:
            candles = [parse_kline(raw) for raw in payload]
        except (IndexError, TypeError, ValueError, InvalidOperation) as e:
            raise UpstreamUnavailable(f"klines {symbol} {interval}: malformed payload") from e

        candles.sort(key=lambda c: c.open_time)
        return CandleSeries(symbol=symbol, interval=interval, candles=candles)

    async def fetch_exchange_info(self) -> list[ListingInfo]:
        """Fetch symbol onboard dates from the futures exchange-info endpoint."""
        payload = await self._call(
            "exchange_info", self._exchange.fapiPublicGetExchangeInfo
        )
        symbols = payload.get("symbols") if isinstance(payload, dict) else None
        if not isinstance(symbols, list):
            raise UpstreamUnavailable("exchangeInfo: missing symbols list")

        listings: list[ListingInfo] = []
        for entry in symbols:
            try:
                symbol = entry.get("symbol")
                onboard = entry.get("onboardDate")
                onboard_date = int(onboard) if onboard else None
            except (AttributeError, TypeError, ValueError):
                logger.warning("invalid_listing_skipped", raw=entry)
                continue
            if not symbol:
                continue
            listings.append(ListingInfo(symbol=symbol, onboard_date=onboard_date))
        logger.debug("exchange_info_fetched", count=len(listings))
        return listings

    async def _call(
        self,
        endpoint: str,
        method: Callable[..., Awaitable[Any]],
        params: dict | None = None,
    ) -> Any:
        """Run one bounded, time-limited upstream call.

        Raises:
            UpstreamUnavailable: on any ccxt error or timeout. No retries.
        """
        async with self._semaphore:
            try:
                return await asyncio.wait_for(
                    method(params or {}), timeout=self._settings.request_timeout
                )
            except asyncio.TimeoutError as e:
                logger.warning(
                    "upstream_timeout",
                    endpoint=endpoint,
                    timeout=self._settings.request_timeout,
                )
                raise UpstreamUnavailable(f"{endpoint}: timed out") from e
            except ccxt_async.BaseError as e:
                logger.warning("upstream_error", endpoint=endpoint, error=str(e))
                raise UpstreamUnavailable(f"{endpoint}: {e}") from e
