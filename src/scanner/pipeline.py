"""Scanner pipeline -- wires client, calculator, engine, filter and cache.

One call to ``run`` is one scan:
  1. SNAPSHOT: fetch all 24h tickers (short-lived cache)
  2. ELIGIBLE: quote asset, denylist and 24h volume gates, capped fan-out
  3. INDICATORS: per eligible symbol, concurrently, five candle fetches
  4. SCORE: composite score + recommendation under the chosen profile
  5. FILTER & RANK: indicator/score gates, sort, truncate
  6. CACHE: the ranked list, keyed by profile

A snapshot failure aborts the scan with UpstreamUnavailable. Any failure
inside a single symbol's indicators degrades that indicator to its default
and the scan continues.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from scanner.config import AppSettings
from scanner.exceptions import InvalidSymbol, UpstreamUnavailable
from scanner.exchange.client import MarketDataClient
from scanner.logging import get_logger
from scanner.market_data.candidate_filter import CandidateFilter
from scanner.market_data.result_cache import ResultCache
from scanner.models import Candidate, ListingInfo, TickerSnapshot
from scanner.signals.calculator import IndicatorCalculator
from scanner.signals.engine import ScoringEngine
from scanner.signals.profiles import ScoringProfile, get_profile

logger = get_logger(__name__)

_MS_PER_DAY = 86_400_000

_SNAPSHOT_KEY = "snapshot"
_EXCHANGE_INFO_KEY = "exchange_info"


class ScannerPipeline:
    """Ranks explosion candidates from live market data.

    Args:
        settings: Application-wide settings.
        client: Market-data client (shared by every stage).
        cache: Result cache owned by this pipeline. A fresh one is created
            when omitted.
        clock: Returns Unix seconds; drives new-listing age and candle
            lookback windows.
    """

    def __init__(
        self,
        settings: AppSettings,
        client: MarketDataClient,
        cache: ResultCache | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._client = client
        if cache is None:
            cache = ResultCache(default_ttl=settings.cache.short_ttl)
        self._cache = cache
        self._clock = clock
        self._calculator = IndicatorCalculator(client, settings.indicators, clock=clock)
        self._engine = ScoringEngine()
        self._filter = CandidateFilter(settings.scanner)

    @property
    def cache(self) -> ResultCache:
        return self._cache

    async def close(self) -> None:
        """Release the market-data client."""
        await self._client.close()

    # ──────────────────────────────────────────────
    # Cached entry points
    # ──────────────────────────────────────────────

    async def run(self, profile_name: str | None = None) -> list[Candidate]:
        """Ranked candidates for a profile, served from cache when fresh."""
        profile = get_profile(profile_name or self._settings.scanner.default_profile)
        key = f"candidates:{profile.name}"

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        snapshot = await self.fetch_snapshot()
        ranked = await self.compute_candidates(snapshot, profile)
        self._cache.set(key, ranked, self._settings.cache.short_ttl)
        return ranked

    async def alerts(self) -> list[Candidate]:
        """Ranked pre-explosion alerts (cached like ``run``)."""
        return await self.run(self._settings.scanner.alert_profile)

    async def fetch_snapshot(self) -> list[TickerSnapshot]:
        """24h tickers, cached for ``snapshot_ttl`` seconds.

        Raises:
            UpstreamUnavailable: if the snapshot cannot be fetched.
        """
        cached = self._cache.get(_SNAPSHOT_KEY)
        if cached is not None:
            return cached

        snapshot = await self._client.fetch_snapshot()
        self._cache.set(_SNAPSHOT_KEY, snapshot, self._settings.cache.snapshot_ttl)
        logger.info("snapshot_fetched", pairs=len(snapshot))
        return snapshot

    # ──────────────────────────────────────────────
    # Pure-given-inputs computations
    # ──────────────────────────────────────────────

    async def compute_candidates(
        self,
        snapshot: list[TickerSnapshot],
        profile: ScoringProfile | str,
    ) -> list[Candidate]:
        """Gate, score and rank the snapshot under ``profile``."""
        if isinstance(profile, str):
            profile = get_profile(profile)

        eligible = self._filter.eligible(snapshot, profile)
        new_listings = await self._new_listing_symbols() if eligible else set()

        candidates = await asyncio.gather(
            *(
                self._evaluate(ticker, profile, ticker.symbol in new_listings)
                for ticker in eligible
            )
        )

        survivors: list[Candidate] = []
        for candidate in candidates:
            reason = self._filter.candidate_exclusion(candidate, profile)
            if reason is None:
                survivors.append(candidate)
                continue
            logger.debug(
                "candidate_excluded",
                symbol=candidate.symbol,
                gate=reason,
                score=str(candidate.score.score),
            )

        ranked = self._filter.rank(survivors)
        logger.info(
            "candidates_ranked",
            profile=profile.name,
            snapshot=len(snapshot),
            eligible=len(eligible),
            passed=len(survivors),
            returned=len(ranked),
            top=[c.symbol for c in ranked],
        )
        return ranked

    async def compute_alerts(
        self,
        snapshot: list[TickerSnapshot],
        profile: ScoringProfile | str | None = None,
    ) -> list[Candidate]:
        """Same pipeline as ``compute_candidates`` with the alert profile by default."""
        return await self.compute_candidates(
            snapshot, profile or self._settings.scanner.alert_profile
        )

    async def analyze_one(
        self, symbol: str, profile_name: str | None = None
    ) -> Candidate:
        """Score a single symbol without applying any gate.

        Raises:
            InvalidSymbol: if the symbol is not in the current snapshot.
            UpstreamUnavailable: if the snapshot cannot be fetched.
        """
        profile = get_profile(profile_name or self._settings.scanner.default_profile)
        symbol = symbol.strip().upper()

        snapshot = await self.fetch_snapshot()
        ticker = next((t for t in snapshot if t.symbol == symbol), None)
        if ticker is None:
            raise InvalidSymbol(symbol)

        new_listings = await self._new_listing_symbols()
        candidate = await self._evaluate(ticker, profile, symbol in new_listings)
        logger.info(
            "symbol_analyzed",
            symbol=symbol,
            profile=profile.name,
            score=str(candidate.score.score),
            action=candidate.recommendation.action.value,
        )
        return candidate

    # ──────────────────────────────────────────────
    # Snapshot-only listings
    # ──────────────────────────────────────────────

    async def top_gainers(self, limit: int | None = None) -> list[TickerSnapshot]:
        """Largest 24h gainers among liquid, non-excluded quote-asset pairs."""
        scanner = self._settings.scanner
        snapshot = await self.fetch_snapshot()
        gainers = [
            t
            for t in snapshot
            if t.symbol.endswith(scanner.quote_asset)
            and t.symbol not in scanner.excluded_symbols
            and t.volume_24h >= scanner.min_volume_regular
        ]
        gainers.sort(key=lambda t: t.price_change_percent_24h, reverse=True)
        return gainers[: limit or scanner.top_results]

    async def new_listings(self, limit: int | None = None) -> list[ListingInfo]:
        """Most recently onboarded quote-asset pairs, newest first.

        Raises:
            UpstreamUnavailable: if exchange info cannot be fetched.
        """
        scanner = self._settings.scanner
        listings = [
            listing
            for listing in await self._exchange_info()
            if listing.symbol.endswith(scanner.quote_asset)
            and listing.symbol not in scanner.excluded_symbols
        ]
        listings.sort(key=lambda item: item.onboard_date or 0, reverse=True)
        return listings[: limit or scanner.top_results]

    # ──────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────

    async def _evaluate(
        self, ticker: TickerSnapshot, profile: ScoringProfile, is_new_listing: bool
    ) -> Candidate:
        indicators = await self._calculator.compute(
            ticker,
            short_interval=profile.short_interval,
            long_interval=profile.long_interval,
            is_new_listing=is_new_listing,
        )
        return self._engine.build_candidate(ticker, indicators, profile)

    async def _exchange_info(self) -> list[ListingInfo]:
        cached = self._cache.get(_EXCHANGE_INFO_KEY)
        if cached is not None:
            return cached

        listings = await self._client.fetch_exchange_info()
        self._cache.set(_EXCHANGE_INFO_KEY, listings, self._settings.cache.long_ttl)
        return listings

    async def _new_listing_symbols(self) -> set[str]:
        """Symbols onboarded within ``new_listing_days``; empty if metadata is down."""
        try:
            listings = await self._exchange_info()
        except UpstreamUnavailable as e:
            logger.warning("exchange_info_unavailable", error=str(e))
            return set()

        cutoff = int(self._clock() * 1000) - self._settings.scanner.new_listing_days * _MS_PER_DAY
        return {
            listing.symbol
            for listing in listings
            if listing.onboard_date is not None and listing.onboard_date >= cutoff
        }
