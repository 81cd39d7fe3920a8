"""Candidate filtering and ranking for explosion scans.

Applies threshold gates in a fixed order, short-circuiting on the first
failure, then ranks survivors by composite score.

Gate order:
  1. quote-asset suffix          (snapshot)
  2. not in the excluded list    (snapshot)
  3. min 24h quote volume        (snapshot)
  4. min short-timeframe change  (indicators)
  5. min long-timeframe change   (indicators)
  6. min volume ratio            (indicators)
  7. RSI within band             (indicators)
  8. composite score >= minimum  (score)

Gates 1-3 run before any candle is fetched, so rejected pairs cost nothing.
"""

from scanner.config import ScannerSettings
from scanner.models import Candidate, TickerSnapshot
from scanner.signals.profiles import ScoringProfile


class CandidateFilter:
    """Gates, sorts and truncates candidates for a scoring profile.

    Args:
        settings: Universe and result-size configuration.
    """

    def __init__(self, settings: ScannerSettings) -> None:
        self._settings = settings

    def snapshot_exclusion(
        self, ticker: TickerSnapshot, profile: ScoringProfile
    ) -> str | None:
        """Name of the first failing snapshot gate, or None if the ticker passes."""
        if not ticker.symbol.endswith(self._settings.quote_asset):
            return "quote_asset"
        if ticker.symbol in self._settings.excluded_symbols:
            return "excluded"
        if ticker.quote_volume_24h < profile.min_quote_volume:
            return "quote_volume"
        return None

    def candidate_exclusion(
        self, candidate: Candidate, profile: ScoringProfile
    ) -> str | None:
        """Name of the first failing indicator/score gate, or None."""
        indicators = candidate.indicators
        if indicators.change(profile.short_interval) < profile.min_change_short:
            return "change_short"
        if indicators.change(profile.long_interval) < profile.min_change_long:
            return "change_long"
        if indicators.volume_ratio < profile.min_volume_ratio:
            return "volume_ratio"
        if not profile.rsi_min <= indicators.rsi <= profile.rsi_max:
            return "rsi_band"
        if candidate.score.score < profile.min_score:
            return "score"
        return None

    def eligible(
        self, snapshot: list[TickerSnapshot], profile: ScoringProfile
    ) -> list[TickerSnapshot]:
        """Tickers passing the snapshot gates, capped at ``max_candidates``.

        When more tickers pass than the cap allows, the ones with the largest
        24h percent change are kept. The returned list preserves snapshot
        order so ranking ties stay stable.
        """
        passing = [
            (index, t)
            for index, t in enumerate(snapshot)
            if self.snapshot_exclusion(t, profile) is None
        ]
        if len(passing) > self._settings.max_candidates:
            by_change = sorted(
                passing, key=lambda it: it[1].price_change_percent_24h, reverse=True
            )
            passing = sorted(
                by_change[: self._settings.max_candidates], key=lambda it: it[0]
            )
        return [t for _, t in passing]

    def passes(self, candidate: Candidate, profile: ScoringProfile) -> bool:
        return self.candidate_exclusion(candidate, profile) is None

    def rank(self, candidates: list[Candidate]) -> list[Candidate]:
        """Sort by score descending (stable on ties) and keep the top results."""
        ranked = sorted(candidates, key=lambda c: c.score.score, reverse=True)
        return ranked[: self._settings.top_results]
