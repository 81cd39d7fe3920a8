"""Scoring engine: IndicatorSet + profile -> CompositeScore + Recommendation.

Stateless apart from logging. The score is a pure function of the
indicator values and the profile, so identical inputs always produce
identical output.
"""

from decimal import Decimal

from scanner.logging import get_logger
from scanner.models import (
    Candidate,
    CompositeScore,
    IndicatorSet,
    Recommendation,
    TickerSnapshot,
)
from scanner.signals.composite import compute_explosion_score
from scanner.signals.profiles import ScoringProfile

logger = get_logger(__name__)

_PRICE_QUANT = Decimal("0.00000001")


class ScoringEngine:
    """Applies a scoring profile to computed indicators."""

    def score(self, indicators: IndicatorSet, profile: ScoringProfile) -> CompositeScore:
        """Compute the composite score for one symbol under ``profile``."""
        value, factors = compute_explosion_score(indicators, profile)

        logger.debug(
            "composite_score",
            symbol=indicators.symbol,
            profile=profile.name,
            score=str(value),
            **{name: str(v) for name, v in factors.items()},
        )

        return CompositeScore(
            symbol=indicators.symbol,
            score=value,
            profile=profile.name,
            factors=factors,
        )

    def recommend(
        self, price: Decimal, score: Decimal, profile: ScoringProfile
    ) -> Recommendation:
        """Map a score onto the profile's tier table.

        The first tier (highest ``min_score`` first) the score reaches wins,
        which makes the mapping monotone in the score.
        """
        tier = next(t for t in profile.tiers if score >= t.min_score)
        return Recommendation(
            action=tier.action,
            buy_price=price,
            sell_target=(price * tier.target_multiplier).quantize(_PRICE_QUANT),
            stop_loss=(price * tier.stop_multiplier).quantize(_PRICE_QUANT),
            confidence=tier.confidence,
        )

    def build_candidate(
        self,
        ticker: TickerSnapshot,
        indicators: IndicatorSet,
        profile: ScoringProfile,
    ) -> Candidate:
        """Score a ticker's indicators and attach a recommendation."""
        composite = self.score(indicators, profile)
        return Candidate(
            symbol=ticker.symbol,
            price=ticker.last_price,
            indicators=indicators,
            score=composite,
            recommendation=self.recommend(ticker.last_price, composite.score, profile),
            price_change_percent_24h=ticker.price_change_percent_24h,
            quote_volume_24h=ticker.quote_volume_24h,
        )
