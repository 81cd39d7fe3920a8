"""Named scoring profiles: weights, caps, bonuses, gate thresholds and tiers.

Three built-in profiles share one scoring formula and differ only in data:

- explosion: momentum already under way (5m/1h), strict gates
- pre_explosion: alert profile rewarding volatility compression, looser gates
- top_gainer: slower timeframes (1h/4h), no indicator gates

Profiles are plain frozen records; callers select one by name.
"""

from dataclasses import dataclass
from decimal import Decimal

from scanner.exceptions import UnknownProfile
from scanner.models import RecommendationAction


@dataclass(frozen=True)
class RecommendationTier:
    """One step of the score -> recommendation step function."""

    min_score: Decimal
    action: RecommendationAction
    confidence: str
    target_multiplier: Decimal
    stop_multiplier: Decimal


#: Ordered by descending min_score; the last tier must accept any score.
DEFAULT_TIERS: tuple[RecommendationTier, ...] = (
    RecommendationTier(
        Decimal("100"), RecommendationAction.EXPLOSION_IMMINENT, "extreme",
        Decimal("1.50"), Decimal("0.93"),
    ),
    RecommendationTier(
        Decimal("80"), RecommendationAction.STRONG_BUY, "very_high",
        Decimal("1.25"), Decimal("0.95"),
    ),
    RecommendationTier(
        Decimal("60"), RecommendationAction.MONITOR, "medium",
        Decimal("1.10"), Decimal("0.95"),
    ),
    RecommendationTier(
        Decimal("-Infinity"), RecommendationAction.AVOID, "low",
        Decimal("1.00"), Decimal("0.95"),
    ),
)


@dataclass(frozen=True)
class ScoringProfile:
    """Configuration for one scoring/filtering mode."""

    name: str
    short_interval: str = "5m"
    long_interval: str = "1h"

    # Composite weights
    w_change_short: Decimal = Decimal("0.35")
    w_change_long: Decimal = Decimal("0.15")
    w_volume: Decimal = Decimal("0.30")
    w_rsi: Decimal = Decimal("0.10")

    # Normalization caps
    cap_change_short: Decimal = Decimal("25")
    cap_change_long: Decimal = Decimal("35")
    cap_volume: Decimal = Decimal("10")

    # RSI "healthy momentum" band
    rsi_min: Decimal = Decimal("40")
    rsi_max: Decimal = Decimal("70")

    # Flat bonuses
    new_listing_bonus: Decimal = Decimal("20")
    compression_bonus: Decimal = Decimal("10")

    # Gates
    min_quote_volume: Decimal = Decimal("200000")
    min_change_short: Decimal = Decimal("4")
    min_change_long: Decimal = Decimal("6")
    min_volume_ratio: Decimal = Decimal("2.0")
    min_score: Decimal = Decimal("60")

    tiers: tuple[RecommendationTier, ...] = DEFAULT_TIERS


PROFILES: dict[str, ScoringProfile] = {
    "explosion": ScoringProfile(name="explosion"),
    "pre_explosion": ScoringProfile(
        name="pre_explosion",
        rsi_min=Decimal("35"),
        rsi_max=Decimal("65"),
        compression_bonus=Decimal("25"),
        min_change_short=Decimal("1"),
        min_change_long=Decimal("2"),
        min_volume_ratio=Decimal("1.5"),
        min_score=Decimal("45"),
    ),
    "top_gainer": ScoringProfile(
        name="top_gainer",
        short_interval="1h",
        long_interval="4h",
        w_change_short=Decimal("0.40"),
        w_change_long=Decimal("0.25"),
        w_volume=Decimal("0.25"),
        w_rsi=Decimal("0.10"),
        cap_change_short=Decimal("15"),
        cap_change_long=Decimal("40"),
        rsi_min=Decimal("30"),
        rsi_max=Decimal("80"),
        new_listing_bonus=Decimal("10"),
        compression_bonus=Decimal("0"),
        min_quote_volume=Decimal("50000"),
        min_change_short=Decimal("-Infinity"),
        min_change_long=Decimal("-Infinity"),
        min_volume_ratio=Decimal("0"),
        min_score=Decimal("-Infinity"),
    ),
}


def get_profile(name: str) -> ScoringProfile:
    """Look up a built-in profile by name.

    Raises:
        UnknownProfile: if no profile is registered under ``name``.
    """
    try:
        return PROFILES[name]
    except KeyError:
        raise UnknownProfile(name) from None
