"""Composite explosion score aggregation.

Combines capped, 0-100-normalized indicator contributions with flat bonuses:

    score = w1 * norm(change_short, cap1)
          + w2 * norm(change_long,  cap2)
          + w3 * norm(volume_ratio, cap3)
          + w4 * (100 if rsi_min <= RSI <= rsi_max else 50)
          + new_listing_bonus (if new) + compression_bonus (if compressed)

    norm(x, cap) = min(x, cap) / cap * 100

The result is rounded half-up to whole points and is NOT clamped: bonuses
sit on top of terms that already reach 100, and negative momentum pulls
the score below zero.

CRITICAL: All computations use Decimal. Never use float for signal scores.
"""

from decimal import ROUND_HALF_UP, Decimal

from scanner.models import IndicatorSet
from scanner.signals.profiles import ScoringProfile

_HUNDRED = Decimal("100")
_RSI_OUT_OF_BAND = Decimal("50")
_FACTOR_QUANT = Decimal("0.01")


def normalize_capped(value: Decimal, cap: Decimal) -> Decimal:
    """Scale ``value`` to 0-100 against ``cap``; values above the cap score 100.

    There is no lower bound: a negative value yields a negative contribution.
    """
    return min(value, cap) / cap * _HUNDRED


def rsi_band_score(rsi: Decimal, rsi_min: Decimal, rsi_max: Decimal) -> Decimal:
    """100 inside the healthy band, 50 outside it."""
    return _HUNDRED if rsi_min <= rsi <= rsi_max else _RSI_OUT_OF_BAND


def compute_factors(indicators: IndicatorSet, profile: ScoringProfile) -> dict[str, Decimal]:
    """Weighted contribution of each factor, unrounded."""
    return {
        "change_short": profile.w_change_short
        * normalize_capped(indicators.change(profile.short_interval), profile.cap_change_short),
        "change_long": profile.w_change_long
        * normalize_capped(indicators.change(profile.long_interval), profile.cap_change_long),
        "volume": profile.w_volume
        * normalize_capped(indicators.volume_ratio, profile.cap_volume),
        "rsi": profile.w_rsi
        * rsi_band_score(indicators.rsi, profile.rsi_min, profile.rsi_max),
        "new_listing": profile.new_listing_bonus if indicators.is_new_listing else Decimal("0"),
        "compression": profile.compression_bonus if indicators.is_compressed else Decimal("0"),
    }


def compute_explosion_score(
    indicators: IndicatorSet, profile: ScoringProfile
) -> tuple[Decimal, dict[str, Decimal]]:
    """Compute the composite score and its factor breakdown.

    Returns:
        (score rounded to whole points, factors quantized to 2 dp)
    """
    factors = compute_factors(indicators, profile)
    score = sum(factors.values(), Decimal("0")).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    breakdown = {
        name: value.quantize(_FACTOR_QUANT, rounding=ROUND_HALF_UP)
        for name, value in factors.items()
    }
    return score, breakdown
