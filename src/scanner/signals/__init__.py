"""Signal analysis: indicator math, the concurrent indicator calculator,
scoring profiles, and the composite scoring engine.
"""

from scanner.signals.calculator import IndicatorCalculator
from scanner.signals.composite import compute_explosion_score, normalize_capped
from scanner.signals.engine import ScoringEngine
from scanner.signals.indicators import (
    compute_percent_change,
    compute_rsi,
    compute_volatility,
    compute_volume_ratio,
    is_compressed,
)
from scanner.signals.profiles import PROFILES, RecommendationTier, ScoringProfile, get_profile

__all__ = [
    "PROFILES",
    "IndicatorCalculator",
    "RecommendationTier",
    "ScoringEngine",
    "ScoringProfile",
    "compute_explosion_score",
    "compute_percent_change",
    "compute_rsi",
    "compute_volatility",
    "compute_volume_ratio",
    "get_profile",
    "is_compressed",
    "normalize_capped",
]
