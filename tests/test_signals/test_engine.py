"""Tests for ScoringEngine.

Tests verify:
- score() wraps compute_explosion_score with the profile name and factors
- recommend() maps scores to tiers at and around each boundary
- recommend() derives target/stop from the entry price
- build_candidate() carries ticker fields through
"""

from decimal import Decimal

import pytest

from scanner.models import IndicatorSet, RecommendationAction, TickerSnapshot
from scanner.signals.engine import ScoringEngine
from scanner.signals.profiles import PROFILES


def _make_indicators(**overrides) -> IndicatorSet:
    defaults = dict(
        symbol="FOOUSDT",
        rsi=Decimal("55"),
        change_percent={"5m": Decimal("5"), "1h": Decimal("8")},
        volume_ratio=Decimal("3"),
        volatility=Decimal("2"),
        is_compressed=False,
        is_new_listing=False,
    )
    defaults.update(overrides)
    return IndicatorSet(**defaults)


def _make_ticker(price: str = "2.5") -> TickerSnapshot:
    return TickerSnapshot(
        symbol="FOOUSDT",
        last_price=Decimal(price),
        price_change_percent_24h=Decimal("12.5"),
        quote_volume_24h=Decimal("750000"),
        volume_24h=Decimal("300000"),
        trade_count=4200,
        timestamp=1_700_000_000_000,
    )


@pytest.fixture
def engine() -> ScoringEngine:
    return ScoringEngine()


class TestScore:
    """Tests for ScoringEngine.score."""

    def test_carries_profile_and_symbol(self, engine: ScoringEngine) -> None:
        result = engine.score(_make_indicators(), PROFILES["explosion"])
        assert result.symbol == "FOOUSDT"
        assert result.profile == "explosion"
        assert result.score == Decimal("29")

    def test_factors_present(self, engine: ScoringEngine) -> None:
        result = engine.score(_make_indicators(), PROFILES["explosion"])
        assert set(result.factors) == {
            "change_short", "change_long", "volume", "rsi", "new_listing", "compression",
        }


class TestRecommend:
    """Tests for the score -> recommendation step function."""

    @pytest.mark.parametrize(
        "score, action, confidence",
        [
            ("120", RecommendationAction.EXPLOSION_IMMINENT, "extreme"),
            ("100", RecommendationAction.EXPLOSION_IMMINENT, "extreme"),
            ("99", RecommendationAction.STRONG_BUY, "very_high"),
            ("85", RecommendationAction.STRONG_BUY, "very_high"),
            ("80", RecommendationAction.STRONG_BUY, "very_high"),
            ("79", RecommendationAction.MONITOR, "medium"),
            ("60", RecommendationAction.MONITOR, "medium"),
            ("59", RecommendationAction.AVOID, "low"),
            ("-15", RecommendationAction.AVOID, "low"),
        ],
    )
    def test_tier_boundaries(
        self,
        engine: ScoringEngine,
        score: str,
        action: RecommendationAction,
        confidence: str,
    ) -> None:
        rec = engine.recommend(Decimal("1"), Decimal(score), PROFILES["explosion"])
        assert rec.action == action
        assert rec.confidence == confidence

    def test_explosion_imminent_prices(self, engine: ScoringEngine) -> None:
        rec = engine.recommend(Decimal("2"), Decimal("110"), PROFILES["explosion"])
        assert rec.buy_price == Decimal("2")
        assert rec.sell_target == Decimal("3.00000000")
        assert rec.stop_loss == Decimal("1.86000000")

    def test_strong_buy_prices(self, engine: ScoringEngine) -> None:
        rec = engine.recommend(Decimal("2"), Decimal("85"), PROFILES["explosion"])
        assert rec.sell_target == Decimal("2.5")
        assert rec.stop_loss == Decimal("1.9")

    def test_monitor_prices(self, engine: ScoringEngine) -> None:
        rec = engine.recommend(Decimal("10"), Decimal("60"), PROFILES["explosion"])
        assert rec.sell_target == Decimal("11")
        assert rec.stop_loss == Decimal("9.5")

    def test_tiny_price_quantized_to_eight_places(self, engine: ScoringEngine) -> None:
        rec = engine.recommend(Decimal("0.00001237"), Decimal("85"), PROFILES["explosion"])
        assert rec.sell_target == Decimal("0.00001546")
        assert rec.stop_loss == Decimal("0.00001175")

    def test_monotone_in_score(self, engine: ScoringEngine) -> None:
        order = [
            RecommendationAction.AVOID,
            RecommendationAction.MONITOR,
            RecommendationAction.STRONG_BUY,
            RecommendationAction.EXPLOSION_IMMINENT,
        ]
        ranks = [
            order.index(
                engine.recommend(Decimal("1"), Decimal(s), PROFILES["explosion"]).action
            )
            for s in range(-10, 131, 5)
        ]
        assert ranks == sorted(ranks)


class TestBuildCandidate:
    """Tests for ScoringEngine.build_candidate."""

    def test_carries_ticker_fields(self, engine: ScoringEngine) -> None:
        candidate = engine.build_candidate(
            _make_ticker(), _make_indicators(), PROFILES["explosion"]
        )
        assert candidate.symbol == "FOOUSDT"
        assert candidate.price == Decimal("2.5")
        assert candidate.price_change_percent_24h == Decimal("12.5")
        assert candidate.quote_volume_24h == Decimal("750000")
        assert candidate.score.score == Decimal("29")
        assert candidate.recommendation.action == RecommendationAction.AVOID
        assert candidate.recommendation.buy_price == Decimal("2.5")
