"""Tests for composite explosion score aggregation.

Tests verify:
- normalize_capped: below cap, at cap, above cap, negative
- compute_explosion_score: reference example, bonuses, no clamping, RSI band
- determinism and monotonicity in each capped term
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from scanner.models import IndicatorSet
from scanner.signals.composite import (
    compute_explosion_score,
    normalize_capped,
    rsi_band_score,
)
from scanner.signals.profiles import PROFILES


def _indicators(
    change_5m: str = "5",
    change_1h: str = "8",
    volume_ratio: str = "3",
    rsi: str = "55",
    compressed: bool = False,
    new_listing: bool = False,
) -> IndicatorSet:
    return IndicatorSet(
        symbol="FOOUSDT",
        rsi=Decimal(rsi),
        change_percent={"5m": Decimal(change_5m), "1h": Decimal(change_1h)},
        volume_ratio=Decimal(volume_ratio),
        volatility=Decimal("2"),
        is_compressed=compressed,
        is_new_listing=new_listing,
    )


class TestNormalizeCapped:
    """Tests for normalize_capped."""

    def test_below_cap_is_proportional(self) -> None:
        assert normalize_capped(Decimal("5"), Decimal("25")) == Decimal("20")

    def test_at_cap_is_100(self) -> None:
        assert normalize_capped(Decimal("10"), Decimal("10")) == Decimal("100")

    def test_above_cap_is_capped(self) -> None:
        assert normalize_capped(Decimal("80"), Decimal("35")) == Decimal("100")

    def test_negative_value_is_not_floored(self) -> None:
        assert normalize_capped(Decimal("-5"), Decimal("25")) == Decimal("-20")


class TestRsiBandScore:
    def test_inside_band(self) -> None:
        assert rsi_band_score(Decimal("40"), Decimal("40"), Decimal("70")) == Decimal("100")
        assert rsi_band_score(Decimal("70"), Decimal("40"), Decimal("70")) == Decimal("100")

    def test_outside_band(self) -> None:
        assert rsi_band_score(Decimal("71"), Decimal("40"), Decimal("70")) == Decimal("50")
        assert rsi_band_score(Decimal("39"), Decimal("40"), Decimal("70")) == Decimal("50")


class TestComputeExplosionScore:
    """Tests for compute_explosion_score under the built-in profiles."""

    def test_reference_example(self) -> None:
        """change5m=5, change1h=8, volumeRatio=3, RSI=55 under "explosion".

        0.35*20 + 0.15*22.857 + 0.30*30 + 0.10*100 = 7 + 3.43 + 9 + 10 = 29.43
        """
        score, factors = compute_explosion_score(_indicators(), PROFILES["explosion"])
        assert score == Decimal("29")
        assert factors["change_short"] == Decimal("7.00")
        assert factors["change_long"] == Decimal("3.43")
        assert factors["volume"] == Decimal("9.00")
        assert factors["rsi"] == Decimal("10.00")
        assert factors["new_listing"] == Decimal("0.00")
        assert factors["compression"] == Decimal("0.00")

    def test_rsi_outside_band_scores_half(self) -> None:
        inside, _ = compute_explosion_score(_indicators(rsi="55"), PROFILES["explosion"])
        outside, _ = compute_explosion_score(_indicators(rsi="85"), PROFILES["explosion"])
        assert inside - outside == Decimal("5")

    def test_bonuses_are_flat(self) -> None:
        base, _ = compute_explosion_score(_indicators(), PROFILES["explosion"])
        boosted, _ = compute_explosion_score(
            _indicators(compressed=True, new_listing=True), PROFILES["explosion"]
        )
        assert boosted - base == Decimal("30")

    def test_pre_explosion_rewards_compression_more(self) -> None:
        explosion, _ = compute_explosion_score(
            _indicators(compressed=True), PROFILES["explosion"]
        )
        alert, _ = compute_explosion_score(
            _indicators(compressed=True), PROFILES["pre_explosion"]
        )
        assert alert - explosion == Decimal("15")

    def test_score_is_not_clamped_to_100(self) -> None:
        """All weighted terms maxed (35 + 15 + 30 + 10) plus both bonuses (20 + 10)."""
        indicators = _indicators(
            change_5m="60", change_1h="90", volume_ratio="40", rsi="50",
            compressed=True, new_listing=True,
        )
        score, _ = compute_explosion_score(indicators, PROFILES["explosion"])
        assert score == Decimal("120")

    def test_negative_momentum_can_go_below_zero(self) -> None:
        indicators = _indicators(change_5m="-50", change_1h="-70", volume_ratio="0", rsi="20")
        score, _ = compute_explosion_score(indicators, PROFILES["explosion"])
        assert score < Decimal("0")

    def test_rounds_half_up(self) -> None:
        """Volume term alone: 0.30 * 1.5 / 10 * 100 = 4.5 -> 5 (all else zero)."""
        indicators = _indicators(change_5m="0", change_1h="0", volume_ratio="1.5", rsi="55")
        profile = replace(PROFILES["explosion"], w_rsi=Decimal("0"))
        score, _ = compute_explosion_score(indicators, profile)
        assert score == Decimal("5")

    def test_missing_interval_counts_as_zero_change(self) -> None:
        """top_gainer reads 1h/4h; a set computed for 5m/1h has no 4h entry."""
        score, factors = compute_explosion_score(_indicators(), PROFILES["top_gainer"])
        assert factors["change_long"] == Decimal("0.00")
        assert score > Decimal("0")

    def test_deterministic(self) -> None:
        results = {
            compute_explosion_score(_indicators(), PROFILES["explosion"])[0]
            for _ in range(20)
        }
        assert results == {Decimal("29")}


class TestMonotonicity:
    """Score never decreases when one capped input increases."""

    @pytest.mark.parametrize(
        "field, values",
        [
            ("change_5m", ["-10", "0", "4", "12.5", "25", "40"]),
            ("change_1h", ["-10", "0", "6", "20", "35", "100"]),
            ("volume_ratio", ["0", "1", "2.5", "9.99", "10", "50"]),
        ],
    )
    def test_non_decreasing(self, field: str, values: list[str]) -> None:
        scores = [
            compute_explosion_score(_indicators(**{field: v}), PROFILES["explosion"])[0]
            for v in values
        ]
        assert scores == sorted(scores)
