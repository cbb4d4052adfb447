"""
Unit Tests for the Composite Scorer & Classifier.

These tests verify:
1. Tier cutoffs at their exact boundaries
2. Monotonicity: a higher composite never gives a lower tier
3. The flag and fail policies for unknown factors
4. The historical adverse-event factor cannot reach the composite
"""

import dataclasses

import pytest

from merchant_risk.domain.entities import ORDERED_TIERS, FactorScores, RiskTier
from merchant_risk.domain.exceptions import MissingFactException
from merchant_risk.service.scoring import (
    ScoringSettings,
    calculate_composite_score,
    classify_tier,
)


def scores(**overrides) -> FactorScores:
    values = dict(
        velocity=0,
        verification_failures=0,
        amount_pattern=0,
        category=0,
        age_vs_activity=0,
        timing=0,
    )
    values.update(overrides)
    return FactorScores(**values)


# =============================================================================
# Tier Classification Tests
# =============================================================================

class TestClassifyTier:
    """Tests for classify_tier."""

    @pytest.mark.parametrize("composite,expected", [
        (0, RiskTier.LOW),
        (3, RiskTier.LOW),
        (4, RiskTier.MEDIUM),
        (6, RiskTier.MEDIUM),
        (7, RiskTier.HIGH),
        (9, RiskTier.HIGH),
        (10, RiskTier.VERY_HIGH),
        (18, RiskTier.VERY_HIGH),
    ])
    def test_default_cutoffs(self, composite, expected):
        assert classify_tier(composite) == expected

    def test_tier_is_monotonic(self):
        tiers = [classify_tier(composite) for composite in range(0, 19)]
        ranks = [tier.rank for tier in tiers]

        assert ranks == sorted(ranks)
        assert set(tiers) == set(ORDERED_TIERS)

    def test_custom_cutoffs(self):
        settings = ScoringSettings(
            tier_cutoffs_json='{"medium": 2, "high": 5, "very_high": 15}'
        )

        assert classify_tier(1, settings) == RiskTier.LOW
        assert classify_tier(2, settings) == RiskTier.MEDIUM
        assert classify_tier(14, settings) == RiskTier.HIGH
        assert classify_tier(15, settings) == RiskTier.VERY_HIGH


# =============================================================================
# Composite Score Tests
# =============================================================================

class TestCompositeScore:
    """Tests for calculate_composite_score."""

    def test_composite_is_sum_of_factors(self):
        result = calculate_composite_score(
            scores(velocity=3, verification_failures=2, category=1, timing=1)
        )

        assert result.composite == 7
        assert result.tier == RiskTier.HIGH
        assert result.partial is False

    def test_maximum_composite(self):
        result = calculate_composite_score(FactorScores(3, 3, 3, 3, 3, 3))

        assert result.composite == 18
        assert result.tier == RiskTier.VERY_HIGH

    def test_raising_any_factor_never_lowers_tier(self):
        base = scores(velocity=1, category=2, timing=1)
        base_rank = calculate_composite_score(base).tier.rank

        for field in dataclasses.fields(FactorScores):
            for value in range(getattr(base, field.name), 4):
                raised = dataclasses.replace(base, **{field.name: value})
                assert calculate_composite_score(raised).tier.rank >= base_rank

    def test_historical_factor_is_not_a_composite_input(self):
        """FactorScores has no field for dispute history."""
        names = {field.name for field in dataclasses.fields(FactorScores)}

        assert not any("adverse" in name or "historical" in name for name in names)


# =============================================================================
# Missing Factor Policy Tests
# =============================================================================

class TestMissingFactorPolicy:
    """Tests for the flag and fail policies."""

    def test_flag_policy_scores_unknown_as_zero(self):
        result = calculate_composite_score(
            scores(velocity=3, timing=None, verification_failures=None)
        )

        assert result.composite == 3
        assert result.partial is True
        assert result.missing_factors == ("verification_failures", "timing")

    def test_fail_policy_raises_naming_factors(self):
        settings = ScoringSettings(missing_fact_policy="fail")

        with pytest.raises(MissingFactException) as exc_info:
            calculate_composite_score(scores(category=None), settings, merchant_id="m_9")

        assert exc_info.value.missing_factors == ("category",)
        assert exc_info.value.merchant_id == "m_9"
        assert "category" in exc_info.value.message

    def test_fail_policy_allows_complete_scores(self):
        settings = ScoringSettings(missing_fact_policy="fail")

        result = calculate_composite_score(scores(velocity=2), settings)

        assert result.composite == 2
