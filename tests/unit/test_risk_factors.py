"""
Unit Tests for the Risk Factor Scorer.

These tests verify:
1. Each factor's threshold ladder, including exact boundaries
2. Unknown inputs give None, never 0
3. Count-based adverse-event rate resolution
4. Historical adverse-event scoring and the severity bump

Test Categories:
- test_velocity_*: burst vs. account age
- test_verification_*: AVS/CVV failures
- test_amount_*: average ticket and uniformity
- test_category_*: industry map
- test_age_activity_*: volume vs. account age
- test_timing_*: off-hours and weekend skew
- test_historical_*: dispute history
"""

import pytest

from merchant_risk.domain.entities import EventReason, Merchant, WindowedFactSet
from merchant_risk.service.scoring import (
    NO_EVENTS,
    ScoringSettings,
    calculate_factor_scores,
    resolve_adverse_event_count,
    resolve_adverse_event_rate,
    score_age_vs_activity,
    score_amount_pattern,
    score_category,
    score_historical_adverse_events,
    score_timing,
    score_velocity,
    score_verification_failures,
)
from merchant_risk.service.scoring.risk_factors import coefficient_of_variation


# =============================================================================
# Velocity Tests
# =============================================================================

class TestVelocity:
    """Tests for score_velocity."""

    @pytest.mark.parametrize("count,age,expected", [
        (50, 29, 3),    # young and at the top threshold
        (49, 29, 2),    # just below top threshold falls to next rung
        (50, 30, 2),    # age 30 is no longer "under 30"
        (30, 59, 2),
        (19, 59, 0),
        (20, 179, 1),
        (19, 179, 0),
        (500, 180, 0),  # old accounts never score
        (0, 1, 0),
    ])
    def test_velocity_ladder(self, count, age, expected):
        assert score_velocity(count, age) == expected

    def test_velocity_unknown_count(self):
        assert score_velocity(None, 10) is None

    def test_velocity_unknown_age(self):
        assert score_velocity(60, None) is None


# =============================================================================
# Verification Failure Tests
# =============================================================================

class TestVerificationFailures:
    """Tests for score_verification_failures."""

    @pytest.mark.parametrize("avs,cvv,expected", [
        (0.5, 0.0, 3),
        (0.0, 0.5, 3),
        (0.49, 0.3, 2),
        (0.15, 0.1, 1),
        (0.149, 0.149, 0),
        (0.0, 0.0, 0),
    ])
    def test_verification_uses_worse_rate(self, avs, cvv, expected):
        assert score_verification_failures(avs, cvv) == expected

    def test_verification_either_unknown(self):
        assert score_verification_failures(None, 0.9) is None
        assert score_verification_failures(0.9, None) is None


# =============================================================================
# Amount Pattern Tests
# =============================================================================

class TestAmountPattern:
    """Tests for score_amount_pattern."""

    def test_amount_large_and_uniform(self):
        assert score_amount_pattern(1000.0, 100.0) == 3  # cv exactly 0.1

    def test_amount_large_and_varied(self):
        assert score_amount_pattern(1000.0, 500.0) == 2

    def test_amount_medium_and_uniform(self):
        assert score_amount_pattern(600.0, 30.0) == 2

    def test_amount_medium_and_varied(self):
        assert score_amount_pattern(500.0, 400.0) == 1

    def test_amount_small(self):
        assert score_amount_pattern(499.99, 0.0) == 0

    def test_amount_unknown(self):
        assert score_amount_pattern(None, 10.0) is None
        assert score_amount_pattern(1000.0, None) is None

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation(200.0, 50.0) == 0.25
        assert coefficient_of_variation(0.0, 50.0) is None


# =============================================================================
# Category Tests
# =============================================================================

class TestCategory:
    """Tests for score_category."""

    @pytest.mark.parametrize("industry,expected", [
        ("gambling", 3),
        ("Travel", 2),
        (" electronics ", 1),
        ("grocery", 0),
    ])
    def test_category_lookup(self, industry, expected):
        assert score_category(industry) == expected

    def test_category_unknown(self):
        assert score_category(None) is None

    def test_category_custom_map(self):
        settings = ScoringSettings(category_scores_json='{"Florist": 2}')

        assert score_category("florist", settings) == 2
        assert score_category("gambling", settings) == 0


# =============================================================================
# Age vs Activity Tests
# =============================================================================

class TestAgeVsActivity:
    """Tests for score_age_vs_activity."""

    @pytest.mark.parametrize("age,volume,expected", [
        (13, 10000.0, 3),
        (13, 9999.0, 0),
        (14, 25000.0, 2),
        (29, 24999.0, 0),
        (59, 50000.0, 1),
        (60, 1_000_000.0, 0),
    ])
    def test_age_activity_ladder(self, age, volume, expected):
        assert score_age_vs_activity(age, volume) == expected

    def test_age_activity_unknown(self):
        assert score_age_vs_activity(None, 10000.0) is None
        assert score_age_vs_activity(10, None) is None


# =============================================================================
# Timing Tests
# =============================================================================

class TestTiming:
    """Tests for score_timing."""

    @pytest.mark.parametrize("off_hours,weekend,expected", [
        (0.7, 0.0, 3),
        (0.1, 0.5, 2),
        (0.35, 0.35, 1),
        (0.34, 0.2, 0),
    ])
    def test_timing_uses_worse_ratio(self, off_hours, weekend, expected):
        assert score_timing(off_hours, weekend) == expected

    def test_timing_unknown(self):
        assert score_timing(None, 0.9) is None


# =============================================================================
# Adverse Event Resolution Tests
# =============================================================================

class TestAdverseEventResolution:
    """Tests for count and rate resolution."""

    def test_count_prefers_supplied_value(self):
        assert resolve_adverse_event_count(7, [EventReason("general", 2)]) == 7

    def test_count_falls_back_to_reasons(self):
        reasons = [EventReason("general", 2), EventReason("fraudulent", 3)]

        assert resolve_adverse_event_count(None, reasons) == 5

    def test_count_unknown_without_reasons(self):
        assert resolve_adverse_event_count(None, []) is None

    def test_rate_is_count_based(self):
        assert resolve_adverse_event_rate(None, 5, 1000) == 0.005

    def test_rate_prefers_supplied_value(self):
        assert resolve_adverse_event_rate(0.02, 5, 1000) == 0.02

    def test_rate_with_no_transactions(self):
        assert resolve_adverse_event_rate(None, 0, 0) == 0.0

    def test_rate_unknown(self):
        assert resolve_adverse_event_rate(None, None, 100) is None
        assert resolve_adverse_event_rate(None, 3, None) is None


# =============================================================================
# Historical Adverse Event Tests
# =============================================================================

class TestHistoricalAdverseEvents:
    """Tests for score_historical_adverse_events."""

    def test_historical_no_events(self):
        assert score_historical_adverse_events(NO_EVENTS, 0, 0.0) == 0

    def test_historical_unknown_count(self):
        assert score_historical_adverse_events(NO_EVENTS, None, None) is None

    def test_historical_rate_ladder(self):
        assert score_historical_adverse_events("general", 3, 0.0075) == 2

    def test_historical_count_ladder(self):
        assert score_historical_adverse_events("general", 20, 0.0001) == 2

    def test_historical_worse_of_count_and_rate(self):
        assert score_historical_adverse_events("general", 50, 0.005) == 3

    def test_historical_severe_reason_adds_one(self):
        assert score_historical_adverse_events("fraudulent", 5, 0.001) == 2

    def test_historical_severe_bump_is_capped(self):
        assert score_historical_adverse_events("fraudulent", 60, 0.5) == 3

    def test_historical_unknown_rate_uses_count(self):
        assert score_historical_adverse_events("general", 5, None) == 1


# =============================================================================
# Factor Score Assembly Tests
# =============================================================================

class TestCalculateFactorScores:
    """Tests for calculate_factor_scores."""

    def test_scores_every_factor(self):
        merchant = Merchant(merchant_id="m_1", account_age_days=10, industry="gambling")
        facts = WindowedFactSet(
            snapshot_id="snap-1",
            merchant_id="m_1",
            total_volume=12000.0,
            avg_amount=1500.0,
            amount_std_dev=75.0,
            max_daily_txn_count=60,
            avs_failure_rate=0.2,
            cvv_failure_rate=0.1,
            off_hours_ratio=0.8,
            weekend_ratio=0.1,
        )

        scores = calculate_factor_scores(merchant, facts)

        assert scores.to_dict() == {
            "velocity": 3,
            "verification_failures": 1,
            "amount_pattern": 3,
            "category": 3,
            "age_vs_activity": 3,
            "timing": 3,
        }
        assert scores.missing() == ()

    def test_unknown_inputs_are_reported(self):
        merchant = Merchant(merchant_id="m_2")
        facts = WindowedFactSet(snapshot_id="snap-2", merchant_id="m_2")

        scores = calculate_factor_scores(merchant, facts)

        assert set(scores.missing()) == set(scores.to_dict())
