"""
Unit Tests for Scoring Settings validation.

Malformed rules must fail fast with ConfigurationException before any
merchant is scored.
"""

import json

import pytest

from merchant_risk.domain.entities import RiskTier
from merchant_risk.domain.exceptions import ConfigurationException
from merchant_risk.service.scoring import ScoringSettings, TrustAdjustment, load_scoring_settings
from merchant_risk.service.scoring.settings import DEFAULT_DECISION_TABLE, DEFAULT_RESERVE_BANDS


def table_with(tier: str, adjustment: str, band: str) -> str:
    table = json.loads(json.dumps(DEFAULT_DECISION_TABLE))
    table[tier][adjustment] = band
    return json.dumps(table)


# =============================================================================
# Default Rule Set Tests
# =============================================================================

class TestDefaults:
    """Tests for the default rule set."""

    def test_defaults_load(self):
        settings = load_scoring_settings()

        assert settings.missing_fact_policy == "flag"
        assert settings.reason_priority[0] == "fraudulent"
        assert settings.tier_cutoffs[0] == (10, RiskTier.VERY_HIGH)

    def test_decision_table_covers_every_cell(self):
        table = ScoringSettings().reserve_decision_table

        assert set(table) == set(RiskTier)
        assert all(set(row) == set(TrustAdjustment) for row in table.values())

    def test_fingerprint_is_stable(self):
        assert ScoringSettings().fingerprint == ScoringSettings().fingerprint

    def test_fingerprint_changes_with_rules(self):
        assert ScoringSettings().fingerprint != ScoringSettings(severe_reason_count=1).fingerprint

    def test_settings_are_frozen(self):
        settings = ScoringSettings()

        with pytest.raises(Exception):
            settings.missing_fact_policy = "fail"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SCORING_MISSING_FACT_POLICY", "fail")

        assert load_scoring_settings().missing_fact_policy == "fail"


# =============================================================================
# Malformed Rule Tests
# =============================================================================

class TestMalformedRules:
    """Every malformed rule set raises ConfigurationException."""

    @pytest.mark.parametrize("overrides", [
        {"missing_fact_policy": "ignore"},
        {"reason_priority_json": '["fraudulent", "fraudulent"]'},
        {"reason_priority_json": '["fraudulent", ""]'},
        {"reason_priority_json": "not json"},
        {"verification_ladder_json": "[[0.3, 2], [0.5, 3]]"},
        {"verification_ladder_json": "[[0.5, 4]]"},
        {"verification_ladder_json": "[]"},
        {"timing_ladder_json": "[[0.7]]"},
        {"velocity_ladder_json": "[[60, 30, 2], [30, 50, 3]]"},
        {"amount_pattern_ladder_json": '[[null, 0.1, 3]]'},
        {"category_scores_json": '{"gambling": 5}'},
        {"category_scores_json": '["gambling"]'},
        {"tier_cutoffs_json": '{"medium": 4, "high": 7}'},
        {"tier_cutoffs_json": '{"medium": 7, "high": 7, "very_high": 10}'},
        {"tier_cutoffs_json": '{"medium": 0, "high": 7, "very_high": 10}'},
        {"tier_cutoffs_json": '{"medium": 4.5, "high": 7, "very_high": 10}'},
        {"trust_category_adjustments_json": '{"high": "much_lighter"}'},
        {"trust_low_threshold": 80.0, "trust_high_threshold": 40.0},
        {"reserve_bands_json": '[{"name": "none", "type": "none", "percentage": 5}]'},
        {"reserve_bands_json": '[{"name": "r", "type": "rolling", "hold_days": 30}]'},
        {"reserve_bands_json": '[{"name": "f", "type": "fixed", "hold_days": 30}]'},
        {"reserve_bands_json": '[{"name": "x", "type": "escrow"}]'},
        {"reserve_decision_table_json": '{"low": {"lighter": "none"}}'},
        {"reserve_decision_table_json": table_with("high", "neutral", "gold_band")},
        {"reserve_decision_table_json": table_with("low", "heavier", "combined")},
        {"failed_transfer_override_band": "payout_delay"},
        {"failed_transfer_override_band": "missing_band"},
        {"max_reserve_percentage": 0},
    ])
    def test_malformed_rules_raise(self, overrides):
        with pytest.raises(ConfigurationException):
            load_scoring_settings(**overrides)

    def test_error_names_the_problem(self):
        with pytest.raises(ConfigurationException) as exc_info:
            load_scoring_settings(tier_cutoffs_json='{"medium": 9, "high": 7, "very_high": 10}')

        assert "tier_cutoffs_json" in exc_info.value.message
        assert exc_info.value.code == "CONFIGURATION_ERROR"

    def test_custom_bands_are_accepted(self):
        bands = DEFAULT_RESERVE_BANDS + [
            {"name": "fixed_only", "type": "fixed", "minimum_amount": 1000.0, "hold_days": 30},
        ]

        settings = load_scoring_settings(reserve_bands_json=json.dumps(bands))

        assert settings.reserve_bands[-1].name == "fixed_only"
