"""
Risk Scoring Module for the Merchant Risk Engine
"""

from .models import CompositeResult, ReserveBand, TrustAdjustment
from .settings import (
    ScoringSettings,
    get_scoring_settings,
    load_scoring_settings,
    scoring_settings,
)
from .ladder import ThresholdLadder, age_gated_ladder, amount_pattern_ladder, threshold_ladder
from .reasons import NO_EVENTS, is_severe_reason, reason_severity_rank, resolve_dominant_reason
from .risk_factors import (
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
from .composite import calculate_composite_score, classify_tier
from .reserve import FAILED_TRANSFER_RULE, determine_trust_adjustment, recommend_reserve
from .report import assemble_recommendation, build_audit_inputs, explain_recommendation
from .engine import score_merchant

__all__ = [
    # Settings
    "ScoringSettings",
    "get_scoring_settings",
    "load_scoring_settings",
    "scoring_settings",
    # Models
    "CompositeResult",
    "ReserveBand",
    "TrustAdjustment",
    # Ladders
    "ThresholdLadder",
    "age_gated_ladder",
    "amount_pattern_ladder",
    "threshold_ladder",
    # Reasons
    "NO_EVENTS",
    "is_severe_reason",
    "reason_severity_rank",
    "resolve_dominant_reason",
    # Risk Factors
    "calculate_factor_scores",
    "resolve_adverse_event_count",
    "resolve_adverse_event_rate",
    "score_age_vs_activity",
    "score_amount_pattern",
    "score_category",
    "score_historical_adverse_events",
    "score_timing",
    "score_velocity",
    "score_verification_failures",
    # Composite
    "calculate_composite_score",
    "classify_tier",
    # Reserve
    "FAILED_TRANSFER_RULE",
    "determine_trust_adjustment",
    "recommend_reserve",
    # Report
    "assemble_recommendation",
    "build_audit_inputs",
    "explain_recommendation",
    # Pipeline
    "score_merchant",
]
