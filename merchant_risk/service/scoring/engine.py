"""
Single-merchant scoring pipeline.

Signal Store read -> reason resolver + factor scorer -> composite and tier
-> reserve recommender -> report assembler.

The pipeline is a pure function of the signals and the rule set: scoring
the same snapshot twice with the same settings yields the same scores,
tier and policy (only the record id and timestamp differ).
"""

from datetime import datetime
from typing import List, Optional

from merchant_risk.domain.entities import MerchantSignals, RecommendationRecord
from merchant_risk.domain.exceptions import MissingFactException

from .composite import calculate_composite_score
from .reasons import resolve_dominant_reason
from .report import assemble_recommendation
from .reserve import recommend_reserve
from .risk_factors import (
    calculate_factor_scores,
    resolve_adverse_event_count,
    resolve_adverse_event_rate,
    score_historical_adverse_events,
)
from .settings import ScoringSettings, scoring_settings


def score_merchant(
    signals: MerchantSignals,
    settings: ScoringSettings = scoring_settings,
    computed_at: Optional[datetime] = None,
) -> RecommendationRecord:
    """
    Score one merchant and recommend a reserve.

    An unknown failed_transfer_count falls under the same missing-input
    policy as the factors: with "flag" it counts as no failed transfers
    and is listed in missing_inputs.

    Args:
        signals: Merchant attributes, windowed facts and event reasons
        settings: Rule set for the run (uses defaults if not provided)
        computed_at: Computation time; defaults to now (UTC)

    Returns:
        The RecommendationRecord for this run

    Raises:
        MissingFactException: If inputs are unknown and the policy is "fail"
    """
    merchant = signals.merchant
    facts = signals.facts

    dominant_reason = resolve_dominant_reason(signals.reasons, settings)
    factor_scores = calculate_factor_scores(merchant, facts, settings)

    missing: List[str] = list(factor_scores.missing())
    if facts.failed_transfer_count is None:
        missing.append("failed_transfer_count")
    if missing and settings.missing_fact_policy == "fail":
        raise MissingFactException(missing, merchant_id=merchant.merchant_id)

    composite = calculate_composite_score(factor_scores, settings, merchant.merchant_id)

    adverse_event_count = resolve_adverse_event_count(
        facts.adverse_event_count, signals.reasons
    )
    adverse_event_rate = resolve_adverse_event_rate(
        facts.adverse_event_rate, adverse_event_count, facts.transaction_count
    )
    historical_score = score_historical_adverse_events(
        dominant_reason, adverse_event_count, adverse_event_rate, settings
    )

    reserve = recommend_reserve(
        tier=composite.tier,
        industry=merchant.industry,
        trust_score=merchant.trust_score,
        trust_category=merchant.trust_category,
        model_score=merchant.model_score,
        has_recent_failed_transfers=bool(facts.failed_transfer_count),
        unfulfilled_exposure_amount=facts.unfulfilled_exposure_amount,
        settings=settings,
    )

    return assemble_recommendation(
        signals=signals,
        factor_scores=factor_scores,
        historical_adverse_event_score=historical_score,
        composite=composite,
        dominant_reason=dominant_reason,
        reserve=reserve,
        settings=settings,
        missing_inputs=missing,
        derived={
            "adverse_event_count": adverse_event_count,
            "adverse_event_rate": adverse_event_rate,
        },
        computed_at=computed_at,
    )
