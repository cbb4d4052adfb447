"""
Recommendation Report Assembler.

Packages one merchant's scores and reserve policy into an immutable
RecommendationRecord, together with the audit trail an analyst needs to
reconstruct it: the snapshot id, the rule-set fingerprint and every input
value that was read.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from merchant_risk.domain.entities import (
    FactorScores,
    MerchantSignals,
    RecommendationRecord,
    ReservePolicy,
)

from .models import CompositeResult
from .settings import ScoringSettings, scoring_settings


def build_audit_inputs(
    signals: MerchantSignals,
    derived: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Capture every input value used for a recommendation."""
    return {
        "merchant": signals.merchant.to_dict(),
        "facts": signals.facts.to_dict(),
        "reasons": [
            {"reason_code": reason.reason_code, "count": reason.count}
            for reason in signals.reasons
        ],
        "derived": dict(derived or {}),
    }


def assemble_recommendation(
    signals: MerchantSignals,
    factor_scores: FactorScores,
    historical_adverse_event_score: Optional[int],
    composite: CompositeResult,
    dominant_reason: str,
    reserve: ReservePolicy,
    settings: ScoringSettings = scoring_settings,
    missing_inputs: Optional[Sequence[str]] = None,
    derived: Optional[Dict[str, Any]] = None,
    computed_at: Optional[datetime] = None,
) -> RecommendationRecord:
    """
    Build the RecommendationRecord for one scoring run.

    Args:
        signals: The Signal Store read the record was computed from
        factor_scores: Decision-driving factor scores (None = unknown)
        historical_adverse_event_score: Validation-only factor
        composite: Composite score and tier
        dominant_reason: Output of the reason resolver
        reserve: Recommended reserve policy
        settings: Rule set used (its fingerprint is stamped on the record)
        missing_inputs: Unknown inputs; defaults to the composite's missing factors
        derived: Intermediate values worth auditing (e.g. the resolved rate)
        computed_at: Computation time; defaults to now (UTC)

    Returns:
        A new, independently timestamped record
    """
    if missing_inputs is None:
        missing_inputs = composite.missing_factors

    return RecommendationRecord(
        merchant_id=signals.merchant_id,
        snapshot_id=signals.snapshot_id,
        factor_scores=factor_scores,
        historical_adverse_event_score=historical_adverse_event_score,
        composite_score=composite.composite,
        risk_tier=composite.tier,
        dominant_reason=dominant_reason,
        reserve=reserve,
        ruleset_fingerprint=settings.fingerprint,
        partial=bool(missing_inputs),
        missing_inputs=tuple(missing_inputs),
        inputs=build_audit_inputs(signals, derived),
        computed_at=computed_at or datetime.utcnow(),
    )


def explain_recommendation(record: RecommendationRecord) -> str:
    """
    Render a recommendation as text for case reviewers.

    Example:
        merchant_risky: VERY_HIGH risk (composite 14)
          factors: velocity=3, verification_failures=3, ...
          dominant reason: fraudulent
          reserve: both 22.5% min 5000.0 for 180 days [very_high/heavier]
    """
    factors = ", ".join(
        f"{name}={'unknown' if score is None else score}"
        for name, score in record.factor_scores.to_dict().items()
    )
    lines = [
        f"{record.merchant_id}: {record.risk_tier.value.upper()} risk "
        f"(composite {record.composite_score})",
        f"  factors: {factors}",
        f"  dominant reason: {record.dominant_reason}",
    ]

    reserve = record.reserve
    if reserve.is_reserve_required:
        terms = [reserve.reserve_type.value]
        if reserve.percentage is not None:
            terms.append(f"{reserve.percentage}%")
        if reserve.minimum_amount is not None:
            terms.append(f"min {reserve.minimum_amount}")
        if reserve.hold_days is not None:
            terms.append(f"for {reserve.hold_days} days")
        lines.append(f"  reserve: {' '.join(terms)} [{reserve.rule}]")
    else:
        lines.append(f"  reserve: none [{reserve.rule}]")

    if record.partial:
        lines.append(f"  partial: unknown {', '.join(record.missing_inputs)}")
    return "\n".join(lines)
