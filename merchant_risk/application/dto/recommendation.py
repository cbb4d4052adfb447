"""Data transfer objects for recommendation operations."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from merchant_risk.domain.entities import RecommendationRecord
from merchant_risk.service.scoring import explain_recommendation


@dataclass(frozen=True)
class ScoreRequest:
    """Input data for scoring one merchant on demand."""

    merchant_id: str

    def validate(self) -> List[str]:
        errors = []

        if not self.merchant_id or not self.merchant_id.strip():
            errors.append("merchant_id is required")

        return errors


@dataclass(frozen=True)
class FactorScoresDTO:
    """Decision-driving factor scores; None means the input was unknown."""

    velocity: Optional[int]
    verification_failures: Optional[int]
    amount_pattern: Optional[int]
    category: Optional[int]
    age_vs_activity: Optional[int]
    timing: Optional[int]


@dataclass(frozen=True)
class ReservePolicyDTO:
    """Recommended reserve policy."""

    reserve_type: str
    percentage: Optional[float]
    minimum_amount: Optional[float]
    hold_days: Optional[int]
    band: str
    rule: str


@dataclass(frozen=True)
class RecommendationResponse:
    """Response data for a single recommendation."""

    recommendation_id: str
    merchant_id: str
    snapshot_id: str
    factor_scores: FactorScoresDTO
    historical_adverse_event_score: Optional[int]
    composite_score: int
    risk_tier: str
    dominant_reason: str
    reserve: ReservePolicyDTO
    partial: bool
    missing_inputs: List[str]
    ruleset_fingerprint: str
    computed_at: str
    explanation: str
    inputs: Dict[str, Any]

    @classmethod
    def from_entity(cls, record: RecommendationRecord) -> "RecommendationResponse":
        reserve = record.reserve
        return cls(
            recommendation_id=str(record.id),
            merchant_id=record.merchant_id,
            snapshot_id=record.snapshot_id,
            factor_scores=FactorScoresDTO(**record.factor_scores.to_dict()),
            historical_adverse_event_score=record.historical_adverse_event_score,
            composite_score=record.composite_score,
            risk_tier=record.risk_tier.value,
            dominant_reason=record.dominant_reason,
            reserve=ReservePolicyDTO(
                reserve_type=reserve.reserve_type.value,
                percentage=reserve.percentage,
                minimum_amount=reserve.minimum_amount,
                hold_days=reserve.hold_days,
                band=reserve.band,
                rule=reserve.rule,
            ),
            partial=record.partial,
            missing_inputs=list(record.missing_inputs),
            ruleset_fingerprint=record.ruleset_fingerprint,
            computed_at=record.computed_at.isoformat() + "Z",
            explanation=explain_recommendation(record),
            inputs=record.inputs,
        )


@dataclass(frozen=True)
class RecommendationSummary:
    """Brief summary of a recommendation for history listings."""

    recommendation_id: str
    snapshot_id: str
    composite_score: int
    risk_tier: str
    reserve_type: str
    reserve_percentage: Optional[float]
    partial: bool
    computed_at: str


@dataclass(frozen=True)
class RecommendationHistoryResponse:
    """Response containing a merchant's stored recommendations."""

    merchant_id: str
    recommendations: List[RecommendationSummary]

    @classmethod
    def from_entities(
        cls,
        merchant_id: str,
        records: List[RecommendationRecord],
    ) -> "RecommendationHistoryResponse":
        summaries = [
            RecommendationSummary(
                recommendation_id=str(r.id),
                snapshot_id=r.snapshot_id,
                composite_score=r.composite_score,
                risk_tier=r.risk_tier.value,
                reserve_type=r.reserve.reserve_type.value,
                reserve_percentage=r.reserve.percentage,
                partial=r.partial,
                computed_at=r.computed_at.isoformat() + "Z",
            )
            for r in records
        ]
        return cls(merchant_id=merchant_id, recommendations=summaries)
