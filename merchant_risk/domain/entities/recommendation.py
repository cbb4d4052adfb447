"""Recommendation entity and the value objects it is built from."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from uuid import UUID, uuid4


class RiskTier(str, Enum):
    """Ordered risk classification."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"

    @property
    def rank(self) -> int:
        """Position in the ordering (LOW = 0)."""
        return ORDERED_TIERS.index(self)


ORDERED_TIERS: Tuple[RiskTier, ...] = (
    RiskTier.LOW,
    RiskTier.MEDIUM,
    RiskTier.HIGH,
    RiskTier.VERY_HIGH,
)


class ReserveType(str, Enum):
    """Kind of funds-holding policy."""

    NONE = "none"
    FIXED = "fixed"
    ROLLING = "rolling"
    TIME_DELAY = "time_delay"
    BOTH = "both"  # rolling percentage plus a fixed minimum


@dataclass(frozen=True)
class FactorScores:
    """
    Decision-driving risk factor scores (0-3 each, None if unknown).

    The historical adverse-event factor deliberately has no field here:
    it validates the model and must never feed the composite.
    """

    velocity: Optional[int]
    verification_failures: Optional[int]
    amount_pattern: Optional[int]
    category: Optional[int]
    age_vs_activity: Optional[int]
    timing: Optional[int]

    def missing(self) -> Tuple[str, ...]:
        """Names of factors whose inputs were unknown."""
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is None)

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ReservePolicy:
    """
    Recommended reserve policy.

    Attributes:
        reserve_type: Kind of reserve
        percentage: Share of volume withheld (percentage points), if any
        minimum_amount: Fixed amount withheld, if any
        hold_days: How long funds are held, if any
        band: Name of the configured band the policy came from
        rule: Decision-table row that produced it (e.g. "high/neutral")
    """

    reserve_type: ReserveType
    percentage: Optional[float] = None
    minimum_amount: Optional[float] = None
    hold_days: Optional[int] = None
    band: str = "none"
    rule: str = ""

    @property
    def is_reserve_required(self) -> bool:
        return self.reserve_type != ReserveType.NONE

    def to_dict(self) -> dict:
        return {
            "reserve_type": self.reserve_type.value,
            "percentage": self.percentage,
            "minimum_amount": self.minimum_amount,
            "hold_days": self.hold_days,
            "band": self.band,
            "rule": self.rule,
        }


@dataclass(frozen=True)
class RecommendationRecord:
    """
    The engine's output for one merchant in one scoring run.

    Records are never updated in place: every run produces a new,
    independently timestamped record. The snapshot id, rule-set
    fingerprint and captured inputs let an audit reconstruct exactly
    what produced the recommendation.
    """

    merchant_id: str
    snapshot_id: str
    factor_scores: FactorScores
    historical_adverse_event_score: Optional[int]
    composite_score: int
    risk_tier: RiskTier
    dominant_reason: str
    reserve: ReservePolicy
    ruleset_fingerprint: str
    partial: bool = False
    missing_inputs: Tuple[str, ...] = ()
    inputs: Dict[str, Any] = field(default_factory=dict)
    id: UUID = field(default_factory=uuid4)
    computed_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "recommendation_id": str(self.id),
            "merchant_id": self.merchant_id,
            "snapshot_id": self.snapshot_id,
            "factor_scores": self.factor_scores.to_dict(),
            "historical_adverse_event_score": self.historical_adverse_event_score,
            "composite_score": self.composite_score,
            "risk_tier": self.risk_tier.value,
            "dominant_reason": self.dominant_reason,
            "reserve": self.reserve.to_dict(),
            "partial": self.partial,
            "missing_inputs": list(self.missing_inputs),
            "ruleset_fingerprint": self.ruleset_fingerprint,
            "computed_at": self.computed_at.isoformat() + "Z",
        }
