"""
Data models internal to the scoring pipeline.

Domain-facing types (FactorScores, ReservePolicy, RecommendationRecord) live
in merchant_risk.domain.entities; the types here only exist while a
merchant is being scored.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from merchant_risk.domain.entities import ReserveType, RiskTier


class TrustAdjustment(str, Enum):
    """Direction the trust signal moves the reserve band (at most one band)."""

    LIGHTER = "lighter"
    NEUTRAL = "neutral"
    HEAVIER = "heavier"


@dataclass(frozen=True)
class ReserveBand:
    """
    One configured aggressiveness band of the reserve decision table.

    Bands are ordered lightest to heaviest in configuration; that order is
    what "at least" means for the failed-transfer override.
    """

    name: str
    reserve_type: ReserveType
    percentage: Optional[float] = None
    minimum_amount: Optional[float] = None
    hold_days: Optional[int] = None


@dataclass(frozen=True)
class CompositeResult:
    """
    Composite score and tier for one merchant.

    Attributes:
        composite: Sum of the decision-driving factor scores
        tier: Risk tier derived from the configured cutoffs
        missing_factors: Factors that were unknown and scored as 0
    """

    composite: int
    tier: RiskTier
    missing_factors: Tuple[str, ...] = ()

    @property
    def partial(self) -> bool:
        return bool(self.missing_factors)
