"""
Composite Scorer & Classifier for the Merchant Risk Engine.

The composite is the plain sum of the six decision-driving factors; the
tier comes from fixed ascending cutoffs held in configuration.

Only FactorScores is accepted as input. It has no historical-adverse-event
field, so dispute history cannot leak into the decision.

Missing factors are handled by one policy for the whole run
(missing_fact_policy):
- flag: the factor counts as 0 and the record is marked partial
- fail: MissingFactException names the unknown factors
"""

from typing import Optional

from merchant_risk.domain.entities import FactorScores, RiskTier
from merchant_risk.domain.exceptions import MissingFactException

from .models import CompositeResult
from .settings import ScoringSettings, scoring_settings


def classify_tier(
    composite: int,
    settings: ScoringSettings = scoring_settings,
) -> RiskTier:
    """
    Map a composite score to a risk tier.

    Example with the default cutoffs (medium 4, high 7, very_high 10):
        3 -> LOW, 4 -> MEDIUM, 9 -> HIGH, 10 -> VERY_HIGH
    """
    for cutoff, tier in settings.tier_cutoffs:
        if composite >= cutoff:
            return tier
    return RiskTier.LOW


def calculate_composite_score(
    scores: FactorScores,
    settings: ScoringSettings = scoring_settings,
    merchant_id: Optional[str] = None,
) -> CompositeResult:
    """
    Sum the factor scores and classify the result.

    Args:
        scores: Decision-driving factor scores
        settings: Scoring settings (uses defaults if not provided)
        merchant_id: Used only to name the merchant in a MissingFactException

    Returns:
        CompositeResult with composite, tier and any missing factors

    Raises:
        MissingFactException: If factors are unknown and the policy is "fail"
    """
    missing = scores.missing()
    if missing and settings.missing_fact_policy == "fail":
        raise MissingFactException(missing, merchant_id=merchant_id)

    composite = sum(score or 0 for score in scores.to_dict().values())
    return CompositeResult(
        composite=composite,
        tier=classify_tier(composite, settings),
        missing_factors=missing,
    )
