"""
Reserve Recommender for the Merchant Risk Engine.

Turns a risk tier plus merchant context into a reserve policy through an
explicit decision table:

    1. Trust signal picks the column (lighter / neutral / heavier)
    2. (tier, column) picks a configured band
    3. A recent failed fund transfer raises the band to at least the
       override band (financial-stability override)
    4. Category risk adds percentage points, never changes the type
    5. For fixed/both policies the minimum covers unfulfilled exposure

Bands and table are configuration (see ScoringSettings); the function is
total because configuration validation guarantees every cell exists.
"""

from typing import Optional, Tuple

from merchant_risk.domain.entities import ReservePolicy, ReserveType, RiskTier

from .models import ReserveBand, TrustAdjustment
from .risk_factors import score_category
from .settings import ScoringSettings, scoring_settings

FAILED_TRANSFER_RULE = "failed_transfer_override"


def determine_trust_adjustment(
    trust_score: Optional[float],
    trust_category: Optional[str],
    model_score: Optional[float] = None,
    settings: ScoringSettings = scoring_settings,
) -> TrustAdjustment:
    """
    Decide which way the trust signal moves the reserve.

    Algorithm:
        1. Trust score >= trust_high_threshold: LIGHTER;
           below trust_low_threshold: HEAVIER; otherwise NEUTRAL
        2. Unknown score: fall back to the trust category map
        3. Both unknown (or an unmapped category): NEUTRAL
        4. A model score at or above the escalation threshold cancels
           LIGHTER and otherwise makes the result HEAVIER

    The result never moves more than one band from neutral.
    """
    if trust_score is not None:
        if trust_score >= settings.trust_high_threshold:
            adjustment = TrustAdjustment.LIGHTER
        elif trust_score < settings.trust_low_threshold:
            adjustment = TrustAdjustment.HEAVIER
        else:
            adjustment = TrustAdjustment.NEUTRAL
    elif trust_category is not None:
        adjustment = settings.trust_category_adjustments.get(
            trust_category.strip().lower(), TrustAdjustment.NEUTRAL
        )
    else:
        adjustment = TrustAdjustment.NEUTRAL

    if model_score is not None and model_score >= settings.model_score_escalation_threshold:
        if adjustment == TrustAdjustment.LIGHTER:
            return TrustAdjustment.NEUTRAL
        return TrustAdjustment.HEAVIER
    return adjustment


def _band_index(settings: ScoringSettings, name: str) -> int:
    return [band.name for band in settings.reserve_bands].index(name)


def _select_band(
    tier: RiskTier,
    adjustment: TrustAdjustment,
    has_recent_failed_transfers: bool,
    settings: ScoringSettings,
) -> Tuple[ReserveBand, str]:
    bands = settings.reserve_bands
    band_name = settings.reserve_decision_table[tier][adjustment]
    rule = f"{tier.value}/{adjustment.value}"

    if has_recent_failed_transfers:
        override = settings.failed_transfer_override_band
        if _band_index(settings, band_name) < _band_index(settings, override):
            band_name = override
            rule = FAILED_TRANSFER_RULE

    return bands[_band_index(settings, band_name)], rule


def recommend_reserve(
    tier: RiskTier,
    industry: Optional[str],
    trust_score: Optional[float],
    trust_category: Optional[str],
    model_score: Optional[float],
    has_recent_failed_transfers: bool,
    unfulfilled_exposure_amount: Optional[float] = None,
    settings: ScoringSettings = scoring_settings,
) -> ReservePolicy:
    """
    Recommend a reserve policy for one merchant.

    Args:
        tier: Risk tier from the composite classifier
        industry: Merchant industry, for the category percentage adjustment
        trust_score: External trust score (0-100), may be None
        trust_category: External trust bucket, used when the score is None
        model_score: Predictive-model probability (0-1), may be None
        has_recent_failed_transfers: A fund transfer failed in the recent window
        unfulfilled_exposure_amount: Captured but unfulfilled amount, may be None
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Exactly one ReservePolicy, including the "none" policy
    """
    adjustment = determine_trust_adjustment(trust_score, trust_category, model_score, settings)
    band, rule = _select_band(tier, adjustment, has_recent_failed_transfers, settings)

    percentage = band.percentage
    if percentage is not None:
        category_points = (score_category(industry, settings) or 0) * settings.category_percentage_step
        percentage = round(min(percentage + category_points, settings.max_reserve_percentage), 2)

    minimum_amount = band.minimum_amount
    if (
        band.reserve_type in (ReserveType.FIXED, ReserveType.BOTH)
        and unfulfilled_exposure_amount is not None
    ):
        minimum_amount = max(minimum_amount or 0.0, unfulfilled_exposure_amount)

    return ReservePolicy(
        reserve_type=band.reserve_type,
        percentage=percentage,
        minimum_amount=minimum_amount,
        hold_days=band.hold_days,
        band=band.name,
        rule=rule,
    )
