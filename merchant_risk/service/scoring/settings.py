"""
Scoring Settings for the Merchant Risk Engine.

This module contains every configurable rule of the scoring pipeline:
threshold ladders, the category map, the reason priority list, tier
cutoffs and the reserve decision table. Rules are configuration, not code,
so business owners can swap them without touching the scorer.

Environment variables use the SCORING_ prefix:
    SCORING_MISSING_FACT_POLICY=fail
    SCORING_TIER_CUTOFFS_JSON='{"medium": 5, "high": 8, "very_high": 11}'
    SCORING_CATEGORY_SCORES_JSON='{"gambling": 3, "travel": 2}'

Usage:
    from merchant_risk.service.scoring.settings import load_scoring_settings

    # Validate and freeze the rules once per batch run
    settings = load_scoring_settings()

    # Or create custom settings for testing
    custom = ScoringSettings(severe_reason_count=1)

Settings are frozen: a run that starts with one rule set finishes with it.
"""

import hashlib
import json
from functools import lru_cache
from typing import Any, Dict, List, Literal, Tuple

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from merchant_risk.domain.entities import ORDERED_TIERS, ReserveType, RiskTier
from merchant_risk.domain.exceptions import ConfigurationException

from .ladder import (
    MAX_FACTOR_SCORE,
    MIN_FACTOR_SCORE,
    ThresholdLadder,
    age_gated_ladder,
    amount_pattern_ladder,
    threshold_ladder,
)
from .models import ReserveBand, TrustAdjustment

DEFAULT_REASON_PRIORITY = [
    "fraudulent",
    "unrecognized",
    "product_not_received",
    "product_unacceptable",
    "subscription_canceled",
    "credit_not_processed",
    "duplicate",
    "general",
]

DEFAULT_RESERVE_BANDS = [
    {"name": "none", "type": "none"},
    {"name": "payout_delay", "type": "time_delay", "hold_days": 7},
    {"name": "rolling_light", "type": "rolling", "percentage": 5.0, "hold_days": 90},
    {"name": "rolling_standard", "type": "rolling", "percentage": 10.0, "hold_days": 120},
    {
        "name": "combined",
        "type": "both",
        "percentage": 15.0,
        "minimum_amount": 5000.0,
        "hold_days": 180,
    },
]

DEFAULT_DECISION_TABLE = {
    "low": {"lighter": "none", "neutral": "none", "heavier": "payout_delay"},
    "medium": {"lighter": "none", "neutral": "payout_delay", "heavier": "rolling_light"},
    "high": {"lighter": "payout_delay", "neutral": "rolling_light", "heavier": "rolling_standard"},
    "very_high": {"lighter": "rolling_light", "neutral": "rolling_standard", "heavier": "combined"},
}


def _load_json(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_score(score: Any) -> None:
    if not isinstance(score, int) or isinstance(score, bool):
        raise ValueError(f"Score must be an integer: {score!r}")
    if not MIN_FACTOR_SCORE <= score <= MAX_FACTOR_SCORE:
        raise ValueError(
            f"Score {score} outside {MIN_FACTOR_SCORE}-{MAX_FACTOR_SCORE}"
        )


def _check_rows(value: str, width: int, nullable_columns: Tuple[int, ...] = ()) -> List[list]:
    rows = _load_json(value)
    if not isinstance(rows, list) or not rows:
        raise ValueError("Ladder must be a non-empty list of rows")
    for row in rows:
        if not isinstance(row, list) or len(row) != width:
            raise ValueError(f"Each ladder row must have {width} values: {row!r}")
        for index, item in enumerate(row[:-1]):
            if item is None and index in nullable_columns:
                continue
            if not _is_number(item):
                raise ValueError(f"Ladder thresholds must be numbers: {row!r}")
        _check_score(row[-1])
    return rows


class ScoringSettings(BaseSettings):
    """
    Configurable rules for merchant risk scoring and reserve recommendation.

    All settings can be overridden via environment variables with SCORING_ prefix.
    Factor scores are 0-3. Rates and ratios are fractions (0-1).
    Trust scores are 0-100. Reserve percentages are percentage points.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # === Missing Input Policy ===
    missing_fact_policy: Literal["flag", "fail"] = Field(
        default="flag",
        description=(
            "flag: score unknown factors as 0 and mark the record partial; "
            "fail: reject the merchant naming the unknown factors"
        ),
    )

    # === Reason Resolver ===
    reason_priority_json: str = Field(
        default=json.dumps(DEFAULT_REASON_PRIORITY),
        description="Reason codes ordered most severe first, as a JSON list",
    )
    severe_reason_count: int = Field(
        default=2,
        ge=0,
        description="How many of the top-priority reasons count as severe",
    )

    # === Factor Ladders ===
    velocity_ladder_json: str = Field(
        default="[[30,50,3],[60,30,2],[180,20,1]]",
        description="[[max_account_age_days, min_max_daily_txn_count, score], ...]",
    )
    verification_ladder_json: str = Field(
        default="[[0.5,3],[0.3,2],[0.15,1]]",
        description="[[min_failure_rate, score], ...] applied to max(AVS, CVV)",
    )
    amount_pattern_ladder_json: str = Field(
        default="[[1000,0.1,3],[1000,null,2],[500,0.1,2],[500,null,1]]",
        description="[[min_avg_amount, max_coefficient_of_variation|null, score], ...]",
    )
    category_scores_json: str = Field(
        default=json.dumps({
            "gambling": 3,
            "cryptocurrency": 3,
            "adult_content": 3,
            "travel": 2,
            "ticketing": 2,
            "nutraceuticals": 2,
            "electronics": 1,
            "jewelry": 1,
            "digital_goods": 1,
        }),
        description="Industry -> fixed score; unlisted industries score 0",
    )
    age_activity_ladder_json: str = Field(
        default="[[14,10000,3],[30,25000,2],[60,50000,1]]",
        description="[[max_account_age_days, min_total_volume, score], ...]",
    )
    timing_ladder_json: str = Field(
        default="[[0.7,3],[0.5,2],[0.35,1]]",
        description="[[min_ratio, score], ...] applied to max(off-hours, weekend)",
    )
    adverse_rate_ladder_json: str = Field(
        default="[[0.01,3],[0.0075,2],[0.005,1]]",
        description="[[min_count_based_adverse_rate, score], ...]",
    )
    adverse_count_ladder_json: str = Field(
        default="[[50,3],[20,2],[5,1]]",
        description="[[min_adverse_event_count, score], ...]",
    )

    # === Composite Classification ===
    tier_cutoffs_json: str = Field(
        default='{"medium": 4, "high": 7, "very_high": 10}',
        description="Minimum composite score for each tier above low",
    )

    # === Trust Signal ===
    trust_high_threshold: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Trust score at or above this lightens the reserve by one band",
    )
    trust_low_threshold: float = Field(
        default=40.0,
        ge=0.0,
        le=100.0,
        description="Trust score below this makes the reserve one band heavier",
    )
    trust_category_adjustments_json: str = Field(
        default='{"high": "lighter", "medium": "neutral", "low": "heavier"}',
        description="Trust category -> adjustment, used when the trust score is unknown",
    )
    model_score_escalation_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Predictive-model score at or above this pushes the reserve heavier",
    )

    # === Reserve Decision Table ===
    reserve_bands_json: str = Field(
        default=json.dumps(DEFAULT_RESERVE_BANDS),
        description="Reserve bands ordered lightest to heaviest",
    )
    reserve_decision_table_json: str = Field(
        default=json.dumps(DEFAULT_DECISION_TABLE),
        description="tier -> {lighter, neutral, heavier} -> band name",
    )
    failed_transfer_override_band: str = Field(
        default="rolling_light",
        description="Minimum band when a recent fund transfer failed",
    )
    category_percentage_step: float = Field(
        default=2.5,
        ge=0.0,
        description="Percentage points added per category-risk point",
    )
    max_reserve_percentage: float = Field(
        default=50.0,
        gt=0.0,
        le=100.0,
        description="Upper bound on any recommended reserve percentage",
    )

    @field_validator("reason_priority_json")
    @classmethod
    def validate_reason_priority(cls, v: str) -> str:
        """Priority list must be unique, non-empty reason codes."""
        codes = _load_json(v)
        if not isinstance(codes, list):
            raise ValueError("Reason priority must be a list")
        for code in codes:
            if not isinstance(code, str) or not code.strip():
                raise ValueError(f"Reason codes must be non-empty strings: {code!r}")
        if len(set(codes)) != len(codes):
            raise ValueError("Reason priority list contains duplicates")
        return v

    @field_validator(
        "verification_ladder_json",
        "timing_ladder_json",
        "adverse_rate_ladder_json",
        "adverse_count_ladder_json",
    )
    @classmethod
    def validate_threshold_ladder(cls, v: str) -> str:
        """Rows are [threshold, score] with thresholds descending."""
        rows = _check_rows(v, width=2)
        thresholds = [row[0] for row in rows]
        if thresholds != sorted(thresholds, reverse=True) or len(set(thresholds)) != len(thresholds):
            raise ValueError("Ladder thresholds must be strictly descending")
        return v

    @field_validator("velocity_ladder_json", "age_activity_ladder_json")
    @classmethod
    def validate_age_gated_ladder(cls, v: str) -> str:
        """Rows are [max_age_days, min_value, score] with ages ascending."""
        rows = _check_rows(v, width=3)
        ages = [row[0] for row in rows]
        if ages != sorted(ages):
            raise ValueError("Age-gated ladder rows must be ordered by ascending age")
        return v

    @field_validator("amount_pattern_ladder_json")
    @classmethod
    def validate_amount_pattern_ladder(cls, v: str) -> str:
        """Rows are [min_avg_amount, max_cv|null, score]."""
        _check_rows(v, width=3, nullable_columns=(1,))
        return v

    @field_validator("category_scores_json")
    @classmethod
    def validate_category_scores(cls, v: str) -> str:
        scores = _load_json(v)
        if not isinstance(scores, dict):
            raise ValueError("Category scores must be an object")
        for category, score in scores.items():
            if not category.strip():
                raise ValueError("Category names cannot be empty")
            _check_score(score)
        return v

    @field_validator("tier_cutoffs_json")
    @classmethod
    def validate_tier_cutoffs(cls, v: str) -> str:
        """Cutoffs must cover medium/high/very_high and strictly ascend."""
        cutoffs = _load_json(v)
        expected = {tier.value for tier in ORDERED_TIERS[1:]}
        if not isinstance(cutoffs, dict) or set(cutoffs) != expected:
            raise ValueError(f"Tier cutoffs must define exactly {sorted(expected)}")
        values = [cutoffs[tier.value] for tier in ORDERED_TIERS[1:]]
        if not all(isinstance(x, int) and not isinstance(x, bool) for x in values):
            raise ValueError("Tier cutoffs must be integers")
        if values[0] < 1:
            raise ValueError("The medium cutoff must be at least 1")
        if any(lower >= upper for lower, upper in zip(values, values[1:])):
            raise ValueError(f"Tier cutoffs must be strictly ascending: {values}")
        return v

    @field_validator("trust_category_adjustments_json")
    @classmethod
    def validate_trust_categories(cls, v: str) -> str:
        mapping = _load_json(v)
        if not isinstance(mapping, dict):
            raise ValueError("Trust category adjustments must be an object")
        allowed = {a.value for a in TrustAdjustment}
        for category, adjustment in mapping.items():
            if adjustment not in allowed:
                raise ValueError(
                    f"Unknown adjustment {adjustment!r} for trust category {category!r}"
                )
        return v

    @field_validator("reserve_bands_json")
    @classmethod
    def validate_reserve_bands(cls, v: str) -> str:
        """Each band's fields must fit its reserve type."""
        bands = _load_json(v)
        if not isinstance(bands, list) or not bands:
            raise ValueError("Reserve bands must be a non-empty list")
        names = set()
        allowed_types = {t.value for t in ReserveType}
        for band in bands:
            if not isinstance(band, dict) or not band.get("name"):
                raise ValueError(f"Each band needs a name: {band!r}")
            name = band["name"]
            if name in names:
                raise ValueError(f"Duplicate reserve band: {name}")
            names.add(name)
            if band.get("type") not in allowed_types:
                raise ValueError(f"Band {name} has unknown type {band.get('type')!r}")
            reserve_type = ReserveType(band["type"])
            percentage = band.get("percentage")
            minimum = band.get("minimum_amount")
            hold_days = band.get("hold_days")
            if reserve_type == ReserveType.NONE and any(
                x is not None for x in (percentage, minimum, hold_days)
            ):
                raise ValueError(f"Band {name} of type none cannot hold funds")
            if reserve_type in (ReserveType.ROLLING, ReserveType.BOTH) and percentage is None:
                raise ValueError(f"Band {name} needs a percentage")
            if reserve_type in (ReserveType.FIXED, ReserveType.BOTH) and minimum is None:
                raise ValueError(f"Band {name} needs a minimum_amount")
            if reserve_type != ReserveType.NONE and hold_days is None:
                raise ValueError(f"Band {name} needs hold_days")
            if percentage is not None and not 0 < percentage <= 100:
                raise ValueError(f"Band {name} percentage out of range: {percentage}")
        return v

    @field_validator("reserve_decision_table_json")
    @classmethod
    def validate_decision_table(cls, v: str) -> str:
        """Every tier must define a band for every trust adjustment."""
        table = _load_json(v)
        if not isinstance(table, dict):
            raise ValueError("Decision table must be an object")
        for tier in ORDERED_TIERS:
            row = table.get(tier.value)
            if not isinstance(row, dict):
                raise ValueError(f"Decision table is missing tier {tier.value}")
            for adjustment in TrustAdjustment:
                if not isinstance(row.get(adjustment.value), str):
                    raise ValueError(
                        f"Decision table is missing {tier.value}/{adjustment.value}"
                    )
        return v

    @model_validator(mode="after")
    def validate_cross_references(self) -> "ScoringSettings":
        """Check rules that span several settings."""
        if self.trust_low_threshold >= self.trust_high_threshold:
            raise ValueError(
                "trust_low_threshold must be below trust_high_threshold"
            )

        band_order = {band.name: index for index, band in enumerate(self.reserve_bands)}
        table = _load_json(self.reserve_decision_table_json)
        for tier, row in table.items():
            for adjustment, band_name in row.items():
                if band_name not in band_order:
                    raise ValueError(
                        f"Decision table {tier}/{adjustment} references unknown band {band_name!r}"
                    )
            lighter = band_order[row[TrustAdjustment.LIGHTER.value]]
            neutral = band_order[row[TrustAdjustment.NEUTRAL.value]]
            heavier = band_order[row[TrustAdjustment.HEAVIER.value]]
            if not (neutral - 1 <= lighter <= neutral <= heavier <= neutral + 1):
                raise ValueError(
                    f"Decision table row {tier} may shift at most one band each way"
                )

        override = self.failed_transfer_override_band
        if override not in band_order:
            raise ValueError(f"Unknown failed_transfer_override_band {override!r}")
        override_type = self.reserve_bands[band_order[override]].reserve_type
        if override_type not in (ReserveType.ROLLING, ReserveType.BOTH):
            raise ValueError(
                "failed_transfer_override_band must be a rolling or both band"
            )
        return self

    @property
    def reason_priority(self) -> Tuple[str, ...]:
        """Reason codes, most severe first."""
        return tuple(json.loads(self.reason_priority_json))

    @property
    def velocity_ladder(self) -> ThresholdLadder:
        return age_gated_ladder(json.loads(self.velocity_ladder_json))

    @property
    def verification_ladder(self) -> ThresholdLadder:
        return threshold_ladder(json.loads(self.verification_ladder_json))

    @property
    def amount_pattern_ladder(self) -> ThresholdLadder:
        return amount_pattern_ladder(json.loads(self.amount_pattern_ladder_json))

    @property
    def age_activity_ladder(self) -> ThresholdLadder:
        return age_gated_ladder(json.loads(self.age_activity_ladder_json))

    @property
    def timing_ladder(self) -> ThresholdLadder:
        return threshold_ladder(json.loads(self.timing_ladder_json))

    @property
    def adverse_rate_ladder(self) -> ThresholdLadder:
        return threshold_ladder(json.loads(self.adverse_rate_ladder_json))

    @property
    def adverse_count_ladder(self) -> ThresholdLadder:
        return threshold_ladder(json.loads(self.adverse_count_ladder_json))

    @property
    def category_scores(self) -> Dict[str, int]:
        """Category map with normalized (lower-case) keys."""
        return {
            category.strip().lower(): score
            for category, score in json.loads(self.category_scores_json).items()
        }

    @property
    def tier_cutoffs(self) -> List[Tuple[int, RiskTier]]:
        """(minimum composite, tier) pairs, highest cutoff first."""
        cutoffs = json.loads(self.tier_cutoffs_json)
        return sorted(
            ((cutoffs[tier.value], tier) for tier in ORDERED_TIERS[1:]),
            key=lambda pair: pair[0],
            reverse=True,
        )

    @property
    def trust_category_adjustments(self) -> Dict[str, TrustAdjustment]:
        return {
            category.strip().lower(): TrustAdjustment(adjustment)
            for category, adjustment in json.loads(self.trust_category_adjustments_json).items()
        }

    @property
    def reserve_bands(self) -> Tuple[ReserveBand, ...]:
        """Configured bands, lightest first."""
        return tuple(
            ReserveBand(
                name=band["name"],
                reserve_type=ReserveType(band["type"]),
                percentage=band.get("percentage"),
                minimum_amount=band.get("minimum_amount"),
                hold_days=band.get("hold_days"),
            )
            for band in json.loads(self.reserve_bands_json)
        )

    @property
    def reserve_decision_table(self) -> Dict[RiskTier, Dict[TrustAdjustment, str]]:
        table = json.loads(self.reserve_decision_table_json)
        return {
            tier: {
                adjustment: table[tier.value][adjustment.value]
                for adjustment in TrustAdjustment
            }
            for tier in ORDERED_TIERS
        }

    @property
    def fingerprint(self) -> str:
        """Stable digest of the rule set, stamped on every recommendation."""
        canonical = json.dumps(self.model_dump(), sort_keys=True)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def load_scoring_settings(**overrides: Any) -> ScoringSettings:
    """
    Load and validate scoring rules, failing fast on a malformed rule set.

    Call once at the start of a run and pass the result to every merchant,
    so the whole run is judged by the same rules.

    Raises:
        ConfigurationException: If any rule fails validation
    """
    try:
        return ScoringSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationException(f"Invalid scoring configuration: {e}") from e


@lru_cache
def get_scoring_settings() -> ScoringSettings:
    """Get cached scoring settings instance.

    Module-level default for the pure scoring functions. Runs and health
    checks read the environment through load_scoring_settings instead.
    """
    return ScoringSettings()


scoring_settings = get_scoring_settings()
