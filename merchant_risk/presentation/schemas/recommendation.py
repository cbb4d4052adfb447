"""Recommendation-related Pydantic schemas."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScoreRequestSchema(BaseModel):
    """Schema for POST /v1/recommendations request body."""

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"merchant_id": "merchant_risky"}]}
    )
    merchant_id: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Identifier of the merchant to score",
        examples=["merchant_risky"],
    )

    @field_validator("merchant_id")
    @classmethod
    def validate_merchant_id(cls, v: str) -> str:
        """Ensure merchant_id is not just whitespace."""
        if not v.strip():
            raise ValueError("merchant_id cannot be empty or whitespace")
        return v.strip()


class FactorScoresSchema(BaseModel):
    """Decision-driving factor scores (0-3, null when the input was unknown)."""

    velocity: Optional[int] = Field(None, ge=0, le=3)
    verification_failures: Optional[int] = Field(None, ge=0, le=3)
    amount_pattern: Optional[int] = Field(None, ge=0, le=3)
    category: Optional[int] = Field(None, ge=0, le=3)
    age_vs_activity: Optional[int] = Field(None, ge=0, le=3)
    timing: Optional[int] = Field(None, ge=0, le=3)


class ReservePolicySchema(BaseModel):
    """Schema for the recommended reserve policy."""

    reserve_type: str = Field(
        ...,
        description="none, fixed, rolling, time_delay or both",
        examples=["rolling"],
    )
    percentage: Optional[float] = Field(
        None,
        description="Share of volume withheld, in percentage points",
        examples=[10.0],
    )
    minimum_amount: Optional[float] = Field(
        None,
        description="Fixed amount withheld",
    )
    hold_days: Optional[int] = Field(
        None,
        description="How long funds are held",
        examples=[120],
    )
    band: str = Field(..., description="Configured band the policy came from")
    rule: str = Field(
        ...,
        description="Decision-table cell or override that produced the policy",
        examples=["high/neutral"],
    )


class RecommendationResponseSchema(BaseModel):
    """Schema for a single recommendation record."""

    recommendation_id: str = Field(..., description="UUID of the recommendation")
    merchant_id: str = Field(..., description="The merchant's identifier")
    snapshot_id: str = Field(..., description="Signal Store snapshot the record was computed from")
    factor_scores: FactorScoresSchema
    historical_adverse_event_score: Optional[int] = Field(
        None,
        ge=0,
        le=3,
        description="Dispute-history factor (model validation only, not in the composite)",
    )
    composite_score: int = Field(..., ge=0, description="Sum of the factor scores")
    risk_tier: str = Field(..., description="low, medium, high or very_high", examples=["high"])
    dominant_reason: str = Field(..., description="Dominant adverse-event reason code")
    reserve: ReservePolicySchema
    partial: bool = Field(..., description="True when unknown inputs were scored as 0")
    missing_inputs: list[str] = Field(default_factory=list)
    ruleset_fingerprint: str = Field(..., description="Digest of the scoring rules used")
    computed_at: str = Field(..., description="ISO 8601 computation timestamp")
    explanation: str = Field(..., description="Human-readable summary for reviewers")
    inputs: Dict[str, Any] = Field(
        default_factory=dict,
        description="Audit trail of every input value used",
    )


class RecommendationSummarySchema(BaseModel):
    """Schema for a recommendation summary in history."""

    recommendation_id: str
    snapshot_id: str
    composite_score: int
    risk_tier: str
    reserve_type: str
    reserve_percentage: Optional[float] = None
    partial: bool
    computed_at: str


class RecommendationHistoryResponseSchema(BaseModel):
    """Schema for GET /v1/recommendations/history response."""

    merchant_id: str = Field(..., description="The merchant's identifier")
    recommendations: list[RecommendationSummarySchema] = Field(
        ...,
        description="Stored recommendations, newest first",
    )
