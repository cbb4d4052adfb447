"""Batch run Pydantic schemas."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BatchRequestSchema(BaseModel):
    """Schema for POST /v1/batch-runs request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"merchant_ids": ["merchant_risky", "merchant_established"], "concurrency": 4},
                {},
            ]
        }
    )
    merchant_ids: list[str] = Field(
        default_factory=list,
        description="Merchants to score; empty means every merchant in the Signal Store",
    )
    concurrency: Optional[int] = Field(
        None,
        ge=1,
        le=64,
        description="Maximum merchants scored at once (defaults to BATCH_CONCURRENCY)",
    )


class EntityFailureSchema(BaseModel):
    """One merchant that could not be scored."""

    merchant_id: str
    error_code: str = Field(..., examples=["MERCHANT_NOT_FOUND"])
    message: str


class BatchSummaryResponseSchema(BaseModel):
    """Schema for POST /v1/batch-runs response body."""

    run_id: str = Field(..., description="UUID of the batch run")
    ruleset_fingerprint: str = Field(..., description="Digest of the scoring rules used")
    started_at: str
    finished_at: Optional[str] = None
    duration_seconds: float
    requested: int = Field(..., ge=0)
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    tier_counts: Dict[str, int] = Field(default_factory=dict)
    recommendation_ids: list[str] = Field(default_factory=list)
    failures: list[EntityFailureSchema] = Field(default_factory=list)
