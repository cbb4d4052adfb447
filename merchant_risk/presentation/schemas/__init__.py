"""Pydantic schemas for API request/response validation."""

from .batch import BatchRequestSchema, BatchSummaryResponseSchema, EntityFailureSchema
from .error import ErrorResponseSchema
from .recommendation import (
    FactorScoresSchema,
    RecommendationHistoryResponseSchema,
    RecommendationResponseSchema,
    RecommendationSummarySchema,
    ReservePolicySchema,
    ScoreRequestSchema,
)

__all__ = [
    "BatchRequestSchema",
    "BatchSummaryResponseSchema",
    "EntityFailureSchema",
    "ErrorResponseSchema",
    "FactorScoresSchema",
    "RecommendationHistoryResponseSchema",
    "RecommendationResponseSchema",
    "RecommendationSummarySchema",
    "ReservePolicySchema",
    "ScoreRequestSchema",
]
