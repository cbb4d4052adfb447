"""Data Transfer Objects for application layer."""

from .batch import BatchRequest, BatchSummaryResponse, EntityFailureDTO
from .recommendation import (
    FactorScoresDTO,
    RecommendationHistoryResponse,
    RecommendationResponse,
    RecommendationSummary,
    ReservePolicyDTO,
    ScoreRequest,
)

__all__ = [
    "BatchRequest",
    "BatchSummaryResponse",
    "EntityFailureDTO",
    "FactorScoresDTO",
    "RecommendationHistoryResponse",
    "RecommendationResponse",
    "RecommendationSummary",
    "ReservePolicyDTO",
    "ScoreRequest",
]
