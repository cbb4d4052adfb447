"""Application services (use cases)."""

from .recommendation_service import RecommendationService

__all__ = [
    "RecommendationService",
]
