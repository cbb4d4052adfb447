"""Repository implementations."""

from .recommendation_repository import PostgresRecommendationRepository

__all__ = [
    "PostgresRecommendationRepository",
]
