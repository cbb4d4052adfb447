"""Recommendation-related domain exceptions."""

from .base import DomainException


class RecommendationNotFoundException(DomainException):
    """Raised when a recommendation cannot be found."""

    def __init__(self, recommendation_id: str):
        super().__init__(
            message=f"Recommendation not found: {recommendation_id}",
            code="RECOMMENDATION_NOT_FOUND",
        )
        self.recommendation_id = recommendation_id
