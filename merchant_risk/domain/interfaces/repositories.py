"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from merchant_risk.domain.entities import RecommendationRecord


class RecommendationRepository(ABC):
    """
    Abstract repository for RecommendationRecord persistence.

    Records are append-only: there is no update operation.
    """

    @abstractmethod
    async def save(self, record: RecommendationRecord) -> RecommendationRecord:
        """
        Persist a recommendation.

        Args:
            record: The recommendation to save

        Returns:
            The saved recommendation
        """
        ...

    @abstractmethod
    async def get_by_id(self, recommendation_id: UUID) -> Optional[RecommendationRecord]:
        """
        Retrieve a recommendation by ID.

        Args:
            recommendation_id: The recommendation's unique identifier

        Returns:
            The recommendation if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_by_merchant_id(
        self,
        merchant_id: str,
        limit: int = 10,
        offset: int = 0,
    ) -> List[RecommendationRecord]:
        """
        Retrieve recommendations for a merchant.

        Args:
            merchant_id: The merchant's identifier
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            List of recommendations, ordered by computed_at descending
        """
        ...
