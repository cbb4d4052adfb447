"""External client interfaces."""

from abc import ABC, abstractmethod
from typing import List

from merchant_risk.domain.entities import MerchantSignals, RecommendationRecord


class SignalStoreClient(ABC):
    """
    Abstract client for the Windowed Signal Store.

    Supplies pre-aggregated per-merchant facts; the engine never ingests
    raw events itself.
    """

    @abstractmethod
    async def get_signals(self, merchant_id: str) -> MerchantSignals:
        """
        Fetch the current windowed fact snapshot for a merchant.

        Args:
            merchant_id: The merchant's identifier

        Returns:
            Merchant attributes, windowed facts and event reasons

        Raises:
            MerchantNotFoundException: If the merchant doesn't exist
            SignalStoreException: If the store returns an error
            SignalStoreTimeoutException: If the request times out
        """
        ...

    @abstractmethod
    async def list_merchant_ids(self) -> List[str]:
        """
        List the merchants that have a current snapshot.

        Used by batch runs that don't name their merchants explicitly.
        """
        ...


class CaseWebhookClient(ABC):
    """
    Abstract client for the downstream case-management webhook.

    Receives recommendation records so that reviewers can act on them.
    """

    @abstractmethod
    async def send_recommendation_created(self, record: RecommendationRecord) -> bool:
        """
        Send a recommendation created event.

        Args:
            record: The recommendation that was produced

        Returns:
            True if the webhook was delivered successfully

        Note:
            Implementations should handle retries with backoff.
        """
        ...
