"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from merchant_risk.application.services import RecommendationService
from merchant_risk.core.config import settings
from merchant_risk.infrastructure.clients import (
    HttpCaseWebhookClient,
    HttpSignalStoreClient,
)
from merchant_risk.infrastructure.database import get_db_session
from merchant_risk.infrastructure.repositories import PostgresRecommendationRepository


# Repository dependencies
async def get_recommendation_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresRecommendationRepository:
    """Get a RecommendationRepository instance."""
    return PostgresRecommendationRepository(session)


# External client dependencies
def get_signal_store_client() -> HttpSignalStoreClient:
    """Get a SignalStoreClient instance."""
    return HttpSignalStoreClient()


def get_case_webhook_client() -> HttpCaseWebhookClient:
    """Get a CaseWebhookClient instance."""
    return HttpCaseWebhookClient()


# Service dependencies
async def get_recommendation_service(
    recommendation_repo: Annotated[
        PostgresRecommendationRepository, Depends(get_recommendation_repository)
    ],
    signal_store: Annotated[HttpSignalStoreClient, Depends(get_signal_store_client)],
    case_webhook: Annotated[HttpCaseWebhookClient, Depends(get_case_webhook_client)],
) -> RecommendationService:
    """Get a RecommendationService instance with all dependencies."""
    return RecommendationService(
        recommendation_repository=recommendation_repo,
        signal_store_client=signal_store,
        case_webhook_client=case_webhook,
        batch_concurrency=settings.batch_concurrency,
        case_webhook_min_tier=settings.case_webhook_tier,
    )
