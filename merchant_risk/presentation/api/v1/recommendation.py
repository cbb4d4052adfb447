"""Recommendation API endpoints."""

from dataclasses import asdict
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from merchant_risk.application.dto import ScoreRequest
from merchant_risk.application.services import RecommendationService
from merchant_risk.core.dependencies import get_recommendation_service
from merchant_risk.presentation.schemas import (
    ErrorResponseSchema,
    RecommendationHistoryResponseSchema,
    RecommendationResponseSchema,
    ScoreRequestSchema,
)

recommendation_router = APIRouter(
    prefix="/recommendations",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        500: {"model": ErrorResponseSchema, "description": "Scoring rules misconfigured"},
    },
)


@recommendation_router.post(
    "",
    response_model=RecommendationResponseSchema,
    status_code=201,
    summary="Score Merchant",
    description="""
    Score one merchant on demand from its current Signal Store snapshot.

    Creates and stores a new recommendation record; earlier records for
    the merchant are never modified.
    """,
    responses={
        201: {"description": "Recommendation created"},
        404: {"model": ErrorResponseSchema, "description": "Merchant not found"},
        422: {"model": ErrorResponseSchema, "description": "Required inputs unknown"},
        503: {"model": ErrorResponseSchema, "description": "Signal Store unavailable"},
    },
)
async def create_recommendation(
    request: ScoreRequestSchema,
    recommendation_service: Annotated[
        RecommendationService, Depends(get_recommendation_service)
    ],
) -> RecommendationResponseSchema:
    response = await recommendation_service.score_merchant(
        ScoreRequest(merchant_id=request.merchant_id)
    )
    return RecommendationResponseSchema.model_validate(asdict(response))


@recommendation_router.get(
    "/history",
    response_model=RecommendationHistoryResponseSchema,
    summary="Get Recommendation History",
    description="""
    Retrieve stored recommendations for a merchant, newest first.
    """,
)
async def get_recommendation_history(
    merchant_id: Annotated[
        str,
        Query(
            min_length=1,
            max_length=255,
            description="Merchant ID to get history for",
        ),
    ],
    recommendation_service: Annotated[
        RecommendationService, Depends(get_recommendation_service)
    ],
    limit: Annotated[
        int,
        Query(ge=1, le=100, description="Maximum number of records to return"),
    ] = 10,
) -> RecommendationHistoryResponseSchema:
    response = await recommendation_service.get_history(merchant_id, limit)
    return RecommendationHistoryResponseSchema.model_validate(asdict(response))


@recommendation_router.get(
    "/{recommendation_id}",
    response_model=RecommendationResponseSchema,
    summary="Get Recommendation",
    description="Retrieve one stored recommendation, including its audit trail.",
    responses={
        404: {"model": ErrorResponseSchema, "description": "Recommendation not found"},
    },
)
async def get_recommendation(
    recommendation_id: Annotated[
        UUID,
        Path(description="UUID of the recommendation to retrieve"),
    ],
    recommendation_service: Annotated[
        RecommendationService, Depends(get_recommendation_service)
    ],
) -> RecommendationResponseSchema:
    response = await recommendation_service.get_recommendation(recommendation_id)
    return RecommendationResponseSchema.model_validate(asdict(response))
