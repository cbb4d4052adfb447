"""Batch run API endpoint (the hook for scheduled jobs)."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends

from merchant_risk.application.dto import BatchRequest
from merchant_risk.application.services import RecommendationService
from merchant_risk.core.dependencies import get_recommendation_service
from merchant_risk.presentation.schemas import (
    BatchRequestSchema,
    BatchSummaryResponseSchema,
    ErrorResponseSchema,
)

batch_router = APIRouter(prefix="/batch-runs")


@batch_router.post(
    "",
    response_model=BatchSummaryResponseSchema,
    status_code=200,
    summary="Run Batch Scoring",
    description="""
    Score many merchants in one run with a bounded worker pool.

    Merchants that fail are listed in the summary; they never fail the run.
    Malformed scoring rules fail the whole run before any merchant is scored.
    """,
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        500: {"model": ErrorResponseSchema, "description": "Scoring rules misconfigured"},
        503: {"model": ErrorResponseSchema, "description": "Signal Store unavailable"},
    },
)
async def run_batch(
    request: BatchRequestSchema,
    recommendation_service: Annotated[
        RecommendationService, Depends(get_recommendation_service)
    ],
) -> BatchSummaryResponseSchema:
    response = await recommendation_service.run_batch(
        BatchRequest(
            merchant_ids=tuple(request.merchant_ids),
            concurrency=request.concurrency,
        )
    )
    return BatchSummaryResponseSchema.model_validate(asdict(response))
