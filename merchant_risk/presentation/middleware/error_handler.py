"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from merchant_risk.domain.exceptions import (
    ConfigurationException,
    DomainException,
    InvalidScoringRequestException,
    MerchantNotFoundException,
    MissingFactException,
    RecommendationNotFoundException,
    SignalStoreException,
    SignalStoreTimeoutException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": code,
            "message": message,
            "request_id": get_request_id(),
        },
    )


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(MerchantNotFoundException)
    async def merchant_not_found_handler(
        request: Request,
        exc: MerchantNotFoundException,
    ) -> JSONResponse:
        """Handle merchant not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(RecommendationNotFoundException)
    async def recommendation_not_found_handler(
        request: Request,
        exc: RecommendationNotFoundException,
    ) -> JSONResponse:
        """Handle recommendation not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(InvalidScoringRequestException)
    async def invalid_request_handler(
        request: Request,
        exc: InvalidScoringRequestException,
    ) -> JSONResponse:
        """Handle invalid request errors."""
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(MissingFactException)
    async def missing_fact_handler(
        request: Request,
        exc: MissingFactException,
    ) -> JSONResponse:
        """Handle merchants rejected for unknown inputs."""
        logger.warning(
            "missing_fact",
            request_id=get_request_id(),
            merchant_id=exc.merchant_id,
            missing_factors=list(exc.missing_factors),
        )
        return _error_response(422, exc.code, exc.message)

    @app.exception_handler(ConfigurationException)
    async def configuration_error_handler(
        request: Request,
        exc: ConfigurationException,
    ) -> JSONResponse:
        """Handle malformed scoring rules."""
        logger.error(
            "scoring_configuration_invalid",
            request_id=get_request_id(),
            message=exc.message,
        )
        return _error_response(500, exc.code, exc.message)

    @app.exception_handler(SignalStoreTimeoutException)
    async def signal_store_timeout_handler(
        request: Request,
        exc: SignalStoreTimeoutException,
    ) -> JSONResponse:
        """Handle Signal Store timeout errors."""
        logger.error(
            "signal_store_timeout",
            request_id=get_request_id(),
        )
        return _error_response(
            503, exc.code, "Service temporarily unavailable. Please try again."
        )

    @app.exception_handler(SignalStoreException)
    async def signal_store_error_handler(
        request: Request,
        exc: SignalStoreException,
    ) -> JSONResponse:
        """Handle Signal Store errors."""
        logger.error(
            "signal_store_error",
            request_id=get_request_id(),
            message=exc.message,
            status_code=exc.status_code,
        )
        return _error_response(
            503, exc.code, "Unable to fetch merchant signals. Please try again later."
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")
