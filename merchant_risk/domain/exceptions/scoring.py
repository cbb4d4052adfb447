"""Scoring-related domain exceptions."""

from typing import Sequence

from .base import DomainException


class MissingFactException(DomainException):
    """Raised when required factor inputs are unknown and the policy is to fail."""

    def __init__(self, missing_factors: Sequence[str], merchant_id: str | None = None):
        names = ", ".join(missing_factors)
        subject = f" for merchant {merchant_id}" if merchant_id else ""
        super().__init__(
            message=f"Required inputs unknown{subject}: {names}",
            code="MISSING_FACT",
        )
        self.missing_factors = tuple(missing_factors)
        self.merchant_id = merchant_id


class ConfigurationException(DomainException):
    """Raised when scoring rules (ladders, tables, priority lists) are malformed."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
        )


class InvalidScoringRequestException(DomainException):
    """Raised when a scoring request is invalid."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_SCORING_REQUEST",
        )
