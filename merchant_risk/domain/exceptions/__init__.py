"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .recommendation import RecommendationNotFoundException
from .scoring import (
    ConfigurationException,
    InvalidScoringRequestException,
    MissingFactException,
)
from .signal_store import (
    MerchantNotFoundException,
    SignalStoreException,
    SignalStoreTimeoutException,
)

__all__ = [
    "DomainException",
    "RecommendationNotFoundException",
    "ConfigurationException",
    "InvalidScoringRequestException",
    "MissingFactException",
    "MerchantNotFoundException",
    "SignalStoreException",
    "SignalStoreTimeoutException",
]
