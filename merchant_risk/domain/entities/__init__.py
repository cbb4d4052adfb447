"""Domain Entities - Core business objects."""

from .batch import BatchSummary, EntityFailure
from .merchant import Merchant
from .recommendation import (
    ORDERED_TIERS,
    FactorScores,
    RecommendationRecord,
    ReservePolicy,
    ReserveType,
    RiskTier,
)
from .signals import EventReason, MerchantSignals, WindowedFactSet

__all__ = [
    "BatchSummary",
    "EntityFailure",
    "Merchant",
    "ORDERED_TIERS",
    "FactorScores",
    "RecommendationRecord",
    "ReservePolicy",
    "ReserveType",
    "RiskTier",
    "EventReason",
    "MerchantSignals",
    "WindowedFactSet",
]
