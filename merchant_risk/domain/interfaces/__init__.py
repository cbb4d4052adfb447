"""
Domain Interfaces (Ports)
"""

from .clients import CaseWebhookClient, SignalStoreClient
from .repositories import RecommendationRepository

__all__ = [
    "CaseWebhookClient",
    "SignalStoreClient",
    "RecommendationRepository",
]
