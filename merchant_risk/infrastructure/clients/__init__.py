"""External API client implementations."""

from .case_webhook_client import HttpCaseWebhookClient
from .signal_store_client import HttpSignalStoreClient, parse_signals_payload

__all__ = [
    "HttpCaseWebhookClient",
    "HttpSignalStoreClient",
    "parse_signals_payload",
]
