"""HTTP implementation of CaseWebhookClient."""

import asyncio
from typing import Any, Dict

import httpx
import structlog

from merchant_risk.core.config import settings
from merchant_risk.core.metrics import (
    track_case_webhook_latency,
    record_case_webhook_retry,
    record_case_webhook_success,
    record_case_webhook_failure,
)
from merchant_risk.domain.entities import RecommendationRecord
from merchant_risk.domain.interfaces import CaseWebhookClient

logger = structlog.get_logger(__name__)


class HttpCaseWebhookClient(CaseWebhookClient):
    """
    HTTP client for the case-management webhook.

    Sends recommendation notifications with retry logic and exponential
    backoff. Delivery failures are reported, never raised.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url or settings.case_webhook_url
        self._timeout = timeout or settings.case_webhook_timeout
        self._max_retries = max_retries
        self._transport = transport

    async def send_recommendation_created(self, record: RecommendationRecord) -> bool:
        """Send a recommendation created webhook to case management."""
        payload = {"event": "recommendation_created", **record.to_dict()}
        return await self._send_webhook(payload, "recommendation_created")

    async def _send_webhook(
        self,
        payload: Dict[str, Any],
        event_type: str,
    ) -> bool:
        """
        Send a webhook with retry logic.

        Uses exponential backoff: 0.1s, 0.2s, 0.4s, 0.8s
        """
        url = self._base_url

        for attempt in range(self._max_retries):
            try:
                with track_case_webhook_latency():
                    async with httpx.AsyncClient(
                        timeout=self._timeout, transport=self._transport
                    ) as client:
                        response = await client.post(
                            url,
                            json=payload,
                            headers={"Content-Type": "application/json"},
                        )

                        if response.status_code < 400:
                            logger.info(
                                "case_webhook_sent",
                                event_type=event_type,
                                merchant_id=payload.get("merchant_id"),
                                status_code=response.status_code,
                            )
                            record_case_webhook_success()
                            return True

                        logger.warning(
                            "case_webhook_failed",
                            event_type=event_type,
                            status_code=response.status_code,
                            attempt=attempt + 1,
                            response=response.text[:200],
                        )

            except httpx.TimeoutException:
                logger.warning(
                    "case_webhook_timeout",
                    event_type=event_type,
                    attempt=attempt + 1,
                )
            except httpx.HTTPError as e:
                logger.error(
                    "case_webhook_error",
                    event_type=event_type,
                    attempt=attempt + 1,
                    error=str(e),
                )

            if attempt < self._max_retries - 1:
                record_case_webhook_retry()
                await asyncio.sleep(2 ** attempt * 0.1)

        logger.error(
            "case_webhook_exhausted_retries",
            event_type=event_type,
            max_retries=self._max_retries,
        )
        record_case_webhook_failure()
        return False
