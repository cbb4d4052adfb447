"""HTTP implementation of SignalStoreClient."""

import asyncio
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx
import structlog

from merchant_risk.core.config import settings
from merchant_risk.core.metrics import (
    track_signal_fetch_latency,
    record_signal_fetch_success,
    record_signal_fetch_failure,
)
from merchant_risk.domain.entities import (
    EventReason,
    Merchant,
    MerchantSignals,
    WindowedFactSet,
)
from merchant_risk.domain.exceptions import (
    MerchantNotFoundException,
    SignalStoreException,
    SignalStoreTimeoutException,
)
from merchant_risk.domain.interfaces import SignalStoreClient

logger = structlog.get_logger(__name__)

_INT_FACTS = (
    "transaction_count",
    "max_daily_txn_count",
    "active_days",
    "adverse_event_count",
    "failed_transfer_count",
    "unfulfilled_exposure_count",
)
_FLOAT_FACTS = (
    "total_volume",
    "avg_amount",
    "amount_std_dev",
    "max_daily_volume",
    "avs_failure_rate",
    "cvv_failure_rate",
    "high_risk_flag_rate",
    "off_hours_ratio",
    "weekend_ratio",
    "adverse_event_rate",
    "unfulfilled_exposure_amount",
)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _reason_count(item: Dict[str, Any]) -> int:
    """A reason row must carry a known, non-negative count."""
    count = item["count"]
    if count is None:
        raise ValueError(f"reason {item.get('reason_code')!r} has an unknown count")
    count = int(count)
    if count < 0:
        raise ValueError(f"reason {item.get('reason_code')!r} has a negative count")
    return count


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    if "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_signals_payload(data: Dict[str, Any]) -> MerchantSignals:
    """
    Parse a Signal Store snapshot into domain entities.

    Expected shape:
        {
            "snapshot_id": "snap-2026-10-18-0042",
            "as_of": "2026-10-18",
            "window_days": 90,
            "merchant": {"merchant_id": "m_1", "account_age_days": 10, ...},
            "facts": {"total_volume": 12000.0, "avs_failure_rate": null, ...},
            "reasons": [{"reason_code": "fraudulent", "count": 3}]
        }

    Absent keys and JSON nulls both become None (unknown), never 0. A reason
    row without a non-negative count is malformed.

    Raises:
        KeyError, ValueError: If a required field is missing or invalid
    """
    raw_merchant = data.get("merchant") or {}
    raw_facts = data.get("facts") or {}

    merchant = Merchant(
        merchant_id=str(raw_merchant["merchant_id"]),
        account_age_days=_optional_int(raw_merchant.get("account_age_days")),
        industry=raw_merchant.get("industry"),
        country=raw_merchant.get("country"),
        trust_score=_optional_float(raw_merchant.get("trust_score")),
        trust_category=raw_merchant.get("trust_category"),
        model_score=_optional_float(raw_merchant.get("model_score")),
    )

    metrics: Dict[str, Any] = {}
    for name in _INT_FACTS:
        metrics[name] = _optional_int(raw_facts.get(name))
    for name in _FLOAT_FACTS:
        metrics[name] = _optional_float(raw_facts.get(name))

    facts = WindowedFactSet(
        snapshot_id=str(data["snapshot_id"]),
        merchant_id=merchant.merchant_id,
        window_days=int(data.get("window_days", settings.signal_store_window_days)),
        as_of=_parse_date(data.get("as_of")),
        **metrics,
    )

    reasons = tuple(
        EventReason(reason_code=str(item["reason_code"]), count=_reason_count(item))
        for item in data.get("reasons") or []
    )

    return MerchantSignals(merchant=merchant, facts=facts, reasons=reasons)


class HttpSignalStoreClient(SignalStoreClient):
    """
    HTTP client for the Windowed Signal Store.

    Fetches point-in-time fact snapshots with retry logic and proper
    error handling.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        window_days: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url or settings.signal_store_url
        self._timeout = timeout or settings.signal_store_timeout
        self._max_retries = max_retries or settings.signal_store_max_retries
        self._window_days = window_days or settings.signal_store_window_days
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def get_signals(self, merchant_id: str) -> MerchantSignals:
        """
        Fetch the windowed fact snapshot for a merchant.

        Implements retry logic with exponential backoff.
        """
        url = f"{self._base_url}/merchants/{merchant_id}/signals"
        params = {"window_days": self._window_days}

        data = await self._get_json(url, params, merchant_id=merchant_id)
        try:
            return parse_signals_payload(data)
        except (KeyError, TypeError, ValueError) as e:
            record_signal_fetch_failure("malformed")
            raise SignalStoreException(
                message=f"Malformed signal snapshot for {merchant_id}: {e}",
            ) from e

    async def list_merchant_ids(self) -> List[str]:
        """List merchants with a current snapshot."""
        url = f"{self._base_url}/merchants"
        data = await self._get_json(url, {"window_days": self._window_days})
        return [str(merchant_id) for merchant_id in data.get("merchant_ids", [])]

    async def _get_json(
        self,
        url: str,
        params: Dict[str, Any],
        merchant_id: str | None = None,
    ) -> Dict[str, Any]:
        last_exception = None

        for attempt in range(self._max_retries):
            try:
                with track_signal_fetch_latency():
                    async with self._client() as client:
                        response = await client.get(url, params=params)

                        if response.status_code == 404 and merchant_id is not None:
                            record_signal_fetch_failure("not_found")
                            raise MerchantNotFoundException(merchant_id)

                        if response.status_code >= 400:
                            record_signal_fetch_failure("error")
                            raise SignalStoreException(
                                message=f"Signal Store error: {response.text}",
                                status_code=response.status_code,
                            )

                        data = response.json()
                        record_signal_fetch_success()
                        return data

            except httpx.TimeoutException:
                record_signal_fetch_failure("timeout")
                last_exception = SignalStoreTimeoutException()
                logger.warning(
                    "signal_store_timeout",
                    merchant_id=merchant_id,
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                )
            except (MerchantNotFoundException, SignalStoreException):
                raise
            except Exception as e:
                record_signal_fetch_failure("error")
                last_exception = SignalStoreException(
                    message=f"Unexpected error: {str(e)}",
                )
                logger.error(
                    "signal_store_error",
                    merchant_id=merchant_id,
                    attempt=attempt + 1,
                    error=str(e),
                )

            # Exponential backoff
            if attempt < self._max_retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        raise last_exception or SignalStoreException("Failed to fetch signals")
