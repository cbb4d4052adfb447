"""Recommendation service - orchestrates merchant scoring use cases."""

import asyncio
from typing import Callable, List, Optional, Sequence, Union
from uuid import UUID

import structlog

from merchant_risk.application.dto import (
    BatchRequest,
    BatchSummaryResponse,
    RecommendationHistoryResponse,
    RecommendationResponse,
    ScoreRequest,
)
from merchant_risk.core.metrics import (
    record_batch_run,
    record_entity_failure,
    record_recommendation,
    track_scoring_latency,
)
from merchant_risk.domain.entities import (
    BatchSummary,
    EntityFailure,
    RecommendationRecord,
    RiskTier,
)
from merchant_risk.domain.exceptions import (
    DomainException,
    InvalidScoringRequestException,
    RecommendationNotFoundException,
)
from merchant_risk.domain.interfaces import (
    CaseWebhookClient,
    RecommendationRepository,
    SignalStoreClient,
)
from merchant_risk.service.scoring import (
    ScoringSettings,
    load_scoring_settings,
    score_merchant,
)

logger = structlog.get_logger(__name__)

PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class RecommendationService:
    """
    Application service for merchant risk recommendation use cases.

    Single-merchant scoring and batch runs share one pipeline: fetch the
    snapshot, score it, persist the record, publish it to case management.
    """

    DEFAULT_BATCH_CONCURRENCY = 8

    def __init__(
        self,
        recommendation_repository: RecommendationRepository,
        signal_store_client: SignalStoreClient,
        case_webhook_client: CaseWebhookClient,
        scoring_settings_loader: Callable[[], ScoringSettings] = load_scoring_settings,
        batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY,
        case_webhook_min_tier: RiskTier = RiskTier.HIGH,
    ):
        self._recommendation_repo = recommendation_repository
        self._signal_store = signal_store_client
        self._case_webhook = case_webhook_client
        self._load_scoring_settings = scoring_settings_loader
        self._batch_concurrency = batch_concurrency
        self._case_webhook_min_tier = case_webhook_min_tier

    async def score_merchant(self, request: ScoreRequest) -> RecommendationResponse:
        """
        Score one merchant on demand.

        Args:
            request: The scoring request naming the merchant

        Returns:
            RecommendationResponse for the new record

        Raises:
            InvalidScoringRequestException: If request validation fails
            ConfigurationException: If the scoring rules are malformed
            MerchantNotFoundException: If the Signal Store has no such merchant
            SignalStoreException: If the Signal Store fails
            MissingFactException: If inputs are unknown and the policy is "fail"
        """
        errors = request.validate()
        if errors:
            raise InvalidScoringRequestException("; ".join(errors))

        merchant_id = request.merchant_id.strip()
        log = logger.bind(merchant_id=merchant_id)
        log.info("scoring_requested")

        rules = self._load_scoring_settings()
        with track_scoring_latency():
            record = await self._fetch_and_score(merchant_id, rules)

        await self._store(record)
        await self._publish(record)

        log.info(
            "recommendation_created",
            recommendation_id=str(record.id),
            composite_score=record.composite_score,
            risk_tier=record.risk_tier.value,
            reserve_type=record.reserve.reserve_type.value,
            partial=record.partial,
        )

        return RecommendationResponse.from_entity(record)

    async def run_batch(self, request: BatchRequest) -> BatchSummaryResponse:
        """
        Score many merchants with a bounded pool of concurrent workers.

        Scoring rules are loaded once before any merchant is scored and are
        shared, frozen, by every worker. A merchant that fails is recorded
        in the summary and never stops the run.

        Raises:
            InvalidScoringRequestException: If request validation fails
            ConfigurationException: If the scoring rules are malformed
        """
        errors = request.validate()
        if errors:
            raise InvalidScoringRequestException("; ".join(errors))

        rules = self._load_scoring_settings()

        merchant_ids = self._dedupe(request.merchant_ids)
        if not merchant_ids:
            merchant_ids = self._dedupe(await self._signal_store.list_merchant_ids())

        summary = BatchSummary(
            ruleset_fingerprint=rules.fingerprint,
            requested=len(merchant_ids),
        )
        log = logger.bind(run_id=str(summary.id))
        log.info(
            "batch_started",
            requested=summary.requested,
            ruleset_fingerprint=summary.ruleset_fingerprint,
        )

        semaphore = asyncio.Semaphore(request.concurrency or self._batch_concurrency)

        async def worker(merchant_id: str) -> Union[RecommendationRecord, EntityFailure]:
            async with semaphore:
                return await self._score_entity(merchant_id, rules, log)

        results = await asyncio.gather(*(worker(m) for m in merchant_ids))

        # Persist sequentially: the repository session is not shared across tasks.
        stored: List[RecommendationRecord] = []
        for result in results:
            if isinstance(result, RecommendationRecord):
                result = await self._store_entity(result, log)
            if isinstance(result, EntityFailure):
                summary.failures.append(result)
                record_entity_failure(result.error_code)
                continue
            stored.append(result)
            summary.recommendation_ids.append(result.id)
            tier = result.risk_tier.value
            summary.tier_counts[tier] = summary.tier_counts.get(tier, 0) + 1

        async def publisher(record: RecommendationRecord) -> None:
            async with semaphore:
                await self._publish(record)

        await asyncio.gather(*(publisher(record) for record in stored))

        summary.mark_finished()
        record_batch_run(summary.duration_seconds, summary.failed)

        log.info(
            "batch_completed",
            requested=summary.requested,
            succeeded=summary.succeeded,
            failed=summary.failed,
            tier_counts=summary.tier_counts,
            duration_seconds=round(summary.duration_seconds, 3),
        )

        return BatchSummaryResponse.from_entity(summary)

    async def get_recommendation(self, recommendation_id: UUID) -> RecommendationResponse:
        """
        Get a stored recommendation by ID.

        Raises:
            RecommendationNotFoundException: If the recommendation doesn't exist
        """
        record = await self._recommendation_repo.get_by_id(recommendation_id)
        if record is None:
            raise RecommendationNotFoundException(str(recommendation_id))
        return RecommendationResponse.from_entity(record)

    async def get_history(
        self,
        merchant_id: str,
        limit: int = 10,
    ) -> RecommendationHistoryResponse:
        """
        Get stored recommendations for a merchant, newest first.

        Comparing runs is left to the consumer.
        """
        records = await self._recommendation_repo.get_by_merchant_id(merchant_id, limit=limit)
        return RecommendationHistoryResponse.from_entities(merchant_id, records)

    async def _fetch_and_score(
        self,
        merchant_id: str,
        rules: ScoringSettings,
    ) -> RecommendationRecord:
        signals = await self._signal_store.get_signals(merchant_id)
        return score_merchant(signals, rules)

    async def _score_entity(
        self,
        merchant_id: str,
        rules: ScoringSettings,
        log,
    ) -> Union[RecommendationRecord, EntityFailure]:
        """Run one merchant's fetch-then-score pipeline, capturing failures."""
        try:
            with track_scoring_latency():
                return await self._fetch_and_score(merchant_id, rules)
        except DomainException as e:
            log.warning(
                "entity_scoring_failed",
                merchant_id=merchant_id,
                error_code=e.code,
                message=e.message,
            )
            return EntityFailure(merchant_id=merchant_id, error_code=e.code, message=e.message)
        except Exception as e:
            log.exception(
                "entity_scoring_error",
                merchant_id=merchant_id,
                error_type=type(e).__name__,
            )
            return EntityFailure(
                merchant_id=merchant_id,
                error_code="INTERNAL_ERROR",
                message=str(e) or type(e).__name__,
            )

    async def _store_entity(
        self,
        record: RecommendationRecord,
        log,
    ) -> Union[RecommendationRecord, EntityFailure]:
        """Persist one batch record, capturing a failed save as that merchant's failure."""
        try:
            await self._store(record)
        except Exception as e:
            log.exception(
                "entity_persistence_failed",
                merchant_id=record.merchant_id,
                recommendation_id=str(record.id),
                error_type=type(e).__name__,
            )
            return EntityFailure(
                merchant_id=record.merchant_id,
                error_code=PERSISTENCE_ERROR,
                message=str(e) or type(e).__name__,
            )
        return record

    async def _store(self, record: RecommendationRecord) -> None:
        await self._recommendation_repo.save(record)
        record_recommendation(
            tier=record.risk_tier.value,
            reserve_type=record.reserve.reserve_type.value,
            band=record.reserve.band,
            partial=record.partial,
        )

    async def _publish(self, record: RecommendationRecord) -> None:
        """Send records at or above the configured tier to case management."""
        if record.risk_tier.rank < self._case_webhook_min_tier.rank:
            return

        delivered = await self._case_webhook.send_recommendation_created(record)
        if not delivered:
            logger.warning(
                "case_webhook_undelivered",
                merchant_id=record.merchant_id,
                recommendation_id=str(record.id),
            )

    @staticmethod
    def _dedupe(merchant_ids: Optional[Sequence[str]]) -> List[str]:
        """Strip and de-duplicate ids, keeping first-seen order."""
        seen = {}
        for merchant_id in merchant_ids or ():
            seen.setdefault(merchant_id.strip(), None)
        return list(seen)
