"""PostgreSQL implementation of RecommendationRepository."""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from merchant_risk.domain.entities import (
    FactorScores,
    RecommendationRecord,
    ReservePolicy,
    ReserveType,
    RiskTier,
)
from merchant_risk.domain.interfaces import RecommendationRepository
from merchant_risk.infrastructure.database.models import RecommendationModel


class PostgresRecommendationRepository(RecommendationRepository):
    """
    PostgreSQL implementation of the Recommendation repository.

    Uses SQLAlchemy async session for database operations. Records are
    inserted, never updated.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, record: RecommendationRecord) -> RecommendationRecord:
        """Persist a recommendation to the database."""
        reserve = record.reserve
        model = RecommendationModel(
            id=str(record.id),
            merchant_id=record.merchant_id,
            snapshot_id=record.snapshot_id,
            factor_scores=record.factor_scores.to_dict(),
            historical_adverse_event_score=record.historical_adverse_event_score,
            composite_score=record.composite_score,
            risk_tier=record.risk_tier.value,
            dominant_reason=record.dominant_reason,
            reserve_type=reserve.reserve_type.value,
            reserve_percentage=reserve.percentage,
            reserve_minimum_amount=reserve.minimum_amount,
            reserve_hold_days=reserve.hold_days,
            reserve_band=reserve.band,
            reserve_rule=reserve.rule,
            partial=record.partial,
            missing_inputs=list(record.missing_inputs),
            inputs=record.inputs,
            ruleset_fingerprint=record.ruleset_fingerprint,
            computed_at=record.computed_at,
        )

        self._session.add(model)
        await self._session.flush()

        return record

    async def get_by_id(self, recommendation_id: UUID) -> Optional[RecommendationRecord]:
        """Retrieve a recommendation by ID."""
        stmt = select(RecommendationModel).where(
            RecommendationModel.id == str(recommendation_id)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def get_by_merchant_id(
        self,
        merchant_id: str,
        limit: int = 10,
        offset: int = 0,
    ) -> List[RecommendationRecord]:
        """Retrieve recommendations for a merchant, newest first."""
        stmt = (
            select(RecommendationModel)
            .where(RecommendationModel.merchant_id == merchant_id)
            .order_by(RecommendationModel.computed_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    @staticmethod
    def _naive_utc(value: datetime) -> datetime:
        # Timezone-aware columns come back aware on PostgreSQL; entities are naive UTC.
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def _to_entity(self, model: RecommendationModel) -> RecommendationRecord:
        """Convert database model to domain entity."""
        return RecommendationRecord(
            id=UUID(str(model.id)),
            merchant_id=model.merchant_id,
            snapshot_id=model.snapshot_id,
            factor_scores=FactorScores(**model.factor_scores),
            historical_adverse_event_score=model.historical_adverse_event_score,
            composite_score=model.composite_score,
            risk_tier=RiskTier(model.risk_tier),
            dominant_reason=model.dominant_reason,
            reserve=ReservePolicy(
                reserve_type=ReserveType(model.reserve_type),
                percentage=model.reserve_percentage,
                minimum_amount=model.reserve_minimum_amount,
                hold_days=model.reserve_hold_days,
                band=model.reserve_band,
                rule=model.reserve_rule,
            ),
            ruleset_fingerprint=model.ruleset_fingerprint,
            partial=model.partial,
            missing_inputs=tuple(model.missing_inputs or ()),
            inputs=model.inputs or {},
            computed_at=self._naive_utc(model.computed_at),
        )
