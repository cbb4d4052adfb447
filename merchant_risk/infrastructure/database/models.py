"""SQLAlchemy ORM models for merchant risk recommendations."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Integer,
    JSON,
    String,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class RecommendationModel(Base):
    """
    Persisted recommendation record.

    Rows are append-only; each scoring run inserts a new row.
    """

    __tablename__ = "risk_recommendations"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    merchant_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    snapshot_id: Mapped[str] = mapped_column(String(255), nullable=False)
    factor_scores: Mapped[dict] = mapped_column(JSON, nullable=False)
    historical_adverse_event_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    composite_score: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_tier: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    dominant_reason: Mapped[str] = mapped_column(String(100), nullable=False)
    reserve_type: Mapped[str] = mapped_column(String(50), nullable=False)
    reserve_percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    reserve_minimum_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    reserve_hold_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reserve_band: Mapped[str] = mapped_column(String(100), nullable=False)
    reserve_rule: Mapped[str] = mapped_column(String(100), nullable=False)
    partial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    missing_inputs: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    inputs: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ruleset_fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        index=True,
    )
