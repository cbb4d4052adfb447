"""Data transfer objects for batch scoring runs."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from merchant_risk.domain.entities import BatchSummary


@dataclass(frozen=True)
class BatchRequest:
    """
    Input data for a batch run.

    With no merchant_ids the run covers every merchant the Signal Store
    lists.
    """

    merchant_ids: Tuple[str, ...] = field(default_factory=tuple)
    concurrency: Optional[int] = None

    def validate(self) -> List[str]:
        errors = []

        if any(not m or not m.strip() for m in self.merchant_ids):
            errors.append("merchant_ids cannot contain empty values")

        if self.concurrency is not None and self.concurrency < 1:
            errors.append("concurrency must be at least 1")

        return errors


@dataclass(frozen=True)
class EntityFailureDTO:
    """One merchant that failed in a batch run."""

    merchant_id: str
    error_code: str
    message: str


@dataclass(frozen=True)
class BatchSummaryResponse:
    """Response data summarizing a batch run."""

    run_id: str
    ruleset_fingerprint: str
    started_at: str
    finished_at: Optional[str]
    duration_seconds: float
    requested: int
    succeeded: int
    failed: int
    tier_counts: Dict[str, int]
    recommendation_ids: List[str]
    failures: List[EntityFailureDTO]

    @classmethod
    def from_entity(cls, summary: BatchSummary) -> "BatchSummaryResponse":
        return cls(
            run_id=str(summary.id),
            ruleset_fingerprint=summary.ruleset_fingerprint,
            started_at=summary.started_at.isoformat() + "Z",
            finished_at=(
                summary.finished_at.isoformat() + "Z" if summary.finished_at else None
            ),
            duration_seconds=round(summary.duration_seconds, 3),
            requested=summary.requested,
            succeeded=summary.succeeded,
            failed=summary.failed,
            tier_counts=dict(summary.tier_counts),
            recommendation_ids=[str(r) for r in summary.recommendation_ids],
            failures=[
                EntityFailureDTO(
                    merchant_id=f.merchant_id,
                    error_code=f.error_code,
                    message=f.message,
                )
                for f in summary.failures
            ],
        )
