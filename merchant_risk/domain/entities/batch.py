"""Batch run summary entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class EntityFailure:
    """One merchant that could not be scored in a batch run."""

    merchant_id: str
    error_code: str
    message: str


@dataclass
class BatchSummary:
    """
    Outcome of one batch scoring run.

    A failing merchant never aborts the run; it is recorded here instead.
    """

    ruleset_fingerprint: str
    requested: int = 0
    id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    recommendation_ids: List[UUID] = field(default_factory=list)
    failures: List[EntityFailure] = field(default_factory=list)
    tier_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.recommendation_ids)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def mark_finished(self) -> None:
        self.finished_at = datetime.utcnow()
