"""
Reason Resolver for the Merchant Risk Engine.

Picks the single dominant adverse-event reason for a merchant from the
(reason_code, count) pairs the Signal Store returns.

Ordering is a strict total order:
    1. count, descending
    2. business-assigned severity (priority list, most severe first)
    3. unknown codes last, lexicographically among themselves

An unknown code is a configuration gap, not an error: it is logged and
ranked after every known code so one stray code never fails a run.
"""

from collections import Counter
from typing import Dict, Iterable, Tuple

import structlog

from merchant_risk.domain.entities import EventReason

from .settings import ScoringSettings, scoring_settings

logger = structlog.get_logger(__name__)

NO_EVENTS = "no_events"


def reason_severity_rank(
    reason_code: str,
    settings: ScoringSettings = scoring_settings,
) -> int:
    """
    Rank of a reason code in the severity table (0 = most severe).

    Codes absent from the priority list share the fallback rank
    len(priority_list), so they sort after every known code.
    """
    priority = settings.reason_priority
    if reason_code in priority:
        return priority.index(reason_code)
    return len(priority)


def _merge_counts(reasons: Iterable[EventReason]) -> Dict[str, int]:
    merged: Counter = Counter()
    for reason in reasons:
        merged[reason.reason_code] += reason.count
    # A code with no occurrences is not an event.
    return {code: count for code, count in merged.items() if count > 0}


def resolve_dominant_reason(
    reasons: Iterable[EventReason],
    settings: ScoringSettings = scoring_settings,
) -> str:
    """
    Select the dominant reason code.

    Args:
        reasons: Reason records for one merchant over the lookback window
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        The top-ranked reason code, or NO_EVENTS when there are none

    Edge Cases:
        - Empty input, or only zero-count rows: NO_EVENTS
        - One distinct code: returned as-is, counts are not consulted
        - Repeated codes: counts are summed before ranking
    """
    merged = _merge_counts(reasons)
    if not merged:
        return NO_EVENTS
    if len(merged) == 1:
        return next(iter(merged))

    ranks = {code: reason_severity_rank(code, settings) for code in merged}
    fallback = len(settings.reason_priority)
    for code, rank in ranks.items():
        if rank == fallback:
            logger.warning("unranked_reason_code", reason_code=code)

    def sort_key(code: str) -> Tuple[int, int, str]:
        return (-merged[code], ranks[code], code)

    return min(merged, key=sort_key)


def is_severe_reason(
    reason_code: str,
    settings: ScoringSettings = scoring_settings,
) -> bool:
    """True if the code is among the severe_reason_count most severe codes."""
    if reason_code == NO_EVENTS:
        return False
    return reason_severity_rank(reason_code, settings) < min(
        settings.severe_reason_count, len(settings.reason_priority)
    )
