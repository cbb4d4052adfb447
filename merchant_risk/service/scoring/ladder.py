"""
Threshold ladders for the Risk Factor Scorer.

A ladder is an ordered list of (predicate, score) rungs evaluated top to
bottom; the first rung whose predicate matches wins, and a ladder with no
matching rung returns its default (0). Keeping rules as data rather than
nested conditionals lets each factor's rule set be reviewed and swapped
through configuration.

Builders turn configuration rows into ladders:
    threshold_ladder([[0.5, 3], [0.3, 2]])           # value >= threshold
    age_gated_ladder([[30, 50, 3], [60, 30, 2]])     # age < max_age and value >= min
    amount_pattern_ladder([[1000, 0.1, 3], [1000, None, 2]])
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

MIN_FACTOR_SCORE = 0
MAX_FACTOR_SCORE = 3


@dataclass(frozen=True)
class Rung:
    """One (predicate, score) step of a ladder."""

    predicate: Callable[..., bool]
    score: int
    label: str = ""


@dataclass(frozen=True)
class ThresholdLadder:
    """Ordered rungs evaluated first-match-wins."""

    rungs: Tuple[Rung, ...]
    default: int = MIN_FACTOR_SCORE

    def evaluate(self, *values) -> int:
        """Return the score of the first rung matching the values."""
        for rung in self.rungs:
            if rung.predicate(*values):
                return rung.score
        return self.default


def _at_least(threshold: float) -> Callable[[float], bool]:
    def predicate(value: float) -> bool:
        return value >= threshold

    return predicate


def _young_and_at_least(max_age_days: float, min_value: float) -> Callable[[int, float], bool]:
    def predicate(age_days: int, value: float) -> bool:
        return age_days < max_age_days and value >= min_value

    return predicate


def _large_and_consistent(
    min_avg: float,
    max_cv: Optional[float],
) -> Callable[[float, Optional[float]], bool]:
    def predicate(avg_amount: float, cv: Optional[float]) -> bool:
        if avg_amount < min_avg:
            return False
        if max_cv is None:
            return True
        return cv is not None and cv <= max_cv

    return predicate


def threshold_ladder(rows: Sequence[Sequence[float]]) -> ThresholdLadder:
    """Build a ladder from [threshold, score] rows (value >= threshold)."""
    return ThresholdLadder(
        rungs=tuple(
            Rung(_at_least(threshold), int(score), f">= {threshold}")
            for threshold, score in rows
        )
    )


def age_gated_ladder(rows: Sequence[Sequence[float]]) -> ThresholdLadder:
    """Build a ladder from [max_age_days, min_value, score] rows."""
    return ThresholdLadder(
        rungs=tuple(
            Rung(
                _young_and_at_least(max_age, min_value),
                int(score),
                f"age < {max_age} and value >= {min_value}",
            )
            for max_age, min_value, score in rows
        )
    )


def amount_pattern_ladder(rows: Sequence[Sequence[Optional[float]]]) -> ThresholdLadder:
    """Build a ladder from [min_avg_amount, max_cv or None, score] rows."""
    return ThresholdLadder(
        rungs=tuple(
            Rung(
                _large_and_consistent(min_avg, max_cv),
                int(score),
                f"avg >= {min_avg}" + (f" and cv <= {max_cv}" if max_cv is not None else ""),
            )
            for min_avg, max_cv, score in rows
        )
    )
