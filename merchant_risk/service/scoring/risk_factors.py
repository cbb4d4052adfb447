"""
Risk Factor Scorer for the Merchant Risk Engine.

Each factor maps one signal (or a pair of signals) to an integer score
from 0 to 3 using a configured threshold ladder:
- Velocity: burst of transactions on a young account
- Verification failures: worst of the AVS and CVV failure rates
- Amount pattern: large, suspiciously uniform transaction amounts
- Category: fixed score per industry
- Age vs. activity: large cumulative volume on a young account
- Timing: worst of the off-hours and weekend activity ratios
- Historical adverse events: past disputes, for model validation only

Every function takes literal values, never another factor's output, and
returns None when a required input is unknown. Unknown is never zero;
the composite scorer decides what to do with it.
"""

from typing import Iterable, Optional

from merchant_risk.domain.entities import EventReason, FactorScores, Merchant, WindowedFactSet

from .ladder import MAX_FACTOR_SCORE
from .reasons import is_severe_reason
from .settings import ScoringSettings, scoring_settings


def score_velocity(
    max_daily_txn_count: Optional[int],
    account_age_days: Optional[int],
    settings: ScoringSettings = scoring_settings,
) -> Optional[int]:
    """
    Score a single-day transaction burst relative to account age.

    Business Rationale:
        Bust-out fraud shows up as a newly opened account suddenly pushing
        many transactions through in one day. The same burst from an
        account with a long history is ordinary growth, so the count bar
        rises as the account gets older.

    Args:
        max_daily_txn_count: Largest single-day transaction count in the window
        account_age_days: Days since the account was opened
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Score 0-3, or None if either input is unknown
    """
    if max_daily_txn_count is None or account_age_days is None:
        return None
    return settings.velocity_ladder.evaluate(account_age_days, max_daily_txn_count)


def score_verification_failures(
    avs_failure_rate: Optional[float],
    cvv_failure_rate: Optional[float],
    settings: ScoringSettings = scoring_settings,
) -> Optional[int]:
    """
    Score card-verification failures as the worse of the two rates.

    Business Rationale:
        AVS and CVV failures are independent symptoms of card testing and
        stolen credentials. Either one being high is enough to worry, so
        the rates are combined with max rather than averaged.

    Returns:
        Score 0-3, or None if either rate is unknown
    """
    if avs_failure_rate is None or cvv_failure_rate is None:
        return None
    return settings.verification_ladder.evaluate(max(avs_failure_rate, cvv_failure_rate))


def coefficient_of_variation(
    avg_amount: float,
    amount_std_dev: float,
) -> Optional[float]:
    """Standard deviation relative to the mean; None for a non-positive mean."""
    if avg_amount <= 0:
        return None
    return amount_std_dev / avg_amount


def score_amount_pattern(
    avg_amount: Optional[float],
    amount_std_dev: Optional[float],
    settings: ScoringSettings = scoring_settings,
) -> Optional[int]:
    """
    Score large average tickets, weighting uniform amounts higher.

    Business Rationale:
        Genuine retail traffic has varied basket sizes. A high average
        ticket with almost no variation (low coefficient of variation)
        looks like scripted or self-dealt transactions.

    Returns:
        Score 0-3, or None if either input is unknown
    """
    if avg_amount is None or amount_std_dev is None:
        return None
    cv = coefficient_of_variation(avg_amount, amount_std_dev)
    return settings.amount_pattern_ladder.evaluate(avg_amount, cv)


def score_category(
    industry: Optional[str],
    settings: ScoringSettings = scoring_settings,
) -> Optional[int]:
    """
    Look up the fixed risk score for an industry.

    Matching is case-insensitive; industries not in the map score 0.
    """
    if industry is None:
        return None
    return settings.category_scores.get(industry.strip().lower(), 0)


def score_age_vs_activity(
    account_age_days: Optional[int],
    total_volume: Optional[float],
    settings: ScoringSettings = scoring_settings,
) -> Optional[int]:
    """
    Score cumulative volume processed by a young account.

    The volume bar becomes less strict as the account ages (by default
    under 14, 30 and 60 days).
    """
    if account_age_days is None or total_volume is None:
        return None
    return settings.age_activity_ladder.evaluate(account_age_days, total_volume)


def score_timing(
    off_hours_ratio: Optional[float],
    weekend_ratio: Optional[float],
    settings: ScoringSettings = scoring_settings,
) -> Optional[int]:
    """Score timing skew as the worse of the off-hours and weekend ratios."""
    if off_hours_ratio is None or weekend_ratio is None:
        return None
    return settings.timing_ladder.evaluate(max(off_hours_ratio, weekend_ratio))


def resolve_adverse_event_count(
    adverse_event_count: Optional[int],
    reasons: Iterable[EventReason] = (),
) -> Optional[int]:
    """
    Supplied adverse-event count, or the sum of the reason counts.

    Returns None when neither source says anything.
    """
    if adverse_event_count is not None:
        return adverse_event_count
    reasons = list(reasons)
    if not reasons:
        return None
    return sum(reason.count for reason in reasons)


def resolve_adverse_event_rate(
    adverse_event_rate: Optional[float],
    adverse_event_count: Optional[int],
    transaction_count: Optional[int],
) -> Optional[float]:
    """
    Canonical count-based adverse-event rate (events / transactions).

    A supplied rate is assumed to already be count-based. Amount-based
    rates are never used.
    """
    if adverse_event_rate is not None:
        return adverse_event_rate
    if adverse_event_count is None or transaction_count is None:
        return None
    if transaction_count == 0:
        return 0.0
    return adverse_event_count / transaction_count


def score_historical_adverse_events(
    dominant_reason: str,
    adverse_event_count: Optional[int],
    adverse_event_rate: Optional[float],
    settings: ScoringSettings = scoring_settings,
) -> Optional[int]:
    """
    Score the merchant's dispute history.

    Algorithm:
        1. No events: 0
        2. Otherwise the worse of the rate ladder and the count ladder
        3. One point more (capped at 3) when the dominant reason is among
           the most severe codes

    Business Rationale:
        This factor exists to validate the composite against what actually
        happened. It is not part of FactorScores and never feeds the
        composite: a reserve must not be justified by the very disputes it
        is meant to predict.

    Args:
        dominant_reason: Output of the reason resolver
        adverse_event_count: Disputes in the window
        adverse_event_rate: Count-based dispute rate (may be None)
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        Score 0-3, or None if the event count is unknown
    """
    if adverse_event_count is None:
        return None
    if adverse_event_count == 0:
        return 0

    score = settings.adverse_count_ladder.evaluate(adverse_event_count)
    if adverse_event_rate is not None:
        score = max(score, settings.adverse_rate_ladder.evaluate(adverse_event_rate))

    if is_severe_reason(dominant_reason, settings):
        score = min(score + 1, MAX_FACTOR_SCORE)
    return score


def calculate_factor_scores(
    merchant: Merchant,
    facts: WindowedFactSet,
    settings: ScoringSettings = scoring_settings,
) -> FactorScores:
    """Score every decision-driving factor for one merchant."""
    return FactorScores(
        velocity=score_velocity(
            facts.max_daily_txn_count, merchant.account_age_days, settings
        ),
        verification_failures=score_verification_failures(
            facts.avs_failure_rate, facts.cvv_failure_rate, settings
        ),
        amount_pattern=score_amount_pattern(
            facts.avg_amount, facts.amount_std_dev, settings
        ),
        category=score_category(merchant.industry, settings),
        age_vs_activity=score_age_vs_activity(
            merchant.account_age_days, facts.total_volume, settings
        ),
        timing=score_timing(facts.off_hours_ratio, facts.weekend_ratio, settings),
    )
