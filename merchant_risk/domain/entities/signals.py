"""Windowed signal entities supplied by the external Signal Store."""

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Optional, Tuple

from .merchant import Merchant


@dataclass(frozen=True)
class EventReason:
    """One categorical adverse-event reason and how often it occurred."""

    reason_code: str
    count: int


@dataclass(frozen=True)
class WindowedFactSet:
    """
    Immutable per-merchant aggregate over a fixed lookback window.

    Every metric is optional: None means the Signal Store could not supply
    it ("unknown") and must never be read as zero.

    Attributes:
        snapshot_id: Identifier of the Signal Store snapshot (for audit)
        merchant_id: Merchant the facts belong to
        window_days: Lookback window length in days
        as_of: Date the snapshot was computed
        total_volume: Amount processed in the window
        transaction_count: Number of transactions in the window
        avg_amount: Mean transaction amount
        amount_std_dev: Standard deviation of transaction amount
        max_daily_txn_count: Largest single-day transaction count
        max_daily_volume: Largest single-day volume
        avs_failure_rate: Address-verification failure rate (0-1)
        cvv_failure_rate: Card-verification failure rate (0-1)
        high_risk_flag_rate: Share of transactions flagged high risk (0-1)
        active_days: Distinct days with activity
        off_hours_ratio: Share of activity outside business hours (0-1)
        weekend_ratio: Share of activity on weekends (0-1)
        adverse_event_count: Chargeback/dispute count
        adverse_event_rate: Count-based adverse-event rate (count / transactions)
        failed_transfer_count: Failed fund transfers in the short recent window
        unfulfilled_exposure_amount: Amount captured but not yet fulfilled
        unfulfilled_exposure_count: Orders captured but not yet fulfilled
    """

    snapshot_id: str
    merchant_id: str
    window_days: int = 90
    as_of: Optional[date] = None
    total_volume: Optional[float] = None
    transaction_count: Optional[int] = None
    avg_amount: Optional[float] = None
    amount_std_dev: Optional[float] = None
    max_daily_txn_count: Optional[int] = None
    max_daily_volume: Optional[float] = None
    avs_failure_rate: Optional[float] = None
    cvv_failure_rate: Optional[float] = None
    high_risk_flag_rate: Optional[float] = None
    active_days: Optional[int] = None
    off_hours_ratio: Optional[float] = None
    weekend_ratio: Optional[float] = None
    adverse_event_count: Optional[int] = None
    adverse_event_rate: Optional[float] = None
    failed_transfer_count: Optional[int] = None
    unfulfilled_exposure_amount: Optional[float] = None
    unfulfilled_exposure_count: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for the audit trail."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["as_of"] = self.as_of.isoformat() if self.as_of else None
        return data


@dataclass(frozen=True)
class MerchantSignals:
    """Everything one Signal Store read returns for a merchant."""

    merchant: Merchant
    facts: WindowedFactSet
    reasons: Tuple[EventReason, ...] = field(default_factory=tuple)

    @property
    def merchant_id(self) -> str:
        return self.merchant.merchant_id

    @property
    def snapshot_id(self) -> str:
        return self.facts.snapshot_id
