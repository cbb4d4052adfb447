"""Merchant entity representing the account being scored."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Merchant:
    """
    Read-only view of a merchant account as supplied by the Signal Store.

    Merchants are created by account onboarding, never by this engine.

    Attributes:
        merchant_id: Stable account identifier
        account_age_days: Days since the account was created
        industry: Industry/category classification (e.g. "gambling")
        country: ISO country code
        trust_score: Externally computed trust signal (0-100)
        trust_category: Externally computed trust bucket (e.g. "high", "low")
        model_score: Most recent predictive-model probability (0-1)
    """

    merchant_id: str
    account_age_days: Optional[int] = None
    industry: Optional[str] = None
    country: Optional[str] = None
    trust_score: Optional[float] = None
    trust_category: Optional[str] = None
    model_score: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for the audit trail."""
        return {
            "merchant_id": self.merchant_id,
            "account_age_days": self.account_age_days,
            "industry": self.industry,
            "country": self.country,
            "trust_score": self.trust_score,
            "trust_category": self.trust_category,
            "model_score": self.model_score,
        }
