"""Core data models for the revenue-share ledger."""

from revshare.models.contributor import (
    PAID_TIERS,
    TIER_LABELS,
    TIER_ORDER,
    Contributor,
    Tier,
)
from revshare.models.payout import (
    Adjusted,
    FairnessDecision,
    HistoryOverview,
    MemberAllocation,
    PayoutCalculation,
    PayoutRecord,
    TierCounts,
    Unadjusted,
)

__all__ = [
    "PAID_TIERS",
    "TIER_LABELS",
    "TIER_ORDER",
    "Contributor",
    "Tier",
    "Adjusted",
    "FairnessDecision",
    "HistoryOverview",
    "MemberAllocation",
    "PayoutCalculation",
    "PayoutRecord",
    "TierCounts",
    "Unadjusted",
]
