"""Payout cadence recommendation.

Small payouts lose a large share to transfer fees. The recommendation
looks at the average amount per paid contributor and suggests paying
monthly, quarterly, or holding until more revenue accumulates.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal

from revshare.export.formatting import format_money
from revshare.models.payout import PayoutCalculation
from revshare.policy.resolver import PayoutPolicy


class PayoutCadence(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HOLD = "hold"


@dataclass(frozen=True)
class PayoutRecommendation:
    cadence: PayoutCadence
    per_member_amount: Decimal
    message: str


def recommend_cadence(
    calculation: PayoutCalculation,
    policy: PayoutPolicy,
) -> PayoutRecommendation:
    """Recommend a payout cadence for a calculation."""
    per_member = calculation.revenue_amount / calculation.total_contributors
    shown = format_money(per_member, policy.currency_symbol)

    if per_member >= policy.monthly_min_per_member:
        cadence = PayoutCadence.MONTHLY
        message = (
            f"Monthly payouts recommended. With {shown} per contributing member, "
            f"you have sufficient revenue to justify monthly distributions "
            f"while keeping transfer fees reasonable."
        )
    elif per_member >= policy.quarterly_min_per_member:
        cadence = PayoutCadence.QUARTERLY
        message = (
            f"Quarterly payouts recommended. With {shown} per contributing member, "
            f"it's better to wait and accumulate funds over 3 months "
            f"to minimize the impact of transfer fees."
        )
    else:
        cadence = PayoutCadence.HOLD
        message = (
            f"Hold and accumulate. With only {shown} per contributing member, "
            f"the revenue is too low to justify payout at this time. "
            f"Transfer fees would consume a significant portion. "
            f"Wait until the next quarter when more revenue accumulates."
        )

    return PayoutRecommendation(
        cadence=cadence,
        per_member_amount=per_member,
        message=message,
    )
