"""Payout engine — splits revenue across tiered contributors.

The split is a linear system solved through one unit price. Every paid
contributor holds a tier weight (Main 1.0, Assistant 0.5, Thanks 0.167)
and the revenue buys the total number of weight units:

    base_units = main + assistant × 0.5 + thanks × 0.167
    main_share = revenue / base_units
    assistant_share = main_share × 0.5
    thanks_share = main_share × 0.167

so that by construction Σ count × share == revenue. The fairness rule
(see revshare.payout.fairness) may then lift Main to a guaranteed floor.

The engine is pure: no I/O, no clock, no randomness, no mutation of its
inputs. Arithmetic stays at full Decimal precision; rounding to cents is
left to the presentation layer.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from revshare.errors import InvalidInputError
from revshare.models.contributor import PAID_TIERS, Contributor, Tier, sort_key
from revshare.models.payout import (
    Adjusted,
    MemberAllocation,
    PayoutCalculation,
    TierCounts,
)
from revshare.payout.fairness import decide_fairness, rebalance
from revshare.policy.resolver import PayoutPolicy, PolicyResolver


DEFAULT_POLICY = PayoutPolicy()

# Keeps every per-member share within what a cent-rounded Decimal can hold.
MAX_REVENUE = Decimal("1e15")


def to_amount(value: object) -> Decimal:
    """Coerce a revenue figure to Decimal.

    Floats go through str() so that 0.1 stays 0.1. Raises
    InvalidInputError for anything that is not a finite number below
    MAX_REVENUE.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Revenue must be a number, got {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidInputError(f"Revenue must be a number, got {value!r}") from None
    if not amount.is_finite():
        raise InvalidInputError(f"Revenue must be finite, got {value!r}")
    if amount.copy_abs() >= MAX_REVENUE:
        raise InvalidInputError(f"Revenue is too large, got {value!r}")
    return amount


def compute(
    revenue_amount: object,
    roster: Sequence[Contributor],
    policy: Optional[PayoutPolicy] = None,
) -> PayoutCalculation:
    """Compute the payout split for a revenue figure and a roster.

    Args:
        revenue_amount: Positive revenue to distribute.
        roster: Contributor snapshot. Fan-tier members are ignored.
        policy: Weights and thresholds (defaults to the canonical policy).

    Returns:
        A frozen PayoutCalculation at full precision.

    Raises:
        InvalidInputError: revenue is not positive, or no paid
            contributors are present.
    """
    if policy is None:
        policy = DEFAULT_POLICY

    revenue = to_amount(revenue_amount)
    if revenue <= 0:
        raise InvalidInputError(f"Revenue must be positive, got {revenue}")

    paid = [m for m in roster if m.tier.is_paid]
    counts = TierCounts.from_roster(paid)
    if counts.total == 0:
        raise InvalidInputError(
            "No contributing members: add Main, Assistant or Thanks contributors first"
        )

    base_units = (
        counts.main * policy.main_weight
        + counts.assistant * policy.assistant_weight
        + counts.thanks * policy.thanks_weight
    )
    main_share = revenue / base_units
    assistant_share = main_share * policy.assistant_weight
    thanks_share = main_share * policy.thanks_weight

    fairness = decide_fairness(counts, main_share, revenue, policy)
    if isinstance(fairness, Adjusted):
        main_share, assistant_share, thanks_share = rebalance(counts, revenue, policy)

    shares = {
        Tier.MAIN: main_share,
        Tier.ASSISTANT: assistant_share,
        Tier.THANKS: thanks_share,
    }
    allocations = tuple(
        MemberAllocation(
            member_id=m.member_id,
            name=m.name,
            tier=m.tier,
            amount=shares[m.tier],
        )
        for tier in PAID_TIERS
        for m in sorted((p for p in paid if p.tier is tier), key=sort_key)
    )

    return PayoutCalculation(
        revenue_amount=revenue,
        main_share=main_share,
        assistant_share=assistant_share,
        thanks_share=thanks_share,
        counts=counts,
        fairness=fairness,
        allocations=allocations,
    )


class PayoutEngine:
    """Computes payout splits under a resolved policy.

    Usage:
        engine = PayoutEngine(resolver)
        calculation = engine.compute(Decimal("1000"), store.list_active_contributors())
    """

    def __init__(self, resolver: Optional[PolicyResolver] = None) -> None:
        self._resolver = resolver or PolicyResolver.defaults()

    @property
    def policy(self) -> PayoutPolicy:
        return self._resolver.payout_policy()

    def compute(
        self,
        revenue_amount: object,
        roster: Sequence[Contributor],
    ) -> PayoutCalculation:
        return compute(revenue_amount, roster, self.policy)
