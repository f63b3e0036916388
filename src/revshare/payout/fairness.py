"""Fairness decision — the two-stage gate that protects Main-tier pay.

Linear tier weighting alone lets a small Main tier be diluted to almost
nothing when many low-weight contributors join. The fairness rule
guarantees Main an aggregate floor when the team is heavily skewed:

    ratio = (assistant + thanks) / max(main, 1)
    gate 1: ratio > RATIO_THRESHOLD                 (default 5)
    gate 2: main_share × main / revenue < FLOOR     (default 0.30)

Both gates must pass. A roster without Main contributors is never
adjusted: the floor would have nobody to go to.

When the rule fires, rebalance() lifts Main to exactly revenue × FLOOR
and splits the remainder across Assistant and Thanks by their weights.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from revshare.models.payout import Adjusted, FairnessDecision, TierCounts, Unadjusted
from revshare.policy.resolver import PayoutPolicy


def skew_ratio(counts: TierCounts) -> Decimal:
    """Lower-tier contributors per Main contributor.

    The denominator is max(main, 1), so a roster without Main reports
    the raw lower-tier headcount rather than failing.
    """
    return Decimal(counts.assistant + counts.thanks) / Decimal(max(counts.main, 1))


def decide_fairness(
    counts: TierCounts,
    main_share: Decimal,
    revenue: Decimal,
    policy: PayoutPolicy,
) -> FairnessDecision:
    """Decide whether the Main floor applies to an unadjusted split.

    Args:
        counts: Paid contributors per tier.
        main_share: The unadjusted per-member Main share.
        revenue: Total revenue being split (positive).
        policy: Thresholds to apply.

    Returns:
        Unadjusted when either gate fails, otherwise Adjusted carrying
        the ratio, the floor and a human-readable explanation.
    """
    ratio = skew_ratio(counts)
    if ratio <= policy.fairness_ratio_threshold:
        return Unadjusted(ratio=ratio)
    if counts.main == 0:
        return Unadjusted(ratio=ratio)

    original_main_fraction = (main_share * counts.main) / revenue
    if original_main_fraction >= policy.main_tier_floor:
        return Unadjusted(ratio=ratio)

    return Adjusted(
        ratio=ratio,
        floor=policy.main_tier_floor,
        original_main_fraction=original_main_fraction,
        explanation=explain_adjustment(ratio, policy),
    )


def explain_adjustment(ratio: Decimal, policy: PayoutPolicy) -> str:
    threshold = _plain(policy.fairness_ratio_threshold)
    shown_ratio = ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    floor_pct = (policy.main_tier_floor * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return (
        f"The assistant/thanker to main developer ratio ({shown_ratio}:1) "
        f"exceeded the threshold of {threshold}:1. "
        f"The self-adjusting fairness algorithm ensured main tier contributors "
        f"receive at least {floor_pct}% of total revenue "
        f"to maintain fair compensation for essential contributors."
    )


def rebalance(
    counts: TierCounts,
    revenue: Decimal,
    policy: PayoutPolicy,
) -> tuple[Decimal, Decimal, Decimal]:
    """Compute (main, assistant, thanks) per-member shares under the floor.

    Only valid for rosters that passed decide_fairness(): at least one
    Main contributor and a non-empty lower tier.
    """
    main_total = revenue * policy.main_tier_floor
    main_share = main_total / counts.main

    other_units = (
        counts.assistant * policy.assistant_weight
        + counts.thanks * policy.thanks_weight
    )
    other_base = (revenue - main_total) / other_units
    return (
        main_share,
        other_base * policy.assistant_weight,
        other_base * policy.thanks_weight,
    )


def _plain(value: Decimal) -> str:
    """Render 5, 5.0 and 5.50 as '5', '5' and '5.5'."""
    return format(value.normalize(), "f")
