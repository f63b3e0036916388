"""Payout models — transient calculations and committed history records.

All monetary values are Decimal and kept at full context precision.
Rounding to cents is a presentation concern handled by the exporters.

Lifecycle:
    PayoutEngine.compute() → PayoutCalculation (transient)
    PayoutRecord.from_calculation() → PayoutRecord (committed, immutable)

A PayoutRecord freezes member names and amounts at commit time so that
later roster edits or removals never rewrite history.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Union

from revshare.models.contributor import Contributor, Tier


@dataclass(frozen=True)
class TierCounts:
    """Number of paid contributors per tier. Fans are never counted."""
    main: int = 0
    assistant: int = 0
    thanks: int = 0

    @staticmethod
    def from_roster(roster: Iterable[Contributor]) -> TierCounts:
        main = assistant = thanks = 0
        for member in roster:
            if member.tier is Tier.MAIN:
                main += 1
            elif member.tier is Tier.ASSISTANT:
                assistant += 1
            elif member.tier is Tier.THANKS:
                thanks += 1
        return TierCounts(main=main, assistant=assistant, thanks=thanks)

    @property
    def total(self) -> int:
        return self.main + self.assistant + self.thanks

    def for_tier(self, tier: Tier) -> int:
        if tier is Tier.MAIN:
            return self.main
        if tier is Tier.ASSISTANT:
            return self.assistant
        if tier is Tier.THANKS:
            return self.thanks
        return 0


@dataclass(frozen=True)
class Unadjusted:
    """The fairness rule did not fire."""
    ratio: Decimal

    adjusted = False
    explanation = ""


@dataclass(frozen=True)
class Adjusted:
    """The fairness rule fired and Main was lifted to the floor.

    ratio: (assistant + thanks) / max(main, 1) at calculation time.
    floor: the aggregate Main fraction that was guaranteed.
    original_main_fraction: the Main fraction before adjustment.
    """
    ratio: Decimal
    floor: Decimal
    original_main_fraction: Decimal
    explanation: str

    adjusted = True


_NEVER = datetime.min.replace(tzinfo=timezone.utc)

FairnessDecision = Union[Unadjusted, Adjusted]


@dataclass(frozen=True)
class MemberAllocation:
    """One paid member's amount, as calculated or as committed."""
    member_id: str
    name: str
    tier: Tier
    amount: Decimal


@dataclass(frozen=True)
class PayoutCalculation:
    """Result of a single engine invocation.

    Invariants (hold at full precision, up to Decimal context rounding):
    - Unadjusted: shares × counts sum to revenue_amount.
    - Adjusted: main_share × main == revenue_amount × floor, and the
      assistant and thanks totals sum to the remainder.
    - Fan-tier members never appear in counts or allocations.
    """
    revenue_amount: Decimal
    main_share: Decimal
    assistant_share: Decimal
    thanks_share: Decimal
    counts: TierCounts
    fairness: FairnessDecision
    allocations: tuple[MemberAllocation, ...] = ()

    @property
    def fairness_adjusted(self) -> bool:
        return self.fairness.adjusted

    @property
    def fairness_explanation(self) -> str:
        return self.fairness.explanation

    @property
    def total_contributors(self) -> int:
        return self.counts.total

    def share_for(self, tier: Tier) -> Decimal:
        """Per-member amount for a tier. Fan is always zero."""
        if tier is Tier.MAIN:
            return self.main_share
        if tier is Tier.ASSISTANT:
            return self.assistant_share
        if tier is Tier.THANKS:
            return self.thanks_share
        return Decimal("0")

    def tier_total(self, tier: Tier) -> Decimal:
        """Aggregate amount allocated to a tier."""
        return self.share_for(tier) * self.counts.for_tier(tier)

    @property
    def allocated_total(self) -> Decimal:
        return sum(
            (self.tier_total(t) for t in (Tier.MAIN, Tier.ASSISTANT, Tier.THANKS)),
            Decimal("0"),
        )


@dataclass(frozen=True)
class PayoutRecord:
    """An immutable committed payout in the project history."""
    payout_id: str
    date: date
    revenue: Decimal
    main_count: int
    assistant_count: int
    thanks_count: int
    main_share: Decimal
    assistant_share: Decimal
    thanks_share: Decimal
    adjustment_applied: bool
    notes: str = ""
    members: tuple[MemberAllocation, ...] = ()
    committed_at: Optional[datetime] = None

    @staticmethod
    def from_calculation(
        calculation: PayoutCalculation,
        payout_id: str,
        payout_date: date,
        notes: str = "",
        committed_at: Optional[datetime] = None,
    ) -> PayoutRecord:
        """Freeze a calculation into a history record.

        The date is chosen by the caller; the engine never reads a clock.
        """
        if not payout_id or not payout_id.strip():
            raise ValueError("Payout record requires an ID")
        return PayoutRecord(
            payout_id=payout_id.strip(),
            date=payout_date,
            revenue=calculation.revenue_amount,
            main_count=calculation.counts.main,
            assistant_count=calculation.counts.assistant,
            thanks_count=calculation.counts.thanks,
            main_share=calculation.main_share,
            assistant_share=calculation.assistant_share,
            thanks_share=calculation.thanks_share,
            adjustment_applied=calculation.fairness_adjusted,
            notes=(notes or "").strip(),
            members=tuple(calculation.allocations),
            committed_at=committed_at,
        )

    @property
    def total_contributors(self) -> int:
        return self.main_count + self.assistant_count + self.thanks_count

    def share_for(self, tier: Tier) -> Decimal:
        if tier is Tier.MAIN:
            return self.main_share
        if tier is Tier.ASSISTANT:
            return self.assistant_share
        if tier is Tier.THANKS:
            return self.thanks_share
        return Decimal("0")

    def sort_key(self) -> tuple:
        """Chronological ordering: payout date, then commit time."""
        committed = self.committed_at
        if committed is None:
            committed = _NEVER
        elif committed.tzinfo is None:
            committed = committed.replace(tzinfo=timezone.utc)
        return (self.date, committed.astimezone(timezone.utc), self.payout_id)


@dataclass(frozen=True)
class HistoryOverview:
    """Aggregate statistics over the committed payout history."""
    total_revenue: Decimal
    payout_count: int
    average_payout: Decimal
    last_payout_date: Optional[date]
