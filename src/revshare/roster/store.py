"""Roster store — the project's contributors and committed payout history.

The store is an explicitly owned object. Callers pass it (or a snapshot
taken from it) to whatever needs it; nothing reads it through a global.
The payout engine only ever sees list_active_contributors().

Invariants enforced:
- Member and payout IDs are unique.
- Member IDs and join dates never change on update.
- Payout records are append-only and immutable; removal is explicit.
- Fan-tier members are never returned as active (paid) contributors.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional

from revshare.models.contributor import Contributor, Tier, sort_key
from revshare.models.payout import HistoryOverview, PayoutRecord

logger = logging.getLogger(__name__)


class RosterStore:
    """In-memory project roster and payout history.

    Thread-safety: this class is not thread-safe. The caller must
    synchronise access if used from multiple threads.
    """

    def __init__(
        self,
        project_name: str = "",
        project_description: str = "",
        members: Iterable[Contributor] = (),
        payouts: Iterable[PayoutRecord] = (),
    ) -> None:
        self._project_name = project_name.strip()
        self._project_description = project_description.strip()
        self._members: dict[str, Contributor] = {}
        self._payouts: dict[str, PayoutRecord] = {}
        for member in members:
            self._insert_member(member)
        for record in payouts:
            self._insert_payout(record)
        self._dirty = False

    # ------------------------------------------------------------------
    # Project info
    # ------------------------------------------------------------------

    @property
    def project_name(self) -> str:
        return self._project_name

    @property
    def project_description(self) -> str:
        return self._project_description

    def set_project_info(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        if name is not None:
            self._project_name = name.strip()
        if description is not None:
            self._project_description = description.strip()
        self._dirty = True

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def add_member(self, member: Contributor) -> None:
        """Add a contributor. Raises ValueError on a duplicate ID."""
        self._insert_member(member)
        self._dirty = True
        logger.debug("Added member %s (%s)", member.member_id, member.tier.value)

    def update_member(self, member: Contributor) -> Contributor:
        """Replace an existing contributor, returning the previous record.

        Raises KeyError if the member does not exist, ValueError if the
        join date was changed.
        """
        previous = self._members.get(member.member_id)
        if previous is None:
            raise KeyError(f"Member not found: {member.member_id}")
        if previous.join_date != member.join_date:
            raise ValueError(f"Join date of member {member.member_id} is immutable")
        self._members[member.member_id] = member
        self._dirty = True
        return previous

    def remove_member(self, member_id: str) -> Contributor:
        """Remove a contributor. Committed payouts keep their snapshot.

        Raises KeyError if the member does not exist.
        """
        canonical = member_id.strip()
        if canonical not in self._members:
            raise KeyError(f"Member not found: {member_id}")
        removed = self._members.pop(canonical)
        self._dirty = True
        return removed

    def get_member(self, member_id: str) -> Optional[Contributor]:
        return self._members.get(member_id.strip())

    def all_members(self) -> list[Contributor]:
        """All contributors in every tier, alphabetical."""
        return sorted(self._members.values(), key=sort_key)

    def members_in_tier(self, tier: Tier) -> list[Contributor]:
        return [m for m in self.all_members() if m.tier is tier]

    def list_active_contributors(self) -> list[Contributor]:
        """Paid (non-Fan) contributors, ascending by name.

        Returns a fresh list; mutating it never affects the store.
        """
        return [m for m in self.all_members() if m.is_paid]

    def tier_counts(self) -> dict[Tier, int]:
        counts = {tier: 0 for tier in Tier}
        for member in self._members.values():
            counts[member.tier] += 1
        return counts

    @property
    def member_count(self) -> int:
        return len(self._members)

    # ------------------------------------------------------------------
    # Payout history
    # ------------------------------------------------------------------

    def append_payout_record(self, record: PayoutRecord) -> None:
        """Append a committed payout. Raises ValueError on a duplicate ID."""
        self._insert_payout(record)
        self._dirty = True
        logger.debug("Appended payout %s for %s", record.payout_id, record.date)

    def list_payout_records(self) -> list[PayoutRecord]:
        """Committed payouts in chronological order."""
        return sorted(self._payouts.values(), key=lambda r: r.sort_key())

    def get_payout_record(self, payout_id: str) -> Optional[PayoutRecord]:
        return self._payouts.get(payout_id.strip())

    def remove_payout_record(self, payout_id: str) -> PayoutRecord:
        """Delete a committed payout. Raises KeyError if unknown."""
        canonical = payout_id.strip()
        if canonical not in self._payouts:
            raise KeyError(f"Payout not found: {payout_id}")
        removed = self._payouts.pop(canonical)
        self._dirty = True
        return removed

    @property
    def payout_count(self) -> int:
        return len(self._payouts)

    def history_overview(self) -> HistoryOverview:
        records = list(self._payouts.values())
        total = sum((r.revenue for r in records), Decimal("0"))
        average = total / len(records) if records else Decimal("0")
        last = max((r.date for r in records), default=None)
        return HistoryOverview(
            total_revenue=total,
            payout_count=len(records),
            average_payout=average,
            last_payout_date=last,
        )

    # ------------------------------------------------------------------
    # Unsaved-change tracking
    # ------------------------------------------------------------------

    @property
    def dirty(self) -> bool:
        """True when the store has changed since it was last saved."""
        return self._dirty

    def mark_saved(self) -> None:
        self._dirty = False

    def mark_unsaved(self) -> None:
        self._dirty = True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _insert_member(self, member: Contributor) -> None:
        canonical = member.member_id.strip()
        if not canonical:
            raise ValueError("Cannot add member with blank ID")
        if not member.name.strip():
            raise ValueError(f"Member {canonical} has a blank name")
        if canonical in self._members:
            raise ValueError(f"Duplicate member ID: {canonical}")
        self._members[canonical] = member

    def _insert_payout(self, record: PayoutRecord) -> None:
        canonical = record.payout_id.strip()
        if not canonical:
            raise ValueError("Cannot add payout with blank ID")
        if canonical in self._payouts:
            raise ValueError(f"Duplicate payout ID: {canonical}")
        self._payouts[canonical] = record
