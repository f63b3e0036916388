"""Contributor models — tiers and the people registered in a project.

A contributor's tier decides whether and how much they are paid. Fan-tier
contributors are credited but never paid. Identity and join date are
fixed at creation; every other field can change through with_changes(),
which returns a new record rather than mutating the old one.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional


class Tier(str, enum.Enum):
    """Contribution tier of a project member."""
    MAIN = "main"
    ASSISTANT = "assistant"
    THANKS = "thanks"
    FAN = "fan"

    @property
    def is_paid(self) -> bool:
        return self is not Tier.FAN

    @property
    def label(self) -> str:
        return TIER_LABELS[self]

    @staticmethod
    def parse(value: object) -> Tier:
        """Coerce a tier name (any case) or Tier into a Tier.

        Raises ValueError for unrecognised values.
        """
        if isinstance(value, Tier):
            return value
        try:
            return Tier(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in Tier)
            raise ValueError(
                f"Unknown tier: {value!r}. Allowed: {allowed}"
            ) from None


# Display order for credits, breakdowns and reports.
TIER_ORDER: tuple[Tier, ...] = (Tier.MAIN, Tier.ASSISTANT, Tier.THANKS, Tier.FAN)

PAID_TIERS: tuple[Tier, ...] = (Tier.MAIN, Tier.ASSISTANT, Tier.THANKS)

TIER_LABELS: dict[Tier, str] = {
    Tier.MAIN: "Main Tier - Essential Contributors",
    Tier.ASSISTANT: "Assistant Tier - Valuable Contributors",
    Tier.THANKS: "Special Thanks - Meaningful Contributors",
    Tier.FAN: "Fan Tier - Minor Contributors",
}


def new_member_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Contributor:
    """A registered project member.

    email, payment_address and role are free text with no effect on
    payout calculation.
    """
    member_id: str
    name: str
    tier: Tier
    email: str = ""
    payment_address: str = ""
    role: str = ""
    join_date: Optional[datetime] = None

    @staticmethod
    def create(
        name: str,
        tier: object,
        email: str = "",
        payment_address: str = "",
        role: str = "",
        member_id: Optional[str] = None,
        join_date: Optional[datetime] = None,
    ) -> Contributor:
        """Create a validated contributor.

        Text fields are stripped. A fresh ID and a UTC join date are
        assigned when not supplied.

        Raises ValueError if the name is blank or the tier is unknown.
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValueError("Contributor name is required")
        mid = (member_id or "").strip() or new_member_id()
        return Contributor(
            member_id=mid,
            name=clean_name,
            tier=Tier.parse(tier),
            email=(email or "").strip(),
            payment_address=(payment_address or "").strip(),
            role=(role or "").strip(),
            join_date=join_date or datetime.now(timezone.utc),
        )

    @property
    def is_paid(self) -> bool:
        return self.tier.is_paid

    def with_changes(
        self,
        name: Optional[str] = None,
        tier: object = None,
        email: Optional[str] = None,
        payment_address: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Contributor:
        """Return a copy with the given fields replaced.

        member_id and join_date never change. Fields left as None keep
        their current value.
        """
        changes: dict[str, object] = {}
        if name is not None:
            clean_name = name.strip()
            if not clean_name:
                raise ValueError("Contributor name is required")
            changes["name"] = clean_name
        if tier is not None:
            changes["tier"] = Tier.parse(tier)
        if email is not None:
            changes["email"] = email.strip()
        if payment_address is not None:
            changes["payment_address"] = payment_address.strip()
        if role is not None:
            changes["role"] = role.strip()
        return replace(self, **changes)


def sort_key(contributor: Contributor) -> tuple[str, str]:
    """Alphabetical ordering key, case-insensitive, ID as tie-breaker."""
    return (contributor.name.casefold(), contributor.member_id)
