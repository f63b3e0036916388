"""Project file — JSON persistence of a complete roster store.

Document schema (shared with every earlier export of the ledger):

    {
      "project": {"name": str, "description": str},
      "members": [{"id", "name", "tier", "email", "payment", "role", "joinDate"}],
      "payouts": [{"id", "date", "revenue", "notes",
                   "mainCount", "assistantCount", "thanksCount",
                   "mainShare", "assistantShare", "thanksShare",
                   "adjustmentApplied",
                   "members": [{"id", "name", "tier", "amount"}],
                   "committedAt"}]
    }

Monetary values are written as strings to keep full Decimal precision
and read back from either strings or JSON numbers.

Fail-closed: a document missing any top-level key, or holding a record
that cannot be parsed, is rejected as a whole with ProjectFileError.
Loading always builds a fresh RosterStore, so a failed load can never
leave the caller's store half-replaced.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from revshare.errors import ProjectFileError
from revshare.models.contributor import Contributor, Tier
from revshare.models.payout import MemberAllocation, PayoutRecord
from revshare.roster.store import RosterStore

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("project", "members", "payouts")

# Stored amounts at or above this cannot be rounded to cents for export.
MAX_STORED_AMOUNT = Decimal("1e18")


def load_project(path: Path) -> RosterStore:
    """Load a project document from disk.

    Raises ProjectFileError for non-.json paths and malformed content.
    OSError from reading the file propagates unchanged.
    """
    path = Path(path)
    if path.suffix.lower() != ".json":
        raise ProjectFileError(f"Not a JSON project file: {path.name}")
    with path.open("r", encoding="utf-8") as f:
        text = f.read()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProjectFileError(f"Invalid JSON in {path.name}: {e}") from None
    store = parse_project(data)
    logger.info(
        "Loaded project %r from %s (%d members, %d payouts)",
        store.project_name, path, store.member_count, store.payout_count,
    )
    return store


def parse_project(data: Any) -> RosterStore:
    """Build a RosterStore from a decoded project document."""
    if not isinstance(data, dict):
        raise ProjectFileError("Invalid project file format: expected a JSON object")
    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise ProjectFileError(
            f"Invalid project file format: missing {', '.join(missing)}"
        )

    project = data["project"]
    members = data["members"]
    payouts = data["payouts"]
    if not isinstance(project, dict):
        raise ProjectFileError("Invalid project file format: project must be an object")
    if not isinstance(members, list) or not isinstance(payouts, list):
        raise ProjectFileError(
            "Invalid project file format: members and payouts must be lists"
        )

    try:
        return RosterStore(
            project_name=str(project.get("name") or ""),
            project_description=str(project.get("description") or ""),
            members=[_member_from_dict(m) for m in members],
            payouts=[_payout_from_dict(p) for p in payouts],
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise ProjectFileError(f"Invalid project file content: {e}") from None


def dump_project(store: RosterStore) -> dict[str, Any]:
    """Serialise a store into the project document schema."""
    return {
        "project": {
            "name": store.project_name,
            "description": store.project_description,
        },
        "members": [_member_to_dict(m) for m in store.all_members()],
        "payouts": [_payout_to_dict(p) for p in store.list_payout_records()],
    }


def save_project(store: RosterStore, path: Path) -> None:
    """Write the store to disk as pretty-printed JSON and mark it saved.

    Writes to a sibling temp file first so a failed write never
    truncates an existing project file. OSError propagates.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(dump_project(store), indent=2, ensure_ascii=False)
    tmp_path = path.with_name(path.name + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(content + "\n")
    tmp_path.replace(path)
    store.mark_saved()
    logger.debug("Saved project %r to %s", store.project_name, path)


def snapshot_filename(project_name: str, now: datetime) -> str:
    """Timestamped download-style file name for a project snapshot.

    Non-alphanumeric characters in the name become underscores:
    "My Game!" at 2026-03-01 12:30:05 → "My_Game__2026-03-01T12-30-05.json"
    """
    base = re.sub(r"[^A-Za-z0-9]", "_", project_name or "project")
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return f"{base}_{stamp}.json"


# ----------------------------------------------------------------------
# Record mapping
# ----------------------------------------------------------------------

def _member_to_dict(member: Contributor) -> dict[str, Any]:
    return {
        "id": member.member_id,
        "name": member.name,
        "tier": member.tier.value,
        "email": member.email,
        "payment": member.payment_address,
        "role": member.role,
        "joinDate": _format_timestamp(member.join_date),
    }


def _member_from_dict(data: dict[str, Any]) -> Contributor:
    if not isinstance(data, dict):
        raise TypeError(f"member entry must be an object, got {type(data).__name__}")
    member_id = str(data["id"]).strip()
    if not member_id:
        raise ValueError("member entry has a blank id")
    name = str(data.get("name") or "").strip()
    if not name:
        raise ValueError(f"member {member_id} has a blank name")
    return Contributor(
        member_id=member_id,
        name=name,
        tier=Tier.parse(data["tier"]),
        email=str(data.get("email") or ""),
        payment_address=str(data.get("payment") or ""),
        role=str(data.get("role") or ""),
        join_date=_parse_timestamp(data.get("joinDate")),
    )


def _payout_to_dict(record: PayoutRecord) -> dict[str, Any]:
    return {
        "id": record.payout_id,
        "date": record.date.isoformat(),
        "revenue": str(record.revenue),
        "notes": record.notes,
        "mainCount": record.main_count,
        "assistantCount": record.assistant_count,
        "thanksCount": record.thanks_count,
        "mainShare": str(record.main_share),
        "assistantShare": str(record.assistant_share),
        "thanksShare": str(record.thanks_share),
        "adjustmentApplied": record.adjustment_applied,
        "members": [
            {
                "id": m.member_id,
                "name": m.name,
                "tier": m.tier.value,
                "amount": str(m.amount),
            }
            for m in record.members
        ],
        "committedAt": _format_timestamp(record.committed_at),
    }


def _payout_from_dict(data: dict[str, Any]) -> PayoutRecord:
    if not isinstance(data, dict):
        raise TypeError(f"payout entry must be an object, got {type(data).__name__}")
    payout_id = str(data["id"]).strip()
    if not payout_id:
        raise ValueError("payout entry has a blank id")
    members = tuple(
        MemberAllocation(
            member_id=str(m["id"]),
            name=str(m["name"]),
            tier=Tier.parse(m["tier"]),
            amount=_decimal(m["amount"]),
        )
        for m in data.get("members") or []
    )
    return PayoutRecord(
        payout_id=payout_id,
        date=_parse_date(data["date"]),
        revenue=_decimal(data["revenue"]),
        main_count=int(data.get("mainCount", 0)),
        assistant_count=int(data.get("assistantCount", 0)),
        thanks_count=int(data.get("thanksCount", 0)),
        main_share=_decimal(data.get("mainShare", 0)),
        assistant_share=_decimal(data.get("assistantShare", 0)),
        thanks_share=_decimal(data.get("thanksShare", 0)),
        adjustment_applied=_flag(data.get("adjustmentApplied", False)),
        notes=str(data.get("notes") or ""),
        members=members,
        committed_at=_parse_timestamp(data.get("committedAt")),
    )


def _decimal(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"expected a number, got {value!r}")
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"expected a finite number, got {value!r}")
    if amount.copy_abs() >= MAX_STORED_AMOUNT:
        raise ValueError(f"amount out of range: {value!r}")
    return amount


def _flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected true or false, got {value!r}")
    return value


def _parse_date(value: Any) -> date:
    # Accept plain dates and full ISO timestamps.
    return date.fromisoformat(str(value).strip()[:10])


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
