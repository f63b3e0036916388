"""Credits export — Markdown list of everyone who contributed, by tier."""

from __future__ import annotations

from revshare.models.contributor import TIER_ORDER
from revshare.roster.store import RosterStore


def generate_credits_markdown(store: RosterStore) -> str:
    """Render the project credits.

    Tiers appear in order Main, Assistant, Thanks, Fan; empty tiers are
    skipped. Members are alphabetical within a tier.
    """
    lines: list[str] = []
    if store.project_name:
        lines += [f"# {store.project_name}", ""]
    if store.project_description:
        lines += [store.project_description, ""]

    lines += ["## Credits", ""]

    for tier in TIER_ORDER:
        members = store.members_in_tier(tier)
        if not members:
            continue
        lines += [f"### {tier.label}", ""]
        for member in members:
            entry = f"- **{member.name}**"
            if member.role:
                entry += f" - {member.role}"
            lines.append(entry)
        lines.append("")

    return "\n".join(lines) + "\n"


def credits_filename(project_name: str) -> str:
    return f"{project_name or 'project'}_credits.md"
