"""Full report export — Markdown summary of the project and its payouts.

Sections:
    title, generated timestamp
    Overview (totals over the committed history)
    Current Team Composition (all four tiers)
    Payout Timeline (oldest first, with per-member amounts)
    footer

The generated timestamp is supplied by the caller; rendering never reads
the clock.
"""

from __future__ import annotations

from datetime import datetime

from revshare.export.formatting import format_date, format_money
from revshare.models.contributor import Tier
from revshare.roster.store import RosterStore

REPORT_FOOTER = "*Report generated by the Revenue Share System*"


def generate_full_report(
    store: RosterStore,
    generated_at: datetime,
    currency_symbol: str = "€",
) -> str:
    def money(value) -> str:
        return format_money(value, currency_symbol)

    lines: list[str] = []
    if store.project_name:
        lines.append(f"# {store.project_name} - Revenue Share Report")
    else:
        lines.append("# Revenue Share Report")
    lines += [
        "",
        f"**Generated:** {generated_at.strftime('%Y-%m-%d')} at {generated_at.strftime('%H:%M:%S')}",
        "",
        "---",
        "",
    ]

    overview = store.history_overview()
    lines += [
        "## Overview",
        "",
        f"- **Total Revenue Distributed:** {money(overview.total_revenue)}",
        f"- **Total Payouts:** {overview.payout_count}",
        f"- **Average Payout:** {money(overview.average_payout)}",
    ]
    if overview.last_payout_date is not None:
        lines.append(f"- **Last Payout:** {format_date(overview.last_payout_date)}")
    lines += ["", "---", ""]

    counts = store.tier_counts()
    lines += [
        "## Current Team Composition",
        "",
        f"- **Main Tier:** {counts[Tier.MAIN]} members",
        f"- **Assistant Tier:** {counts[Tier.ASSISTANT]} members",
        f"- **Special Thanks Tier:** {counts[Tier.THANKS]} members",
        f"- **Fan Tier:** {counts[Tier.FAN]} members (not paid)",
        "",
        "---",
        "",
    ]

    records = store.list_payout_records()
    if records:
        lines += ["## Payout Timeline", ""]
        for index, record in enumerate(records, 1):
            lines += [
                f"### Payout #{index} - {format_date(record.date)}",
                "",
                f"**Total Amount:** {money(record.revenue)}",
                "",
            ]
            if record.adjustment_applied:
                lines += ["**Self-Adjusting Fairness Applied**", ""]
            lines += [
                "**Distribution:**",
                f"- Main Tier: {record.main_count} members × {money(record.main_share)} each",
                f"- Assistant Tier: {record.assistant_count} members × "
                f"{money(record.assistant_share)} each",
                f"- Special Thanks: {record.thanks_count} members × "
                f"{money(record.thanks_share)} each",
                "",
            ]
            if record.notes:
                lines += [f"**Notes:** {record.notes}", ""]
            lines += ["**Individual Members:**", ""]
            for member in record.members:
                lines.append(f"- {member.name}: {money(member.amount)}")
            lines.append("")

    lines += ["", "---", "", REPORT_FOOTER]
    return "\n".join(lines) + "\n"


def report_filename(project_name: str) -> str:
    return f"{project_name or 'project'}_full_report.md"
