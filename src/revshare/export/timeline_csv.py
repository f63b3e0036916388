"""Timeline CSV export — one row per committed payout, oldest first."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from revshare.errors import InvalidInputError
from revshare.export.formatting import format_amount
from revshare.models.payout import PayoutRecord

CSV_COLUMNS = (
    "Date",
    "Total Revenue",
    "Main Count",
    "Main Share",
    "Assistant Count",
    "Assistant Share",
    "Thanks Count",
    "Thanks Share",
    "Total Contributors",
    "Adjustment Applied",
    "Notes",
)


def generate_timeline_csv(records: Sequence[PayoutRecord]) -> str:
    """Render committed payouts as CSV.

    Notes are quoted, with internal quotes doubled, only when they
    contain a comma, a quote or a line break.

    Raises InvalidInputError when there is nothing to export.
    """
    if not records:
        raise InvalidInputError("No payouts to export")

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_COLUMNS)
    for record in sorted(records, key=lambda r: r.sort_key()):
        writer.writerow([
            record.date.isoformat(),
            format_amount(record.revenue),
            record.main_count,
            format_amount(record.main_share),
            record.assistant_count,
            format_amount(record.assistant_share),
            record.thanks_count,
            format_amount(record.thanks_share),
            record.total_contributors,
            "Yes" if record.adjustment_applied else "No",
            record.notes,
        ])
    return buffer.getvalue()


def timeline_filename(project_name: str) -> str:
    return f"{project_name or 'project'}_timeline.csv"
