"""Exporters — credits, full report and CSV timeline.

Exporters only read from the store and round amounts for display. They
never feed rounded values back into stored records.
"""

from revshare.export.credits import generate_credits_markdown
from revshare.export.report import generate_full_report
from revshare.export.timeline_csv import generate_timeline_csv

__all__ = [
    "generate_credits_markdown",
    "generate_full_report",
    "generate_timeline_csv",
]
