"""Roster and payout history storage."""

from revshare.roster.store import RosterStore

__all__ = [
    "RosterStore",
]
