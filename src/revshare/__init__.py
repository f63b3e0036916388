"""Revshare — revenue-sharing ledger and tiered payout calculator."""

__version__ = "0.1.0"
