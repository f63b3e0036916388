"""Payout policy configuration."""

from revshare.policy.resolver import PayoutPolicy, PolicyResolver

__all__ = [
    "PayoutPolicy",
    "PolicyResolver",
]
