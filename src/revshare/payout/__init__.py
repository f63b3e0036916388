"""Payout calculation — engine, fairness rule and cadence advice.

The engine is pure and has no dependency on storage, rendering or file
formats. Callers hand it a contributor snapshot and a revenue figure.
"""

from revshare.payout.engine import PayoutEngine, compute
from revshare.payout.fairness import decide_fairness
from revshare.payout.recommendation import PayoutCadence, recommend_cadence

__all__ = [
    "PayoutEngine",
    "compute",
    "decide_fairness",
    "PayoutCadence",
    "recommend_cadence",
]
