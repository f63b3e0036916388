"""Error taxonomy for the revenue-share ledger.

All errors are ValueError subclasses so callers that only care about
"bad input" can catch ValueError. The service facade converts them into
failed ServiceResults; nothing here is ever swallowed silently.
"""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a calculation or export has nothing valid to work on.

    Non-positive revenue, a roster with no paid contributors, or an
    export request with an empty history. No partial result is produced.
    """


class ProjectFileError(ValueError):
    """Raised when a project document is malformed or cannot be parsed.

    The in-memory store is never touched when this is raised.
    """


class PolicyError(ValueError):
    """Raised when payout policy configuration violates its invariants."""
