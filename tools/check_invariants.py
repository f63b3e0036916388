#!/usr/bin/env python3
"""Payout policy invariant checks against config/payout_policy.json."""

import json
import sys
from decimal import Decimal
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from revshare.errors import PolicyError  # noqa: E402
from revshare.policy.resolver import POLICY_FILENAME, PolicyResolver  # noqa: E402
from revshare.payout.engine import compute  # noqa: E402
from revshare.models.contributor import Contributor, Tier  # noqa: E402

POLICY_PATH = ROOT / "config" / POLICY_FILENAME


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def check_sections(data: dict, errors: list[str]) -> None:
    """Every section and key must be present explicitly in the shipped file."""
    expected = {
        "tier_weights": ("main", "assistant", "thanks", "fan"),
        "fairness": ("ratio_threshold", "main_tier_floor"),
        "payout_cadence": ("monthly_min_per_member", "quarterly_min_per_member"),
        "presentation": ("currency_symbol",),
    }
    for section, keys in expected.items():
        block = data.get(section)
        if not isinstance(block, dict):
            errors.append(f"missing section: {section}")
            continue
        for key in keys:
            if key not in block:
                errors.append(f"missing key: {section}.{key}")


def check_reference_split(resolver: PolicyResolver, errors: list[str]) -> None:
    """A balanced roster must split revenue exactly with no adjustment."""
    roster = [
        Contributor.create(name=f"{tier.value}-{i}", tier=tier)
        for tier, n in ((Tier.MAIN, 3), (Tier.ASSISTANT, 2), (Tier.THANKS, 1))
        for i in range(n)
    ]
    calc = compute(Decimal("500"), roster, resolver.payout_policy())
    if calc.fairness_adjusted:
        errors.append("reference roster 3/2/1 must not trigger fairness adjustment")
    if abs(calc.allocated_total - Decimal("500")) > Decimal("1e-20"):
        errors.append(f"reference split sums to {calc.allocated_total}, expected 500")


def check() -> int:
    errors: list[str] = []
    try:
        data = load_json(POLICY_PATH)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Policy file unreadable: {e}")
        return 1

    check_sections(data, errors)
    try:
        resolver = PolicyResolver(data, source=POLICY_PATH)
    except PolicyError as e:
        errors.append(str(e))
    else:
        check_reference_split(resolver, errors)

    if errors:
        print("Policy invariant check failed:")
        for err in errors:
            print(f"  - {err}")
        return 1

    print("Policy invariant check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(check())
