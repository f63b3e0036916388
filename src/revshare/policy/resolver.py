"""Policy resolver — loads payout policy constants from a config directory.

The tier weights, fairness thresholds and payout-cadence thresholds are
policy, not derived values. They live in config/payout_policy.json and
are read through this resolver so that engines never hardcode them.
The built-in defaults match the shipped config exactly.

All numeric values are parsed into Decimal via str() so that 0.167 is
0.167 and not its nearest binary float.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from revshare.errors import PolicyError
from revshare.models.contributor import Tier


POLICY_FILENAME = "payout_policy.json"

DEFAULT_POLICY_DATA: dict[str, Any] = {
    "tier_weights": {
        "main": "1.0",
        "assistant": "0.5",
        "thanks": "0.167",
        "fan": "0",
    },
    "fairness": {
        "ratio_threshold": "5",
        "main_tier_floor": "0.30",
    },
    "payout_cadence": {
        "monthly_min_per_member": "50",
        "quarterly_min_per_member": "15",
    },
    "presentation": {
        "currency_symbol": "€",
    },
}


@dataclass(frozen=True)
class PayoutPolicy:
    """Resolved payout policy. Defaults are the canonical constants."""
    main_weight: Decimal = Decimal("1.0")
    assistant_weight: Decimal = Decimal("0.5")
    thanks_weight: Decimal = Decimal("0.167")
    fan_weight: Decimal = Decimal("0")
    fairness_ratio_threshold: Decimal = Decimal("5")
    main_tier_floor: Decimal = Decimal("0.30")
    monthly_min_per_member: Decimal = Decimal("50")
    quarterly_min_per_member: Decimal = Decimal("15")
    currency_symbol: str = "€"

    def weight(self, tier: Tier) -> Decimal:
        if tier is Tier.MAIN:
            return self.main_weight
        if tier is Tier.ASSISTANT:
            return self.assistant_weight
        if tier is Tier.THANKS:
            return self.thanks_weight
        return self.fan_weight


def _decimal(value: Any, key: str) -> Decimal:
    if isinstance(value, bool):
        raise PolicyError(f"Policy value {key} must be numeric, got {value!r}")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise PolicyError(f"Policy value {key} must be numeric, got {value!r}") from None
    if not result.is_finite():
        raise PolicyError(f"Policy value {key} must be finite, got {value!r}")
    return result


def policy_errors(policy: PayoutPolicy) -> list[str]:
    """Return every invariant the policy violates (empty when valid)."""
    errors: list[str] = []
    if policy.main_weight != Decimal("1"):
        errors.append(f"main weight must be 1.0, got {policy.main_weight}")
    if policy.assistant_weight <= 0:
        errors.append(f"assistant weight must be > 0, got {policy.assistant_weight}")
    if policy.thanks_weight <= 0:
        errors.append(f"thanks weight must be > 0, got {policy.thanks_weight}")
    if policy.fan_weight != 0:
        errors.append(f"fan weight must be 0, got {policy.fan_weight}")
    if policy.assistant_weight > policy.main_weight:
        errors.append("assistant weight must not exceed main weight")
    if policy.thanks_weight > policy.assistant_weight:
        errors.append("thanks weight must not exceed assistant weight")
    if policy.fairness_ratio_threshold <= 0:
        errors.append(
            f"fairness ratio threshold must be > 0, got {policy.fairness_ratio_threshold}"
        )
    if not (Decimal("0") < policy.main_tier_floor < Decimal("1")):
        errors.append(f"main tier floor must be in (0, 1), got {policy.main_tier_floor}")
    if policy.quarterly_min_per_member < 0:
        errors.append("quarterly threshold must be >= 0")
    if policy.monthly_min_per_member < policy.quarterly_min_per_member:
        errors.append("monthly threshold must be >= quarterly threshold")
    if not policy.currency_symbol:
        errors.append("currency symbol must not be empty")
    return errors


class PolicyResolver:
    """Resolves payout policy from raw config data.

    Usage:
        resolver = PolicyResolver.from_config_dir(Path("config"))
        policy = resolver.payout_policy()
        engine = PayoutEngine(resolver)
    """

    def __init__(self, data: dict[str, Any], source: Optional[Path] = None) -> None:
        self._data = data
        self._source = source
        self._policy = self._build_policy(data)

    @staticmethod
    def from_config_dir(config_dir: Path) -> PolicyResolver:
        """Load payout_policy.json from a config directory.

        Raises PolicyError if the file is missing, unparseable, or
        violates the policy invariants.
        """
        path = Path(config_dir) / POLICY_FILENAME
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            raise PolicyError(f"Policy file not found: {path}") from None
        except json.JSONDecodeError as e:
            raise PolicyError(f"Policy file {path} is not valid JSON: {e}") from None
        if not isinstance(data, dict):
            raise PolicyError(f"Policy file {path} must contain a JSON object")
        return PolicyResolver(data, source=path)

    @staticmethod
    def defaults() -> PolicyResolver:
        """Resolver over the built-in default policy."""
        return PolicyResolver(DEFAULT_POLICY_DATA)

    @property
    def source(self) -> Optional[Path]:
        return self._source

    def payout_policy(self) -> PayoutPolicy:
        return self._policy

    def tier_weights(self) -> dict[Tier, Decimal]:
        return {tier: self._policy.weight(tier) for tier in Tier}

    def fairness_params(self) -> dict[str, Decimal]:
        return {
            "ratio_threshold": self._policy.fairness_ratio_threshold,
            "main_tier_floor": self._policy.main_tier_floor,
        }

    def cadence_params(self) -> dict[str, Decimal]:
        return {
            "monthly_min_per_member": self._policy.monthly_min_per_member,
            "quarterly_min_per_member": self._policy.quarterly_min_per_member,
        }

    def currency_symbol(self) -> str:
        return self._policy.currency_symbol

    @staticmethod
    def _build_policy(data: dict[str, Any]) -> PayoutPolicy:
        weights = data.get("tier_weights", {})
        fairness = data.get("fairness", {})
        cadence = data.get("payout_cadence", {})
        presentation = data.get("presentation", {})
        for section, value in (
            ("tier_weights", weights),
            ("fairness", fairness),
            ("payout_cadence", cadence),
            ("presentation", presentation),
        ):
            if not isinstance(value, dict):
                raise PolicyError(f"Policy section {section} must be an object")

        defaults = PayoutPolicy()
        policy = PayoutPolicy(
            main_weight=_decimal(weights.get("main", defaults.main_weight), "tier_weights.main"),
            assistant_weight=_decimal(
                weights.get("assistant", defaults.assistant_weight), "tier_weights.assistant",
            ),
            thanks_weight=_decimal(
                weights.get("thanks", defaults.thanks_weight), "tier_weights.thanks",
            ),
            fan_weight=_decimal(weights.get("fan", defaults.fan_weight), "tier_weights.fan"),
            fairness_ratio_threshold=_decimal(
                fairness.get("ratio_threshold", defaults.fairness_ratio_threshold),
                "fairness.ratio_threshold",
            ),
            main_tier_floor=_decimal(
                fairness.get("main_tier_floor", defaults.main_tier_floor),
                "fairness.main_tier_floor",
            ),
            monthly_min_per_member=_decimal(
                cadence.get("monthly_min_per_member", defaults.monthly_min_per_member),
                "payout_cadence.monthly_min_per_member",
            ),
            quarterly_min_per_member=_decimal(
                cadence.get("quarterly_min_per_member", defaults.quarterly_min_per_member),
                "payout_cadence.quarterly_min_per_member",
            ),
            currency_symbol=str(
                presentation.get("currency_symbol", defaults.currency_symbol)
            ),
        )
        errors = policy_errors(policy)
        if errors:
            raise PolicyError("Invalid payout policy: " + "; ".join(errors))
        return policy
