"""Tests for the payout engine — proves the split invariants hold."""

import pytest
from decimal import Decimal
from pathlib import Path

from revshare.errors import InvalidInputError
from revshare.export.formatting import format_amount
from revshare.models.contributor import Contributor, Tier
from revshare.models.payout import Adjusted, Unadjusted
from revshare.payout.engine import PayoutEngine, compute, to_amount
from revshare.policy.resolver import PayoutPolicy, PolicyResolver


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
EPSILON = Decimal("1e-20")


def _make_member(name: str, tier: Tier) -> Contributor:
    return Contributor.create(name=name, tier=tier, member_id=f"id-{name}")


def _make_roster(main: int = 0, assistant: int = 0, thanks: int = 0, fan: int = 0) -> list:
    roster = []
    for tier, n in (
        (Tier.MAIN, main),
        (Tier.ASSISTANT, assistant),
        (Tier.THANKS, thanks),
        (Tier.FAN, fan),
    ):
        roster += [_make_member(f"{tier.value}{i:02d}", tier) for i in range(n)]
    return roster


def _close(a: Decimal, b: Decimal) -> bool:
    return abs(a - b) < EPSILON


@pytest.fixture
def engine() -> PayoutEngine:
    return PayoutEngine(PolicyResolver.from_config_dir(CONFIG_DIR))


class TestScenarios:
    def test_two_main_split_evenly(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=2))
        assert calc.main_share == Decimal("500")
        assert calc.counts.main == 2
        assert calc.fairness_adjusted is False
        assert isinstance(calc.fairness, Unadjusted)
        assert calc.fairness.ratio == Decimal("0")

    def test_one_main_ten_assistants_is_adjusted(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=1, assistant=10))
        assert calc.fairness_adjusted is True
        assert isinstance(calc.fairness, Adjusted)
        assert calc.fairness.ratio == Decimal("10")
        assert calc.main_share == Decimal("300")
        assert calc.assistant_share == Decimal("70")
        assert _close(calc.fairness.original_main_fraction, Decimal(1) / Decimal(6))

    def test_four_main_twenty_five_assistants_explains_tied_ratio(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=4, assistant=25))
        assert calc.fairness_adjusted is True
        assert calc.fairness.ratio == Decimal("6.25")
        assert "(6.3:1)" in calc.fairness_explanation

    def test_balanced_team_sums_to_revenue(self) -> None:
        calc = compute(Decimal("500"), _make_roster(main=3, assistant=2, thanks=1))
        assert calc.fairness_adjusted is False
        assert calc.fairness.ratio == Decimal("1")
        assert _close(calc.allocated_total, Decimal("500"))
        expected_main = Decimal("500") / Decimal("4.167")
        assert _close(calc.main_share, expected_main)

    def test_engine_matches_function(self, engine: PayoutEngine) -> None:
        roster = _make_roster(main=2, assistant=3, thanks=4)
        assert engine.compute("750", roster) == compute(Decimal("750"), roster)


class TestSplitInvariants:
    @pytest.mark.parametrize("main,assistant,thanks", [
        (1, 0, 0), (1, 5, 0), (2, 3, 7), (4, 1, 1), (3, 10, 5), (1, 2, 3),
    ])
    def test_sum_to_total_without_adjustment(self, main: int, assistant: int, thanks: int) -> None:
        calc = compute(Decimal("1234.56"), _make_roster(main, assistant, thanks))
        assert calc.fairness_adjusted is False
        assert _close(calc.allocated_total, Decimal("1234.56"))

    @pytest.mark.parametrize("main,assistant,thanks", [
        (1, 1, 0), (2, 0, 5), (3, 4, 4), (0, 2, 3),
    ])
    def test_unadjusted_shares_keep_weights(self, main: int, assistant: int, thanks: int) -> None:
        calc = compute(Decimal("999"), _make_roster(main, assistant, thanks))
        assert calc.assistant_share == calc.main_share * Decimal("0.5")
        assert calc.thanks_share == calc.main_share * Decimal("0.167")

    @pytest.mark.parametrize("main,assistant,thanks", [
        (1, 10, 0), (1, 3, 30), (2, 20, 20), (1, 0, 40),
    ])
    def test_adjusted_main_gets_floor_exactly(self, main: int, assistant: int, thanks: int) -> None:
        revenue = Decimal("1000")
        calc = compute(revenue, _make_roster(main, assistant, thanks))
        assert calc.fairness_adjusted is True
        assert _close(calc.main_share * main, revenue * Decimal("0.30"))
        rest = calc.assistant_share * assistant + calc.thanks_share * thanks
        assert _close(rest, revenue * Decimal("0.70"))
        assert _close(calc.allocated_total, revenue)

    def test_lower_tiers_keep_relative_weights_when_adjusted(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=1, assistant=4, thanks=9))
        assert calc.fairness_adjusted is True
        assert _close(
            calc.thanks_share * Decimal("0.5"),
            calc.assistant_share * Decimal("0.167"),
        )

    def test_full_precision_is_kept(self) -> None:
        calc = compute(Decimal("100"), _make_roster(main=3))
        assert calc.main_share != Decimal("33.33")
        assert _close(calc.main_share * 3, Decimal("100"))


class TestFanExclusion:
    def test_fans_not_counted_or_allocated(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=2, thanks=1, fan=50))
        assert calc.counts.total == 3
        assert all(a.tier is not Tier.FAN for a in calc.allocations)
        assert len(calc.allocations) == 3

    def test_fans_do_not_trigger_fairness(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=1, fan=100))
        assert calc.fairness_adjusted is False
        assert calc.main_share == Decimal("1000")

    def test_fan_share_is_zero(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=1))
        assert calc.share_for(Tier.FAN) == Decimal("0")


class TestAllocations:
    def test_ordered_by_tier_then_name(self) -> None:
        roster = [
            _make_member("zoe", Tier.THANKS),
            _make_member("bob", Tier.MAIN),
            _make_member("Carl", Tier.ASSISTANT),
            _make_member("alice", Tier.MAIN),
            _make_member("ann", Tier.ASSISTANT),
        ]
        calc = compute(Decimal("100"), roster)
        assert [a.name for a in calc.allocations] == ["alice", "bob", "ann", "Carl", "zoe"]

    def test_amounts_match_tier_share(self) -> None:
        calc = compute(Decimal("1000"), _make_roster(main=1, assistant=10))
        for allocation in calc.allocations:
            assert allocation.amount == calc.share_for(allocation.tier)

    def test_input_roster_not_mutated(self) -> None:
        roster = _make_roster(main=1, assistant=2, fan=1)
        before = list(roster)
        compute(Decimal("10"), roster)
        assert roster == before


class TestInvalidInput:
    @pytest.mark.parametrize("revenue", [Decimal("0"), Decimal("-5"), 0, -5, "0", "-0.01"])
    def test_non_positive_revenue(self, revenue) -> None:
        with pytest.raises(InvalidInputError):
            compute(revenue, _make_roster(main=1))

    def test_fan_only_roster(self) -> None:
        with pytest.raises(InvalidInputError):
            compute(Decimal("100"), _make_roster(fan=3))

    def test_empty_roster(self) -> None:
        with pytest.raises(InvalidInputError):
            compute(Decimal("100"), [])

    @pytest.mark.parametrize("revenue", ["abc", "NaN", "Infinity", None, True])
    def test_non_numeric_revenue(self, revenue) -> None:
        with pytest.raises(InvalidInputError):
            compute(revenue, _make_roster(main=1))

    @pytest.mark.parametrize("revenue", ["1e27", "1e15", Decimal("1e30"), 10 ** 20])
    def test_oversized_revenue(self, revenue) -> None:
        with pytest.raises(InvalidInputError, match="too large"):
            compute(revenue, _make_roster(main=1))

    def test_largest_revenue_still_formats(self) -> None:
        calc = compute("999999999999999.99", _make_roster(main=1, thanks=1))
        assert format_amount(calc.revenue_amount) == "999999999999999.99"
        for allocation in calc.allocations:
            whole, cents = format_amount(allocation.amount).split(".")
            assert whole.isdigit()
            assert len(cents) == 2

    def test_invalid_input_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            compute(Decimal("0"), _make_roster(main=1))


class TestAmountCoercion:
    def test_float_goes_through_str(self) -> None:
        assert to_amount(0.1) == Decimal("0.1")

    def test_string_is_stripped(self) -> None:
        assert to_amount(" 12.50 ") == Decimal("12.50")


class TestDeterminism:
    def test_identical_inputs_identical_outputs(self) -> None:
        roster = _make_roster(main=2, assistant=7, thanks=9)
        assert compute(Decimal("321.09"), roster) == compute(Decimal("321.09"), roster)


class TestCustomPolicy:
    def test_lower_floor_changes_adjusted_split(self) -> None:
        policy = PayoutPolicy(main_tier_floor=Decimal("0.25"))
        calc = compute(Decimal("1000"), _make_roster(main=1, assistant=10), policy)
        assert calc.fairness_adjusted is True
        assert calc.main_share == Decimal("250")
        assert calc.assistant_share == Decimal("75")

    def test_higher_threshold_disables_adjustment(self) -> None:
        policy = PayoutPolicy(fairness_ratio_threshold=Decimal("20"))
        calc = compute(Decimal("1000"), _make_roster(main=1, assistant=10), policy)
        assert calc.fairness_adjusted is False
