"""Tests for the fairness decision — proves both gates are independently required."""

import pytest
from decimal import Decimal

from revshare.models.payout import Adjusted, TierCounts, Unadjusted
from revshare.payout.fairness import (
    decide_fairness,
    explain_adjustment,
    rebalance,
    skew_ratio,
)
from revshare.policy.resolver import PayoutPolicy


POLICY = PayoutPolicy()


def _unadjusted_main_share(counts: TierCounts, revenue: Decimal) -> Decimal:
    units = counts.main + counts.assistant * Decimal("0.5") + counts.thanks * Decimal("0.167")
    return revenue / units


def _decide(main: int, assistant: int, thanks: int, revenue: str = "1000"):
    counts = TierCounts(main=main, assistant=assistant, thanks=thanks)
    rev = Decimal(revenue)
    return decide_fairness(counts, _unadjusted_main_share(counts, rev), rev, POLICY)


class TestSkewRatio:
    def test_ratio_over_main(self) -> None:
        assert skew_ratio(TierCounts(main=2, assistant=6, thanks=4)) == Decimal("5")

    def test_zero_main_uses_denominator_one(self) -> None:
        assert skew_ratio(TierCounts(main=0, assistant=3, thanks=4)) == Decimal("7")

    def test_no_lower_tiers(self) -> None:
        assert skew_ratio(TierCounts(main=3)) == Decimal("0")


class TestRatioGate:
    def test_ratio_exactly_at_threshold_does_not_fire(self) -> None:
        # 1 main, 5 thanks: ratio 5, main fraction 1/1.835 > 0.30 anyway,
        # so use a custom floor high enough that only the ratio gate decides.
        counts = TierCounts(main=1, thanks=5)
        policy = PayoutPolicy(main_tier_floor=Decimal("0.99"))
        rev = Decimal("1000")
        decision = decide_fairness(counts, _unadjusted_main_share(counts, rev), rev, policy)
        assert isinstance(decision, Unadjusted)

    def test_ratio_above_threshold_with_low_fraction_fires(self) -> None:
        decision = _decide(main=1, assistant=6, thanks=0)
        assert isinstance(decision, Adjusted)
        assert decision.ratio == Decimal("6")


class TestFloorGate:
    def test_high_ratio_but_fraction_above_floor_does_not_fire(self) -> None:
        # 1 main, 6 thanks: ratio 6 > 5, but main fraction 1/2.002 ≈ 0.50.
        decision = _decide(main=1, assistant=0, thanks=6)
        assert isinstance(decision, Unadjusted)
        assert decision.ratio == Decimal("6")

    def test_fraction_below_floor_but_ratio_low_does_not_fire(self) -> None:
        # 1 main, 5 assistants: fraction 1/3.5 ≈ 0.286 < 0.30 but ratio is 5.
        decision = _decide(main=1, assistant=5, thanks=0)
        assert isinstance(decision, Unadjusted)


class TestZeroMain:
    def test_zero_main_never_adjusted(self) -> None:
        decision = _decide(main=0, assistant=10, thanks=10)
        assert isinstance(decision, Unadjusted)
        assert decision.ratio == Decimal("20")


class TestDecisionShape:
    def test_unadjusted_has_no_explanation(self) -> None:
        decision = _decide(main=2, assistant=0, thanks=0)
        assert decision.adjusted is False
        assert decision.explanation == ""

    def test_adjusted_carries_floor_and_explanation(self) -> None:
        decision = _decide(main=1, assistant=10, thanks=0)
        assert decision.adjusted is True
        assert decision.floor == Decimal("0.30")
        assert "10.0:1" in decision.explanation
        assert "threshold of 5:1" in decision.explanation
        assert "at least 30%" in decision.explanation

    def test_explanation_formats_fractional_ratio(self) -> None:
        text = explain_adjustment(Decimal("20") / Decimal("3"), POLICY)
        assert "(6.7:1)" in text

    def test_explanation_rounds_tied_ratio_up(self) -> None:
        # 25 / 4 = 6.25 sits exactly between 6.2 and 6.3.
        decision = _decide(main=4, assistant=25, thanks=0)
        assert decision.adjusted is True
        assert "(6.3:1)" in decision.explanation

    def test_explanation_rounds_floor_percent_half_up(self) -> None:
        text = explain_adjustment(Decimal("8"), PayoutPolicy(main_tier_floor=Decimal("0.325")))
        assert "at least 33%" in text


class TestRebalance:
    def test_reference_scenario(self) -> None:
        main, assistant, thanks = rebalance(
            TierCounts(main=1, assistant=10), Decimal("1000"), POLICY,
        )
        assert main == Decimal("300")
        assert assistant == Decimal("70")
        assert thanks == Decimal("23.38")

    @pytest.mark.parametrize("main,assistant,thanks", [(2, 12, 0), (3, 5, 40)])
    def test_main_total_is_floor(self, main: int, assistant: int, thanks: int) -> None:
        counts = TierCounts(main=main, assistant=assistant, thanks=thanks)
        share, _, _ = rebalance(counts, Decimal("900"), POLICY)
        assert abs(share * main - Decimal("270")) < Decimal("1e-20")
