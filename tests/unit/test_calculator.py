"""Tests for the ROI distribution and revenue split arithmetic."""

import random
from decimal import Decimal

import pytest

from mythra_engine.payouts.calculator import (
    InvestmentShare,
    PayoutErrorCode,
    compute_distribution,
    compute_payout_split,
    to_decimal,
)

D = Decimal


def shares(*amounts):
    return [InvestmentShare(f"inv-{i}", D(str(a)), f"investor-{i}") for i, a in enumerate(amounts)]


class TestComputeDistribution:
    def test_worked_example(self):
        result = compute_distribution(100, 30, 20, shares(60, 40))
        assert result.ok
        b = result.breakdown
        assert b.net_profit == D("70")
        assert b.investor_pool == D("14")
        assert b.organizer_retained == D("56")
        assert [a.roi_amount for a in b.allocations] == [D("8.4"), D("5.6")]
        assert b.total_roi == D("14")
        assert [a.roi_percentage for a in b.allocations] == [D("60"), D("40")]
        assert b.allocations[0].total_return == D("68.4")

    def test_residual_goes_to_largest(self):
        result = compute_distribution(1, 0, 100, shares(1, 1, 1))
        b = result.breakdown
        assert sum(a.roi_amount for a in b.allocations) == D("1")
        assert [a.roi_amount for a in b.allocations] == [D("0.333334"), D("0.333333"), D("0.333333")]

    def test_sum_invariant_randomised(self):
        rng = random.Random(42)
        for _ in range(200):
            costs = D(rng.randint(0, 10_000)) / 100
            revenue = costs + D(rng.randint(0, 100_000)) / 1000
            share = D(rng.randint(0, 100))
            amounts = [D(rng.randint(1, 1_000_000)) / 1000 for _ in range(rng.randint(1, 12))]
            result = compute_distribution(revenue, costs, share, shares(*amounts))
            assert result.ok
            b = result.breakdown
            assert b.total_roi == b.investor_pool
            assert b.organizer_retained + b.investor_pool == b.net_profit
            assert all(a.roi_amount >= 0 for a in b.allocations)

    def test_zero_share(self):
        b = compute_distribution(100, 30, 0, shares(60, 40)).breakdown
        assert all(a.roi_amount == 0 for a in b.allocations)
        assert b.organizer_retained == b.net_profit

    def test_loss_gives_zero_pool(self):
        b = compute_distribution(10, 30, 20, shares(5)).breakdown
        assert b.net_profit == D("-20")
        assert b.investor_pool == 0
        assert b.organizer_retained == D("-20")
        assert b.allocations[0].total_return == D("5")

    def test_proportionality(self):
        base = compute_distribution(100, 30, 20, shares(10, 20, 30)).breakdown
        doubled = compute_distribution(100, 30, 20, shares(20, 20, 30)).breakdown
        assert doubled.allocations[0].roi_amount > base.allocations[0].roi_amount
        for before, after in zip(base.allocations[1:], doubled.allocations[1:]):
            assert after.roi_amount <= before.roi_amount

    def test_no_investors_with_positive_pool(self):
        result = compute_distribution(100, 30, 20, [])
        assert not result.ok
        assert result.error == PayoutErrorCode.NO_INVESTORS_TO_DISTRIBUTE_TO

    def test_no_investors_with_zero_pool(self):
        result = compute_distribution(100, 30, 0, [])
        assert result.ok
        assert result.breakdown.allocations == ()

    @pytest.mark.parametrize("revenue,costs,share", [
        (-1, 0, 20),
        (100, -5, 20),
        (100, 30, -1),
        (100, 30, 101),
        ("abc", 30, 20),
    ])
    def test_invalid_input(self, revenue, costs, share):
        result = compute_distribution(revenue, costs, share, shares(10))
        assert not result.ok
        assert result.error == PayoutErrorCode.INVALID_INPUT

    def test_non_positive_investment_rejected(self):
        result = compute_distribution(100, 30, 20, shares(10, 0))
        assert result.error == PayoutErrorCode.INVALID_INPUT

    def test_float_inputs_go_through_str(self):
        b = compute_distribution(100.1, 0.1, 20, shares(1)).breakdown
        assert b.net_profit == D("100.0")
        assert b.investor_pool == D("20")

    def test_custom_places(self):
        b = compute_distribution(1, 0, 100, shares(1, 1, 1), places=2).breakdown
        assert [a.roi_amount for a in b.allocations] == [D("0.34"), D("0.33"), D("0.33")]


class TestPayoutSplit:
    def test_default_fee(self):
        split = compute_payout_split(D("200"))
        assert split.platform_fee == D("10")
        assert split.organizer_amount == D("190")
        assert split.platform_fee + split.organizer_amount == split.total_revenue

    def test_rounding(self):
        split = compute_payout_split(D("0.0000001"), D("5"))
        assert split.platform_fee == D("0")
        assert split.organizer_amount == D("0.0000001")

    def test_negative_revenue(self):
        with pytest.raises(ValueError):
            compute_payout_split(D("-1"))

    def test_fee_out_of_range(self):
        with pytest.raises(ValueError):
            compute_payout_split(D("10"), D("150"))


class TestToDecimal:
    def test_bool_rejected(self):
        with pytest.raises(ValueError):
            to_decimal(True)

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            to_decimal("NaN")

    def test_float(self):
        assert to_decimal(0.1) == D("0.1")
