"""Tests for household premium aggregation."""

from __future__ import annotations

import pytest

from compass.domains.insurance.domain_logic.household import (
    HouseholdAggregator,
    rated_children,
)
from compass.domains.insurance.domain_logic.premium_calculator import PremiumCalculator


@pytest.fixture
def aggregator() -> HouseholdAggregator:
    return HouseholdAggregator(PremiumCalculator())


class TestHouseholdPremium:
    def test_two_adults_two_children(self, aggregator):
        # 410 x (1.452 + 1.405 + 0.635 + 0.635) in a 1.0-index state
        assert aggregator.household_premium(410, [40, 38], [10, 8], "NC") == 1692.07

    def test_only_first_three_children_rated(self, aggregator):
        three = aggregator.household_premium(410, [40], [1, 2, 3], "NC")
        five = aggregator.household_premium(410, [40], [1, 2, 3, 4, 5], "NC")
        assert five == three

    def test_children_selected_in_input_order(self):
        assert rated_children([17, 3, 9, 12]) == [17, 3, 9]

    def test_tobacco_flags_align_by_index(self, aggregator):
        first_smokes = aggregator.household_premium(400, [40, 30], [], "FL", "silver", [True])
        calc = PremiumCalculator()
        expected = calc.price(400, 40, "FL", "silver", True) + calc.price(400, 30, "FL", "silver", False)
        assert first_smokes == pytest.approx(expected, abs=0.01)

    def test_missing_flags_mean_non_user(self, aggregator):
        assert (
            aggregator.household_premium(400, [40, 30], [], "FL", "silver", [])
            == aggregator.household_premium(400, [40, 30], [], "FL", "silver")
        )

    def test_children_never_surcharged(self, aggregator):
        # Flags beyond the adult list never reach children
        assert (
            aggregator.household_premium(400, [40], [10], "FL", "silver", [False, True])
            == aggregator.household_premium(400, [40], [10], "FL", "silver")
        )

    def test_empty_household_is_zero(self, aggregator):
        assert aggregator.household_premium(400, [], [], "FL") == 0.0

    def test_audited_once_per_household(self, audit):
        HouseholdAggregator(PremiumCalculator(), audit_logger=audit).household_premium(
            400, [40], [5], "FL"
        )
        assert [e.calculation_type for e in audit.get_logs()] == ["household-premium"]


class TestPremiumRange:
    def test_all_tiers_ordered(self, aggregator):
        by_tier = aggregator.premium_range([45, 43], [12], "TX")
        assert list(by_tier) == ["bronze", "silver", "gold", "platinum"]
        values = list(by_tier.values())
        assert all(b > a for a, b in zip(values, values[1:]))

    def test_uses_state_base_rate(self, aggregator):
        by_tier = aggregator.premium_range([21], [], "NC")
        assert by_tier["silver"] == 410.0
