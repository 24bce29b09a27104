"""Tests for the Medicare Advantage and employer-plan analyses."""

from __future__ import annotations

from compass.domains.insurance.domain_logic.employer_plan import (
    compare_employer_to_marketplace,
    estimate_employer_plan_cost,
)
from compass.domains.insurance.domain_logic.medicare_advantage import (
    analyze_medicare_advantage_fit,
    shopping_tips,
)
from compass.domains.insurance.domain_logic.models import CostRange, UtilizationProfile


class TestMedicareAdvantageFit:
    def test_single_state_healthy_household_is_good_fit(self, household_factory):
        analysis = analyze_medicare_advantage_fit(household_factory(adult_ages=[68]), 1)
        assert analysis.is_good_fit is True
        assert analysis.confidence_level == "high"
        assert analysis.red_flags == []
        assert analysis.estimated_monthly_cost == CostRange(0.0, 150.0)

    def test_multi_state_is_not_recommended(self, household_factory):
        household = household_factory(states=("FL", "NY"), adult_ages=[68, 66])
        analysis = analyze_medicare_advantage_fit(household, 2)
        assert analysis.is_good_fit is False
        assert analysis.confidence_level == "low"
        assert analysis.estimated_monthly_cost.high == 300.0
        assert any("2 states" in flag for flag in analysis.red_flags)

    def test_provider_preference_lowers_confidence(self, household_factory):
        profile = UtilizationProfile(needs_specific_providers=True)
        analysis = analyze_medicare_advantage_fit(household_factory(adult_ages=[70], utilization=profile), 1)
        assert analysis.is_good_fit is True
        assert analysis.confidence_level == "medium"

    def test_chronic_needs_highlight_drug_coverage(self, household_factory, heavy_profile):
        analysis = analyze_medicare_advantage_fit(
            household_factory(adult_ages=[70], utilization=heavy_profile), 1
        )
        assert "You need regular medications" in analysis.when_to_consider

    def test_shopping_tips_mention_every_state(self):
        tips = shopping_tips(["FL", "NY"])
        assert any("FL, NY" in tip for tip in tips)
        assert not any("IMPORTANT" in tip for tip in shopping_tips(["FL"]))


class TestEmployerPlan:
    def test_employee_share(self):
        assert estimate_employer_plan_cost(300, 1) == 500.0
        assert estimate_employer_plan_cost(500, 4) == 1600.0
        assert estimate_employer_plan_cost(2000, 1) == 0.0

    def test_unaffordable_plan_suggests_switching(self):
        # $800 share against a $456 affordability ceiling on $60k
        analysis = compare_employer_to_marketplace(0, 60_000, 1, CostRange(400, 600))
        assert analysis.is_affordable is False
        assert analysis.recommendation == "Consider switching to marketplace coverage"
        assert analysis.monthly_savings == 300.0
        assert "9.12%" in analysis.explanation

    def test_cheaper_employer_plan_is_best_value(self):
        analysis = compare_employer_to_marketplace(600, 60_000, 1, CostRange(400, 600))
        assert analysis.is_affordable is True
        assert analysis.recommendation.startswith("Keep your employer coverage - it's your best value")
        assert analysis.monthly_savings == 300.0

    def test_materially_cheaper_marketplace_prompts_comparison(self):
        analysis = compare_employer_to_marketplace(400, 100_000, 1, CostRange(200, 300))
        assert analysis.recommendation.startswith("Compare marketplace plans")
        assert analysis.monthly_savings == 150.0

    def test_similar_costs_keep_employer_plan(self):
        analysis = compare_employer_to_marketplace(400, 100_000, 1, CostRange(360, 400))
        assert analysis.recommendation == "Keep your employer coverage"
        assert analysis.monthly_savings is None
