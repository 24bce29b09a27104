"""Tests for coverage, utilization and budget scoring."""

from __future__ import annotations

import pytest

from compass.domains.insurance.domain_logic.coverage_scoring import (
    are_adjacent,
    budget_note,
    coverage_score,
    effective_income,
    score_utilization,
)
from compass.domains.insurance.domain_logic.models import CostRange, UtilizationProfile


class TestCoverageScore:
    @pytest.mark.parametrize(
        "states,expected",
        [
            ([], 50),
            (["FL"], 90),
            (["NY", "FL"], 85),
            (["WA", "OR"], 75),
            (["MT", "WY", "ID", "UT", "NM"], 80),
            (["MT", "VT"], 85),
        ],
    )
    def test_scores(self, states, expected):
        assert coverage_score(states) == expected

    def test_adjacency_is_order_independent(self):
        assert are_adjacent(["OR", "WA"])
        assert not are_adjacent(["OR", "FL"])


class TestScoreUtilization:
    def test_default_profile_is_minimal(self, household_factory):
        score = score_utilization(household_factory())
        assert score.score == 0
        assert score.level == "minimal"
        assert score.recommended_tier == "bronze"
        assert score.recommended_plan_type == "HDHP"
        assert score.recommended_deductible == "high"
        assert score.expected_annual_claims == 500.0
        assert not score.is_high

    def test_heavy_profile(self, household_factory, heavy_profile):
        score = score_utilization(household_factory(utilization=heavy_profile))
        assert score.score == 72
        assert score.level == "high"
        assert score.is_high
        assert score.recommended_tier == "gold"
        assert score.recommended_plan_type == "PPO"
        assert score.recommended_deductible == "low"
        # 8000 baseline + 3 brand fills x $150 x 12
        assert score.expected_annual_claims == 13_400.0

    def test_score_capped_at_100(self, household_factory):
        profile = UtilizationProfile(
            primary_care_visits=20, specialist_visits=20, er_visits=5, prescriptions_per_month=6,
            has_chronic_conditions=True, chronic_condition_count=4, has_planned_procedures=True,
        )
        score = score_utilization(household_factory(utilization=profile, takes_specialty_meds=True))
        assert score.score == 100
        assert score.level == "very-high"
        assert score.recommended_tier == "platinum"

    def test_planned_procedure_prefers_low_deductible(self, household_factory):
        profile = UtilizationProfile(has_planned_procedures=True)
        score = score_utilization(household_factory(utilization=profile))
        assert score.recommended_deductible == "low"
        assert score.recommended_plan_type == "HMO"

    def test_reasoning_explains_score(self, household_factory, heavy_profile):
        reasoning = score_utilization(household_factory(utilization=heavy_profile)).reasoning
        assert "Managing 2 chronic condition(s)" in reasoning


class TestIncomeAndBudget:
    def test_exact_income_wins(self, household_factory):
        assert effective_income(household_factory(annual_income=52_000, income_range="150k-plus")) == 52_000

    def test_range_midpoint(self, household_factory):
        assert effective_income(household_factory(income_range="50k-75k")) == 62_500

    def test_unknown_range_uses_default(self, household_factory):
        assert effective_income(household_factory(income_range="")) == 75_000

    def test_budget_below_estimate(self):
        note = budget_note("less-500", CostRange(800, 1000))
        assert "subsidies" in note

    def test_unsure_budget_suggests_concierge(self):
        assert "concierge" in budget_note("not-sure", CostRange(800, 1000))

    def test_budget_that_fits_has_no_note(self):
        assert budget_note("1000-2000", CostRange(800, 1000)) is None
