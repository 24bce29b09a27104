"""Tests for the HSA analyzer."""

from __future__ import annotations

import pytest

from compass.domains.insurance.domain_logic.hsa_analyzer import (
    HSAAnalyzer,
    federal_marginal_rate,
    future_value,
)


@pytest.fixture
def analyzer() -> HSAAnalyzer:
    return HSAAnalyzer()


class TestHelpers:
    def test_future_value_compounds_start_of_year(self):
        assert future_value(1000, 0.07, 1) == 1070.0
        assert future_value(1000, 0.07, 2) == 2214.9
        assert future_value(1000, 0.07, 0) == 0.0

    @pytest.mark.parametrize("income,rate", [(30_000, 0.12), (80_000, 0.22), (600_000, 0.37)])
    def test_federal_marginal_rate(self, income, rate):
        assert federal_marginal_rate(income) == rate


class TestCalculateBenefits:
    def test_individual_limits_and_tax_savings(self, analyzer):
        analysis = analyzer.calculate_benefits(1, 40, 80_000, 0.05)
        assert analysis.max_contribution == 4400.0
        assert analysis.tax_savings.federal == 968.0
        assert analysis.tax_savings.fica == 336.6
        assert analysis.tax_savings.state == 220.0
        assert analysis.tax_savings.total == 1524.6

    def test_family_with_catch_up(self, analyzer):
        analysis = analyzer.calculate_benefits(3, 56, 120_000)
        assert analysis.max_contribution == 9750.0

    def test_projections(self, analyzer):
        analysis = analyzer.calculate_benefits(1, 40, 80_000)
        assert analysis.projections.year1 == 4400.0
        assert analysis.projections.year5 == future_value(4400, 0.07, 5)
        assert analysis.projections.years_to_retirement == 30
        assert analysis.projections.year5 < analysis.projections.year10 < analysis.projections.retirement

    def test_young_saver_projects_to_sixty_five(self, analyzer):
        assert analyzer.calculate_benefits(1, 25, 80_000).projections.years_to_retirement == 40

    def test_retirement_horizon_at_least_thirty_years(self, analyzer):
        analysis = analyzer.calculate_benefits(1, 60, 80_000, 0.05)
        assert analysis.max_contribution == 5400.0
        assert analysis.projections.year1 == 5400.0
        assert analysis.projections.years_to_retirement == 30
        assert analysis.projections.retirement == future_value(5400, 0.07, 30)

    def test_recommendation_varies_by_profile(self, analyzer):
        assert analyzer.calculate_benefits(1, 30, 80_000).recommendation.startswith("Excellent fit")
        assert analyzer.calculate_benefits(1, 58, 80_000).recommendation.startswith("Good fit")
        assert "emergency fund" in analyzer.calculate_benefits(1, 52, 30_000).recommendation

    def test_strategies_catalog(self, analyzer):
        strategies = analyzer.calculate_benefits(1, 40, 80_000).strategies
        assert [s.strategy for s in strategies] == [
            "Max Out & Invest",
            "Strategic Contributions",
            "Employer Match Max",
            "Catch-Up Power",
        ]
        assert all(s.best_for for s in strategies)

    def test_custom_return(self):
        analysis = HSAAnalyzer(annual_return=0.05).calculate_benefits(1, 40, 80_000)
        assert analysis.projections.year5 == future_value(4400, 0.05, 5)
        assert analysis.projections.annual_return == 0.05

    def test_plan_year_limits(self):
        analysis = HSAAnalyzer(plan_year=2025).calculate_benefits(1, 40, 80_000)
        assert analysis.max_contribution == 4300.0

    def test_unknown_plan_year_raises(self):
        with pytest.raises(ValueError, match="No HSA limits"):
            HSAAnalyzer(plan_year=2019)

    def test_audited(self, audit):
        HSAAnalyzer(audit_logger=audit).calculate_benefits(2, 40, 90_000)
        entry = audit.get_logs()[0]
        assert entry.calculation_type == "hsa"
        assert entry.input["annual_return"] == 0.07


class TestHdhpVsPpo:
    def test_hdhp_saves(self, analyzer):
        result = analyzer.compare_hdhp_vs_ppo(300, 3000, 450, 1000, 4000, 2000)
        assert result["hdhp_total_cost"] == 4400.0
        assert result["ppo_total_cost"] == 5800.0
        assert result["net_difference"] == -1400.0
        assert "saves you $1,400/year" in result["recommendation"]

    def test_ppo_cheaper_for_heavy_usage(self, analyzer):
        result = analyzer.compare_hdhp_vs_ppo(400, 6000, 450, 500, 0, 20_000)
        assert result["net_difference"] > 500
        assert result["recommendation"].startswith("PPO costs")
