"""Tests for the COBRA continuation analyzer."""

from __future__ import annotations

from datetime import date

import pytest

from compass.domains.insurance.domain_logic.cobra_analyzer import (
    COBRAAnalyzer,
    add_months,
    decision_flowchart,
)
from compass.domains.insurance.domain_logic.models import CostRange

MARKETPLACE = CostRange(600.0, 800.0)


@pytest.fixture
def analyzer() -> COBRAAnalyzer:
    return COBRAAnalyzer()


class TestWindow:
    def test_short_window_is_worth_it_with_urgency(self, analyzer):
        analysis = analyzer.analyze(500, 16, False, MARKETPLACE)
        assert analysis.months_remaining == 2
        assert analysis.is_worth_it is True
        assert any(w.startswith("URGENT") for w in analysis.warnings)

    def test_expired_window(self, analyzer):
        analysis = analyzer.analyze(500, 20, False, MARKETPLACE)
        assert analysis.months_remaining == 0
        assert analysis.is_worth_it is False
        assert any("expired" in w for w in analysis.warnings)
        assert "no longer available" in analysis.recommendation

    def test_expired_window_ignores_preexisting_conditions(self, analyzer):
        analysis = analyzer.analyze(500, 20, True, MARKETPLACE)
        assert analysis.is_worth_it is False

    def test_months_remaining_never_negative(self, analyzer):
        assert analyzer.analyze(500, 40, False, MARKETPLACE).months_remaining == 0


class TestDecisionPolicy:
    def test_cost_range_is_markup_plus_minus_ten_percent(self, analyzer):
        analysis = analyzer.analyze(500, 6, False, MARKETPLACE)
        assert analysis.estimated_monthly_cost == CostRange(1575.0, 1925.0)

    def test_ongoing_treatment_is_worth_it(self, analyzer):
        analysis = analyzer.analyze(500, 6, True, MARKETPLACE)
        assert analysis.is_worth_it is True
        assert any("Open Enrollment" in w for w in analysis.warnings)

    def test_materially_cheaper_cobra_is_worth_it(self, analyzer):
        analysis = analyzer.analyze(100, 6, False, MARKETPLACE)
        assert analysis.is_worth_it is True
        assert "rare" in analysis.recommendation

    def test_otherwise_switch_with_savings(self, analyzer):
        analysis = analyzer.analyze(500, 6, False, MARKETPLACE)
        assert analysis.is_worth_it is False
        assert analysis.monthly_savings_by_switching == 1050.0
        assert analysis.annual_savings_by_switching == 12600.0
        assert "NOT recommended" in analysis.recommendation
        assert analysis.warnings == []

    def test_custom_markup(self):
        analysis = COBRAAnalyzer(cost_markup=3.0).analyze(500, 6, False, MARKETPLACE)
        assert analysis.estimated_monthly_cost == CostRange(1350.0, 1650.0)

    def test_flowchart_always_returned(self, analyzer):
        analysis = analyzer.analyze(500, 6, False, MARKETPLACE)
        assert len(analysis.decision_flowchart) == 4
        assert analysis.decision_flowchart == decision_flowchart()

    def test_audited(self, audit):
        COBRAAnalyzer(audit_logger=audit).analyze(500, 6, False, MARKETPLACE)
        entry = audit.get_logs()[0]
        assert entry.calculation_type == "cobra"
        assert entry.input["alternative_cost_range"] == {"low": 600.0, "high": 800.0}


class TestDropDate:
    def test_add_months_clamps_day(self):
        assert add_months(date(2026, 8, 31), 6) == date(2027, 2, 28)
        assert add_months(date(2026, 1, 31), 18) == date(2027, 7, 31)

    def test_open_enrollment_before_window_end(self):
        plan = COBRAAnalyzer.drop_date(date(2026, 1, 31), date(2026, 11, 1))
        assert plan["drop_date"] == "2026-11-01"
        assert plan["cobra_end_date"] == "2027-07-31"

    def test_window_ends_first(self):
        plan = COBRAAnalyzer.drop_date(date(2026, 1, 31), date(2028, 1, 1))
        assert plan["drop_date"] == "2027-07-31"
        assert "Special Enrollment" in plan["reasoning"]
