"""What-if comparison of two household scenarios.

Each scenario is run through the full recommendation, then the two
results are diffed field by field and on cost and coverage score.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Literal

from compass.domains.insurance.domain_logic.coverage_scoring import effective_income
from compass.domains.insurance.domain_logic.models import (
    CurrentInsurance,
    Household,
    Recommendation,
    Residence,
    UtilizationProfile,
)

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationAuditLogger

logger = logging.getLogger(__name__)

ChangeType = Literal["increase", "decrease", "change"]
ScenarioPick = Literal["1", "2", "equal"]

# Average monthly cost gap below which two scenarios cost the same
COST_EQUALITY_THRESHOLD = 10.0
# Coverage-score gap below which two scenarios cover the same
COVERAGE_EQUALITY_THRESHOLD = 5
# Average adult age must move by more than this to count as a difference
AGE_DIFFERENCE_THRESHOLD = 1.0

EMPLOYER_SCENARIO_CONTRIBUTION = 300.0

RecommendFn = Callable[[Household], "Recommendation | None"]


@dataclass
class Scenario:
    id: str
    name: str
    description: str
    household: Household


@dataclass
class ScenarioDifference:
    field: str
    label: str
    value_1: Any
    value_2: Any
    change_type: ChangeType


@dataclass
class CostComparison:
    monthly_low_difference: float
    monthly_high_difference: float
    average_monthly_difference: float      # scenario 2 minus scenario 1
    annual_low_difference: float
    annual_high_difference: float
    cheaper_scenario: ScenarioPick
    potential_annual_savings: float


@dataclass
class RiskComparison:
    coverage_score_difference: int         # scenario 2 minus scenario 1
    better_coverage_scenario: ScenarioPick
    risk_notes: list[str] = field(default_factory=list)


@dataclass
class ScenarioResult:
    scenario: Scenario
    recommendation: Recommendation


@dataclass
class ScenarioComparison:
    scenario_1: ScenarioResult
    scenario_2: ScenarioResult
    differences: list[ScenarioDifference]
    cost_comparison: CostComparison
    risk_comparison: RiskComparison
    insights: list[str]
    recommendation: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Field table for diffs
# ---------------------------------------------------------------------------

def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _states(household: Household) -> str:
    return ", ".join(household.states) or "Not specified"


def _average_adult_age(household: Household) -> float:
    ages = [float(a) for a in household.adult_ages]
    return sum(ages) / len(ages) if ages else 0.0


@dataclass(frozen=True)
class DiffField:
    """One comparable household field. ``numeric`` fields get a direction."""

    name: str
    label: str
    read: Callable[[Household], Any]
    numeric: bool = False


DIFF_FIELDS: tuple[DiffField, ...] = (
    DiffField("num_adults", "Number of Adults", lambda h: len(h.adult_ages), numeric=True),
    DiffField("num_children", "Number of Children", lambda h: len(h.child_ages), numeric=True),
    DiffField("budget", "Budget", lambda h: h.budget),
    DiffField("annual_income", "Annual Income", effective_income, numeric=True),
    DiffField("has_employer_insurance", "Employer Insurance", lambda h: _yes_no(h.has_employer_insurance)),
    DiffField("employer_contribution", "Employer Contribution", lambda h: h.employer_contribution, numeric=True),
    DiffField(
        "has_chronic_conditions", "Chronic Conditions",
        lambda h: _yes_no(h.utilization.has_chronic_conditions),
    ),
    DiffField("primary_care_visits", "Doctor Visits", lambda h: h.utilization.primary_care_visits, numeric=True),
    DiffField(
        "specialist_visits", "Specialist Visits", lambda h: h.utilization.specialist_visits, numeric=True
    ),
    DiffField("er_visits", "ER Visits", lambda h: h.utilization.er_visits, numeric=True),
    DiffField(
        "has_planned_procedures", "Planned Procedures",
        lambda h: _yes_no(h.utilization.has_planned_procedures),
    ),
    DiffField("takes_specialty_meds", "Specialty Medications", lambda h: _yes_no(h.takes_specialty_meds)),
    DiffField(
        "prescriptions_per_month", "Monthly Prescriptions",
        lambda h: h.utilization.prescriptions_per_month, numeric=True,
    ),
    DiffField("financial_priority", "Financial Priority", lambda h: h.financial_priority or "Not specified"),
    DiffField("residences", "States", _states),
)


def _change_type(diff_field: DiffField, value_1: Any, value_2: Any) -> ChangeType:
    if diff_field.numeric:
        if value_2 > value_1:
            return "increase"
        if value_2 < value_1:
            return "decrease"
    return "change"


def find_differences(household_1: Household, household_2: Household) -> list[ScenarioDifference]:
    """Fields that differ between two households; empty when they match."""
    differences: list[ScenarioDifference] = []
    for diff_field in DIFF_FIELDS:
        value_1, value_2 = diff_field.read(household_1), diff_field.read(household_2)
        if value_1 != value_2:
            differences.append(ScenarioDifference(
                field=diff_field.name,
                label=diff_field.label,
                value_1=value_1,
                value_2=value_2,
                change_type=_change_type(diff_field, value_1, value_2),
            ))

    age_1, age_2 = _average_adult_age(household_1), _average_adult_age(household_2)
    if abs(age_1 - age_2) > AGE_DIFFERENCE_THRESHOLD:
        differences.append(ScenarioDifference(
            field="adult_ages",
            label="Average Age",
            value_1=round(age_1),
            value_2=round(age_2),
            change_type="increase" if age_2 > age_1 else "decrease",
        ))
    return differences


# ---------------------------------------------------------------------------
# Scenario construction
# ---------------------------------------------------------------------------

_HOUSEHOLD_FIELDS = {f.name for f in dataclasses.fields(Household)}
_UTILIZATION_FIELDS = {f.name for f in dataclasses.fields(UtilizationProfile)}


def _apply_overrides(base: Household, overrides: dict[str, Any]) -> Household:
    unknown = set(overrides) - _HOUSEHOLD_FIELDS
    if unknown:
        raise ValueError(f"Unknown household field(s): {', '.join(sorted(unknown))}")

    changes = dict(overrides)
    utilization = changes.get("utilization")
    if isinstance(utilization, dict):
        bad = set(utilization) - _UTILIZATION_FIELDS
        if bad:
            raise ValueError(f"Unknown utilization field(s): {', '.join(sorted(bad))}")
        changes["utilization"] = dataclasses.replace(base.utilization, **utilization)
    if "residences" in changes:
        changes["residences"] = [
            r if isinstance(r, Residence) else Residence(**r) for r in changes["residences"]
        ]
    current = changes.get("current_insurance")
    if isinstance(current, dict):
        changes["current_insurance"] = CurrentInsurance(**current)
    return dataclasses.replace(copy.deepcopy(base), **changes)


def create_scenario(
    id: str,
    name: str,
    description: str,
    base_household: Household,
    overrides: dict[str, Any] | None = None,
) -> Scenario:
    """A scenario built from a copy of *base_household* with partial overrides.

    ``overrides["utilization"]`` may be a partial dict; it is merged onto the
    base profile rather than replacing it. The base household is never mutated.
    """
    household = _apply_overrides(base_household, overrides or {})
    return Scenario(id=id, name=name, description=description, household=household)


def generate_common_scenarios(base_household: Household) -> dict[str, Any]:
    """Baseline plus the standard what-if alternatives for this household."""
    baseline = create_scenario(
        "baseline",
        "Current Situation",
        "Your current healthcare needs and circumstances",
        base_household,
    )
    alternatives = [
        create_scenario(
            "high-utilization",
            "Higher Healthcare Needs",
            "What if you had more doctor visits and healthcare needs?",
            base_household,
            {"utilization": {
                "primary_care_visits": max(base_household.utilization.primary_care_visits, 8),
                "specialist_visits": max(base_household.utilization.specialist_visits, 2),
                "has_chronic_conditions": True,
            }},
        )
    ]
    if not base_household.has_employer_insurance:
        alternatives.append(create_scenario(
            "with-employer",
            "With Employer Insurance",
            "What if you had access to employer-sponsored coverage?",
            base_household,
            {"has_employer_insurance": True, "employer_contribution": EMPLOYER_SCENARIO_CONTRIBUTION},
        ))
    if not base_household.utilization.has_planned_procedures:
        alternatives.append(create_scenario(
            "planned-procedure",
            "Planned Major Procedure",
            "What if you needed a major surgery or procedure?",
            base_household,
            {"utilization": {
                "has_planned_procedures": True,
                "er_visits": max(base_household.utilization.er_visits, 1),
            }},
        ))
    return {"baseline": baseline, "alternatives": alternatives}


# ---------------------------------------------------------------------------
# Comparator
# ---------------------------------------------------------------------------

def compare_costs(rec_1: Recommendation, rec_2: Recommendation) -> CostComparison:
    cost_1, cost_2 = rec_1.estimated_monthly_cost, rec_2.estimated_monthly_cost
    low_diff = cost_2.low - cost_1.low
    high_diff = cost_2.high - cost_1.high
    average_diff = cost_2.average - cost_1.average

    if abs(average_diff) < COST_EQUALITY_THRESHOLD:
        cheaper: ScenarioPick = "equal"
    else:
        cheaper = "1" if average_diff > 0 else "2"

    return CostComparison(
        monthly_low_difference=round(low_diff, 2),
        monthly_high_difference=round(high_diff, 2),
        average_monthly_difference=round(average_diff),
        annual_low_difference=round(low_diff * 12, 2),
        annual_high_difference=round(high_diff * 12, 2),
        cheaper_scenario=cheaper,
        potential_annual_savings=0.0 if cheaper == "equal" else float(round(abs(average_diff) * 12)),
    )


def compare_risk(
    rec_1: Recommendation,
    rec_2: Recommendation,
    differences: list[ScenarioDifference],
) -> RiskComparison:
    score_diff = rec_2.coverage_gap_score - rec_1.coverage_gap_score
    if abs(score_diff) < COVERAGE_EQUALITY_THRESHOLD:
        better: ScenarioPick = "equal"
    else:
        better = "2" if score_diff > 0 else "1"

    changed = {d.field: d for d in differences}
    notes: list[str] = []
    chronic = changed.get("has_chronic_conditions")
    if chronic is not None and chronic.value_2 == "Yes":
        notes.append("Chronic conditions increase healthcare utilization risk")
    if "er_visits" in changed:
        notes.append("ER visit frequency significantly impacts out-of-pocket costs")
    if "takes_specialty_meds" in changed:
        notes.append("Specialty medications often drive high annual healthcare costs")
    if "adult_ages" in changed:
        notes.append("Age affects premium costs due to ACA age-rating curves")

    return RiskComparison(
        coverage_score_difference=score_diff,
        better_coverage_scenario=better,
        risk_notes=notes,
    )


class ScenarioComparator:
    """Runs two scenarios through *recommend* and explains how they differ.

    Usage::

        comparator = ScenarioComparator(orchestrator.recommend)
        common = generate_common_scenarios(household)
        report = comparator.compare_scenarios(common["baseline"], common["alternatives"][0])
        report.cost_comparison.cheaper_scenario     # '1' | '2' | 'equal'
    """

    def __init__(
        self,
        recommend: RecommendFn,
        *,
        audit_logger: CalculationAuditLogger | None = None,
    ) -> None:
        self._recommend = recommend
        self._audit = audit_logger

    def compare_scenarios(self, scenario_1: Scenario, scenario_2: Scenario) -> ScenarioComparison:
        """Raises ValueError when either household is too incomplete to recommend."""
        if self._audit is None:
            return self._compare(scenario_1, scenario_2)
        return self._audit.log_calculation(
            "scenario-comparison",
            {"scenario_1": scenario_1, "scenario_2": scenario_2},
            lambda data: self._compare(data["scenario_1"], data["scenario_2"]),
        )

    def _run(self, scenario: Scenario) -> Recommendation:
        recommendation = self._recommend(scenario.household)
        if recommendation is None:
            raise ValueError(f"Scenario {scenario.id!r} is missing required household information")
        return recommendation

    def _compare(self, scenario_1: Scenario, scenario_2: Scenario) -> ScenarioComparison:
        rec_1 = self._run(scenario_1)
        rec_2 = self._run(scenario_2)

        differences = find_differences(scenario_1.household, scenario_2.household)
        costs = compare_costs(rec_1, rec_2)
        risk = compare_risk(rec_1, rec_2, differences)
        logger.debug(
            "Scenarios %s vs %s: %d differences, cheaper=%s",
            scenario_1.id, scenario_2.id, len(differences), costs.cheaper_scenario,
        )
        return ScenarioComparison(
            scenario_1=ScenarioResult(scenario_1, rec_1),
            scenario_2=ScenarioResult(scenario_2, rec_2),
            differences=differences,
            cost_comparison=costs,
            risk_comparison=risk,
            insights=self._insights(differences, costs, risk, scenario_1, scenario_2),
            recommendation=self._verdict(costs, risk, scenario_1, scenario_2),
        )

    @staticmethod
    def _insights(
        differences: list[ScenarioDifference],
        costs: CostComparison,
        risk: RiskComparison,
        scenario_1: Scenario,
        scenario_2: Scenario,
    ) -> list[str]:
        insights: list[str] = []
        if costs.cheaper_scenario != "equal":
            cheaper = scenario_1 if costs.cheaper_scenario == "1" else scenario_2
            insights.append(
                f"{cheaper.name} could save you approximately "
                f"${costs.potential_annual_savings:,.0f} per year"
            )
        if risk.better_coverage_scenario != "equal":
            better = scenario_1 if risk.better_coverage_scenario == "1" else scenario_2
            insights.append(
                f"{better.name} provides {abs(risk.coverage_score_difference)} points "
                "higher coverage score"
            )
        changed = {d.field for d in differences}
        if "annual_income" in changed:
            insights.append("Income level affects subsidy eligibility and out-of-pocket costs")
        if "has_employer_insurance" in changed:
            insights.append("Employer insurance can significantly reduce premium costs")
        insights.extend(risk.risk_notes)
        return insights

    @staticmethod
    def _verdict(
        costs: CostComparison,
        risk: RiskComparison,
        scenario_1: Scenario,
        scenario_2: Scenario,
    ) -> str:
        def points(pick: ScenarioPick) -> int:
            return {"1": 1, "2": -1}.get(pick, 0)

        total = points(costs.cheaper_scenario) + points(risk.better_coverage_scenario)
        if total != 0:
            winner, key = (scenario_1, "1") if total > 0 else (scenario_2, "2")
            edge = "lower costs" if costs.cheaper_scenario == key else "better value"
            return (
                f'Based on both cost and coverage analysis, "{winner.name}" appears to be the '
                f"better option. It offers {edge} for your situation."
            )
        if costs.cheaper_scenario != "equal":
            cheaper = scenario_1 if costs.cheaper_scenario == "1" else scenario_2
            return (
                f'Both scenarios offer similar value, but "{cheaper.name}" has lower costs. '
                "Consider your risk tolerance when choosing."
            )
        return (
            "Both scenarios offer similar costs and coverage. Your choice should depend on "
            "personal preferences and specific plan features."
        )
