"""Employer-sponsored coverage against marketplace estimates (ACA affordability test)."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from compass.domains.insurance.domain_logic.models import CostRange

# Employee share above this fraction of household income is "unaffordable"
AFFORDABILITY_THRESHOLD = 0.0912
SINGLE_COVERAGE_COST = 800.0
FAMILY_COVERAGE_BASE_COST = 1500.0
ADDITIONAL_MEMBER_COST = 300.0
MATERIAL_SAVINGS = 50.0


@dataclass
class EmployerPlanAnalysis:
    is_affordable: bool
    employer_plan_cost_after_contribution: float
    marketplace_cost: CostRange
    recommendation: str
    explanation: str
    monthly_savings: float | None = None
    action_items: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def estimate_employer_plan_cost(employer_contribution: float, household_size: int) -> float:
    """Employee's monthly share after the employer contribution."""
    if household_size <= 1:
        full_cost = SINGLE_COVERAGE_COST
    else:
        full_cost = FAMILY_COVERAGE_BASE_COST + (household_size - 2) * ADDITIONAL_MEMBER_COST
    return max(0.0, full_cost - employer_contribution)


def compare_employer_to_marketplace(
    employer_contribution: float,
    annual_income: float,
    household_size: int,
    marketplace_cost: CostRange,
) -> EmployerPlanAnalysis:
    employee_cost = estimate_employer_plan_cost(employer_contribution, household_size)
    monthly_income = annual_income / 12 if annual_income > 0 else 0.0
    affordable = employee_cost <= monthly_income * AFFORDABILITY_THRESHOLD
    marketplace_average = marketplace_cost.average
    threshold_pct = f"{AFFORDABILITY_THRESHOLD * 100:.2f}%"

    if not affordable:
        savings = round(employee_cost - marketplace_average, 2)
        tail = (
            f"Switching to the marketplace could save you approximately ${savings:,.0f}/month."
            if savings > 0
            else "The marketplace may offer comparable coverage at a similar or lower cost."
        )
        return EmployerPlanAnalysis(
            is_affordable=False,
            employer_plan_cost_after_contribution=employee_cost,
            marketplace_cost=marketplace_cost,
            recommendation="Consider switching to marketplace coverage",
            monthly_savings=savings,
            explanation=(
                'Your employer coverage is considered "unaffordable" under ACA rules because your '
                f"share of the premium (${employee_cost:,.0f}/month) exceeds {threshold_pct} of your "
                "household income, so you can qualify for marketplace subsidies. " + tail
            ),
            action_items=[
                "Shop on HealthCare.gov or your state marketplace",
                "Compare coverage levels - employer vs. marketplace plans",
                "Check if your doctors are in marketplace plan networks",
            ],
        )

    if employee_cost < marketplace_average:
        savings = round(marketplace_average - employee_cost, 2)
        return EmployerPlanAnalysis(
            is_affordable=True,
            employer_plan_cost_after_contribution=employee_cost,
            marketplace_cost=marketplace_cost,
            recommendation="Keep your employer coverage - it's your best value",
            monthly_savings=savings,
            explanation=(
                f"After your employer's contribution of ${employer_contribution:,.0f}/month you pay "
                f"${employee_cost:,.0f}/month, about ${savings:,.0f}/month less than marketplace "
                f"options and within the {threshold_pct} affordability threshold."
            ),
            action_items=[
                "Confirm your employer plan covers all household members you need",
                "Understand your deductible and out-of-pocket maximum",
                "Take advantage of any employer HSA or FSA contributions",
            ],
        )

    potential = round(employee_cost - marketplace_average, 2)
    if potential > MATERIAL_SAVINGS:
        return EmployerPlanAnalysis(
            is_affordable=True,
            employer_plan_cost_after_contribution=employee_cost,
            marketplace_cost=marketplace_cost,
            recommendation="Compare marketplace plans - you might save money",
            monthly_savings=potential,
            explanation=(
                f"Marketplace plans might be ${potential:,.0f}/month cheaper, but because your "
                "employer plan is affordable you may not be eligible for marketplace subsidies. "
                "Double-check subsidy rules with a marketplace navigator."
            ),
            action_items=[
                "Use the marketplace calculator to check exact subsidy eligibility",
                "Compare coverage quality and networks carefully",
            ],
        )

    return EmployerPlanAnalysis(
        is_affordable=True,
        employer_plan_cost_after_contribution=employee_cost,
        marketplace_cost=marketplace_cost,
        recommendation="Keep your employer coverage",
        explanation=(
            "Your employer coverage is affordable and competitively priced. You likely won't "
            "qualify for marketplace subsidies, so staying put is simplest."
        ),
        action_items=["Contribute to an employer HSA or FSA if available"],
    )
