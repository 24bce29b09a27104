"""Compare the coverage a household holds today against the recommendation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from compass.domains.insurance.domain_logic.models import CostRange, CurrentInsurance

HIGH_DEDUCTIBLE = 5_000.0
HIGH_OUT_OF_POCKET_MAX = 10_000.0
SIGNIFICANT_SAVINGS = 100.0
MODERATE_SAVINGS = 50.0
COST_INCREASE_WARNING = -100.0

NARROW_NETWORK_TYPES = frozenset({"HMO", "EPO"})

Priority = Literal["high", "medium", "low"]


@dataclass
class Suggestion:
    type: Literal["cost-savings", "network-expansion", "coverage-improvement", "plan-change"]
    title: str
    description: str
    priority: Priority
    potential_savings: float | None = None


@dataclass
class CurrentInsuranceComparison:
    summary: str
    current_monthly_cost: float
    recommended_monthly_cost: CostRange
    monthly_savings: float | None
    annual_savings: float | None
    suggestions: list[Suggestion] = field(default_factory=list)
    improvement_areas: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _where(states: list[str]) -> str:
    if len(states) > 2:
        return f"across {len(states)} states ({', '.join(states)})"
    return f"between {', '.join(states)}" if len(states) == 2 else f"in {', '.join(states) or 'your state'}"


def compare_current_insurance(
    current: CurrentInsurance,
    recommended_insurance: str,
    recommended_cost: CostRange,
    states: list[str],
) -> CurrentInsuranceComparison:
    """Savings and suggestions from switching away from *current*.

    ``monthly_savings`` is positive when the recommendation is cheaper.
    """
    monthly_savings = round(current.monthly_cost - recommended_cost.average, 2)
    plan_type = current.plan_type.strip()
    network = plan_type.upper()
    suggestions: list[Suggestion] = []
    areas: list[str] = []

    if monthly_savings > SIGNIFICANT_SAVINGS:
        suggestions.append(Suggestion(
            type="cost-savings",
            title="Significant Cost Savings Opportunity",
            description=(
                f"You could save approximately ${monthly_savings:,.0f}/month "
                f"(${monthly_savings * 12:,.0f}/year) by switching to the recommended plan."
            ),
            priority="high",
            potential_savings=monthly_savings,
        ))
    elif monthly_savings > MODERATE_SAVINGS:
        suggestions.append(Suggestion(
            type="cost-savings",
            title="Moderate Cost Savings Available",
            description=(
                f"Switching could save you around ${monthly_savings:,.0f}/month. Consider if the "
                "network and coverage differences are worth the savings."
            ),
            priority="medium",
            potential_savings=monthly_savings,
        ))
    if monthly_savings > MODERATE_SAVINGS:
        areas.append("Monthly premium costs")

    if network in NARROW_NETWORK_TYPES and len(states) > 1:
        suggestions.append(Suggestion(
            type="network-expansion",
            title="Limited Network Coverage Across States",
            description=(
                f"Your current {network} plan likely has network restrictions that don't work well "
                f"{_where(states)}. A national PPO would provide seamless coverage in all locations."
            ),
            priority="high",
        ))
        areas.append("Multi-state network coverage")

    on_medicare = "medicare" in plan_type.lower()
    recommends_medicare = "Medicare" in recommended_insurance
    if recommends_medicare and not on_medicare:
        suggestions.append(Suggestion(
            type="coverage-improvement",
            title="Medicare Eligibility Available",
            description=(
                "You appear to be Medicare-eligible. Medicare with Medigap provides nationwide "
                "coverage with no network restrictions, which is ideal for multi-state living."
            ),
            priority="high",
        ))
        areas.append("Medicare eligibility utilization")

    if "advantage" in plan_type.lower() and recommends_medicare:
        suggestions.append(Suggestion(
            type="plan-change",
            title="Consider Switching from Medicare Advantage to Medigap",
            description=(
                "Medicare Advantage plans are typically network-based and may require different "
                f"plans {_where(states)}. Original Medicare with Medigap works seamlessly nationwide."
            ),
            priority="high",
        ))
        areas.append("Plan flexibility for multi-state living")

    if current.deductible > HIGH_DEDUCTIBLE:
        suggestions.append(Suggestion(
            type="coverage-improvement",
            title="High Deductible Risk",
            description=(
                f"Your current deductible of ${current.deductible:,.0f} is quite high. Consider "
                "whether a plan with a lower deductible would provide better protection."
            ),
            priority="medium",
        ))
        areas.append("Lower deductible options")

    if current.out_of_pocket_max > HIGH_OUT_OF_POCKET_MAX:
        suggestions.append(Suggestion(
            type="coverage-improvement",
            title="High Out-of-Pocket Maximum",
            description=(
                f"Your current out-of-pocket maximum of ${current.out_of_pocket_max:,.0f} could "
                "expose you to significant financial risk. Look for plans with lower maximums."
            ),
            priority="medium",
        ))
        areas.append("Out-of-pocket maximum protection")

    if monthly_savings < COST_INCREASE_WARNING:
        suggestions.append(Suggestion(
            type="cost-savings",
            title="Your Current Plan is More Affordable",
            description=(
                "Your current plan costs less than the recommendation. Verify it provides "
                f"adequate coverage {_where(states)} before keeping it."
            ),
            priority="low",
        ))

    summary = (
        f"{current.carrier} {plan_type} - ${current.monthly_cost:,.0f}/month "
        f"(Deductible: ${current.deductible:,.0f}, Max OOP: ${current.out_of_pocket_max:,.0f})"
    ).strip()
    return CurrentInsuranceComparison(
        summary=summary,
        current_monthly_cost=current.monthly_cost,
        recommended_monthly_cost=recommended_cost,
        monthly_savings=monthly_savings if monthly_savings > 0 else None,
        annual_savings=round(monthly_savings * 12, 2) if monthly_savings > 0 else None,
        suggestions=suggestions,
        improvement_areas=areas,
    )
