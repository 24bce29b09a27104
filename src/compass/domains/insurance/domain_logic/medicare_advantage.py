"""Medicare Advantage fit for households with members 65 and over."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from compass.domains.insurance.domain_logic.models import Confidence, CostRange, Household

MEDICARE_ADVANTAGE_COST_LOW = 0.0
MEDICARE_ADVANTAGE_COST_HIGH = 150.0      # per member
MULTI_LOCATION_MONTHS = 3
RED_FLAG_LIMIT = 3
LOW_BUDGETS = frozenset({"less-500"})


@dataclass
class MedicareAdvantageAnalysis:
    is_good_fit: bool
    confidence_level: Confidence
    estimated_monthly_cost: CostRange
    reasoning: list[str] = field(default_factory=list)
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    when_to_consider: list[str] = field(default_factory=list)
    red_flags: list[str] = field(default_factory=list)
    shopping_tips: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def shopping_tips(states: list[str]) -> list[str]:
    tips = [
        "Use the Medicare.gov Plan Finder to compare all plans in your area",
        "Check if your doctors are in the plan network before enrolling",
        "Enter all your medications to see which plan covers them best",
        "Review your plan every year during Open Enrollment (Oct 15 - Dec 7)",
    ]
    if len(states) > 1:
        tips.append(f"IMPORTANT: Check if the plan has coverage in all your states: {', '.join(states)}")
        tips.append("Most Medicare Advantage plans only work in one service area")
    tips.append("Compare total costs: premiums plus expected out-of-pocket costs, not just premiums")
    tips.append("Check plan star ratings (aim for 4+ stars)")
    return tips


def analyze_medicare_advantage_fit(household: Household, medicare_members: int) -> MedicareAdvantageAnalysis:
    """Weigh Medicare Advantage against Original Medicare + Medigap for this household."""
    states = household.states
    profile = household.utilization
    reasoning: list[str] = []
    pros: list[str] = []
    cons: list[str] = []
    when: list[str] = []
    red_flags: list[str] = []

    multi_state = len(states) > 1
    if multi_state:
        red_flags.append(
            f"You have homes in {len(states)} states - Medicare Advantage plans typically only "
            "work well in one geographic area"
        )
        cons.append("Network restrictions make multi-state coverage challenging")
        reasoning.append("Multi-state lifestyle is not ideal for Medicare Advantage")
    else:
        pros.append("Single-state residence works well with Medicare Advantage networks")
        reasoning.append("Single location means network restrictions are less of a concern")
        when.append("You live primarily in one area")

    if len(household.residences) > 1:
        secondary_months = sum(r.months_per_year for r in household.residences if not r.is_primary)
        if secondary_months > MULTI_LOCATION_MONTHS:
            red_flags.append("You spend significant time in multiple locations")
            cons.append("Emergency coverage only when traveling - no routine care")
            reasoning.append("Frequent travel means limited access to in-network care")

    if profile.has_chronic_conditions or profile.prescriptions_per_month >= 4:
        pros.append("Often includes prescription drug coverage at no extra cost")
        pros.append("Out-of-pocket maximum provides financial protection")
        reasoning.append("Your health needs mean built-in drug coverage could save money")
        when.append("You need regular medications")
    else:
        pros.append("Very low or $0 monthly premiums")
        reasoning.append("Healthy individuals can benefit from low premiums")
        when.append("You are generally healthy with minimal healthcare needs")

    if profile.needs_specific_providers:
        red_flags.append("You prefer specific doctors - verify they are in the Medicare Advantage network")
        cons.append("Must use network providers or pay significantly more")
        reasoning.append("Strong doctor preferences require careful network verification")
    else:
        pros.append("If doctors are in-network, care is well-coordinated")
        when.append("You are flexible with choosing doctors from a network")

    if household.budget in LOW_BUDGETS:
        pros.append("Lower monthly premiums than Medicare + Medigap")
        reasoning.append("A tight budget makes lower Medicare Advantage premiums attractive")
        when.append("You want the lowest possible monthly premiums")

    pros.append("May include dental, vision, and hearing benefits")
    pros.append("Often includes gym memberships and wellness programs")
    when.append("You value extra benefits like dental and vision")

    if multi_state or len(red_flags) >= RED_FLAG_LIMIT:
        good_fit, confidence = False, "low"
        reasoning.append("Overall: Medicare Advantage is not recommended for your situation")
    elif not red_flags and len(when) >= 3:
        good_fit, confidence = True, "high"
        reasoning.append("Overall: Medicare Advantage could be a good fit - verify network coverage carefully")
    else:
        good_fit, confidence = True, "medium"
        reasoning.append("Overall: Medicare Advantage might work - carefully weigh the trade-offs")

    cons.extend([
        "Limited to plan network (HMO) or higher costs for out-of-network (PPO)",
        "May need referrals to see specialists (HMO plans)",
        "Plans can change networks and coverage annually",
    ])

    members = max(1, medicare_members)
    return MedicareAdvantageAnalysis(
        is_good_fit=good_fit,
        confidence_level=confidence,
        estimated_monthly_cost=CostRange(
            low=MEDICARE_ADVANTAGE_COST_LOW, high=MEDICARE_ADVANTAGE_COST_HIGH * members
        ),
        reasoning=reasoning,
        pros=pros,
        cons=cons,
        when_to_consider=when,
        red_flags=red_flags,
        shopping_tips=shopping_tips(states),
    )
