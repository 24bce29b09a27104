"""Deterministic household scoring: network coverage, utilization and budget fit.

All functions are pure; scores are integers so recommendations stay
reproducible across runs.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Sequence

from compass.domains.insurance.domain_logic.models import CostRange, Household

UtilizationLevel = Literal["minimal", "low", "moderate", "high", "very-high"]

# ---------------------------------------------------------------------------
# Coverage-gap scores (higher = better network availability)
# ---------------------------------------------------------------------------

SCORE_NO_STATES = 50
SCORE_SINGLE_STATE = 90
SCORE_ALL_POPULAR_STATES = 85
SCORE_ADJACENT_STATES = 75
SCORE_MANY_STATES = 80          # 5+ states
SCORE_MIXED_REGIONS = 85        # 2-4 states
SCORE_MEDICARE = 90
SCORE_MIXED_HOUSEHOLD = 85
MANY_STATES_THRESHOLD = 5

# States with strong carrier networks
POPULAR_STATES = frozenset({"NY", "CA", "FL", "TX", "AZ", "IL", "PA", "OH", "NC", "GA"})

# Pairs that commonly share regional networks
ADJACENT_STATE_PAIRS = frozenset(
    frozenset(pair) for pair in (
        ("NY", "NJ"), ("NY", "CT"), ("NY", "PA"),
        ("WA", "OR"), ("CA", "NV"), ("CA", "AZ"),
        ("FL", "GA"), ("TX", "LA"), ("IL", "WI"),
        ("MA", "NH"), ("MA", "RI"), ("MA", "CT"),
    )
)


def coverage_score(states: Sequence[str]) -> int:
    """Network coverage score for the household's residence states."""
    codes = [s.strip().upper() for s in states if s]
    if not codes:
        return SCORE_NO_STATES
    if len(codes) == 1:
        return SCORE_SINGLE_STATE
    if all(code in POPULAR_STATES for code in codes):
        return SCORE_ALL_POPULAR_STATES
    if len(codes) == 2 and frozenset(codes) in ADJACENT_STATE_PAIRS:
        return SCORE_ADJACENT_STATES
    if len(codes) >= MANY_STATES_THRESHOLD:
        return SCORE_MANY_STATES
    return SCORE_MIXED_REGIONS


def are_adjacent(states: Sequence[str]) -> bool:
    codes = [s.strip().upper() for s in states]
    return len(codes) == 2 and frozenset(codes) in ADJACENT_STATE_PAIRS


# ---------------------------------------------------------------------------
# Utilization scoring
# ---------------------------------------------------------------------------

# level -> expected annual claims excluding premiums
EXPECTED_ANNUAL_CLAIMS: dict[str, float] = {
    "very-high": 15_000,
    "high": 8_000,
    "moderate": 4_000,
    "low": 1_500,
    "minimal": 500,
}

# level -> metal tier the household should shop first
RECOMMENDED_TIER: dict[str, str] = {
    "very-high": "platinum",
    "high": "gold",
    "moderate": "silver",
    "low": "bronze",
    "minimal": "bronze",
}

# Monthly fill cost by prescription tier, used for the claims estimate
PRESCRIPTION_MONTHLY_COST = {1: 25.0, 2: 150.0, 3: 400.0, 4: 1_200.0}


@dataclass
class UtilizationScore:
    score: int                            # 0-100
    level: UtilizationLevel
    expected_annual_claims: float
    recommended_deductible: Literal["high", "medium", "low"]
    recommended_plan_type: Literal["HDHP", "PPO", "HMO"]
    recommended_tier: str
    reasoning: list[str] = field(default_factory=list)

    @property
    def is_high(self) -> bool:
        return self.level in ("high", "very-high")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def score_utilization(household: Household) -> UtilizationScore:
    """Score expected healthcare usage 0-100 and derive plan-shape guidance."""
    profile = household.utilization
    score = 0
    reasoning: list[str] = []

    visits = profile.primary_care_visits
    if visits >= 10:
        score += 30
        reasoning.append("Frequent doctor visits (10+/year) indicate high utilization")
    elif visits >= 6:
        score += 20
        reasoning.append("Regular doctor visits (6-10/year) indicate moderate utilization")
    elif visits >= 3:
        score += 10
        reasoning.append("Occasional doctor visits (3-5/year)")
    else:
        reasoning.append("Minimal doctor visits (0-2/year)")

    if profile.specialist_visits >= 12:
        score += 25
        reasoning.append("Regular specialist care indicates complex health needs")
    elif profile.specialist_visits >= 1:
        score += 12
        reasoning.append("Occasional specialist visits")

    if profile.er_visits >= 3:
        score += 20
        reasoning.append("Multiple ER visits indicate high acute care needs")
    elif profile.er_visits >= 1:
        score += 10
        reasoning.append("Some emergency care usage")

    if profile.has_chronic_conditions:
        conditions = max(1, profile.chronic_condition_count)
        score += min(15, conditions * 5)
        reasoning.append(f"Managing {conditions} chronic condition(s)")

    rx = profile.prescriptions_per_month
    if rx >= 4:
        score += 15
        reasoning.append("Four or more ongoing prescriptions")
    elif rx >= 2:
        score += 10
        reasoning.append("Several ongoing prescriptions")
    elif rx == 1:
        score += 5
        reasoning.append("One ongoing prescription")

    if household.takes_specialty_meds:
        score += 10
        reasoning.append("Takes specialty medications (biologics/injectables)")

    if profile.has_planned_procedures:
        score += 15
        reasoning.append("Has planned surgeries/procedures this year")

    score = min(100, score)
    if score >= 75:
        level: UtilizationLevel = "very-high"
    elif score >= 50:
        level = "high"
    elif score >= 25:
        level = "moderate"
    elif score >= 10:
        level = "low"
    else:
        level = "minimal"

    monthly_rx = rx * PRESCRIPTION_MONTHLY_COST.get(min(max(profile.prescription_tier, 1), 4), 25.0)
    claims = EXPECTED_ANNUAL_CLAIMS[level] + monthly_rx * 12

    if score >= 50 or profile.has_planned_procedures:
        deductible = "low"
    elif score >= 25:
        deductible = "medium"
    else:
        deductible = "high"

    if profile.specialist_visits >= 12 or profile.has_chronic_conditions:
        plan_type = "PPO"
    elif score < 20 and not profile.has_planned_procedures:
        plan_type = "HDHP"
    else:
        plan_type = "HMO"

    return UtilizationScore(
        score=score,
        level=level,
        expected_annual_claims=round(claims, 2),
        recommended_deductible=deductible,
        recommended_plan_type=plan_type,
        recommended_tier=RECOMMENDED_TIER[level],
        reasoning=reasoning,
    )


# ---------------------------------------------------------------------------
# Budget and income
# ---------------------------------------------------------------------------

# Budget answer -> monthly ceiling
BUDGET_CEILINGS: dict[str, float] = {
    "less-500": 500,
    "500-1000": 1_000,
    "1000-2000": 2_000,
    "2000-3500": 3_500,
    "3500-plus": 10_000,
    "not-sure": 10_000,
}
CONCIERGE_COST = (150, 400)

INCOME_RANGE_MIDPOINTS: dict[str, float] = {
    "under-30k": 25_000,
    "30k-50k": 40_000,
    "50k-75k": 62_500,
    "75k-100k": 87_500,
    "100k-150k": 125_000,
    "150k-plus": 175_000,
    "prefer-not-say": 75_000,
}


def effective_income(household: Household) -> float:
    """Exact income when known, else the midpoint of the declared range."""
    if household.annual_income is not None:
        return float(household.annual_income)
    return INCOME_RANGE_MIDPOINTS.get(household.income_range, INCOME_RANGE_MIDPOINTS["prefer-not-say"])


def budget_note(budget: str, estimated_cost: CostRange) -> str | None:
    """A note when the budget cannot cover the estimate, or when the user is unsure."""
    ceiling = BUDGET_CEILINGS.get(budget, BUDGET_CEILINGS["not-sure"])
    if ceiling < estimated_cost.low:
        return (
            "Your budget is lower than estimated costs. Check healthcare.gov for ACA subsidies - "
            "you may qualify for income-based assistance."
        )
    if budget == "not-sure":
        low, high = CONCIERGE_COST
        return (
            f"Consider a concierge medicine add-on (${low}-{high}/month) for enhanced service "
            "and immediate access."
        )
    return None
