"""Side-by-side comparison of two plan offers.

Two plans are scored on weighted metrics and priced under fixed
utilization scenarios (plus the user's own, when a profile is given).
The overall winner is the weighted sum of both.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from compass.domains.insurance.domain_logic.models import (
    Confidence,
    CostScenario,
    PlanOffer,
    ScenarioCost,
    UtilizationProfile,
    Winner,
)

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationAuditLogger

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults when a plan does not publish a cost-sharing value
# ---------------------------------------------------------------------------

DEFAULT_PRIMARY_CARE_COPAY = 30.0
DEFAULT_SPECIALIST_COPAY = 60.0
DEFAULT_GENERIC_DRUG_COPAY = 15.0
DEFAULT_BRAND_DRUG_COPAY = 50.0
DEFAULT_ER_COPAY = 300.0
DEFAULT_COINSURANCE_PERCENT = 20.0
DEFAULT_PROCEDURE_COST = 5000.0

# Major medical event: charges beyond the deductible the member is exposed to
MAJOR_EVENT_EXPOSURE = 10_000.0

# Scoring
SCENARIO_WIN_POINTS = 3
USER_SCENARIO_BONUS = 5
HIGH_CONFIDENCE_MARGIN = 10
MEDIUM_CONFIDENCE_MARGIN = 5

# Key-difference materiality thresholds
PREMIUM_DIFFERENCE_THRESHOLD = 50.0
DEDUCTIBLE_DIFFERENCE_THRESHOLD = 500.0
OOP_DIFFERENCE_THRESHOLD = 1000.0
QUALITY_DIFFERENCE_THRESHOLD = 1.0

USER_SCENARIO_NAME = "Your Expected Usage"
HEALTHY_SCENARIO_NAME = "Healthy Year"
MAJOR_EVENT_SCENARIO_NAME = "Major Medical Event"

MetricCategory = Literal["cost", "coverage", "network", "value"]


@dataclass(frozen=True)
class UsagePattern:
    """Annual service counts for a scenario archetype."""

    name: str
    description: str
    doctor_visits: int
    specialist_visits: int
    prescriptions: int      # fills per year
    er_visits: int
    procedure_cost: float = 0.0


FIXED_USAGE_PATTERNS: tuple[UsagePattern, ...] = (
    UsagePattern(
        HEALTHY_SCENARIO_NAME,
        "2 doctor visits, 3 prescriptions, no major medical events",
        2, 0, 3, 0,
    ),
    UsagePattern(
        "Moderate Usage",
        "6 doctor visits, 2 specialist visits, 12 prescriptions",
        6, 2, 12, 0,
    ),
    UsagePattern(
        "Chronic Condition",
        "12 doctor visits, 6 specialist visits, monthly prescriptions, 1 ER visit",
        12, 6, 36, 1,
    ),
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class ComparisonMetric:
    name: str
    category: MetricCategory
    plan_a_value: str
    plan_b_value: str
    winner: Winner
    importance: int                      # 1-5
    plan_a_raw: float | None = None
    plan_b_raw: float | None = None
    difference: str | None = None


@dataclass
class OverallWinner:
    plan: Winner
    confidence: Confidence
    score_a: int
    score_b: int
    reasoning: str


@dataclass
class PlanRecommendation:
    recommended_plan: Literal["A", "B"]
    reasons: list[str] = field(default_factory=list)
    caveats: list[str] = field(default_factory=list)


@dataclass
class ComparisonResult:
    plan_a: PlanOffer
    plan_b: PlanOffer
    metrics: list[ComparisonMetric]
    scenarios: list[CostScenario]
    overall_winner: OverallWinner
    recommendation: PlanRecommendation
    key_differences: list[str]
    summary: str

    def scenario(self, name: str) -> CostScenario | None:
        for s in self.scenarios:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_currency(amount: float) -> str:
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def _format_difference(value_a: float, value_b: float, suffix: str = "") -> str:
    diff = value_a - value_b
    if diff == 0:
        return "Same"
    direction = "more" if diff > 0 else "less"
    return f"{format_currency(abs(diff))} {direction}{suffix}"


def pick_winner(value_a: float, value_b: float, prefer: Literal["lower", "higher"] = "lower") -> Winner:
    if value_a == value_b:
        return "tie"
    if prefer == "lower":
        return "A" if value_a < value_b else "B"
    return "A" if value_a > value_b else "B"


def _flag_winner(flag_a: bool | None, flag_b: bool | None) -> Winner:
    if bool(flag_a) == bool(flag_b):
        return "tie"
    return "A" if flag_a else "B"


def _yes_no(flag: bool | None) -> str:
    return "Yes" if flag else "No"


def estimate_out_of_pocket(
    plan: PlanOffer,
    doctor_visits: float,
    specialist_visits: float,
    prescriptions: float,
    er_visits: float,
    procedure_cost: float = 0.0,
    prescription_tier: int = 1,
) -> float:
    """Annual out-of-pocket spend for a usage pattern, capped at the plan's OOP max.

    Visits and fills are charged at the plan's copays (or market defaults).
    A procedure is charged the full deductible plus coinsurance on the rest.
    """
    pc_copay = plan.primary_care_copay if plan.primary_care_copay is not None else DEFAULT_PRIMARY_CARE_COPAY
    spec_copay = plan.specialist_copay if plan.specialist_copay is not None else DEFAULT_SPECIALIST_COPAY
    if prescription_tier >= 2:
        rx_copay = plan.brand_drug_copay if plan.brand_drug_copay is not None else DEFAULT_BRAND_DRUG_COPAY
    else:
        rx_copay = plan.generic_drug_copay if plan.generic_drug_copay is not None else DEFAULT_GENERIC_DRUG_COPAY
    er_copay = plan.er_copay if plan.er_copay is not None else DEFAULT_ER_COPAY

    total = (
        doctor_visits * pc_copay
        + specialist_visits * spec_copay
        + prescriptions * rx_copay
        + er_visits * er_copay
    )
    if procedure_cost > 0:
        coinsurance = (
            plan.coinsurance_percent if plan.coinsurance_percent is not None
            else DEFAULT_COINSURANCE_PERCENT
        ) / 100
        after_deductible = max(0.0, procedure_cost - plan.deductible)
        total += plan.deductible + after_deductible * coinsurance

    return round(min(total, plan.out_of_pocket_max), 2)


# ---------------------------------------------------------------------------
# PlanComparisonEngine
# ---------------------------------------------------------------------------

class PlanComparisonEngine:
    """Compares two plans on metrics, scenarios and user preferences.

    Usage::

        engine = PlanComparisonEngine()
        result = engine.compare(plan_a, plan_b, profile)
        result.overall_winner.plan        # 'A' | 'B' | 'tie'
        engine.quick_comparison(plan_a, plan_b)["better_protection"]
    """

    def __init__(self, *, audit_logger: CalculationAuditLogger | None = None) -> None:
        self._audit = audit_logger

    # ---------------------------------------------------------------
    # Public operations
    # ---------------------------------------------------------------

    def compare(
        self,
        plan_a: PlanOffer,
        plan_b: PlanOffer,
        profile: UtilizationProfile | None = None,
    ) -> ComparisonResult:
        if self._audit is None:
            return self._compare(plan_a, plan_b, profile)
        return self._audit.log_calculation(
            "plan-comparison",
            {"plan_a": plan_a, "plan_b": plan_b, "profile": profile},
            lambda data: self._compare(data["plan_a"], data["plan_b"], data["profile"]),
        )

    def quick_comparison(self, plan_a: PlanOffer, plan_b: PlanOffer) -> dict[str, Any]:
        """Lightweight flags: cheaper monthly, cheaper healthy/sick year, better protection."""
        if self._audit is None:
            return self._quick_comparison(plan_a, plan_b)
        return self._audit.log_calculation(
            "quick-comparison",
            {"plan_a": plan_a, "plan_b": plan_b},
            lambda data: self._quick_comparison(data["plan_a"], data["plan_b"]),
        )

    # ---------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------

    def _compare(
        self,
        plan_a: PlanOffer,
        plan_b: PlanOffer,
        profile: UtilizationProfile | None,
    ) -> ComparisonResult:
        metrics = self.build_metrics(plan_a, plan_b)
        scenarios = self.build_scenarios(plan_a, plan_b, profile)
        overall = self._overall_winner(metrics, scenarios)
        recommendation = self._recommendation(plan_a, plan_b, scenarios, profile)
        differences = self.key_differences(plan_a, plan_b)
        summary = self._summary(plan_a, plan_b, overall, recommendation)
        logger.debug(
            "Compared %s vs %s: winner=%s (%d-%d)",
            plan_a.id, plan_b.id, overall.plan, overall.score_a, overall.score_b,
        )
        return ComparisonResult(
            plan_a=plan_a,
            plan_b=plan_b,
            metrics=metrics,
            scenarios=scenarios,
            overall_winner=overall,
            recommendation=recommendation,
            key_differences=differences,
            summary=summary,
        )

    def _quick_comparison(self, plan_a: PlanOffer, plan_b: PlanOffer) -> dict[str, Any]:
        result = self._compare(plan_a, plan_b, None)
        healthy = result.scenario(HEALTHY_SCENARIO_NAME)
        sick = result.scenario(MAJOR_EVENT_SCENARIO_NAME)
        return {
            "cheaper_monthly": pick_winner(plan_a.monthly_premium, plan_b.monthly_premium),
            "cheaper_annually_healthy": healthy.winner if healthy else "tie",
            "cheaper_annually_sick": sick.winner if sick else "tie",
            "better_protection": pick_winner(plan_a.out_of_pocket_max, plan_b.out_of_pocket_max),
            "summary": result.summary,
        }

    def build_metrics(self, plan_a: PlanOffer, plan_b: PlanOffer) -> list[ComparisonMetric]:
        metrics: list[ComparisonMetric] = []

        def money_metric(name, a, b, importance, category="cost", suffix="", winner=None):
            metrics.append(ComparisonMetric(
                name=name,
                category=category,
                plan_a_value=format_currency(a),
                plan_b_value=format_currency(b),
                plan_a_raw=a,
                plan_b_raw=b,
                winner=winner or pick_winner(a, b, "lower"),
                difference=_format_difference(a, b, suffix),
                importance=importance,
            ))

        money_metric("Monthly Premium", plan_a.monthly_premium, plan_b.monthly_premium, 5, suffix="/month")
        if (plan_a.monthly_premium_after_subsidy is not None
                or plan_b.monthly_premium_after_subsidy is not None):
            money_metric(
                "Premium After Subsidy",
                plan_a.effective_monthly_premium,
                plan_b.effective_monthly_premium,
                5,
                suffix="/month",
            )
        money_metric(
            "Annual Premium",
            plan_a.monthly_premium * 12,
            plan_b.monthly_premium * 12,
            4,
            suffix="/year",
        )
        money_metric("Deductible", plan_a.deductible, plan_b.deductible, 4)
        money_metric("Out-of-Pocket Maximum", plan_a.out_of_pocket_max, plan_b.out_of_pocket_max, 4)

        # Optional cost sharing: a plan that does not publish a value is treated as $0
        for name, attr in (
            ("Primary Care Copay", "primary_care_copay"),
            ("Specialist Copay", "specialist_copay"),
            ("Generic Drug Copay", "generic_drug_copay"),
        ):
            a, b = getattr(plan_a, attr), getattr(plan_b, attr)
            if a is None and b is None:
                continue
            metrics.append(ComparisonMetric(
                name=name,
                category="coverage",
                plan_a_value=format_currency(a) if a is not None else "N/A",
                plan_b_value=format_currency(b) if b is not None else "N/A",
                plan_a_raw=a,
                plan_b_raw=b,
                winner=pick_winner(a or 0.0, b or 0.0, "lower"),
                importance=3,
            ))

        if plan_a.coinsurance_percent is not None or plan_b.coinsurance_percent is not None:
            a, b = plan_a.coinsurance_percent, plan_b.coinsurance_percent
            metrics.append(ComparisonMetric(
                name="Coinsurance",
                category="coverage",
                plan_a_value=f"{a:g}%" if a is not None else "N/A",
                plan_b_value=f"{b:g}%" if b is not None else "N/A",
                plan_a_raw=a,
                plan_b_raw=b,
                winner=pick_winner(a or 0.0, b or 0.0, "lower"),
                importance=3,
            ))

        # Network type is informational only
        metrics.append(ComparisonMetric(
            name="Plan Type",
            category="network",
            plan_a_value=plan_a.network_type,
            plan_b_value=plan_b.network_type,
            winner="tie",
            importance=3,
        ))

        if plan_a.has_national_network is not None or plan_b.has_national_network is not None:
            metrics.append(ComparisonMetric(
                name="National Network",
                category="network",
                plan_a_value=_yes_no(plan_a.has_national_network),
                plan_b_value=_yes_no(plan_b.has_national_network),
                winner=_flag_winner(plan_a.has_national_network, plan_b.has_national_network),
                importance=2,
            ))

        if plan_a.quality_rating is not None or plan_b.quality_rating is not None:
            a, b = plan_a.quality_rating, plan_b.quality_rating
            metrics.append(ComparisonMetric(
                name="Quality Rating",
                category="value",
                plan_a_value=f"{a:g} stars" if a is not None else "N/A",
                plan_b_value=f"{b:g} stars" if b is not None else "N/A",
                plan_a_raw=a,
                plan_b_raw=b,
                winner=pick_winner(a or 0.0, b or 0.0, "higher"),
                importance=3,
            ))

        metrics.append(ComparisonMetric(
            name="HSA Eligible",
            category="value",
            plan_a_value=_yes_no(plan_a.hsa_eligible),
            plan_b_value=_yes_no(plan_b.hsa_eligible),
            winner=_flag_winner(plan_a.hsa_eligible, plan_b.hsa_eligible),
            importance=3,
        ))
        return metrics

    def build_scenarios(
        self,
        plan_a: PlanOffer,
        plan_b: PlanOffer,
        profile: UtilizationProfile | None = None,
    ) -> list[CostScenario]:
        premium_a = round(plan_a.effective_monthly_premium * 12, 2)
        premium_b = round(plan_b.effective_monthly_premium * 12, 2)

        def scenario(name: str, description: str, oop_a: float, oop_b: float) -> CostScenario:
            total_a = round(premium_a + oop_a, 2)
            total_b = round(premium_b + oop_b, 2)
            return CostScenario(
                name=name,
                description=description,
                plan_a=ScenarioCost(premium_a, oop_a, total_a),
                plan_b=ScenarioCost(premium_b, oop_b, total_b),
                difference=round(total_a - total_b, 2),
                winner=pick_winner(total_a, total_b, "lower"),
            )

        scenarios = [
            scenario(
                p.name,
                p.description,
                estimate_out_of_pocket(plan_a, p.doctor_visits, p.specialist_visits, p.prescriptions, p.er_visits),
                estimate_out_of_pocket(plan_b, p.doctor_visits, p.specialist_visits, p.prescriptions, p.er_visits),
            )
            for p in FIXED_USAGE_PATTERNS
        ]

        scenarios.append(scenario(
            MAJOR_EVENT_SCENARIO_NAME,
            "Surgery, hospitalization, or serious illness ($50,000+ in charges)",
            round(min(plan_a.out_of_pocket_max, plan_a.deductible + MAJOR_EVENT_EXPOSURE), 2),
            round(min(plan_b.out_of_pocket_max, plan_b.deductible + MAJOR_EVENT_EXPOSURE), 2),
        ))

        if profile is not None:
            procedure = 0.0
            if profile.has_planned_procedures:
                procedure = profile.planned_procedure_cost or DEFAULT_PROCEDURE_COST
            usage = (
                profile.primary_care_visits,
                profile.specialist_visits,
                profile.prescriptions_per_month * 12,
                profile.er_visits,
                procedure,
                profile.prescription_tier,
            )
            scenarios.append(scenario(
                USER_SCENARIO_NAME,
                "Based on your health profile and expected needs",
                estimate_out_of_pocket(plan_a, *usage),
                estimate_out_of_pocket(plan_b, *usage),
            ))
        return scenarios

    @staticmethod
    def _overall_winner(
        metrics: list[ComparisonMetric],
        scenarios: list[CostScenario],
    ) -> OverallWinner:
        score = {"A": 0, "B": 0}
        for m in metrics:
            if m.winner != "tie":
                score[m.winner] += m.importance
        for s in scenarios:
            if s.winner != "tie":
                score[s.winner] += SCENARIO_WIN_POINTS
                if s.name == USER_SCENARIO_NAME:
                    score[s.winner] += USER_SCENARIO_BONUS

        margin = abs(score["A"] - score["B"])
        if margin > HIGH_CONFIDENCE_MARGIN:
            confidence: Confidence = "high"
        elif margin > MEDIUM_CONFIDENCE_MARGIN:
            confidence = "medium"
        else:
            confidence = "low"

        if score["A"] == score["B"]:
            return OverallWinner(
                plan="tie",
                confidence="low",
                score_a=score["A"],
                score_b=score["B"],
                reasoning="Both plans are evenly matched across comparison metrics and cost scenarios.",
            )

        plan: Winner = "A" if score["A"] > score["B"] else "B"
        metric_wins = sum(1 for m in metrics if m.winner == plan)
        scenario_wins = sum(1 for s in scenarios if s.winner == plan)
        return OverallWinner(
            plan=plan,
            confidence=confidence,
            score_a=score["A"],
            score_b=score["B"],
            reasoning=(
                f"Plan {plan} wins {metric_wins} of {len(metrics)} comparison metrics "
                f"and {scenario_wins} of {len(scenarios)} cost scenarios."
            ),
        )

    @staticmethod
    def _recommendation(
        plan_a: PlanOffer,
        plan_b: PlanOffer,
        scenarios: list[CostScenario],
        profile: UtilizationProfile | None,
    ) -> PlanRecommendation:
        reasons: list[str] = []
        caveats: list[str] = []

        # Expected usage if known, otherwise the moderate archetype
        reference = next((s for s in scenarios if s.name == USER_SCENARIO_NAME), scenarios[1])
        cheaper = reference.winner
        lower_premium = "A" if plan_a.monthly_premium < plan_b.monthly_premium else "B"
        lower_oop = "A" if plan_a.out_of_pocket_max < plan_b.out_of_pocket_max else "B"

        if cheaper != "tie":
            cheaper_plan = plan_a if cheaper == "A" else plan_b
            reasons.append(
                f"{cheaper_plan.name} costs {format_currency(abs(reference.difference))} less "
                f"annually for your expected healthcare usage."
            )

        if profile is not None:
            if profile.prioritizes_lower_premium and lower_premium != cheaper:
                caveats.append(
                    "While you prefer lower premiums, the higher-premium plan may cost less "
                    "overall given your healthcare needs."
                )
            if profile.has_chronic_conditions:
                protected = plan_a if lower_oop == "A" else plan_b
                reasons.append(
                    f"With a chronic condition, the lower out-of-pocket maximum of "
                    f"{protected.name} provides better protection."
                )
            if profile.risk_tolerance == "low":
                reasons.append(
                    "Given your low risk tolerance, consider the plan with lower deductible "
                    "and out-of-pocket maximum."
                )
            if profile.needs_specific_providers and plan_a.network_type != plan_b.network_type:
                caveats.append(
                    "You need specific providers: confirm they are in-network for both "
                    f"the {plan_a.network_type} and {plan_b.network_type} plan."
                )

        if plan_a.hsa_eligible and not plan_b.hsa_eligible:
            reasons.append(f"{plan_a.name} is HSA-eligible, offering tax advantages for healthcare savings.")
        elif plan_b.hsa_eligible and not plan_a.hsa_eligible:
            reasons.append(f"{plan_b.name} is HSA-eligible, offering tax advantages for healthcare savings.")

        if not reasons:
            reasons.append("Based on overall cost analysis, this plan offers better value.")

        return PlanRecommendation(
            recommended_plan=cheaper if cheaper != "tie" else lower_oop,
            reasons=reasons,
            caveats=caveats,
        )

    @staticmethod
    def key_differences(plan_a: PlanOffer, plan_b: PlanOffer) -> list[str]:
        """Material differences only, as plain sentences."""
        differences: list[str] = []

        premium_diff = abs(plan_a.monthly_premium - plan_b.monthly_premium)
        if premium_diff > PREMIUM_DIFFERENCE_THRESHOLD:
            cheaper = plan_a if plan_a.monthly_premium < plan_b.monthly_premium else plan_b
            differences.append(f"{cheaper.name} has a {format_currency(premium_diff)} lower monthly premium.")

        deductible_diff = abs(plan_a.deductible - plan_b.deductible)
        if deductible_diff > DEDUCTIBLE_DIFFERENCE_THRESHOLD:
            lower = plan_a if plan_a.deductible < plan_b.deductible else plan_b
            differences.append(f"{lower.name} has a {format_currency(deductible_diff)} lower deductible.")

        oop_diff = abs(plan_a.out_of_pocket_max - plan_b.out_of_pocket_max)
        if oop_diff > OOP_DIFFERENCE_THRESHOLD:
            lower = plan_a if plan_a.out_of_pocket_max < plan_b.out_of_pocket_max else plan_b
            differences.append(
                f"{lower.name} has a {format_currency(oop_diff)} lower out-of-pocket maximum."
            )

        if plan_a.network_type != plan_b.network_type:
            differences.append(
                f"{plan_a.name} is a {plan_a.network_type} plan while "
                f"{plan_b.name} is a {plan_b.network_type} plan."
            )

        if plan_a.quality_rating and plan_b.quality_rating:
            if abs(plan_a.quality_rating - plan_b.quality_rating) >= QUALITY_DIFFERENCE_THRESHOLD:
                higher, other = (
                    (plan_a, plan_b) if plan_a.quality_rating > plan_b.quality_rating else (plan_b, plan_a)
                )
                differences.append(
                    f"{higher.name} has a higher quality rating "
                    f"({higher.quality_rating:g} vs {other.quality_rating:g} stars)."
                )
        return differences

    @staticmethod
    def _summary(
        plan_a: PlanOffer,
        plan_b: PlanOffer,
        overall: OverallWinner,
        recommendation: PlanRecommendation,
    ) -> str:
        if overall.plan == "tie":
            return (
                f"Both {plan_a.name} and {plan_b.name} are closely matched. Your choice should "
                "depend on your specific healthcare needs and preferences."
            )
        winner, loser = (plan_a, plan_b) if overall.plan == "A" else (plan_b, plan_a)
        if winner.monthly_premium <= loser.monthly_premium:
            alternative_case = "you want the stronger protection against a costly year"
        else:
            alternative_case = "you prioritize lower monthly costs"
        return (
            f"Based on our analysis, {winner.name} appears to be the better choice with "
            f"{overall.confidence} confidence. {recommendation.reasons[0]} However, "
            f"{loser.name} may be preferable if {alternative_case}."
        )
