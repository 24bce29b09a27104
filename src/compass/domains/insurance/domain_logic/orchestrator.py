"""Recommendation orchestrator: routes a household to a coverage recommendation.

The orchestrator owns one :class:`CalculationAuditLogger` and injects it into
every analyzer it builds, so a single log covers a whole session.

Routing:

* every adult 65+ and no children: Original Medicare + Medigap
* some adults 65+: Medicare for seniors, rated marketplace plan for the rest
* everyone under 65: rated marketplace plan, tier picked from utilization
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any

from compass.core.audit.logger import CalculationAuditLogger
from compass.core.audit.storage import InMemoryAuditStorage, SQLiteAuditStorage
from compass.domains.insurance.domain_logic.age_rating import MEDICARE_AGE
from compass.domains.insurance.domain_logic.cobra_analyzer import (
    DEFAULT_COBRA_COST_MARKUP,
    COBRAAnalysis,
    COBRAAnalyzer,
)
from compass.domains.insurance.domain_logic.coverage_scoring import (
    SCORE_ADJACENT_STATES,
    SCORE_MEDICARE,
    SCORE_MIXED_HOUSEHOLD,
    UtilizationScore,
    budget_note,
    coverage_score,
    effective_income,
    score_utilization,
)
from compass.domains.insurance.domain_logic.current_insurance import compare_current_insurance
from compass.domains.insurance.domain_logic.employer_plan import compare_employer_to_marketplace
from compass.domains.insurance.domain_logic.household import HouseholdAggregator
from compass.domains.insurance.domain_logic.hsa_analyzer import (
    DEFAULT_ANNUAL_RETURN,
    DEFAULT_PLAN_YEAR,
    DEFAULT_STATE_TAX_RATE,
    HSAAnalysis,
    HSAAnalyzer,
)
from compass.domains.insurance.domain_logic.medicare_advantage import (
    MEDICARE_ADVANTAGE_COST_HIGH,
    MEDICARE_ADVANTAGE_COST_LOW,
    analyze_medicare_advantage_fit,
)
from compass.domains.insurance.domain_logic.models import (
    AlternativeOption,
    CostRange,
    CurrentInsurance,
    Household,
    PlanOffer,
    Recommendation,
    UtilizationProfile,
)
from compass.domains.insurance.domain_logic.plan_comparison import (
    ComparisonResult,
    PlanComparisonEngine,
)
from compass.domains.insurance.domain_logic.premium_calculator import PremiumCalculator
from compass.domains.insurance.domain_logic.rating_tables import (
    DEFAULT_RATING_TABLES,
    PRICED_TIERS,
    RatingTables,
    load_rating_tables,
)
from compass.domains.insurance.domain_logic.scenario_comparator import (
    Scenario,
    ScenarioComparator,
    ScenarioComparison,
)

if TYPE_CHECKING:
    from compass.core.config.settings import Settings

logger = logging.getLogger(__name__)

# Monthly per-person ranges for coverage the rating tables do not price
MEDICARE_PER_PERSON = (300.0, 500.0)        # Part B + Medigap + Part D
MEDIGAP_PLAN_N_PER_PERSON = (250.0, 400.0)
REGIONAL_PPO_PER_PERSON = (400.0, 650.0)

# Rated premiums are shown as a band around the computed figure
ESTIMATE_SPREAD = 0.10

# States without a wage income tax; HSA state savings are zero there
NO_INCOME_TAX_STATES = frozenset({"AK", "FL", "NV", "NH", "SD", "TN", "TX", "WA", "WY"})

HDHP_PLAN_TYPE = "HDHP + HSA"


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def _states_text(states: list[str]) -> str:
    if len(states) > 2:
        return f"all {len(states)} of your states"
    return ", ".join(states) if states else "your state"


class RecommendationOrchestrator:
    """Top-level entry point for recommendations and every analyzer.

    Usage::

        orchestrator = RecommendationOrchestrator()
        recommendation = orchestrator.recommend(household)
        orchestrator.compare_plans(plan_a, plan_b)
        orchestrator.audit.get_stats()
    """

    def __init__(
        self,
        tables: RatingTables = DEFAULT_RATING_TABLES,
        *,
        audit_logger: CalculationAuditLogger | None = None,
        cobra_cost_markup: float = DEFAULT_COBRA_COST_MARKUP,
        hsa_annual_return: float = DEFAULT_ANNUAL_RETURN,
        hsa_plan_year: int = DEFAULT_PLAN_YEAR,
    ) -> None:
        self.audit = audit_logger or CalculationAuditLogger()
        self.calculator = PremiumCalculator(tables, audit_logger=self.audit)
        self.households = HouseholdAggregator(self.calculator, audit_logger=self.audit)
        self.plans = PlanComparisonEngine(audit_logger=self.audit)
        self.cobra = COBRAAnalyzer(cost_markup=cobra_cost_markup, audit_logger=self.audit)
        self.hsa = HSAAnalyzer(
            annual_return=hsa_annual_return, plan_year=hsa_plan_year, audit_logger=self.audit
        )
        self.scenarios = ScenarioComparator(self.recommend, audit_logger=self.audit)

    @classmethod
    def from_settings(cls, settings: Settings) -> RecommendationOrchestrator:
        """Build from configuration: rating-table file, audit storage and assumptions."""
        tables = DEFAULT_RATING_TABLES
        if settings.rating_tables_path:
            tables = load_rating_tables(settings.rating_tables_path)

        if settings.audit_db_path:
            storage = SQLiteAuditStorage(settings.audit_db_path)
            storage.initialize()
            logger.info(
                "Audit log persisted to %s (schema v%d)",
                settings.audit_db_path, storage.get_schema_version(),
            )
        else:
            storage = InMemoryAuditStorage(max_entries=settings.audit_max_entries)
            logger.info("Audit log kept in memory only")

        return cls(
            tables,
            audit_logger=CalculationAuditLogger(storage, version=settings.audit_version),
            cobra_cost_markup=settings.cobra_cost_markup,
            hsa_annual_return=settings.hsa_annual_return,
            hsa_plan_year=settings.hsa_plan_year,
        )

    # ---------------------------------------------------------------
    # Recommendation
    # ---------------------------------------------------------------

    def recommend(
        self,
        household: Household,
        profile: UtilizationProfile | None = None,
        current_insurance: CurrentInsurance | None = None,
    ) -> Recommendation | None:
        """Recommendation for *household*, or None when required fields are missing.

        *profile* and *current_insurance* replace the household's own values
        when given.
        """
        changes: dict[str, Any] = {}
        if profile is not None:
            changes["utilization"] = profile
        if current_insurance is not None:
            changes["current_insurance"] = current_insurance
        if changes:
            household = dataclasses.replace(household, **changes)

        if not household.is_complete():
            logger.info("Household is incomplete; no recommendation produced")
            return None

        return self.audit.log_calculation(
            "recommendation", {"household": household}, lambda data: self._recommend(data["household"])
        )

    def _recommend(self, household: Household) -> Recommendation:
        states = household.states
        adult_ages = list(household.adult_ages)
        medicare_count = sum(1 for age in adult_ages if age >= MEDICARE_AGE)
        utilization = score_utilization(household)

        if medicare_count == len(adult_ages) and not household.child_ages:
            logger.info("Routing household to Medicare (%d members)", medicare_count)
            recommendation = self._medicare(household, medicare_count, utilization)
        elif medicare_count:
            logger.info("Routing mixed household: %d on Medicare", medicare_count)
            recommendation = self._mixed(household, medicare_count, utilization)
        else:
            logger.info("Routing household to marketplace coverage across %s", ", ".join(states))
            recommendation = self._marketplace(household, utilization)

        note = budget_note(household.budget, recommendation.estimated_monthly_cost)
        if note:
            recommendation.action_items.append(note)

        self._attach_analyses(household, recommendation, medicare_count)
        return recommendation

    # --- routes ------------------------------------------------------

    def _medicare(
        self, household: Household, members: int, utilization: UtilizationScore
    ) -> Recommendation:
        states = household.states
        cost = CostRange(low=MEDICARE_PER_PERSON[0] * members, high=MEDICARE_PER_PERSON[1] * members)

        actions = [
            "Shop Medigap Plan G or Plan N quotes for your primary ZIP code",
            "Enroll during your Medigap Open Enrollment Period for guaranteed issue",
        ]
        if utilization.is_high or household.utilization.prescriptions_per_month > 0:
            actions.append("IMPORTANT: Compare Part D drug plans using your exact prescription list")
        else:
            actions.append("Optional: consider a low-cost Part D plan to avoid late-enrollment penalties")
        actions.append(f"Confirm your doctors accept Medicare in {_states_text(states)}")
        actions.extend(self._health_actions(household, utilization))

        reasoning = (
            f"Medicare works everywhere with any doctor across {_states_text(states)}. "
            "Extra Coverage (Medigap Plan G or N) covers what Medicare doesn't and works in any state."
        )
        reasoning += self._health_reasoning(household, utilization)

        alternatives = [
            AlternativeOption(
                name="Medicare Advantage",
                monthly_cost=CostRange(
                    low=MEDICARE_ADVANTAGE_COST_LOW, high=MEDICARE_ADVANTAGE_COST_HIGH * members
                ),
                pros=[
                    "Lower monthly premiums (sometimes $0)",
                    "Often includes dental, vision, and prescription coverage",
                    "Out-of-pocket maximum protects you",
                ],
                cons=[
                    "Limited to specific networks in each state",
                    "Requires referrals for specialists",
                    "Coverage may not work seamlessly between states",
                ],
            ),
            AlternativeOption(
                name="Medicare + Medicare Supplement Plan N",
                monthly_cost=CostRange(
                    low=MEDIGAP_PLAN_N_PER_PERSON[0] * members,
                    high=MEDIGAP_PLAN_N_PER_PERSON[1] * members,
                ),
                pros=[
                    "Slightly lower premiums than Plan G",
                    "Works nationwide with any Medicare provider",
                    "No network restrictions",
                ],
                cons=["Small copays for doctor and ER visits", "Must pay Part B excess charges (rare)"],
            ),
        ]
        return Recommendation(
            recommended_insurance="Basic Medicare + Extra Coverage",
            plan_type="Original Medicare + Medigap",
            metal_tier="n/a",
            household_breakdown=f"{members} Medicare-eligible {'adult' if members == 1 else 'adults'}",
            coverage_gap_score=SCORE_MEDICARE,
            estimated_monthly_cost=cost,
            reasoning=reasoning,
            action_items=actions,
            alternative_options=self._ranked(alternatives),
        )

    def _mixed(
        self, household: Household, medicare_count: int, utilization: UtilizationScore
    ) -> Recommendation:
        states = household.states
        under_65 = [
            (age, flag) for age, flag in self._adults_with_flags(household) if age < MEDICARE_AGE
        ]
        tier = self._tier(household, utilization)
        rated = self._rated_range(
            [a for a, _ in under_65], household.child_ages, states, tier, [f for _, f in under_65]
        )
        cost = CostRange(
            low=round(MEDICARE_PER_PERSON[0] * medicare_count + rated.low, 2),
            high=round(MEDICARE_PER_PERSON[1] * medicare_count + rated.high, 2),
        )
        children = len(household.child_ages)

        actions = [f"Medicare + Medigap for {medicare_count} member(s) age 65+"]
        ppo = f"National PPO ({tier.title()}) for {len(under_65)} under-65 adult(s)"
        if utilization.is_high:
            ppo += " - PPO offers better specialist access"
        actions.append(ppo)
        if children:
            actions.append(f"Add {_plural(children, 'child', 'children')} to the PPO family plan")
        actions.append("Consider family plan vs individual plans - compare total costs")
        actions.append(f"Verify PPO network coverage in {_states_text(states)}")
        actions.extend(self._health_actions(household, utilization))

        reasoning = (
            "Medicare with Extra Coverage for seniors works everywhere. A nationwide flexible plan "
            f"for younger members gives access to doctors in {_states_text(states)}."
        )
        reasoning += self._health_reasoning(household, utilization)

        silver = self._rated_range(
            [a for a, _ in under_65], household.child_ages, states, "silver", [f for _, f in under_65]
        )
        alternatives = [
            AlternativeOption(
                name="Medicare Advantage for seniors + PPO for others",
                monthly_cost=CostRange(
                    low=round(MEDICARE_ADVANTAGE_COST_LOW * medicare_count + rated.low, 2),
                    high=round(MEDICARE_ADVANTAGE_COST_HIGH * medicare_count + rated.high, 2),
                ),
                pros=[
                    "Lower costs for Medicare-eligible members",
                    "Single PPO plan covers all non-Medicare members",
                ],
                cons=[
                    "Medicare Advantage has network limitations",
                    "Complex coordination between Medicare and private insurance",
                ],
            ),
            AlternativeOption(
                name="ACA Marketplace plans for all non-Medicare members",
                monthly_cost=silver,
                pros=[
                    "Income-based subsidies may significantly reduce costs",
                    "Guaranteed coverage regardless of health conditions",
                ],
                cons=["Network coverage varies by state", "Limited to specific enrollment periods"],
            ),
        ]
        return Recommendation(
            recommended_insurance=(
                "Medicare + Extra Coverage for seniors, Nationwide Flexible Plan for others"
            ),
            plan_type="Medicare + Medigap / PPO",
            metal_tier=tier,
            household_breakdown=(
                f"{medicare_count} Medicare-eligible, {len(under_65)} under-65 adult(s), "
                f"{_plural(children, 'child', 'children')}"
            ),
            coverage_gap_score=SCORE_MIXED_HOUSEHOLD,
            estimated_monthly_cost=cost,
            reasoning=reasoning,
            action_items=actions,
            alternative_options=self._ranked(alternatives),
        )

    def _marketplace(self, household: Household, utilization: UtilizationScore) -> Recommendation:
        states = household.states
        adults = len(household.adult_ages)
        children = len(household.child_ages)
        tier = self._tier(household, utilization)
        high_use = self._is_high_utilization(household, utilization)
        suffix = " (Lower Deductible)" if high_use else ""

        if adults + children == 1:
            plan = "Nationwide Flexible Plan" + suffix
            breakdown = "1 adult"
            reasoning = f"A flexible plan lets you see any doctor in {_states_text(states)} without needing permission."
        elif adults == 2 and children == 0:
            plan = "Nationwide Flexible Plan for Couples" + suffix
            breakdown = "2 adults"
            reasoning = f"A couples plan gives complete coverage for both of you in {_states_text(states)}."
        elif children:
            plan = "Nationwide Flexible Family Plan" + suffix
            breakdown = f"{_plural(adults, 'adult', 'adults')}, {_plural(children, 'child', 'children')}"
            reasoning = (
                "A family plan covers everyone in your household with access to doctors in "
                f"{_states_text(states)}."
            )
        else:
            plan = f"Nationwide Flexible Plan for {adults} adults"
            breakdown = f"{adults} adults"
            reasoning = "Flexible plans for each adult give complete multi-state coverage."
        reasoning += self._health_reasoning(household, utilization)

        flags = list(household.adults_use_tobacco)
        cost = self._rated_range(household.adult_ages, household.child_ages, states, tier, flags)

        rx = household.utilization.prescriptions_per_month
        if not high_use and rx == 0:
            plan_type = HDHP_PLAN_TYPE
        elif len(states) > 1 or utilization.recommended_plan_type == "HDHP":
            plan_type = "PPO"
        else:
            plan_type = utilization.recommended_plan_type

        actions = ["Your Healthcare Usage Profile:"]
        actions.extend(f"-> {reason}" for reason in utilization.reasoning)
        actions.append(f"-> Utilization level: {utilization.level}")
        actions.append(f"-> Estimated annual medical spending: ${utilization.expected_annual_claims:,.0f}")
        actions.append(f"{tier.title()} plans match your healthcare needs")
        actions.append({
            "low": "Look for lower deductibles ($0-$2,000) to minimize out-of-pocket costs",
            "medium": "Medium deductibles ($2,000-$5,000) offer good balance",
            "high": "High deductibles ($5,000+) with HSA can save on premiums",
        }[utilization.recommended_deductible])
        actions.append({
            "PPO": "PPO plans recommended for specialist access without referrals",
            "HDHP": "HDHP + HSA recommended for tax savings and lower premiums",
            "HMO": "HMO plans offer good value with coordinated care",
        }[utilization.recommended_plan_type])
        actions.append(f"Check provider directories for {_states_text(states)}")
        actions.extend(self._health_actions(household, utilization))
        actions.extend(self._priority_actions(household.financial_priority))

        score = coverage_score(states)
        return Recommendation(
            recommended_insurance=plan,
            plan_type=plan_type,
            metal_tier=tier,
            household_breakdown=breakdown,
            coverage_gap_score=score,
            estimated_monthly_cost=cost,
            reasoning=reasoning,
            action_items=actions,
            alternative_options=self._marketplace_alternatives(household, states, score),
        )

    def _marketplace_alternatives(
        self, household: Household, states: list[str], score: int
    ) -> list[AlternativeOption]:
        flags = list(household.adults_use_tobacco)
        members = household.size
        options: list[AlternativeOption] = []
        if score == SCORE_ADJACENT_STATES and len(states) == 2:
            options.append(AlternativeOption(
                name="Regional PPO Plan",
                monthly_cost=CostRange(
                    low=REGIONAL_PPO_PER_PERSON[0] * members, high=REGIONAL_PPO_PER_PERSON[1] * members
                ),
                pros=[
                    "Lower premiums than national plans",
                    f"Good network coverage in {', '.join(states)}",
                    "Still allows out-of-network care at higher cost",
                ],
                cons=[
                    "Smaller provider network than national plans",
                    "May have higher costs if you travel outside the region",
                ],
            ))
        options.append(AlternativeOption(
            name="ACA Marketplace Silver Plans",
            monthly_cost=self._rated_range(household.adult_ages, household.child_ages, states, "silver", flags),
            pros=[
                "Income-based subsidies can reduce costs significantly",
                "Guaranteed coverage regardless of pre-existing conditions",
                "Essential health benefits required",
            ],
            cons=[
                "Network limited to specific state",
                "Can only enroll during open enrollment unless you have a qualifying event",
            ],
        ))
        options.append(AlternativeOption(
            name="High-Deductible Health Plan (HDHP) with HSA",
            monthly_cost=self._rated_range(household.adult_ages, household.child_ages, states, "bronze", flags),
            pros=[
                "Significantly lower monthly premiums",
                "HSA contributions are tax-deductible",
                "HSA funds roll over year to year and grow tax-free",
            ],
            cons=[
                "You pay full cost of care until deductible is met",
                "Not ideal if you have chronic conditions or need frequent care",
            ],
        ))
        return self._ranked(options)

    # --- attachments -------------------------------------------------

    def _attach_analyses(
        self, household: Household, recommendation: Recommendation, medicare_count: int
    ) -> None:
        if medicare_count:
            recommendation.medicare_advantage_analysis = analyze_medicare_advantage_fit(
                household, medicare_count
            ).to_dict()

        current = household.current_insurance
        if current is not None and current.months_since_job_loss is not None:
            profile = household.utilization
            recommendation.cobra_analysis = self.cobra.analyze(
                current.monthly_cost,
                current.months_since_job_loss,
                profile.has_chronic_conditions or profile.has_planned_procedures
                or household.takes_specialty_meds,
                recommendation.estimated_monthly_cost,
            ).to_dict()

        if "HDHP" in recommendation.plan_type:
            primary = household.primary_residence
            state = primary.state.strip().upper() if primary else ""
            state_rate = 0.0 if state in NO_INCOME_TAX_STATES else DEFAULT_STATE_TAX_RATE
            recommendation.hsa_analysis = self.hsa.calculate_benefits(
                household.size, max(household.adult_ages), effective_income(household), state_rate
            ).to_dict()

        if household.has_employer_insurance and medicare_count < len(household.adult_ages):
            employer = compare_employer_to_marketplace(
                household.employer_contribution,
                effective_income(household),
                household.size,
                recommendation.estimated_monthly_cost,
            )
            recommendation.employer_plan_analysis = employer.to_dict()
            if "keep" in employer.recommendation.lower():
                recommendation.action_items[:0] = [employer.recommendation, *employer.action_items]
            else:
                recommendation.action_items.extend(employer.action_items)

        if current is not None and current.carrier:
            recommendation.current_insurance_comparison = compare_current_insurance(
                current,
                recommendation.recommended_insurance,
                recommendation.estimated_monthly_cost,
                household.states,
            ).to_dict()

    # --- helpers -----------------------------------------------------

    @staticmethod
    def _adults_with_flags(household: Household) -> list[tuple[Any, bool]]:
        flags = list(household.adults_use_tobacco)
        return [
            (age, bool(flags[i]) if i < len(flags) else False)
            for i, age in enumerate(household.adult_ages)
        ]

    @staticmethod
    def _is_high_utilization(household: Household, utilization: UtilizationScore) -> bool:
        profile = household.utilization
        return utilization.is_high or profile.has_chronic_conditions or profile.prescriptions_per_month >= 4

    @staticmethod
    def _tier(household: Household, utilization: UtilizationScore) -> str:
        preferred = (household.preferred_tier or "").strip().lower()
        return preferred if preferred in PRICED_TIERS else utilization.recommended_tier

    def _rated_range(
        self,
        adult_ages: list,
        child_ages: list,
        states: list[str],
        tier: str,
        tobacco_flags: list[bool],
    ) -> CostRange:
        """Household premium across residence states, widened by the estimate spread."""
        if not adult_ages and not child_ages:
            return CostRange(low=0.0, high=0.0)
        premiums = [
            self.households.premium_range(adult_ages, child_ages, state, tobacco_flags)[tier]
            for state in states
        ]
        return CostRange(
            low=round(min(premiums) * (1 - ESTIMATE_SPREAD), 2),
            high=round(max(premiums) * (1 + ESTIMATE_SPREAD), 2),
        )

    @staticmethod
    def _ranked(options: list[AlternativeOption]) -> list[AlternativeOption]:
        ordered = sorted(options, key=lambda option: option.monthly_cost.average)
        for rank, option in enumerate(ordered, start=1):
            option.rank = rank
        return ordered

    def _health_actions(self, household: Household, utilization: UtilizationScore) -> list[str]:
        profile = household.utilization
        actions: list[str] = []
        if self._is_high_utilization(household, utilization):
            actions.extend([
                "Check if your medications are covered by the plan formulary",
                "Verify your current doctors and specialists are in-network",
                "Compare total cost of care (premiums + deductible + copays), not just monthly premiums",
            ])
        if profile.has_chronic_conditions:
            actions.append("Look for plans with low specialist copays and no referral requirements")
        if profile.needs_specific_providers:
            actions.append("Call your preferred doctors to confirm they accept the insurance plan")
        if household.takes_specialty_meds:
            actions.append("CRITICAL: Verify specialty medication coverage and tier placement")
        if profile.has_planned_procedures:
            actions.append("IMPORTANT: Get pre-authorization for planned procedures before enrolling")
        if not self._is_high_utilization(household, utilization) and profile.prescriptions_per_month == 0:
            actions.append("Consider HDHP + HSA for tax savings and lower premiums")
        return actions

    def _health_reasoning(self, household: Household, utilization: UtilizationScore) -> str:
        if self._is_high_utilization(household, utilization):
            return (
                " Given your health needs, prioritize plans with lower deductibles and good "
                "specialist access over the lowest premiums."
            )
        if household.utilization.needs_specific_providers:
            return " Since you have preferred doctors, verify they are in-network before choosing any plan."
        if household.utilization.prescriptions_per_month == 0:
            return (
                " Since you're generally healthy, you may benefit from a high-deductible plan "
                "with HSA for significant premium savings."
            )
        return ""

    @staticmethod
    def _priority_actions(priority: str) -> list[str]:
        return {
            "lowest-premium": [
                "Sort plans by monthly premium (lowest first)",
                "Ensure you have emergency savings for higher deductibles",
            ],
            "lowest-deductible": [
                "Filter for plans with deductibles under $2,000",
                "Focus on Silver or Gold tier plans",
            ],
            "lowest-oop-max": [
                "Filter for plans with out-of-pocket maximums under $5,000",
                "Consider Gold or Platinum plans for best catastrophic protection",
            ],
            "balanced": [
                "Compare total cost of care (premium x 12 + expected medical costs)",
                "Silver plans typically offer good balance",
            ],
        }.get(priority, [])

    # ---------------------------------------------------------------
    # Pass-throughs sharing this orchestrator's audit log
    # ---------------------------------------------------------------

    def estimate_household_premium(
        self,
        adult_ages: list,
        child_ages: list,
        state: str,
        tier: str = "silver",
        tobacco_flags: list[bool] | None = None,
        base_rate: float | None = None,
    ) -> float:
        rate = base_rate if base_rate is not None else self.calculator.geography.base_rate(state)
        return self.households.household_premium(rate, adult_ages, child_ages, state, tier, tobacco_flags)

    def compare_plans(
        self, plan_a: PlanOffer, plan_b: PlanOffer, profile: UtilizationProfile | None = None
    ) -> ComparisonResult:
        return self.plans.compare(plan_a, plan_b, profile)

    def quick_compare(self, plan_a: PlanOffer, plan_b: PlanOffer) -> dict[str, Any]:
        return self.plans.quick_comparison(plan_a, plan_b)

    def compare_scenarios(self, scenario_1: Scenario, scenario_2: Scenario) -> ScenarioComparison:
        return self.scenarios.compare_scenarios(scenario_1, scenario_2)

    def analyze_cobra(
        self,
        current_monthly_cost: float,
        months_since_job_loss: int,
        has_preexisting_conditions: bool,
        alternative_cost_range: CostRange,
    ) -> COBRAAnalysis:
        return self.cobra.analyze(
            current_monthly_cost, months_since_job_loss, has_preexisting_conditions, alternative_cost_range
        )

    def analyze_hsa(
        self,
        family_size: int,
        age: int,
        annual_income: float,
        state_tax_rate: float = DEFAULT_STATE_TAX_RATE,
    ) -> HSAAnalysis:
        return self.hsa.calculate_benefits(family_size, age, annual_income, state_tax_rate)
