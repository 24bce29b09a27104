"""HSA tax-benefit and growth analysis for HDHP enrollees."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationAuditLogger

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# IRS limits by plan year: (individual, family)
# ---------------------------------------------------------------------------

HSA_CONTRIBUTION_LIMITS: dict[int, tuple[float, float]] = {
    2024: (4150.0, 8300.0),
    2025: (4300.0, 8550.0),
    2026: (4400.0, 8750.0),
}
HSA_CATCH_UP_CONTRIBUTION = 1000.0
CATCH_UP_AGE = 55
DEFAULT_PLAN_YEAR = 2026

# HDHP minimum deductibles that qualify for an HSA (individual, family)
HDHP_MIN_DEDUCTIBLES: dict[int, tuple[float, float]] = {
    2024: (1600.0, 3200.0),
    2025: (1650.0, 3300.0),
    2026: (1700.0, 3400.0),
}

# Real annual return assumed for invested balances
DEFAULT_ANNUAL_RETURN = 0.07
RETIREMENT_AGE = 65
# Retirement projections never look fewer years ahead than this
MIN_PROJECTION_YEARS = 30
FICA_RATE = 0.0765
DEFAULT_STATE_TAX_RATE = 0.05

# Single-filer marginal brackets: (income below, rate)
FEDERAL_TAX_BRACKETS: tuple[tuple[float, float], ...] = (
    (44_725, 0.12),
    (95_375, 0.22),
    (182_100, 0.24),
    (231_250, 0.32),
    (578_125, 0.35),
)
TOP_FEDERAL_RATE = 0.37

# HDHP vs PPO comparison assumptions
HSA_EFFECTIVE_TAX_RATE = 0.30
PPO_COINSURANCE = 0.20


def federal_marginal_rate(annual_income: float) -> float:
    for ceiling, rate in FEDERAL_TAX_BRACKETS:
        if annual_income < ceiling:
            return rate
    return TOP_FEDERAL_RATE


def future_value(annual_contribution: float, annual_return: float, years: int) -> float:
    """Balance after *years* of start-of-year contributions, compounded annually."""
    balance = 0.0
    for _ in range(max(0, years)):
        balance = (balance + annual_contribution) * (1 + annual_return)
    return round(balance, 2)


@dataclass
class ContributionLimits:
    plan_year: int
    individual: float
    family: float
    catch_up: float


@dataclass
class TaxSavings:
    federal: float
    fica: float
    state: float
    total: float


@dataclass
class GrowthProjections:
    year1: float
    year5: float
    year10: float
    retirement: float
    years_to_retirement: int
    annual_return: float


@dataclass
class HSAStrategy:
    strategy: str
    description: str
    best_for: str


@dataclass
class HSAAnalysis:
    is_eligible: bool
    contribution_limits: ContributionLimits
    max_contribution: float
    tax_savings: TaxSavings
    projections: GrowthProjections
    recommendation: str
    triple_tax_advantage: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    considerations: list[str] = field(default_factory=list)
    strategies: list[HSAStrategy] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class HSAAnalyzer:
    """Estimates HSA tax savings and long-run growth.

    ``annual_return`` and ``plan_year`` are assumptions, not derived facts;
    both can be overridden per instance.
    """

    def __init__(
        self,
        *,
        annual_return: float = DEFAULT_ANNUAL_RETURN,
        plan_year: int = DEFAULT_PLAN_YEAR,
        audit_logger: CalculationAuditLogger | None = None,
    ) -> None:
        if plan_year not in HSA_CONTRIBUTION_LIMITS:
            raise ValueError(
                f"No HSA limits for plan year {plan_year}. "
                f"Known years: {', '.join(str(y) for y in sorted(HSA_CONTRIBUTION_LIMITS))}"
            )
        self.annual_return = annual_return
        self.plan_year = plan_year
        self._audit = audit_logger

    # ---------------------------------------------------------------
    # Public operations
    # ---------------------------------------------------------------

    def calculate_benefits(
        self,
        family_size: int,
        age: int,
        annual_income: float,
        state_tax_rate: float = DEFAULT_STATE_TAX_RATE,
    ) -> HSAAnalysis:
        args = {
            "family_size": family_size,
            "age": age,
            "annual_income": annual_income,
            "state_tax_rate": state_tax_rate,
            "annual_return": self.annual_return,
            "plan_year": self.plan_year,
        }
        if self._audit is None:
            return self._calculate(family_size, age, annual_income, state_tax_rate)
        return self._audit.log_calculation(
            "hsa",
            args,
            lambda data: self._calculate(
                data["family_size"], data["age"], data["annual_income"], data["state_tax_rate"]
            ),
        )

    def strategies(self) -> list[HSAStrategy]:
        individual, family = HSA_CONTRIBUTION_LIMITS[self.plan_year]
        return [
            HSAStrategy(
                strategy="Max Out & Invest",
                description=(
                    f"Contribute the maximum annually (${family:,.0f} family), invest in index "
                    "funds, and pay medical costs out-of-pocket. Let the HSA grow tax-free for retirement."
                ),
                best_for="High earners with an emergency fund who can afford to not touch the HSA",
            ),
            HSAStrategy(
                strategy="Strategic Contributions",
                description=(
                    "Contribute enough to cover expected medical costs ($2,000-4,000/year) and "
                    "spend from the HSA on current medical bills."
                ),
                best_for="Middle-income families who need the HSA for current medical expenses",
            ),
            HSAStrategy(
                strategy="Employer Match Max",
                description=(
                    "Contribute at least enough to get the full employer match (if offered). "
                    "Increase contributions as the budget allows."
                ),
                best_for="Anyone with an employer HSA match",
            ),
            HSAStrategy(
                strategy="Catch-Up Power",
                description=(
                    f"Age {CATCH_UP_AGE}+: max out with catch-up contributions "
                    f"(${family + HSA_CATCH_UP_CONTRIBUTION:,.0f} family, "
                    f"${individual + HSA_CATCH_UP_CONTRIBUTION:,.0f} individual). "
                    "Use it as a retirement medical fund."
                ),
                best_for="Pre-retirees building a medical expense fund for retirement",
            ),
        ]

    def compare_hdhp_vs_ppo(
        self,
        hdhp_monthly_premium: float,
        hdhp_deductible: float,
        ppo_monthly_premium: float,
        ppo_deductible: float,
        hsa_contribution: float,
        estimated_annual_medical_costs: float,
    ) -> dict[str, Any]:
        """Annual cost of HDHP + HSA against a traditional PPO.

        ``net_difference`` is HDHP minus PPO; negative favors the HDHP.
        """
        hdhp_out_of_pocket = min(estimated_annual_medical_costs, hdhp_deductible)
        hdhp_tax_savings = hsa_contribution * HSA_EFFECTIVE_TAX_RATE
        hdhp_total = hdhp_monthly_premium * 12 + hdhp_out_of_pocket - hdhp_tax_savings

        ppo_out_of_pocket = min(estimated_annual_medical_costs * PPO_COINSURANCE, ppo_deductible)
        ppo_total = ppo_monthly_premium * 12 + ppo_out_of_pocket

        net = round(hdhp_total - ppo_total, 2)
        if net < -1000:
            recommendation = f"HDHP + HSA saves you ${abs(net):,.0f}/year. Great choice for your situation."
        elif net < 500:
            recommendation = (
                "HDHP and PPO cost about the same. HDHP wins due to HSA tax benefits and "
                "long-term growth potential."
            )
        else:
            recommendation = (
                f"PPO costs ${abs(net):,.0f} less given your expected medical costs. "
                "Consider the PPO unless you want the HSA's long-term benefits."
            )
        return {
            "hdhp_total_cost": round(hdhp_total, 2),
            "ppo_total_cost": round(ppo_total, 2),
            "hdhp_tax_savings": round(hdhp_tax_savings, 2),
            "net_difference": net,
            "recommendation": recommendation,
        }

    # ---------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------

    def _calculate(
        self,
        family_size: int,
        age: int,
        annual_income: float,
        state_tax_rate: float,
    ) -> HSAAnalysis:
        individual, family = HSA_CONTRIBUTION_LIMITS[self.plan_year]
        limits = ContributionLimits(
            plan_year=self.plan_year,
            individual=individual,
            family=family,
            catch_up=HSA_CATCH_UP_CONTRIBUTION,
        )
        base = family if family_size > 1 else individual
        catch_up = HSA_CATCH_UP_CONTRIBUTION if age >= CATCH_UP_AGE else 0.0
        max_contribution = base + catch_up

        federal = round(max_contribution * federal_marginal_rate(annual_income), 2)
        fica = round(max_contribution * FICA_RATE, 2)
        state = round(max_contribution * state_tax_rate, 2)
        savings = TaxSavings(federal=federal, fica=fica, state=state, total=round(federal + fica + state, 2))

        years_to_retirement = max(RETIREMENT_AGE - int(age), MIN_PROJECTION_YEARS)
        projections = GrowthProjections(
            year1=max_contribution,
            year5=future_value(max_contribution, self.annual_return, 5),
            year10=future_value(max_contribution, self.annual_return, 10),
            retirement=future_value(max_contribution, self.annual_return, years_to_retirement),
            years_to_retirement=years_to_retirement,
            annual_return=self.annual_return,
        )

        min_individual, min_family = HDHP_MIN_DEDUCTIBLES[self.plan_year]
        considerations = [
            f"High deductible: ${min_individual:,.0f} individual / ${min_family:,.0f} family minimum",
            "Must pay full cost of care until deductible is met",
            "Best for healthy individuals with emergency savings",
            "Can use HSA funds to pay deductible if needed",
            "Must be enrolled in an HDHP (High-Deductible Health Plan)",
            "Cannot be on Medicare or claimed as a dependent",
        ]
        benefits = [
            f"Save ${savings.total:,.0f} in taxes per year",
            "Lower health insurance premiums (HDHP plans cost less)",
            'Account rolls over year to year (no "use it or lose it")',
            "Portable - keep it if you change jobs",
            "After age 65, can use for non-medical expenses (taxed as income)",
            "Can invest HSA funds for long-term growth",
        ]

        if age < 50 and annual_income > 60_000:
            recommendation = (
                "Excellent fit. You're young enough to benefit from long-term growth "
                f"(${projections.retirement:,.0f} by retirement) and earn enough to max out "
                "contributions. An HSA is one of the best retirement savings vehicles available."
            )
        elif age >= CATCH_UP_AGE:
            recommendation = (
                f"Good fit with catch-up contributions (${max_contribution:,.0f}/year). Use the HSA "
                "as a supplemental retirement account; it can pay Medicare premiums tax-free after 65."
            )
        elif annual_income < 40_000:
            recommendation = (
                "An HSA can work but may be challenging to max out. Prioritize an emergency fund "
                "first. Even partial contributions ($1,000-2,000/year) provide tax benefits."
            )
        else:
            recommendation = (
                f"An HSA is worth considering. Save ${savings.total:,.0f}/year in taxes and build "
                "tax-free medical savings. Best for those with minimal healthcare needs and "
                "emergency savings."
            )

        return HSAAnalysis(
            is_eligible=True,
            contribution_limits=limits,
            max_contribution=max_contribution,
            tax_savings=savings,
            projections=projections,
            recommendation=recommendation,
            triple_tax_advantage=[
                "Contributions are tax-deductible (reduce taxable income)",
                "Investment growth is tax-free (no capital gains)",
                "Withdrawals for medical expenses are tax-free",
            ],
            benefits=benefits,
            considerations=considerations,
            strategies=self.strategies(),
        )
