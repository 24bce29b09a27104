"""Insurance domain value types shared by the rating, comparison and analyzer modules."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

MetalTier = Literal["bronze", "silver", "gold", "platinum", "catastrophic"]
NetworkType = Literal["HMO", "PPO", "EPO", "POS", "HDHP"]
RiskTolerance = Literal["low", "medium", "high"]
FinancialPriority = Literal[
    "lowest-premium", "lowest-deductible", "lowest-oop-max", "balanced", ""
]
Winner = Literal["A", "B", "tie"]
Confidence = Literal["high", "medium", "low"]

METAL_TIERS: tuple[str, ...] = ("catastrophic", "bronze", "silver", "gold", "platinum")
NETWORK_TYPES: tuple[str, ...] = ("HMO", "PPO", "EPO", "POS", "HDHP")


class _AsDict:
    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


# ---------------------------------------------------------------------------
# Household inputs
# ---------------------------------------------------------------------------

@dataclass
class Residence(_AsDict):
    """One home the household occupies during the year."""

    zip: str
    state: str
    is_primary: bool = False
    months_per_year: int = 12


@dataclass
class UtilizationProfile(_AsDict):
    """Expected yearly healthcare usage for the household."""

    primary_care_visits: int = 2
    specialist_visits: int = 0
    er_visits: int = 0
    prescriptions_per_month: int = 0
    prescription_tier: int = 1           # 1 generic ... 4 specialty
    has_planned_procedures: bool = False
    planned_procedure_cost: float | None = None
    risk_tolerance: RiskTolerance = "medium"
    prioritizes_lower_premium: bool = False
    needs_specific_providers: bool = False
    has_chronic_conditions: bool = False
    chronic_condition_count: int = 0


@dataclass
class CurrentInsurance(_AsDict):
    """Snapshot of the coverage the household holds today."""

    carrier: str = ""
    plan_type: str = ""
    monthly_cost: float = 0.0
    deductible: float = 0.0
    out_of_pocket_max: float = 0.0
    # Set when the coverage is employer continuation after a job loss
    months_since_job_loss: int | None = None


@dataclass
class Household(_AsDict):
    """Everything the orchestrator needs to price and recommend coverage.

    ``adults_use_tobacco`` is aligned to ``adult_ages`` by index; missing
    entries mean non-user. ``num_adults`` is the declared adult count and,
    when given, must match ``len(adult_ages)``.
    """

    residences: list[Residence] = field(default_factory=list)
    adult_ages: list[int] = field(default_factory=list)
    child_ages: list[int] = field(default_factory=list)
    adults_use_tobacco: list[bool] = field(default_factory=list)
    num_adults: int | None = None
    annual_income: float | None = None
    income_range: str = ""
    budget: str = "not-sure"
    has_employer_insurance: bool = False
    employer_contribution: float = 0.0
    takes_specialty_meds: bool = False
    financial_priority: FinancialPriority = ""
    preferred_tier: str = ""
    utilization: UtilizationProfile = field(default_factory=UtilizationProfile)
    current_insurance: CurrentInsurance | None = None

    @property
    def states(self) -> list[str]:
        """Distinct residence states in input order."""
        seen: list[str] = []
        for residence in self.residences:
            code = (residence.state or "").strip().upper()
            if code and code not in seen:
                seen.append(code)
        return seen

    @property
    def primary_residence(self) -> Residence | None:
        for residence in self.residences:
            if residence.is_primary:
                return residence
        return self.residences[0] if self.residences else None

    @property
    def size(self) -> int:
        return len(self.adult_ages) + len(self.child_ages)

    def is_complete(self) -> bool:
        """True when the required fields are present and consistent."""
        if not self.residences or not self.states:
            return False
        if not self.adult_ages:
            return False
        if self.num_adults is not None and self.num_adults != len(self.adult_ages):
            return False
        return True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Household:
        """Build a household from plain (JSON-decoded) values."""
        payload = dict(data)
        payload["residences"] = [
            r if isinstance(r, Residence) else Residence(**r)
            for r in payload.get("residences", [])
        ]
        utilization = payload.get("utilization")
        if isinstance(utilization, dict):
            payload["utilization"] = UtilizationProfile(**utilization)
        current = payload.get("current_insurance")
        if isinstance(current, dict):
            payload["current_insurance"] = CurrentInsurance(**current)
        return cls(**payload)


# ---------------------------------------------------------------------------
# Plans and costs
# ---------------------------------------------------------------------------

@dataclass
class PlanOffer(_AsDict):
    """A concrete plan being shopped. Money fields are non-negative."""

    id: str
    name: str
    issuer: str
    metal_tier: MetalTier
    network_type: NetworkType
    monthly_premium: float
    deductible: float
    out_of_pocket_max: float
    monthly_premium_after_subsidy: float | None = None
    primary_care_copay: float | None = None
    specialist_copay: float | None = None
    generic_drug_copay: float | None = None
    brand_drug_copay: float | None = None
    er_copay: float | None = None
    coinsurance_percent: float | None = None
    hsa_eligible: bool = False
    quality_rating: float | None = None     # 1-5 stars
    has_national_network: bool | None = None

    @property
    def effective_monthly_premium(self) -> float:
        if self.monthly_premium_after_subsidy is not None:
            return self.monthly_premium_after_subsidy
        return self.monthly_premium

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlanOffer:
        return cls(**data)


@dataclass
class CostRange(_AsDict):
    """Monthly cost band."""

    low: float
    high: float

    @property
    def average(self) -> float:
        return (self.low + self.high) / 2


@dataclass
class ScenarioCost(_AsDict):
    """One plan's projected annual cost under a scenario."""

    annual_premium: float
    annual_out_of_pocket: float
    total: float


@dataclass
class CostScenario(_AsDict):
    """Named utilization archetype priced against both plans."""

    name: str
    description: str
    plan_a: ScenarioCost
    plan_b: ScenarioCost
    difference: float
    winner: Winner


# ---------------------------------------------------------------------------
# Recommendation output
# ---------------------------------------------------------------------------

@dataclass
class AlternativeOption(_AsDict):
    """A ranked alternative to the recommended coverage."""

    name: str
    monthly_cost: CostRange
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    rank: int = 0


@dataclass
class Recommendation(_AsDict):
    """Final recommendation plus optional specialized analyses."""

    recommended_insurance: str
    plan_type: str
    metal_tier: str
    household_breakdown: str
    coverage_gap_score: int
    estimated_monthly_cost: CostRange
    reasoning: str
    action_items: list[str] = field(default_factory=list)
    alternative_options: list[AlternativeOption] = field(default_factory=list)
    medicare_advantage_analysis: dict[str, Any] | None = None
    cobra_analysis: dict[str, Any] | None = None
    hsa_analysis: dict[str, Any] | None = None
    employer_plan_analysis: dict[str, Any] | None = None
    current_insurance_comparison: dict[str, Any] | None = None
