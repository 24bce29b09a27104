"""COBRA continuation analysis: is keeping the old employer plan worth it?"""

from __future__ import annotations

import calendar
import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from compass.domains.insurance.domain_logic.models import CostRange

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationAuditLogger

logger = logging.getLogger(__name__)

COBRA_WINDOW_MONTHS = 18
# Employee share -> full premium plus the 2% admin fee, as a multiple
DEFAULT_COBRA_COST_MARKUP = 3.5
COST_RANGE_SPREAD = 0.10
SHORT_WINDOW_MONTHS = 3
# COBRA only wins on price when it undercuts the alternative's low end by this much
MATERIALLY_CHEAPER_RATIO = 0.8


@dataclass
class FlowchartStep:
    question: str
    yes_path: str
    no_path: str


@dataclass
class COBRAAnalysis:
    is_worth_it: bool
    months_remaining: int
    estimated_monthly_cost: CostRange
    recommendation: str
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    alternatives: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    decision_flowchart: list[FlowchartStep] = field(default_factory=list)
    monthly_savings_by_switching: float | None = None
    annual_savings_by_switching: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def decision_flowchart() -> list[FlowchartStep]:
    """The fixed four-question COBRA decision path."""
    return [
        FlowchartStep(
            question="Do you have a new job with health insurance starting soon (within 1-3 months)?",
            yes_path="Consider COBRA for short-term continuity",
            no_path="Continue to next question",
        ),
        FlowchartStep(
            question="Are you in active treatment for a serious condition?",
            yes_path="COBRA may be worth it to continue current care",
            no_path="Continue to next question",
        ),
        FlowchartStep(
            question=(
                "Would you qualify for marketplace subsidies "
                "(income under $60k individual/$120k family)?"
            ),
            yes_path="Marketplace likely cheaper - switch as soon as possible",
            no_path="Continue to next question",
        ),
        FlowchartStep(
            question="Can you afford $1,500-2,000/month for COBRA?",
            yes_path="COBRA possible but expensive - compare marketplace",
            no_path="COBRA not affordable - explore marketplace and Medicaid",
        ),
    ]


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic, clamping the day to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class COBRAAnalyzer:
    """Weighs COBRA continuation against a marketplace cost range.

    Decision order: short remaining window, then ongoing treatment, then
    COBRA being materially cheaper, otherwise switch. An expired window is
    never recommended.
    """

    def __init__(
        self,
        *,
        cost_markup: float = DEFAULT_COBRA_COST_MARKUP,
        audit_logger: CalculationAuditLogger | None = None,
    ) -> None:
        self.cost_markup = cost_markup
        self._audit = audit_logger

    def analyze(
        self,
        current_monthly_cost: float,
        months_since_job_loss: int,
        has_preexisting_conditions: bool,
        alternative_cost_range: CostRange,
    ) -> COBRAAnalysis:
        args = {
            "current_monthly_cost": current_monthly_cost,
            "months_since_job_loss": months_since_job_loss,
            "has_preexisting_conditions": has_preexisting_conditions,
            "alternative_cost_range": alternative_cost_range,
            "cost_markup": self.cost_markup,
        }
        if self._audit is None:
            return self._analyze(**args)
        return self._audit.log_calculation("cobra", args, lambda data: self._analyze(**data))

    def _analyze(
        self,
        current_monthly_cost: float,
        months_since_job_loss: int,
        has_preexisting_conditions: bool,
        alternative_cost_range: CostRange,
        cost_markup: float,
    ) -> COBRAAnalysis:
        months_remaining = max(0, COBRA_WINDOW_MONTHS - int(months_since_job_loss))
        estimated = current_monthly_cost * cost_markup
        cost_range = CostRange(
            low=round(estimated * (1 - COST_RANGE_SPREAD), 2),
            high=round(estimated * (1 + COST_RANGE_SPREAD), 2),
        )

        pros = [
            "Same coverage and doctors as before",
            "No waiting period or pre-existing condition exclusions",
            "Familiar plan - you know how it works",
            "Good for short-term coverage while job searching",
        ]
        cons = [
            f"Very expensive - typically ${estimated:,.0f}/month or more",
            "No employer contribution - you pay 100% + 2% admin fee",
            f"Only available for {_plural(months_remaining, 'more month')}",
            "Premiums can increase annually",
        ]
        alternatives = [
            "ACA Marketplace plans (income-based subsidies available)",
            "Spouse's employer plan (special enrollment period)",
            "Short-term health insurance (limited coverage)",
            "Medicaid (if income qualifies)",
        ]
        warnings: list[str] = []
        monthly_savings = annual_savings = None

        if 1 <= months_remaining <= SHORT_WINDOW_MONTHS:
            worth_it = True
            recommendation = (
                f"COBRA may be worth it for {_plural(months_remaining, 'month')} if you're between "
                "jobs or waiting for new employer coverage. Short-term is easier than switching plans."
            )
        elif has_preexisting_conditions and months_remaining > 0:
            worth_it = True
            recommendation = (
                "COBRA recommended if you have ongoing treatment or prescriptions that work well "
                "with your current plan. Continuity of care is valuable."
            )
            warnings.append("Consider switching to an ACA plan during the next Open Enrollment to save money")
        elif months_remaining > 0 and cost_range.high < alternative_cost_range.low * MATERIALLY_CHEAPER_RATIO:
            worth_it = True
            recommendation = (
                "COBRA is unusually affordable compared to alternatives - this is rare but worth "
                "taking advantage of."
            )
        else:
            worth_it = False
            alternative_average = alternative_cost_range.average
            monthly_savings = round(abs(estimated - alternative_average), 2)
            annual_savings = round(abs(estimated * 12 - alternative_average * 12), 2)
            if months_remaining == 0:
                recommendation = (
                    "COBRA is no longer available. An ACA Marketplace plan at about "
                    f"${alternative_average:,.0f}/month is your replacement coverage."
                )
            else:
                recommendation = (
                    f"COBRA is NOT recommended. At ~${estimated:,.0f}/month, you'll save "
                    f"${monthly_savings:,.0f}/month by switching to an ACA Marketplace plan "
                    "with similar coverage."
                )
            cons.append(f"Could save ${annual_savings:,.0f}/year with marketplace plan")

        if 0 < months_remaining <= SHORT_WINDOW_MONTHS:
            warnings.append(
                f"URGENT: Only {_plural(months_remaining, 'month')} of COBRA remaining - "
                "enroll in alternative coverage now"
            )
        if months_remaining == 0:
            warnings.append("COBRA has expired - must find alternative coverage immediately")

        logger.debug(
            "COBRA analysis: %d months remaining, worth_it=%s", months_remaining, worth_it
        )
        return COBRAAnalysis(
            is_worth_it=worth_it,
            months_remaining=months_remaining,
            estimated_monthly_cost=cost_range,
            recommendation=recommendation,
            pros=pros,
            cons=cons,
            alternatives=alternatives,
            warnings=warnings,
            decision_flowchart=decision_flowchart(),
            monthly_savings_by_switching=monthly_savings,
            annual_savings_by_switching=annual_savings,
        )

    @staticmethod
    def drop_date(job_loss_date: date, next_open_enrollment: date) -> dict[str, Any]:
        """When to leave COBRA: at open enrollment if it comes first, else when COBRA ends."""
        cobra_end = add_months(job_loss_date, COBRA_WINDOW_MONTHS)
        if next_open_enrollment < cobra_end:
            return {
                "drop_date": next_open_enrollment.isoformat(),
                "cobra_end_date": cobra_end.isoformat(),
                "reasoning": (
                    f"Drop COBRA during Open Enrollment ({next_open_enrollment.isoformat()}) "
                    "to switch to a marketplace plan and save money."
                ),
            }
        return {
            "drop_date": cobra_end.isoformat(),
            "cobra_end_date": cobra_end.isoformat(),
            "reasoning": (
                f"COBRA coverage ends {cobra_end.isoformat()}. You'll have a Special Enrollment "
                "Period to switch to marketplace coverage at that time."
            ),
        }
