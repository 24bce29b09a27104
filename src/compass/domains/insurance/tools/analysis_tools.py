"""MCP tools for plan-versus-plan comparison, COBRA and HSA analysis."""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from compass.domains.insurance.domain_logic.hsa_analyzer import DEFAULT_STATE_TAX_RATE
from compass.domains.insurance.domain_logic.models import CostRange, PlanOffer, UtilizationProfile

if TYPE_CHECKING:
    from compass.domains.insurance.domain_logic.orchestrator import RecommendationOrchestrator

logger = logging.getLogger(__name__)


def _plan_from_payload(payload: dict[str, Any], label: str) -> PlanOffer:
    try:
        plan = PlanOffer.from_dict(payload)
    except TypeError as exc:
        raise ValueError(f"Invalid {label}: {exc}") from exc
    for name in ("monthly_premium", "deductible", "out_of_pocket_max"):
        if getattr(plan, name) < 0:
            raise ValueError(f"{label}.{name} must be non-negative")
    return plan


def _profile_from_payload(payload: dict[str, Any] | None) -> UtilizationProfile | None:
    if not payload:
        return None
    try:
        return UtilizationProfile(**payload)
    except TypeError as exc:
        raise ValueError(f"Invalid profile: {exc}") from exc


def _parse_date(value: str, name: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an ISO date (YYYY-MM-DD)") from exc


def register_analysis_tools(
    mcp: FastMCP,
    orchestrator: RecommendationOrchestrator,
) -> None:
    """Register plan comparison and specialized analysis tools on the MCP server."""

    @mcp.tool
    async def compare_plans(
        ctx: Context,
        plan_a: dict,
        plan_b: dict,
        profile: dict | None = None,
    ) -> str:
        """Compare two health plans side by side.

        Scores cost, coverage and network metrics, prices three fixed usage
        years (plus your own expected usage when a profile is given) and
        picks an overall winner with a confidence level.

        Args:
            plan_a: Plan object (id, name, issuer, metal_tier, network_type,
                monthly_premium, deductible, out_of_pocket_max and optional copays).
            plan_b: Second plan in the same shape.
            profile: Optional utilization profile used for the personal scenario
                and the recommendation.
        """
        result = orchestrator.compare_plans(
            _plan_from_payload(plan_a, "plan_a"),
            _plan_from_payload(plan_b, "plan_b"),
            _profile_from_payload(profile),
        )
        return json.dumps({"status": "ok", "comparison": result.to_dict()}, indent=2)

    @mcp.tool
    async def quick_compare_plans(
        ctx: Context,
        plan_a: dict,
        plan_b: dict,
    ) -> str:
        """Quick answer to which plan is cheaper monthly, in a healthy year and in a bad year.

        Args:
            plan_a: Plan object (same shape as compare_plans).
            plan_b: Second plan.
        """
        flags = orchestrator.quick_compare(
            _plan_from_payload(plan_a, "plan_a"),
            _plan_from_payload(plan_b, "plan_b"),
        )
        return json.dumps({"status": "ok", **flags}, indent=2)

    @mcp.tool
    async def analyze_cobra(
        ctx: Context,
        current_monthly_cost: float,
        months_since_job_loss: int,
        alternative_low: float,
        alternative_high: float,
        has_preexisting_conditions: bool = False,
        job_loss_date: str = "",
        next_open_enrollment: str = "",
    ) -> str:
        """Decide whether keeping COBRA continuation coverage is worth it.

        Args:
            current_monthly_cost: What the employee paid monthly while employed.
            months_since_job_loss: Months elapsed since coverage ended.
            alternative_low: Low end of the marketplace monthly cost range.
            alternative_high: High end of the marketplace monthly cost range.
            has_preexisting_conditions: Whether someone is in ongoing treatment.
            job_loss_date: Optional ISO date of the job loss, for the drop-date plan.
            next_open_enrollment: Optional ISO date of the next open enrollment.
        """
        if months_since_job_loss < 0:
            return json.dumps({
                "status": "error",
                "message": "months_since_job_loss must be zero or more.",
            })
        if alternative_low > alternative_high:
            return json.dumps({
                "status": "error",
                "message": "alternative_low must not exceed alternative_high.",
            })

        analysis = orchestrator.analyze_cobra(
            current_monthly_cost,
            months_since_job_loss,
            has_preexisting_conditions,
            CostRange(alternative_low, alternative_high),
        )
        payload: dict[str, Any] = {"status": "ok", "analysis": analysis.to_dict()}
        if job_loss_date and next_open_enrollment:
            payload["drop_plan"] = orchestrator.cobra.drop_date(
                _parse_date(job_loss_date, "job_loss_date"),
                _parse_date(next_open_enrollment, "next_open_enrollment"),
            )
        return json.dumps(payload, indent=2)

    @mcp.tool
    async def analyze_hsa(
        ctx: Context,
        family_size: int,
        age: int,
        annual_income: float,
        state_tax_rate: float = DEFAULT_STATE_TAX_RATE,
        hdhp_vs_ppo: dict | None = None,
    ) -> str:
        """Estimate HSA tax savings and long-term growth.

        Args:
            family_size: People covered; more than one uses the family limit.
            age: Account holder age; 55+ adds the catch-up contribution.
            annual_income: Annual income used for the federal marginal rate.
            state_tax_rate: State income tax rate as a fraction (default: 0.05).
            hdhp_vs_ppo: Optional object with hdhp_monthly_premium, hdhp_deductible,
                ppo_monthly_premium, ppo_deductible, hsa_contribution and
                estimated_annual_medical_costs to compare total annual cost.
        """
        if family_size < 1:
            raise ValueError("family_size must be at least 1")
        if not 0 <= state_tax_rate < 1:
            raise ValueError("state_tax_rate must be a fraction between 0 and 1")

        analysis = orchestrator.analyze_hsa(family_size, age, annual_income, state_tax_rate)
        payload: dict[str, Any] = {"status": "ok", "analysis": analysis.to_dict()}
        if hdhp_vs_ppo:
            try:
                payload["hdhp_vs_ppo"] = orchestrator.hsa.compare_hdhp_vs_ppo(**hdhp_vs_ppo)
            except TypeError as exc:
                raise ValueError(f"Invalid hdhp_vs_ppo: {exc}") from exc
        logger.info("HSA analysis for family of %d: max contribution %.0f",
                    family_size, analysis.max_contribution)
        return json.dumps(payload, indent=2)
