"""MCP tools for household pricing, recommendations and what-if scenarios."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from compass.domains.insurance.domain_logic.household import MAX_RATED_CHILDREN
from compass.domains.insurance.domain_logic.models import Household
from compass.domains.insurance.domain_logic.rating_tables import PRICED_TIERS
from compass.domains.insurance.domain_logic.scenario_comparator import (
    create_scenario,
    generate_common_scenarios,
)

if TYPE_CHECKING:
    from compass.domains.insurance.domain_logic.orchestrator import RecommendationOrchestrator

logger = logging.getLogger(__name__)

CUSTOM_SCENARIO_ID = "custom"


def _validate_tier(value: str | None) -> str:
    """Validate and default the tier parameter."""
    if value in (None, ""):
        return "silver"
    tier = value.strip().lower()
    if tier not in PRICED_TIERS:
        raise ValueError(f"tier must be one of: {' | '.join(PRICED_TIERS)}")
    return tier


def household_from_payload(payload: dict[str, Any]) -> Household:
    """Build a Household from tool input, turning field errors into ValueError."""
    try:
        return Household.from_dict(payload)
    except TypeError as exc:
        raise ValueError(f"Invalid household: {exc}") from exc


def register_planning_tools(
    mcp: FastMCP,
    orchestrator: RecommendationOrchestrator,
) -> None:
    """Register household planning tools on the MCP server."""

    @mcp.tool
    async def estimate_household_premium(
        ctx: Context,
        adult_ages: list[int],
        state: str,
        child_ages: list[int] | None = None,
        tier: str = "silver",
        tobacco_flags: list[bool] | None = None,
        base_rate: float | None = None,
    ) -> str:
        """Estimate the monthly premium for a household in one state.

        Each person is priced as base rate x age factor x state cost index x
        tier multiplier, plus the state's tobacco surcharge for adult users.
        Only the first three children carry a premium.

        Args:
            adult_ages: Ages of the adults to cover.
            state: Two-letter state code (e.g., 'FL').
            child_ages: Ages of children under 18, in the order they should be rated.
            tier: Metal tier: bronze | silver | gold | platinum (default: silver).
            tobacco_flags: Tobacco use per adult, aligned with adult_ages.
            base_rate: Monthly base rate for a 21-year-old; defaults to the state rate.
        """
        effective_tier = _validate_tier(tier)
        children = list(child_ages or [])
        geography = orchestrator.calculator.geography
        rate = base_rate if base_rate is not None else geography.base_rate(state)

        premium = orchestrator.estimate_household_premium(
            adult_ages, children, state, effective_tier, tobacco_flags, rate
        )
        by_tier = orchestrator.households.premium_range(adult_ages, children, state, tobacco_flags)
        logger.info("Estimated %s premium in %s: %.2f", effective_tier, state, premium)
        return json.dumps({
            "status": "ok",
            "state": state.strip().upper(),
            "tier": effective_tier,
            "base_rate": rate,
            "monthly_premium": premium,
            "annual_premium": round(premium * 12, 2),
            "premium_by_tier": by_tier,
            "cost_index": geography.cost_index(state),
            "tobacco_surcharge_limit": geography.tobacco_surcharge_limit(state),
            "rated_children": min(len(children), MAX_RATED_CHILDREN),
            "unrated_children": max(0, len(children) - MAX_RATED_CHILDREN),
            "rating_tables_version": orchestrator.calculator.tables.version,
        }, indent=2)

    @mcp.tool
    async def recommend_coverage(
        ctx: Context,
        household: dict,
    ) -> str:
        """Recommend health coverage for a household.

        Routes Medicare-eligible, mixed and under-65 households, prices the
        under-65 members from the rating tables, scores network coverage
        across residence states and attaches Medicare Advantage, COBRA, HSA,
        employer-plan and current-insurance analyses where they apply.

        Args:
            household: Household object with residences (zip, state, is_primary,
                months_per_year), adult_ages, child_ages, adults_use_tobacco,
                annual_income or income_range, budget, utilization and optional
                current_insurance.
        """
        recommendation = orchestrator.recommend(household_from_payload(household))
        if recommendation is None:
            return json.dumps({
                "status": "insufficient_input",
                "message": (
                    "At least one residence with a state and one adult age are required, "
                    "and num_adults must match adult_ages when given."
                ),
            }, indent=2)
        return json.dumps({"status": "ok", "recommendation": recommendation.to_dict()}, indent=2)

    @mcp.tool
    async def compare_scenarios(
        ctx: Context,
        household: dict,
        alternative: str = "high-utilization",
        overrides: dict | None = None,
    ) -> str:
        """Compare the household's current situation with a what-if scenario.

        Built-in alternatives are 'high-utilization', 'with-employer' (only
        when no employer coverage today) and 'planned-procedure' (only when
        nothing is planned). Passing overrides builds a custom scenario instead.

        Args:
            household: Baseline household (same shape as recommend_coverage).
            alternative: Id of a built-in alternative scenario.
            overrides: Household fields to change for a custom scenario;
                'utilization' may be a partial object.
        """
        base = household_from_payload(household)
        common = generate_common_scenarios(base)
        if overrides:
            other = create_scenario(
                CUSTOM_SCENARIO_ID, "Custom Scenario", "Your what-if changes", base, overrides
            )
        else:
            by_id = {s.id: s for s in common["alternatives"]}
            if alternative not in by_id:
                raise ValueError(f"alternative must be one of: {' | '.join(by_id)}")
            other = by_id[alternative]

        report = orchestrator.compare_scenarios(common["baseline"], other)
        return json.dumps({"status": "ok", "comparison": report.to_dict()}, indent=2)
