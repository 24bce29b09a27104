"""MCP Resources for rating table discovery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import FastMCP

if TYPE_CHECKING:
    from compass.domains.insurance.domain_logic.rating_tables import RatingTables


def register_rating_table_resources(mcp: FastMCP, tables: RatingTables) -> None:
    """Register the active rating tables as read-only resources."""

    @mcp.resource("rating-tables://insurance/current")
    def rating_tables_resource() -> str:
        """The rating tables every premium on this server is priced from."""
        return json.dumps(
            {
                "version": tables.version,
                "age_curve": {str(age): factor for age, factor in sorted(tables.age_curve.items())},
                "child_factor": tables.child_factor,
                "ceiling_factor": tables.ceiling_factor,
                "tier_multipliers": tables.tier_multipliers,
                "defaults": {
                    "cost_index": tables.default_cost_index,
                    "tobacco_limit": tables.default_tobacco_limit,
                    "base_rate": tables.default_base_rate,
                },
                "state_count": len(tables.geographic_index),
            },
            indent=2,
        )

    @mcp.resource("rating-tables://insurance/states")
    def state_rating_resource() -> str:
        """Per-state cost index, tobacco surcharge limit and base rate."""
        states = sorted(set(tables.geographic_index) | set(tables.base_rates))
        return json.dumps(
            {
                "version": tables.version,
                "states": {
                    code: {
                        "cost_index": tables.geographic_index.get(code, tables.default_cost_index),
                        "tobacco_limit": tables.tobacco_limits.get(code, tables.default_tobacco_limit),
                        "base_rate": tables.base_rates.get(code, tables.default_base_rate),
                    }
                    for code in states
                },
            },
            indent=2,
        )
