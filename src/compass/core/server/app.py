"""Coverage Compass MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from compass.core.config.settings import get_settings
from compass.domains.insurance.domain_logic.orchestrator import RecommendationOrchestrator
from compass.domains.insurance.prompts.insurance_prompts import register_insurance_prompts
from compass.domains.insurance.resources.rating_tables import register_rating_table_resources
from compass.domains.insurance.tools.analysis_tools import register_analysis_tools
from compass.domains.insurance.tools.audit_tools import register_audit_tools
from compass.domains.insurance.tools.planning_tools import register_planning_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Coverage Compass"
SERVER_VERSION = "0.1.0"


def create_app(
    *,
    orchestrator_override: RecommendationOrchestrator | None = None,
) -> FastMCP:
    """Create and configure the Coverage Compass MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Builds the orchestrator (rating tables, audit storage, analyzer assumptions)
    3. Registers all tools, resources, and prompts
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Health-insurance pricing and coverage planning server. "
            "Estimates ACA-rated household premiums, compares plans and what-if "
            "scenarios, analyzes COBRA and HSA decisions, and records every "
            "calculation in an auditable log."
        ),
    )

    # --- Initialize orchestrator ---
    if orchestrator_override is not None:
        orchestrator = orchestrator_override
    else:
        orchestrator = RecommendationOrchestrator.from_settings(settings)
    tables = orchestrator.calculator.tables
    logger.info("Using rating tables %s", tables.version)

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "rating_tables_version": tables.version,
            "audit_storage": type(orchestrator.audit.storage).__name__,
            "audit_version": orchestrator.audit.version,
            "calculations_logged": orchestrator.audit.storage.count(),
        }

    register_planning_tools(server, orchestrator)
    logger.info("Planning tools registered")

    register_analysis_tools(server, orchestrator)
    logger.info("Plan comparison and analysis tools registered")

    register_audit_tools(server, orchestrator.audit)
    logger.info("Calculation audit tools registered")

    # --- Register resources ---
    register_rating_table_resources(server, tables)

    # --- Register prompts ---
    register_insurance_prompts(server)

    return server


# Module-level instance for FastMCP discovery ("...app.py:mcp").
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
