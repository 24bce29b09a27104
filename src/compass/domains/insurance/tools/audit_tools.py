"""MCP tools for viewing the calculation audit trail.

Every premium, comparison and recommendation the server computes is
recorded with its input, output and a short input hash, so an answer can
be traced back to exactly what produced it.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationAuditLogger

logger = logging.getLogger(__name__)


def register_audit_tools(
    mcp: FastMCP,
    audit_logger: CalculationAuditLogger,
) -> None:
    """Register calculation audit tools on the MCP server."""

    @mcp.tool
    async def calculation_audit_summary(
        ctx: Context,
        limit: int = 10,
        calculation_type: str = "",
    ) -> str:
        """View calculation counts and the most recent calculations.

        Args:
            limit: Number of recent entries to show (default: 10).
            calculation_type: Optional filter, e.g. 'premium', 'recommendation'
                or 'plan-comparison'.
        """
        if calculation_type:
            entries = audit_logger.get_logs_by_type(calculation_type)[:limit]
        else:
            entries = audit_logger.get_recent_logs(limit)

        # Inputs and outputs stay in the export; the summary only identifies entries
        display = [
            {
                "id": e.id,
                "timestamp": e.timestamp,
                "calculation_type": e.calculation_type,
                "input_hash": e.input_hash,
                "duration_ms": e.duration_ms,
            }
            for e in entries
        ]
        return json.dumps({
            "status": "ok",
            "version": audit_logger.version,
            "stats": audit_logger.get_stats(),
            "recent_calculations": display,
        }, indent=2)

    @mcp.tool
    async def get_calculation(
        ctx: Context,
        entry_id: str = "",
        input_hash: str = "",
    ) -> str:
        """Fetch full calculation records by entry id or by input hash.

        Args:
            entry_id: Id of a single entry (e.g. 'log_3f2a...').
            input_hash: 8-character input hash; returns every matching entry.
        """
        if entry_id:
            entry = audit_logger.get_log(entry_id)
            entries = [entry] if entry is not None else []
        elif input_hash:
            entries = audit_logger.get_logs_by_hash(input_hash)
        else:
            return json.dumps({
                "status": "error",
                "message": "Provide entry_id or input_hash.",
            })
        if not entries:
            return json.dumps({"status": "not_found", "entries": []}, indent=2)
        return json.dumps({"status": "ok", "entries": [e.to_dict() for e in entries]}, indent=2)

    @mcp.tool
    async def export_calculation_log(ctx: Context) -> str:
        """Export the whole calculation log as JSON ({exportedAt, version, logs})."""
        logger.info("Exporting calculation log")
        return audit_logger.export_logs()
