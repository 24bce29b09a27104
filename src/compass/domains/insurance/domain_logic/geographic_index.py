"""Per-state cost multipliers, tobacco-surcharge ceilings and base rates."""

from __future__ import annotations

import logging

from compass.domains.insurance.domain_logic.rating_tables import (
    DEFAULT_RATING_TABLES,
    RatingTables,
)

logger = logging.getLogger(__name__)


def normalize_state(state) -> str:
    """Upper-case, trimmed two-letter code; empty string for non-strings."""
    if not isinstance(state, str):
        return ""
    return state.strip().upper()


class GeographicCostIndex:
    """State lookups with national-average fallbacks for unknown codes."""

    def __init__(self, tables: RatingTables = DEFAULT_RATING_TABLES) -> None:
        self._tables = tables

    def cost_index(self, state) -> float:
        code = normalize_state(state)
        if code not in self._tables.geographic_index:
            logger.debug("No cost index for %r; using national average", state)
            return self._tables.default_cost_index
        return self._tables.geographic_index[code]

    def tobacco_surcharge_limit(self, state) -> float:
        code = normalize_state(state)
        return self._tables.tobacco_limits.get(code, self._tables.default_tobacco_limit)

    def base_rate(self, state) -> float:
        code = normalize_state(state)
        return float(self._tables.base_rates.get(code, self._tables.default_base_rate))

    def prohibits_tobacco_rating(self, state) -> bool:
        return self.tobacco_surcharge_limit(state) == 0.0
