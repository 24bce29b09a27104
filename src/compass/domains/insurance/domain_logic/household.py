"""Household premium aggregation with the three-child rating cap."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from compass.domains.insurance.domain_logic.premium_calculator import (
    PremiumCalculator,
    round_cents,
)
from compass.domains.insurance.domain_logic.rating_tables import PRICED_TIERS

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationAuditLogger

logger = logging.getLogger(__name__)

# ACA family rating: only the first three children under 21 are charged.
# Which three count is taken literally as input order.
MAX_RATED_CHILDREN = 3


def rated_children(child_ages: Sequence) -> list:
    """The children that carry a premium: the first three as supplied."""
    return list(child_ages)[:MAX_RATED_CHILDREN]


class HouseholdAggregator:
    """Sums per-person premiums across a household.

    Usage::

        aggregator = HouseholdAggregator(PremiumCalculator())
        aggregator.household_premium(410, [40, 38], [10, 8], "NC", "silver")
    """

    def __init__(
        self,
        calculator: PremiumCalculator | None = None,
        *,
        audit_logger: CalculationAuditLogger | None = None,
    ) -> None:
        self.calculator = calculator or PremiumCalculator()
        self._audit = audit_logger

    def _household_premium(
        self,
        base_rate: float,
        adult_ages: Sequence,
        child_ages: Sequence,
        state: str,
        tier: str,
        tobacco_flags: Sequence[bool] | None,
    ) -> float:
        flags = list(tobacco_flags or [])
        total = 0.0
        for index, age in enumerate(adult_ages):
            uses_tobacco = bool(flags[index]) if index < len(flags) else False
            total += self.calculator.rate(base_rate, age, state, tier, uses_tobacco)

        children = rated_children(child_ages)
        if len(child_ages) > len(children):
            logger.debug(
                "Household has %d children; only the first %d are rated",
                len(child_ages), MAX_RATED_CHILDREN,
            )
        for age in children:
            total += self.calculator.rate(base_rate, age, state, tier, False)
        return round_cents(total)

    def household_premium(
        self,
        base_rate: float,
        adult_ages: Sequence,
        child_ages: Sequence,
        state: str,
        tier: str = "silver",
        tobacco_flags: Sequence[bool] | None = None,
    ) -> float:
        """Monthly household premium, rounded to cents.

        Tobacco flags align to adults by index; a missing flag means non-user.
        Children are never surcharged.
        """
        args = {
            "base_rate": base_rate,
            "adult_ages": list(adult_ages),
            "child_ages": list(child_ages),
            "state": state,
            "tier": tier,
            "tobacco_flags": list(tobacco_flags) if tobacco_flags is not None else None,
        }
        if self._audit is None:
            return self._household_premium(**args)
        return self._audit.log_calculation(
            "household-premium", args, lambda data: self._household_premium(**data)
        )

    def premium_range(
        self,
        adult_ages: Sequence,
        child_ages: Sequence,
        state: str,
        tobacco_flags: Sequence[bool] | None = None,
    ) -> dict[str, float]:
        """Household total per priced tier, using the state's base rate."""
        base_rate = self.calculator.geography.base_rate(state)
        return {
            tier: self._household_premium(
                base_rate, adult_ages, child_ages, state, tier, tobacco_flags
            )
            for tier in PRICED_TIERS
        }
