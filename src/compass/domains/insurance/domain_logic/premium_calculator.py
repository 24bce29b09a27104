"""Per-person premium pricing: base rate x age x geography x tier x tobacco."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from compass.domains.insurance.domain_logic.age_rating import AgeRatingModel
from compass.domains.insurance.domain_logic.geographic_index import GeographicCostIndex
from compass.domains.insurance.domain_logic.rating_tables import (
    DEFAULT_RATING_TABLES,
    PRICED_TIERS,
    RatingTables,
)

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationAuditLogger

logger = logging.getLogger(__name__)

TOBACCO_MIN_AGE = 18


def round_cents(amount: float) -> float:
    return round(float(amount), 2)


def normalize_tier(tier) -> str:
    """Lower-case tier name; raises ValueError for anything unknown."""
    name = str(tier).strip().lower()
    if name not in DEFAULT_RATING_TABLES.tier_multipliers:
        raise ValueError(
            f"Unknown metal tier {tier!r}. "
            f"Must be one of: {', '.join(DEFAULT_RATING_TABLES.tier_multipliers)}"
        )
    return name


class PremiumCalculator:
    """Prices one covered person from the rating leaves.

    The two leaves and the tier table all come from the same
    :class:`RatingTables` version, so a yearly table swap is one argument.
    """

    def __init__(
        self,
        tables: RatingTables = DEFAULT_RATING_TABLES,
        *,
        audit_logger: CalculationAuditLogger | None = None,
    ) -> None:
        self._tables = tables
        self.age_rating = AgeRatingModel(tables)
        self.geography = GeographicCostIndex(tables)
        self._audit = audit_logger

    @property
    def tables(self) -> RatingTables:
        return self._tables

    def tier_multiplier(self, tier) -> float:
        return self._tables.tier_multipliers[normalize_tier(tier)]

    def tobacco_multiplier(self, age, state, is_tobacco_user: bool) -> float:
        """``1 + state limit`` for adult users, else 1.0. Minors are never surcharged."""
        if not is_tobacco_user:
            return 1.0
        try:
            adult = float(age) >= TOBACCO_MIN_AGE
        except (TypeError, ValueError):
            adult = False
        if not adult:
            return 1.0
        return 1.0 + self.geography.tobacco_surcharge_limit(state)

    def rate(self, base_rate: float, age, state, tier, is_tobacco_user: bool) -> float:
        """Same as :meth:`price` without the audit record."""
        premium = (
            float(base_rate)
            * self.age_rating.factor(age)
            * self.geography.cost_index(state)
            * self.tier_multiplier(tier)
            * self.tobacco_multiplier(age, state, is_tobacco_user)
        )
        return round_cents(premium)

    def price(
        self,
        base_rate: float,
        age,
        state: str,
        tier: str = "silver",
        is_tobacco_user: bool = False,
    ) -> float:
        """Monthly premium for one person, rounded to cents."""
        if self._audit is None:
            return self.rate(base_rate, age, state, tier, is_tobacco_user)
        return self._audit.log_calculation(
            "premium",
            {
                "base_rate": base_rate,
                "age": age,
                "state": state,
                "tier": tier,
                "is_tobacco_user": is_tobacco_user,
            },
            lambda data: self.rate(**data),
        )

    def price_across_tiers(
        self,
        base_rate: float,
        age,
        state: str,
        is_tobacco_user: bool = False,
    ) -> dict[str, float]:
        """Bronze, silver, gold and platinum prices for one person."""
        return {
            tier: self.rate(base_rate, age, state, tier, is_tobacco_user)
            for tier in PRICED_TIERS
        }

    def price_for_state(
        self,
        age,
        state: str,
        tier: str = "silver",
        is_tobacco_user: bool = False,
    ) -> float:
        """Price using the state's estimated base rate."""
        return self.price(self.geography.base_rate(state), age, state, tier, is_tobacco_user)

    def explain(self, base_rate: float, age, state: str, tier: str = "silver",
                is_tobacco_user: bool = False) -> dict[str, Any]:
        """Factor-by-factor breakdown of one price."""
        return {
            "base_rate": float(base_rate),
            "age_factor": self.age_rating.factor(age),
            "geographic_index": self.geography.cost_index(state),
            "tier_multiplier": self.tier_multiplier(tier),
            "tobacco_multiplier": self.tobacco_multiplier(age, state, is_tobacco_user),
            "monthly_premium": self.rate(base_rate, age, state, tier, is_tobacco_user),
            "rating_tables_version": self._tables.version,
        }
