"""Age rating: covered-person age -> premium multiplier (ACA 3:1 curve)."""

from __future__ import annotations

import logging
import math

from compass.domains.insurance.domain_logic.rating_tables import (
    ADULT_RATING_AGE,
    DEFAULT_RATING_TABLES,
    MAX_RATED_AGE,
    RatingTables,
)

logger = logging.getLogger(__name__)

CHILD_MAX_AGE = 17
MEDICARE_AGE = 65


def _whole_age(age) -> int | None:
    """Floor a numeric age, or None for anything that is not a finite number."""
    if isinstance(age, bool):
        return None
    try:
        value = float(age)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    if math.isinf(value):
        return MAX_RATED_AGE + 1 if value > 0 else None
    return math.floor(value)


class AgeRatingModel:
    """Maps an age to its rating factor.

    Malformed input never raises: negatives, None and non-numeric values
    clamp to the child factor, ages past the table take the ceiling.

    Usage::

        model = AgeRatingModel()
        model.factor(40)   # 1.452
    """

    def __init__(self, tables: RatingTables = DEFAULT_RATING_TABLES) -> None:
        self._tables = tables

    @property
    def tables(self) -> RatingTables:
        return self._tables

    def factor(self, age) -> float:
        whole = _whole_age(age)
        if whole is None or whole < 0:
            logger.debug("Clamping malformed age %r to child factor", age)
            return self._tables.child_factor
        if whole <= CHILD_MAX_AGE:
            return self._tables.child_factor
        if whole < ADULT_RATING_AGE:
            return self._tables.age_curve[ADULT_RATING_AGE]
        if whole > MAX_RATED_AGE:
            return self._tables.ceiling_factor
        return self._tables.age_curve.get(whole, self._tables.ceiling_factor)


_DEFAULT_MODEL = AgeRatingModel()


def age_factor(age) -> float:
    """Rating factor for *age* under the embedded default tables."""
    return _DEFAULT_MODEL.factor(age)
