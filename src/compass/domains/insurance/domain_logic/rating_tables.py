"""Versioned rating tables: age curve, geographic indices, tobacco limits, base rates.

The embedded defaults reflect the published CMS age curve and state cost
estimates. A yearly update can be shipped as a YAML file and loaded with
:func:`load_rating_tables`; anything the file omits keeps its default.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

RATING_TABLES_VERSION = "2026.1"

# ---------------------------------------------------------------------------
# Age curve (ACA 3:1, ages 21-64)
# ---------------------------------------------------------------------------

CHILD_AGE_FACTOR = 0.635        # ages 0-17
CEILING_AGE_FACTOR = 3.000      # age 64 and anything above the table
ADULT_RATING_AGE = 21           # ages 18-20 are rated as 21
MAX_RATED_AGE = 64
# Oldest adult pays at most this multiple of the youngest
MAX_AGE_RATIO = 3.0

_ADULT_CURVE = [
    1.000, 1.024, 1.048, 1.071, 1.095, 1.119, 1.143, 1.167, 1.190, 1.214,  # 21-30
    1.238, 1.262, 1.286, 1.310, 1.333, 1.357, 1.381, 1.405, 1.429, 1.452,  # 31-40
    1.476, 1.500, 1.524, 1.548, 1.571, 1.595, 1.619, 1.643, 1.667, 1.690,  # 41-50
    1.714, 1.738, 1.762, 1.786, 1.810, 1.833, 1.857, 1.881, 1.905, 1.952,  # 51-60
    2.000, 2.048, 2.095,                                                   # 61-63
    CEILING_AGE_FACTOR,                                                    # 64
]

DEFAULT_AGE_CURVE: dict[int, float] = {
    age: factor for age, factor in zip(range(ADULT_RATING_AGE, MAX_RATED_AGE + 1), _ADULT_CURVE)
}

# ---------------------------------------------------------------------------
# Geography
# ---------------------------------------------------------------------------

NATIONAL_COST_INDEX = 1.000
FEDERAL_TOBACCO_SURCHARGE_LIMIT = 0.50
NATIONAL_BASE_RATE = 410.0

# Multiplier against the national average premium
DEFAULT_GEOGRAPHIC_INDEX: dict[str, float] = {
    "AK": 1.450, "NY": 1.280, "MA": 1.250, "CT": 1.230, "NJ": 1.220,
    "VT": 1.210, "NH": 1.180, "RI": 1.170, "DE": 1.150, "MD": 1.140,
    "CA": 1.120, "WA": 1.110, "OR": 1.100, "CO": 1.090, "IL": 1.080,
    "FL": 1.070, "PA": 1.060, "ME": 1.050, "MN": 1.040, "WI": 1.030,
    "DC": 1.020, "VA": 1.010, "NC": 1.000, "NV": 1.000, "AZ": 0.990,
    "GA": 0.980, "MI": 0.970, "OH": 0.960, "IN": 0.950, "MO": 0.940,
    "SC": 0.930, "TN": 0.920, "KY": 0.910, "LA": 0.900, "MS": 0.890,
    "AR": 0.880, "OK": 0.870, "KS": 0.860, "NE": 0.855, "IA": 0.850,
    "ND": 0.845, "SD": 0.840, "MT": 0.835, "WY": 0.830, "ID": 0.825,
    "UT": 0.820, "NM": 0.815, "TX": 0.810, "WV": 0.805, "AL": 0.850,
    "HI": 1.150,
}

# States that cap (or prohibit) tobacco rating below the federal 50%
DEFAULT_TOBACCO_LIMITS: dict[str, float] = {
    "CA": 0.00, "CT": 0.00, "MA": 0.00, "NJ": 0.00,
    "NY": 0.00, "RI": 0.00, "VT": 0.00, "DC": 0.00,
    "AR": 0.20, "CO": 0.15, "KY": 0.40,
}

# Estimated age-21 silver premium per month
DEFAULT_BASE_RATES: dict[str, float] = {
    "AK": 650, "NY": 580, "MA": 560, "CT": 550, "NJ": 545,
    "VT": 535, "NH": 525, "RI": 515, "DE": 505, "MD": 500,
    "CA": 480, "WA": 470, "OR": 460, "CO": 450, "IL": 445,
    "FL": 440, "PA": 435, "ME": 430, "MN": 425, "WI": 420,
    "NC": 410, "NV": 410, "AZ": 405, "GA": 400, "MI": 395,
    "OH": 390, "IN": 385, "MO": 380, "SC": 375, "TN": 370,
    "KY": 365, "LA": 360, "MS": 355, "AR": 350, "OK": 345,
    "KS": 340, "NE": 338, "IA": 335, "ND": 332, "SD": 330,
    "MT": 328, "WY": 325, "ID": 322, "UT": 320, "NM": 318,
    "TX": 315, "WV": 312, "AL": 335, "HI": 505, "DC": 415,
    "VA": 412,
}

# ---------------------------------------------------------------------------
# Metal tiers (relative to silver)
# ---------------------------------------------------------------------------

DEFAULT_TIER_MULTIPLIERS: dict[str, float] = {
    "catastrophic": 0.60,
    "bronze": 0.75,
    "silver": 1.00,
    "gold": 1.30,
    "platinum": 1.60,
}

PRICED_TIERS = ("bronze", "silver", "gold", "platinum")


class RatingTablesError(ValueError):
    """Raised when a rating table file cannot be parsed or violates the rating rules."""


@dataclass(frozen=True)
class RatingTables:
    """One immutable version of every lookup table the rating leaves read."""

    version: str = RATING_TABLES_VERSION
    age_curve: dict[int, float] = field(default_factory=lambda: dict(DEFAULT_AGE_CURVE))
    child_factor: float = CHILD_AGE_FACTOR
    ceiling_factor: float = CEILING_AGE_FACTOR
    geographic_index: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_GEOGRAPHIC_INDEX)
    )
    tobacco_limits: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TOBACCO_LIMITS))
    base_rates: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_BASE_RATES))
    tier_multipliers: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TIER_MULTIPLIERS)
    )
    default_cost_index: float = NATIONAL_COST_INDEX
    default_tobacco_limit: float = FEDERAL_TOBACCO_SURCHARGE_LIMIT
    default_base_rate: float = NATIONAL_BASE_RATE

    def validate(self) -> None:
        """Check the invariants pricing relies on.

        Raises:
            RatingTablesError: If the curve is not strictly increasing from 1.0
                at 21 up to the 3:1 ceiling at 64, a tobacco limit leaves
                [0, 0.5], or the tier order breaks.
        """
        ages = sorted(self.age_curve)
        if not ages or ages[0] != ADULT_RATING_AGE or ages[-1] != MAX_RATED_AGE:
            raise RatingTablesError(
                f"Age curve must cover ages {ADULT_RATING_AGE}-{MAX_RATED_AGE}, got {ages[:1]}..{ages[-1:]}"
            )
        if ages != list(range(ADULT_RATING_AGE, MAX_RATED_AGE + 1)):
            raise RatingTablesError("Age curve has gaps")
        factors = [self.age_curve[a] for a in ages]
        if factors[0] != 1.0:
            raise RatingTablesError(f"Age {ADULT_RATING_AGE} factor must be 1.0, got {factors[0]}")
        if any(b <= a for a, b in zip(factors, factors[1:])):
            raise RatingTablesError("Age curve must be strictly increasing")
        if not math.isclose(self.ceiling_factor, MAX_AGE_RATIO * factors[0]):
            raise RatingTablesError(
                f"Ceiling factor must be {MAX_AGE_RATIO:g}x the age {ADULT_RATING_AGE} factor, "
                f"got {self.ceiling_factor}"
            )
        if not math.isclose(factors[-1], self.ceiling_factor):
            raise RatingTablesError(
                f"Age {MAX_RATED_AGE} factor must equal the ceiling factor {self.ceiling_factor}, "
                f"got {factors[-1]}"
            )

        for state, limit in self.tobacco_limits.items():
            if not 0.0 <= limit <= FEDERAL_TOBACCO_SURCHARGE_LIMIT:
                raise RatingTablesError(f"Tobacco limit for {state} out of range: {limit}")

        missing = [t for t in (*PRICED_TIERS, "catastrophic") if t not in self.tier_multipliers]
        if missing:
            raise RatingTablesError(f"Missing tier multipliers: {missing}")
        ordered = [self.tier_multipliers[t] for t in PRICED_TIERS]
        if any(b <= a for a, b in zip(ordered, ordered[1:])):
            raise RatingTablesError("Tier multipliers must increase bronze < silver < gold < platinum")


DEFAULT_RATING_TABLES = RatingTables()


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _state_map(data: Any, name: str) -> dict[str, float]:
    if not isinstance(data, dict):
        raise RatingTablesError(f"'{name}' must be a mapping of state code to number")
    try:
        return {str(k).upper(): float(v) for k, v in data.items()}
    except (TypeError, ValueError) as exc:
        raise RatingTablesError(f"'{name}' contains a non-numeric value") from exc


def rating_tables_from_dict(data: dict[str, Any], base: RatingTables = DEFAULT_RATING_TABLES) -> RatingTables:
    """Overlay a parsed table document onto *base* and validate the result."""
    updates: dict[str, Any] = {}

    if "version" in data:
        updates["version"] = str(data["version"])
    if "age_curve" in data:
        curve = data["age_curve"]
        if not isinstance(curve, dict):
            raise RatingTablesError("'age_curve' must be a mapping of age to factor")
        try:
            updates["age_curve"] = {int(k): float(v) for k, v in curve.items()}
        except (TypeError, ValueError) as exc:
            raise RatingTablesError("'age_curve' contains a non-numeric entry") from exc
    for key in ("geographic_index", "tobacco_limits", "base_rates"):
        if key in data:
            updates[key] = {**getattr(base, key), **_state_map(data[key], key)}
    if "tier_multipliers" in data:
        tiers = data["tier_multipliers"]
        if not isinstance(tiers, dict):
            raise RatingTablesError("'tier_multipliers' must be a mapping")
        try:
            overrides = {str(k).lower(): float(v) for k, v in tiers.items()}
        except (TypeError, ValueError) as exc:
            raise RatingTablesError("'tier_multipliers' contains a non-numeric value") from exc
        updates["tier_multipliers"] = {**base.tier_multipliers, **overrides}
    for key in ("child_factor", "ceiling_factor", "default_cost_index",
                "default_tobacco_limit", "default_base_rate"):
        if key in data:
            try:
                updates[key] = float(data[key])
            except (TypeError, ValueError) as exc:
                raise RatingTablesError(f"'{key}' must be a number") from exc

    tables = replace(base, **updates)
    tables.validate()
    return tables


def load_rating_tables(path: str | Path) -> RatingTables:
    """Load a YAML rating table file.

    Raises:
        RatingTablesError: If the file is missing, not a mapping, or invalid.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise RatingTablesError(f"Rating table file does not exist: {path}")
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise RatingTablesError(f"Invalid YAML in {path}") from exc
    if not isinstance(data, dict):
        raise RatingTablesError(f"Rating table file must contain a mapping: {path}")

    tables = rating_tables_from_dict(data)
    logger.info("Loaded rating tables %s from %s", tables.version, path)
    return tables
