"""Shared test fixtures for Coverage Compass tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATING_TABLES_PATH", "")
    monkeypatch.setenv("AUDIT_DB_PATH", "")
    monkeypatch.delenv("AUDIT_MAX_ENTRIES", raising=False)
    monkeypatch.delenv("COBRA_COST_MARKUP", raising=False)
    monkeypatch.delenv("HSA_ANNUAL_RETURN", raising=False)
    monkeypatch.delenv("HSA_PLAN_YEAR", raising=False)

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from compass.core.audit.logger import CalculationAuditLogger  # noqa: E402
from compass.core.audit.storage import InMemoryAuditStorage  # noqa: E402
from compass.domains.insurance.domain_logic.models import (  # noqa: E402
    Household,
    PlanOffer,
    Residence,
    UtilizationProfile,
)
from compass.domains.insurance.domain_logic.orchestrator import (  # noqa: E402
    RecommendationOrchestrator,
)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_household(
    states: tuple[str, ...] = ("FL",),
    adult_ages: list[int] | None = None,
    child_ages: list[int] | None = None,
    **kwargs,
) -> Household:
    """Create a household with sensible defaults; first state is primary."""
    residences = [
        Residence(zip=f"{i:05d}", state=state, is_primary=(i == 0), months_per_year=12 // len(states))
        for i, state in enumerate(states)
    ]
    return Household(
        residences=residences,
        adult_ages=adult_ages if adult_ages is not None else [40],
        child_ages=child_ages or [],
        **kwargs,
    )


def make_plan(id: str = "A", **overrides) -> PlanOffer:
    """Create a plan offer with silver-PPO defaults."""
    values = {
        "id": id,
        "name": f"Plan {id}",
        "issuer": "Acme Health",
        "metal_tier": "silver",
        "network_type": "PPO",
        "monthly_premium": 450.0,
        "deductible": 3000.0,
        "out_of_pocket_max": 8000.0,
        "primary_care_copay": 30.0,
        "specialist_copay": 60.0,
        "generic_drug_copay": 10.0,
        "brand_drug_copay": 40.0,
        "er_copay": 400.0,
    }
    values.update(overrides)
    return PlanOffer(**values)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def audit() -> CalculationAuditLogger:
    """A calculation audit logger backed by in-memory storage."""
    return CalculationAuditLogger(InMemoryAuditStorage())


@pytest.fixture
def orchestrator(audit) -> RecommendationOrchestrator:
    return RecommendationOrchestrator(audit_logger=audit)


@pytest.fixture
def healthy_profile() -> UtilizationProfile:
    return UtilizationProfile(primary_care_visits=1)


@pytest.fixture
def heavy_profile() -> UtilizationProfile:
    return UtilizationProfile(
        primary_care_visits=12,
        specialist_visits=6,
        er_visits=1,
        prescriptions_per_month=3,
        prescription_tier=2,
        has_chronic_conditions=True,
        chronic_condition_count=2,
    )


@pytest.fixture
def household_factory():
    """Builder for households (see make_household)."""
    return make_household


@pytest.fixture
def plan_factory():
    """Builder for plan offers (see make_plan)."""
    return make_plan
