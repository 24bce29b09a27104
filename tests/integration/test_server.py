"""Integration tests for the Coverage Compass MCP server."""

from __future__ import annotations

import asyncio
import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from compass.core.config.settings import Settings
from compass.core.server import main
from compass.core.server.app import SERVER_NAME, create_app
from compass.domains.insurance.domain_logic.orchestrator import RecommendationOrchestrator


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _payload(result) -> dict:
    content = getattr(result, "content", result)
    return json.loads(content[0].text)


ALL_EXPECTED_TOOLS = [
    "health_check",
    "estimate_household_premium",
    "recommend_coverage",
    "compare_scenarios",
    "compare_plans",
    "quick_compare_plans",
    "analyze_cobra",
    "analyze_hsa",
    "calculation_audit_summary",
    "get_calculation",
    "export_calculation_log",
]

HOUSEHOLD = {
    "residences": [{"zip": "33101", "state": "FL", "is_primary": True, "months_per_year": 12}],
    "adult_ages": [40, 38],
    "child_ages": [10],
    "annual_income": 90000,
}

PLAN_A = {
    "id": "a", "name": "Silver PPO", "issuer": "Acme", "metal_tier": "silver", "network_type": "PPO",
    "monthly_premium": 450, "deductible": 3000, "out_of_pocket_max": 8000, "primary_care_copay": 30,
}
PLAN_B = {
    "id": "b", "name": "Bronze HDHP", "issuer": "Acme", "metal_tier": "bronze", "network_type": "HDHP",
    "monthly_premium": 300, "deductible": 7000, "out_of_pocket_max": 9000, "hsa_eligible": True,
}


@pytest.fixture
def orchestrator():
    return RecommendationOrchestrator()


@pytest.fixture
def client(orchestrator):
    """Create an MCP client connected to a fresh server."""
    return Client(create_app(orchestrator_override=orchestrator))


def _call(client, name, args=None):
    async def _go():
        async with client:
            return await client.call_tool(name, args or {})
    return _run(_go())


def test_server_starts_and_lists_tools(client):
    """Server should start and expose all registered tools."""
    async def _check():
        async with client:
            tools = await client.list_tools()
            tool_names = [t.name for t in tools]
            for expected in ALL_EXPECTED_TOOLS:
                assert expected in tool_names, f"Missing tool: {expected}"
    _run(_check())


def test_health_check_returns_ok(client):
    data = _payload(_call(client, "health_check"))
    assert data["status"] == "ok"
    assert data["server"] == SERVER_NAME
    assert data["audit_storage"] == "InMemoryAuditStorage"
    assert data["calculations_logged"] == 0


class TestPlanningTools:
    def test_estimate_household_premium(self, client):
        data = _payload(_call(client, "estimate_household_premium", {
            "adult_ages": [40, 38], "child_ages": [10, 8, 6, 4], "state": "nc", "base_rate": 410,
        }))
        assert data["status"] == "ok"
        assert data["state"] == "NC"
        assert data["tier"] == "silver"
        assert data["rated_children"] == 3
        assert data["unrated_children"] == 1
        assert data["annual_premium"] == round(data["monthly_premium"] * 12, 2)
        assert set(data["premium_by_tier"]) == {"bronze", "silver", "gold", "platinum"}

    def test_bad_tier_is_rejected(self, client):
        with pytest.raises(ToolError):
            _call(client, "estimate_household_premium", {"adult_ages": [40], "state": "FL", "tier": "titanium"})

    def test_recommend_coverage(self, client):
        data = _payload(_call(client, "recommend_coverage", {"household": HOUSEHOLD}))
        assert data["status"] == "ok"
        recommendation = data["recommendation"]
        assert recommendation["recommended_insurance"] == "Nationwide Flexible Family Plan"
        assert recommendation["hsa_analysis"] is not None

    def test_recommend_coverage_incomplete(self, client):
        data = _payload(_call(client, "recommend_coverage", {"household": {"adult_ages": [40]}}))
        assert data["status"] == "insufficient_input"

    def test_recommend_coverage_unknown_field(self, client):
        with pytest.raises(ToolError):
            _call(client, "recommend_coverage", {"household": {**HOUSEHOLD, "pets": 2}})

    def test_compare_scenarios_builtin(self, client):
        data = _payload(_call(client, "compare_scenarios", {"household": HOUSEHOLD}))
        comparison = data["comparison"]
        assert comparison["scenario_2"]["scenario"]["id"] == "high-utilization"

    def test_compare_scenarios_custom(self, client):
        data = _payload(_call(client, "compare_scenarios", {
            "household": HOUSEHOLD, "overrides": {"child_ages": [10, 0]},
        }))
        comparison = data["comparison"]
        assert comparison["scenario_2"]["scenario"]["id"] == "custom"
        assert comparison["cost_comparison"]["cheaper_scenario"] == "1"

    def test_compare_scenarios_unknown_alternative(self, client):
        with pytest.raises(ToolError):
            _call(client, "compare_scenarios", {"household": HOUSEHOLD, "alternative": "lottery-win"})


class TestAnalysisTools:
    def test_compare_plans(self, client):
        data = _payload(_call(client, "compare_plans", {"plan_a": PLAN_A, "plan_b": PLAN_B}))
        comparison = data["comparison"]
        assert comparison["overall_winner"]["plan"] in {"A", "B", "tie"}
        assert [s["name"] for s in comparison["scenarios"]] == [
            "Healthy Year", "Moderate Usage", "Chronic Condition", "Major Medical Event",
        ]

    def test_negative_premium_rejected(self, client):
        with pytest.raises(ToolError):
            _call(client, "compare_plans", {"plan_a": {**PLAN_A, "monthly_premium": -1}, "plan_b": PLAN_B})

    def test_quick_compare(self, client):
        data = _payload(_call(client, "quick_compare_plans", {"plan_a": PLAN_A, "plan_b": PLAN_B}))
        assert data["cheaper_monthly"] == "B"
        assert data["better_protection"] == "A"

    def test_analyze_cobra_with_drop_plan(self, client):
        data = _payload(_call(client, "analyze_cobra", {
            "current_monthly_cost": 400, "months_since_job_loss": 2,
            "alternative_low": 450, "alternative_high": 650,
            "job_loss_date": "2026-01-31", "next_open_enrollment": "2026-11-01",
        }))
        assert data["analysis"]["months_remaining"] == 16
        assert data["analysis"]["is_worth_it"] is False
        assert data["drop_plan"]["drop_date"] == "2026-11-01"

    def test_analyze_cobra_rejects_inverted_range(self, client):
        data = _payload(_call(client, "analyze_cobra", {
            "current_monthly_cost": 400, "months_since_job_loss": 2,
            "alternative_low": 650, "alternative_high": 450,
        }))
        assert data["status"] == "error"

    def test_analyze_hsa(self, client):
        data = _payload(_call(client, "analyze_hsa", {"family_size": 1, "age": 40, "annual_income": 80000}))
        assert data["analysis"]["max_contribution"] == 4400.0

    def test_analyze_hsa_rejects_bad_rate(self, client):
        with pytest.raises(ToolError):
            _call(client, "analyze_hsa", {
                "family_size": 1, "age": 40, "annual_income": 80000, "state_tax_rate": 5,
            })


class TestAuditTools:
    def test_calculations_are_recorded(self, client):
        async def _check():
            async with client:
                await client.call_tool("analyze_hsa", {"family_size": 2, "age": 45, "annual_income": 100000})
                summary = _payload(await client.call_tool("calculation_audit_summary", {}))
                assert summary["stats"]["total_calculations"] == 1
                entry = summary["recent_calculations"][0]
                assert entry["calculation_type"] == "hsa"

                by_hash = _payload(await client.call_tool("get_calculation", {"input_hash": entry["input_hash"]}))
                assert by_hash["entries"][0]["id"] == entry["id"]

                exported = _payload(await client.call_tool("export_calculation_log", {}))
                assert len(exported["logs"]) == 1
                assert set(exported) == {"exportedAt", "version", "logs"}
        _run(_check())

    def test_get_calculation_needs_a_key(self, client):
        assert _payload(_call(client, "get_calculation"))["status"] == "error"

    def test_get_calculation_not_found(self, client):
        assert _payload(_call(client, "get_calculation", {"entry_id": "log_missing"}))["status"] == "not_found"


class TestResourcesAndPrompts:
    def test_rating_table_resources(self, client):
        async def _check():
            async with client:
                current = await client.read_resource("rating-tables://insurance/current")
                assert json.loads(current[0].text)["version"]
                states = json.loads((await client.read_resource("rating-tables://insurance/states"))[0].text)
                assert states["states"]["NY"]["tobacco_limit"] == 0.0
        _run(_check())

    def test_prompts_listed(self, client):
        async def _check():
            async with client:
                names = {p.name for p in await client.list_prompts()}
                assert {"coverage_checkup_prompt", "plan_showdown_prompt",
                        "job_change_prompt", "what_if_prompt"} <= names
        _run(_check())


class TestEntryPoint:
    @pytest.mark.parametrize("host,expected", [
        ("127.0.0.1", True), ("localhost", True), ("::1", True), ("[::1]", True),
        (" LocalHost ", True), ("0.0.0.0", False), ("example.com", False),
    ])
    def test_loopback_detection(self, host, expected):
        assert main._is_loopback_host(host) is expected

    def test_refuses_public_bind(self, monkeypatch):
        monkeypatch.setenv("COMPASS_HOST", "0.0.0.0")
        monkeypatch.setenv("COMPASS_ALLOW_INSECURE_BIND", "false")
        with pytest.raises(RuntimeError, match="Refusing to bind"):
            main.run()

    def test_public_bind_allowed_with_override(self):
        settings = Settings(_env_file=None, compass_host="0.0.0.0", compass_allow_insecure_bind=True)
        main.ensure_safe_bind(settings)

    def test_loopback_bind_needs_no_override(self):
        main.ensure_safe_bind(Settings(_env_file=None, compass_host="::1"))

    def test_refusal_names_the_host(self):
        with pytest.raises(RuntimeError, match="'10.0.0.5'"):
            main.ensure_safe_bind(Settings(_env_file=None, compass_host="10.0.0.5"))
