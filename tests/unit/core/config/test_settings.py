"""Tests for environment-driven settings."""

from __future__ import annotations

from compass.core.config.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.compass_host == "127.0.0.1"
        assert settings.compass_port == 8001
        assert settings.compass_allow_insecure_bind is False
        assert settings.rating_tables_path == ""
        assert settings.audit_db_path == ""
        assert settings.audit_max_entries is None
        assert settings.cobra_cost_markup == 3.5
        assert settings.hsa_annual_return == 0.07
        assert settings.hsa_plan_year == 2026

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("COMPASS_PORT", "9100")
        monkeypatch.setenv("COMPASS_ALLOW_INSECURE_BIND", "true")
        monkeypatch.setenv("COBRA_COST_MARKUP", "4.0")
        monkeypatch.setenv("AUDIT_MAX_ENTRIES", "500")
        settings = get_settings()
        assert settings.compass_port == 9100
        assert settings.compass_allow_insecure_bind is True
        assert settings.cobra_cost_markup == 4.0
        assert settings.audit_max_entries == 500
