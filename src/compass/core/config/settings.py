"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Coverage Compass server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Default to loopback; there is no auth layer in front of the tools.
    compass_host: str = "127.0.0.1"
    compass_port: int = 8001
    compass_log_level: str = "info"
    # Binding to a non-loopback host is refused unless this is set true.
    compass_allow_insecure_bind: bool = False

    # Rating tables (empty = embedded defaults)
    rating_tables_path: str = ""

    # Calculation audit log ("" = in-memory only)
    audit_db_path: str = ""
    audit_version: str = "1.0.0"
    audit_max_entries: int | None = None

    # Analyzer assumptions
    cobra_cost_markup: float = 3.5
    hsa_annual_return: float = 0.07
    hsa_plan_year: int = 2026


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
