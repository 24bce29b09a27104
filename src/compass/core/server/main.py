"""Coverage Compass entry point: ``coverage-compass`` or ``python -m compass.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address
from typing import TYPE_CHECKING

from compass.core.config.settings import get_settings
from compass.core.server.app import SERVER_NAME, create_app

if TYPE_CHECKING:
    from compass.core.config.settings import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOOPBACK_NAMES = frozenset({"localhost", "ip6-localhost"})


def _is_loopback_host(host: str) -> bool:
    name = host.strip().strip("[]").lower()
    if name in LOOPBACK_NAMES:
        return True
    try:
        return ip_address(name).is_loopback
    except ValueError:
        return False


def ensure_safe_bind(settings: Settings) -> None:
    """Refuse a non-loopback bind unless explicitly allowed.

    The tools have no auth layer, so exposing them beyond this machine has
    to be an opt-in.

    Raises:
        RuntimeError: If the host is not loopback and the override is off.
    """
    if _is_loopback_host(settings.compass_host):
        return
    if not settings.compass_allow_insecure_bind:
        raise RuntimeError(
            f"Refusing to bind {SERVER_NAME} to {settings.compass_host!r}: the MCP tools have no "
            "auth layer. Set COMPASS_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.warning("Binding %s to non-loopback host %s", SERVER_NAME, settings.compass_host)


def run() -> None:
    """Start the Coverage Compass MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.compass_log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    ensure_safe_bind(settings)

    logger.info(
        "Starting %s on %s:%d (audit log: %s)",
        SERVER_NAME,
        settings.compass_host,
        settings.compass_port,
        settings.audit_db_path or "in-memory",
    )
    create_app().run(
        transport="streamable-http",
        host=settings.compass_host,
        port=settings.compass_port,
    )


if __name__ == "__main__":
    run()
