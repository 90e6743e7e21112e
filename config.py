"""
config.py

Responsibility: Loads application settings from environment variables into
an immutable Settings value.
Does NOT: configure logging, create HTTP clients, or start the scheduler.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass

from exceptions import ConfigError
from services.ip_service import DEFAULT_ENDPOINTS, DEFAULT_TIMEOUT

# Refresh the served IP once a day unless told otherwise.
DEFAULT_REFRESH_INTERVAL = 24 * 60 * 60


@dataclass(frozen=True)
class Settings:
    """
    All runtime settings, read once at startup.

    Attributes:
        app_env: Value of APP_ENV (None when unset); drives log verbosity.
        endpoints: Echo-service URLs raced by IpService.
        timeout: Per-request upper bound in seconds.
        refresh_interval: Seconds between background IP refreshes.
        host: Bind address of the HTTP server.
        port: Bind port of the HTTP server.
    """

    app_env: str | None = None
    endpoints: tuple[str, ...] = DEFAULT_ENDPOINTS
    timeout: float = DEFAULT_TIMEOUT
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    host: str = "0.0.0.0"
    port: int = 8080


def _parse_endpoints(raw: str) -> tuple[str, ...]:
    endpoints = tuple(url.strip() for url in raw.split(",") if url.strip())
    if not endpoints:
        raise ConfigError("WHATSMYIP_ENDPOINTS must list at least one URL.")
    return endpoints


def _parse_positive(name: str, raw: str, kind: type) -> float | int:
    try:
        value = kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}.") from exc
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{name} must be a positive finite number, got {raw!r}.")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Builds Settings from the environment.

    Recognised variables: APP_ENV, WHATSMYIP_ENDPOINTS (comma-separated),
    WHATSMYIP_TIMEOUT, WHATSMYIP_REFRESH_INTERVAL, HOST and PORT. Unset
    variables fall back to the Settings defaults.

    Args:
        environ: Mapping to read from; os.environ when omitted.

    Returns:
        The loaded Settings.

    Raises:
        ConfigError: If a variable is present but unusable.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    endpoints = defaults.endpoints
    if "WHATSMYIP_ENDPOINTS" in env:
        endpoints = _parse_endpoints(env["WHATSMYIP_ENDPOINTS"])

    timeout = defaults.timeout
    if "WHATSMYIP_TIMEOUT" in env:
        timeout = _parse_positive("WHATSMYIP_TIMEOUT", env["WHATSMYIP_TIMEOUT"], float)

    refresh_interval = defaults.refresh_interval
    if "WHATSMYIP_REFRESH_INTERVAL" in env:
        refresh_interval = _parse_positive(
            "WHATSMYIP_REFRESH_INTERVAL", env["WHATSMYIP_REFRESH_INTERVAL"], int
        )

    port = defaults.port
    if "PORT" in env:
        port = _parse_positive("PORT", env["PORT"], int)

    return Settings(
        app_env=env.get("APP_ENV"),
        endpoints=endpoints,
        timeout=timeout,
        refresh_interval=refresh_interval,
        host=env.get("HOST", defaults.host),
        port=port,
    )
