# SPDX-License-Identifier: MIT
"""Logfire setup driven by :class:`~adx_toolkit.settings.Settings`."""

from __future__ import annotations

from typing import Literal

import logfire

from .settings import Settings, load_settings

LogfireLevel = Literal["fatal", "error", "warn", "notice", "info", "debug", "trace"]

_LEVELS: dict[str, LogfireLevel] = {
    "CRITICAL": "fatal",
    "ERROR": "error",
    "WARNING": "warn",
    "INFO": "info",
    "DEBUG": "debug",
}

# Attribute names that must never reach exported telemetry.
_SECRET_PATTERNS = ["app_secret", "app_key", "client_secret"]


def logfire_level(log_level: str) -> LogfireLevel:
    """Map a ``logging``-style level name onto Logfire's level names."""
    return _LEVELS.get(log_level.upper(), "info")


def init_logfire(settings: Settings | None = None) -> Settings:
    """Configure Logfire from ``settings`` and return the settings used.

    Telemetry is exported only when ``logfire_token`` is set; otherwise spans
    and logs stay on the console. Settings are loaded from the environment
    when not supplied.
    """
    settings = settings or load_settings()
    token = settings.logfire_token.get_secret_value() if settings.logfire_token else None
    level = logfire_level(settings.log_level)
    logfire.configure(
        token=token,
        send_to_logfire="if-token-present",
        service_name="adx-toolkit",
        console=logfire.ConsoleOptions(
            min_log_level=level,
            show_project_link=False,
        ),
        min_level=level,
        scrubbing=logfire.ScrubbingOptions(extra_patterns=_SECRET_PATTERNS),
    )
    logfire.debug(
        "Configured logfire",
        exporting=token is not None,
        cluster=settings.cluster,
        database=settings.database,
    )
    return settings


__all__ = ["init_logfire", "logfire_level"]
