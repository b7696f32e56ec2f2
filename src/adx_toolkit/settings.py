# SPDX-License-Identifier: MIT
"""Toolkit configuration.

This module exposes :class:`Settings`, a ``pydantic-settings`` model that
combines values from an optional YAML file with ``ADX_`` environment
variables. Environment variables take precedence over file-based values and
the merged configuration is validated before use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """Settings for :class:`~adx_toolkit.helper.KustoHelper` and logging."""

    retries: int = Field(2, ge=0, le=5, description="Number of retry attempts.")
    base_wait_time: int = Field(
        2, ge=0, description="Base of the exponential backoff in seconds."
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging verbosity level."
    )
    cluster: str | None = Field(None, description="Default Kusto cluster URL.")
    database: str | None = Field(None, description="Default database name.")
    app_id: str | None = Field(None, description="AAD application (client) ID.")
    app_secret: SecretStr | None = Field(
        None, description="AAD application secret.", repr=False
    )
    app_tenant: str | None = Field(None, description="AAD tenant ID.")
    logfire_token: SecretStr | None = Field(
        None, description="Logfire authentication token, if available.", repr=False
    )

    model_config = SettingsConfigDict(env_prefix="ADX_", extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; the environment overrides them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def _read_config(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise RuntimeError(f"Cannot read configuration '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise RuntimeError(f"Configuration '{path}' must be a mapping")
    return data


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load and validate toolkit settings.

    Args:
        config_path: Optional path to a YAML configuration file. A ``.env``
            file in the working directory is read when present.

    Returns:
        Settings: Fully validated configuration.

    Raises:
        RuntimeError: If the file cannot be read or values are invalid.
    """
    config = _read_config(Path(config_path)) if config_path else {}
    env_file_path = Path(".env")
    env_file = env_file_path if env_file_path.exists() else None
    try:
        return Settings(**config, _env_file=env_file)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(map(str, error['loc']))}: {error['msg']}"
            for error in exc.errors()
        )
        raise RuntimeError(f"Invalid configuration: {details}") from exc


__all__ = ["Settings", "load_settings"]
