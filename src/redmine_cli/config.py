"""Configuration management for redmine-cli.

Loads configuration from layered YAML files and environment variables using
Pydantic. Files are read in this order, later ones overriding earlier ones:

1. the global file in the application directory (and the legacy macOS
   preferences file),
2. ``.redmine.yaml`` files from the filesystem root down to the current
   directory, so the nearest one wins,
3. an explicit file passed with ``--config``.

``REDMINE_*`` environment variables override every file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from redmine_cli.errors import ConfigError
from redmine_cli.logging import get_logger

logger = get_logger(__name__)

APP_NAME = "redmine"
LOCAL_CONFIG_NAME = ".redmine.yaml"
LEGACY_GLOBAL_CONFIG = Path("~/Library/Preferences/redmine.yaml")

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="WARNING", description="Log level")
    format: str = Field(default="console", description="Log format (console or json)")
    file: Path | None = Field(default=None, description="Optional log file path")

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if isinstance(v, str):
            v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("console", "json"):
            raise ValueError(f"Invalid log format: {v}")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="REDMINE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    api_key: str | None = Field(default=None, description="Redmine API key")
    server: str | None = Field(default=None, description="Base URL of the Redmine server")
    project: str | None = Field(default=None, description="Project identifier")
    me: str | None = Field(default=None, description="Your display name on the server")
    skip_certificate_validation: bool = Field(
        default=False,
        description="Do not verify the server's TLS certificate",
    )
    require_parent: bool = Field(
        default=False,
        description="Ask for a parent issue when creating issues without one",
    )
    editor: str | None = Field(
        default=None,
        description="Editor command (defaults to $VISUAL, $EDITOR, then vi)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="HTTP request timeout in seconds",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("server", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Any) -> Any:
        """Normalize the server URL so paths can be appended."""
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            return v or None
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; the environment must win over them
        return env_settings, init_settings, file_secret_settings


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary containing the configuration, with snake_case keys.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise yaml.YAMLError(f"Expected a mapping at the top of {config_path}")

    return normalize_keys(config)


def normalize_keys(config: dict[str, Any]) -> dict[str, Any]:
    """Convert camelCase keys (``apiKey``) to snake_case (``api_key``), recursively."""
    normalized: dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(key, str):
            key = _CAMEL_BOUNDARY.sub("_", key).lower()
        if isinstance(value, dict):
            value = normalize_keys(value)
        normalized[key] = value
    return normalized


def expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand environment variables in configuration values.

    Supports ${VAR_NAME} syntax for environment variable expansion.

    Args:
        config: Configuration dictionary.

    Returns:
        Configuration with environment variables expanded.
    """

    def expand_value(value: Any) -> Any:
        if isinstance(value, str):
            for var_name in _ENV_VAR_PATTERN.findall(value):
                env_value = os.environ.get(var_name, "")
                value = value.replace(f"${{{var_name}}}", env_value)
            return value
        elif isinstance(value, dict):
            return {k: expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(item) for item in value]
        return value

    return expand_value(config)


def global_config_paths() -> list[Path]:
    """Return the global config files, lowest precedence first."""
    return [
        LEGACY_GLOBAL_CONFIG.expanduser(),
        Path(click.get_app_dir(APP_NAME)) / "config.yaml",
    ]


def local_config_paths(start: Path | None = None) -> list[Path]:
    """Return the ``.redmine.yaml`` candidates from the root down to ``start``."""
    start = (start or Path.cwd()).resolve()
    directories = [start, *start.parents]
    return [directory / LOCAL_CONFIG_NAME for directory in reversed(directories)]


def discover_config_files(start: Path | None = None) -> list[Path]:
    """Find every existing config file, lowest precedence first."""
    candidates = [*global_config_paths(), *local_config_paths(start)]
    return [path for path in candidates if path.is_file()]


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two config dictionaries, descending into nested sections."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(
    config_path: Path | None = None,
    start: Path | None = None,
    discover: bool = True,
) -> Settings:
    """Load application settings from YAML files and environment variables.

    Environment variables take precedence over YAML configuration.

    Args:
        config_path: Optional explicit config file, applied after the
                    discovered ones. It must exist.
        start: Directory to start the ``.redmine.yaml`` search from.
               Defaults to the current directory.
        discover: Whether to look for global and local config files at all.

    Returns:
        Validated Settings object.

    Raises:
        ConfigError: If the explicit file is missing or any file is invalid.
    """
    yaml_config: dict[str, Any] = {}

    if discover:
        for path in discover_config_files(start):
            try:
                yaml_config = _merge(yaml_config, load_yaml_config(path))
                logger.debug("Loaded config file", path=str(path))
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Skipping unreadable config file", path=str(path), error=str(e))

    if config_path is not None:
        try:
            yaml_config = _merge(yaml_config, load_yaml_config(config_path))
        except FileNotFoundError as e:
            raise ConfigError(str(e)) from e
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Invalid configuration file {config_path}: {e}") from e
        logger.debug("Loaded config file", path=str(config_path))

    yaml_config = expand_env_vars(yaml_config)

    try:
        return Settings(**yaml_config)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


__all__ = [
    "LoggingConfig",
    "Settings",
    "load_yaml_config",
    "normalize_keys",
    "expand_env_vars",
    "discover_config_files",
    "load_settings",
]
