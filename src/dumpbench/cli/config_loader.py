"""Configuration loading and validation for the dumpbench CLI.

This module provides utilities for loading, merging, and validating
configuration files with support for environment variable interpolation.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from dumpbench.runner.engine import ENGINES
from dumpbench.runner.platforms import DEFAULT_RUNTIME_BINARY, DEFAULT_RUNTIME_DIRECTORY


class RuntimeConfig(BaseModel):
    """Where runtimes live on multi-architecture hosts."""

    directory_name: str = Field(
        default=DEFAULT_RUNTIME_DIRECTORY,
        min_length=1,
        description="Directory under the program directory holding the runtime",
    )
    binary_name: str = Field(
        default=DEFAULT_RUNTIME_BINARY,
        min_length=1,
        description="Runtime executable file name",
    )


class EngineConfig(BaseModel):
    """Execution engine settings."""

    mode: str = Field(default="subprocess")

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        """Validate engine mode."""
        allowed = set(ENGINES)
        if v.lower() not in allowed:
            raise ValueError(f"Engine mode must be one of {sorted(allowed)}, got '{v}'")
        return v.lower()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: str = Field(default="rich")
    log_file: str | None = Field(default=None)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"level must be one of {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        allowed = {"rich", "plain"}
        if v.lower() not in allowed:
            raise ValueError(f"format must be one of {allowed}")
        return v.lower()


class DumpbenchConfig(BaseModel):
    """Complete dumpbench configuration."""

    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Environment variable pattern: ${VAR_NAME} or ${VAR_NAME:default}
ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


def interpolate_env_vars(value: Any) -> Any:
    """Recursively interpolate environment variables in config values.

    Supports:
        ${VAR_NAME} - Required env var
        ${VAR_NAME:default} - Env var with default value

    Raises:
        ValueError: If a required env var is not set
    """
    if isinstance(value, str):
        return _interpolate_string(value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def _interpolate_string(value: str) -> str:
    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value
        elif default is not None:
            return default
        else:
            raise ValueError(
                f"Environment variable '{var_name}' is not set and no default provided"
            )

    return ENV_VAR_PATTERN.sub(replace_match, value)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values in override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file.

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If file is invalid YAML
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        config: dict[str, Any] = yaml.safe_load(f) or {}

    return config


def get_default_config_path() -> Path | None:
    """Get the default configuration file path.

    Searches for config in order:
        1. DUMPBENCH_CONFIG environment variable
        2. ./dumpbench.yaml
        3. ./dumpbench.yml
        4. ./configs/dumpbench.yaml

    Returns:
        Path to config file or None if not found
    """
    env_config = os.environ.get("DUMPBENCH_CONFIG")
    if env_config:
        path = Path(env_config)
        if path.exists():
            return path

    search_paths = [
        Path("dumpbench.yaml"),
        Path("dumpbench.yml"),
        Path("configs/dumpbench.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def get_env_config_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables.

    Supports:
        DUMPBENCH_ENGINE - Execution engine mode
        DUMPBENCH_LOG_LEVEL - Log level
    """
    overrides: dict[str, Any] = {}

    if engine := os.environ.get("DUMPBENCH_ENGINE"):
        overrides.setdefault("engine", {})["mode"] = engine

    if log_level := os.environ.get("DUMPBENCH_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level

    return overrides


def create_config(
    config_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
    *,
    use_env_vars: bool = True,
) -> DumpbenchConfig:
    """Create a complete configuration from multiple sources.

    Configuration precedence (highest to lowest):
        1. CLI overrides
        2. Environment variable overrides
        3. User config file
        4. Default values
    """
    config: dict[str, Any] = {}

    if config_path is not None:
        user_config = interpolate_env_vars(load_yaml_config(config_path))
        config = deep_merge(config, user_config)

    if use_env_vars:
        config = deep_merge(config, get_env_config_overrides())

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return DumpbenchConfig.model_validate(config)
