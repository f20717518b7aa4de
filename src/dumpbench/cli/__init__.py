"""dumpbench Command Line Interface.

This module provides the command-line interface for running benchmarks
against the architecture of a crash dump.
"""

from dumpbench.cli.config_loader import (
    DumpbenchConfig,
    EngineConfig,
    LoggingConfig,
    RuntimeConfig,
    create_config,
    deep_merge,
    get_default_config_path,
    get_env_config_overrides,
    interpolate_env_vars,
    load_yaml_config,
)
from dumpbench.cli.main import cli, run_main

__all__ = [
    # CLI entry points
    "cli",
    "run_main",
    # Configuration models
    "DumpbenchConfig",
    "EngineConfig",
    "LoggingConfig",
    "RuntimeConfig",
    # Configuration utilities
    "create_config",
    "deep_merge",
    "get_default_config_path",
    "get_env_config_overrides",
    "interpolate_env_vars",
    "load_yaml_config",
]
