"""Run context shared between the orchestrator and child benchmark processes."""

from dumpbench.context.environment import (
    DUMP_FILE_ENV,
    RUNTIME_ENV,
    EnvironmentContext,
    RunContext,
)

__all__ = [
    "DUMP_FILE_ENV",
    "RUNTIME_ENV",
    "EnvironmentContext",
    "RunContext",
]
