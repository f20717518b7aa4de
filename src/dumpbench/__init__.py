"""dumpbench: benchmarks targeted at the architecture of a crash dump.

dumpbench reads a crash dump to learn the pointer width of the process that
produced it, builds a job configuration for that architecture on the current
host, and runs the selected benchmark units, optionally in child processes
that inherit the run context through environment variables.

Example:
    >>> from dumpbench import Orchestrator, InProcessEngine, get_default_registry
    >>> orchestrator = Orchestrator(get_default_registry(), InProcessEngine())
    >>> results = orchestrator.run("app.dmp", ["OpenDump"])
"""

# isort: skip_file

# Errors
from dumpbench.exceptions import (
    ConfigurationMissing,
    DumpbenchError,
    DumpFileNotFound,
    DumpLoadFailed,
    ErrorKind,
    RuntimeNotFound,
    UnknownBenchmarkUnit,
)

# Context
from dumpbench.context.environment import EnvironmentContext, RunContext

# Dumps
from dumpbench.dumps.reader import CacheOptions, DumpFormat, DumpReader, FileDumpReader
from dumpbench.dumps.resolver import ArchitectureInfo, ArchitectureResolver

# Runner
from dumpbench.runner.engine import (
    ExecutionEngine,
    InProcessEngine,
    SubprocessEngine,
    UnitResult,
)
from dumpbench.runner.job import JobConfiguration, PlatformJobBuilder
from dumpbench.runner.platforms import HostPlatform, Toolchain
from dumpbench.runner.registry import (
    BenchmarkRegistry,
    BenchmarkUnit,
    BenchmarkUnitRef,
    benchmark,
    get_default_registry,
)
from dumpbench.runner.selector import BenchmarkSelector

# Orchestration
from dumpbench.orchestrator import Orchestrator, OrchestratorState

# CLI
from dumpbench.cli import cli

from dumpbench.version import __version__

__all__ = [
    "__version__",
    # Errors
    "ConfigurationMissing",
    "DumpbenchError",
    "DumpFileNotFound",
    "DumpLoadFailed",
    "ErrorKind",
    "RuntimeNotFound",
    "UnknownBenchmarkUnit",
    # Context
    "EnvironmentContext",
    "RunContext",
    # Dumps
    "ArchitectureInfo",
    "ArchitectureResolver",
    "CacheOptions",
    "DumpFormat",
    "DumpReader",
    "FileDumpReader",
    # Runner
    "BenchmarkRegistry",
    "BenchmarkSelector",
    "BenchmarkUnit",
    "BenchmarkUnitRef",
    "ExecutionEngine",
    "HostPlatform",
    "InProcessEngine",
    "JobConfiguration",
    "PlatformJobBuilder",
    "SubprocessEngine",
    "Toolchain",
    "UnitResult",
    "benchmark",
    "get_default_registry",
    # Orchestration
    "Orchestrator",
    "OrchestratorState",
    # CLI
    "cli",
]
