"""dumpbench runner package.

This package turns a resolved target architecture into a job configuration
and executes benchmark units under it.

Core Components:
    - PlatformJobBuilder: Builds the JobConfiguration for a host and target
    - BenchmarkRegistry / BenchmarkSelector: Name-to-unit resolution
    - ExecutionEngine: In-process and subprocess execution of units

Example:
    >>> from dumpbench.runner import PlatformJobBuilder, InProcessEngine
    >>> from dumpbench.runner import HostPlatform, get_default_registry
    >>>
    >>> job = PlatformJobBuilder().build_job_configuration(HostPlatform.LINUX, 8)
    >>> results = InProcessEngine().run_all(get_default_registry(), job)
"""

from dumpbench.runner.engine import (
    ExecutionEngine,
    InProcessEngine,
    SubprocessEngine,
    UnitResult,
    create_engine,
    measure,
)
from dumpbench.runner.job import JobConfiguration, PlatformJobBuilder
from dumpbench.runner.platforms import (
    HostPlatform,
    InterpreterToolchainLocator,
    MultiArchPlatform,
    PlatformStrategy,
    PlatformTarget,
    SingleArchPlatform,
    Toolchain,
    ToolchainLocator,
    strategy_for,
)
from dumpbench.runner.registry import (
    BenchmarkRegistry,
    BenchmarkUnit,
    BenchmarkUnitRef,
    benchmark,
    default_registry,
    get_default_registry,
)
from dumpbench.runner.selector import BenchmarkSelector

__all__ = [
    # Configuration
    "JobConfiguration",
    "PlatformJobBuilder",
    # Platforms
    "HostPlatform",
    "InterpreterToolchainLocator",
    "MultiArchPlatform",
    "PlatformStrategy",
    "PlatformTarget",
    "SingleArchPlatform",
    "Toolchain",
    "ToolchainLocator",
    "strategy_for",
    # Units
    "BenchmarkRegistry",
    "BenchmarkSelector",
    "BenchmarkUnit",
    "BenchmarkUnitRef",
    "benchmark",
    "default_registry",
    "get_default_registry",
    # Execution
    "ExecutionEngine",
    "InProcessEngine",
    "SubprocessEngine",
    "UnitResult",
    "create_engine",
    "measure",
]
