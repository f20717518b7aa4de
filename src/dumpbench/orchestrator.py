"""Top-level run orchestration.

The orchestrator walks a linear sequence of steps, each backed by one
component:

    START -> CONTEXT_RECORDED -> ARCHITECTURE_RESOLVED -> CONFIGURATION_BUILT
          -> UNITS_RESOLVED -> DISPATCHED -> COMPLETED

Any failure moves it to FAILED, records the error kind and re-raises; the
remaining steps are skipped.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from enum import Enum

from dumpbench.context.environment import EnvironmentContext
from dumpbench.dumps.resolver import ArchitectureResolver
from dumpbench.exceptions import DumpbenchError, ErrorKind
from dumpbench.runner.engine import ExecutionEngine, UnitResult
from dumpbench.runner.job import JobConfiguration, PlatformJobBuilder
from dumpbench.runner.platforms import HostPlatform
from dumpbench.runner.registry import BenchmarkRegistry, BenchmarkUnitRef
from dumpbench.runner.selector import BenchmarkSelector

logger = logging.getLogger(__name__)


class OrchestratorState(str, Enum):
    """Progress of a run through the orchestration steps."""

    START = "start"
    CONTEXT_RECORDED = "context_recorded"
    ARCHITECTURE_RESOLVED = "architecture_resolved"
    CONFIGURATION_BUILT = "configuration_built"
    UNITS_RESOLVED = "units_resolved"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"


class Orchestrator:
    """Wires context, architecture, configuration, selection and dispatch.

    Example:
        >>> orchestrator = Orchestrator(registry, InProcessEngine())
        >>> results = orchestrator.run("app.dmp", ["OpenDump"])
    """

    def __init__(
        self,
        registry: BenchmarkRegistry,
        engine: ExecutionEngine,
        *,
        environment: EnvironmentContext | None = None,
        resolver: ArchitectureResolver | None = None,
        job_builder: PlatformJobBuilder | None = None,
        host: HostPlatform | None = None,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.environment = environment or EnvironmentContext()
        self.resolver = resolver or ArchitectureResolver()
        self.job_builder = job_builder or PlatformJobBuilder()
        self.host = host or HostPlatform.detect()
        self.selector = BenchmarkSelector(registry)

        self.state = OrchestratorState.START
        self.failure: ErrorKind | None = None
        self.pointer_size: int | None = None
        self.job: JobConfiguration | None = None
        self.selected: list[BenchmarkUnitRef] = []

    def run(
        self,
        dump_path: str | os.PathLike[str] | None = None,
        names: Sequence[str] = (),
    ) -> list[UnitResult]:
        """Execute a full run.

        Args:
            dump_path: Dump to target; when None the path already recorded in
                the environment is used.
            names: Benchmark names to run; empty means every registered unit.

        Returns:
            One UnitResult per dispatched unit.

        Raises:
            DumpbenchError: If any resolution step fails.
        """
        try:
            return self._run(dump_path, names)
        except DumpbenchError as e:
            self.state = OrchestratorState.FAILED
            self.failure = e.kind
            logger.error(f"Run failed ({e.kind.value}): {e}")
            raise

    def _run(
        self,
        dump_path: str | os.PathLike[str] | None,
        names: Sequence[str],
    ) -> list[UnitResult]:
        if dump_path is not None:
            # children read the dump path from the inherited environment
            self.environment.set_dump_path(dump_path)
        recorded_path = self.environment.get_dump_path()
        self.state = OrchestratorState.CONTEXT_RECORDED

        # resolved even when unused: loading the dump validates it up front
        self.pointer_size = self.resolver.resolve_pointer_size(
            recorded_path, use_os_memory_features=False
        )
        self.state = OrchestratorState.ARCHITECTURE_RESOLVED

        self.job = self.job_builder.build_job_configuration(
            self.host,
            self.pointer_size,
            self.environment.get_runtime_override(),
        )
        self.state = OrchestratorState.CONFIGURATION_BUILT

        self.selected = self.selector.resolve(list(names))
        self.state = OrchestratorState.UNITS_RESOLVED

        results = self._dispatch(self.job)
        self.state = OrchestratorState.DISPATCHED

        self.state = OrchestratorState.COMPLETED
        return results

    def _dispatch(self, job: JobConfiguration) -> list[UnitResult]:
        if not self.selected:
            logger.info(f"Running all {len(self.registry)} benchmark units under '{job.identifier_label}'")
            return self.engine.run_all(self.registry, job)

        results = []
        for unit in self.selected:
            logger.info(f"Running {unit.qualified_name} under '{job.identifier_label}'")
            results.append(self.engine.run_unit(unit, job))
        return results
