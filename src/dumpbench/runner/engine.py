"""Benchmark execution engines.

Engines take a JobConfiguration and either a single unit or the whole
registry, execute the units one after another and report a UnitResult per
unit. Units never overlap; each call blocks until all iterations of the unit
have finished.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from dumpbench.runner.job import JobConfiguration
from dumpbench.runner.registry import BenchmarkRegistry, BenchmarkUnit, BenchmarkUnitRef

logger = logging.getLogger(__name__)

WORKER_MODULE = "dumpbench.worker"

# Early-stop rule once the minimum iteration count is reached
SETTLE_WINDOW = 5
SETTLE_TOLERANCE = 0.05

Clock = Callable[[], float]


@dataclass
class UnitResult:
    """Measurements for one benchmark unit.

    Attributes:
        name: Qualified unit name.
        job_id: Identifier label of the job the unit ran under.
        samples_ns: Mean nanoseconds per operation, one entry per iteration.
        warmup_count: Number of discarded warm-up iterations.
        operations: Total measured operations across iterations.
        error: Error message if the unit failed.
    """

    name: str
    job_id: str
    samples_ns: list[float] = field(default_factory=list)
    warmup_count: int = 0
    operations: int = 0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and bool(self.samples_ns)

    @property
    def iterations(self) -> int:
        return len(self.samples_ns)

    @property
    def mean_ns(self) -> float | None:
        if not self.samples_ns:
            return None
        return sum(self.samples_ns) / len(self.samples_ns)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "job_id": self.job_id,
            "samples_ns": list(self.samples_ns),
            "warmup_count": self.warmup_count,
            "operations": self.operations,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UnitResult:
        return cls(
            name=data["name"],
            job_id=data["job_id"],
            samples_ns=[float(s) for s in data.get("samples_ns", [])],
            warmup_count=int(data.get("warmup_count", 0)),
            operations=int(data.get("operations", 0)),
            error=data.get("error"),
        )


def _run_iteration(unit: BenchmarkUnit, target_seconds: float, clock: Clock) -> tuple[float, int]:
    """Invoke the unit until the iteration duration elapses.

    Returns:
        Mean nanoseconds per operation and the number of operations.
    """
    operations = 0
    start = clock()
    while True:
        unit.run()
        operations += 1
        elapsed = clock() - start
        if elapsed >= target_seconds:
            return elapsed * 1e9 / operations, operations


def _settled(samples: list[float]) -> bool:
    recent = samples[-SETTLE_WINDOW:]
    if len(recent) < SETTLE_WINDOW:
        return False
    mean = sum(recent) / len(recent)
    if mean <= 0:
        return True
    return (max(recent) - min(recent)) / mean <= SETTLE_TOLERANCE


def measure(
    unit_cls: type[BenchmarkUnit],
    job: JobConfiguration,
    *,
    name: str | None = None,
    clock: Clock = time.perf_counter,
) -> UnitResult:
    """Measure a unit under ``job``.

    Runs the warm-up iterations, then between min_iteration_count and
    max_iteration_count measured iterations, stopping early once the last
    few samples agree within SETTLE_TOLERANCE.
    """
    result = UnitResult(
        name=name or unit_cls.__name__,
        job_id=job.identifier_label,
        warmup_count=job.warmup_iteration_count,
    )
    target = job.iteration_duration.total_seconds()

    unit = unit_cls()
    unit.setup()
    try:
        for _ in range(job.warmup_iteration_count):
            _run_iteration(unit, target, clock)

        while result.iterations < job.max_iteration_count:
            sample, operations = _run_iteration(unit, target, clock)
            result.samples_ns.append(sample)
            result.operations += operations
            if result.iterations >= job.min_iteration_count and _settled(result.samples_ns):
                break
    finally:
        unit.teardown()

    logger.debug(f"{result.name}: {result.iterations} iterations, mean {result.mean_ns:.1f} ns/op")
    return result


class ExecutionEngine(ABC):
    """Executes benchmark units under a job configuration."""

    @abstractmethod
    def run_unit(self, unit: BenchmarkUnitRef, job: JobConfiguration) -> UnitResult:
        """Execute one unit and block until it has finished."""

    def run_all(self, registry: BenchmarkRegistry, job: JobConfiguration) -> list[UnitResult]:
        """Execute every registered unit once, in registration order."""
        return [self.run_unit(unit, job) for unit in registry.units()]


class InProcessEngine(ExecutionEngine):
    """Runs units inside the orchestrating process."""

    def __init__(self, clock: Clock = time.perf_counter) -> None:
        self.clock = clock

    def run_unit(self, unit: BenchmarkUnitRef, job: JobConfiguration) -> UnitResult:
        logger.info(f"Running {unit.qualified_name} in process")
        try:
            return measure(unit.handle, job, name=unit.qualified_name, clock=self.clock)
        except Exception as e:
            logger.warning(f"Benchmark {unit.qualified_name} failed: {e}")
            return UnitResult(
                name=unit.qualified_name,
                job_id=job.identifier_label,
                warmup_count=job.warmup_iteration_count,
                error=str(e),
            )


class SubprocessEngine(ExecutionEngine):
    """Runs each unit in a child process started from the job's runtime.

    The child inherits this process's environment, which carries the run
    context, and receives the job configuration as a JSON argument.
    """

    def __init__(
        self,
        runner: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.runner = runner
        self.environ = environ

    def command_for(self, unit: BenchmarkUnitRef, job: JobConfiguration) -> list[str]:
        runtime = job.toolchain.runtime_path
        executable = str(runtime) if runtime is not None else sys.executable
        return [executable, "-m", WORKER_MODULE, unit.qualified_name, "--job", job.to_json()]

    def run_unit(self, unit: BenchmarkUnitRef, job: JobConfiguration) -> UnitResult:
        command = self.command_for(unit, job)
        env = dict(os.environ if self.environ is None else self.environ)
        logger.info(f"Running {unit.qualified_name} in child process {command[0]}")

        completed = self.runner(command, env=env, capture_output=True, text=True, check=False)

        if completed.returncode != 0:
            message = (completed.stderr or "").strip() or f"exit status {completed.returncode}"
            logger.warning(f"Benchmark {unit.qualified_name} failed: {message}")
            return UnitResult(
                name=unit.qualified_name,
                job_id=job.identifier_label,
                warmup_count=job.warmup_iteration_count,
                error=message,
            )

        return self._parse_output(unit, job, completed.stdout or "")

    def _parse_output(self, unit: BenchmarkUnitRef, job: JobConfiguration, stdout: str) -> UnitResult:
        lines = [line for line in stdout.splitlines() if line.strip()]
        try:
            return UnitResult.from_dict(json.loads(lines[-1]))
        except (IndexError, KeyError, ValueError) as e:
            logger.warning(f"Unreadable output from {unit.qualified_name}: {e}")
            return UnitResult(
                name=unit.qualified_name,
                job_id=job.identifier_label,
                warmup_count=job.warmup_iteration_count,
                error=f"unreadable worker output: {e}",
            )


ENGINES: dict[str, type[ExecutionEngine]] = {
    "subprocess": SubprocessEngine,
    "in-process": InProcessEngine,
}


def create_engine(mode: str) -> ExecutionEngine:
    """Create an engine by configuration name."""
    try:
        return ENGINES[mode]()
    except KeyError:
        raise ValueError(f"Unknown engine mode '{mode}'. Valid modes: {sorted(ENGINES)}") from None
