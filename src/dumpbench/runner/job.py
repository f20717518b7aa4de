"""Job configuration for benchmark runs.

A JobConfiguration is built once per run and applied unchanged to every
selected benchmark unit, including units executed in child processes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dumpbench.runner.platforms import (
    DEFAULT_RUNTIME_BINARY,
    DEFAULT_RUNTIME_DIRECTORY,
    HostPlatform,
    PlatformStrategy,
    Toolchain,
    describe_os,
    describe_runtime,
    strategy_for,
)

logger = logging.getLogger(__name__)

WARMUP_ITERATION_COUNT = 1
ITERATION_DURATION = timedelta(seconds=1)
MIN_ITERATION_COUNT = 10
MAX_ITERATION_COUNT = 20


class JobConfiguration(BaseModel):
    """Timing and toolchain parameters shared by every unit in a run.

    Attributes:
        identifier_label: Human-readable label (OS, runtime, architecture).
        toolchain: Toolchain that executes the units.
        warmup_iteration_count: Iterations run and discarded before measuring.
        min_iteration_count: Minimum measured iterations.
        max_iteration_count: Maximum measured iterations.
        iteration_duration: Target wall time of a single iteration.
        enforce_power_plan: Whether the engine may switch the OS power plan.
    """

    model_config = ConfigDict(frozen=True)

    identifier_label: str = Field(min_length=1)
    toolchain: Toolchain = Field(default_factory=Toolchain.default)
    warmup_iteration_count: int = Field(default=WARMUP_ITERATION_COUNT, ge=0)
    min_iteration_count: int = Field(default=MIN_ITERATION_COUNT, ge=1)
    max_iteration_count: int = Field(default=MAX_ITERATION_COUNT, ge=1)
    iteration_duration: timedelta = ITERATION_DURATION
    enforce_power_plan: bool = False

    @field_validator("iteration_duration")
    @classmethod
    def validate_duration(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("iteration_duration must be positive")
        return v

    @model_validator(mode="after")
    def validate_iteration_bounds(self) -> JobConfiguration:
        if self.max_iteration_count < self.min_iteration_count:
            raise ValueError(
                f"max_iteration_count ({self.max_iteration_count}) must be >= "
                f"min_iteration_count ({self.min_iteration_count})"
            )
        return self

    def to_json(self) -> str:
        """Serialize for handing to a child process."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> JobConfiguration:
        return cls.model_validate_json(data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def architecture_suffix(pointer_size_bytes: int) -> str:
    return "32bit" if pointer_size_bytes == 4 else "64bit"


class PlatformJobBuilder:
    """Builds the JobConfiguration for a host and target architecture.

    Example:
        >>> builder = PlatformJobBuilder()
        >>> job = builder.build_job_configuration(HostPlatform.LINUX, 8, None)
        >>> job.toolchain.is_default
        True
    """

    def __init__(
        self,
        strategy_factory: Callable[[HostPlatform], PlatformStrategy] | None = None,
        *,
        program_dirs: dict[int, Path] | None = None,
        runtime_directory: str = DEFAULT_RUNTIME_DIRECTORY,
        runtime_binary: str = DEFAULT_RUNTIME_BINARY,
        os_description: Callable[[], str] = describe_os,
        runtime_description: Callable[[], str] = describe_runtime,
    ) -> None:
        self._strategy_factory = strategy_factory
        self.program_dirs = program_dirs
        self.runtime_directory = runtime_directory
        self.runtime_binary = runtime_binary
        self._os_description = os_description
        self._runtime_description = runtime_description

    def strategy(self, host_os: HostPlatform) -> PlatformStrategy:
        """Return the platform strategy used for ``host_os``."""
        if self._strategy_factory is not None:
            return self._strategy_factory(host_os)
        return strategy_for(
            host_os,
            program_dirs=self.program_dirs,
            directory_name=self.runtime_directory,
            binary_name=self.runtime_binary,
        )

    def build_job_configuration(
        self,
        host_os: HostPlatform,
        pointer_size_bytes: int,
        runtime_override_path: str | None = None,
    ) -> JobConfiguration:
        """Build the run's job configuration.

        Args:
            host_os: Host operating system family.
            pointer_size_bytes: Pointer size resolved from the dump (4 or 8).
            runtime_override_path: Explicit runtime executable, if any.

        Returns:
            A fully populated, immutable JobConfiguration.

        Raises:
            RuntimeNotFound: If the host needs a runtime that cannot be found.
        """
        if pointer_size_bytes not in (4, 8):
            raise ValueError(f"pointer size must be 4 or 8, got {pointer_size_bytes}")

        toolchain = self.strategy(host_os).select_toolchain(
            pointer_size_bytes, runtime_override_path
        )
        label = (
            f"{self._os_description()} {self._runtime_description()} "
            f"{architecture_suffix(pointer_size_bytes)}"
        )

        job = JobConfiguration(
            identifier_label=label,
            toolchain=toolchain,
            warmup_iteration_count=WARMUP_ITERATION_COUNT,
            iteration_duration=ITERATION_DURATION,
            min_iteration_count=MIN_ITERATION_COUNT,
            max_iteration_count=MAX_ITERATION_COUNT,
            # the host is expected to be tuned already; switching plans needs elevation
            enforce_power_plan=False,
        )
        logger.info(f"Built job '{label}' with toolchain {toolchain.name}")
        return job
