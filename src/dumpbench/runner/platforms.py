"""Host platform strategies and toolchain selection.

Hosts fall into a closed set of strategies:

- MultiArchPlatform: the host can run both 32-bit and 64-bit runtimes side by
  side (Windows), so the runtime must be chosen to match the dump's pointer
  size.
- SingleArchPlatform: every other host; the default toolchain is used.
"""

from __future__ import annotations

import logging
import os
import platform
from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from dumpbench.exceptions import RuntimeNotFound

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_DIRECTORY = "Python"
DEFAULT_RUNTIME_BINARY = "python.exe"


class HostPlatform(str, Enum):
    """Operating system families the orchestrator distinguishes."""

    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"
    UNKNOWN = "unknown"

    @classmethod
    def detect(cls) -> HostPlatform:
        """Detect the current host platform."""
        system = platform.system().lower()
        if system == "windows":
            return cls.WINDOWS
        elif system == "linux":
            return cls.LINUX
        elif system == "darwin":
            return cls.MACOS
        return cls.UNKNOWN


class PlatformTarget(str, Enum):
    """Code generation target of a toolchain."""

    X86 = "x86"
    X64 = "x64"
    DEFAULT = "default"


class Toolchain(BaseModel):
    """Descriptor of the runtime used to execute benchmark units.

    Attributes:
        name: Toolchain identifier.
        platform_target: Target architecture of the toolchain.
        runtime_path: Runtime executable; None means the current interpreter.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    platform_target: PlatformTarget = PlatformTarget.DEFAULT
    runtime_path: Path | None = None

    @classmethod
    def default(cls) -> Toolchain:
        return cls(name="default")

    @property
    def is_default(self) -> bool:
        return self.platform_target == PlatformTarget.DEFAULT


class ToolchainLocator(ABC):
    """Produces toolchain descriptors for a runtime executable."""

    @abstractmethod
    def locate(self, runtime_path: Path, pointer_size: int) -> Toolchain:
        """Build a toolchain bound to ``runtime_path`` for the given pointer size."""


class InterpreterToolchainLocator(ToolchainLocator):
    """Binds a Python interpreter to an x86 or x64 toolchain."""

    def locate(self, runtime_path: Path, pointer_size: int) -> Toolchain:
        target = PlatformTarget.X86 if pointer_size == 4 else PlatformTarget.X64
        return Toolchain(
            name=f"cpython-{target.value}",
            platform_target=target,
            runtime_path=runtime_path,
        )


def default_program_dirs(environ: Mapping[str, str] | None = None) -> dict[int, Path]:
    """Return the standard install directories keyed by pointer size."""
    env = os.environ if environ is None else environ
    x86 = env.get("ProgramFiles(x86)") or r"C:\Program Files (x86)"
    # ProgramFiles points at the x86 directory inside a 32-bit process
    x64 = env.get("ProgramW6432") or env.get("ProgramFiles") or r"C:\Program Files"
    return {4: Path(x86), 8: Path(x64)}


def describe_os() -> str:
    return platform.platform()


def describe_runtime() -> str:
    return f"{platform.python_implementation()} {platform.python_version()}"


class PlatformStrategy(ABC):
    """Policy for choosing a toolchain on a family of hosts."""

    multi_arch: ClassVar[bool]

    @abstractmethod
    def select_toolchain(self, pointer_size: int, runtime_override: str | None) -> Toolchain:
        """Select the toolchain for a target pointer size.

        Raises:
            RuntimeNotFound: If no runtime exists for the target.
        """


class MultiArchPlatform(PlatformStrategy):
    """Host supporting both 32-bit and 64-bit runtimes."""

    multi_arch = True

    def __init__(
        self,
        program_dirs: Mapping[int, Path] | None = None,
        directory_name: str = DEFAULT_RUNTIME_DIRECTORY,
        binary_name: str = DEFAULT_RUNTIME_BINARY,
        locator: ToolchainLocator | None = None,
    ) -> None:
        self.program_dirs = dict(program_dirs) if program_dirs is not None else default_program_dirs()
        self.directory_name = directory_name
        self.binary_name = binary_name
        self.locator = locator or InterpreterToolchainLocator()

    def resolve_runtime_path(self, pointer_size: int, runtime_override: str | None) -> Path:
        """Find the runtime executable for ``pointer_size``.

        An override, when given, must exist; it never falls back to the
        standard directory.
        """
        if runtime_override is not None and runtime_override.strip():
            override = Path(runtime_override)
            if not override.is_file():
                raise RuntimeNotFound(
                    f"Runtime specified by override not found: {runtime_override}",
                    path=runtime_override,
                )
            return override

        if pointer_size not in self.program_dirs:
            raise RuntimeNotFound(f"No program directory for pointer size {pointer_size}")

        runtime_path = self.program_dirs[pointer_size] / self.directory_name / self.binary_name
        if not runtime_path.is_file():
            raise RuntimeNotFound(f"Could not find `{runtime_path}`.", path=str(runtime_path))
        return runtime_path

    def select_toolchain(self, pointer_size: int, runtime_override: str | None) -> Toolchain:
        runtime_path = self.resolve_runtime_path(pointer_size, runtime_override)
        toolchain = self.locator.locate(runtime_path, pointer_size)
        logger.info(f"Selected toolchain {toolchain.name} at {runtime_path}")
        return toolchain


class SingleArchPlatform(PlatformStrategy):
    """Host with a single supported architecture."""

    multi_arch = False

    def select_toolchain(self, pointer_size: int, runtime_override: str | None) -> Toolchain:
        if runtime_override:
            logger.warning(
                f"Ignoring runtime override {runtime_override}: host supports a single architecture"
            )
        return Toolchain.default()


def strategy_for(
    host: HostPlatform,
    *,
    program_dirs: Mapping[int, Path] | None = None,
    directory_name: str = DEFAULT_RUNTIME_DIRECTORY,
    binary_name: str = DEFAULT_RUNTIME_BINARY,
) -> PlatformStrategy:
    """Return the platform strategy for ``host``."""
    if host == HostPlatform.WINDOWS:
        return MultiArchPlatform(
            program_dirs=program_dirs,
            directory_name=directory_name,
            binary_name=binary_name,
        )
    return SingleArchPlatform()
