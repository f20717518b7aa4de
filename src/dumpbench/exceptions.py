"""Error taxonomy for dumpbench.

Every failure during target resolution or run configuration is fatal to the
whole run. Each error carries an ErrorKind so the orchestrator can record
which step failed and the CLI can map it to an exit status.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of fatal run errors."""

    CONFIGURATION_MISSING = "configuration_missing"
    DUMP_FILE_NOT_FOUND = "dump_file_not_found"
    DUMP_LOAD_FAILED = "dump_load_failed"
    RUNTIME_NOT_FOUND = "runtime_not_found"
    UNKNOWN_BENCHMARK_UNIT = "unknown_benchmark_unit"


class DumpbenchError(Exception):
    """Base class for all dumpbench errors."""

    kind: ErrorKind


class ConfigurationMissing(DumpbenchError):
    """Required run context is absent."""

    kind = ErrorKind.CONFIGURATION_MISSING


class DumpFileNotFound(DumpbenchError):
    """The dump path does not reference an existing file."""

    kind = ErrorKind.DUMP_FILE_NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(f"Dump file not found: {path}")
        self.path = path


class DumpLoadFailed(DumpbenchError):
    """The dump file exists but could not be parsed."""

    kind = ErrorKind.DUMP_LOAD_FAILED

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to load dump '{path}': {reason}")
        self.path = path
        self.reason = reason


class RuntimeNotFound(DumpbenchError):
    """No usable runtime executable exists for the target architecture."""

    kind = ErrorKind.RUNTIME_NOT_FOUND

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class UnknownBenchmarkUnit(DumpbenchError):
    """A requested benchmark name is not registered."""

    kind = ErrorKind.UNKNOWN_BENCHMARK_UNIT

    def __init__(self, name: str) -> None:
        super().__init__(f"Benchmark '{name}' not found.")
        self.name = name
