"""Process-wide run context carried through environment variables.

The dump path and the runtime override are stored in the process environment
rather than in module state, so that any child process spawned by the
execution engine inherits them and can rebuild the same RunContext.
"""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dumpbench.exceptions import ConfigurationMissing

DUMP_FILE_ENV = "DUMPBENCH_DUMP_FILE"
RUNTIME_ENV = "DUMPBENCH_RUNTIME"


class RunContext(BaseModel):
    """Immutable snapshot of the run context.

    Attributes:
        dump_file_path: Path of the crash dump targeted by this run.
        runtime_override_path: Explicit runtime executable, if any.
    """

    model_config = ConfigDict(frozen=True)

    dump_file_path: str = Field(min_length=1)
    runtime_override_path: str | None = None

    @field_validator("runtime_override_path", mode="before")
    @classmethod
    def blank_override_is_none(cls, v: Any) -> str | None:
        """Treat a whitespace-only override as absent."""
        if v is None:
            return None
        v = str(v)
        return v if v.strip() else None

    @classmethod
    def from_environment(cls, environ: MutableMapping[str, str] | None = None) -> RunContext:
        """Rebuild the context from environment variables.

        Raises:
            ConfigurationMissing: If the dump path variable is not set.
        """
        env = EnvironmentContext(environ)
        return cls(
            dump_file_path=env.get_dump_path(),
            runtime_override_path=env.get_runtime_override(),
        )

    def to_environment(self, environ: MutableMapping[str, str] | None = None) -> None:
        """Write the context into environment variables."""
        env = EnvironmentContext(environ)
        env.set_dump_path(self.dump_file_path)
        env.set_runtime_override(self.runtime_override_path)


class EnvironmentContext:
    """Reads and writes run context in an environment mapping.

    Example:
        >>> env = EnvironmentContext()
        >>> env.set_dump_path("/tmp/app.core")
        >>> env.get_dump_path()
        '/tmp/app.core'
    """

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        self.environ = os.environ if environ is None else environ

    def set_dump_path(self, path: str | os.PathLike[str]) -> None:
        """Record the dump path for this process and its children.

        Raises:
            ConfigurationMissing: If the path is empty.
        """
        value = os.fspath(path)
        if not value:
            raise ConfigurationMissing(
                f"An empty dump path was given; pass a dump file or set '{DUMP_FILE_ENV}'."
            )
        self.environ[DUMP_FILE_ENV] = value

    def get_dump_path(self) -> str:
        """Return the recorded dump path.

        Raises:
            ConfigurationMissing: If no dump path has been recorded.
        """
        value = self.environ.get(DUMP_FILE_ENV)
        if not value:
            raise ConfigurationMissing(
                f"You must set the '{DUMP_FILE_ENV}' environment variable "
                "or pass a dump file before running benchmarks."
            )
        return value

    def get_runtime_override(self) -> str | None:
        value = self.environ.get(RUNTIME_ENV)
        if value is None or not value.strip():
            return None
        return value

    def set_runtime_override(self, path: str | os.PathLike[str] | None) -> None:
        if path is None:
            self.environ.pop(RUNTIME_ENV, None)
            return
        self.environ[RUNTIME_ENV] = os.fspath(path)

    def snapshot(self) -> RunContext:
        """Return the current context as an immutable RunContext."""
        return RunContext.from_environment(self.environ)
