"""Target architecture resolution from a crash dump."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, ConfigDict, field_validator

from dumpbench.dumps.reader import CacheOptions, DumpReader, FileDumpReader
from dumpbench.exceptions import DumpLoadFailed

logger = logging.getLogger(__name__)

VALID_POINTER_SIZES = (4, 8)


class ArchitectureInfo(BaseModel):
    """Pointer width of the process that produced a dump."""

    model_config = ConfigDict(frozen=True)

    pointer_size_bytes: int

    @field_validator("pointer_size_bytes")
    @classmethod
    def validate_pointer_size(cls, v: int) -> int:
        if v not in VALID_POINTER_SIZES:
            raise ValueError(f"pointer size must be 4 or 8, got {v}")
        return v

    @property
    def is_64bit(self) -> bool:
        return self.pointer_size_bytes == 8

    @property
    def bitness(self) -> str:
        """Human-readable architecture suffix ("32bit" or "64bit")."""
        return "64bit" if self.is_64bit else "32bit"


class ArchitectureResolver:
    """Resolves the pointer size of the process captured in a dump.

    Opening the dump is also the startup validation step: a missing or
    corrupt dump fails here rather than inside a benchmark later on, so
    resolution must run even when the pointer size ends up unused.
    """

    def __init__(self, reader: DumpReader | None = None) -> None:
        self.reader = reader or FileDumpReader()

    def resolve_pointer_size(
        self,
        dump_path: str | os.PathLike[str],
        use_os_memory_features: bool = False,
    ) -> int:
        """Open the dump once and return its pointer size in bytes.

        Raises:
            DumpFileNotFound: If the dump does not exist.
            DumpLoadFailed: If the dump cannot be parsed or reports a
                pointer size other than 4 or 8.
        """
        options = CacheOptions(use_os_memory_features=use_os_memory_features)
        with self.reader.open(dump_path, options) as target:
            pointer_size = target.pointer_size

        if pointer_size not in VALID_POINTER_SIZES:
            raise DumpLoadFailed(os.fspath(dump_path), f"unexpected pointer size {pointer_size}")

        logger.info(f"Resolved pointer size {pointer_size} from {os.fspath(dump_path)}")
        return pointer_size

    def resolve(
        self,
        dump_path: str | os.PathLike[str],
        use_os_memory_features: bool = False,
    ) -> ArchitectureInfo:
        """Resolve the dump's architecture as an ArchitectureInfo."""
        return ArchitectureInfo(
            pointer_size_bytes=self.resolve_pointer_size(dump_path, use_os_memory_features)
        )
