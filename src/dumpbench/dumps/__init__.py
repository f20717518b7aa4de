"""Crash dump reading and architecture resolution."""

from dumpbench.dumps.reader import (
    CacheOptions,
    DumpFormat,
    DumpReader,
    DumpRegion,
    DumpTarget,
    FileDumpReader,
)
from dumpbench.dumps.resolver import ArchitectureInfo, ArchitectureResolver

__all__ = [
    "ArchitectureInfo",
    "ArchitectureResolver",
    "CacheOptions",
    "DumpFormat",
    "DumpReader",
    "DumpRegion",
    "DumpTarget",
    "FileDumpReader",
]
