"""Dump reading benchmarks."""

from __future__ import annotations

from dumpbench.context.environment import EnvironmentContext
from dumpbench.dumps.reader import CacheOptions, DumpTarget, FileDumpReader
from dumpbench.runner.registry import BenchmarkUnit, benchmark

CHUNK_SIZE = 64 * 1024
REGION_READ_LIMIT = 4096


@benchmark
class OpenDump(BenchmarkUnit):
    """Open the dump and read its header."""

    def setup(self) -> None:
        self.path = EnvironmentContext().get_dump_path()
        self.reader = FileDumpReader()

    def run(self) -> None:
        with self.reader.open(self.path) as target:
            self.pointer_size = target.pointer_size


@benchmark
class ReadRegions(BenchmarkUnit):
    """Read the head of every top-level region."""

    def setup(self) -> None:
        self.target = FileDumpReader().open(EnvironmentContext().get_dump_path())

    def run(self) -> None:
        for region in self.target.regions():
            self.target.read(region.offset, min(region.size, REGION_READ_LIMIT))

    def teardown(self) -> None:
        self.target.close()


class _ScanUnit(BenchmarkUnit):
    use_os_memory_features = False

    def setup(self) -> None:
        options = CacheOptions(use_os_memory_features=self.use_os_memory_features)
        self.target: DumpTarget = FileDumpReader().open(
            EnvironmentContext().get_dump_path(), options
        )

    def run(self) -> None:
        offset = 0
        while offset < self.target.size:
            offset += len(self.target.read(offset, CHUNK_SIZE)) or CHUNK_SIZE

    def teardown(self) -> None:
        self.target.close()


@benchmark
class ScanBuffered(_ScanUnit):
    """Read the whole dump with buffered file reads."""


@benchmark
class ScanMapped(_ScanUnit):
    """Read the whole dump through a memory map."""

    use_os_memory_features = True
