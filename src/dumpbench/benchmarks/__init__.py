"""Built-in benchmark units.

Importing this package registers the units on the default registry. Each unit
reads the dump recorded in the run context, so it behaves the same whether it
runs in the orchestrator or in a child process.
"""

from dumpbench.benchmarks.reading import OpenDump, ReadRegions, ScanBuffered, ScanMapped

__all__ = [
    "OpenDump",
    "ReadRegions",
    "ScanBuffered",
    "ScanMapped",
]
