"""Version info"""

__version__ = "0.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

__author__ = "dumpbench Contributors"
__license__ = "Apache-2.0"
__copyright__ = "Copyright 2026 dumpbench Contributors"

PROJECT_NAME = "dumpbench"
PROJECT_DESCRIPTION = (
    "Benchmark orchestrator that targets the architecture of a captured crash dump"
)
