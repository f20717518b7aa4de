"""Resolution of benchmark names given on the command line."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from dumpbench.exceptions import UnknownBenchmarkUnit
from dumpbench.runner.registry import BenchmarkRegistry, BenchmarkUnitRef

logger = logging.getLogger(__name__)


class BenchmarkSelector:
    """Maps requested names to registered benchmark units.

    Names are matched case-insensitively against ``<namespace>.<name>``.
    Selection is all-or-nothing: the first unknown name aborts resolution.
    An empty request resolves to an empty list; deciding that this means
    "every unit" is left to the caller.
    """

    def __init__(self, registry: BenchmarkRegistry) -> None:
        self.registry = registry

    def resolve(self, names: Sequence[str]) -> list[BenchmarkUnitRef]:
        """Resolve ``names`` in order.

        Raises:
            UnknownBenchmarkUnit: If any name is not registered.
        """
        resolved: list[BenchmarkUnitRef] = []
        for name in names:
            ref = self.registry.lookup(self.registry.qualified_name(name), ignore_case=True)
            if ref is None:
                logger.error(f"Benchmark '{name}' not found")
                raise UnknownBenchmarkUnit(name)
            resolved.append(ref)
        return resolved
