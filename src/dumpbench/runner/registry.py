"""Registry of benchmark units.

Units are classes deriving from BenchmarkUnit. They are registered under a
qualified name ``<namespace>.<ClassName>`` and kept in registration order,
which is also the order in which "run all" dispatches them.
"""

from __future__ import annotations

import importlib
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TypeVar, overload

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "benchmarks"
BUILTIN_UNITS_MODULE = "dumpbench.benchmarks"


class BenchmarkUnit(ABC):
    """A named, independently executable measured workload.

    Subclasses implement run(); setup() and teardown() bracket the measured
    iterations and are not timed.
    """

    def setup(self) -> None:
        """Prepare state before measurement."""

    @abstractmethod
    def run(self) -> None:
        """The measured operation."""

    def teardown(self) -> None:
        """Release state after measurement."""


UnitT = TypeVar("UnitT", bound=type[BenchmarkUnit])


@dataclass(frozen=True)
class BenchmarkUnitRef:
    """A resolved reference to a registered unit.

    Attributes:
        name: Short unit name (class name).
        qualified_name: Name including the registry namespace.
        handle: The unit class.
    """

    name: str
    qualified_name: str
    handle: type[BenchmarkUnit]


class BenchmarkRegistry:
    """Ordered registry of benchmark units.

    Example:
        >>> registry = BenchmarkRegistry()
        >>> @registry.register
        ... class Noop(BenchmarkUnit):
        ...     def run(self) -> None:
        ...         pass
        >>> registry.lookup("benchmarks.noop").name
        'Noop'
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.namespace = namespace
        self._units: dict[str, BenchmarkUnitRef] = {}

    def qualified_name(self, name: str) -> str:
        return f"{self.namespace}.{name}"

    @overload
    def register(self, unit_cls: UnitT) -> UnitT: ...

    @overload
    def register(self, unit_cls: None = None, *, name: str | None = None) -> Callable[[UnitT], UnitT]: ...

    def register(
        self,
        unit_cls: UnitT | None = None,
        *,
        name: str | None = None,
    ) -> UnitT | Callable[[UnitT], UnitT]:
        """Register a unit class; usable directly or as a decorator."""

        def decorator(cls: UnitT) -> UnitT:
            if not (isinstance(cls, type) and issubclass(cls, BenchmarkUnit)):
                raise TypeError(f"Unknown benchmark unit type: {cls!r}")
            unit_name = name or cls.__name__
            qualified = self.qualified_name(unit_name)
            key = qualified.lower()
            if key in self._units:
                raise ValueError(f"Benchmark unit already registered: {qualified}")
            self._units[key] = BenchmarkUnitRef(
                name=unit_name,
                qualified_name=qualified,
                handle=cls,
            )
            logger.debug(f"Registered benchmark unit {qualified}")
            return cls

        if unit_cls is not None:
            return decorator(unit_cls)
        return decorator

    def lookup(self, qualified_name: str, ignore_case: bool = True) -> BenchmarkUnitRef | None:
        """Find a unit by its qualified name."""
        if ignore_case:
            return self._units.get(qualified_name.lower())
        ref = self._units.get(qualified_name.lower())
        if ref is not None and ref.qualified_name == qualified_name:
            return ref
        return None

    def units(self) -> list[BenchmarkUnitRef]:
        """All registered units in registration order."""
        return list(self._units.values())

    def __iter__(self) -> Iterator[BenchmarkUnitRef]:
        return iter(self.units())

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, qualified_name: object) -> bool:
        return isinstance(qualified_name, str) and qualified_name.lower() in self._units


default_registry = BenchmarkRegistry()


def benchmark(unit_cls: UnitT) -> UnitT:
    """Register a unit on the default registry."""
    return default_registry.register(unit_cls)


def get_default_registry() -> BenchmarkRegistry:
    """Return the default registry with the built-in units loaded."""
    importlib.import_module(BUILTIN_UNITS_MODULE)
    return default_registry
