"""Tests for the benchmark unit registry."""

import pytest

from dumpbench.runner.registry import (
    DEFAULT_NAMESPACE,
    BenchmarkRegistry,
    BenchmarkUnit,
    get_default_registry,
)


class Noop(BenchmarkUnit):
    def run(self) -> None:
        pass


class TestBenchmarkRegistry:
    """Tests for BenchmarkRegistry."""

    def test_register_direct(self) -> None:
        registry = BenchmarkRegistry()
        registry.register(Noop)

        ref = registry.lookup("benchmarks.Noop")

        assert ref is not None
        assert ref.name == "Noop"
        assert ref.qualified_name == "benchmarks.Noop"
        assert ref.handle is Noop

    def test_register_as_decorator_with_name(self) -> None:
        registry = BenchmarkRegistry(namespace="suite")

        @registry.register(name="custom")
        class Unit(BenchmarkUnit):
            def run(self) -> None:
                pass

        assert "suite.custom" in registry
        assert registry.lookup("suite.custom").handle is Unit  # type: ignore[union-attr]

    def test_decorator_returns_class(self) -> None:
        registry = BenchmarkRegistry()

        assert registry.register(Noop) is Noop

    def test_lookup_ignores_case_by_default(self) -> None:
        registry = BenchmarkRegistry()
        registry.register(Noop)

        assert registry.lookup("BENCHMARKS.NOOP") is not None

    def test_lookup_case_sensitive(self) -> None:
        registry = BenchmarkRegistry()
        registry.register(Noop)

        assert registry.lookup("benchmarks.noop", ignore_case=False) is None
        assert registry.lookup("benchmarks.Noop", ignore_case=False) is not None

    def test_lookup_missing(self) -> None:
        assert BenchmarkRegistry().lookup("benchmarks.Missing") is None

    def test_duplicate_rejected(self) -> None:
        registry = BenchmarkRegistry()
        registry.register(Noop)

        with pytest.raises(ValueError, match="already registered"):
            registry.register(Noop)

    def test_duplicate_differing_only_in_case_rejected(self) -> None:
        registry = BenchmarkRegistry()
        registry.register(Noop)

        with pytest.raises(ValueError):
            registry.register(Noop, name="NOOP")

    def test_non_unit_rejected(self) -> None:
        registry = BenchmarkRegistry()

        with pytest.raises(TypeError, match="Unknown benchmark unit type"):
            registry.register(object)  # type: ignore[type-var]

    def test_registration_order_preserved(self, unit_registry: BenchmarkRegistry) -> None:
        assert [ref.name for ref in unit_registry.units()] == ["Alpha", "Beta", "Gamma"]
        assert [ref.name for ref in unit_registry] == ["Alpha", "Beta", "Gamma"]
        assert len(unit_registry) == 3

    def test_contains(self, unit_registry: BenchmarkRegistry) -> None:
        assert "benchmarks.beta" in unit_registry
        assert "benchmarks.Delta" not in unit_registry
        assert 42 not in unit_registry


class TestDefaultRegistry:
    """Tests for the built-in units."""

    def test_builtin_units_registered(self) -> None:
        registry = get_default_registry()

        names = [ref.name for ref in registry.units()]
        assert names == ["OpenDump", "ReadRegions", "ScanBuffered", "ScanMapped"]
        assert registry.namespace == DEFAULT_NAMESPACE

    def test_repeated_calls_do_not_reregister(self) -> None:
        first = len(get_default_registry())

        assert len(get_default_registry()) == first
