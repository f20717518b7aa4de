"""Tests for benchmark name resolution."""

import pytest

from dumpbench.exceptions import ErrorKind, UnknownBenchmarkUnit
from dumpbench.runner.registry import BenchmarkRegistry
from dumpbench.runner.selector import BenchmarkSelector


class TestBenchmarkSelector:
    """Tests for BenchmarkSelector."""

    def test_resolves_in_request_order(self, unit_registry: BenchmarkRegistry) -> None:
        refs = BenchmarkSelector(unit_registry).resolve(["Gamma", "Alpha"])

        assert [ref.name for ref in refs] == ["Gamma", "Alpha"]

    def test_case_insensitive(self, unit_registry: BenchmarkRegistry) -> None:
        refs = BenchmarkSelector(unit_registry).resolve(["beta"])

        assert refs[0].qualified_name == "benchmarks.Beta"

    def test_duplicates_kept(self, unit_registry: BenchmarkRegistry) -> None:
        refs = BenchmarkSelector(unit_registry).resolve(["Alpha", "alpha"])

        assert [ref.name for ref in refs] == ["Alpha", "Alpha"]

    def test_empty_request(self, unit_registry: BenchmarkRegistry) -> None:
        assert BenchmarkSelector(unit_registry).resolve([]) == []

    def test_unknown_name(self, unit_registry: BenchmarkRegistry) -> None:
        with pytest.raises(UnknownBenchmarkUnit) as exc_info:
            BenchmarkSelector(unit_registry).resolve(["Alpha", "Delta", "Beta"])

        assert exc_info.value.name == "Delta"
        assert exc_info.value.kind == ErrorKind.UNKNOWN_BENCHMARK_UNIT
        assert str(exc_info.value) == "Benchmark 'Delta' not found."

    def test_first_unknown_name_reported(self, unit_registry: BenchmarkRegistry) -> None:
        with pytest.raises(UnknownBenchmarkUnit) as exc_info:
            BenchmarkSelector(unit_registry).resolve(["Foo", "Bar"])

        assert exc_info.value.name == "Foo"

    def test_qualified_input_is_not_double_prefixed(self, unit_registry: BenchmarkRegistry) -> None:
        """Names are always prefixed with the namespace."""
        with pytest.raises(UnknownBenchmarkUnit):
            BenchmarkSelector(unit_registry).resolve(["benchmarks.Alpha"])
