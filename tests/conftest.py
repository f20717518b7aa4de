"""Pytest configuration and shared fixtures for tests."""

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from dump_builders import ARCH_AMD64, ARCH_INTEL, build_elf_core, build_minidump

from dumpbench.runner.job import JobConfiguration
from dumpbench.runner.registry import BenchmarkRegistry, BenchmarkUnit

# Environment Fixtures


@pytest.fixture(autouse=True)
def clean_environment() -> Generator[None, None, None]:
    """Ensure clean environment for each test."""
    # Store original environment
    original_env = os.environ.copy()

    for name in list(os.environ):
        if name.startswith("DUMPBENCH_"):
            del os.environ[name]

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


# Dump Fixtures


@pytest.fixture
def write_dump(tmp_path: Path) -> Callable[[bytes, str], Path]:
    """Return a function that writes dump bytes into the temp directory."""

    def _write(content: bytes, name: str = "test.dmp") -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def minidump_x64(write_dump: Callable[[bytes, str], Path]) -> Path:
    """A 64-bit (AMD64) minidump."""
    return write_dump(build_minidump(ARCH_AMD64), "x64.dmp")


@pytest.fixture
def minidump_x86(write_dump: Callable[[bytes, str], Path]) -> Path:
    """A 32-bit (x86) minidump."""
    return write_dump(build_minidump(ARCH_INTEL), "x86.dmp")


@pytest.fixture
def elf_core64(write_dump: Callable[[bytes, str], Path]) -> Path:
    """A 64-bit ELF core file."""
    return write_dump(build_elf_core(2), "core.64")


# Runner Fixtures


@pytest.fixture
def fast_job() -> JobConfiguration:
    """A job with tiny iteration times for unit tests."""
    from datetime import timedelta

    return JobConfiguration(
        identifier_label="test-job",
        warmup_iteration_count=1,
        min_iteration_count=2,
        max_iteration_count=3,
        iteration_duration=timedelta(microseconds=50),
    )


class CountingUnit(BenchmarkUnit):
    """Unit that counts lifecycle calls on the class."""

    setups = 0
    runs = 0
    teardowns = 0

    def setup(self) -> None:
        type(self).setups += 1

    def run(self) -> None:
        type(self).runs += 1

    def teardown(self) -> None:
        type(self).teardowns += 1


@pytest.fixture
def unit_registry() -> BenchmarkRegistry:
    """A registry with three fresh unit classes, in a known order."""
    registry = BenchmarkRegistry()
    for name in ("Alpha", "Beta", "Gamma"):
        unit_cls = type(name, (CountingUnit,), {"setups": 0, "runs": 0, "teardowns": 0})
        registry.register(unit_cls)
    return registry


# Pytest Configuration


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow-running")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Modify test collection to add markers based on location."""
    for item in items:
        if "test_" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
