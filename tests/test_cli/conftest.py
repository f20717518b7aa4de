"""Pytest configuration for CLI tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from dumpbench.cli import main as cli_main
from dumpbench.runner.engine import ExecutionEngine, InProcessEngine
from dumpbench.runner.platforms import HostPlatform


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create an isolated CLI test runner."""
    return CliRunner()


@pytest.fixture
def engine_modes(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Replace engine creation with a fast in-process engine.

    Every iteration takes one tick of a fake clock, so the fixed job policy
    completes instantly. Returns the list of requested engine modes.
    """
    requested: list[str] = []

    def fake_create_engine(mode: str) -> ExecutionEngine:
        requested.append(mode)
        ticks: Iterator[int] = iter(range(10**9))
        return InProcessEngine(clock=lambda: float(next(ticks)))

    monkeypatch.setattr(cli_main, "create_engine", fake_create_engine)
    monkeypatch.setattr(HostPlatform, "detect", classmethod(lambda cls: HostPlatform.LINUX))
    return requested


@pytest.fixture
def sample_yaml_config(tmp_path: Path) -> Path:
    """Create a sample YAML configuration file."""
    config_content = """\
# dumpbench configuration
runtime:
  directory_name: Python312
  binary_name: python.exe

engine:
  mode: in-process

logging:
  level: ${DUMPBENCH_TEST_LEVEL:WARNING}
  format: plain
"""
    config_file = tmp_path / "dumpbench.yaml"
    config_file.write_text(config_content)
    return config_file


@pytest.fixture
def invalid_config(tmp_path: Path) -> Path:
    """Create a configuration file with an unknown engine mode."""
    config_file = tmp_path / "invalid.yaml"
    config_file.write_text("engine:\n  mode: threads\n")
    return config_file
