"""Tests for the child process entry point."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from dumpbench.context.environment import DUMP_FILE_ENV
from dumpbench.runner.engine import UnitResult
from dumpbench.runner.job import JobConfiguration
from dumpbench.worker import EXIT_FAILURE, EXIT_UNKNOWN_UNIT, main


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


def last_line(output: str) -> str:
    return [line for line in output.splitlines() if line.strip()][-1]


class TestWorker:
    """Tests for the worker command."""

    def test_measures_unit_and_prints_json(
        self, cli_runner: CliRunner, minidump_x64: Path, fast_job: JobConfiguration
    ) -> None:
        os.environ[DUMP_FILE_ENV] = str(minidump_x64)

        result = cli_runner.invoke(main, ["benchmarks.OpenDump", "--job", fast_job.to_json()])

        assert result.exit_code == 0
        unit_result = UnitResult.from_dict(json.loads(last_line(result.output)))
        assert unit_result.name == "benchmarks.OpenDump"
        assert unit_result.job_id == "test-job"
        assert unit_result.success
        assert unit_result.iterations >= fast_job.min_iteration_count

    def test_lookup_ignores_case(
        self, cli_runner: CliRunner, minidump_x64: Path, fast_job: JobConfiguration
    ) -> None:
        os.environ[DUMP_FILE_ENV] = str(minidump_x64)

        result = cli_runner.invoke(main, ["BENCHMARKS.scanbuffered", "--job", fast_job.to_json()])

        assert result.exit_code == 0
        assert json.loads(last_line(result.output))["name"] == "benchmarks.ScanBuffered"

    def test_missing_context(self, cli_runner: CliRunner, fast_job: JobConfiguration) -> None:
        result = cli_runner.invoke(main, ["benchmarks.OpenDump", "--job", fast_job.to_json()])

        assert result.exit_code == EXIT_FAILURE
        assert DUMP_FILE_ENV in result.output

    def test_unknown_unit(
        self, cli_runner: CliRunner, minidump_x64: Path, fast_job: JobConfiguration
    ) -> None:
        os.environ[DUMP_FILE_ENV] = str(minidump_x64)

        result = cli_runner.invoke(main, ["benchmarks.Nope", "--job", fast_job.to_json()])

        assert result.exit_code == EXIT_UNKNOWN_UNIT
        assert "Benchmark 'benchmarks.Nope' not found." in result.output

    def test_job_required(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["benchmarks.OpenDump"])

        assert result.exit_code != 0
        assert "--job" in result.output
