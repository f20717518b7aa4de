"""Child process entry point for out-of-process benchmark runs.

Started by SubprocessEngine as ``python -m dumpbench.worker UNIT --job JSON``.
The run context is rebuilt from the inherited environment; the result is
written to stdout as a single JSON line.
"""

from __future__ import annotations

import json
import logging
import sys

import click

from dumpbench.context.environment import RunContext
from dumpbench.exceptions import DumpbenchError, UnknownBenchmarkUnit
from dumpbench.runner.engine import measure
from dumpbench.runner.job import JobConfiguration
from dumpbench.runner.registry import get_default_registry

logger = logging.getLogger(__name__)

EXIT_UNKNOWN_UNIT = 2
EXIT_FAILURE = 1


@click.command()
@click.argument("unit")
@click.option("--job", "job_json", required=True, help="Job configuration as JSON")
def main(unit: str, job_json: str) -> None:
    """Measure a single benchmark unit and print the result as JSON."""
    try:
        context = RunContext.from_environment()
        logger.debug(f"Worker context: dump={context.dump_file_path}")

        job = JobConfiguration.from_json(job_json)
        ref = get_default_registry().lookup(unit)
        if ref is None:
            raise UnknownBenchmarkUnit(unit)

        result = measure(ref.handle, job, name=ref.qualified_name)
    except UnknownBenchmarkUnit as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_UNKNOWN_UNIT)
    except DumpbenchError as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_FAILURE)

    click.echo(json.dumps(result.to_dict()))


if __name__ == "__main__":
    main()
