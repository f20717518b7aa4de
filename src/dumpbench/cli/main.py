"""Main CLI entry point for dumpbench.

This module provides the command-line interface for running benchmarks
against the architecture of a crash dump, listing the registered units and
checking the local environment.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from dumpbench.cli.config_loader import (
    DumpbenchConfig,
    LoggingConfig,
    create_config,
    get_default_config_path,
)
from dumpbench.context.environment import DUMP_FILE_ENV, RUNTIME_ENV, EnvironmentContext
from dumpbench.exceptions import DumpbenchError, UnknownBenchmarkUnit
from dumpbench.orchestrator import Orchestrator
from dumpbench.runner.engine import ENGINES, UnitResult, create_engine
from dumpbench.runner.job import PlatformJobBuilder
from dumpbench.runner.platforms import HostPlatform, strategy_for
from dumpbench.runner.registry import get_default_registry
from dumpbench.version import __version__

console = Console()
error_console = Console(stderr=True)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_UNKNOWN_BENCHMARK = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# RichHandler renders time and level itself
RICH_LOG_FORMAT = "%(message)s"


def get_engine_choices() -> list[str]:
    """Get available execution engine modes."""
    return sorted(ENGINES)


def configure_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Install log handlers according to ``config``."""
    level = logging.DEBUG if verbose else getattr(logging, config.level)

    handlers: list[logging.Handler] = []
    if config.format == "rich":
        rich_handler = RichHandler(console=error_console, show_path=False)
        rich_handler.setFormatter(logging.Formatter(RICH_LOG_FORMAT))
        handlers.append(rich_handler)
    else:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(stream)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _load_config(config_path: Path | None, engine: str | None) -> DumpbenchConfig:
    """Load configuration from file, environment and CLI options."""
    overrides: dict[str, Any] = {}
    if engine is not None:
        overrides["engine"] = {"mode": engine}
    return create_config(config_path or get_default_config_path(), overrides)


def execute_run(
    dump: str | None,
    names: Sequence[str],
    *,
    config_path: Path | None = None,
    engine: str | None = None,
    runtime: str | None = None,
    verbose: bool = False,
    quiet: bool = False,
) -> int:
    """Run the orchestrator and return the process exit code."""
    try:
        config = _load_config(config_path, engine)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        error_console.print(f"[red]✗[/red] Invalid configuration: {e}")
        return EXIT_FAILURE

    configure_logging(config.logging, verbose)

    environment = EnvironmentContext()
    if runtime is not None:
        environment.set_runtime_override(runtime)

    orchestrator = Orchestrator(
        get_default_registry(),
        create_engine(config.engine.mode),
        environment=environment,
        job_builder=PlatformJobBuilder(
            runtime_directory=config.runtime.directory_name,
            runtime_binary=config.runtime.binary_name,
        ),
    )

    try:
        results = orchestrator.run(dump, list(names))
    except UnknownBenchmarkUnit as e:
        error_console.print(f"[red]✗[/red] {e}")
        return EXIT_UNKNOWN_BENCHMARK
    except DumpbenchError as e:
        error_console.print(f"[red]✗[/red] {e}")
        if verbose:
            error_console.print_exception()
        return EXIT_FAILURE

    if not quiet:
        if orchestrator.job is not None:
            console.print(f"[dim]Job: {orchestrator.job.identifier_label}[/dim]")
        _print_results_table(results)
    return EXIT_OK


def _format_ns(value: float | None) -> str:
    if value is None:
        return "-"
    if value >= 1e6:
        return f"{value / 1e6:,.2f} ms"
    if value >= 1e3:
        return f"{value / 1e3:,.2f} us"
    return f"{value:,.1f} ns"


def _print_results_table(results: list[UnitResult]) -> None:
    """Print results summary table."""
    table = Table(title="Benchmark Results")
    table.add_column("Benchmark", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Iterations", justify="right")
    table.add_column("Mean / op", justify="right")
    table.add_column("Notes")

    for result in results:
        status_icon = "✓" if result.success else "✗"
        notes = (result.error or "")[:40]
        table.add_row(
            result.name,
            status_icon,
            str(result.iterations),
            _format_ns(result.mean_ns),
            notes,
        )

    console.print()
    console.print(table)


@click.group()
@click.version_option(version=__version__, prog_name="dumpbench")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """dumpbench - run benchmarks against the architecture of a crash dump.

    \b
    The dump decides whether benchmarks target a 32-bit or 64-bit runtime.
    Child benchmark processes read the dump path from the
    DUMPBENCH_DUMP_FILE environment variable.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


@cli.command()
@click.argument("dump", required=False)
@click.argument("benchmarks", nargs=-1)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file",
)
@click.option(
    "--engine",
    "-e",
    type=click.Choice(get_engine_choices()),
    default=None,
    help="Execution engine to use",
)
@click.option(
    "--runtime",
    type=click.Path(),
    default=None,
    help="Runtime executable override (multi-architecture hosts)",
)
@click.pass_context
def run(
    ctx: click.Context,
    dump: str | None,
    benchmarks: tuple[str, ...],
    config: Path | None,
    engine: str | None,
    runtime: str | None,
) -> None:
    """Run benchmarks against DUMP.

    Without BENCHMARKS every registered unit runs. Without DUMP the path is
    read from the environment.

    \b
    Examples:
        dumpbench run app.dmp
        dumpbench run app.dmp OpenDump ScanMapped
        dumpbench run --engine in-process core.1234
    """
    verbose = ctx.obj.get("verbose", False)
    quiet = ctx.obj.get("quiet", False)

    if not quiet:
        console.print(Panel.fit(f"[bold blue]dumpbench v{__version__}[/bold blue]"))

    ctx.exit(
        execute_run(
            dump,
            benchmarks,
            config_path=config,
            engine=engine,
            runtime=runtime,
            verbose=verbose,
            quiet=quiet,
        )
    )


@cli.command(name="list")
def list_units() -> None:
    """List registered benchmark units."""
    registry = get_default_registry()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Qualified name")
    table.add_column("Description")

    for unit in registry.units():
        doc = (unit.handle.__doc__ or "").strip().splitlines()
        table.add_row(unit.name, unit.qualified_name, doc[0] if doc else "")

    console.print(table)


@cli.command()
def check() -> None:
    """Check environment and dependencies."""
    console.print("[bold]Checking dumpbench Environment[/bold]\n")

    checks: list[tuple[str, bool, str]] = []

    py_version = sys.version_info
    py_ok = py_version >= (3, 10)
    checks.append(
        (
            "Python Version",
            py_ok,
            f"{py_version.major}.{py_version.minor}.{py_version.micro}"
            + (" ✓" if py_ok else " (requires 3.10+)"),
        )
    )

    core_deps = [
        ("click", "CLI framework"),
        ("rich", "Console output"),
        ("pydantic", "Data validation"),
        ("yaml", "Configuration"),
    ]

    for dep, desc in core_deps:
        try:
            module = __import__(dep)
            version = getattr(module, "__version__", "installed")
            checks.append((f"{dep}", True, f"{version}"))
        except ImportError:
            checks.append((f"{dep}", False, f"Not installed ({desc})"))

    host = HostPlatform.detect()
    checks.append(("Host platform", host != HostPlatform.UNKNOWN, host.value))
    runtime_selection = "per architecture" if strategy_for(host).multi_arch else "current interpreter"
    checks.append(("Runtime selection", True, runtime_selection))

    environment = EnvironmentContext()
    try:
        dump = environment.get_dump_path()
        checks.append((DUMP_FILE_ENV, Path(dump).is_file(), dump))
    except DumpbenchError:
        checks.append((DUMP_FILE_ENV, False, "Not set"))

    override = environment.get_runtime_override()
    if override is not None:
        checks.append((RUNTIME_ENV, Path(override).is_file(), override))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Component")
    table.add_column("Status")
    table.add_column("Details")

    for name, ok, details in checks:
        status = "[green]✓[/green]" if ok else "[red]✗[/red]"
        table.add_row(name, status, details)

    console.print(table)

    if all(ok for _, ok, _ in checks):
        console.print("\n[green]All checks passed![/green]")
    else:
        console.print("\n[yellow]Some checks failed. See details above.[/yellow]")


@click.command(name="dumpbench-run")
@click.version_option(version=__version__, prog_name="dumpbench")
@click.argument("dump", required=False)
@click.argument("benchmarks", nargs=-1)
def run_main(dump: str | None, benchmarks: tuple[str, ...]) -> None:
    """Run BENCHMARKS (default: all) against DUMP (default: from environment)."""
    sys.exit(execute_run(dump, benchmarks))


if __name__ == "__main__":
    cli()
