"""
Asset Revision Manifest - CLI Interface.

A command-line interface that builds content-addressed asset manifests for
every run listed in a JSON configuration file. Each run scans a root
directory, fingerprints matching files with CRC-32 and records their
revisioned destination paths.

Usage Examples:
    # Use the default configuration path
    assetrev

    # Explicit configuration and larger channel buffers
    assetrev --config ./assets.json --channels_buf_size 64

    # More scanner workers, a run log, and verbose output
    python -m assetrev -c ./assets.json --workers 16 --log-file run.log --verbose
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from assetrev import __version__
from assetrev.config import DEFAULT_CONFIG_PATH, ConfigError, load_run_configs
from assetrev.models import RunConfig, RunResult
from assetrev.orchestration import RunLogger, RunOrchestrator
from assetrev.scanning import DEFAULT_BUFFER_SIZE, DEFAULT_WORKERS
from assetrev.ui import RunDisplay

# Initialize Typer app
app = typer.Typer(
    name="assetrev",
    help="Asset Revision Manifest - Fingerprint files and map them to revisioned paths.",
    add_completion=False,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"Asset Revision Manifest v{__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr.

    Args:
        verbose: If True, log at DEBUG level; otherwise only warnings and up.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.command()
def run(
    config: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        envvar="ASSETREV_CONFIG",
        help="JSON file listing the runs to perform.",
    ),
    channels_buf_size: int = typer.Option(
        DEFAULT_BUFFER_SIZE,
        "--channels_buf_size",
        "--channels-buf-size",
        min=1,
        help="Capacity of the record and event channels.",
    ),
    workers: int = typer.Option(
        DEFAULT_WORKERS,
        "--workers",
        "-w",
        min=1,
        help="Number of scanner worker threads.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """
    Build a manifest for every run in the configuration file.

    Runs are processed in file order. Per-file errors are reported and
    skipped; an unreadable or malformed configuration exits with code 1.
    """
    configure_logging(verbose)
    console.print(f"Config used: {config}")

    try:
        configs = load_run_configs(config)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    display = RunDisplay(console=console, verbose=verbose)

    # Try to create the run log; if it fails, proceed without logging
    run_log: Optional[RunLogger] = None
    if log_file:
        try:
            run_log = RunLogger(log_file, config_path=config)
        except OSError as e:
            console.print(
                f"[yellow]Warning:[/yellow] Failed to create log file: {e}. "
                "Continuing without logging."
            )

    try:
        if run_log is not None:
            with run_log:
                run_log.log_header()
                failed_runs = _run_configs(configs, display, channels_buf_size, workers, run_log)
            console.print(f"[dim]Log written to: {run_log.get_log_path()}[/dim]")
        else:
            failed_runs = _run_configs(configs, display, channels_buf_size, workers, None)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        raise typer.Exit(130)

    if failed_runs:
        raise typer.Exit(1)


def _run_configs(
    configs: List[RunConfig],
    display: RunDisplay,
    buffer_size: int,
    workers: int,
    run_log: Optional[RunLogger],
) -> int:
    """Run every configuration in order.

    A run aborted by an OSError is reported and the remaining runs continue.

    Returns:
        Number of aborted runs.
    """
    results: List[RunResult] = []
    failed_runs = 0
    start_time = time.monotonic()

    for run_config in configs:
        orchestrator = RunOrchestrator(
            run_config,
            buffer_size=buffer_size,
            max_workers=workers,
            display=display,
        )
        try:
            result = orchestrator.run()
        except OSError as e:
            failed_runs += 1
            display.display_run_aborted(run_config, e)
            if run_log is not None:
                run_log.log_run_aborted(run_config, e)
            continue

        results.append(result)
        display.display_run_summary(result)
        if run_log is not None:
            run_log.log_run(result)

    duration = time.monotonic() - start_time
    display.display_completion(results, failed_runs, duration)
    if run_log is not None:
        run_log.log_summary(results, failed_runs, duration)
    return failed_runs


if __name__ == "__main__":
    app()
