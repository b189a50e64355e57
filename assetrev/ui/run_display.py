"""Console output for assetrev runs.

This module provides the RunDisplay class, a Rich-based presenter for run
headers, scan progress, per-run summaries and errors.

Example:
    from assetrev.ui import RunDisplay

    display = RunDisplay()
    display.display_run_header(config, directories_expected=12)
    progress, advance = display.create_progress_callback(config.root_dir, 12)
    with progress:
        advance()
    display.display_run_summary(result)
"""

from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from assetrev.models import RunConfig, RunResult, ScanError


class RunDisplay:
    """Rich-based presenter for manifest runs.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).
        verbose: If True, every error is listed instead of a capped sample.

    Attributes:
        console: The Rich Console instance used for all output.
    """

    MAX_ERRORS_SHOWN = 10

    def __init__(self, console: Optional[Console] = None, verbose: bool = False) -> None:
        self.console = console or Console()
        self.verbose = verbose

    def display_run_header(self, config: RunConfig, directories_expected: int) -> None:
        """Show the configuration of the run about to start."""
        header_text = (
            f"Root: {config.root_dir}\n"
            f"Output: {config.output_path} ({config.output_mode.value})\n"
            f"Filter: {config.file_filter}\n"
            f"Template: {config.destination_template}\n"
            f"Directories to process: {directories_expected:,}"
        )
        self.console.print(Panel(header_text, title="Manifest Run", border_style="blue"))

    def create_progress_callback(
        self, root_dir: str, total_directories: int
    ) -> Tuple[Progress, Callable[[], None]]:
        """Create a progress bar over directories and a callback advancing it.

        The caller must use the returned Progress as a context manager so the
        bar renders and cleans up properly.

        Args:
            root_dir: Root being scanned (for display).
            total_directories: Expected number of directory completions.

        Returns:
            Tuple of (Progress, callback). Call the callback once per
            completed directory.

        Example:
            progress, advance = display.create_progress_callback("/srv", 12)
            with progress:
                for _ in done_signals:
                    advance()
        """
        progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        task_id = progress.add_task(f"Scanning {root_dir}...", total=total_directories)

        def callback() -> None:
            progress.advance(task_id)

        return progress, callback

    def display_run_summary(self, result: RunResult) -> None:
        """Show the statistics of one finished run."""
        table = Table(title=f"Run Summary: {result.config.root_dir}", show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Directories expected", f"{result.directories_expected:,}")
        table.add_row("Directories scanned", self._format_scanned(result))
        table.add_row("Records written", f"{result.records_written:,}")
        table.add_row("Prior records appended", f"{result.prior_records:,}")
        table.add_row("Errors", self._format_error_count(len(result.errors)))
        table.add_row("Duration", self._format_duration(result.duration_seconds))

        self.console.print(table)

        if result.errors:
            self._display_errors(result.errors)

    def display_run_aborted(self, config: RunConfig, error: BaseException) -> None:
        """Report a run that could not complete."""
        self.console.print(f"[red]Error:[/red] Run for {config.root_dir} aborted: {error}")

    def display_completion(self, results: Sequence[RunResult], failed_runs: int, duration: float) -> None:
        """Show the closing line for all configured runs."""
        total_records = sum(r.records_written for r in results)
        total_errors = sum(len(r.errors) for r in results)

        if failed_runs:
            self.console.print(f"[red]{failed_runs} run(s) aborted.[/red]")
        self.console.print(
            f"[green]All done![/green] {len(results)} run(s), "
            f"{total_records:,} record(s), {total_errors} error(s)."
        )
        self.console.print(f"[dim]It took {self._format_duration(duration)} to run.[/dim]")

    def _display_errors(self, errors: List[ScanError]) -> None:
        if self.verbose:
            displayed_errors = errors
        else:
            displayed_errors = errors[: self.MAX_ERRORS_SHOWN]
        remaining = len(errors) - len(displayed_errors)

        error_text = "\n".join(f"- {e}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more errors (use --verbose to list all)"

        error_panel = Panel(
            error_text,
            title=f"Skipped Entries ({len(errors)})",
            border_style="red",
        )
        self.console.print(error_panel)

    def _format_scanned(self, result: RunResult) -> str:
        if result.complete:
            return f"[green]{result.directories_scanned:,}[/green]"
        return f"[yellow]{result.directories_scanned:,}[/yellow]"

    def _format_error_count(self, count: int) -> str:
        if count == 0:
            return "[green]0[/green]"
        return f"[red]{count:,}[/red]"

    def _format_duration(self, seconds: float) -> str:
        """Convert seconds to human-readable duration.

        Args:
            seconds: Duration in seconds.

        Returns:
            Formatted duration string (e.g., "0.42s", "5m 23s").
        """
        if seconds < 0:
            seconds = 0
        if seconds < 60:
            return f"{seconds:.2f}s"
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
