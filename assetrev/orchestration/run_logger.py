"""RunLogger for recording manifest runs in a structured log file.

This module provides the RunLogger class that writes a plain-text log with a
header, one section per configured run, and a closing summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, TextIO

from assetrev.models import RunConfig, RunResult


class RunLogger:
    """Logger for manifest runs with structured output format.

    Usage:
        with RunLogger(log_path, config_path=config_path) as run_log:
            run_log.log_header()
            for config in configs:
                result = RunOrchestrator(config).run()
                run_log.log_run(result)
            run_log.log_summary(results, failed_runs, duration)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(self, log_file_path: Optional[Path] = None, config_path: Optional[Path] = None) -> None:
        """Initialize the RunLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            config_path: Configuration file the runs were loaded from (used
                in the header).

        Raises:
            OSError: If the log file path is not writable.
        """
        self._config_path = config_path
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._run_counter = 0

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"assetrev_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's parent directory exists.

        Raises:
            OSError: If the parent directory doesn't exist or is not a directory.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "RunLogger":
        """Open the log file for writing.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}") from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the log file, even if an exception occurred."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp and configuration source."""
        self._write_separator()
        self._write_line("Asset Revision Manifest - Run Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        if self._config_path is not None:
            self._write_line(f"Config: {self._config_path}")
        self._write_line("")

    def log_run(self, result: RunResult) -> None:
        """Write the section for one finished run."""
        self._begin_run(result.config)
        self._write_line(f"Directories expected: {result.directories_expected}", indent=2)
        self._write_line(f"Directories scanned: {result.directories_scanned}", indent=2)
        self._write_line(f"Records written: {result.records_written:,}", indent=2)
        self._write_line(f"Prior records appended: {result.prior_records:,}", indent=2)
        self._write_line(f"Duration: {result.duration_seconds:.2f}s", indent=2)

        if result.errors:
            self._write_line(f"Errors ({len(result.errors)}):", indent=2)
            for error in result.errors:
                self._write_line(f"- {error}", indent=4)
        self._write_line("")

    def log_run_aborted(self, config: RunConfig, error: BaseException) -> None:
        """Write the section for a run that could not complete."""
        self._begin_run(config)
        self._write_line(f"! Aborted: {error}", indent=2)
        self._write_line("")

    def log_summary(self, results: Sequence[RunResult], failed_runs: int, duration_seconds: float) -> None:
        """Write the closing summary section."""
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Runs completed: {len(results)}")
        self._write_line(f"Runs aborted: {failed_runs}")
        self._write_line(f"Records written: {sum(r.records_written for r in results):,}")
        self._write_line(f"Errors: {sum(len(r.errors) for r in results)}")
        self._write_line(f"Duration: {duration_seconds:.2f}s")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _begin_run(self, config: RunConfig) -> None:
        self._run_counter += 1
        self._write_line(f"Run {self._run_counter}: {config.root_dir}")
        self._write_line(f"Output: {config.output_path} ({config.output_mode.value})", indent=2)
        self._write_line(f"Filter: {config.file_filter}", indent=2)
        self._write_line(f"Template: {config.destination_template}", indent=2)

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation."""
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
