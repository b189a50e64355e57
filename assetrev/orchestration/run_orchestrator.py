"""RunOrchestrator for producing one manifest from one run configuration.

This module provides the RunOrchestrator class that wires DirectoryCounter,
TreeScanner and ManifestWriter together for a single RunConfig:

    1. Count - DirectoryCounter pre-walks the root for the expected total
    2. Start - ManifestWriter and TreeScanner start on shared channels
    3. Consume - DirectoryDone advances progress, ScanError is collected,
       ScanFinished ends the loop
    4. Finalize - The record channel is closed and the writer awaited

Example:
    from assetrev.models import RunConfig
    from assetrev.orchestration import RunOrchestrator

    config = RunConfig(root_dir="/srv/static", output_path="/srv/assets.json")
    result = RunOrchestrator(config, buffer_size=5).run()
    print(f"{result.records_written} records, {len(result.errors)} skipped")
"""

import logging
import queue
import time
from contextlib import nullcontext
from typing import Callable, Optional

from assetrev.models import (
    DirectoryDone,
    ErrorKind,
    RunConfig,
    RunResult,
    ScanError,
    ScanFinished,
)
from assetrev.output import ManifestWriter
from assetrev.scanning import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_WORKERS,
    DirectoryCounter,
    PathHasher,
    ScanChannels,
    TreeScanner,
)
from assetrev.ui import RunDisplay

logger = logging.getLogger(__name__)

# How often a cancelled run re-checks whether the scan has finished
EVENT_POLL_SECONDS = 0.1


class RunOrchestrator:
    """Runs the scan and manifest write for one configuration.

    Completion is detected by the scanner's own join (ScanFinished), so a
    directory that fails to open cannot stall the run. The DirectoryCounter
    total drives the progress bar and is compared with the number of
    DirectoryDone signals afterwards; a mismatch is logged and reflected in
    ``RunResult.complete``.

    Attributes:
        config: The run configuration.
        buffer_size: Capacity of the record and event channels.
        max_workers: Size of the scanner's worker pool.
    """

    def __init__(
        self,
        config: RunConfig,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        max_workers: int = DEFAULT_WORKERS,
        hasher: Optional[PathHasher] = None,
        display: Optional[RunDisplay] = None,
    ) -> None:
        """Initialize the RunOrchestrator.

        Args:
            config: Run configuration to execute.
            buffer_size: Channel capacity. Zero means unbounded.
            max_workers: Number of scanner worker threads.
            hasher: Optional PathHasher shared by the scanner workers.
            display: Optional RunDisplay for header and progress output.

        Raises:
            ValueError: If buffer_size is negative or max_workers below 1.
        """
        if buffer_size < 0:
            raise ValueError(f"buffer_size must not be negative, got {buffer_size}")
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.config = config
        self.buffer_size = buffer_size
        self.max_workers = max_workers
        self._hasher = hasher
        self._display = display
        self._counter = DirectoryCounter()

    def run(self) -> RunResult:
        """Scan the configured root and write its manifest.

        Returns:
            RunResult with counts and every non-fatal error encountered.

        Raises:
            OSError: If DirectoryCounter fails while reading the tree; the
                run is aborted before anything is written.
        """
        start_time = time.monotonic()
        config = self.config

        expected = self._counter.count(config.root_dir)
        logger.info("Processing %d directories under %s", expected, config.root_dir)
        if self._display is not None:
            self._display.display_run_header(config, expected)

        result = RunResult(config=config, directories_expected=expected)
        channels = ScanChannels.create(self.buffer_size)

        writer = ManifestWriter(config.output_path, config.output_mode, channels.records)
        writer.start()

        scanner = TreeScanner(
            channels,
            file_filter=config.file_filter,
            destination_template=config.destination_template,
            hasher=self._hasher,
            max_workers=self.max_workers,
        )
        try:
            scanner.start(config.root_dir)
            self._consume_events(channels, result)
        except BaseException:
            # Interrupted (Ctrl+C included): stop the workers before unwinding
            scanner.cancel()
            self._drain_events(channels, scanner)
            raise
        finally:
            scanner.close()
            writer.close()
            summary = writer.wait()

        result.records_written = summary.records_written
        result.prior_records = summary.prior_records
        if summary.error is not None:
            result.errors.append(ScanError(kind=ErrorKind.WRITE, path=config.output_path, message=summary.error))

        if not result.complete:
            logger.warning(
                "Scanned %d of %d expected directories under %s",
                result.directories_scanned,
                result.directories_expected,
                config.root_dir,
            )

        result.duration_seconds = time.monotonic() - start_time
        logger.info(
            "Wrote %d records to %s (%d errors)",
            result.records_written,
            config.output_path,
            len(result.errors),
        )
        return result

    def _consume_events(self, channels: ScanChannels, result: RunResult) -> None:
        """Handle scanner events until the scan has fully drained."""
        advance: Optional[Callable[[], None]] = None
        if self._display is not None:
            progress, advance = self._display.create_progress_callback(
                self.config.root_dir, result.directories_expected
            )
        else:
            progress = nullcontext()

        with progress:
            while True:
                event = channels.events.get()
                if isinstance(event, ScanFinished):
                    break
                if isinstance(event, DirectoryDone):
                    result.directories_scanned += 1
                    if advance is not None:
                        advance()
                elif isinstance(event, ScanError):
                    logger.warning("Skipped %s", event)
                    result.errors.append(event)
                else:
                    logger.error("Ignoring unexpected scan event: %r", event)

    @staticmethod
    def _drain_events(channels: ScanChannels, scanner: TreeScanner) -> None:
        """Discard scanner events until the cancelled scan has finished."""
        while not scanner.finished:
            try:
                channels.events.get(timeout=EVENT_POLL_SECONDS)
            except queue.Empty:
                continue
