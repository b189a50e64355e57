"""
Manifest writer for the asset revision manifest tool.

This module contains the ManifestWriter class, a single consumer thread that
drains FileRecords from the record channel and writes them incrementally as a
JSON array while the scan is still running.
"""

import json
import logging
import os
import queue
import textwrap
import threading
from typing import Any, List, Optional, TextIO

from assetrev.models import FileRecord, OutputMode, WriterSummary
from assetrev.scanning.channels import CLOSE

# Configure module logger
logger = logging.getLogger(__name__)

INDENT = "  "


class ManifestWriter:
    """
    Streams file records into a manifest document.

    The destination is created or truncated when the thread starts, in both
    output modes. In append mode the prior manifest at the same path is read
    first and its records are written after all freshly scanned records once
    the record stream is closed. No deduplication takes place.

    A prior manifest that is missing or cannot be parsed is treated as empty.
    If the destination cannot be opened or written, the failure is recorded
    in the summary and the thread keeps draining the record channel so that
    producers never block on a full queue.
    """

    def __init__(
        self,
        output_path: str,
        output_mode: OutputMode,
        records: "queue.Queue[Any]",
    ) -> None:
        """
        Create a ManifestWriter for one run.

        Parameters:
            output_path (str): Manifest destination path.
            output_mode (OutputMode): Whether to append prior records.
            records (queue.Queue): Record channel, terminated by CLOSE.
        """
        self.output_path = output_path
        self.output_mode = output_mode
        self._records = records
        self._summary = WriterSummary(output_path=output_path)
        self._closed = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the consumer thread."""
        if self._thread is not None:
            raise RuntimeError("ManifestWriter has already been started")
        self._thread = threading.Thread(target=self._run, name="manifest-writer", daemon=True)
        self._thread.start()

    def close(self) -> None:
        """Mark the end of the record stream."""
        self._records.put(CLOSE)

    def wait(self, timeout: Optional[float] = None) -> WriterSummary:
        """
        Wait for the consumer thread to finish.

        Parameters:
            timeout (Optional[float]): Seconds to wait, or None to wait forever.

        Returns:
            WriterSummary: Counts of written records and any write error.
        """
        if self._thread is not None:
            self._thread.join(timeout)
        return self._summary

    def _run(self) -> None:
        try:
            self._write_manifest()
        except Exception as e:
            logger.exception("Manifest writer for %s failed", self.output_path)
            self._fail(f"Unexpected error writing manifest {self.output_path}: {e}")
            self._drain()

    def _write_manifest(self) -> None:
        prior: List[FileRecord] = []
        if self.output_mode is OutputMode.APPEND:
            prior = self._load_prior()

        try:
            handle = self._open_destination()
        except OSError as e:
            self._fail(f"Cannot open manifest {self.output_path}: {e}")
            self._drain()
            return

        with handle:
            try:
                self._write_document(handle, prior)
            except OSError as e:
                self._fail(f"Error writing manifest {self.output_path}: {e}")
                self._drain()

    def _load_prior(self) -> List[FileRecord]:
        """
        Read the records of a prior manifest at the destination path.

        Returns:
            list[FileRecord]: Prior records, or an empty list if the file is
            missing, unreadable, or not a valid manifest.
        """
        try:
            with open(self.output_path, "r", encoding="utf-8", errors="surrogateescape") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info("No prior manifest at %s; writing a fresh one", self.output_path)
            return []
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("Ignoring unreadable prior manifest %s: %s", self.output_path, e)
            return []

        if not isinstance(data, list):
            logger.warning("Ignoring prior manifest %s: top level is not an array", self.output_path)
            return []

        try:
            records = [FileRecord.from_dict(item) for item in data]
        except ValueError as e:
            logger.warning("Ignoring prior manifest %s: %s", self.output_path, e)
            return []

        logger.debug("Loaded %d prior records from %s", len(records), self.output_path)
        return records

    def _open_destination(self) -> TextIO:
        parent = os.path.dirname(self.output_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        return open(self.output_path, "w", encoding="utf-8", errors="surrogateescape")

    def _write_document(self, handle: TextIO, prior: List[FileRecord]) -> None:
        handle.write("[\n")

        written = 0
        while True:
            item = self._records.get()
            if item is CLOSE:
                self._closed = True
                break
            self._write_record(handle, item, written)
            written += 1
            self._summary.records_written = written

        for record in prior:
            self._write_record(handle, record, written)
            written += 1
            self._summary.prior_records += 1

        handle.write("\n]\n")
        logger.debug(
            "Wrote %d records (%d prior) to %s",
            self._summary.records_written,
            self._summary.prior_records,
            self.output_path,
        )

    @staticmethod
    def _write_record(handle: TextIO, record: FileRecord, index: int) -> None:
        if index > 0:
            handle.write(",\n")
        text = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
        handle.write(textwrap.indent(text, INDENT))

    def _drain(self) -> None:
        """Discard records until the stream is closed."""
        while not self._closed:
            if self._records.get() is CLOSE:
                self._closed = True

    def _fail(self, message: str) -> None:
        logger.error(message)
        self._summary.error = message
