"""Bounded channels connecting TreeScanner to its consumers.

Two queues share one capacity:
- records: FileRecord values consumed by ManifestWriter, closed with CLOSE
- events: DirectoryDone, ScanError and ScanFinished values consumed by
  RunOrchestrator

A producer blocks on ``put`` while its queue is full; that backpressure is
the only flow control between scanner workers and consumers.
"""

import queue
from dataclasses import dataclass
from typing import Any

DEFAULT_BUFFER_SIZE = 5


class _Close:
    """Sentinel type marking the end of the record stream."""

    def __repr__(self) -> str:
        return "CLOSE"


CLOSE = _Close()


@dataclass
class ScanChannels:
    """The record and event queues for one run."""
    records: "queue.Queue[Any]"
    events: "queue.Queue[Any]"
    buffer_size: int

    @classmethod
    def create(cls, buffer_size: int = DEFAULT_BUFFER_SIZE) -> "ScanChannels":
        """Create both queues with the same capacity.

        Args:
            buffer_size: Queue capacity. Zero means unbounded.

        Raises:
            ValueError: If buffer_size is negative.
        """
        if buffer_size < 0:
            raise ValueError(f"buffer_size must not be negative, got {buffer_size}")
        return cls(
            records=queue.Queue(maxsize=buffer_size),
            events=queue.Queue(maxsize=buffer_size),
            buffer_size=buffer_size,
        )

    def close_records(self) -> None:
        """Signal the record consumer that no more records will arrive."""
        self.records.put(CLOSE)
