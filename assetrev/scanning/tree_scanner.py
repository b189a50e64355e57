"""Concurrent directory tree scanning.

This module provides the TreeScanner class which walks a directory tree on a
bounded worker pool, fingerprints every file whose name matches a filter, and
streams one FileRecord per file to the record channel while the walk is still
in progress.

Each directory is one task on the pool's work queue. A task lists its
directory, submits a new task for every subdirectory (real or reached through
a symlink), processes its files in name order, and finally emits exactly one
DirectoryDone event. A pending-task counter joins the whole tree: when the
last outstanding task ends, ScanFinished is emitted.

Example:
    >>> from assetrev.scanning import ScanChannels, TreeScanner
    >>> channels = ScanChannels.create(buffer_size=5)
    >>> scanner = TreeScanner(channels, file_filter=r"\\.png$")
    >>> scanner.start("/srv/assets")
    >>> # consume channels.events until ScanFinished, channels.records meanwhile
    >>> scanner.close()
"""

import logging
import os
import re
import stat
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import FrozenSet, List, Optional, Pattern, Union

from assetrev.models import (
    DEFAULT_FILE_FILTER,
    DirectoryDone,
    ErrorKind,
    FileRecord,
    ScanError,
    ScanFinished,
)
from assetrev.templating import DEFAULT_TEMPLATE, DestinationTemplate

from .channels import ScanChannels
from .path_hasher import PathHasher
from .symlinks import DirIdentity, dir_identity, is_cycle, is_directory, resolve_symlink

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8

# Relative directory of the scan root; every source path starts with it
ROOT_RELATIVE_DIR = "/"


class TreeScanner:
    """Walks a directory tree concurrently and emits file records.

    Errors never abort the scan. Every failure (directory open, stat,
    readlink, invalid filter, hashing, non-regular file) is reported as a
    ScanError on the event channel and the offending entry is skipped. A
    directory that cannot be opened emits no DirectoryDone, but its task
    still ends, so the scan always finishes.

    Symlinked directories are followed. A directory whose (device, inode) is
    already among its ancestors is a cycle and is not entered.

    Attributes:
        max_workers: Size of the worker pool.
    """

    def __init__(
        self,
        channels: ScanChannels,
        file_filter: str = DEFAULT_FILE_FILTER,
        destination_template: str = DEFAULT_TEMPLATE,
        hasher: Optional[PathHasher] = None,
        max_workers: int = DEFAULT_WORKERS,
    ) -> None:
        """Initialize the TreeScanner.

        Args:
            channels: Record and event channels to emit on.
            file_filter: Regular expression searched in each filename. An
                empty filter matches everything.
            destination_template: Template for destination paths.
            hasher: Optional PathHasher. If not provided, an IEEE CRC-32
                hasher is created.
            max_workers: Number of worker threads.

        Raises:
            ValueError: If max_workers is less than 1.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.max_workers = max_workers
        self._channels = channels
        self._template = DestinationTemplate(destination_template)
        self._hasher = hasher if hasher is not None else PathHasher()
        self._pattern, self._filter_error = self._compile_filter(file_filter or DEFAULT_FILE_FILTER)

        self._lock = threading.Lock()
        self._pending = 0
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None

    def start(self, root_dir: str) -> None:
        """Begin scanning ``root_dir`` in the background.

        Returns immediately. Consume ``channels.events`` until ScanFinished
        arrives, draining ``channels.records`` concurrently, then call close().

        Raises:
            RuntimeError: If the scanner was already started.
        """
        if self._executor is not None:
            raise RuntimeError("TreeScanner has already been started")

        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="tree-scanner",
        )

        try:
            ancestors: FrozenSet[DirIdentity] = frozenset({dir_identity(os.stat(root_dir))})
        except OSError:
            # Listing the root fails too and reports the error
            ancestors = frozenset()

        logger.debug("Scanning %s with %d workers", root_dir, self.max_workers)
        self._submit(root_dir, ROOT_RELATIVE_DIR, ancestors)

    def cancel(self) -> None:
        """Stop the scan early.

        Directories still queued end without being listed and no new ones
        are submitted. Tasks already running stop after their current entry.
        ScanFinished is still emitted once every task has ended, so the event
        channel must be drained until then.
        """
        self._cancelled.set()

    @property
    def finished(self) -> bool:
        """Whether ScanFinished has been emitted, or the scan never started."""
        return self._executor is None or self._finished.is_set()

    def close(self) -> None:
        """Shut down the worker pool, waiting for running tasks to return."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    @property
    def pending_tasks(self) -> int:
        """Number of directory tasks submitted but not yet finished."""
        with self._lock:
            return self._pending

    def _submit(self, dir_path: str, relative_dir: str, ancestors: FrozenSet[DirIdentity]) -> None:
        if self._executor is None:
            raise RuntimeError("TreeScanner has not been started")
        with self._lock:
            self._pending += 1
        self._executor.submit(self._run_task, dir_path, relative_dir, ancestors)

    def _run_task(self, dir_path: str, relative_dir: str, ancestors: FrozenSet[DirIdentity]) -> None:
        try:
            self._scan_directory(dir_path, relative_dir, ancestors)
        except Exception as e:
            logger.exception("Unexpected error scanning %s", dir_path)
            self._report(ErrorKind.INTERNAL, dir_path, e)
        finally:
            self._task_done()

    def _task_done(self) -> None:
        with self._lock:
            self._pending -= 1
            finished = self._pending == 0
        if finished:
            self._channels.events.put(ScanFinished())
            self._finished.set()

    def _scan_directory(self, dir_path: str, relative_dir: str, ancestors: FrozenSet[DirIdentity]) -> None:
        if self._cancelled.is_set():
            return

        try:
            entries = self._list_directory(dir_path)
        except OSError as e:
            self._report(ErrorKind.OPEN, dir_path, e)
            return

        for entry in entries:
            if self._cancelled.is_set():
                return
            self._process_entry(dir_path, relative_dir, ancestors, entry)

        self._channels.events.put(DirectoryDone(path=dir_path, relative_dir=relative_dir))

    def _list_directory(self, dir_path: str) -> List[os.DirEntry]:
        with os.scandir(dir_path) as iterator:
            return sorted(iterator, key=lambda entry: entry.name)

    def _process_entry(
        self,
        dir_path: str,
        relative_dir: str,
        ancestors: FrozenSet[DirIdentity],
        entry: os.DirEntry,
    ) -> None:
        name = entry.name
        try:
            if entry.is_dir(follow_symlinks=False):
                self._descend(entry.path, entry.stat(follow_symlinks=False), relative_dir + name + "/", ancestors)
                return
            is_link = entry.is_symlink()
        except OSError as e:
            self._report(ErrorKind.STAT, entry.path, e)
            return

        if is_link:
            try:
                target = resolve_symlink(entry.path, dir_path)
            except OSError as e:
                self._report(ErrorKind.READLINK, entry.path, e)
                return
            try:
                target_stat = os.stat(target)
            except OSError as e:
                self._report(ErrorKind.STAT, entry.path, e)
                return

            if is_directory(target_stat):
                # Scan the resolved target, keeping the link's name in source paths
                self._descend(target, target_stat, relative_dir + name + "/", ancestors)
                return
        else:
            target = entry.path
            try:
                target_stat = entry.stat(follow_symlinks=False)
            except OSError as e:
                self._report(ErrorKind.STAT, entry.path, e)
                return

        self._process_file(target, target_stat, relative_dir, name)

    def _process_file(self, file_path: str, file_stat: os.stat_result, relative_dir: str, name: str) -> None:
        if self._pattern is None:
            self._report(ErrorKind.FILTER, file_path, self._filter_error or "invalid file filter")
            return
        if not self._pattern.search(name):
            return

        if not stat.S_ISREG(file_stat.st_mode):
            self._report(ErrorKind.NOT_REGULAR, file_path, "not a regular file")
            return

        try:
            fingerprint = self._hasher.hash_file(file_path)
        except OSError as e:
            self._report(ErrorKind.HASH, file_path, e)
            return

        record = FileRecord(
            source_path=relative_dir + name,
            destination_path=self._template.render_for(relative_dir, name, fingerprint),
            fingerprint=fingerprint,
            size_bytes=file_stat.st_size,
        )
        self._channels.records.put(record)

    def _descend(
        self,
        dir_path: str,
        dir_stat: os.stat_result,
        relative_dir: str,
        ancestors: FrozenSet[DirIdentity],
    ) -> None:
        if is_cycle(dir_stat, ancestors):
            logger.warning("Skipping symlink cycle at %s", dir_path)
            return
        if self._cancelled.is_set():
            return
        self._submit(dir_path, relative_dir, ancestors | {dir_identity(dir_stat)})

    def _report(self, kind: ErrorKind, path: str, error: Union[BaseException, str]) -> None:
        self._channels.events.put(ScanError(kind=kind, path=path, message=str(error)))

    @staticmethod
    def _compile_filter(file_filter: str):
        try:
            pattern: Optional[Pattern[str]] = re.compile(file_filter)
        except re.error as e:
            message = f"Invalid file filter {file_filter!r}: {e}"
            logger.warning(message)
            return None, message
        return pattern, None
