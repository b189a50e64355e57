"""Pre-scan directory counting.

This module provides the DirectoryCounter class, which walks a tree with the
same recursion and symlink rules as TreeScanner and counts the directories it
will visit. The count is the expected number of DirectoryDone signals for a
run and drives the progress display.

Example:
    >>> from assetrev.scanning import DirectoryCounter
    >>> counter = DirectoryCounter()
    >>> counter.count("/srv/assets")
    12
"""

import logging
import os
from typing import FrozenSet

from .symlinks import DirIdentity, dir_identity, is_cycle, is_directory, resolve_symlink

logger = logging.getLogger(__name__)


class DirectoryCounter:
    """Counts directories reachable from a root, following directory symlinks.

    The root counts once, plus one for every real subdirectory and every
    symlink resolving to a directory, recursively. A directory that cannot
    be opened contributes zero; TreeScanner emits no completion signal for
    such a directory either. Errors while reading an opened directory, or
    while stat-ing a real subdirectory, propagate to the caller.

    Symlink cycles are cut the same way TreeScanner cuts them: a directory
    whose (device, inode) already appears among its ancestors is not counted.
    """

    def count(self, root_dir: str) -> int:
        """Count the directories under ``root_dir``, including itself.

        Args:
            root_dir: Root of the tree to count.

        Returns:
            Number of directories, or 0 if the root cannot be accessed.

        Raises:
            OSError: If reading a directory fails after it was opened.
        """
        try:
            root_stat = os.stat(root_dir)
        except OSError as e:
            logger.warning("Cannot access root directory %s: %s", root_dir, e)
            return 0

        if not is_directory(root_stat):
            logger.warning("Root is not a directory: %s", root_dir)
            return 0

        return self._count(root_dir, frozenset({dir_identity(root_stat)}))

    def _count(self, dir_path: str, ancestors: FrozenSet[DirIdentity]) -> int:
        try:
            iterator = os.scandir(dir_path)
        except OSError as e:
            logger.warning("Cannot open directory %s: %s", dir_path, e)
            return 0

        with iterator:
            entries = list(iterator)

        total = 1
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                total += self._descend(entry.path, entry.stat(follow_symlinks=False), ancestors)
            elif entry.is_symlink():
                total += self._count_symlink(dir_path, entry.path, ancestors)
        return total

    def _count_symlink(self, dir_path: str, link_path: str, ancestors: FrozenSet[DirIdentity]) -> int:
        try:
            target = resolve_symlink(link_path, dir_path)
            target_stat = os.stat(target)
        except OSError as e:
            logger.debug("Ignoring unresolvable symlink %s: %s", link_path, e)
            return 0

        if not is_directory(target_stat):
            return 0

        try:
            return self._descend(target, target_stat, ancestors)
        except OSError as e:
            logger.debug("Ignoring unreadable symlinked directory %s: %s", target, e)
            return 0

    def _descend(self, dir_path: str, dir_stat: os.stat_result, ancestors: FrozenSet[DirIdentity]) -> int:
        if is_cycle(dir_stat, ancestors):
            logger.debug("Not counting symlink cycle at %s", dir_path)
            return 0
        return self._count(dir_path, ancestors | {dir_identity(dir_stat)})
