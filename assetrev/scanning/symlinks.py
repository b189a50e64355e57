"""Symlink resolution shared by DirectoryCounter and TreeScanner.

Both walkers must resolve links identically or the pre-scan directory count
drifts from the number of directories actually scanned.
"""

import os
import stat
from typing import FrozenSet, Tuple

# (st_dev, st_ino) of a directory
DirIdentity = Tuple[int, int]


def resolve_symlink(link_path: str, containing_dir: str) -> str:
    """Resolve one level of a symlink.

    Absolute targets are returned as-is. Relative targets are joined onto the
    directory that contains the link.

    Raises:
        OSError: If the link target cannot be read.
    """
    target = os.readlink(link_path)
    if target.startswith(os.sep):
        return target
    return os.path.join(containing_dir, target)


def dir_identity(stat_result: os.stat_result) -> DirIdentity:
    return (stat_result.st_dev, stat_result.st_ino)


def is_directory(stat_result: os.stat_result) -> bool:
    return stat.S_ISDIR(stat_result.st_mode)


def is_cycle(stat_result: os.stat_result, ancestors: FrozenSet[DirIdentity]) -> bool:
    """Whether a directory is already one of its own ancestors."""
    return dir_identity(stat_result) in ancestors
