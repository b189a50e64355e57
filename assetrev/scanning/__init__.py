"""Tree scanning package for assetrev.

This package provides the concurrent scanning engine:

- PathHasher: Computes CRC-32 fingerprints of file contents.
- DirectoryCounter: Pre-walks a tree to count the directories a scan visits.
- TreeScanner: Walks a tree on a bounded worker pool and streams FileRecords.
- ScanChannels: The bounded record and event queues between them.

Example:
    >>> from assetrev.scanning import DirectoryCounter, PathHasher
    >>>
    >>> DirectoryCounter().count("/srv/assets")
    12
    >>> PathHasher().hash_file("/srv/assets/site.css")
    '1c291ca3'
"""

from .channels import CLOSE, DEFAULT_BUFFER_SIZE, ScanChannels
from .directory_counter import DirectoryCounter
from .path_hasher import CASTAGNOLI, DEFAULT_POLYNOMIAL, IEEE, KOOPMAN, PathHasher
from .tree_scanner import DEFAULT_WORKERS, TreeScanner

__all__ = [
    "CASTAGNOLI",
    "CLOSE",
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_POLYNOMIAL",
    "DEFAULT_WORKERS",
    "IEEE",
    "KOOPMAN",
    "DirectoryCounter",
    "PathHasher",
    "ScanChannels",
    "TreeScanner",
]
