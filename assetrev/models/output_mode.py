"""
OutputMode and ErrorKind enums for manifest runs.

OutputMode selects how a run treats an existing manifest at its destination:
1. Overwrite - The manifest holds only the records scanned by this run
2. Append - Records from the prior manifest follow the freshly scanned ones

ErrorKind tags every non-fatal error reported while scanning or writing.
"""

from enum import Enum


class OutputMode(Enum):
    """How the manifest writer treats a prior manifest at the same path."""
    OVERWRITE = "overwrite"   # Fresh manifest, prior content discarded
    APPEND = "append"         # Prior records concatenated after new ones


class ErrorKind(Enum):
    """Category of a non-fatal error raised during a run."""
    OPEN = "open"                 # Directory could not be opened or listed
    STAT = "stat"                 # Entry or symlink target could not be stat-ed
    READLINK = "readlink"         # Symlink target could not be read
    FILTER = "filter"             # File filter is not a valid regular expression
    HASH = "hash"                 # File could not be read for fingerprinting
    NOT_REGULAR = "not_regular"   # FIFO, socket or device file
    WRITE = "write"               # Manifest destination could not be written
    INTERNAL = "internal"         # Unexpected failure inside a scan task
