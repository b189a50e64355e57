"""
Models package for the asset revision manifest tool.

This package provides convenient imports for all data models:
- OutputMode: Overwrite or append manifest handling
- ErrorKind: Category of a non-fatal error
- FileRecord: Manifest entry
- RunConfig: Run configuration entry
- ScanError: Non-fatal error record
- DirectoryDone / ScanFinished: Scan completion events
- WriterSummary: Manifest writer result
- RunResult: Per-configuration run summary
"""

from .output_mode import ErrorKind, OutputMode
from .data_models import (
    DEFAULT_DEST_TEMPLATE,
    DEFAULT_FILE_FILTER,
    DirectoryDone,
    FileRecord,
    RunConfig,
    RunResult,
    ScanError,
    ScanFinished,
    WriterSummary,
)

__all__ = [
    "DEFAULT_DEST_TEMPLATE",
    "DEFAULT_FILE_FILTER",
    "ErrorKind",
    "OutputMode",
    "DirectoryDone",
    "FileRecord",
    "RunConfig",
    "RunResult",
    "ScanError",
    "ScanFinished",
    "WriterSummary",
]
