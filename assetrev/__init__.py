"""assetrev - Asset Revision Manifest Tool.

A Python application that scans asset trees concurrently, fingerprints files
with CRC-32 and records a manifest mapping each source path to a revisioned,
cache-busting destination path.
"""

__version__ = "0.1.0"

from .models import (
    ErrorKind,
    FileRecord,
    OutputMode,
    RunConfig,
    RunResult,
    ScanError,
)

__all__ = [
    "__version__",
    "ErrorKind",
    "FileRecord",
    "OutputMode",
    "RunConfig",
    "RunResult",
    "ScanError",
]


def main() -> None:
    """Entry point for the assetrev CLI application.

    This function is called when the package is run with ``python -m
    assetrev``. It imports and runs the Typer app from the assetrev.cli
    module.
    """
    from assetrev.cli import app
    app()
