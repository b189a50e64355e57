"""Manifest output package for assetrev.

This package provides the ManifestWriter class, the single consumer thread
that serializes scanned FileRecords into a JSON manifest, optionally followed
by the records of a prior manifest.

Example:
    >>> from assetrev.output import ManifestWriter
    >>> from assetrev.models import OutputMode
    >>> writer = ManifestWriter("manifest.json", OutputMode.APPEND, channels.records)
    >>> writer.start()
    >>> # ... scan ...
    >>> writer.close()
    >>> summary = writer.wait()
"""

from .manifest_writer import ManifestWriter

__all__ = ["ManifestWriter"]
