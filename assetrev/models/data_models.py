"""
Core data models for the asset revision manifest tool.

This module contains the following dataclasses:
- FileRecord: One manifest entry mapping a source file to its revisioned path
- RunConfig: One configuration entry from the run configuration list
- ScanError: A non-fatal error reported while scanning or writing
- DirectoryDone: Completion signal emitted once per scanned directory
- ScanFinished: Terminal event emitted when the whole tree has drained
- WriterSummary: Result of the manifest writer thread
- RunResult: Summary of one configuration's run returned by RunOrchestrator
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .output_mode import ErrorKind, OutputMode

DEFAULT_FILE_FILTER = ".*"
DEFAULT_DEST_TEMPLATE = "%srcdir%%srcfilename%.%crc32%%srcext%"


@dataclass(frozen=True)
class FileRecord:
    """A single manifest entry, created once per matched file."""
    source_path: str                  # Root-relative path, e.g. /images/a.png
    destination_path: str             # Rendered from the destination template
    fingerprint: str                  # Hex-encoded CRC-32 of the content
    size_bytes: int                   # File size in bytes

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the manifest's key names and order."""
        return {
            "src": self.source_path,
            "dest": self.destination_path,
            "crc32": self.fingerprint,
            "size": self.size_bytes,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "FileRecord":
        """Parse a manifest entry.

        Raises:
            ValueError: If the entry is not an object, a key is missing,
                or a value has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Manifest entry must be an object, got {type(data).__name__}")

        missing = [key for key in ("src", "dest", "crc32", "size") if key not in data]
        if missing:
            raise ValueError(f"Manifest entry missing keys: {', '.join(missing)}")

        for key in ("src", "dest", "crc32"):
            if not isinstance(data[key], str):
                raise ValueError(f"Manifest entry key '{key}' must be a string")

        size = data["size"]
        if isinstance(size, bool) or not isinstance(size, int):
            raise ValueError("Manifest entry key 'size' must be an integer")

        return cls(
            source_path=data["src"],
            destination_path=data["dest"],
            fingerprint=data["crc32"],
            size_bytes=size,
        )


@dataclass(frozen=True)
class RunConfig:
    """One entry of the run configuration list."""
    root_dir: str
    output_path: str
    file_filter: str = DEFAULT_FILE_FILTER
    destination_template: str = DEFAULT_DEST_TEMPLATE
    output_mode: OutputMode = OutputMode.OVERWRITE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunConfig":
        """Build a RunConfig from its JSON object form.

        Empty or null ``file_filter`` and ``dest_format`` values fall back to
        the defaults, and a missing or null ``output_mode`` means overwrite.

        Raises:
            ValueError: If a required key is missing, a value is not a
                string, or ``output_mode`` is not a known mode.
        """
        for key in ("root_dir", "output_filepath"):
            if key not in data:
                raise ValueError(f"Missing required key '{key}'")
            if not isinstance(data[key], str):
                raise ValueError(f"Key '{key}' must be a string")

        # Optional keys may be null, which means the default
        for key in ("file_filter", "dest_format", "output_mode"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"Key '{key}' must be a string")

        mode_value = data.get("output_mode") or OutputMode.OVERWRITE.value
        try:
            output_mode = OutputMode(mode_value)
        except ValueError:
            raise ValueError(
                f"Unknown output_mode '{mode_value}' "
                f"(expected one of: {', '.join(m.value for m in OutputMode)})"
            ) from None

        return cls(
            root_dir=data["root_dir"],
            output_path=data["output_filepath"],
            file_filter=data.get("file_filter") or DEFAULT_FILE_FILTER,
            destination_template=data.get("dest_format") or DEFAULT_DEST_TEMPLATE,
            output_mode=output_mode,
        )


@dataclass(frozen=True)
class ScanError:
    """A non-fatal error; the offending entry or directory was skipped."""
    kind: ErrorKind
    path: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.path}: {self.message}"


@dataclass(frozen=True)
class DirectoryDone:
    """Emitted once per directory after all its entries were handled."""
    path: str
    relative_dir: str


@dataclass(frozen=True)
class ScanFinished:
    """Emitted once when the root task and every task it spawned are done."""
    pass


@dataclass
class WriterSummary:
    """What the manifest writer did during one run."""
    output_path: str
    records_written: int = 0          # Freshly scanned records
    prior_records: int = 0            # Records carried over in append mode
    error: Optional[str] = None       # Open/write failure, if any


@dataclass
class RunResult:
    """Summary of one configuration's run returned by RunOrchestrator."""
    config: RunConfig
    directories_expected: int = 0     # Pre-scan count from DirectoryCounter
    directories_scanned: int = 0      # DirectoryDone signals observed
    records_written: int = 0
    prior_records: int = 0
    errors: List[ScanError] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def complete(self) -> bool:
        """Whether every counted directory reported completion."""
        return self.directories_scanned == self.directories_expected
