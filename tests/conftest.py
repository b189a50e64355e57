"""Pytest fixtures for assetrev tests."""

import json
import os
import platform
import queue
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List

import pytest

from assetrev.models import DirectoryDone, FileRecord, ScanError, ScanFinished
from assetrev.scanning import ScanChannels, TreeScanner

# Seconds to wait for a scan event before failing instead of hanging
EVENT_TIMEOUT = 30


@dataclass
class ScanOutcome:
    """Everything a TreeScanner emitted during one scan."""
    records: List[FileRecord] = field(default_factory=list)
    done: List[DirectoryDone] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)

    @property
    def sources(self) -> List[str]:
        return sorted(r.source_path for r in self.records)


def collect_scan(root: Path, **scanner_kwargs: Any) -> ScanOutcome:
    """Run a TreeScanner over ``root`` on unbounded channels and collect its output."""
    channels = ScanChannels.create(0)
    scanner = TreeScanner(channels, **scanner_kwargs)
    scanner.start(str(root))

    outcome = ScanOutcome()
    while True:
        event = channels.events.get(timeout=EVENT_TIMEOUT)
        if isinstance(event, ScanFinished):
            break
        if isinstance(event, DirectoryDone):
            outcome.done.append(event)
        elif isinstance(event, ScanError):
            outcome.errors.append(event)
    scanner.close()

    while True:
        try:
            outcome.records.append(channels.records.get_nowait())
        except queue.Empty:
            break
    return outcome


def read_manifest(path: Path) -> List[Dict[str, Any]]:
    """Load a manifest file as a list of dicts."""
    return json.loads(path.read_text(encoding="utf-8"))


def symlinks_supported(temp_dir: Path) -> bool:
    link = temp_dir / ".symlink_check"
    try:
        link.symlink_to(temp_dir)
    except (OSError, NotImplementedError):
        return False
    link.unlink()
    return True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def asset_tree(temp_dir: Path) -> Path:
    """Create a small asset tree with known content.

    Creates:
        assets/
        ├── index.html
        ├── css/
        │   └── site.css
        ├── empty/
        ├── images/
        │   ├── logo.svg
        │   ├── photo.png
        │   └── icons/
        │       └── close.png
        └── js/
            └── app.js

    Six directories, six files.

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to the assets root.
    """
    root = temp_dir / "assets"
    root.mkdir()

    (root / "index.html").write_text("<html></html>")

    (root / "css").mkdir()
    (root / "css" / "site.css").write_text("body { margin: 0; }")

    (root / "empty").mkdir()

    (root / "images").mkdir()
    (root / "images" / "logo.svg").write_text("<svg/>")
    (root / "images" / "photo.png").write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 64)

    (root / "images" / "icons").mkdir()
    (root / "images" / "icons" / "close.png").write_bytes(b"\x89PNG close")

    (root / "js").mkdir()
    (root / "js" / "app.js").write_text("console.log('hi');")

    return root


ASSET_SOURCES = [
    "/css/site.css",
    "/images/icons/close.png",
    "/images/logo.svg",
    "/images/photo.png",
    "/index.html",
    "/js/app.js",
]


@pytest.fixture
def linked_tree(temp_dir: Path) -> Path:
    """Create a tree reached partly through symlinks.

    Creates:
        site/
        ├── main.css
        ├── vendor -> ../shared          (relative directory symlink)
        ├── favicon.ico -> <abs>/shared/icon.ico   (absolute file symlink)
        └── pages/
            └── about.html
        shared/
        ├── icon.ico
        └── lib/
            └── lib.js

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to the ``site`` root.
    """
    if not symlinks_supported(temp_dir):
        pytest.skip("Symlinks not supported on this platform")

    shared = temp_dir / "shared"
    shared.mkdir()
    (shared / "icon.ico").write_bytes(b"ICO" * 10)
    (shared / "lib").mkdir()
    (shared / "lib" / "lib.js").write_text("export {};")

    site = temp_dir / "site"
    site.mkdir()
    (site / "main.css").write_text("a { color: red; }")
    (site / "pages").mkdir()
    (site / "pages" / "about.html").write_text("<p>about</p>")

    os.symlink("../shared", site / "vendor")
    os.symlink(str(shared / "icon.ico"), site / "favicon.ico")
    return site


@pytest.fixture
def write_config(temp_dir: Path) -> Callable[[Any], Path]:
    """Return a helper that writes a configuration document and returns its path."""

    def _write(document: Any, name: str = "config.json") -> Path:
        path = temp_dir / name
        if isinstance(document, str):
            path.write_text(document, encoding="utf-8")
        else:
            path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def restricted_dir(asset_tree: Path) -> Generator[Path, None, None]:
    """Make ``images/icons`` unreadable for the duration of a test.

    Skips when permissions are not enforced (Windows, or running as root).
    """
    if platform.system() == "Windows" or (hasattr(os, "geteuid") and os.geteuid() == 0):
        pytest.skip("Directory permissions are not enforced for this user")

    restricted = asset_tree / "images" / "icons"
    original_mode = restricted.stat().st_mode
    os.chmod(restricted, 0o000)
    try:
        yield restricted
    finally:
        os.chmod(restricted, original_mode)
