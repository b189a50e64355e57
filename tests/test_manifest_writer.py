"""Tests for ManifestWriter."""

import json
import queue
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

from assetrev.models import FileRecord, OutputMode
from assetrev.output import ManifestWriter
from conftest import read_manifest

WAIT_TIMEOUT = 30


def make_record(name: str, size: int = 1) -> FileRecord:
    return FileRecord(
        source_path=f"/{name}",
        destination_path=f"/{name}.00000001",
        fingerprint="00000001",
        size_bytes=size,
    )


def write_records(
    output_path: Path,
    records: List[FileRecord],
    mode: OutputMode = OutputMode.OVERWRITE,
    buffer_size: int = 0,
):
    """Stream records through a ManifestWriter and return its summary."""
    channel: "queue.Queue" = queue.Queue(maxsize=buffer_size)
    writer = ManifestWriter(str(output_path), mode, channel)
    writer.start()
    for record in records:
        channel.put(record, timeout=WAIT_TIMEOUT)
    writer.close()
    return writer.wait(timeout=WAIT_TIMEOUT)


# ============================================================================
# TestDocumentFormat
# ============================================================================


class TestDocumentFormat:
    """Tests for the on-disk manifest layout."""

    def test_exact_layout(self, temp_dir: Path) -> None:
        output = temp_dir / "manifest.json"

        write_records(output, [make_record("a.css", 3), make_record("b.js", 4)])

        assert output.read_text(encoding="utf-8") == (
            "[\n"
            "  {\n"
            '    "src": "/a.css",\n'
            '    "dest": "/a.css.00000001",\n'
            '    "crc32": "00000001",\n'
            '    "size": 3\n'
            "  },\n"
            "  {\n"
            '    "src": "/b.js",\n'
            '    "dest": "/b.js.00000001",\n'
            '    "crc32": "00000001",\n'
            '    "size": 4\n'
            "  }\n"
            "]\n"
        )

    def test_empty_manifest_is_valid_json(self, temp_dir: Path) -> None:
        output = temp_dir / "manifest.json"

        summary = write_records(output, [])

        assert read_manifest(output) == []
        assert summary.records_written == 0
        assert summary.error is None

    def test_non_ascii_names_kept(self, temp_dir: Path) -> None:
        output = temp_dir / "manifest.json"

        write_records(output, [make_record("café.png")])

        assert "café.png" in output.read_text(encoding="utf-8")
        assert read_manifest(output)[0]["src"] == "/café.png"

    def test_creates_parent_directories(self, temp_dir: Path) -> None:
        output = temp_dir / "build" / "meta" / "manifest.json"

        summary = write_records(output, [make_record("a")])

        assert summary.error is None
        assert len(read_manifest(output)) == 1

    def test_bounded_channel(self, temp_dir: Path) -> None:
        """Test a capacity-one channel still delivers every record in order."""
        output = temp_dir / "manifest.json"
        records = [make_record(f"f{i}") for i in range(50)]

        summary = write_records(output, records, buffer_size=1)

        assert summary.records_written == 50
        assert [r["src"] for r in read_manifest(output)] == [r.source_path for r in records]


# ============================================================================
# TestOutputModes
# ============================================================================


class TestOutputModes:
    """Tests for overwrite and append behavior."""

    def test_overwrite_truncates(self, temp_dir: Path) -> None:
        output = temp_dir / "manifest.json"
        output.write_text(json.dumps([make_record("old").to_dict()] * 20), encoding="utf-8")

        write_records(output, [make_record("new")])

        assert [r["src"] for r in read_manifest(output)] == ["/new"]

    def test_append_places_prior_records_last(self, temp_dir: Path) -> None:
        """Test a prior [R] and fresh [S1, S2] give [S1, S2, R]."""
        output = temp_dir / "manifest.json"
        write_records(output, [make_record("R")])

        summary = write_records(output, [make_record("S1"), make_record("S2")], mode=OutputMode.APPEND)

        assert [r["src"] for r in read_manifest(output)] == ["/S1", "/S2", "/R"]
        assert summary.records_written == 2
        assert summary.prior_records == 1

    def test_append_does_not_deduplicate(self, temp_dir: Path) -> None:
        output = temp_dir / "manifest.json"
        write_records(output, [make_record("same")])

        write_records(output, [make_record("same")], mode=OutputMode.APPEND)

        assert [r["src"] for r in read_manifest(output)] == ["/same", "/same"]

    def test_append_without_prior_file(self, temp_dir: Path) -> None:
        output = temp_dir / "manifest.json"

        summary = write_records(output, [make_record("a")], mode=OutputMode.APPEND)

        assert summary.error is None
        assert summary.prior_records == 0
        assert len(read_manifest(output)) == 1

    def test_append_ignores_deeply_nested_prior(self, temp_dir: Path) -> None:
        """Test a prior document too deep to parse is ignored, not fatal."""
        output = temp_dir / "manifest.json"
        output.write_text("[" * 200000 + "]" * 200000, encoding="utf-8")

        summary = write_records(
            output, [make_record(f"f{i}") for i in range(50)], mode=OutputMode.APPEND, buffer_size=1
        )

        assert summary.error is None
        assert summary.prior_records == 0
        assert len(read_manifest(output)) == 50

    @pytest.mark.parametrize(
        "prior_text",
        [
            "not json at all",
            '{"src": "/x"}',
            '[{"src": "/x"}]',
            "",
        ],
    )
    def test_append_ignores_malformed_prior(self, temp_dir: Path, prior_text: str) -> None:
        output = temp_dir / "manifest.json"
        output.write_text(prior_text, encoding="utf-8")

        summary = write_records(output, [make_record("a")], mode=OutputMode.APPEND)

        assert summary.error is None
        assert summary.prior_records == 0
        assert [r["src"] for r in read_manifest(output)] == ["/a"]


# ============================================================================
# TestWriteFailures
# ============================================================================


class TestWriteFailures:
    """Tests for destinations that cannot be written."""

    def test_unwritable_destination_drains_channel(self, temp_dir: Path) -> None:
        """Test producers on a full channel never block when the file cannot open."""
        output = temp_dir / "is_a_directory"
        output.mkdir()

        summary = write_records(output, [make_record(f"f{i}") for i in range(10)], buffer_size=1)

        assert summary.error is not None
        assert summary.records_written == 0

    def test_unexpected_error_still_drains_channel(self, temp_dir: Path) -> None:
        """Test a non-I/O failure is recorded and producers keep flowing."""
        output = temp_dir / "manifest.json"

        with patch.object(ManifestWriter, "_write_record", side_effect=TypeError("not serializable")):
            summary = write_records(output, [make_record(f"f{i}") for i in range(10)], buffer_size=1)

        assert summary.error is not None
        assert "not serializable" in summary.error

    def test_start_twice_raises(self, temp_dir: Path) -> None:
        writer = ManifestWriter(str(temp_dir / "m.json"), OutputMode.OVERWRITE, queue.Queue())
        writer.start()
        try:
            with pytest.raises(RuntimeError):
                writer.start()
        finally:
            writer.close()
            writer.wait(timeout=WAIT_TIMEOUT)
