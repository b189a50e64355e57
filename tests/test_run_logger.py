"""Unit tests for RunLogger."""

import os
import re
from pathlib import Path

import pytest

from assetrev.models import ErrorKind, OutputMode, RunConfig, RunResult, ScanError
from assetrev.orchestration import RunLogger


def make_result(**overrides) -> RunResult:
    config = RunConfig(
        root_dir="/srv/static",
        output_path="/srv/assets.json",
        file_filter=r"\.png$",
        output_mode=OutputMode.APPEND,
    )
    values = dict(
        config=config,
        directories_expected=4,
        directories_scanned=4,
        records_written=1234,
        prior_records=10,
        duration_seconds=1.5,
    )
    values.update(overrides)
    return RunResult(**values)


class TestRunLoggerBasic:
    """Test basic RunLogger functionality."""

    def test_auto_generated_filename(self, temp_dir: Path) -> None:
        original_cwd = os.getcwd()
        try:
            os.chdir(temp_dir)
            with RunLogger() as run_log:
                log_path = run_log.get_log_path()
                assert log_path.parent == temp_dir
                assert re.match(r"assetrev_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.log", log_path.name)
        finally:
            os.chdir(original_cwd)

    def test_header(self, temp_dir: Path) -> None:
        log_path = temp_dir / "run.log"
        with RunLogger(log_path, config_path=Path("/etc/assets.json")) as run_log:
            run_log.log_header()

        content = log_path.read_text()
        assert "Asset Revision Manifest - Run Log" in content
        assert "Config: /etc/assets.json" in content
        assert RunLogger.SEPARATOR in content

    def test_missing_parent_directory(self, temp_dir: Path) -> None:
        with pytest.raises(OSError, match="Parent directory does not exist"):
            RunLogger(temp_dir / "missing" / "run.log")

    def test_write_after_close_warns(self, temp_dir: Path, capsys) -> None:
        run_log = RunLogger(temp_dir / "run.log")
        with run_log:
            pass

        run_log.log_header()

        assert "closed log file" in capsys.readouterr().err


class TestRunLoggerSections:
    """Test run and summary sections."""

    def test_log_run(self, temp_dir: Path) -> None:
        log_path = temp_dir / "run.log"
        error = ScanError(kind=ErrorKind.HASH, path="/srv/static/a.png", message="Permission denied")

        with RunLogger(log_path) as run_log:
            run_log.log_run(make_result(errors=[error]))

        content = log_path.read_text()
        assert "Run 1: /srv/static" in content
        assert "Output: /srv/assets.json (append)" in content
        assert "Records written: 1,234" in content
        assert "Errors (1):" in content
        assert "- [hash] /srv/static/a.png: Permission denied" in content

    def test_runs_are_numbered(self, temp_dir: Path) -> None:
        log_path = temp_dir / "run.log"
        result = make_result()

        with RunLogger(log_path) as run_log:
            run_log.log_run(result)
            run_log.log_run_aborted(result.config, OSError("boom"))

        content = log_path.read_text()
        assert "Run 1: /srv/static" in content
        assert "Run 2: /srv/static" in content
        assert "! Aborted: boom" in content

    def test_log_summary(self, temp_dir: Path) -> None:
        log_path = temp_dir / "run.log"

        with RunLogger(log_path) as run_log:
            run_log.log_summary([make_result(), make_result(records_written=6)], failed_runs=1, duration_seconds=2.0)

        content = log_path.read_text()
        assert "SUMMARY" in content
        assert "Runs completed: 2" in content
        assert "Runs aborted: 1" in content
        assert "Records written: 1,240" in content
        assert f"Log file: {log_path}" in content
