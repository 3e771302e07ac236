"""Unit tests for run log retention."""

import os
import time
from pathlib import Path

from lockctl.core.retention import find_expired_logs, prune_logs

DAY = 86400


def _log(directory: Path, name: str, age_days: float, now: float) -> Path:
    path = directory / name
    path.write_text("entry\n", encoding="utf-8")
    mtime = now - age_days * DAY
    os.utime(path, (mtime, mtime))
    return path


class TestFindExpiredLogs:
    """Tests for find_expired_logs."""

    def test_selects_old_run_logs(self, tmp_path: Path) -> None:
        """Only run logs older than the limit are selected."""
        now = time.time()
        old = _log(tmp_path, "lockctl-20250101-000000.log", 40, now)
        _log(tmp_path, "lockctl-20260101-000000.log", 5, now)
        _log(tmp_path, "other.log", 400, now)

        assert find_expired_logs(tmp_path, 30, now=now) == [old]

    def test_zero_days_disables(self, tmp_path: Path) -> None:
        """A limit of zero keeps everything."""
        now = time.time()
        _log(tmp_path, "lockctl-20250101-000000.log", 400, now)

        assert find_expired_logs(tmp_path, 0, now=now) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing log directory yields nothing."""
        assert find_expired_logs(tmp_path / "absent", 30) == []


class TestPruneLogs:
    """Tests for prune_logs."""

    def test_deletes_expired(self, tmp_path: Path) -> None:
        """Expired logs are deleted, recent ones kept."""
        now = time.time()
        old = _log(tmp_path, "lockctl-20250101-000000.log", 40, now)
        recent = _log(tmp_path, "lockctl-20260101-000000.log", 1, now)

        removed = prune_logs(tmp_path, 30, now=now)

        assert removed == [old]
        assert not old.exists()
        assert recent.exists()

    def test_dry_run_keeps_files(self, tmp_path: Path) -> None:
        """Dry-run reports without deleting."""
        now = time.time()
        old = _log(tmp_path, "lockctl-20250101-000000.log", 40, now)

        removed = prune_logs(tmp_path, 30, now=now, dry_run=True)

        assert removed == [old]
        assert old.exists()
