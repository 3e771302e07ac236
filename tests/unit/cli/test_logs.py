"""Unit tests for logs commands."""

import os
import time

from lockctl.cli.main import app
from lockctl.core.config import LockctlConfig, save_config
from lockctl.core.paths import get_log_dir
from typer.testing import CliRunner

runner = CliRunner()


def _write_logs() -> tuple:
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True)
    old = log_dir / "lockctl-20250101-000000.log"
    new = log_dir / "lockctl-20260101-000000.log"
    for path, age_days in ((old, 90), (new, 1)):
        path.write_text("entry\n", encoding="utf-8")
        mtime = time.time() - age_days * 86400
        os.utime(path, (mtime, mtime))
    return old, new


class TestLogsPrune:
    """Tests for lockctl logs prune."""

    def test_prunes_old_logs(self) -> None:
        """Logs older than --days are deleted."""
        old, new = _write_logs()

        result = runner.invoke(app, ["logs", "prune", "--days", "30"])

        assert result.exit_code == 0
        assert "Deleted 1 run log(s)." in result.stdout
        assert not old.exists()
        assert new.exists()

    def test_dry_run(self) -> None:
        """--dry-run keeps the files."""
        old, _ = _write_logs()

        result = runner.invoke(app, ["logs", "prune", "--days", "30", "--dry-run"])

        assert result.exit_code == 0
        assert "Would delete 1 run log(s)." in result.stdout
        assert old.exists()

    def test_uses_config_retention(self) -> None:
        """Without --days the configured retention applies."""
        old, new = _write_logs()
        save_config(LockctlConfig(directories=["D:\\DATA"], log_retention_days=120))

        result = runner.invoke(app, ["logs", "prune"])

        assert result.exit_code == 0
        assert "No run logs older than 120 day(s)." in result.stdout
        assert old.exists()

    def test_retention_disabled(self) -> None:
        """A retention of zero disables pruning."""
        old, _ = _write_logs()
        save_config(LockctlConfig(directories=["D:\\DATA"], log_retention_days=0))

        result = runner.invoke(app, ["logs", "prune"])

        assert result.exit_code == 0
        assert "disabled" in result.stdout
        assert old.exists()
