"""Unit tests for LockctlConfig and related functions.

Tests for the configuration module that provides the Pydantic model
and TOML I/O for reconciliation settings.
"""

import tomllib
from pathlib import Path

import pytest
from lockctl.core.config import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    LockctlConfig,
    get_default_config,
    load_config,
    parse_config,
    save_config,
)
from lockctl.models.policy import CloseMode, CloseScope
from pydantic import ValidationError


class TestLockctlConfig:
    """Tests for LockctlConfig Pydantic model."""

    def test_default_values(self) -> None:
        """Only directories is required; the rest is inert by default."""
        config = LockctlConfig(directories=["D:\\DATA"])

        assert config.mode == CloseMode.SCAN_ONLY
        assert config.close_enabled is True
        assert config.include_users == []
        assert config.exclude_users == []
        assert config.close_scope == CloseScope.HANDLES
        assert config.max_workers == 8
        assert config.call_timeout_seconds == 30.0
        assert config.log_to_file is True
        assert config.log_retention_days == 30

    def test_mode_case_insensitive(self) -> None:
        """Modes are parsed regardless of case."""
        config = LockctlConfig(directories=["D:\\DATA"], mode="targets")

        assert config.mode == CloseMode.TARGETS

    def test_unknown_mode_rejected(self) -> None:
        """Unknown modes fail validation."""
        with pytest.raises(ValidationError, match="Unrecognized mode"):
            LockctlConfig(directories=["D:\\DATA"], mode="Bogus")

    def test_empty_directories_rejected(self) -> None:
        """At least one directory is required."""
        with pytest.raises(ValidationError):
            LockctlConfig(directories=[])

    def test_blank_directory_rejected(self) -> None:
        """Blank directory entries are rejected."""
        with pytest.raises(ValidationError, match="empty entries"):
            LockctlConfig(directories=["D:\\DATA", "  "])

    def test_users_normalized(self) -> None:
        """User lists are normalized and de-duplicated."""
        config = LockctlConfig(
            directories=["D:\\DATA"],
            include_users=["CORP\\Alice", "alice", ""],
            exclude_users=["Bob"],
        )

        assert config.include_users == ["alice"]
        assert config.exclude_users == ["bob"]

    def test_scope_case_insensitive(self) -> None:
        """close_scope accepts any case."""
        config = LockctlConfig(directories=["D:\\DATA"], close_scope="Sessions")

        assert config.close_scope == CloseScope.SESSIONS

    def test_unknown_key_rejected(self) -> None:
        """Extra keys are rejected."""
        with pytest.raises(ValidationError):
            LockctlConfig(directories=["D:\\DATA"], closeEnabled=False)

    @pytest.mark.parametrize("workers", [0, 65])
    def test_max_workers_bounds(self, workers: int) -> None:
        """max_workers must stay between 1 and 64."""
        with pytest.raises(ValidationError):
            LockctlConfig(directories=["D:\\DATA"], max_workers=workers)

    def test_timeout_must_be_positive(self) -> None:
        """call_timeout_seconds must be positive."""
        with pytest.raises(ValidationError):
            LockctlConfig(directories=["D:\\DATA"], call_timeout_seconds=0)

    def test_to_policy(self) -> None:
        """to_policy carries mode, users and the close gate."""
        config = LockctlConfig(
            directories=["D:\\DATA"],
            mode="Targets",
            include_users=["alice"],
            exclude_users=["bob"],
            close_enabled=False,
        )

        policy = config.to_policy()

        assert policy.mode == CloseMode.TARGETS
        assert policy.include_users == frozenset({"alice"})
        assert policy.exclude_users == frozenset({"bob"})
        assert policy.close_enabled is False


class TestLoadConfig:
    """Tests for load_config and parse_config."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("directories = [", encoding="utf-8")

        with pytest.raises(ConfigParseError):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError."""
        path = tmp_path / "config.toml"
        path.write_text('directories = ["D:\\\\DATA"]\nmode = "Sometimes"\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)

    def test_valid_file(self, tmp_path: Path) -> None:
        """A valid file loads into a typed model."""
        path = tmp_path / "config.toml"
        path.write_text(
            'directories = ["D:\\\\DATA"]\n'
            'mode = "All"\n'
            "close_enabled = false\n"
            'exclude_users = ["svc_backup"]\n',
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.directories == ["D:\\DATA"]
        assert config.mode == CloseMode.ALL
        assert config.close_enabled is False
        assert config.exclude_users == ["svc_backup"]

    def test_parse_config_wraps_errors(self) -> None:
        """parse_config raises ConfigError, never ValidationError."""
        with pytest.raises(ConfigError):
            parse_config({"mode": "All"})


class TestSaveConfig:
    """Tests for save_config and get_default_config."""

    def test_save_and_reload(self, tmp_path: Path) -> None:
        """Saved config loads back unchanged."""
        path = tmp_path / "nested" / "config.toml"
        config = LockctlConfig(directories=["D:\\DATA"], mode="Targets", include_users=["alice"])

        saved = save_config(config, path)

        assert saved == path
        assert load_config(path) == config

    def test_enums_written_as_strings(self, tmp_path: Path) -> None:
        """Enums are written by value."""
        path = tmp_path / "config.toml"
        save_config(get_default_config(), path)

        with open(path, "rb") as f:
            data = tomllib.load(f)

        assert data["mode"] == "ScanOnly"
        assert data["close_scope"] == "handles"

    def test_no_temp_file_left(self, tmp_path: Path) -> None:
        """The atomic write leaves no temporary files behind."""
        save_config(get_default_config(), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_default_config(self) -> None:
        """The default config is ScanOnly with a placeholder directory."""
        config = get_default_config()

        assert config.mode == CloseMode.SCAN_ONLY
        assert config.directories == ["D:\\Shares"]
        assert get_default_config(["E:\\X"]).directories == ["E:\\X"]
