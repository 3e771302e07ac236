"""Configuration model and I/O for lockctl.

The configuration is stored as TOML (default ~/.config/lockctl/config.toml)
and validated once, at load time, into a strongly typed model. Unknown
modes and empty directory lists are rejected here, before any scan runs.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lockctl.core.paths import get_config_path
from lockctl.models.handle import normalize_user
from lockctl.models.policy import CloseMode, CloseScope, Policy


class LockctlConfig(BaseModel):
    """Validated lockctl configuration.

    Attributes:
        directories: Target directories whose open handles are reconciled.
        mode: Closure mode (All, Targets or ScanOnly).
        close_enabled: Operational gate; False means nothing is closed.
        include_users: Users eligible for closure in Targets mode (empty = all).
        exclude_users: Users never closed in Targets mode.
        close_scope: Close individual handles or whole sessions.
        max_workers: Upper bound on concurrent provider calls.
        call_timeout_seconds: Timeout for each provider call.
        log_to_file: Persist each run's log entries to the state directory.
        log_retention_days: Age after which run logs are pruned (0 = keep).
    """

    model_config = ConfigDict(extra="forbid")

    directories: Annotated[
        list[str],
        Field(min_length=1, description="Directories to scan for open handles"),
    ]
    mode: Annotated[CloseMode, Field(description="Closure mode")] = CloseMode.SCAN_ONLY
    close_enabled: Annotated[bool, Field(description="Allow closure attempts")] = True
    include_users: Annotated[
        list[str],
        Field(description="Users eligible for closure (empty = no restriction)"),
    ] = []
    exclude_users: Annotated[list[str], Field(description="Users never closed")] = []
    close_scope: Annotated[
        CloseScope,
        Field(description="Close individual handles or whole sessions"),
    ] = CloseScope.HANDLES
    max_workers: Annotated[int, Field(ge=1, le=64, description="Concurrent provider calls")] = 8
    call_timeout_seconds: Annotated[
        float,
        Field(gt=0, le=600, description="Timeout per provider call in seconds"),
    ] = 30.0
    log_to_file: Annotated[bool, Field(description="Write a log file per run")] = True
    log_retention_days: Annotated[
        int,
        Field(ge=0, description="Days to keep run logs (0 disables pruning)"),
    ] = 30

    @field_validator("directories")
    @classmethod
    def validate_directories(cls, value: list[str]) -> list[str]:
        """Reject blank directory entries."""
        cleaned = [d.strip() for d in value]
        if any(not d for d in cleaned):
            msg = "directories cannot contain empty entries"
            raise ValueError(msg)
        return cleaned

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value: object) -> object:
        """Accept mode names case-insensitively."""
        if isinstance(value, str):
            return CloseMode.parse(value)
        return value

    @field_validator("close_scope", mode="before")
    @classmethod
    def parse_scope(cls, value: object) -> object:
        """Accept scope names case-insensitively."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("include_users", "exclude_users")
    @classmethod
    def normalize_users(cls, value: list[str]) -> list[str]:
        """Normalize user names and drop blanks, keeping order."""
        return list(dict.fromkeys(u for u in (normalize_user(v) for v in value) if u))

    def to_policy(self) -> Policy:
        """Build the immutable policy consumed by the engine."""
        return Policy(
            mode=self.mode,
            include_users=frozenset(self.include_users),
            exclude_users=frozenset(self.exclude_users),
            close_enabled=self.close_enabled,
        )


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""


def load_config(path: Path | None = None) -> LockctlConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated LockctlConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    return parse_config(data)


def parse_config(data: dict[str, Any]) -> LockctlConfig:
    """Validate a raw configuration mapping.

    Args:
        data: Mapping as loaded from TOML.

    Returns:
        Validated LockctlConfig object.

    Raises:
        ConfigError: If the content doesn't match the schema.
    """
    try:
        return LockctlConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: LockctlConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The LockctlConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def get_default_config(directories: list[str] | None = None) -> LockctlConfig:
    """Create a default configuration.

    Uses ScanOnly mode: a freshly initialized installation reports but
    never closes anything.

    Args:
        directories: Target directories. Defaults to a placeholder share path.

    Returns:
        LockctlConfig with default settings.
    """
    return LockctlConfig(directories=directories or ["D:\\Shares"])
