"""Filesystem locations used by lockctl.

Follows the XDG Base Directory layout:

- config: ``$XDG_CONFIG_HOME/lockctl`` (default ``~/.config/lockctl``)
- state:  ``$XDG_STATE_HOME/lockctl`` (default ``~/.local/state/lockctl``),
  which holds the per-run log files under ``logs/``.
"""

import os
from datetime import datetime
from pathlib import Path

APP_NAME = "lockctl"

# Run logs are named lockctl-YYYYmmdd-HHMMSS.log
LOG_FILE_PREFIX = f"{APP_NAME}-"
LOG_FILE_SUFFIX = ".log"
_LOG_STAMP_FORMAT = "%Y%m%d-%H%M%S"


def _xdg_home(env_var: str, fallback: str) -> Path:
    """Resolve an XDG base directory and append the application name."""
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / fallback
    return root / APP_NAME


def get_config_dir() -> Path:
    """Directory holding config.toml."""
    return _xdg_home("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Directory holding runtime state such as run logs."""
    return _xdg_home("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Default configuration file path."""
    return get_config_dir() / "config.toml"


def get_log_dir() -> Path:
    """Directory holding per-run log files."""
    return get_state_dir() / "logs"


def get_run_log_path(when: datetime | None = None) -> Path:
    """Build the log file path for a run.

    Args:
        when: Run start time in local time. Defaults to now.

    Returns:
        Path such as ``<state>/logs/lockctl-20260101-120000.log``.
    """
    stamp = (when or datetime.now()).strftime(_LOG_STAMP_FORMAT)
    return get_log_dir() / f"{LOG_FILE_PREFIX}{stamp}{LOG_FILE_SUFFIX}"
