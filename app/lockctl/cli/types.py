"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path
from typing import Any

import typer

from lockctl.core.config import (
    ConfigError,
    ConfigNotFoundError,
    LockctlConfig,
    load_config,
    parse_config,
)
from lockctl.core.paths import get_config_path
from lockctl.models.report import EXIT_CONFIG_ERROR
from lockctl.providers.base import HandleProvider
from lockctl.providers.smb import SmbShareProvider
from lockctl.utils.formatting import print_error, print_info


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


class ScopeChoice(str, Enum):
    """Closure granularity options."""

    HANDLES = "handles"
    SESSIONS = "sessions"


def resolve_config(
    config_path: Path | None,
    overrides: dict[str, Any],
    *,
    require_file: bool = True,
) -> LockctlConfig:
    """Load the configuration and apply command-line overrides.

    Overrides are merged into the raw data and validated together, so an
    invalid override (such as an unknown mode) is rejected exactly like an
    invalid file.

    Args:
        config_path: Explicit config path, or None for the default.
        overrides: Option values to merge; None values are ignored.
        require_file: If False, a missing file falls back to overrides only.

    Returns:
        Validated configuration.

    Raises:
        typer.Exit: With the configuration error exit code on failure.
    """
    updates = {k: v for k, v in overrides.items() if v is not None}

    try:
        base = load_config(config_path).model_dump(mode="json")
    except ConfigNotFoundError as e:
        if require_file or "directories" not in updates:
            print_error(f"Config not found: {config_path or get_config_path()}")
            print_info("Run 'lockctl config init' to create one, or pass --dir.")
            raise typer.Exit(code=EXIT_CONFIG_ERROR) from e
        base = {}
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from e

    base.update(updates)
    try:
        return parse_config(base)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from e


def get_provider(config: LockctlConfig) -> HandleProvider:
    """Create the handle provider for a configuration.

    Args:
        config: Validated configuration.

    Returns:
        Provider instance using the configured per-call timeout.
    """
    return SmbShareProvider(timeout=config.call_timeout_seconds)
