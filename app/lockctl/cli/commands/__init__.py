"""CLI commands for lockctl.

This package contains all subcommand implementations.
"""

from lockctl.cli.commands import close, config, logs, scan

__all__ = ["close", "config", "logs", "scan"]
