"""CLI package for lockctl.

This package contains the Typer application and all subcommands.
"""

from lockctl.cli.main import app

__all__ = ["app"]
