"""Logs command implementation.

Manages the per-run log files kept in the state directory.
"""

from typing import Annotated

import typer

from lockctl.core.config import ConfigError, load_config
from lockctl.core.paths import get_log_dir
from lockctl.core.retention import prune_logs
from lockctl.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Manage run log files.",
    no_args_is_help=True,
)

_DEFAULT_RETENTION_DAYS = 30


@app.command()
def prune(
    days: Annotated[
        int | None,
        typer.Option(
            "--days",
            "-n",
            min=1,
            help="Delete logs older than this many days (default: from config, else 30).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
) -> None:
    """Delete run logs older than the retention period."""
    if days is None:
        try:
            days = load_config().log_retention_days
        except ConfigError:
            days = _DEFAULT_RETENTION_DAYS

    if days <= 0:
        print_info("Log retention is disabled (log_retention_days = 0).")
        return

    removed = prune_logs(get_log_dir(), days, dry_run=dry_run)
    if not removed:
        print_success(f"No run logs older than {days} day(s).")
        return

    for path in removed:
        console.print(f"  [muted]{path}[/muted]")
    verb = "Would delete" if dry_run else "Deleted"
    print_info(f"{verb} {len(removed)} run log(s).")
