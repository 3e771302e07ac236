"""Close command implementation.

Runs a full reconciliation: scans the target directories, evaluates the
user policy and closes the matching handles or sessions.
"""

import json
import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer

from lockctl.cli.display import (
    create_outcomes_table,
    print_run_summary,
    print_scan_errors,
)
from lockctl.cli.types import OutputFormat, ScopeChoice, get_provider, resolve_config
from lockctl.core.cancellation import CancellationToken
from lockctl.core.config import LockctlConfig
from lockctl.core.engine import ReconcileEngine
from lockctl.core.errors import PolicyConfigError
from lockctl.core.paths import get_log_dir, get_run_log_path
from lockctl.core.reporting import RunLog
from lockctl.core.retention import prune_logs
from lockctl.models.policy import CloseMode
from lockctl.models.report import EXIT_CONFIG_ERROR
from lockctl.utils.formatting import console, print_error, print_info, print_warning

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Close open handles matching the policy.",
    invoke_without_command=True,
)


@contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn Ctrl+C into a cancellation request for the duration of a run."""

    def _handler(signum: int, frame: object) -> None:
        print_warning("Interrupted: finishing in-flight closures, no new attempts.")
        token.cancel()

    try:
        previous = signal.signal(signal.SIGINT, _handler)
    except ValueError:
        # Not on the main thread (e.g. under a test runner)
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _confirm_run(config: LockctlConfig) -> bool:
    """Prompt user to confirm closing handles.

    Args:
        config: Effective configuration for the run.

    Returns:
        True if user confirms, False otherwise.
    """
    count = len(config.directories)
    return typer.confirm(
        f"\nClose open handles under {count} director{'y' if count == 1 else 'ies'} "
        f"in {config.mode.value} mode?",
        default=False,
    )


def _will_close(config: LockctlConfig) -> bool:
    return config.close_enabled and config.mode != CloseMode.SCAN_ONLY


@app.callback(invoke_without_command=True)
def close_handles(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: ~/.config/lockctl/config.toml).",
        ),
    ] = None,
    directories: Annotated[
        list[str] | None,
        typer.Option("--dir", "-d", help="Directory to scan (repeatable, overrides config)."),
    ] = None,
    mode: Annotated[
        str | None,
        typer.Option("--mode", "-m", help="Closure mode: All, Targets or ScanOnly."),
    ] = None,
    no_close: Annotated[
        bool,
        typer.Option("--no-close", help="Disable closure for this run (report only)."),
    ] = False,
    include: Annotated[
        list[str] | None,
        typer.Option("--include", "-i", help="User eligible for closure (repeatable)."),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="User never closed (repeatable)."),
    ] = None,
    scope: Annotated[
        ScopeChoice | None,
        typer.Option("--scope", "-s", help="Close handles or sessions.", case_sensitive=False),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt and proceed."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: table or json.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Close open handles that match the configured policy.

    Modes:
      - All: close every handle under the target directories
      - Targets: close handles of included users, never excluded ones
      - ScanOnly: report only, nothing is closed

    Exit codes: 0 success, 1 partial (failures or unscannable
    directories), 2 configuration error.

    Examples:
        lockctl close --yes                       # Apply the configured policy
        lockctl close --mode Targets -i alice     # Close only alice's handles
        lockctl close --no-close                  # Evaluate without closing
        lockctl close --scope sessions --yes      # Close whole sessions
    """
    if ctx.invoked_subcommand is not None:
        return

    overrides: dict[str, object] = {
        "directories": directories or None,
        "mode": mode,
        "include_users": include or None,
        "exclude_users": exclude or None,
        "close_scope": scope.value if scope else None,
        "close_enabled": False if no_close else None,
    }
    config = resolve_config(config_path, overrides, require_file=directories is None)

    provider = get_provider(config)
    if not provider.is_available():
        print_error("The SMB provider (PowerShell SmbShare module) is not available.")
        raise typer.Exit(code=1)

    if _will_close(config) and not yes and not _confirm_run(config):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    log_path = get_run_log_path() if config.log_to_file else None
    token = CancellationToken()

    with RunLog(log_path, echo=verbose) as run_log, _cancel_on_interrupt(token):
        engine = ReconcileEngine(
            provider,
            run_log,
            scope=config.close_scope,
            max_workers=config.max_workers,
        )
        try:
            report = engine.run(config.directories, config.to_policy(), cancel=token)
        except PolicyConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=EXIT_CONFIG_ERROR) from e

    if config.log_retention_days:
        pruned = prune_logs(get_log_dir(), config.log_retention_days)
        if pruned:
            logger.info("Pruned %d expired run log(s)", len(pruned))

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(report.to_dict()))
        raise typer.Exit(code=report.exit_code)

    print_scan_errors(report)

    if not report.outcomes:
        print_info("No open handles found under the target directories.")
        raise typer.Exit(code=report.exit_code)

    console.print(create_outcomes_table(report.outcomes))
    print_run_summary(report)
    if log_path is not None:
        console.print(f"[dim]Run log: {log_path}[/dim]")

    raise typer.Exit(code=report.exit_code)
