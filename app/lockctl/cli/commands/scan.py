"""Scan command implementation.

Lists open handles under the target directories without closing anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from lockctl.cli.display import create_handles_table, print_scan_errors
from lockctl.cli.types import OutputFormat, get_provider, resolve_config
from lockctl.core.engine import ReconcileEngine
from lockctl.core.reporting import RunLog
from lockctl.models.policy import CloseMode, Policy
from lockctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Scan target directories for open handles.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan_handles(
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
        typer.Option(
            "--dir",
            "-d",
            help="Directory to scan (repeatable, overrides the config).",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Export scan results to JSON file.",
        ),
    ] = None,
) -> None:
    """Scan and display open handles under the target directories.

    Nothing is closed, regardless of the configured mode.

    Examples:
        lockctl scan                          # Use directories from config
        lockctl scan --dir 'D:\\Data'         # Scan a specific directory
        lockctl scan --format json            # Output as JSON
        lockctl scan --export scan.json       # Export to JSON file
    """
    if ctx.invoked_subcommand is not None:
        return

    config = resolve_config(
        config_path,
        {"directories": directories or None},
        require_file=False,
    )
    provider = get_provider(config)
    if not provider.is_available():
        print_error("The SMB provider (PowerShell SmbShare module) is not available.")
        raise typer.Exit(code=1)

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    engine = ReconcileEngine(
        provider,
        RunLog(echo=verbose),
        scope=config.close_scope,
        max_workers=config.max_workers,
    )
    report = engine.run(config.directories, Policy(mode=CloseMode.SCAN_ONLY))

    if export_path is not None:
        export_path = export_path.resolve()
        if export_path.is_dir():
            print_error(f"Export path is a directory: {export_path}")
            raise typer.Exit(code=1)
        try:
            export_path.parent.mkdir(parents=True, exist_ok=True)
            export_path.write_text(json.dumps(report.to_dict(), indent=2))
            print_info(f"Scan results exported to {export_path}")
        except OSError as e:
            print_error(f"Failed to export: {e}")
            raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(report.to_dict()))
        raise typer.Exit(code=report.exit_code)

    print_scan_errors(report)

    if not report.handles:
        print_success("No open handles found under the target directories.")
        raise typer.Exit(code=report.exit_code)

    console.print(create_handles_table(report.handles))
    console.print(
        f"\n[dim]{len(report.handles)} open handle(s) in {len(report.sessions)} session(s)[/dim]"
    )
    raise typer.Exit(code=report.exit_code)
