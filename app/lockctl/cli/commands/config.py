"""Config command implementation.

Creates and inspects the lockctl configuration file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from lockctl.core.config import ConfigError, get_default_config, load_config, save_config
from lockctl.core.paths import get_config_path
from lockctl.models.report import EXIT_CONFIG_ERROR
from lockctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Create and inspect the configuration file.",
    no_args_is_help=True,
)


@app.command()
def init(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Where to write the config file."),
    ] = None,
    directories: Annotated[
        list[str] | None,
        typer.Option("--dir", "-d", help="Directory to scan (repeatable)."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a default configuration (ScanOnly mode, nothing is closed)."""
    target = config_path or get_config_path()
    if target.exists() and not force:
        print_error(f"Config already exists: {target}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        written = save_config(get_default_config(directories or None), target)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {written}")
    print_info("Edit 'directories' and 'mode' before running 'lockctl close'.")


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config file."),
    ] = None,
) -> None:
    """Validate and print the effective configuration."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from e

    console.print(tomli_w.dumps(config.model_dump(mode="json")), markup=False, highlight=False)


@app.command()
def path() -> None:
    """Print the default configuration file path."""
    console.print(str(get_config_path()), markup=False, highlight=False)
