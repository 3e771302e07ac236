"""Rich console output helpers.

Holds the shared consoles, the colour theme, and the message printers
used by every CLI command. Status labels for closure outcomes are defined
here so tables and summaries style them the same way.
"""

import sys

from rich.console import Console
from rich.theme import Theme

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "#f53263",
        "info": "#0ec1c8",
        "closed": "#c1ff62",
        "failed": "bold #f53263",
        "skipped": "#0e8ac8",
    }
)

# Outcome status value -> (label, theme style)
STATUS_LABELS: dict[str, tuple[str, str]] = {
    "closed": ("CLOSED", "closed"),
    "failed": ("FAIL", "failed"),
    "skipped": ("SKIP", "skipped"),
}


def _color_system() -> str | None:
    """Use truecolor on a terminal; otherwise let Rich decide."""
    return "truecolor" if sys.stdout.isatty() else None


console = Console(theme=THEME, color_system=_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_color_system())


def status_markup(status: str) -> str:
    """Return the styled label for an outcome status value."""
    label, style = STATUS_LABELS.get(status, (status.upper(), "text"))
    return f"[{style}]{label}[/{style}]"


def _print(target: Console, style: str, message: str, prefix: str = "") -> None:
    head = f"[{style}]{prefix}[/] {message}" if prefix else f"[{style}]{message}[/]"
    target.print(head)


def print_info(message: str) -> None:
    """Print an informational message to stdout."""
    _print(console, "info", message)


def print_success(message: str) -> None:
    """Print a success message to stdout."""
    _print(console, "success", message)


def print_warning(message: str) -> None:
    """Print a warning to stderr."""
    _print(err_console, "warning", message, prefix="Warning:")


def print_error(message: str) -> None:
    """Print an error to stderr."""
    _print(err_console, "error", message, prefix="Error:")
