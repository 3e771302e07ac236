"""Shared Rich display functions for handles and run results.

Provides reusable table builders and summary printers for the scan and
close commands.
"""

from rich.table import Table

from lockctl.models.handle import HandleRecord, SessionRecord
from lockctl.models.outcome import ClosureOutcome
from lockctl.models.report import RunReport
from lockctl.utils.formatting import console, print_success, print_warning, status_markup


def create_handles_table(handles: tuple[HandleRecord, ...] | list[HandleRecord]) -> Table:
    """Create a Rich table listing open handles.

    Rows are sorted by path so output is deterministic.

    Args:
        handles: Handles to display.

    Returns:
        Rich Table configured for handle display.
    """
    table = Table(
        title="Open Handles",
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("User")
    table.add_column("Client", style="muted")
    table.add_column("Session", style="info", justify="right")
    table.add_column("Handle", style="muted", justify="right")

    for handle in sorted(handles, key=lambda h: (h.path.casefold(), h.handle_id)):
        table.add_row(
            handle.path,
            handle.user or "-",
            handle.client or "-",
            handle.session_id,
            handle.handle_id,
        )

    return table


def create_outcomes_table(outcomes: tuple[ClosureOutcome, ...] | list[ClosureOutcome]) -> Table:
    """Create a Rich table displaying closure outcomes.

    Closed, failed and skipped items are styled distinctly so the three
    categories are never confused.

    Args:
        outcomes: Outcomes to display.

    Returns:
        Rich Table configured for outcome display.
    """
    table = Table(
        title="Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Target", no_wrap=True)
    table.add_column("User")
    table.add_column("Detail")

    for outcome in outcomes:
        target = outcome.target
        if isinstance(target, SessionRecord):
            label = f"{target.label} from {target.client or '-'}"
        else:
            label = target.label
        table.add_row(
            status_markup(outcome.status.value),
            label,
            target.user or "-",
            f"[muted]{outcome.reason or ''}[/muted]",
        )

    return table


def print_scan_errors(report: RunReport) -> None:
    """Print one warning per directory that failed to scan."""
    for error in report.scan_errors:
        print_warning(f"Could not scan {error.directory}: {error.reason}")


def print_run_summary(report: RunReport) -> None:
    """Print a summary of a run.

    Shows closed, failed and not-attempted counts separately, followed by
    the number of items still open.

    Args:
        report: Completed run report.
    """
    counts = report.counts

    if counts["remaining"] == 0 and counts["closed"]:
        print_success(f"All {counts['closed']} item(s) closed. Nothing remains open.")
        return

    parts = [
        f"[closed]{counts['closed']} closed[/closed]",
        f"[failed]{counts['failed']} failed[/failed]",
        f"[skipped]{counts['skipped']} not attempted[/skipped]",
    ]
    console.print(f"\nSummary: {', '.join(parts)}")
    console.print(f"[dim]{counts['remaining']} item(s) remain open[/dim]")
    if report.cancelled:
        print_warning("Run was cancelled before all closure attempts started.")
