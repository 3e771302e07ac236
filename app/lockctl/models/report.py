"""Run report model.

This module defines the data structure summarizing one reconciliation run:
what was scanned, what happened to every item and what is still open.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from lockctl.models.handle import Closable, HandleRecord, SessionRecord
from lockctl.models.outcome import ClosureOutcome, OutcomeStatus, SkipReason, target_to_dict
from lockctl.models.policy import CloseScope, Policy

# Process exit codes derived from a run
EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2


class RunPhase(str, Enum):
    """Phases of a reconciliation run, in order."""

    SCANNING = "scanning"
    AGGREGATING = "aggregating"
    EVALUATING = "evaluating"
    CLOSING = "closing"
    REPORTING = "reporting"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ScanError:
    """A target directory whose handle enumeration failed.

    Attributes:
        directory: Directory that could not be scanned.
        reason: Error message from the provider.
    """

    directory: str
    reason: str


@dataclass(frozen=True, slots=True)
class ResolutionRace:
    """A session that vanished between scan and lookup.

    Attributes:
        session_id: Session that no longer resolves.
        reason: Why the session was dropped.
    """

    session_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class RunReport:
    """Complete result of a reconciliation run.

    Attributes:
        directories: Target directories that were scanned.
        policy: Policy the run was evaluated under.
        scope: Whether handles or sessions were the closure unit.
        handles: Handles found under the target directories.
        sessions: Sessions resolved from those handles.
        outcomes: One outcome per evaluated item.
        scan_errors: Directories that failed to scan.
        dropped_sessions: Sessions dropped because they vanished mid-run.
        phase: Last phase the run reached (DONE once the report is returned).
        started: ISO timestamp of the run start.
        finished: ISO timestamp of the run end.
    """

    directories: tuple[str, ...]
    policy: Policy
    scope: CloseScope
    handles: tuple[HandleRecord, ...] = ()
    sessions: tuple[SessionRecord, ...] = ()
    outcomes: tuple[ClosureOutcome, ...] = ()
    scan_errors: tuple[ScanError, ...] = ()
    dropped_sessions: tuple[ResolutionRace, ...] = ()
    phase: RunPhase = RunPhase.DONE
    started: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    finished: str | None = None

    @property
    def closed(self) -> list[ClosureOutcome]:
        """Outcomes for targets that were closed."""
        return [o for o in self.outcomes if o.status == OutcomeStatus.CLOSED]

    @property
    def failed(self) -> list[ClosureOutcome]:
        """Outcomes for targets that failed to close."""
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    @property
    def skipped(self) -> list[ClosureOutcome]:
        """Outcomes for targets that were not attempted."""
        return [o for o in self.outcomes if o.status == OutcomeStatus.SKIPPED]

    @property
    def remaining(self) -> list[Closable]:
        """Targets still open after the run (rejected, failed or skipped)."""
        return [o.target for o in self.outcomes if o.status != OutcomeStatus.CLOSED]

    @property
    def cancelled(self) -> bool:
        """Check if any attempt was skipped because the run was cancelled."""
        return any(o.skip_reason == SkipReason.CANCELLED for o in self.outcomes)

    @property
    def counts(self) -> dict[str, int]:
        """Counts of closed, failed and skipped outcomes."""
        return {
            "handles": len(self.handles),
            "sessions": len(self.sessions),
            "closed": len(self.closed),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "remaining": len(self.remaining),
            "scan_errors": len(self.scan_errors),
        }

    @property
    def exit_code(self) -> int:
        """Process exit code for this run.

        Returns:
            EXIT_OK when nothing failed, EXIT_PARTIAL when a closure failed,
            a directory could not be scanned or the run was cancelled.
        """
        if self.failed or self.scan_errors or self.cancelled:
            return EXIT_PARTIAL
        return EXIT_OK

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "started": self.started,
            "finished": self.finished,
            "phase": self.phase.value,
            "directories": list(self.directories),
            "policy": {
                "mode": self.policy.mode.value,
                "include_users": sorted(self.policy.include_users),
                "exclude_users": sorted(self.policy.exclude_users),
                "close_enabled": self.policy.close_enabled,
            },
            "scope": self.scope.value,
            "summary": self.counts,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "remaining": [target_to_dict(t) for t in self.remaining],
            "scan_errors": [
                {"directory": e.directory, "reason": e.reason} for e in self.scan_errors
            ],
            "dropped_sessions": [
                {"session_id": d.session_id, "reason": d.reason} for d in self.dropped_sessions
            ],
        }
