"""Closure outcome models.

Every item that reaches the end of a run gets exactly one outcome, so the
final report can always tell closed, failed and not-attempted items apart.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from lockctl.models.handle import Closable, HandleRecord


class OutcomeStatus(str, Enum):
    """Result status of one closure attempt.

    Attributes:
        CLOSED: The provider closed the handle or session.
        FAILED: The provider raised an error; the target is still open.
        SKIPPED: No attempt was made (see :class:`SkipReason`).
    """

    CLOSED = "closed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    """Why an item was not attempted.

    Attributes:
        POLICY: Rejected by the include/exclude user lists.
        SCAN_ONLY: Mode is ScanOnly, closure is never attempted.
        CLOSE_DISABLED: The close_enabled gate is off.
        CANCELLED: The run was cancelled before the attempt started.
    """

    POLICY = "policy"
    SCAN_ONLY = "scan_only"
    CLOSE_DISABLED = "close_disabled"
    CANCELLED = "cancelled"

    @property
    def description(self) -> str:
        """Short message shown next to skipped items."""
        return _SKIP_DESCRIPTIONS[self]


_SKIP_DESCRIPTIONS: dict[SkipReason, str] = {
    SkipReason.POLICY: "Not selected by user policy",
    SkipReason.SCAN_ONLY: "Scan-only mode",
    SkipReason.CLOSE_DISABLED: "Closure disabled",
    SkipReason.CANCELLED: "Run cancelled",
}


def _now() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True, slots=True)
class ClosureOutcome:
    """Result of one closure attempt (or non-attempt).

    Attributes:
        target: The handle or session the outcome is about.
        status: Closed, failed or skipped.
        reason: Failure message for FAILED, skip description for SKIPPED.
        skip_reason: Machine-readable reason for SKIPPED outcomes.
        timestamp: ISO 8601 UTC timestamp of when the outcome was recorded.
    """

    target: Closable
    status: OutcomeStatus
    reason: str | None = None
    skip_reason: SkipReason | None = None
    timestamp: str = field(default_factory=_now)

    @property
    def closed(self) -> bool:
        """Check if the target was closed."""
        return self.status == OutcomeStatus.CLOSED

    @property
    def failed(self) -> bool:
        """Check if the closure attempt failed."""
        return self.status == OutcomeStatus.FAILED

    @property
    def skipped(self) -> bool:
        """Check if no attempt was made."""
        return self.status == OutcomeStatus.SKIPPED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "target": target_to_dict(self.target),
            "status": self.status.value,
            "reason": self.reason,
            "skip_reason": self.skip_reason.value if self.skip_reason else None,
            "timestamp": self.timestamp,
        }


def closed_outcome(target: Closable) -> ClosureOutcome:
    """Create an outcome for a successfully closed target."""
    return ClosureOutcome(target=target, status=OutcomeStatus.CLOSED)


def failed_outcome(target: Closable, reason: str) -> ClosureOutcome:
    """Create an outcome for a target the provider failed to close.

    Args:
        target: Handle or session that is still open.
        reason: Error message reported by the provider.

    Returns:
        ClosureOutcome with FAILED status.
    """
    return ClosureOutcome(
        target=target,
        status=OutcomeStatus.FAILED,
        reason=reason or "Unknown error",
    )


def skipped_outcome(target: Closable, skip_reason: SkipReason) -> ClosureOutcome:
    """Create an outcome for a target that was not attempted.

    Args:
        target: Handle or session left untouched.
        skip_reason: Why no attempt was made.

    Returns:
        ClosureOutcome with SKIPPED status.
    """
    return ClosureOutcome(
        target=target,
        status=OutcomeStatus.SKIPPED,
        reason=skip_reason.description,
        skip_reason=skip_reason,
    )


def target_to_dict(target: Closable) -> dict[str, Any]:
    """Convert a handle or session record to a dictionary."""
    if isinstance(target, HandleRecord):
        return {
            "kind": "handle",
            "path": target.path,
            "session_id": target.session_id,
            "handle_id": target.handle_id,
            "user": target.user,
            "client": target.client,
        }
    return {
        "kind": "session",
        "session_id": target.session_id,
        "user": target.user,
        "client": target.client,
        "handles": [target_to_dict(h) for h in target.handles],
    }
