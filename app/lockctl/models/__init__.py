"""Data models for lockctl.

This module exports the core data structures used throughout the application.
"""

from lockctl.models.handle import (
    Closable,
    HandleRecord,
    SessionRecord,
    normalize_user,
    path_is_under,
)
from lockctl.models.outcome import (
    ClosureOutcome,
    OutcomeStatus,
    SkipReason,
    closed_outcome,
    failed_outcome,
    skipped_outcome,
)
from lockctl.models.policy import CloseMode, CloseScope, Policy, create_policy
from lockctl.models.report import (
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    EXIT_PARTIAL,
    ResolutionRace,
    RunPhase,
    RunReport,
    ScanError,
)

__all__ = [
    "EXIT_CONFIG_ERROR",
    "EXIT_OK",
    "EXIT_PARTIAL",
    "Closable",
    "CloseMode",
    "CloseScope",
    "ClosureOutcome",
    "HandleRecord",
    "OutcomeStatus",
    "Policy",
    "ResolutionRace",
    "RunPhase",
    "RunReport",
    "ScanError",
    "SessionRecord",
    "SkipReason",
    "closed_outcome",
    "create_policy",
    "failed_outcome",
    "normalize_user",
    "path_is_under",
    "skipped_outcome",
]
