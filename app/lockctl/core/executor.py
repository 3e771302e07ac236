"""Closure execution for policy candidates.

Attempts to close each candidate independently through the provider.
Every attempt yields a typed ClosureOutcome; the executor folds them into
a list and never lets one failure abort the batch. There are no retries:
a failed item is reported once and re-evaluated by the next run.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from lockctl.core.cancellation import CancellationToken
from lockctl.core.reporting import ReportSink, Severity, emit
from lockctl.models.handle import Closable, HandleRecord
from lockctl.models.outcome import (
    ClosureOutcome,
    SkipReason,
    closed_outcome,
    failed_outcome,
    skipped_outcome,
)
from lockctl.providers.base import HandleProvider

logger = logging.getLogger(__name__)

DEFAULT_CLOSE_WORKERS = 8


def describe(target: Closable) -> str:
    """Short description of a target for log messages."""
    if isinstance(target, HandleRecord):
        return f"handle {target.handle_id} on {target.path} (user {target.user or '-'})"
    return f"session {target.session_id} (user {target.user or '-'}, client {target.client or '-'})"


class ClosureExecutor:
    """Closes candidates through a handle provider.

    Args:
        provider: Backend used to close handles and sessions.
        max_workers: Upper bound on concurrent closure attempts.
        cancel: Optional token; once raised, unstarted attempts are skipped.
        sink: Optional sink receiving one entry per outcome.
    """

    def __init__(
        self,
        provider: HandleProvider,
        *,
        max_workers: int = DEFAULT_CLOSE_WORKERS,
        cancel: CancellationToken | None = None,
        sink: ReportSink | None = None,
    ) -> None:
        self._provider = provider
        self._max_workers = max(1, max_workers)
        self._cancel = cancel or CancellationToken()
        self._sink = sink

    def close_all(self, candidates: list[Closable] | tuple[Closable, ...]) -> list[ClosureOutcome]:
        """Attempt to close every candidate.

        Args:
            candidates: Handles or sessions selected by policy.

        Returns:
            One ClosureOutcome per candidate, in candidate order.
        """
        if not candidates:
            return []

        outcomes: dict[int, ClosureOutcome] = {}
        workers = min(self._max_workers, len(candidates))

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.close_one, target): index
                for index, target in enumerate(candidates)
            }
            for future in as_completed(futures):
                index = futures[future]
                outcome = future.result()
                outcomes[index] = outcome
                self._report(outcome)

        return [outcomes[i] for i in range(len(candidates))]

    def close_one(self, target: Closable) -> ClosureOutcome:
        """Attempt to close a single target.

        Never raises: any error from the provider becomes a FAILED outcome.

        Args:
            target: Handle or session to close.

        Returns:
            ClosureOutcome describing the attempt.
        """
        if self._cancel.cancelled:
            return skipped_outcome(target, SkipReason.CANCELLED)

        try:
            if isinstance(target, HandleRecord):
                self._provider.close_handle(target.session_id, target.handle_id)
            else:
                self._provider.close_session(target.session_id)
        except Exception as e:
            return failed_outcome(target, str(e) or type(e).__name__)

        return closed_outcome(target)

    def _report(self, outcome: ClosureOutcome) -> None:
        what = describe(outcome.target)
        if outcome.closed:
            emit(self._sink, Severity.INFO, f"Closed {what}", logger)
        elif outcome.failed:
            emit(self._sink, Severity.ERROR, f"Failed to close {what}: {outcome.reason}", logger)
        else:
            emit(self._sink, Severity.WARN, f"Skipped {what}: {outcome.reason}", logger)
