"""Reconciliation run orchestration.

Drives one snapshot-evaluate-act cycle through its phases:

    scanning -> aggregating -> evaluating -> closing -> reporting -> done

The closing phase is skipped when closure is disabled or the mode is
ScanOnly. The only condition that aborts a run is a PolicyConfigError.
"""

import logging
from dataclasses import replace
from datetime import UTC, datetime

from lockctl.core.aggregator import SessionAggregator
from lockctl.core.cancellation import CancellationToken
from lockctl.core.errors import PolicyConfigError
from lockctl.core.executor import DEFAULT_CLOSE_WORKERS, ClosureExecutor
from lockctl.core.policy import PolicyDecision, disabled_decision, evaluate_policy
from lockctl.core.reporting import ReportSink, Severity
from lockctl.core.scanner import HandleScanner
from lockctl.models.handle import Closable
from lockctl.models.outcome import ClosureOutcome, skipped_outcome
from lockctl.models.policy import CloseMode, CloseScope, Policy
from lockctl.models.report import RunPhase, RunReport
from lockctl.providers.base import HandleProvider

logger = logging.getLogger(__name__)


class ReconcileEngine:
    """Runs the scan, aggregate, evaluate and close pipeline.

    The engine holds no state between runs: every call to :meth:`run`
    takes a fresh snapshot from the provider.

    Args:
        provider: Backend used to enumerate and close handles.
        sink: Logging session receiving display lines and log entries.
        scope: Close individual handles or whole sessions.
        max_workers: Upper bound on concurrent provider calls per phase.
    """

    def __init__(
        self,
        provider: HandleProvider,
        sink: ReportSink,
        *,
        scope: CloseScope = CloseScope.HANDLES,
        max_workers: int = DEFAULT_CLOSE_WORKERS,
    ) -> None:
        self._provider = provider
        self._sink = sink
        self._scope = scope
        self._max_workers = max_workers
        self._phase: RunPhase | None = None

    @property
    def scope(self) -> CloseScope:
        """Closure granularity used by this engine."""
        return self._scope

    @property
    def phase(self) -> RunPhase | None:
        """Phase the current or last run reached, None before the first run."""
        return self._phase

    def run(
        self,
        directories: list[str] | tuple[str, ...],
        policy: Policy,
        cancel: CancellationToken | None = None,
    ) -> RunReport:
        """Execute one reconciliation run.

        Args:
            directories: Non-empty list of target directories.
            policy: Policy to evaluate scanned items under.
            cancel: Optional cancellation token for the closing phase.

        Returns:
            RunReport describing every item and what remains open.

        Raises:
            PolicyConfigError: If the policy mode is unrecognized.
            ValueError: If no directories are given.
        """
        started = datetime.now(UTC).isoformat()
        cancel = cancel or CancellationToken()
        sink = self._sink

        self._enter(RunPhase.SCANNING)
        scanner = HandleScanner(self._provider, max_workers=self._max_workers, sink=sink)
        scan = scanner.scan(directories)

        self._enter(RunPhase.AGGREGATING)
        aggregate = SessionAggregator(self._provider, sink=sink).resolve(scan.records)
        handles = aggregate.handles
        sink.log(
            Severity.INFO,
            f"Found {len(handles)} open handle(s) in {len(aggregate.sessions)} session(s) "
            f"under {len(directories)} director{'y' if len(directories) == 1 else 'ies'}",
        )

        self._enter(RunPhase.EVALUATING)
        items: list[Closable] = list(
            handles if self._scope == CloseScope.HANDLES else aggregate.sessions
        )
        decision = self._decide(items, policy)

        outcomes: list[ClosureOutcome] = []
        if policy.close_enabled and policy.mode != CloseMode.SCAN_ONLY:
            self._enter(RunPhase.CLOSING)
            executor = ClosureExecutor(
                self._provider,
                max_workers=self._max_workers,
                cancel=cancel,
                sink=sink,
            )
            outcomes.extend(executor.close_all(decision.candidates))
        else:
            logger.debug("Skipping closing phase")

        self._enter(RunPhase.REPORTING)
        outcomes.extend(skipped_outcome(item, reason) for item, reason in decision.rejected)
        position = {self._key(item): i for i, item in enumerate(items)}
        outcomes.sort(key=lambda o: position[self._key(o.target)])

        report = RunReport(
            directories=tuple(directories),
            policy=policy,
            scope=self._scope,
            handles=handles,
            sessions=aggregate.sessions,
            outcomes=tuple(outcomes),
            scan_errors=scan.errors,
            dropped_sessions=aggregate.dropped,
            phase=RunPhase.REPORTING,
            started=started,
            finished=datetime.now(UTC).isoformat(),
        )
        self._summarize(report)
        self._enter(RunPhase.DONE)
        return replace(report, phase=RunPhase.DONE)

    def _decide(self, items: list[Closable], policy: Policy) -> PolicyDecision:
        """Apply the close_enabled gate, then the policy."""
        if not policy.close_enabled:
            self._sink.log(
                Severity.INFO,
                f"Closure disabled (close_enabled is false); {len(items)} item(s) left open",
            )
            return disabled_decision(items)

        try:
            decision = evaluate_policy(items, policy)
        except PolicyConfigError as e:
            self._sink.log(Severity.ERROR, f"Aborting run: {e}")
            raise

        if policy.mode == CloseMode.SCAN_ONLY:
            self._sink.log(
                Severity.INFO,
                f"Scan-only mode; no closure attempted for {len(items)} item(s)",
            )
        else:
            self._sink.log(
                Severity.INFO,
                f"Policy {policy.mode.value}: {len(decision.candidates)} candidate(s), "
                f"{len(decision.rejected)} not selected",
            )
        return decision

    def _summarize(self, report: RunReport) -> None:
        counts = report.counts
        severity = Severity.WARN if report.failed or report.scan_errors else Severity.INFO
        self._sink.log(
            severity,
            f"Run complete: {counts['closed']} closed, {counts['failed']} failed to close, "
            f"{counts['skipped']} not attempted; {counts['remaining']} remaining open",
        )
        for outcome in report.outcomes:
            if outcome.closed:
                continue
            self._sink.line(
                f"Still open: {outcome.target.label} [{outcome.status.value}: {outcome.reason}]"
            )

    def _enter(self, phase: RunPhase) -> None:
        self._phase = phase
        logger.debug("Run phase: %s", phase.value)

    def _key(self, item: Closable) -> tuple[str, str]:
        return (item.session_id, item.target_id)
