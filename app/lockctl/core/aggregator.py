"""Session aggregation for scanned handles.

Groups handle records by session id and enriches each group with the
session metadata reported by the provider. Sessions that vanish between
the scan and the lookup are dropped without failing the run.
"""

import logging
from dataclasses import dataclass, replace

from lockctl.core.reporting import ReportSink, Severity, emit
from lockctl.models.handle import HandleRecord, SessionRecord
from lockctl.models.report import ResolutionRace
from lockctl.providers.base import HandleProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AggregateResult:
    """Sessions resolved from a set of handle records.

    Attributes:
        sessions: Resolved sessions, each carrying its matching handles.
        dropped: Sessions that could not be resolved.
    """

    sessions: tuple[SessionRecord, ...] = ()
    dropped: tuple[ResolutionRace, ...] = ()

    @property
    def handles(self) -> tuple[HandleRecord, ...]:
        """Handles owned by resolved sessions, sorted by path."""
        owned = [h for s in self.sessions for h in s.handles]
        return tuple(sorted(owned, key=lambda h: (h.path.casefold(), h.handle_id)))


class SessionAggregator:
    """Groups handles by session and resolves session metadata.

    Args:
        provider: Backend used to look sessions up.
        sink: Optional sink for race and lookup-failure entries.
    """

    def __init__(self, provider: HandleProvider, *, sink: ReportSink | None = None) -> None:
        self._provider = provider
        self._sink = sink

    @staticmethod
    def session_ids(records: tuple[HandleRecord, ...] | list[HandleRecord]) -> list[str]:
        """Return the distinct session ids in first-seen order.

        Args:
            records: Handle records from the scanner.

        Returns:
            List of unique session identifiers.
        """
        return list(dict.fromkeys(r.session_id for r in records))

    @staticmethod
    def group(
        records: tuple[HandleRecord, ...] | list[HandleRecord],
    ) -> dict[str, tuple[HandleRecord, ...]]:
        """Group handle records by session id."""
        groups: dict[str, list[HandleRecord]] = {}
        for record in records:
            groups.setdefault(record.session_id, []).append(record)
        return {sid: tuple(handles) for sid, handles in groups.items()}

    def resolve(self, records: tuple[HandleRecord, ...] | list[HandleRecord]) -> AggregateResult:
        """Resolve every session referenced by the records.

        Sessions the provider no longer knows are dropped and logged at
        INFO; lookups that raise are dropped and logged at WARN. Neither
        case is treated as a run failure.

        Args:
            records: Handle records from the scanner.

        Returns:
            AggregateResult with resolved and dropped sessions.
        """
        sessions: list[SessionRecord] = []
        dropped: list[ResolutionRace] = []

        for session_id, handles in self.group(records).items():
            try:
                info = self._provider.get_session(session_id)
            except Exception as e:
                reason = f"lookup failed: {e}"
                dropped.append(ResolutionRace(session_id=session_id, reason=reason))
                emit(self._sink, Severity.WARN, f"Session {session_id} {reason}; skipping", logger)
                continue

            if info is None:
                reason = "session closed before it could be resolved"
                dropped.append(ResolutionRace(session_id=session_id, reason=reason))
                emit(self._sink, Severity.INFO, f"Session {session_id}: {reason}; skipping", logger)
                continue

            sessions.append(
                replace(
                    info,
                    session_id=session_id,
                    user=info.user or handles[0].user,
                    client=info.client or handles[0].client,
                    handles=handles,
                )
            )

        return AggregateResult(sessions=tuple(sessions), dropped=tuple(dropped))
