"""Handle scanner scoped to target directories.

Queries the provider once per target directory, keeps only handles that
lie inside that directory, and normalizes the results into a single
de-duplicated, path-sorted list. A failing directory never aborts the scan.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from lockctl.core.reporting import ReportSink, Severity, emit
from lockctl.models.handle import HandleRecord, path_is_under
from lockctl.models.report import ScanError
from lockctl.providers.base import HandleProvider

logger = logging.getLogger(__name__)

DEFAULT_SCAN_WORKERS = 4


@dataclass(frozen=True, slots=True)
class ScanOutcome:
    """Result of scanning all target directories.

    Attributes:
        records: Matching handles, sorted by path.
        errors: Directories whose enumeration failed.
    """

    records: tuple[HandleRecord, ...] = ()
    errors: tuple[ScanError, ...] = field(default=())


class HandleScanner:
    """Scans target directories for open handles.

    Args:
        provider: Backend used to enumerate open handles.
        max_workers: Upper bound on concurrent directory scans.
        sink: Optional sink receiving one line per discovered handle and
            the error entries for failed directories.
    """

    def __init__(
        self,
        provider: HandleProvider,
        *,
        max_workers: int = DEFAULT_SCAN_WORKERS,
        sink: ReportSink | None = None,
    ) -> None:
        self._provider = provider
        self._max_workers = max(1, max_workers)
        self._sink = sink

    def scan(self, directories: list[str] | tuple[str, ...]) -> ScanOutcome:
        """Scan every directory and collect matching handles.

        Args:
            directories: Non-empty list of target directories.

        Returns:
            ScanOutcome with sorted records and per-directory errors.

        Raises:
            ValueError: If no directories are given.
        """
        if not directories:
            msg = "At least one directory to scan is required"
            raise ValueError(msg)

        found: dict[tuple[str, str], HandleRecord] = {}
        errors: list[ScanError] = []

        workers = min(self._max_workers, len(directories))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self._scan_directory, d): d for d in directories}
            for future in as_completed(futures):
                directory = futures[future]
                try:
                    records = future.result()
                except Exception as e:
                    error = ScanError(directory=directory, reason=str(e) or type(e).__name__)
                    errors.append(error)
                    self._emit(Severity.ERROR, f"Failed to scan {directory}: {error.reason}")
                    continue

                self._emit(Severity.DEBUG, f"Found {len(records)} open handle(s) under {directory}")
                for record in records:
                    found.setdefault((record.session_id, record.handle_id), record)

        ordered = sorted(found.values(), key=lambda h: (h.path.casefold(), h.handle_id))
        if self._sink is not None:
            for record in ordered:
                self._sink.line(
                    f"{record.path}  [user={record.user or '-'} "
                    f"client={record.client or '-'} session={record.session_id}]"
                )

        # Keep directory order for errors so reports are stable
        position = {d: i for i, d in enumerate(directories)}
        errors.sort(key=lambda e: position.get(e.directory, len(position)))
        return ScanOutcome(records=tuple(ordered), errors=tuple(errors))

    def _scan_directory(self, directory: str) -> list[HandleRecord]:
        """Enumerate handles for one directory, dropping false prefix matches."""
        logger.debug("Scanning open handles under %s", directory)
        records = self._provider.list_open_handles_by_path(directory)
        return [r for r in records if path_is_under(r.path, directory)]

    def _emit(self, severity: Severity, message: str) -> None:
        emit(self._sink, severity, message, logger)
