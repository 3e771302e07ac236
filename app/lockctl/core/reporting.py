"""Reporting sink and the per-run logging session.

The engine never writes to the console or log files directly. It emits
display lines and severity-tagged entries to a :class:`ReportSink`.
:class:`RunLog` is the standard sink: an explicit object created for each
run, so several independent runs can coexist in one process.
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import IO, TYPE_CHECKING, Protocol

from lockctl.utils.formatting import console as default_console

if TYPE_CHECKING:
    from types import TracebackType

    from rich.console import Console

logger = logging.getLogger(__name__)

# Entries are forwarded to this logger in addition to the run log file
run_logger = logging.getLogger("lockctl.run")


class Severity(str, Enum):
    """Severity of a structured report entry."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def level(self) -> int:
        """Matching standard logging level."""
        return _LEVELS[self]


_LEVELS: dict[Severity, int] = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class ReportSink(Protocol):
    """Destination for run output.

    Implementations must not raise: a failing sink never changes the
    engine's control flow.
    """

    def line(self, text: str) -> None:
        """Accept one ordered display line."""

    def log(self, severity: Severity, message: str) -> None:
        """Accept one structured log entry."""


class RunLog:
    """Logging session for a single run.

    Collects display lines and log entries, echoes lines to the console,
    forwards entries to the ``lockctl.run`` logger and, when a path is
    given, appends them to a per-run log file. File errors are reported
    once via the module logger and then ignored.

    Args:
        log_path: Optional file to persist entries to.
        echo: If True, print display lines to the console.
        console: Rich console used for echoing (defaults to the shared one).
    """

    def __init__(
        self,
        log_path: Path | None = None,
        *,
        echo: bool = True,
        console: Console | None = None,
    ) -> None:
        self._path = log_path
        self._echo = echo
        self._console = console or default_console
        self._file: IO[str] | None = None
        self._file_failed = False
        self._lock = threading.Lock()
        self.lines: list[str] = []
        self.entries: list[tuple[str, Severity, str]] = []

    @property
    def path(self) -> Path | None:
        """Log file path, if persistence is enabled."""
        return self._path

    def __enter__(self) -> RunLog:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def open(self) -> None:
        """Open the log file for appending, if one is configured."""
        if self._path is None or self._file is not None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self._path.open("a", encoding="utf-8")
        except OSError as e:
            self._file_failed = True
            logger.warning("Cannot open run log %s: %s", self._path, e)

    def close(self) -> None:
        """Flush and close the log file."""
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.close()
            except OSError as e:
                logger.warning("Failed to close run log %s: %s", self._path, e)
            finally:
                self._file = None

    def line(self, text: str) -> None:
        """Record a display line and echo it to the console."""
        with self._lock:
            self.lines.append(text)
        if self._echo:
            try:
                self._console.print(text, markup=False, highlight=False)
            except OSError as e:
                logger.debug("Console write failed: %s", e)

    def log(self, severity: Severity, message: str) -> None:
        """Record a structured entry with an implicit timestamp."""
        timestamp = datetime.now(UTC).isoformat()
        run_logger.log(severity.level, message)
        with self._lock:
            self.entries.append((timestamp, severity, message))
            self._write(f"{timestamp} [{severity.value}] {message}\n")

    def messages(self, severity: Severity | None = None) -> list[str]:
        """Return logged messages, optionally filtered by severity."""
        with self._lock:
            return [m for _, s, m in self.entries if severity is None or s == severity]

    def _write(self, text: str) -> None:
        if self._file is None or self._file_failed:
            return
        try:
            self._file.write(text)
            self._file.flush()
        except OSError as e:
            self._file_failed = True
            logger.warning("Writing to run log %s failed, disabling it: %s", self._path, e)


def emit(
    sink: ReportSink | None,
    severity: Severity,
    message: str,
    fallback: logging.Logger = logger,
) -> None:
    """Send an entry to a sink, or to a fallback logger when there is none."""
    if sink is not None:
        sink.log(severity, message)
    else:
        fallback.log(severity.level, message)
