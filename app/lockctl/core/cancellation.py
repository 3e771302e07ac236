"""Cooperative cancellation for reconciliation runs."""

import threading


class CancellationToken:
    """A single cancellation signal shared by every phase of a run.

    Raising the token stops new closure attempts from starting. Attempts
    already in flight complete and the run still produces a report.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.cancelled
        True
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Raise the cancellation signal."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Check if cancellation was requested."""
        return self._event.is_set()
