"""Abstract base class for handle providers.

This module defines the HandleProvider interface that every backend
capable of enumerating and closing open file handles must implement.
"""

from abc import ABC, abstractmethod

from lockctl.models.handle import HandleRecord, SessionRecord


class ProviderError(Exception):
    """Base exception for handle provider failures."""


class ProviderUnavailableError(ProviderError):
    """Raised when the provider backend cannot be reached or executed."""


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its timeout."""


class HandleProvider(ABC):
    """Abstract base class for all handle providers.

    Providers query the file-sharing service for open handles and
    sessions and request their termination by identifier.

    Example:
        >>> provider = SmbShareProvider()
        >>> if provider.is_available():
        ...     for handle in provider.list_open_handles_by_path("D:\\\\Data"):
        ...         print(handle.path, handle.user)
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider can be used on the current system.

        Returns:
            True if the backend is reachable, False otherwise.
        """

    @abstractmethod
    def list_open_handles(self) -> list[HandleRecord]:
        """List every open file handle on the server.

        Returns:
            HandleRecord for each open handle.

        Raises:
            ProviderError: If enumeration fails.
        """

    def list_open_handles_by_path(self, prefix: str) -> list[HandleRecord]:
        """List open handles whose path starts with a prefix.

        The default implementation filters :meth:`list_open_handles`
        with a plain case-insensitive prefix test. Providers that can
        filter server-side should override it. Callers must still apply
        a separator-aware check, as results may be over-inclusive.

        Args:
            prefix: Path prefix to filter on.

        Returns:
            HandleRecord for each matching handle.

        Raises:
            ProviderError: If enumeration fails.
        """
        wanted = prefix.casefold()
        return [h for h in self.list_open_handles() if h.path.casefold().startswith(wanted)]

    @abstractmethod
    def get_session(self, session_id: str) -> SessionRecord | None:
        """Look up session metadata.

        Args:
            session_id: Session identifier from a handle record.

        Returns:
            SessionRecord without handles, or None if the session no longer exists.

        Raises:
            ProviderError: If the lookup itself fails.
        """

    @abstractmethod
    def close_handle(self, session_id: str, handle_id: str) -> None:
        """Close one open file handle.

        Args:
            session_id: Session owning the handle.
            handle_id: Handle to close.

        Raises:
            ProviderError: If the handle could not be closed.
        """

    @abstractmethod
    def close_session(self, session_id: str) -> None:
        """Close a session and every handle it owns.

        Args:
            session_id: Session to close.

        Raises:
            ProviderError: If the session could not be closed.
        """
