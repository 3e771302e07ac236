"""Handle and session models for open-file reconciliation.

This module defines the immutable records produced while scanning the
file-sharing service: one record per open file handle and one per client
session that owns matching handles.
"""

from dataclasses import dataclass, field

# Separators accepted in both share paths and qualified user names.
_SEPARATORS = ("\\", "/")


def normalize_user(name: str) -> str:
    """Normalize a (possibly domain-qualified) user name.

    Keeps only the last path component and lower-cases it, so that
    ``CORP\\Alice``, ``corp/alice`` and ``alice`` all compare equal.

    Args:
        name: Raw user name as reported by the provider or configuration.

    Returns:
        Normalized user name (empty string if the input was empty).
    """
    value = name.strip()
    for sep in _SEPARATORS:
        value = value.rsplit(sep, 1)[-1]
    return value.lower()


def _normalize_path(path: str) -> str:
    """Fold separators to '/' and case for prefix comparison."""
    return path.strip().replace("\\", "/").casefold()


def path_is_under(path: str, directory: str) -> bool:
    """Check if a path lies inside (or is) a directory.

    Matching is case-insensitive, treats ``\\`` and ``/`` as the same
    separator and only matches on a component boundary: ``D:\\A`` matches
    ``D:\\A\\x.log`` but never ``D:\\AB\\x.log``.

    Args:
        path: Absolute file path of an open handle.
        directory: Target directory to test against.

    Returns:
        True if path equals directory or starts with directory plus a separator.
    """
    target = _normalize_path(directory).rstrip("/")
    candidate = _normalize_path(path)
    if not target:
        # Root directory: every absolute path is under it
        return candidate.startswith("/")
    return candidate == target or candidate.startswith(target + "/")


@dataclass(frozen=True, slots=True)
class HandleRecord:
    """Represents one open file handle held by a remote client.

    Attributes:
        path: Absolute path of the open file.
        session_id: Identifier of the session owning the handle.
        handle_id: Identifier of the handle itself (the SMB FileId).
        user: Owning user name, normalized with :func:`normalize_user`.
        client: Host name or address of the client.
    """

    path: str
    session_id: str
    handle_id: str
    user: str = ""
    client: str = ""

    def __post_init__(self) -> None:
        """Validate handle data and normalize the user name."""
        if not self.path:
            msg = "Handle path cannot be empty"
            raise ValueError(msg)
        if not self.handle_id:
            msg = "Handle id cannot be empty"
            raise ValueError(msg)
        if not self.session_id:
            msg = "Session id cannot be empty"
            raise ValueError(msg)
        object.__setattr__(self, "user", normalize_user(self.user))

    @property
    def target_id(self) -> str:
        """Identifier used when reporting on this handle."""
        return self.handle_id

    @property
    def label(self) -> str:
        """Human-readable description for display."""
        return self.path


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """Represents one client session to the file-sharing service.

    Sessions are derived by grouping handle records on their session id
    and enriched with metadata looked up from the provider.

    Attributes:
        session_id: Unique session identifier.
        user: Session user name, normalized with :func:`normalize_user`.
        client: Host name or address of the client.
        handles: Handles under the target directories owned by this session.
    """

    session_id: str
    user: str = ""
    client: str = ""
    handles: tuple[HandleRecord, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate session data and normalize the user name."""
        if not self.session_id:
            msg = "Session id cannot be empty"
            raise ValueError(msg)
        object.__setattr__(self, "user", normalize_user(self.user))

    @property
    def target_id(self) -> str:
        """Identifier used when reporting on this session."""
        return self.session_id

    @property
    def label(self) -> str:
        """Human-readable description for display."""
        count = len(self.handles)
        return f"session {self.session_id} ({count} handle{'s' if count != 1 else ''})"

    @property
    def handle_count(self) -> int:
        """Number of matching handles owned by this session."""
        return len(self.handles)


# Anything the policy engine and closure executor can operate on.
Closable = HandleRecord | SessionRecord
