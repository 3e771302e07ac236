"""Windows SMB server provider implementation.

Enumerates and closes open files and sessions using the SmbShare
PowerShell cmdlets (Get-SmbOpenFile, Get-SmbSession, Close-SmbOpenFile,
Close-SmbSession), parsing their ConvertTo-Json output.
"""

import json
import logging
import subprocess
from typing import Any

from lockctl.models.handle import HandleRecord, SessionRecord
from lockctl.providers.base import (
    HandleProvider,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from lockctl.utils.shell import CommandResult, first_available, run_command

logger = logging.getLogger(__name__)

# PowerShell executables, in order of preference
_SHELLS: tuple[str, ...] = ("powershell", "pwsh")

_HANDLE_FIELDS = "FileId,SessionId,Path,ClientComputerName,ClientUserName"
_SESSION_FIELDS = "SessionId,ClientComputerName,ClientUserName,NumOpens"

# Windows PowerShell writes piped output in the OEM codepage unless told otherwise
_UTF8_OUTPUT = "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "


def _quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def _like_prefix(directory: str) -> str:
    """Build a -like pattern matching the directory and everything below it.

    Wildcard characters are escaped with a backtick, the backtick itself
    first. Trailing separators are dropped so the directory's own path
    still matches.
    """
    stem = directory.rstrip("\\/") or directory
    for char in "`[]*?":
        stem = stem.replace(char, "`" + char)
    return stem + "*"


def _require_numeric(value: str, name: str) -> str:
    """Reject identifiers that are not plain unsigned integers."""
    if not value.isdigit():
        msg = f"Invalid {name}: {value!r}"
        raise ProviderError(msg)
    return value


class SmbShareProvider(HandleProvider):
    """Provider for the Windows SMB server.

    Each call spawns a short PowerShell process. Calls are bounded by
    ``timeout`` seconds; a timeout surfaces as ProviderTimeoutError.

    Attributes:
        timeout: Maximum time in seconds for a single cmdlet invocation.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        """Initialize the provider.

        Args:
            timeout: Per-call timeout in seconds.
        """
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        """Per-call timeout in seconds."""
        return self._timeout

    def is_available(self) -> bool:
        """Check if a PowerShell executable is available."""
        return first_available(_SHELLS) is not None

    def list_open_handles(self) -> list[HandleRecord]:
        """List every open file on the SMB server."""
        script = f"Get-SmbOpenFile | Select-Object {_HANDLE_FIELDS} | ConvertTo-Json -Compress"
        return self._parse_handles(self._run(script))

    def list_open_handles_by_path(self, prefix: str) -> list[HandleRecord]:
        """List open files whose path starts with prefix (server-side filter)."""
        pattern = _quote(_like_prefix(prefix))
        script = (
            f"Get-SmbOpenFile | Where-Object {{ $_.Path -like {pattern} }} | "
            f"Select-Object {_HANDLE_FIELDS} | ConvertTo-Json -Compress"
        )
        return self._parse_handles(self._run(script))

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Look up an SMB session, returning None when it no longer exists."""
        sid = _require_numeric(session_id, "session id")
        script = (
            f"Get-SmbSession -SessionId {sid} -ErrorAction SilentlyContinue | "
            f"Select-Object {_SESSION_FIELDS} | ConvertTo-Json -Compress"
        )
        items = self._load_json(self._run(script))
        if not items:
            return None
        entry = items[0]
        return SessionRecord(
            session_id=str(entry.get("SessionId", sid)),
            user=str(entry.get("ClientUserName") or ""),
            client=str(entry.get("ClientComputerName") or ""),
        )

    def close_handle(self, session_id: str, handle_id: str) -> None:
        """Close one open file with Close-SmbOpenFile."""
        sid = _require_numeric(session_id, "session id")
        fid = _require_numeric(handle_id, "file id")
        logger.info("Closing SMB open file %s (session %s)", fid, sid)
        self._run(f"Close-SmbOpenFile -FileId {fid} -SessionId {sid} -Force -ErrorAction Stop")

    def close_session(self, session_id: str) -> None:
        """Close a session with Close-SmbSession."""
        sid = _require_numeric(session_id, "session id")
        logger.info("Closing SMB session %s", sid)
        self._run(f"Close-SmbSession -SessionId {sid} -Force -ErrorAction Stop")

    def _run(self, script: str) -> str:
        """Run a PowerShell script and return its standard output.

        Args:
            script: PowerShell command text.

        Returns:
            Standard output of the command.

        Raises:
            ProviderUnavailableError: If no PowerShell executable is found.
            ProviderTimeoutError: If the command exceeds the timeout.
            ProviderError: If the command exits with a non-zero status.
        """
        shell = first_available(_SHELLS)
        if shell is None:
            msg = "PowerShell is not available on this system"
            raise ProviderUnavailableError(msg)

        args = [shell, "-NoProfile", "-NonInteractive", "-Command", _UTF8_OUTPUT + script]
        try:
            result = run_command(args, timeout=self._timeout, encoding="utf-8", errors="replace")
        except subprocess.TimeoutExpired as e:
            msg = f"Provider call timed out after {self._timeout:g}s"
            raise ProviderTimeoutError(msg) from e
        except OSError as e:
            msg = f"Failed to run {shell}: {e}"
            raise ProviderUnavailableError(msg) from e

        return self._check(result)

    @staticmethod
    def _check(result: CommandResult) -> str:
        if not result.success:
            raise ProviderError(result.message)
        return result.stdout

    @staticmethod
    def _load_json(output: str) -> list[dict[str, Any]]:
        """Parse ConvertTo-Json output into a list of objects.

        ConvertTo-Json emits a bare object for a single result and nothing
        at all for an empty pipeline.
        """
        text = output.strip()
        if not text:
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"Unparseable provider output: {e}"
            raise ProviderError(msg) from e
        if isinstance(data, dict):
            return [data]
        if isinstance(data, list):
            return [item for item in data if isinstance(item, dict)]
        msg = f"Unexpected provider output type: {type(data).__name__}"
        raise ProviderError(msg)

    def _parse_handles(self, output: str) -> list[HandleRecord]:
        handles: list[HandleRecord] = []
        for entry in self._load_json(output):
            path = entry.get("Path")
            file_id = entry.get("FileId")
            session_id = entry.get("SessionId")
            if not path or file_id is None or session_id is None:
                logger.debug("Skipping incomplete open-file entry: %r", entry)
                continue
            handles.append(
                HandleRecord(
                    path=str(path),
                    session_id=str(session_id),
                    handle_id=str(file_id),
                    user=str(entry.get("ClientUserName") or ""),
                    client=str(entry.get("ClientComputerName") or ""),
                )
            )
        return handles
