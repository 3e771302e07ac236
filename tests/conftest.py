"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules, including an
in-memory handle provider that records every closure attempt.
"""

import threading
from collections.abc import Callable
from pathlib import Path

import pytest
from lockctl.core.reporting import RunLog
from lockctl.models.handle import HandleRecord, SessionRecord
from lockctl.providers.base import HandleProvider, ProviderError


class FakeProvider(HandleProvider):
    """In-memory provider simulating an SMB server.

    Closed handles disappear from subsequent scans, like on a real server.

    Attributes:
        handles: Currently open handles.
        session_meta: Optional session id -> (user, client) overrides.
        vanished: Session ids that no longer resolve.
        lookup_errors: Session ids whose lookup raises.
        scan_errors: Directory -> exception raised when it is scanned.
        close_errors: Handle or session id -> exception raised on close.
        close_calls: Every close attempt, in call order.
    """

    def __init__(self, handles: list[HandleRecord] | None = None) -> None:
        self.handles: list[HandleRecord] = list(handles or [])
        self.session_meta: dict[str, tuple[str, str]] = {}
        self.vanished: set[str] = set()
        self.lookup_errors: set[str] = set()
        self.scan_errors: dict[str, Exception] = {}
        self.close_errors: dict[str, Exception] = {}
        self.close_calls: list[tuple[str, ...]] = []
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        return True

    def list_open_handles(self) -> list[HandleRecord]:
        with self._lock:
            return list(self.handles)

    def list_open_handles_by_path(self, prefix: str) -> list[HandleRecord]:
        if prefix in self.scan_errors:
            raise self.scan_errors[prefix]
        return super().list_open_handles_by_path(prefix)

    def get_session(self, session_id: str) -> SessionRecord | None:
        if session_id in self.lookup_errors:
            raise ProviderError(f"lookup of {session_id} failed")
        if session_id in self.vanished:
            return None
        if session_id in self.session_meta:
            user, client = self.session_meta[session_id]
            return SessionRecord(session_id=session_id, user=user, client=client)
        with self._lock:
            owned = [h for h in self.handles if h.session_id == session_id]
        if not owned:
            return None
        return SessionRecord(session_id=session_id, user=owned[0].user, client=owned[0].client)

    def close_handle(self, session_id: str, handle_id: str) -> None:
        with self._lock:
            self.close_calls.append(("handle", session_id, handle_id))
        if handle_id in self.close_errors:
            raise self.close_errors[handle_id]
        with self._lock:
            self.handles = [h for h in self.handles if h.handle_id != handle_id]

    def close_session(self, session_id: str) -> None:
        with self._lock:
            self.close_calls.append(("session", session_id))
        if session_id in self.close_errors:
            raise self.close_errors[session_id]
        with self._lock:
            self.handles = [h for h in self.handles if h.session_id != session_id]


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG config and state directories at a temporary location."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return tmp_path


@pytest.fixture
def make_handle() -> Callable[..., HandleRecord]:
    """Factory for HandleRecord instances with sensible defaults."""

    def _make(
        path: str = "D:\\DATA\\file.log",
        user: str = "alice",
        session_id: str = "1",
        handle_id: str = "101",
        client: str = "ws01",
    ) -> HandleRecord:
        return HandleRecord(
            path=path,
            session_id=session_id,
            handle_id=handle_id,
            user=user,
            client=client,
        )

    return _make


@pytest.fixture
def provider_factory() -> type[FakeProvider]:
    """The in-memory provider class, for tests that need several instances."""
    return FakeProvider


@pytest.fixture
def alice_bob_handles(make_handle: Callable[..., HandleRecord]) -> list[HandleRecord]:
    """Two handles under D:\\DATA: one for alice, one for bob."""
    return [
        make_handle(path="D:\\DATA\\x.log", user="CORP\\alice", session_id="1", handle_id="101"),
        make_handle(
            path="D:\\DATA\\y.log",
            user="CORP\\bob",
            session_id="2",
            handle_id="102",
            client="ws02",
        ),
    ]


@pytest.fixture
def fake_provider(alice_bob_handles: list[HandleRecord]) -> FakeProvider:
    """Provider serving alice's and bob's handles."""
    return FakeProvider(alice_bob_handles)


@pytest.fixture
def run_log() -> RunLog:
    """Run log that records entries without echoing to the console."""
    return RunLog(echo=False)
