"""Unit tests for handle and session models.

Tests for user normalization, separator-aware path matching and record validation.
"""

import pytest
from lockctl.models.handle import HandleRecord, SessionRecord, normalize_user, path_is_under


class TestNormalizeUser:
    """Tests for normalize_user."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("alice", "alice"),
            ("Alice", "alice"),
            ("CORP\\Alice", "alice"),
            ("corp/alice", "alice"),
            ("  CORP\\BOB  ", "bob"),
            ("", ""),
        ],
    )
    def test_normalizes(self, raw: str, expected: str) -> None:
        """Domain prefixes are stripped and names lower-cased."""
        assert normalize_user(raw) == expected


class TestPathIsUnder:
    """Tests for path_is_under."""

    def test_file_inside_directory(self) -> None:
        """A file inside the directory matches."""
        assert path_is_under("D:\\DATA\\x.log", "D:\\DATA") is True

    def test_case_insensitive(self) -> None:
        """Matching ignores case."""
        assert path_is_under("d:\\data\\Sub\\X.LOG", "D:\\DATA") is True

    def test_sibling_prefix_does_not_match(self) -> None:
        """D:\\A must not match D:\\AB."""
        assert path_is_under("D:\\AB\\x.log", "D:\\A") is False

    def test_directory_itself_matches(self) -> None:
        """The directory path itself is under the directory."""
        assert path_is_under("D:\\DATA", "D:\\DATA") is True

    def test_trailing_separator_on_directory(self) -> None:
        """A trailing separator on the directory is ignored."""
        assert path_is_under("D:\\DATA\\x.log", "D:\\DATA\\") is True
        assert path_is_under("D:\\DATAX\\x.log", "D:\\DATA\\") is False

    def test_mixed_separators(self) -> None:
        """Forward and back slashes are equivalent."""
        assert path_is_under("D:/DATA/x.log", "D:\\DATA") is True
        assert path_is_under("\\\\srv\\share\\a\\b.txt", "//srv/share/a") is True

    def test_drive_root(self) -> None:
        """A drive root matches every path on that drive only."""
        assert path_is_under("D:\\DATA\\x.log", "D:\\") is True
        assert path_is_under("E:\\DATA\\x.log", "D:\\") is False

    def test_posix_root(self) -> None:
        """The POSIX root matches every absolute path."""
        assert path_is_under("/srv/share/file", "/") is True


class TestHandleRecord:
    """Tests for HandleRecord."""

    def test_user_is_normalized(self) -> None:
        """User names are normalized on creation."""
        handle = HandleRecord(path="D:\\x", session_id="1", handle_id="2", user="CORP\\Alice")
        assert handle.user == "alice"

    def test_target_id_is_handle_id(self) -> None:
        """target_id identifies the handle."""
        handle = HandleRecord(path="D:\\x", session_id="1", handle_id="2")
        assert handle.target_id == "2"
        assert handle.label == "D:\\x"

    @pytest.mark.parametrize("field", ["path", "session_id", "handle_id"])
    def test_required_fields(self, field: str) -> None:
        """Empty identifying fields are rejected."""
        values = {"path": "D:\\x", "session_id": "1", "handle_id": "2"}
        values[field] = ""
        with pytest.raises(ValueError):
            HandleRecord(**values)

    def test_is_immutable(self) -> None:
        """Records cannot be modified."""
        handle = HandleRecord(path="D:\\x", session_id="1", handle_id="2")
        with pytest.raises(AttributeError):
            handle.path = "D:\\y"  # type: ignore[misc]


class TestSessionRecord:
    """Tests for SessionRecord."""

    def test_label_counts_handles(self) -> None:
        """label mentions the number of handles."""
        handle = HandleRecord(path="D:\\x", session_id="7", handle_id="2")
        session = SessionRecord(session_id="7", user="Bob", handles=(handle,))
        assert session.user == "bob"
        assert session.handle_count == 1
        assert session.label == "session 7 (1 handle)"
        assert session.target_id == "7"

    def test_empty_session_id_rejected(self) -> None:
        """Sessions need an identifier."""
        with pytest.raises(ValueError):
            SessionRecord(session_id="")
