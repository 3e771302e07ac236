"""Policy models controlling which open handles get closed."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from lockctl.models.handle import normalize_user


class CloseMode(str, Enum):
    """Closure mode selecting how candidates are chosen.

    Attributes:
        ALL: Every scanned handle or session is a candidate.
        TARGETS: Candidates are filtered by the include/exclude user lists.
        SCAN_ONLY: Nothing is closed; the run only reports.
    """

    ALL = "All"
    TARGETS = "Targets"
    SCAN_ONLY = "ScanOnly"

    @classmethod
    def parse(cls, value: str) -> "CloseMode":
        """Parse a mode string case-insensitively.

        Args:
            value: Mode name such as "all", "Targets" or "SCANONLY".

        Returns:
            Matching CloseMode.

        Raises:
            ValueError: If the value is not a known mode.
        """
        wanted = value.strip().lower()
        for mode in cls:
            if mode.value.lower() == wanted:
                return mode
        valid = ", ".join(m.value for m in cls)
        msg = f"Unrecognized mode '{value}' (expected one of: {valid})"
        raise ValueError(msg)


class CloseScope(str, Enum):
    """Granularity of closure: individual handles or whole sessions."""

    HANDLES = "handles"
    SESSIONS = "sessions"


def _normalize_users(users: Iterable[str]) -> frozenset[str]:
    return frozenset(u for u in (normalize_user(name) for name in users) if u)


@dataclass(frozen=True, slots=True)
class Policy:
    """Immutable closure policy consumed once per run.

    Attributes:
        mode: Closure mode (All, Targets or ScanOnly).
        include_users: Users eligible for closure; empty means no restriction.
        exclude_users: Users never closed. Exclusion overrides inclusion.
        close_enabled: Operational gate; when False nothing is attempted.
    """

    mode: CloseMode
    include_users: frozenset[str] = field(default_factory=frozenset)
    exclude_users: frozenset[str] = field(default_factory=frozenset)
    close_enabled: bool = True

    def __post_init__(self) -> None:
        """Normalize user lists so lookups are case-insensitive."""
        object.__setattr__(self, "include_users", _normalize_users(self.include_users))
        object.__setattr__(self, "exclude_users", _normalize_users(self.exclude_users))


def create_policy(
    mode: CloseMode | str,
    include_users: Iterable[str] = (),
    exclude_users: Iterable[str] = (),
    close_enabled: bool = True,
) -> Policy:
    """Create a policy, parsing the mode from a string if needed.

    Args:
        mode: CloseMode or its string name.
        include_users: Users eligible for closure.
        exclude_users: Users never closed.
        close_enabled: Whether closure attempts are allowed at all.

    Returns:
        Policy with normalized user sets.

    Raises:
        ValueError: If mode is a string that names no known mode.
    """
    parsed = mode if isinstance(mode, CloseMode) else CloseMode.parse(mode)
    return Policy(
        mode=parsed,
        include_users=frozenset(include_users),
        exclude_users=frozenset(exclude_users),
        close_enabled=close_enabled,
    )
