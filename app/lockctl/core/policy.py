"""Closure policy evaluation.

Pure business logic deciding which handles or sessions are closure
candidates. Precedence is fixed:

1. ScanOnly: nothing is a candidate, whatever close_enabled says.
2. All: everything is a candidate.
3. Targets: a user is a candidate iff (include is empty or the user is
   included) and the user is not excluded. Exclusion always wins.
4. Any other mode is a configuration error.

The close_enabled gate is handled by the caller; see :func:`disabled_decision`.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from lockctl.core.errors import PolicyConfigError
from lockctl.models.handle import Closable
from lockctl.models.outcome import SkipReason
from lockctl.models.policy import CloseMode, Policy


@dataclass(frozen=True, slots=True)
class PolicyDecision:
    """Partition of items into closure candidates and rejected items.

    Attributes:
        candidates: Items selected for closure, in input order.
        rejected: Items left open, each with the reason it was rejected.
    """

    candidates: tuple[Closable, ...] = ()
    rejected: tuple[tuple[Closable, SkipReason], ...] = ()


def is_target_user(user: str, policy: Policy) -> bool:
    """Check if a user is selected under Targets mode.

    Args:
        user: Normalized user name.
        policy: Policy providing the include and exclude lists.

    Returns:
        True if the user's items should be closed.
    """
    if user in policy.exclude_users:
        return False
    return not policy.include_users or user in policy.include_users


def evaluate_policy(items: Iterable[Closable], policy: Policy) -> PolicyDecision:
    """Split items into closure candidates and rejected items.

    Args:
        items: Handles or sessions to evaluate.
        policy: Policy to evaluate under.

    Returns:
        PolicyDecision with candidates and rejected items.

    Raises:
        PolicyConfigError: If the policy mode is not a recognized CloseMode.
    """
    pending = list(items)
    mode = policy.mode

    if mode == CloseMode.SCAN_ONLY:
        return PolicyDecision(rejected=tuple((item, SkipReason.SCAN_ONLY) for item in pending))

    if mode == CloseMode.ALL:
        return PolicyDecision(candidates=tuple(pending))

    if mode == CloseMode.TARGETS:
        candidates: list[Closable] = []
        rejected: list[tuple[Closable, SkipReason]] = []
        for item in pending:
            if is_target_user(item.user, policy):
                candidates.append(item)
            else:
                rejected.append((item, SkipReason.POLICY))
        return PolicyDecision(candidates=tuple(candidates), rejected=tuple(rejected))

    msg = f"Unrecognized close mode: {mode!r}"
    raise PolicyConfigError(msg)


def disabled_decision(items: Iterable[Closable]) -> PolicyDecision:
    """Reject every item because closure is disabled.

    Used instead of :func:`evaluate_policy` when close_enabled is False.
    """
    return PolicyDecision(rejected=tuple((item, SkipReason.CLOSE_DISABLED) for item in items))
