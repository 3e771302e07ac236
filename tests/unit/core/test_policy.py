"""Unit tests for core/policy.py.

Tests mode precedence, include/exclude evaluation and unknown modes.
"""

import pytest
from lockctl.core.errors import PolicyConfigError
from lockctl.core.policy import disabled_decision, evaluate_policy, is_target_user
from lockctl.models.outcome import SkipReason
from lockctl.models.policy import CloseMode, Policy, create_policy


@pytest.fixture
def items(make_handle):
    """Handles owned by alice, bob and carol."""
    return [
        make_handle(user="alice", session_id="1", handle_id="1"),
        make_handle(user="bob", session_id="2", handle_id="2"),
        make_handle(user="carol", session_id="3", handle_id="3"),
    ]


class TestIsTargetUser:
    """Tests for is_target_user."""

    def test_empty_include_selects_everyone(self) -> None:
        """With no include list every non-excluded user is selected."""
        policy = create_policy("Targets", exclude_users=["bob"])
        assert is_target_user("alice", policy) is True
        assert is_target_user("bob", policy) is False

    def test_exclusion_wins(self) -> None:
        """A user in both lists is never selected."""
        policy = create_policy("Targets", include_users=["alice"], exclude_users=["alice"])
        assert is_target_user("alice", policy) is False

    def test_include_restricts(self) -> None:
        """A non-empty include list restricts selection."""
        policy = create_policy("Targets", include_users=["alice"])
        assert is_target_user("alice", policy) is True
        assert is_target_user("carol", policy) is False


class TestEvaluatePolicy:
    """Tests for evaluate_policy."""

    def test_scan_only_rejects_all(self, items) -> None:
        """ScanOnly never produces candidates."""
        decision = evaluate_policy(items, create_policy("ScanOnly"))

        assert decision.candidates == ()
        assert [r for _, r in decision.rejected] == [SkipReason.SCAN_ONLY] * 3

    def test_all_selects_everything(self, items) -> None:
        """All ignores the user lists."""
        policy = create_policy("All", include_users=["alice"], exclude_users=["bob"])

        decision = evaluate_policy(items, policy)

        assert list(decision.candidates) == items
        assert decision.rejected == ()

    def test_targets_filters(self, items) -> None:
        """Targets keeps included, non-excluded users."""
        policy = create_policy("Targets", include_users=["alice", "bob"], exclude_users=["bob"])

        decision = evaluate_policy(items, policy)

        assert [i.user for i in decision.candidates] == ["alice"]
        assert [(i.user, r) for i, r in decision.rejected] == [
            ("bob", SkipReason.POLICY),
            ("carol", SkipReason.POLICY),
        ]

    def test_targets_with_empty_lists_selects_all(self, items) -> None:
        """Targets with no lists behaves like All."""
        decision = evaluate_policy(items, create_policy("Targets"))

        assert len(decision.candidates) == 3

    def test_user_comparison_ignores_domain_and_case(self, make_handle) -> None:
        """CORP\\Alice in the list matches handle user alice."""
        policy = create_policy("Targets", include_users=["CORP\\Alice"])

        decision = evaluate_policy([make_handle(user="alice")], policy)

        assert len(decision.candidates) == 1

    def test_unknown_mode_raises(self, items) -> None:
        """An unrecognized mode is a configuration error."""
        policy = Policy(mode="Bogus")  # type: ignore[arg-type]

        with pytest.raises(PolicyConfigError, match="Bogus"):
            evaluate_policy(items, policy)

    def test_empty_items(self) -> None:
        """No items gives an empty decision."""
        decision = evaluate_policy([], create_policy(CloseMode.ALL))

        assert decision.candidates == ()
        assert decision.rejected == ()


class TestDisabledDecision:
    """Tests for disabled_decision."""

    def test_rejects_everything(self, items) -> None:
        """Every item is rejected as close-disabled."""
        decision = disabled_decision(items)

        assert decision.candidates == ()
        assert {r for _, r in decision.rejected} == {SkipReason.CLOSE_DISABLED}
        assert len(decision.rejected) == 3
