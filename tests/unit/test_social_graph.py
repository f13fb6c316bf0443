"""Tests for the friendship state machine (plan_friendship)."""

import pytest

from touristreview.domain.entities import UserAccount
from touristreview.domain.enums import FriendshipStatus
from touristreview.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)
from touristreview.domain.social_graph import FriendAction, plan_friendship


def _pair() -> tuple[UserAccount, UserAccount]:
    return (
        UserAccount(id="alice", name="Alice", email="a@example.com"),
        UserAccount(id="bob", name="Bob", email="b@example.com"),
    )


def _apply(action: FriendAction, actor: UserAccount, other: UserAccount) -> FriendshipStatus:
    change = plan_friendship(action, actor, other)
    change.actor_edit.apply(actor)
    change.other_edit.apply(other)
    return change.status


def test_self_action_rejected() -> None:
    alice, _ = _pair()
    for action in FriendAction:
        with pytest.raises(ValidationException):
            plan_friendship(action, alice, alice)


def test_send_marks_both_sides() -> None:
    alice, bob = _pair()
    assert _apply(FriendAction.SEND, alice, bob) == FriendshipStatus.REQUEST_SENT
    assert alice.friend_requests_sent == ["bob"]
    assert bob.friend_requests_received == ["alice"]
    assert alice.friends == [] and bob.friends == []


def test_send_twice_is_noop() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    change = plan_friendship(FriendAction.SEND, alice, bob)
    assert not change.changed
    assert change.status == FriendshipStatus.REQUEST_SENT


def test_send_when_already_friends_is_noop() -> None:
    alice, bob = _pair()
    alice.friends.append("bob")
    bob.friends.append("alice")
    change = plan_friendship(FriendAction.SEND, alice, bob)
    assert not change.changed
    assert change.status == FriendshipStatus.FRIENDS


def test_mutual_send_becomes_friendship() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    assert _apply(FriendAction.SEND, bob, alice) == FriendshipStatus.FRIENDS
    assert alice.friends == ["bob"] and bob.friends == ["alice"]
    assert alice.friend_requests_sent == [] and bob.friend_requests_received == []


def test_accept_is_symmetric_and_clears_requests() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    assert _apply(FriendAction.ACCEPT, bob, alice) == FriendshipStatus.FRIENDS
    assert alice.friends == ["bob"]
    assert bob.friends == ["alice"]
    assert alice.friend_requests_sent == []
    assert bob.friend_requests_received == []


def test_accept_without_request_raises() -> None:
    alice, bob = _pair()
    with pytest.raises(ResourceNotFoundException):
        plan_friendship(FriendAction.ACCEPT, bob, alice)


def test_accept_repairs_half_written_request() -> None:
    """A request recorded only on the target side can still be accepted."""
    alice, bob = _pair()
    bob.friend_requests_received.append("alice")
    _apply(FriendAction.ACCEPT, bob, alice)
    assert alice.is_friend("bob") and bob.is_friend("alice")


def test_reject_clears_both_markers() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    assert _apply(FriendAction.REJECT, bob, alice) == FriendshipStatus.NONE
    assert alice.friend_requests_sent == []
    assert bob.friend_requests_received == []
    assert alice.friends == [] and bob.friends == []


def test_reject_requires_pending_request() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    # alice cannot reject her own request
    with pytest.raises(ResourceNotFoundException):
        plan_friendship(FriendAction.REJECT, alice, bob)


def test_cancel_withdraws_own_request() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    assert _apply(FriendAction.CANCEL, alice, bob) == FriendshipStatus.NONE
    assert alice.friend_requests_sent == [] and bob.friend_requests_received == []


def test_remove_friend_is_symmetric() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    _apply(FriendAction.ACCEPT, bob, alice)
    assert _apply(FriendAction.REMOVE, bob, alice) == FriendshipStatus.NONE
    assert alice.friends == [] and bob.friends == []


def test_remove_non_friend_raises() -> None:
    alice, bob = _pair()
    with pytest.raises(ResourceNotFoundException):
        plan_friendship(FriendAction.REMOVE, alice, bob)


def test_status_towards_and_mirrored() -> None:
    alice, bob = _pair()
    _apply(FriendAction.SEND, alice, bob)
    assert alice.status_towards("bob") == FriendshipStatus.REQUEST_SENT
    assert bob.status_towards("alice") == FriendshipStatus.REQUEST_RECEIVED
    assert alice.status_towards("bob").mirrored() == FriendshipStatus.REQUEST_RECEIVED
    assert alice.status_towards("alice") == FriendshipStatus.SELF
