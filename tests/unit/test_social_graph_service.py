"""Tests for SocialGraphService over the in-memory user repository."""

import pytest

from touristreview.application.services import SocialGraphService
from touristreview.domain.enums import FriendshipStatus
from touristreview.domain.exceptions import (
    DocumentStoreException,
    ResourceNotFoundException,
    ValidationException,
)

from tests.fakes import make_user


@pytest.fixture
def users(user_repo):
    user_repo.add(make_user("alice"), make_user("bob"), make_user("carol"))
    return user_repo


async def test_send_and_accept_gives_symmetric_friendship(
    social_graph_service: SocialGraphService, users
) -> None:
    assert await social_graph_service.send_request("alice", "bob") == FriendshipStatus.REQUEST_SENT
    assert await social_graph_service.accept_request("bob", "alice") == FriendshipStatus.FRIENDS

    alice, bob = users.users["alice"], users.users["bob"]
    assert alice.friends == ["bob"]
    assert bob.friends == ["alice"]
    assert alice.friend_requests_sent == []
    assert bob.friend_requests_received == []


async def test_failed_accept_commit_leaves_both_sides_unchanged(
    social_graph_service: SocialGraphService, users
) -> None:
    """A failed commit never leaves a one-sided friendship."""
    await social_graph_service.send_request("alice", "bob")
    users.fail_next_commit = True
    with pytest.raises(DocumentStoreException):
        await social_graph_service.accept_request("bob", "alice")

    alice, bob = users.users["alice"], users.users["bob"]
    assert alice.friends == [] and bob.friends == []
    assert alice.friend_requests_sent == ["bob"]
    assert bob.friend_requests_received == ["alice"]

    # retry succeeds and is symmetric
    await social_graph_service.accept_request("bob", "alice")
    assert alice.friends == ["bob"] and bob.friends == ["alice"]


async def test_send_to_self_rejected(social_graph_service, users) -> None:
    with pytest.raises(ValidationException):
        await social_graph_service.send_request("alice", "alice")


async def test_send_to_unknown_user(social_graph_service, users) -> None:
    with pytest.raises(ResourceNotFoundException):
        await social_graph_service.send_request("alice", "nobody")


async def test_duplicate_send_does_not_commit_twice(social_graph_service, users) -> None:
    await social_graph_service.send_request("alice", "bob")
    await social_graph_service.send_request("alice", "bob")
    assert users.users["alice"].friend_requests_sent == ["bob"]
    assert users.users["bob"].friend_requests_received == ["alice"]


async def test_reject_then_status_none(social_graph_service, users) -> None:
    await social_graph_service.send_request("alice", "bob")
    assert await social_graph_service.reject_request("bob", "alice") == FriendshipStatus.NONE
    assert await social_graph_service.friendship_status("alice", "bob") == FriendshipStatus.NONE
    assert users.users["bob"].friends == []


async def test_accept_without_request(social_graph_service, users) -> None:
    with pytest.raises(ResourceNotFoundException):
        await social_graph_service.accept_request("bob", "alice")


async def test_cancel_and_remove(social_graph_service, users) -> None:
    await social_graph_service.send_request("alice", "carol")
    await social_graph_service.cancel_request("alice", "carol")
    assert users.users["carol"].friend_requests_received == []

    await social_graph_service.send_request("alice", "bob")
    await social_graph_service.accept_request("bob", "alice")
    await social_graph_service.remove_friend("alice", "bob")
    assert users.users["alice"].friends == [] and users.users["bob"].friends == []


async def test_friendship_status_from_each_side(social_graph_service, users) -> None:
    await social_graph_service.send_request("alice", "bob")
    assert await social_graph_service.friendship_status("alice", "bob") == FriendshipStatus.REQUEST_SENT
    assert await social_graph_service.friendship_status("bob", "alice") == FriendshipStatus.REQUEST_RECEIVED
    assert await social_graph_service.friendship_status("alice", "alice") == FriendshipStatus.SELF
    with pytest.raises(ResourceNotFoundException):
        await social_graph_service.friendship_status("alice", "nobody")


async def test_list_friends_and_requests(social_graph_service, users) -> None:
    await social_graph_service.send_request("alice", "bob")
    await social_graph_service.accept_request("bob", "alice")
    await social_graph_service.send_request("carol", "alice")

    friends = await social_graph_service.list_friends("alice")
    assert [(f.id, f.name) for f in friends] == [("bob", "Bob")]
    assert friends[0].profile_picture_url is None

    requests = await social_graph_service.list_requests("alice")
    assert [u.id for u in requests.received] == ["carol"]
    assert requests.sent == []
    requests = await social_graph_service.list_requests("carol")
    assert [u.id for u in requests.sent] == ["alice"]
