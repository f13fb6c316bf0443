"""Friendship state machine.

Per (requester, target) pair the relationship moves
``none -> request_sent -> {friends, none}``; friends can go back to none.
plan_friendship() is pure: given both accounts as currently stored it
returns the list edits to apply to each side, or raises when the action is
not allowed. Persistence applies both sides in one atomic commit.

Accept/reject/cancel/remove look at the markers on *both* accounts, so an
edge left half-written by an older client (request only on one side,
friendship only on one side) can still be resolved and is cleaned up.
"""

from dataclasses import dataclass, field
from enum import Enum

from touristreview.domain.entities.user import UserAccount
from touristreview.domain.enums import FriendshipStatus
from touristreview.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)

FRIENDS = "friends"
REQUESTS_SENT = "friend_requests_sent"
REQUESTS_RECEIVED = "friend_requests_received"


class FriendAction(str, Enum):
    SEND = "send"
    ACCEPT = "accept"
    REJECT = "reject"
    CANCEL = "cancel"
    REMOVE = "remove"


@dataclass
class AccountEdit:
    """Set-membership edits for one account: attribute name -> user ids."""

    add: dict[str, list[str]] = field(default_factory=dict)
    remove: dict[str, list[str]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.add or self.remove)

    def apply(self, account: UserAccount) -> None:
        """Apply the edit to an in-memory account (mirrors the server-side transforms)."""
        for attr, ids in self.remove.items():
            setattr(account, attr, [x for x in getattr(account, attr) if x not in ids])
        for attr, ids in self.add.items():
            current = getattr(account, attr)
            current.extend(x for x in ids if x not in current)


@dataclass
class FriendshipChange:
    """Result of planning an action: edits for both sides and the resulting status."""

    actor_edit: AccountEdit
    other_edit: AccountEdit
    status: FriendshipStatus

    @property
    def changed(self) -> bool:
        return bool(self.actor_edit or self.other_edit)


def _pending_from(requester: UserAccount, target: UserAccount) -> bool:
    return (
        target.id in requester.friend_requests_sent
        or requester.id in target.friend_requests_received
    )


def _are_friends(a: UserAccount, b: UserAccount) -> bool:
    return a.is_friend(b.id) or b.is_friend(a.id)


def _become_friends(actor: UserAccount, other: UserAccount) -> FriendshipChange:
    return FriendshipChange(
        actor_edit=AccountEdit(
            add={FRIENDS: [other.id]},
            remove={REQUESTS_RECEIVED: [other.id], REQUESTS_SENT: [other.id]},
        ),
        other_edit=AccountEdit(
            add={FRIENDS: [actor.id]},
            remove={REQUESTS_SENT: [actor.id], REQUESTS_RECEIVED: [actor.id]},
        ),
        status=FriendshipStatus.FRIENDS,
    )


def _clear_request(requester: UserAccount, target: UserAccount) -> tuple[AccountEdit, AccountEdit]:
    return (
        AccountEdit(remove={REQUESTS_SENT: [target.id]}),
        AccountEdit(remove={REQUESTS_RECEIVED: [requester.id]}),
    )


def plan_friendship(
    action: FriendAction, actor: UserAccount, other: UserAccount
) -> FriendshipChange:
    """Plan action performed by actor towards other.

    - SEND: actor asks other. No-op when already friends or a request from
      actor is pending; if other already asked actor, the two become friends.
    - ACCEPT / REJECT: actor answers other's pending request.
    - CANCEL: actor withdraws their own pending request to other.
    - REMOVE: actor unfriends other.

    Raises:
        ValidationException: actor and other are the same account.
        ResourceNotFoundException: no pending request / friendship to act on.
    """
    if actor.id == other.id:
        raise ValidationException("Cannot perform friend actions on yourself", field="user_id")

    if action == FriendAction.SEND:
        if _are_friends(actor, other):
            if actor.is_friend(other.id) and other.is_friend(actor.id):
                return FriendshipChange(AccountEdit(), AccountEdit(), FriendshipStatus.FRIENDS)
            return _become_friends(actor, other)
        if _pending_from(other, actor):
            return _become_friends(actor, other)
        if (
            other.id in actor.friend_requests_sent
            and actor.id in other.friend_requests_received
        ):
            return FriendshipChange(AccountEdit(), AccountEdit(), FriendshipStatus.REQUEST_SENT)
        # New request, or a half-written one: array union makes re-adding harmless.
        return FriendshipChange(
            AccountEdit(add={REQUESTS_SENT: [other.id]}),
            AccountEdit(add={REQUESTS_RECEIVED: [actor.id]}),
            FriendshipStatus.REQUEST_SENT,
        )

    if action == FriendAction.ACCEPT:
        if not _pending_from(other, actor) and not _are_friends(actor, other):
            raise ResourceNotFoundException("friend_request", other.id)
        return _become_friends(actor, other)

    if action == FriendAction.REJECT:
        if not _pending_from(other, actor):
            raise ResourceNotFoundException("friend_request", other.id)
        other_edit, actor_edit = _clear_request(other, actor)
        return FriendshipChange(actor_edit, other_edit, FriendshipStatus.NONE)

    if action == FriendAction.CANCEL:
        if not _pending_from(actor, other):
            raise ResourceNotFoundException("friend_request", other.id)
        actor_edit, other_edit = _clear_request(actor, other)
        return FriendshipChange(actor_edit, other_edit, FriendshipStatus.NONE)

    if action == FriendAction.REMOVE:
        if not _are_friends(actor, other):
            raise ResourceNotFoundException("friend", other.id)
        return FriendshipChange(
            AccountEdit(remove={FRIENDS: [other.id]}),
            AccountEdit(remove={FRIENDS: [actor.id]}),
            FriendshipStatus.NONE,
        )

    raise ValueError(f"Unknown friend action: {action!r}")
