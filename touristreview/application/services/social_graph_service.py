"""Social graph: friend requests and friendships between users.

Every state change goes through plan_friendship() and is applied by the
user repository as one atomic commit over both accounts.
"""

from __future__ import annotations

import logging
from functools import partial

from touristreview.application.dtos.user import FriendRequests, UserSummary
from touristreview.application.interfaces.repositories import IUserRepository
from touristreview.application.interfaces.services import StorageProtocol
from touristreview.application.services.profile_service import (
    DEFAULT_PICTURE_PREFIX,
    summarize_users,
)
from touristreview.domain.entities import UserAccount
from touristreview.domain.enums import FriendshipStatus
from touristreview.domain.exceptions import ResourceNotFoundException
from touristreview.domain.social_graph import FriendAction, plan_friendship

logger = logging.getLogger(__name__)


class SocialGraphService:
    """Send, answer and withdraw friend requests; list friends and requests."""

    def __init__(
        self,
        user_repo: IUserRepository,
        storage: StorageProtocol | None = None,
        *,
        picture_prefix: str = DEFAULT_PICTURE_PREFIX,
    ) -> None:
        self._user_repo = user_repo
        self._storage = storage
        self._picture_prefix = picture_prefix

    async def _act(self, action: FriendAction, actor_id: str, other_id: str) -> FriendshipStatus:
        change = await self._user_repo.change_friendship(
            actor_id, other_id, partial(plan_friendship, action)
        )
        if change.changed:
            logger.info(
                "Friend %s: %s -> %s (%s)", action.value, actor_id, other_id, change.status.value
            )
        return change.status

    async def send_request(self, requester_id: str, target_id: str) -> FriendshipStatus:
        """Ask target to be friends.

        No-op when already friends or already pending; becomes a friendship
        when target had already asked requester.
        """
        return await self._act(FriendAction.SEND, requester_id, target_id)

    async def accept_request(self, user_id: str, requester_id: str) -> FriendshipStatus:
        return await self._act(FriendAction.ACCEPT, user_id, requester_id)

    async def reject_request(self, user_id: str, requester_id: str) -> FriendshipStatus:
        return await self._act(FriendAction.REJECT, user_id, requester_id)

    async def cancel_request(self, requester_id: str, target_id: str) -> FriendshipStatus:
        return await self._act(FriendAction.CANCEL, requester_id, target_id)

    async def remove_friend(self, user_id: str, friend_id: str) -> FriendshipStatus:
        return await self._act(FriendAction.REMOVE, user_id, friend_id)

    async def _require(self, user_id: str) -> UserAccount:
        account = await self._user_repo.get(user_id)
        if account is None:
            raise ResourceNotFoundException("user", user_id)
        return account

    async def friendship_status(self, viewer_id: str, other_id: str) -> FriendshipStatus:
        """Relationship to other_id as seen by viewer_id."""
        viewer = await self._require(viewer_id)
        if other_id != viewer_id and await self._user_repo.get(other_id) is None:
            raise ResourceNotFoundException("user", other_id)
        return viewer.status_towards(other_id)

    async def list_friends(self, user_id: str) -> list[UserSummary]:
        user = await self._require(user_id)
        friends = await self._user_repo.get_many(user.friends)
        return await summarize_users(friends, self._storage, self._picture_prefix)

    async def list_requests(self, user_id: str) -> FriendRequests:
        """Pending requests received by and sent from user_id."""
        user = await self._require(user_id)
        received = await self._user_repo.get_many(user.friend_requests_received)
        sent = await self._user_repo.get_many(user.friend_requests_sent)
        return FriendRequests(
            received=await summarize_users(received, self._storage, self._picture_prefix),
            sent=await summarize_users(sent, self._storage, self._picture_prefix),
        )
