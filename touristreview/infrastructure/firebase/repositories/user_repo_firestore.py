"""Firestore-backed user repository (implements IUserRepository)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from touristreview.application.dtos.user import ProfileUpdate
from touristreview.domain.entities import UserAccount
from touristreview.domain.enums import ProfileVisibility
from touristreview.domain.exceptions import (
    ResourceNotFoundException,
    UserAlreadyExistsException,
)
from touristreview.domain.social_graph import (
    FRIENDS,
    REQUESTS_RECEIVED,
    REQUESTS_SENT,
    AccountEdit,
    FriendshipChange,
)
from touristreview.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    DocumentReference,
    FirestoreRESTClient,
    Transaction,
    WriteBatch,
)
from touristreview.infrastructure.firebase.collections import (
    COLLECTION_USERS,
    USER_BIO,
    USER_EMAIL,
    USER_FRIEND_REQ_REC,
    USER_FRIEND_REQ_SENT,
    USER_FRIENDS,
    USER_ID,
    USER_NAME,
    USER_PROFILE_PERMISSIONS,
    USER_PROFILE_PIC,
    USER_RATED,
)

# UserAccount attribute -> users/{uid} array field
_LIST_FIELDS = {
    FRIENDS: USER_FRIENDS,
    REQUESTS_SENT: USER_FRIEND_REQ_SENT,
    REQUESTS_RECEIVED: USER_FRIEND_REQ_REC,
}


def _string_list(value: Any) -> list[str]:
    """Array field as unique strings in stored order (tolerates missing / legacy junk)."""
    if not isinstance(value, list):
        return []
    seen: list[str] = []
    for item in value:
        if isinstance(item, str) and item not in seen:
            seen.append(item)
    return seen


def _to_account(doc_id: str, data: dict) -> UserAccount:
    return UserAccount(
        id=doc_id,
        name=data.get(USER_NAME) or "",
        email=data.get(USER_EMAIL) or "",
        friends=_string_list(data.get(USER_FRIENDS)),
        friend_requests_sent=_string_list(data.get(USER_FRIEND_REQ_SENT)),
        friend_requests_received=_string_list(data.get(USER_FRIEND_REQ_REC)),
        rated_places=_string_list(data.get(USER_RATED)),
        bio=data.get(USER_BIO) or "",
        profile_picture=data.get(USER_PROFILE_PIC) or "",
        visibility=ProfileVisibility.parse(data.get(USER_PROFILE_PERMISSIONS)),
    )


def _to_document(account: UserAccount) -> dict[str, Any]:
    return {
        USER_NAME: account.name,
        USER_EMAIL: account.email,
        USER_ID: account.id,
        USER_FRIEND_REQ_SENT: list(account.friend_requests_sent),
        USER_FRIEND_REQ_REC: list(account.friend_requests_received),
        USER_FRIENDS: list(account.friends),
        USER_RATED: list(account.rated_places),
        USER_BIO: account.bio,
        USER_PROFILE_PIC: account.profile_picture,
        USER_PROFILE_PERMISSIONS: account.visibility.value,
    }


def _queue_edit(batch: WriteBatch, ref: DocumentReference, edit: AccountEdit) -> None:
    for attr, ids in edit.add.items():
        batch.array_union(ref, _LIST_FIELDS[attr], ids)
    for attr, ids in edit.remove.items():
        batch.array_remove(ref, _LIST_FIELDS[attr], ids)


class FirestoreUserRepository:
    """User repository using Firestore (users collection)."""

    def __init__(self, client: FirestoreRESTClient, *, max_attempts: int = 5) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_USERS)
        self._max_attempts = max_attempts

    async def get(self, user_id: str) -> UserAccount | None:
        """Return user by ID."""
        doc = await self._coll.document(user_id).get()
        if not doc:
            return None
        return _to_account(doc.id, doc.to_dict())

    async def get_many(self, user_ids: list[str]) -> list[UserAccount]:
        """Return users by ID (concurrent reads); unknown ids are dropped."""
        accounts = await asyncio.gather(*(self.get(uid) for uid in user_ids))
        return [a for a in accounts if a is not None]

    async def list_all(self) -> list[UserAccount]:
        return [_to_account(s.id, s.to_dict()) async for s in self._coll.stream()]

    async def create(self, account: UserAccount) -> UserAccount:
        """Create the user document keyed by uid; raise UserAlreadyExistsException if present."""
        try:
            await self._coll.create(account.id, _to_document(account))
        except DocumentExistsError:
            raise UserAlreadyExistsException(account.id) from None
        return account

    async def update_profile(
        self,
        user_id: str,
        update: ProfileUpdate,
        profile_picture: str | None = None,
    ) -> None:
        """Overwrite name / bio / visibility / picture fields that are set."""
        fields: dict[str, Any] = {}
        if update.name is not None:
            fields[USER_NAME] = update.name
        if update.bio is not None:
            fields[USER_BIO] = update.bio
        if update.visibility is not None:
            fields[USER_PROFILE_PERMISSIONS] = update.visibility.value
        if profile_picture is not None:
            fields[USER_PROFILE_PIC] = profile_picture
        ref = self._coll.document(user_id)
        if await ref.get() is None:
            raise ResourceNotFoundException("user", user_id)
        if fields:
            await ref.update(fields)

    async def change_friendship(
        self,
        actor_id: str,
        other_id: str,
        plan: Callable[[UserAccount, UserAccount], FriendshipChange],
    ) -> FriendshipChange:
        """Read both users in a transaction, plan, and commit both sides together."""
        actor_ref = self._coll.document(actor_id)
        other_ref = self._coll.document(other_id)

        async def _apply(txn: Transaction) -> FriendshipChange:
            actor_doc, other_doc = await txn.get_all([actor_ref, other_ref])
            if actor_doc is None:
                raise ResourceNotFoundException("user", actor_id)
            if other_doc is None:
                raise ResourceNotFoundException("user", other_id)
            change = plan(
                _to_account(actor_doc.id, actor_doc.to_dict()),
                _to_account(other_doc.id, other_doc.to_dict()),
            )
            _queue_edit(txn, actor_ref, change.actor_edit)
            _queue_edit(txn, other_ref, change.other_edit)
            return change

        return await self._client.run_transaction(
            _apply, max_attempts=self._max_attempts
        )
