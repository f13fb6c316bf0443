"""Profiles: registration, visibility-aware reads, edits and profile pictures."""

from __future__ import annotations

import asyncio
import logging

from touristreview.application.dtos.user import ProfileUpdate, UserProfile, UserSummary
from touristreview.application.interfaces.repositories import IUserRepository
from touristreview.application.interfaces.services import StorageProtocol
from touristreview.domain.entities import UserAccount
from touristreview.domain.enums import ProfileVisibility
from touristreview.domain.exceptions import (
    ResourceNotFoundException,
    TouristReviewException,
    ValidationException,
)
from touristreview.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

JPEG_SIGNATURE = b"\xff\xd8\xff"
DEFAULT_PICTURE_PREFIX = "profilePics"
_MAX_NAME_LENGTH = 100
_MAX_BIO_LENGTH = 1000


def picture_path(filename: str, prefix: str = DEFAULT_PICTURE_PREFIX) -> str:
    """Storage path of a users.profilePic value (a bare filename)."""
    return f"{prefix.strip('/')}/{filename}"


async def picture_url(
    storage: StorageProtocol | None,
    filename: str,
    prefix: str = DEFAULT_PICTURE_PREFIX,
) -> str | None:
    """Download URL for a stored picture, or None when unset or unavailable."""
    if not filename or storage is None:
        return None
    path = picture_path(filename, prefix)
    try:
        return await storage.generate_download_url(path)
    except TouristReviewException as e:
        logger.warning("Could not build download URL for %s: %s", path, e.message)
        return None


async def summarize_users(
    accounts: list[UserAccount],
    storage: StorageProtocol | None,
    prefix: str = DEFAULT_PICTURE_PREFIX,
) -> list[UserSummary]:
    urls = await asyncio.gather(
        *(picture_url(storage, a.profile_picture, prefix) for a in accounts)
    )
    return [
        UserSummary(id=a.id, name=a.name, profile_picture_url=url)
        for a, url in zip(accounts, urls)
    ]


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationException("Name must not be empty", field="name")
    if len(name) > _MAX_NAME_LENGTH:
        raise ValidationException(
            f"Name must be at most {_MAX_NAME_LENGTH} characters", field="name"
        )
    return name


class ProfileService:
    """User profiles stored in users/{uid}; pictures in object storage."""

    def __init__(
        self,
        user_repo: IUserRepository,
        storage: StorageProtocol | None,
        *,
        picture_prefix: str = DEFAULT_PICTURE_PREFIX,
        max_picture_size: int = 10 * 1024 * 1024,
    ) -> None:
        self._user_repo = user_repo
        self._storage = storage
        self._picture_prefix = picture_prefix.strip("/")
        self._max_picture_size = max_picture_size

    async def _require(self, user_id: str) -> UserAccount:
        account = await self._user_repo.get(user_id)
        if account is None:
            raise ResourceNotFoundException("user", user_id)
        return account

    async def register(
        self,
        user_id: str,
        name: str,
        email: str,
        visibility: ProfileVisibility = ProfileVisibility.PUBLIC,
    ) -> UserAccount:
        """Create users/{uid} with empty graph and profile fields.

        Raises UserAlreadyExistsException when the document exists.
        """
        account = UserAccount(
            id=user_id,
            name=_clean_name(name),
            email=email.strip(),
            visibility=visibility,
        )
        created = await self._user_repo.create(account)
        logger.info("Registered user %s", user_id)
        return created

    async def get_profile(self, viewer_id: str, owner_id: str) -> UserProfile:
        """Owner's profile as viewer_id may see it.

        bio and rated places are withheld from non-friends of a Friends-Only
        owner; email is only returned to the owner.
        """
        owner = await self._require(owner_id)
        visible = owner.is_visible_to(viewer_id)
        return UserProfile(
            id=owner.id,
            name=owner.name,
            visibility=owner.visibility,
            friendship_status=owner.status_towards(viewer_id).mirrored(),
            bio=owner.bio if visible else None,
            rated_places=list(owner.rated_places) if visible else None,
            profile_picture_url=await picture_url(
                self._storage, owner.profile_picture, self._picture_prefix
            ),
            email=owner.email if viewer_id == owner.id else None,
        )

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> UserProfile:
        if update.is_empty():
            raise ValidationException("At least one of name, bio or visibility is required")
        if update.name is not None:
            update = ProfileUpdate(
                name=_clean_name(update.name), bio=update.bio, visibility=update.visibility
            )
        if update.bio is not None and len(update.bio) > _MAX_BIO_LENGTH:
            raise ValidationException(
                f"Bio must be at most {_MAX_BIO_LENGTH} characters", field="bio"
            )
        await self._user_repo.update_profile(user_id, update)
        return await self.get_profile(user_id, user_id)

    async def set_profile_picture(self, user_id: str, data: bytes) -> UserProfile:
        """Store a JPEG as the user's picture and drop the previous one.

        users.profilePic gets the bare filename; the object lives under the
        picture prefix. If the user document cannot be updated the new object
        is removed again. A failed delete is logged, never raised.
        """
        if self._storage is None:
            raise ValidationException("Profile pictures are not available")
        if not data.startswith(JPEG_SIGNATURE):
            raise ValidationException("Profile picture must be a JPEG image", field="file")
        if len(data) > self._max_picture_size:
            raise ValidationException(
                f"Profile picture exceeds {self._max_picture_size} bytes", field="file"
            )
        account = await self._require(user_id)
        filename = f"{generate_cuid()}.jpg"
        path = picture_path(filename, self._picture_prefix)
        await self._storage.upload(
            data, path, "image/jpeg", metadata={"owner": user_id}
        )
        try:
            await self._user_repo.update_profile(
                user_id, ProfileUpdate(), profile_picture=filename
            )
        except TouristReviewException:
            await self._discard(path)
            raise
        old = account.profile_picture
        if old and old != filename:
            await self._discard(picture_path(old, self._picture_prefix))
        return await self.get_profile(user_id, user_id)

    async def _discard(self, path: str) -> None:
        try:
            await self._storage.delete(path)
        except TouristReviewException as e:
            logger.error("Failed to delete profile picture %s: %s", path, e.message)

    async def list_users(self, viewer_id: str, search: str | None = None) -> list[UserSummary]:
        """Every user except the viewer, optionally filtered by name (case-insensitive)."""
        needle = (search or "").strip().casefold()
        accounts = [
            a
            for a in await self._user_repo.list_all()
            if a.id != viewer_id and needle in a.name.casefold()
        ]
        accounts.sort(key=lambda a: a.name.casefold())
        return await summarize_users(accounts, self._storage, self._picture_prefix)
