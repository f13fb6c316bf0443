"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from touristreview.application.dtos.user import ProfileUpdate
    from touristreview.domain.entities import PlaceRecord, Rating, UserAccount
    from touristreview.domain.social_graph import FriendshipChange


class IUserRepository(Protocol):
    """Protocol for user account persistence (users collection)."""

    async def get(self, user_id: str) -> UserAccount | None:
        """Return the account, or None when no document exists."""

    async def get_many(self, user_ids: list[str]) -> list[UserAccount]:
        """Return existing accounts for the ids, in input order; missing ids are skipped."""

    async def list_all(self) -> list[UserAccount]:
        """Return every account."""

    async def create(self, account: UserAccount) -> UserAccount:
        """Create the account document; raise UserAlreadyExistsException if it exists."""

    async def update_profile(
        self,
        user_id: str,
        update: ProfileUpdate,
        profile_picture: str | None = None,
    ) -> None:
        """Overwrite the given profile fields; raise ResourceNotFoundException if missing."""

    async def change_friendship(
        self,
        actor_id: str,
        other_id: str,
        plan: Callable[[UserAccount, UserAccount], FriendshipChange],
    ) -> FriendshipChange:
        """Read both accounts, call plan, and apply both sides' edits atomically.

        Raises ResourceNotFoundException when either account is missing.
        """


class IPlaceRepository(Protocol):
    """Protocol for place records and their ratings (Locations collection)."""

    async def find_places(self, place_key: str) -> list[PlaceRecord]:
        """Return every place record whose key equals place_key exactly."""

    async def list_ratings(self, place: PlaceRecord) -> list[Rating]:
        """Return all ratings filed under the place record."""

    async def record_rating(
        self,
        rating: Rating,
        existing_place: PlaceRecord | None,
        provider_place_id: str | None = None,
    ) -> PlaceRecord:
        """Atomically: create the place when existing_place is None, add the
        rating under it and append its key to the author's rated places.

        Returns the place record the rating was filed under.
        """
