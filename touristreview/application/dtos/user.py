"""DTOs for profiles and the social graph (no storage field names)."""

from dataclasses import dataclass, field

from touristreview.domain.enums import FriendshipStatus, ProfileVisibility


@dataclass(frozen=True)
class UserSummary:
    """Row in user / friend / request lists."""

    id: str
    name: str
    profile_picture_url: str | None = None


@dataclass(frozen=True)
class UserProfile:
    """Profile as seen by a given viewer.

    bio and rated_places are None when the owner is Friends-Only and the
    viewer is neither the owner nor a friend.
    """

    id: str
    name: str
    visibility: ProfileVisibility
    friendship_status: FriendshipStatus
    bio: str | None = None
    rated_places: list[str] | None = None
    profile_picture_url: str | None = None
    email: str | None = None  # only for the owner


@dataclass(frozen=True)
class FriendRequests:
    received: list[UserSummary] = field(default_factory=list)
    sent: list[UserSummary] = field(default_factory=list)


@dataclass(frozen=True)
class ProfileUpdate:
    """Partial profile update; None leaves a field unchanged."""

    name: str | None = None
    bio: str | None = None
    visibility: ProfileVisibility | None = None

    def is_empty(self) -> bool:
        return self.name is None and self.bio is None and self.visibility is None
