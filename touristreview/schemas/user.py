"""Profile and social graph API schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from touristreview.application.dtos.user import FriendRequests, UserProfile
from touristreview.domain.enums import FriendshipStatus, ProfileVisibility


class UserRegisterRequest(BaseModel):
    """Request body for POST /users (uid comes from the ID token)."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    visibility: ProfileVisibility = ProfileVisibility.PUBLIC


class ProfileUpdateRequest(BaseModel):
    """Request body for PATCH /users/me (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=1000)
    visibility: ProfileVisibility | None = None


class UserSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    profile_picture_url: str | None = None


class UserProfileResponse(BaseModel):
    """Profile as seen by the caller; bio and rated_places are null when hidden."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    visibility: ProfileVisibility
    friendship_status: FriendshipStatus
    bio: str | None = None
    rated_places: list[str] | None = None
    profile_picture_url: str | None = None
    email: str | None = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserProfileResponse":
        return cls.model_validate(profile)


class FriendRequestsResponse(BaseModel):
    received: list[UserSummaryResponse]
    sent: list[UserSummaryResponse]

    @classmethod
    def from_requests(cls, requests: FriendRequests) -> "FriendRequestsResponse":
        return cls(
            received=[UserSummaryResponse.model_validate(u) for u in requests.received],
            sent=[UserSummaryResponse.model_validate(u) for u in requests.sent],
        )


class FriendshipStatusResponse(BaseModel):
    user_id: str
    status: FriendshipStatus
