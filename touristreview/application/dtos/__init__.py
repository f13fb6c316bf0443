"""DTOs passed between services and the API layer (no ORM / HTTP types)."""

from touristreview.application.dtos.place import (
    MapPlace,
    PlaceSummary,
    ResolvedPlace,
)
from touristreview.application.dtos.user import (
    FriendRequests,
    ProfileUpdate,
    UserProfile,
    UserSummary,
)

__all__ = [
    "FriendRequests",
    "MapPlace",
    "PlaceSummary",
    "ProfileUpdate",
    "ResolvedPlace",
    "UserProfile",
    "UserSummary",
]
