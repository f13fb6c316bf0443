"""Domain enumerations for the TouristReview application.

Stored string values are part of the document schema and must not change.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ProfileVisibility(_ValuesMixin, str, Enum):
    """Who may see a user's bio and rated places (users.profilePermissions)."""

    PUBLIC = "Public"
    FRIENDS_ONLY = "Friends-Only"

    @classmethod
    def parse(cls, value: str | None) -> "ProfileVisibility":
        """Return the visibility for a stored value; unknown or missing is Public."""
        try:
            return cls(value)
        except ValueError:
            return cls.PUBLIC


class FriendshipStatus(_ValuesMixin, str, Enum):
    """Relationship of one account to another, as seen from the viewer."""

    NONE = "none"
    REQUEST_SENT = "request_sent"
    REQUEST_RECEIVED = "request_received"
    FRIENDS = "friends"
    SELF = "self"

    def mirrored(self) -> "FriendshipStatus":
        """The same relationship seen from the other account."""
        if self is FriendshipStatus.REQUEST_SENT:
            return FriendshipStatus.REQUEST_RECEIVED
        if self is FriendshipStatus.REQUEST_RECEIVED:
            return FriendshipStatus.REQUEST_SENT
        return self


class LocationErrorKind(_ValuesMixin, str, Enum):
    """Failure classes of the location/map subsystem."""

    AUTHORIZATION_DENIED = "authorization_denied"
    AUTHORIZATION_RESTRICTED = "authorization_restricted"
    UNKNOWN_LOCATION = "unknown_location"
    ACCESS_DENIED = "access_denied"
    NETWORK = "network"
    OPERATION_FAILED = "operation_failed"

    @property
    def description(self) -> str:
        return _LOCATION_ERROR_DESCRIPTIONS[self]


_LOCATION_ERROR_DESCRIPTIONS = {
    LocationErrorKind.AUTHORIZATION_DENIED: "Location access denied",
    LocationErrorKind.AUTHORIZATION_RESTRICTED: "Location access restricted",
    LocationErrorKind.UNKNOWN_LOCATION: "Location unknown",
    LocationErrorKind.ACCESS_DENIED: "Access denied",
    LocationErrorKind.NETWORK: "Network failed",
    LocationErrorKind.OPERATION_FAILED: "Operation failed",
}
