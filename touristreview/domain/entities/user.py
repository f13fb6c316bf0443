"""User account entity and the friendship rules evaluated on it."""

from dataclasses import dataclass, field

from touristreview.domain.enums import FriendshipStatus, ProfileVisibility


@dataclass
class UserAccount:
    """A registered user with their social graph edges and rated places.

    friends / friend_requests_* behave as sets; rated_places keeps first-rated
    order without duplicates.
    """

    id: str
    name: str
    email: str
    friends: list[str] = field(default_factory=list)
    friend_requests_sent: list[str] = field(default_factory=list)
    friend_requests_received: list[str] = field(default_factory=list)
    rated_places: list[str] = field(default_factory=list)
    bio: str = ""
    profile_picture: str = ""  # filename under the profile picture prefix
    visibility: ProfileVisibility = ProfileVisibility.PUBLIC

    def is_friend(self, user_id: str) -> bool:
        return user_id in self.friends

    def status_towards(self, other_id: str) -> FriendshipStatus:
        """Relationship to other_id as seen from this account."""
        if other_id == self.id:
            return FriendshipStatus.SELF
        if other_id in self.friends:
            return FriendshipStatus.FRIENDS
        if other_id in self.friend_requests_sent:
            return FriendshipStatus.REQUEST_SENT
        if other_id in self.friend_requests_received:
            return FriendshipStatus.REQUEST_RECEIVED
        return FriendshipStatus.NONE

    def is_visible_to(self, viewer_id: str) -> bool:
        """Whether viewer_id may see bio and rated places."""
        return (
            self.visibility == ProfileVisibility.PUBLIC
            or viewer_id == self.id
            or self.is_friend(viewer_id)
        )
