"""Domain entities (pure business logic, no persistence)."""

from touristreview.domain.entities.place import (
    MAX_STARS,
    MIN_STARS,
    PlaceRecord,
    Rating,
    validate_stars,
)
from touristreview.domain.entities.user import UserAccount

__all__ = [
    "MAX_STARS",
    "MIN_STARS",
    "PlaceRecord",
    "Rating",
    "UserAccount",
    "validate_stars",
]
