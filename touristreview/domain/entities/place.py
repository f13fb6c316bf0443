"""Place and rating entities.

A place is identified by its PlaceKey string; ratings are filed under the
place record that carries that key.
"""

from dataclasses import dataclass

from touristreview.domain.exceptions import ValidationException

MIN_STARS = 1
MAX_STARS = 5


def validate_stars(stars: int) -> int:
    """Return stars if it is an integer in [1, 5]; raise ValidationException otherwise."""
    if isinstance(stars, bool) or not isinstance(stars, int):
        raise ValidationException("Stars must be an integer", field="stars")
    if not MIN_STARS <= stars <= MAX_STARS:
        raise ValidationException(
            f"Stars must be between {MIN_STARS} and {MAX_STARS}", field="stars"
        )
    return stars


@dataclass(frozen=True)
class Rating:
    """One user's star rating and review of a place. Never updated once written."""

    id: str
    author_id: str
    author_name: str
    stars: int
    review_text: str
    created_at: str  # "MM/dd/yyyy"
    place_key: str


@dataclass(frozen=True)
class PlaceRecord:
    """Parent document grouping all ratings for one PlaceKey."""

    id: str
    place_key: str
    description: str = ""
    provider_place_id: str | None = None
