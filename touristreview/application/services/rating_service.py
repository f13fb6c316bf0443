"""Rating store: submit and fetch star ratings keyed by PlaceKey."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from touristreview.application.dtos.place import PlaceSummary
from touristreview.application.interfaces.repositories import (
    IPlaceRepository,
    IUserRepository,
)
from touristreview.domain import placemark
from touristreview.domain.entities import Rating, validate_stars
from touristreview.domain.exceptions import (
    InvalidPlaceKeyException,
    ResourceNotFoundException,
)
from touristreview.shared.utils.datetime import format_rating_date
from touristreview.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

_ANONYMOUS = "Anonymous"


def average_stars(ratings: Sequence[Rating]) -> float:
    """Arithmetic mean of the star values; 0.0 when there are no ratings."""
    if not ratings:
        return 0.0
    return sum(r.stars for r in ratings) / len(ratings)


class RatingService:
    """Submit ratings and read them back by exact PlaceKey."""

    def __init__(self, place_repo: IPlaceRepository, user_repo: IUserRepository) -> None:
        self._place_repo = place_repo
        self._user_repo = user_repo

    async def submit_rating(
        self,
        place_key: str,
        stars: int,
        text: str,
        author_id: str,
        *,
        provider_place_id: str | None = None,
    ) -> Rating:
        """Store a rating under the place for place_key, creating the place if needed.

        Place creation, the rating and the author's rated-places update are
        one atomic write.

        Raises:
            ValidationException: stars outside 1-5.
            InvalidPlaceKeyException: place_key does not decode.
            ResourceNotFoundException: author has no user document.
        """
        validate_stars(stars)
        if not placemark.is_valid(place_key):
            raise InvalidPlaceKeyException(place_key)
        author = await self._user_repo.get(author_id)
        if author is None:
            raise ResourceNotFoundException("user", author_id)

        places = await self._place_repo.find_places(place_key)
        rating = Rating(
            id=generate_cuid(),
            author_id=author_id,
            author_name=author.name or _ANONYMOUS,
            stars=stars,
            review_text=text,
            created_at=format_rating_date(),
            place_key=place_key,
        )
        await self._place_repo.record_rating(
            rating,
            places[0] if places else None,
            provider_place_id=provider_place_id,
        )
        return rating

    async def fetch_ratings(self, place_key: str) -> list[Rating]:
        """Every rating under any place whose key equals place_key. Order is unspecified."""
        places = await self._place_repo.find_places(place_key)
        if not places:
            return []
        if len(places) > 1:
            logger.debug("%d place records share key %r", len(places), place_key)
        per_place = await asyncio.gather(
            *(self._place_repo.list_ratings(p) for p in places)
        )
        return [r for ratings in per_place for r in ratings]

    async def place_summary(self, place_key: str) -> PlaceSummary:
        ratings = await self.fetch_ratings(place_key)
        return PlaceSummary(
            place_key=place_key,
            ratings=ratings,
            average_stars=average_stars(ratings),
        )
