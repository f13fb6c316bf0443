"""Firestore-backed place/rating repository (implements IPlaceRepository)."""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from touristreview.domain.entities import MAX_STARS, MIN_STARS, PlaceRecord, Rating
from touristreview.infrastructure.firebase._rest_client import FirestoreRESTClient
from touristreview.infrastructure.firebase.collections import (
    COLLECTION_LOCATIONS,
    COLLECTION_USERS,
    LOCATION_DESCRIPTION,
    LOCATION_PLACE_ID,
    LOCATION_PLACE_MARK,
    RATING_DESCRIPTION,
    RATING_PLACE_MARK,
    RATING_STARS,
    RATING_TIMESTAMP,
    RATING_USER_ID,
    RATING_USER_NAME,
    SUBCOLLECTION_RATINGS,
    USER_RATED,
)

logger = logging.getLogger(__name__)

# Upper bound on place documents sharing one key (legacy duplicates).
_MAX_PLACES_PER_KEY = 50


def place_document_id(place_key: str) -> str:
    """Deterministic Locations document ID for a key, so concurrent first ratings converge."""
    return hashlib.sha256(place_key.encode("utf-8")).hexdigest()


def _to_place(doc_id: str, data: dict) -> PlaceRecord:
    return PlaceRecord(
        id=doc_id,
        place_key=data.get(LOCATION_PLACE_MARK) or "",
        description=data.get(LOCATION_DESCRIPTION) or "",
        provider_place_id=data.get(LOCATION_PLACE_ID),
    )


def _to_rating(doc_id: str, data: dict, place_key: str) -> Rating | None:
    stars = data.get(RATING_STARS)
    if isinstance(stars, bool) or not isinstance(stars, int) or not MIN_STARS <= stars <= MAX_STARS:
        return None
    return Rating(
        id=doc_id,
        author_id=data.get(RATING_USER_ID) or "",
        author_name=data.get(RATING_USER_NAME) or "Anonymous",
        stars=stars,
        review_text=data.get(RATING_DESCRIPTION) or "",
        created_at=data.get(RATING_TIMESTAMP) or "Unknown Date",
        place_key=data.get(RATING_PLACE_MARK) or place_key,
    )


def _rating_document(rating: Rating) -> dict[str, Any]:
    return {
        RATING_STARS: rating.stars,
        RATING_DESCRIPTION: rating.review_text,
        RATING_USER_ID: rating.author_id,
        RATING_USER_NAME: rating.author_name,
        RATING_TIMESTAMP: rating.created_at,
        RATING_PLACE_MARK: rating.place_key,
    }


class FirestorePlaceRepository:
    """Places (Locations) and their Ratings subcollections in Firestore."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._coll = client.collection(COLLECTION_LOCATIONS)
        self._users = client.collection(COLLECTION_USERS)

    async def find_places(self, place_key: str) -> list[PlaceRecord]:
        """Place records whose placeMark equals place_key (server-side where query)."""
        q = self._coll.where(LOCATION_PLACE_MARK, "==", place_key).limit(
            _MAX_PLACES_PER_KEY
        )
        return [_to_place(s.id, s.to_dict()) async for s in q.stream()]

    async def list_ratings(self, place: PlaceRecord) -> list[Rating]:
        """All ratings under the place; documents with an unusable star value are skipped."""
        ratings: list[Rating] = []
        coll = self._coll.document(place.id).collection(SUBCOLLECTION_RATINGS)
        async for snapshot in coll.stream():
            rating = _to_rating(snapshot.id, snapshot.to_dict(), place.place_key)
            if rating is None:
                logger.warning(
                    "Skipping rating %s under place %s: invalid star value",
                    snapshot.id,
                    place.id,
                )
                continue
            ratings.append(rating)
        return ratings

    async def record_rating(
        self,
        rating: Rating,
        existing_place: PlaceRecord | None,
        provider_place_id: str | None = None,
    ) -> PlaceRecord:
        """One commit: place (if new) + rating + author's rated array union."""
        if existing_place is None:
            place = PlaceRecord(
                id=place_document_id(rating.place_key),
                place_key=rating.place_key,
                provider_place_id=provider_place_id,
            )
        else:
            place = existing_place
        place_ref = self._coll.document(place.id)

        batch = self._client.batch()
        if existing_place is None:
            fields: dict[str, Any] = {
                LOCATION_PLACE_MARK: place.place_key,
                LOCATION_DESCRIPTION: place.description,
            }
            if provider_place_id:
                fields[LOCATION_PLACE_ID] = provider_place_id
            batch.set(place_ref, fields, merge=True)
        batch.set(
            place_ref.collection(SUBCOLLECTION_RATINGS).document(rating.id),
            _rating_document(rating),
        )
        batch.array_union(
            self._users.document(rating.author_id), USER_RATED, [rating.place_key]
        )
        await batch.commit()
        logger.info(
            "Recorded %d-star rating %s for place %s", rating.stars, rating.id, place.id
        )
        return place
