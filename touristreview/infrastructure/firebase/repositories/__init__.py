"""Firestore-backed repository implementations."""

from touristreview.infrastructure.firebase.repositories.place_repo_firestore import (
    FirestorePlaceRepository,
    place_document_id,
)
from touristreview.infrastructure.firebase.repositories.user_repo_firestore import (
    FirestoreUserRepository,
)

__all__ = [
    "FirestorePlaceRepository",
    "FirestoreUserRepository",
    "place_document_id",
]
