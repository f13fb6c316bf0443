"""Firestore integration over the REST API (httpx + google-auth)."""

from touristreview.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    FirestoreRESTClient,
    Transaction,
    TransactionAbortedError,
    WriteBatch,
)
from touristreview.infrastructure.firebase.client import create_firestore_client

__all__ = [
    "DocumentExistsError",
    "FirestoreRESTClient",
    "Transaction",
    "TransactionAbortedError",
    "WriteBatch",
    "create_firestore_client",
]
