"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Keeps the install small (avoids grpcio / firebase-admin).
All HTTP calls use httpx.AsyncClient so they do not block the event loop.

Besides single-document reads and writes it supports atomic multi-document
commits (WriteBatch) and read-write transactions (run_transaction), which
is what keeps both sides of a friendship edge and a rating plus its place
in step.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar

import httpx

from touristreview.domain.exceptions import (
    DocumentStoreException,
    TransactionConflictException,
)
from touristreview.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_array,
    encode_document,
    encode_fields,
)

logger = logging.getLogger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_DEFAULT_BASE = "https://firestore.googleapis.com/v1"
_LIST_PAGE_SIZE = 300

T = TypeVar("T")


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def _error_status(resp: httpx.Response) -> str:
    """Firestore error status (e.g. 'ABORTED', 'ALREADY_EXISTS') or ''."""
    try:
        payload = resp.json()
    except ValueError:
        return ""
    if isinstance(payload, list):
        payload = payload[0] if payload else {}
    if not isinstance(payload, dict):
        return ""
    return (payload.get("error") or {}).get("status", "")


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    *,
    params: dict[str, Any] | None = None,
    missing_ok: bool = True,
) -> Any:
    """Perform async HTTP request to Firestore REST API.

    404 returns None when missing_ok. 409 raises TransactionAbortedError
    (contention) or DocumentExistsError. Any other failure raises
    DocumentStoreException.
    """
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method not in ("GET", "PATCH", "POST", "DELETE"):
        raise ValueError(f"Unsupported method: {method!r}")
    try:
        resp = await client.request(
            method, url, headers=headers, json=body, params=params
        )
    except httpx.TransportError as e:
        raise DocumentStoreException(method, str(e) or type(e).__name__) from e
    if resp.status_code == 404 and missing_ok:
        return None
    if resp.status_code == 409:
        if _error_status(resp) == "ABORTED":
            raise TransactionAbortedError("Transaction aborted by contention")
        raise DocumentExistsError("Document already exists")
    if resp.status_code not in (200, 204):
        status = _error_status(resp) or resp.reason_phrase
        raise DocumentStoreException(method, f"HTTP {resp.status_code} {status}")
    if method == "DELETE":
        return {}
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentExistsError(Exception):
    """Raised when a create precondition fails (document ID already exists)."""


class TransactionAbortedError(Exception):
    """Raised when Firestore aborts a transaction (409 ABORTED); safe to retry."""


def _doc_id(name: str) -> str:
    return name.split("/")[-1] if name else ""


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return _doc_id(self._path)

    @property
    def name(self) -> str:
        """Full resource name (projects/.../documents/...)."""
        return self._path

    def collection(self, collection_id: str) -> CollectionReference:
        """Subcollection under this document."""
        return CollectionReference(self._client, f"{self._path}/{collection_id}")

    async def set(self, data: dict[str, Any]) -> None:
        """Create or overwrite the document (PATCH with full replace)."""
        await _request_async(
            self._client._http,
            self._client.url(self._path),
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
        )

    async def update(self, data: dict[str, Any]) -> None:
        """Overwrite only the given fields; the document must exist."""
        await _request_async(
            self._client._http,
            self._client.url(self._path),
            method="PATCH",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params={
                "updateMask.fieldPaths": list(data),
                "currentDocument.exists": "true",
            },
            missing_ok=False,
        )

    async def get(self, transaction: str | None = None) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        params = {"transaction": transaction} if transaction else None
        out = await _request_async(
            self._client._http,
            self._client.url(self._path),
            access_token=await self._client.get_token(),
            params=params,
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out), reference=self)

    async def delete(self) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._client._http,
            self._client.url(self._path),
            method="DELETE",
            access_token=await self._client.get_token(),
        )


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(
        self, id_: str, data: dict, reference: DocumentReference | None = None
    ):
        self.id = id_
        self._data = data
        self.reference = reference

    def to_dict(self) -> dict:
        return self._data

    def get(self, field: str, default: Any = None) -> Any:
        return self._data.get(field, default)


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
    "array_contains_any": "ARRAY_CONTAINS_ANY",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


class _Query:
    """Fluent query builder for collection; runs via runQuery (filter/order/offset/limit on server)."""

    def __init__(
        self,
        client: "FirestoreRESTClient",
        parent: str,
        collection_id: str,
        *,
        where_field: str | None = None,
        where_op: str = "EQUAL",
        where_value: Any = None,
    ):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._where_field = where_field
        self._where_op = _OP_MAP.get(where_op, where_op)
        self._where_value = where_value
        self._order_by_field: str | None = None
        self._order_direction: str = "ASCENDING"
        self._offset: int = 0
        self._limit: int = 100

    def order_by(self, field: str, direction: str = "ASCENDING") -> "_Query":
        self._order_by_field = field
        self._order_direction = direction
        return self

    def offset(self, n: int) -> "_Query":
        self._offset = n
        return self

    def limit(self, n: int) -> "_Query":
        self._limit = n
        return self

    def _structured_query(self) -> dict[str, Any]:
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
        }
        if self._where_field is not None:
            structured["where"] = {
                "fieldFilter": {
                    "field": {"fieldPath": self._where_field},
                    "op": self._where_op,
                    "value": _encode_value(self._where_value),
                }
            }
        if self._order_by_field is not None:
            structured["orderBy"] = [
                {
                    "field": {"fieldPath": self._order_by_field},
                    "direction": self._order_direction,
                }
            ]
        if self._offset:
            structured["offset"] = self._offset
        if self._limit:
            structured["limit"] = self._limit
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots."""
        resp = await _request_async(
            self._client._http,
            self._client.url(f"{self._parent}:runQuery"),
            method="POST",
            body={"structuredQuery": self._structured_query()},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            name = doc.get("name", "")
            yield DocumentSnapshot(
                _doc_id(name),
                decode_document(doc),
                reference=DocumentReference(self._client, name) if name else None,
            )


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    @property
    def id(self) -> str:
        return _doc_id(self._path)

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    async def create(self, document_id: str, data: dict[str, Any]) -> None:
        """Create a document with the given ID (fail with DocumentExistsError if it exists)."""
        await _request_async(
            self._client._http,
            self._client.url(self._path),
            method="POST",
            body=encode_document(data),
            access_token=await self._client.get_token(),
            params={"documentId": document_id},
        )

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with a filter. Use .order_by(), .offset(), .limit(), then .stream()."""
        parent = self._path.rsplit("/", 1)[0]
        return _Query(
            self._client,
            parent,
            self.id,
            where_field=field,
            where_op=op,
            where_value=value,
        )

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """List every document in the collection (shallow), following page tokens."""
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": _LIST_PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            out = await _request_async(
                self._client._http,
                self._client.url(self._path),
                access_token=await self._client.get_token(),
                params=params,
            )
            if not out:
                return
            for doc in out.get("documents", []):
                name = doc.get("name", "")
                yield DocumentSnapshot(
                    _doc_id(name),
                    decode_document(doc),
                    reference=DocumentReference(self._client, name),
                )
            page_token = out.get("nextPageToken")
            if not page_token:
                return


class WriteBatch:
    """Writes applied atomically by a single :commit call (all or nothing)."""

    def __init__(self, client: "FirestoreRESTClient") -> None:
        self._client = client
        self._writes: list[dict[str, Any]] = []

    def __len__(self) -> int:
        return len(self._writes)

    @property
    def writes(self) -> list[dict[str, Any]]:
        return list(self._writes)

    def set(
        self, ref: DocumentReference, data: dict[str, Any], *, merge: bool = False
    ) -> "WriteBatch":
        """Create or replace the document; with merge, only touch the given fields."""
        write: dict[str, Any] = {"update": {"name": ref.name, "fields": encode_fields(data)}}
        if merge:
            write["updateMask"] = {"fieldPaths": list(data)}
        self._writes.append(write)
        return self

    def create(self, ref: DocumentReference, data: dict[str, Any]) -> "WriteBatch":
        """Create the document; the commit fails if it already exists."""
        self._writes.append({
            "update": {"name": ref.name, "fields": encode_fields(data)},
            "currentDocument": {"exists": False},
        })
        return self

    def update(self, ref: DocumentReference, data: dict[str, Any]) -> "WriteBatch":
        """Overwrite the given fields of an existing document."""
        self._writes.append({
            "update": {"name": ref.name, "fields": encode_fields(data)},
            "updateMask": {"fieldPaths": list(data)},
            "currentDocument": {"exists": True},
        })
        return self

    def delete(self, ref: DocumentReference) -> "WriteBatch":
        self._writes.append({"delete": ref.name})
        return self

    def array_union(
        self, ref: DocumentReference, field: str, values: list[Any]
    ) -> "WriteBatch":
        """Add values missing from an array field (server-side, duplicates collapse)."""
        self._add_transform(
            ref, {"fieldPath": field, "appendMissingElements": encode_array(values)}
        )
        return self

    def array_remove(
        self, ref: DocumentReference, field: str, values: list[Any]
    ) -> "WriteBatch":
        """Remove every occurrence of values from an array field (server-side)."""
        self._add_transform(
            ref, {"fieldPath": field, "removeAllFromArray": encode_array(values)}
        )
        return self

    def _add_transform(self, ref: DocumentReference, transform: dict[str, Any]) -> None:
        # One write per document: transforms attach to an earlier write of the same doc.
        for write in self._writes:
            if write.get("update", {}).get("name") == ref.name:
                write.setdefault("updateTransforms", []).append(transform)
                return
            if write.get("transform", {}).get("document") == ref.name:
                write["transform"]["fieldTransforms"].append(transform)
                return
        self._writes.append({
            "transform": {"document": ref.name, "fieldTransforms": [transform]},
            "currentDocument": {"exists": True},
        })

    async def _commit(self, transaction: str | None) -> list[dict[str, Any]]:
        body: dict[str, Any] = {"writes": self._writes}
        if transaction:
            body["transaction"] = transaction
        out = await _request_async(
            self._client._http,
            self._client.url(f"{self._client.prefix}:commit"),
            method="POST",
            body=body,
            access_token=await self._client.get_token(),
            missing_ok=False,
        )
        self._writes = []
        return (out or {}).get("writeResults", [])

    async def commit(self) -> list[dict[str, Any]]:
        """Apply every queued write atomically."""
        return await self._commit(None)


class Transaction(WriteBatch):
    """Read-write transaction: reads see one snapshot, writes commit together."""

    def __init__(self, client: "FirestoreRESTClient", transaction_id: str) -> None:
        super().__init__(client)
        self.id = transaction_id

    async def get(self, ref: DocumentReference) -> DocumentSnapshot | None:
        return await ref.get(transaction=self.id)

    async def get_all(
        self, refs: list[DocumentReference]
    ) -> list[DocumentSnapshot | None]:
        return list(await asyncio.gather(*(self.get(ref) for ref in refs)))

    async def commit(self) -> list[dict[str, Any]]:
        return await self._commit(self.id)

    async def rollback(self) -> None:
        await _request_async(
            self._client._http,
            self._client.url(f"{self._client.prefix}:rollback"),
            method="POST",
            body={"transaction": self.id},
            access_token=await self._client.get_token(),
        )


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = _DEFAULT_BASE,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self.prefix = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    @property
    def project_id(self) -> str:
        return self._project_id

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path}"

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking.

        Without credentials (emulator) no token is sent.
        """
        if self._credentials is None:
            return None
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, collection_id: str) -> CollectionReference:
        return CollectionReference(self, f"{self.prefix}/{collection_id}")

    def document(self, path: str) -> DocumentReference:
        """Document by slash-separated path relative to the database root."""
        return DocumentReference(self, f"{self.prefix}/{path.strip('/')}")

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    async def transaction(self) -> Transaction:
        """Begin a read-write transaction."""
        out = await _request_async(
            self._http,
            self.url(f"{self.prefix}:beginTransaction"),
            method="POST",
            body={"options": {"readWrite": {}}},
            access_token=await self.get_token(),
            missing_ok=False,
        )
        return Transaction(self, out["transaction"])

    async def run_transaction(
        self,
        func: Callable[[Transaction], Awaitable[T]],
        *,
        max_attempts: int = 5,
    ) -> T:
        """Run func inside a transaction and commit its writes; retry on ABORTED.

        func reads through the transaction and queues writes on it. It may be
        called more than once, so it must not have side effects outside the
        transaction. Any other exception rolls back and propagates.
        """
        for attempt in range(1, max_attempts + 1):
            txn = await self.transaction()
            try:
                result = await func(txn)
                await txn.commit()
                return result
            except TransactionAbortedError:
                logger.info(
                    "Firestore transaction aborted (attempt %d/%d)",
                    attempt,
                    max_attempts,
                )
                await asyncio.sleep(0.05 * attempt)
            except Exception:
                try:
                    await txn.rollback()
                except DocumentStoreException:
                    logger.warning("Firestore rollback failed", exc_info=True)
                raise
        raise TransactionConflictException(max_attempts)
