"""Tests for the Firestore REST client and repositories against httpx.MockTransport."""

import json
from collections.abc import Callable

import httpx
import pytest

from touristreview.domain.entities import PlaceRecord, Rating
from touristreview.domain.enums import FriendshipStatus
from touristreview.domain.exceptions import (
    DocumentStoreException,
    ResourceNotFoundException,
    TransactionConflictException,
)
from touristreview.domain.social_graph import FriendAction, plan_friendship
from touristreview.infrastructure.firebase import FirestoreRESTClient
from touristreview.infrastructure.firebase._rest_encoding import (
    decode_document,
    encode_fields,
)
from touristreview.infrastructure.firebase.collections import (
    LOCATION_PLACE_MARK,
    RATING_STARS,
    USER_FRIEND_REQ_REC,
    USER_FRIEND_REQ_SENT,
    USER_NAME,
    USER_RATED,
)
from touristreview.infrastructure.firebase.repositories import (
    FirestorePlaceRepository,
    FirestoreUserRepository,
    place_document_id,
)

PREFIX = "projects/demo/databases/(default)/documents"
KEY = "Coit Tower, 1 Telegraph Hill Blvd @ <+37.80240000,-122.40580000>"


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> FirestoreRESTClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirestoreRESTClient("demo", None, http_client=http, base_url="http://fs/v1")


def _user_doc(uid: str, **fields) -> dict:
    data = {USER_NAME: uid.title(), **fields}
    return {"name": f"{PREFIX}/users/{uid}", "fields": encode_fields(data)}


class FakeFirestore:
    """Serves users/{uid} GETs and records beginTransaction/commit/rollback calls."""

    def __init__(self, users: dict[str, dict], commit_statuses: list[int] | None = None):
        self.users = users
        self.commit_statuses = list(commit_statuses or [])
        self.commits: list[dict] = []
        self.begins = 0
        self.rollbacks = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith(":beginTransaction"):
            self.begins += 1
            return httpx.Response(200, json={"transaction": f"txn-{self.begins}"})
        if path.endswith(":rollback"):
            self.rollbacks += 1
            return httpx.Response(200, json={})
        if path.endswith(":commit"):
            self.commits.append(json.loads(request.content))
            status = self.commit_statuses.pop(0) if self.commit_statuses else 200
            if status == 409:
                return httpx.Response(409, json={"error": {"status": "ABORTED"}})
            return httpx.Response(status, json={"writeResults": []})
        if request.method == "GET" and "/users/" in path:
            uid = path.rsplit("/", 1)[-1]
            if uid in self.users:
                return httpx.Response(200, json=self.users[uid])
            return httpx.Response(404, json={"error": {"status": "NOT_FOUND"}})
        return httpx.Response(500, json={"error": {"status": "INTERNAL"}})


async def test_record_rating_is_one_commit() -> None:
    """New place, rating and the author's rated array-union go in a single commit."""
    fake = FakeFirestore({})
    repo = FirestorePlaceRepository(_client(fake))
    rating = Rating(
        id="r1",
        author_id="alice",
        author_name="Alice",
        stars=5,
        review_text="View!",
        created_at="05/01/2024",
        place_key=KEY,
    )
    place = await repo.record_rating(rating, None, provider_place_id="node:42")

    assert place.id == place_document_id(KEY)
    assert len(fake.commits) == 1
    writes = fake.commits[0]["writes"]
    assert "transaction" not in fake.commits[0]
    assert len(writes) == 3

    place_write, rating_write, user_write = writes
    assert place_write["update"]["name"] == f"{PREFIX}/Locations/{place.id}"
    assert place_write["update"]["fields"][LOCATION_PLACE_MARK] == {"stringValue": KEY}
    assert place_write["update"]["fields"]["placeId"] == {"stringValue": "node:42"}
    assert rating_write["update"]["name"] == f"{PREFIX}/Locations/{place.id}/Ratings/r1"
    assert rating_write["update"]["fields"][RATING_STARS] == {"integerValue": "5"}
    assert user_write["transform"]["document"] == f"{PREFIX}/users/alice"
    assert user_write["transform"]["fieldTransforms"] == [
        {
            "fieldPath": USER_RATED,
            "appendMissingElements": {"values": [{"stringValue": KEY}]},
        }
    ]
    assert user_write["currentDocument"] == {"exists": True}


async def test_record_rating_on_existing_place_skips_place_write() -> None:
    fake = FakeFirestore({})
    repo = FirestorePlaceRepository(_client(fake))
    existing = PlaceRecord(id="legacy-id", place_key=KEY)
    rating = Rating("r2", "bob", "Bob", 3, "", "05/01/2024", KEY)
    assert await repo.record_rating(rating, existing) == existing
    writes = fake.commits[0]["writes"]
    assert len(writes) == 2
    assert writes[0]["update"]["name"] == f"{PREFIX}/Locations/legacy-id/Ratings/r2"


def test_place_document_id_is_deterministic() -> None:
    assert place_document_id(KEY) == place_document_id(KEY)
    assert place_document_id(KEY) != place_document_id(KEY + " ")
    assert len(place_document_id(KEY)) == 64


async def test_send_request_commits_both_sides_in_transaction() -> None:
    fake = FakeFirestore({"alice": _user_doc("alice"), "bob": _user_doc("bob")})
    repo = FirestoreUserRepository(_client(fake))
    change = await repo.change_friendship(
        "alice", "bob", lambda a, b: plan_friendship(FriendAction.SEND, a, b)
    )
    assert change.status == FriendshipStatus.REQUEST_SENT
    assert len(fake.commits) == 1
    body = fake.commits[0]
    assert body["transaction"] == "txn-1"
    transforms = {w["transform"]["document"]: w["transform"]["fieldTransforms"] for w in body["writes"]}
    assert transforms[f"{PREFIX}/users/alice"] == [
        {"fieldPath": USER_FRIEND_REQ_SENT, "appendMissingElements": {"values": [{"stringValue": "bob"}]}}
    ]
    assert transforms[f"{PREFIX}/users/bob"] == [
        {"fieldPath": USER_FRIEND_REQ_REC, "appendMissingElements": {"values": [{"stringValue": "alice"}]}}
    ]


async def test_aborted_commit_is_retried() -> None:
    fake = FakeFirestore(
        {"alice": _user_doc("alice"), "bob": _user_doc("bob")},
        commit_statuses=[409, 200],
    )
    repo = FirestoreUserRepository(_client(fake), max_attempts=3)
    await repo.change_friendship(
        "alice", "bob", lambda a, b: plan_friendship(FriendAction.SEND, a, b)
    )
    assert fake.begins == 2
    assert len(fake.commits) == 2
    assert fake.commits[1]["transaction"] == "txn-2"


async def test_transaction_conflict_after_max_attempts() -> None:
    fake = FakeFirestore(
        {"alice": _user_doc("alice"), "bob": _user_doc("bob")},
        commit_statuses=[409, 409],
    )
    repo = FirestoreUserRepository(_client(fake), max_attempts=2)
    with pytest.raises(TransactionConflictException):
        await repo.change_friendship(
            "alice", "bob", lambda a, b: plan_friendship(FriendAction.SEND, a, b)
        )
    assert fake.begins == 2


async def test_missing_user_rolls_back() -> None:
    fake = FakeFirestore({"alice": _user_doc("alice")})
    repo = FirestoreUserRepository(_client(fake))
    with pytest.raises(ResourceNotFoundException):
        await repo.change_friendship(
            "alice", "ghost", lambda a, b: plan_friendship(FriendAction.SEND, a, b)
        )
    assert fake.rollbacks == 1
    assert fake.commits == []


async def test_failed_commit_raises_document_store_error() -> None:
    fake = FakeFirestore(
        {
            "alice": _user_doc("alice", **{USER_FRIEND_REQ_SENT: ["bob"]}),
            "bob": _user_doc("bob", **{USER_FRIEND_REQ_REC: ["alice"]}),
        },
        commit_statuses=[503],
    )
    repo = FirestoreUserRepository(_client(fake))
    with pytest.raises(DocumentStoreException):
        await repo.change_friendship(
            "bob", "alice", lambda a, b: plan_friendship(FriendAction.ACCEPT, a, b)
        )
    assert fake.rollbacks == 1


async def test_user_document_decoding() -> None:
    fake = FakeFirestore(
        {
            "alice": _user_doc(
                "alice",
                friends=["bob", "bob", 7],
                rated=[KEY],
                profilePermissions="Friends-Only",
            )
        }
    )
    repo = FirestoreUserRepository(_client(fake))
    account = await repo.get("alice")
    assert account is not None
    assert account.friends == ["bob"]
    assert account.rated_places == [KEY]
    assert account.visibility.value == "Friends-Only"
    assert await repo.get("ghost") is None


async def test_find_places_and_list_ratings() -> None:
    place_id = place_document_id(KEY)

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith(":runQuery"):
            query = json.loads(request.content)["structuredQuery"]
            assert query["from"] == [{"collectionId": "Locations"}]
            assert query["where"]["fieldFilter"]["value"] == {"stringValue": KEY}
            return httpx.Response(
                200,
                json=[
                    {"readTime": "2024-01-01T00:00:00Z"},
                    {
                        "document": {
                            "name": f"{PREFIX}/Locations/{place_id}",
                            "fields": encode_fields({"placeMark": KEY, "description": ""}),
                        }
                    },
                ],
            )
        if path.endswith("/Ratings"):
            page = request.url.params.get("pageToken")
            if page is None:
                return httpx.Response(
                    200,
                    json={
                        "documents": [
                            {
                                "name": f"{path}/r1",
                                "fields": encode_fields({"rating": 4, "userName": "Al"}),
                            },
                            {"name": f"{path}/bad", "fields": encode_fields({"rating": 9})},
                        ],
                        "nextPageToken": "p2",
                    },
                )
            return httpx.Response(
                200,
                json={"documents": [{"name": f"{path}/r2", "fields": encode_fields({"rating": 2})}]},
            )
        return httpx.Response(404)

    repo = FirestorePlaceRepository(_client(handler))
    places = await repo.find_places(KEY)
    assert [p.id for p in places] == [place_id]
    ratings = await repo.list_ratings(places[0])
    assert [(r.id, r.stars) for r in ratings] == [("r1", 4), ("r2", 2)]
    assert ratings[1].author_name == "Anonymous"
    assert ratings[1].created_at == "Unknown Date"
    assert ratings[0].place_key == KEY


async def test_transport_error_becomes_document_store_exception() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    repo = FirestoreUserRepository(_client(handler))
    with pytest.raises(DocumentStoreException):
        await repo.get("alice")


def test_decode_document_reads_fields_map() -> None:
    doc = {
        "name": "x",
        "fields": {
            "n": {"integerValue": "3"},
            "tags": {"arrayValue": {"values": [{"stringValue": "a"}]}},
            "meta": {"mapValue": {"fields": {"ok": {"booleanValue": True}}}},
            "none": {"nullValue": None},
        },
    }
    assert decode_document(doc) == {"n": 3, "tags": ["a"], "meta": {"ok": True}, "none": None}
    assert decode_document(None) == {}
