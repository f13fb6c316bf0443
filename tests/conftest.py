"""Pytest configuration and fixtures for touristreview.

The app is imported with the document store disabled and local storage in a
temp directory; API tests replace services through dependency overrides, so
no Firestore, map server or Firebase Auth is contacted.
"""

import os
import tempfile

os.environ.setdefault("FIRESTORE_ENABLED", "false")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="touristreview-test-"))

import pytest
from fastapi import Request
from httpx import ASGITransport, AsyncClient

from touristreview.api.v1.dependencies import (
    get_current_user_id,
    get_map_gateway,
    get_place_resolver,
    get_profile_service,
    get_rating_service,
    get_social_graph_service,
    get_storage,
)
from touristreview.application.services import (
    PlaceResolver,
    ProfileService,
    RatingService,
    SocialGraphService,
)
from touristreview.core.limiter import limiter
from touristreview.domain.exceptions import AuthenticationException
from touristreview.infrastructure.external.storage.local_storage import (
    LocalStorageService,
)
from touristreview.main import app

from tests.fakes import (
    FakeMapGateway,
    InMemoryPlaceRepository,
    InMemoryUserRepository,
)

limiter.enabled = False


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def place_repo(user_repo: InMemoryUserRepository) -> InMemoryPlaceRepository:
    return InMemoryPlaceRepository(user_repo)


@pytest.fixture
def gateway() -> FakeMapGateway:
    return FakeMapGateway()


@pytest.fixture
def storage(tmp_path) -> LocalStorageService:
    return LocalStorageService(storage_root=str(tmp_path / "storage"))


@pytest.fixture
def rating_service(place_repo, user_repo) -> RatingService:
    return RatingService(place_repo, user_repo)


@pytest.fixture
def social_graph_service(user_repo, storage) -> SocialGraphService:
    return SocialGraphService(user_repo, storage)


@pytest.fixture
def profile_service(user_repo, storage) -> ProfileService:
    return ProfileService(user_repo, storage, max_picture_size=1024)


@pytest.fixture
def place_resolver(gateway, user_repo) -> PlaceResolver:
    return PlaceResolver(gateway, user_repo, timeout_seconds=2.0, concurrency=4)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), without service overrides."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def api_client(
    rating_service,
    social_graph_service,
    profile_service,
    place_resolver,
    gateway,
    storage,
) -> AsyncClient:
    """HTTP client whose routes use the in-memory services.

    The caller is identified by the bearer token itself (token "alice" is uid
    "alice"), so tests switch users by changing the Authorization header.
    """

    async def _current_user(request: Request) -> str:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer ") or not header[7:]:
            raise AuthenticationException("Missing bearer token")
        return header[7:]

    app.dependency_overrides[get_current_user_id] = _current_user
    app.dependency_overrides[get_rating_service] = lambda: rating_service
    app.dependency_overrides[get_social_graph_service] = lambda: social_graph_service
    app.dependency_overrides[get_profile_service] = lambda: profile_service
    app.dependency_overrides[get_place_resolver] = lambda: place_resolver
    app.dependency_overrides[get_map_gateway] = lambda: gateway
    app.dependency_overrides[get_storage] = lambda: storage
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
