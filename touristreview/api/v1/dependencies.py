"""Presentation-layer dependency injection.

Services are built once in the lifespan (touristreview.core.lifespan) and
read from app.state here; routes depend only on these functions, so tests
swap implementations with app.dependency_overrides.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from touristreview.application.interfaces.services import (
    MapSearchGateway,
    StorageProtocol,
)
from touristreview.application.services import (
    PlaceResolver,
    ProfileService,
    RatingService,
    SocialGraphService,
)
from touristreview.domain.exceptions import (
    AuthenticationException,
    TouristReviewException,
)

_bearer = HTTPBearer(auto_error=False)


class ServiceUnavailableException(TouristReviewException):
    """A collaborator the route needs was not configured at startup."""

    def __init__(self, component: str) -> None:
        super().__init__(
            f"{component} is not configured",
            "SERVICE_UNAVAILABLE",
            {"component": component},
        )


def _state(request: Request, name: str, component: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise ServiceUnavailableException(component)
    return value


def get_rating_service(request: Request) -> RatingService:
    return _state(request, "rating_service", "document store")


def get_social_graph_service(request: Request) -> SocialGraphService:
    return _state(request, "social_graph_service", "document store")


def get_profile_service(request: Request) -> ProfileService:
    return _state(request, "profile_service", "document store")


def get_place_resolver(request: Request) -> PlaceResolver:
    return _state(request, "place_resolver", "document store")


def get_map_gateway(request: Request) -> MapSearchGateway:
    return _state(request, "map_gateway", "map search")


def get_storage(request: Request) -> StorageProtocol:
    return _state(request, "storage", "storage")


async def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> str:
    """uid of the caller from a Firebase ID token (Authorization: Bearer <token>)."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationException("Missing bearer token")
    verifier = _state(request, "token_verifier", "authentication")
    return await verifier.verify(credentials.credentials)


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
