"""Place API: map search, ratings by PlaceKey, and batch resolution."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from touristreview.api.v1.dependencies import (
    CurrentUserId,
    get_map_gateway,
    get_place_resolver,
    get_rating_service,
)
from touristreview.application.interfaces.services import MapSearchGateway
from touristreview.application.services import PlaceResolver, RatingService
from touristreview.core.limiter import limit_search, limit_writes
from touristreview.domain import placemark
from touristreview.domain.exceptions import ValidationException
from touristreview.domain.value_objects import Coordinate
from touristreview.schemas.place import (
    MapPlaceResponse,
    PlaceSummaryResponse,
    RatingCreateRequest,
    RatingResponse,
    ResolvedPlaceResponse,
    ResolveRequest,
)

router = APIRouter()


@router.get("/search", response_model=list[MapPlaceResponse])
@limit_search
async def search_places(
    request: Request,
    gateway: Annotated[MapSearchGateway, Depends(get_map_gateway)],
    q: Annotated[str, Query(min_length=1, max_length=256)],
    lat: Annotated[float | None, Query(ge=-90, le=90)] = None,
    lon: Annotated[float | None, Query(ge=-180, le=180)] = None,
    span: Annotated[float, Query(gt=0, le=1_000_000)] = 1000.0,
    limit: Annotated[int | None, Query(ge=1, le=50)] = None,
) -> list[MapPlaceResponse]:
    """Search the map; lat/lon (both or neither) bias results towards that area."""
    if (lat is None) != (lon is None):
        raise ValidationException("lat and lon must be given together", field="lat")
    region = None
    if lat is not None and lon is not None:
        region = placemark.region_around(Coordinate(lat, lon), span)
    places = await gateway.search(q, region, limit=limit)
    return [MapPlaceResponse.from_place(p) for p in places]


@router.get("/ratings", response_model=PlaceSummaryResponse)
async def get_place_ratings(
    ratings: Annotated[RatingService, Depends(get_rating_service)],
    key: Annotated[str, Query(min_length=1, max_length=1024)],
) -> PlaceSummaryResponse:
    """Ratings, average and count for one PlaceKey (empty when unrated)."""
    return PlaceSummaryResponse.from_summary(await ratings.place_summary(key))


@router.post("/ratings", response_model=RatingResponse, status_code=201)
@limit_writes
async def submit_rating(
    request: Request,
    body: RatingCreateRequest,
    user_id: CurrentUserId,
    ratings: Annotated[RatingService, Depends(get_rating_service)],
) -> RatingResponse:
    rating = await ratings.submit_rating(
        body.place_key,
        body.stars,
        body.text,
        user_id,
        provider_place_id=body.provider_place_id,
    )
    return RatingResponse.model_validate(rating)


@router.post("/resolve", response_model=list[ResolvedPlaceResponse])
@limit_search
async def resolve_places(
    request: Request,
    body: ResolveRequest,
    _user_id: CurrentUserId,
    resolver: Annotated[PlaceResolver, Depends(get_place_resolver)],
) -> list[ResolvedPlaceResponse]:
    """Resolve stored keys to live places; unresolvable keys are left out."""
    resolved = await resolver.resolve_places(body.place_keys)
    return [ResolvedPlaceResponse.from_resolved(r) for r in resolved]
