"""Place search, rating and resolution API schemas."""

from pydantic import BaseModel, ConfigDict, Field

from touristreview.application.dtos.place import MapPlace, PlaceSummary, ResolvedPlace
from touristreview.domain.entities import MAX_STARS, MIN_STARS

MAX_REVIEW_LENGTH = 2000
MAX_RESOLVE_KEYS = 200


class CoordinateSchema(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class MapPlaceResponse(BaseModel):
    """One map search result with the PlaceKey its ratings are stored under."""

    place_key: str
    name: str
    address: str
    coordinate: CoordinateSchema
    provider_place_id: str | None = None
    category: str | None = None

    @classmethod
    def from_place(cls, place: MapPlace) -> "MapPlaceResponse":
        return cls(
            place_key=place.place_key,
            name=place.name,
            address=place.address,
            coordinate=CoordinateSchema(
                latitude=place.coordinate.latitude,
                longitude=place.coordinate.longitude,
            ),
            provider_place_id=place.provider_place_id,
            category=place.category,
        )


class RatingCreateRequest(BaseModel):
    """Request body for POST /places/ratings."""

    place_key: str = Field(..., min_length=1, max_length=1024)
    stars: int = Field(..., ge=MIN_STARS, le=MAX_STARS)
    text: str = Field(default="", max_length=MAX_REVIEW_LENGTH)
    provider_place_id: str | None = Field(default=None, max_length=256)


class RatingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    author_id: str
    author_name: str
    stars: int
    review_text: str
    created_at: str = Field(..., description="MM/dd/yyyy")
    place_key: str


class PlaceSummaryResponse(BaseModel):
    """Ratings for one PlaceKey plus their average (0.0 when there are none)."""

    place_key: str
    ratings: list[RatingResponse]
    average_stars: float
    count: int

    @classmethod
    def from_summary(cls, summary: PlaceSummary) -> "PlaceSummaryResponse":
        return cls(
            place_key=summary.place_key,
            ratings=[RatingResponse.model_validate(r) for r in summary.ratings],
            average_stars=summary.average_stars,
            count=summary.count,
        )


class ResolveRequest(BaseModel):
    """Request body for POST /places/resolve."""

    place_keys: list[str] = Field(..., max_length=MAX_RESOLVE_KEYS)


class ResolvedPlaceResponse(BaseModel):
    place_key: str
    place: MapPlaceResponse

    @classmethod
    def from_resolved(cls, resolved: ResolvedPlace) -> "ResolvedPlaceResponse":
        return cls(
            place_key=resolved.place_key,
            place=MapPlaceResponse.from_place(resolved.place),
        )
