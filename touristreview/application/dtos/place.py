"""DTOs for place search, resolution and rating summaries."""

from dataclasses import dataclass, field

from touristreview.domain import placemark
from touristreview.domain.entities import Rating
from touristreview.domain.value_objects import Coordinate


@dataclass(frozen=True)
class MapPlace:
    """One place returned by the map search gateway."""

    name: str
    address: str
    coordinate: Coordinate
    provider_place_id: str | None = None
    category: str | None = None

    @property
    def place_key(self) -> str:
        return placemark.encode(self.name, self.address, self.coordinate)


@dataclass(frozen=True)
class ResolvedPlace:
    """A stored PlaceKey together with the live map result it resolved to."""

    place_key: str
    place: MapPlace


@dataclass(frozen=True)
class PlaceSummary:
    """Ratings of one place plus their aggregate."""

    place_key: str
    ratings: list[Rating] = field(default_factory=list)
    average_stars: float = 0.0

    @property
    def count(self) -> int:
        return len(self.ratings)
