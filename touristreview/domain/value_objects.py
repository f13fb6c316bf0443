"""Domain value objects for the TouristReview application.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import math
from dataclasses import dataclass

# Mean Earth radius used for great-circle distances.
_EARTH_RADIUS_METERS = 6_371_008.8
# Meters per degree of latitude (and of longitude at the equator).
_METERS_PER_DEGREE = 111_320.0


@dataclass(frozen=True)
class Coordinate:
    """WGS84 latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.latitude) or not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not math.isfinite(self.longitude) or not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")

    def distance_to(self, other: "Coordinate") -> float:
        """Great-circle (haversine) distance in meters."""
        lat1, lat2 = math.radians(self.latitude), math.radians(other.latitude)
        dlat = lat2 - lat1
        dlon = math.radians(other.longitude - self.longitude)
        a = (
            math.sin(dlat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        )
        return 2 * _EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


@dataclass(frozen=True)
class Region:
    """Rectangular search hint: center plus span in degrees."""

    center: Coordinate
    latitude_delta: float
    longitude_delta: float

    @classmethod
    def around(cls, center: Coordinate, span_meters: float) -> "Region":
        """Region of span_meters x span_meters centered on center."""
        lat_delta = span_meters / _METERS_PER_DEGREE
        cos_lat = max(math.cos(math.radians(center.latitude)), 1e-6)
        lon_delta = min(span_meters / (_METERS_PER_DEGREE * cos_lat), 360.0)
        return cls(center, lat_delta, lon_delta)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(west, north, east, south), clamped to valid degrees."""
        half_lat = self.latitude_delta / 2
        half_lon = self.longitude_delta / 2
        west = max(self.center.longitude - half_lon, -180.0)
        east = min(self.center.longitude + half_lon, 180.0)
        north = min(self.center.latitude + half_lat, 90.0)
        south = max(self.center.latitude - half_lat, -90.0)
        return west, north, east, south
