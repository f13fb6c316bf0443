"""Placemark codec: PlaceKey strings <-> structured place queries.

A PlaceKey has the shape ``"<name>, <address> @ <lat,lon>"``, e.g.::

    Apple Park, 1 Apple Park Way, Cupertino, CA 95014 @ <+37.334671,-122.008908>

Older keys carry fixed 8-decimal coordinates (``<+37.33467100,...>``) and
keys without an address have no comma (``Eiffel Tower @ <...>``); both decode.

It is the only value joining a map search result to the ratings stored for
it, so encode() must be deterministic. Keys written by older clients may
carry extra text after the closing ``>`` (accuracy, region); decode()
ignores it.

Known limitation: the join relies on exact string equality. Two keys for the
same physical place that differ in any character (renamed POI, different
address formatting, coordinate drift) file ratings under separate places.
"""

import re
from dataclasses import dataclass

from touristreview.domain.value_objects import Coordinate, Region

_COORDINATE_SEGMENT_RE = re.compile(r"<([^<>]*)>")


@dataclass(frozen=True)
class PlaceQuery:
    """Decoded PlaceKey: what to search for and where."""

    name: str
    address: str
    coordinate: Coordinate

    @property
    def query(self) -> str:
        """Free-text search string (name and address)."""
        if not self.address:
            return self.name
        return f"{self.name}, {self.address}"


def encode(name: str, address: str, coordinate: Coordinate) -> str:
    """Build the PlaceKey for a place.

    Coordinates are written with an explicit sign and the shortest digits
    that read back as the same float, so decode() returns them exactly.
    """
    head = name.strip()
    if address.strip():
        head = f"{head}, {address.strip()}"
    return f"{head} @ <{coordinate.latitude:+},{coordinate.longitude:+}>"


def _parse_coordinate(segment: str) -> Coordinate | None:
    parts = segment.split(",")
    if len(parts) != 2:
        return None
    try:
        return Coordinate(float(parts[0].strip()), float(parts[1].strip()))
    except ValueError:
        return None


def decode(place_key: str) -> PlaceQuery | None:
    """Parse a PlaceKey; return None when it is not well formed.

    Name and address split on the last ',' before the first '@'; without a
    comma the whole text is the name and the address is empty. The
    coordinate is the first ``<lat,lon>`` segment after the '@'. None means
    "skip this entry", never an error.
    """
    at = place_key.find("@")
    if at < 0:
        return None
    head = place_key[:at].strip()
    comma = head.rfind(",")
    match = _COORDINATE_SEGMENT_RE.search(place_key, at)
    if match is None:
        return None
    coordinate = _parse_coordinate(match.group(1))
    if coordinate is None:
        return None
    if comma < 0:
        return PlaceQuery(name=head, address="", coordinate=coordinate)
    return PlaceQuery(
        name=head[:comma].strip(),
        address=head[comma + 1 :].strip(),
        coordinate=coordinate,
    )


def is_valid(place_key: str) -> bool:
    return decode(place_key) is not None


def region_around(coordinate: Coordinate, span_meters: float = 1000.0) -> Region:
    """Search hint centered on a stored coordinate."""
    return Region.around(coordinate, span_meters)


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    return a.distance_to(b)
