"""Tests for the placemark codec (PlaceKey encode/decode) and region helpers."""

import math

import pytest

from touristreview.domain import placemark
from touristreview.domain.value_objects import Coordinate, Region

APPLE_PARK_KEY = (
    "Apple Park, 1 Apple Park Way, Cupertino, CA 95014 @ <+37.33467100,-122.00890800>"
)


class TestEncode:
    def test_canonical_shape(self) -> None:
        key = placemark.encode(
            "Apple Park",
            "1 Apple Park Way, Cupertino, CA 95014",
            Coordinate(37.334671, -122.008908),
        )
        assert key == (
            "Apple Park, 1 Apple Park Way, Cupertino, CA 95014 @ <+37.334671,-122.008908>"
        )

    def test_strips_surrounding_whitespace(self) -> None:
        key = placemark.encode("  Cafe ", " Main St ", Coordinate(0.0, 0.0))
        assert key == "Cafe, Main St @ <+0.0,+0.0>"

    def test_deterministic(self) -> None:
        c = Coordinate(48.8583701, 2.2944813)
        assert placemark.encode("Eiffel Tower", "Paris", c) == placemark.encode(
            "Eiffel Tower", "Paris", c
        )


class TestDecode:
    def test_round_trip(self) -> None:
        """decode(encode(n, a, c)) gives back query "n, a" and the coordinate."""
        c = Coordinate(-33.8567844, 151.2152967)
        decoded = placemark.decode(placemark.encode("Opera House", "Bennelong Point", c))
        assert decoded is not None
        assert decoded.query == "Opera House, Bennelong Point"
        assert decoded.coordinate == c

    @pytest.mark.parametrize(
        "coordinate",
        [
            Coordinate(37.123456789012, -122.987654321098),
            Coordinate(-0.000012345, 179.99999999999),
            Coordinate(90.0, -180.0),
        ],
    )
    def test_round_trip_keeps_full_precision(self, coordinate: Coordinate) -> None:
        decoded = placemark.decode(placemark.encode("Spot", "Somewhere", coordinate))
        assert decoded is not None
        assert decoded.coordinate == coordinate

    def test_key_without_address(self) -> None:
        """Text before '@' with no comma is the name; the address is empty."""
        decoded = placemark.decode("Eiffel Tower @ <+48.85837010,+2.29448130>")
        assert decoded is not None
        assert decoded.name == "Eiffel Tower"
        assert decoded.address == ""
        assert decoded.query == "Eiffel Tower"
        assert decoded.coordinate == Coordinate(48.8583701, 2.2944813)

    def test_encode_without_address_round_trips(self) -> None:
        c = Coordinate(48.8583701, 2.2944813)
        key = placemark.encode("Eiffel Tower", "  ", c)
        assert key == "Eiffel Tower @ <+48.8583701,+2.2944813>"
        decoded = placemark.decode(key)
        assert decoded is not None
        assert (decoded.query, decoded.coordinate) == ("Eiffel Tower", c)

    def test_name_and_address_split_on_last_comma(self) -> None:
        decoded = placemark.decode(APPLE_PARK_KEY)
        assert decoded is not None
        assert decoded.name == "Apple Park, 1 Apple Park Way, Cupertino"
        assert decoded.address == "CA 95014"
        assert decoded.query == "Apple Park, 1 Apple Park Way, Cupertino, CA 95014"

    def test_trailing_text_after_coordinate_is_ignored(self) -> None:
        key = (
            "Golden Gate Bridge, San Francisco @ <+37.81971900,-122.47855300> "
            "+/- 0.00m, region CLCircularRegion (identifier:'<+37.8,-122.4> radius 100')"
        )
        decoded = placemark.decode(key)
        assert decoded is not None
        assert decoded.coordinate == Coordinate(37.819719, -122.478553)

    def test_unsigned_coordinates_accepted(self) -> None:
        decoded = placemark.decode("Cafe, Main St @ <10.5, 20.25>")
        assert decoded is not None
        assert decoded.coordinate == Coordinate(10.5, 20.25)

    @pytest.mark.parametrize(
        "key",
        [
            "",
            "Cafe, Main St <+1.0,+2.0>",  # no '@'
            "Cafe, Main St @ +1.0,+2.0",  # no <...> segment
            "Cafe, Main St @ <+1.0>",  # one number
            "Cafe, Main St @ <+1.0,+2.0,+3.0>",  # three numbers
            "Cafe, Main St @ <north,east>",  # not numbers
            "Cafe, Main St @ <+91.0,+2.0>",  # latitude out of range
            "Cafe, Main St @ <+1.0,+181.0>",  # longitude out of range
            "Cafe, Main St @ <nan,+2.0>",
        ],
    )
    def test_malformed_keys_decode_to_none(self, key: str) -> None:
        assert placemark.decode(key) is None
        assert placemark.is_valid(key) is False

    def test_valid_key(self) -> None:
        assert placemark.is_valid(APPLE_PARK_KEY) is True


class TestRegionAndDistance:
    def test_region_around_is_centered(self) -> None:
        center = Coordinate(37.0, -122.0)
        region = placemark.region_around(center)
        assert isinstance(region, Region)
        west, north, east, south = region.bounds
        assert (west + east) / 2 == pytest.approx(-122.0)
        assert (north + south) / 2 == pytest.approx(37.0)
        # 1 km of latitude is about 0.009 degrees
        assert north - south == pytest.approx(1000 / 111_320.0)

    def test_region_clamped_near_pole(self) -> None:
        region = placemark.region_around(Coordinate(89.9999, 179.9999), 50_000)
        west, north, east, south = region.bounds
        assert north <= 90.0 and south >= -90.0
        assert east <= 180.0 and west >= -180.0

    def test_distance_meters(self) -> None:
        paris = Coordinate(48.8566, 2.3522)
        london = Coordinate(51.5074, -0.1278)
        assert placemark.distance_meters(paris, london) == pytest.approx(343_500, rel=0.01)
        assert placemark.distance_meters(paris, paris) == 0.0

    def test_coordinate_rejects_non_finite(self) -> None:
        with pytest.raises(ValueError):
            Coordinate(math.inf, 0.0)
