"""
Tests for great-circle distance
"""
import math

import pytest

from presence.constants import EARTH_RADIUS_METERS
from presence.core.exceptions import InvalidCoordinate, ValidationFailure
from presence.services.geo import distance_meters, haversine_meters, validate_coordinate
from presence.schemas.decision import RegisteredSite


def test_same_point_is_zero():
    assert haversine_meters(-6.2, 106.816666, -6.2, 106.816666) == 0.0


def test_one_degree_of_latitude():
    expected = EARTH_RADIUS_METERS * math.pi / 180
    assert haversine_meters(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected, rel=1e-9)
    assert expected == pytest.approx(111_194.9, abs=0.1)


def test_distance_is_symmetric():
    a = (-6.2, 106.816666)
    b = (-6.9147, 107.6098)
    assert haversine_meters(*a, *b) == pytest.approx(haversine_meters(*b, *a))


def test_antipodal_points_do_not_blow_up():
    distance = haversine_meters(0.0, 0.0, 0.0, 180.0)
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_METERS, rel=1e-9)


def test_small_offsets_are_in_meters():
    # ~0.0001 deg of latitude is ~11 m
    assert haversine_meters(-6.2, 106.816666, -6.2001, 106.816666) == pytest.approx(11.12, abs=0.01)


@pytest.mark.parametrize(
    "lat,lng",
    [
        (91.0, 0.0),
        (-90.5, 0.0),
        (0.0, 180.01),
        (0.0, -181.0),
        (float("nan"), 0.0),
        (0.0, float("inf")),
        ("north", 0.0),
        (None, 0.0),
    ],
)
def test_invalid_coordinates_are_rejected(lat, lng):
    with pytest.raises(InvalidCoordinate):
        validate_coordinate(lat, lng)


def test_invalid_coordinate_is_a_validation_failure():
    with pytest.raises(ValidationFailure):
        haversine_meters(0.0, 0.0, 95.0, 0.0)


def test_boundary_coordinates_are_valid():
    validate_coordinate(90.0, 180.0)
    validate_coordinate(-90.0, -180.0)


def test_distance_between_objects():
    a = RegisteredSite(id=1, latitude=0.0, longitude=0.0)
    b = RegisteredSite(id=2, latitude=0.0, longitude=1.0)
    assert distance_meters(a, b) == pytest.approx(EARTH_RADIUS_METERS * math.pi / 180)


def test_non_numeric_coordinate_keeps_cause():
    with pytest.raises(InvalidCoordinate) as exc_info:
        validate_coordinate("north", 0.0)
    assert isinstance(exc_info.value.__cause__, ValueError)
