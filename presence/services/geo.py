"""
Great-circle distance between two points on the Earth's surface.
"""
import math
from typing import Any

from presence.constants import EARTH_RADIUS_METERS
from presence.core.exceptions import InvalidCoordinate


def validate_coordinate(latitude: float, longitude: float) -> None:
    """Raise InvalidCoordinate for NaN, infinite or out-of-range values."""
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinate(
            "Coordinates must be numeric",
            {"latitude": latitude, "longitude": longitude},
        ) from exc
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidCoordinate(
            "Coordinates must be finite numbers",
            {"latitude": latitude, "longitude": longitude},
        )
    if not -90.0 <= lat <= 90.0:
        raise InvalidCoordinate("Latitude must be between -90 and 90", {"latitude": lat})
    if not -180.0 <= lng <= 180.0:
        raise InvalidCoordinate("Longitude must be between -180 and 180", {"longitude": lng})


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in meters using the mean Earth radius."""
    validate_coordinate(lat1, lng1)
    validate_coordinate(lat2, lng2)

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push a a hair above 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def distance_meters(a: Any, b: Any) -> float:
    """
    Distance between two objects exposing `latitude` and `longitude`
    (LocationSample, RegisteredSite, AttendanceRecord).
    """
    return haversine_meters(a.latitude, a.longitude, b.latitude, b.longitude)
