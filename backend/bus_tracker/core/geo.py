"""Great-circle distance between two lat/lng points."""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Distance in kilometers between two coordinates (haversine formula)."""
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)
    h = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) *
         math.sin(dlng / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def round_km(distance_km: float) -> float:
    """Round a distance to 2 decimals (half-up) for display."""
    return math.floor(distance_km * 100 + 0.5) / 100
