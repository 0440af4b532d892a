#Purpose: Pure geographic helpers shared by zone classification, route fallback and pricing.
#Great-circle (haversine) distance in kilometres
#Coordinate validation ((0, 0) is the "unset" sentinel, never a real location)
#Point-in-circle containment for circular service zones
#No I/O, no logging, no state.

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

EARTH_RADIUS_KM = 6371.0


class InvalidCoordinate(ValueError):
    """Raised when a coordinate is NaN, out of range or the (0, 0) sentinel."""
    pass


@dataclass(frozen=True)
class Coordinate:
    """
    A point in decimal degrees.

    Construction never validates so that untrusted input can be held and
    rejected later with is_valid_coordinate / require_valid_coordinate.
    """
    latitude: float
    longitude: float

    @classmethod
    def of(cls, lat_lon: Tuple[float, float]) -> Coordinate:
        latitude, longitude = lat_lon
        return cls(float(latitude), float(longitude))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates in kilometres (R = 6371 km).

    Symmetric and exactly 0.0 for identical points.
    """
    if a == b:
        return 0.0

    lat1, lon1, lat2, lon2 = map(math.radians, [a.latitude, a.longitude, b.latitude, b.longitude])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # clamp: float error can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def is_valid_coordinate(c: Coordinate) -> bool:
    """Rejects NaN, |lat| > 90, |lon| > 180 and the (0, 0) sentinel."""
    latitude, longitude = c.latitude, c.longitude
    if latitude is None or longitude is None:
        return False
    if math.isnan(latitude) or math.isnan(longitude):
        return False
    if abs(latitude) > 90 or abs(longitude) > 180:
        return False
    if latitude == 0 and longitude == 0:
        return False
    return True


def require_valid_coordinate(c: Coordinate, label: str = "coordinate") -> Coordinate:
    if not is_valid_coordinate(c):
        raise InvalidCoordinate(f"Invalid {label}: ({c.latitude}, {c.longitude})")
    return c


def is_point_in_circle(point: Coordinate, center: Coordinate, radius_km: float) -> bool:
    """
    Circular containment test: haversine(point, center) <= radius_km.

    Invalid input (NaN point/centre, non-positive radius) is treated as "outside".
    """
    if math.isnan(point.latitude) or math.isnan(point.longitude):
        return False
    if math.isnan(center.latitude) or math.isnan(center.longitude):
        return False
    if math.isnan(radius_km) or radius_km <= 0:
        return False
    return haversine_km(point, center) <= radius_km
