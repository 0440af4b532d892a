#Marks routing as a package.
#Re-exports the public API (geo helpers, zone classifier, OSRM client, route service)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .geo import (
    Coordinate,
    InvalidCoordinate,
    haversine_km,
    is_point_in_circle,
    is_valid_coordinate,
    require_valid_coordinate,
)
from .geofence import Zone, ZoneStatus, classify_destination, is_serviceable, zone_containment
from .osrm_client import OSRMClient, OSRMError
from .route_service import RouteEstimate, RouteService, haversine_route

__all__ = [
    "Coordinate",
    "InvalidCoordinate",
    "haversine_km",
    "is_point_in_circle",
    "is_valid_coordinate",
    "require_valid_coordinate",
    "Zone",
    "ZoneStatus",
    "classify_destination",
    "is_serviceable",
    "zone_containment",
    "OSRMClient",
    "OSRMError",
    "RouteEstimate",
    "RouteService",
    "haversine_route",
]
