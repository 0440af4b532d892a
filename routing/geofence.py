#Purpose: Service-ring geofencing.
#Classifies a destination against the circular "Inner Ring" / "Outer Ring" service zones.
#Typical responsibilities:
#pick the active inner and outer zones out of whatever the zone repository returned
#containment test of the destination against each ring independently
#turn missing/inactive rings into ZonesUnavailable (never an error)
#Output: a ZoneStatus the Fare Calculator uses to decide on the deadhead surcharge.
#Zones are reference data: never mutated here and never cached between calls.

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from routing.geo import Coordinate, haversine_km, is_point_in_circle

logger = logging.getLogger(__name__)

INNER_RING = "Inner Ring"
OUTER_RING = "Outer Ring"


@dataclass(frozen=True)
class Zone:
    """
    A circular service zone. Supplied read-only by the zone repository.
    """
    name: str
    center: Coordinate
    radius_km: float
    active: bool = True

    def contains(self, point: Coordinate) -> bool:
        return is_point_in_circle(point, self.center, self.radius_km)


class ZoneStatus(str, Enum):
    WITHIN_INNER = "within_inner"
    BETWEEN_INNER_AND_OUTER = "between_inner_and_outer"
    OUTSIDE_OUTER = "outside_outer"
    ZONES_UNAVAILABLE = "zones_unavailable"


@dataclass(frozen=True)
class ZoneContainment:
    """
    Diagnostic view of one classification: ring membership plus distances to the
    closest centre of each ring (None when the ring is missing).
    """
    status: ZoneStatus
    inside_inner: bool
    inside_outer: bool
    distance_to_inner_km: Optional[float]
    distance_to_outer_km: Optional[float]


def _active_named(zones: Iterable[Zone], name: str) -> List[Zone]:
    return [zone for zone in zones if zone.active and zone.name == name]


def _closest_distance(point: Coordinate, zones: List[Zone]) -> Optional[float]:
    if not zones:
        return None
    return min(haversine_km(point, zone.center) for zone in zones)


def zone_containment(
        destination: Coordinate,
        zones: Iterable[Zone],
        *,
        inner_name: str = INNER_RING,
        outer_name: str = OUTER_RING,
) -> ZoneContainment:
    """
    Classify a destination against the inner and outer service rings.

    More than one active zone may carry the same ring name; the point counts as
    inside the ring if it is inside any of them, so the result does not depend on
    the order the repository returned the zones in.
    """
    zones = list(zones or [])
    inner_zones = _active_named(zones, inner_name)
    outer_zones = _active_named(zones, outer_name)

    inside_inner = any(zone.contains(destination) for zone in inner_zones)
    inside_outer = any(zone.contains(destination) for zone in outer_zones)

    if not inner_zones or not outer_zones:
        status = ZoneStatus.ZONES_UNAVAILABLE
    elif inside_inner:
        status = ZoneStatus.WITHIN_INNER
    elif inside_outer:
        status = ZoneStatus.BETWEEN_INNER_AND_OUTER
    else:
        status = ZoneStatus.OUTSIDE_OUTER

    return ZoneContainment(
        status=status,
        inside_inner=inside_inner,
        inside_outer=inside_outer,
        distance_to_inner_km=_closest_distance(destination, inner_zones),
        distance_to_outer_km=_closest_distance(destination, outer_zones),
    )


def classify_destination(
        destination: Coordinate,
        zones: Iterable[Zone],
        *,
        inner_name: str = INNER_RING,
        outer_name: str = OUTER_RING,
) -> ZoneStatus:
    """
    WithinInner / BetweenInnerAndOuter / OutsideOuter, or ZonesUnavailable when
    either ring is missing or inactive. Callers must read ZonesUnavailable as
    "no deadhead surcharge", not as a pricing failure.
    """
    containment = zone_containment(
        destination, zones, inner_name=inner_name, outer_name=outer_name
    )
    if containment.status is ZoneStatus.ZONES_UNAVAILABLE:
        logger.warning(
            "Service rings unavailable (need active %r and %r); deadhead surcharge disabled",
            inner_name,
            outer_name,
        )
    else:
        logger.debug(
            "Destination (%s, %s) classified %s (inner %.3f km, outer %.3f km)",
            destination.latitude,
            destination.longitude,
            containment.status.value,
            containment.distance_to_inner_km,
            containment.distance_to_outer_km,
        )
    return containment.status


def is_serviceable(point: Coordinate, zones: Iterable[Zone], *, outer_name: str = OUTER_RING) -> bool:
    """
    A point is serviceable when it lies inside an active outer ring.
    Without an outer ring nothing is serviceable.
    """
    outer_zones = _active_named(list(zones or []), outer_name)
    if not outer_zones:
        logger.warning("No active %r zone found, denying location by default", outer_name)
        return False
    return any(zone.contains(point) for zone in outer_zones)
