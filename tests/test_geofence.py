import math

import pytest

from routing.geo import EARTH_RADIUS_KM, Coordinate
from routing.geofence import (
    INNER_RING,
    OUTER_RING,
    Zone,
    ZoneStatus,
    classify_destination,
    is_serviceable,
    zone_containment,
)

KM_PER_DEGREE = math.radians(1) * EARTH_RADIUS_KM


def north_of(center: Coordinate, km: float) -> Coordinate:
    return Coordinate(center.latitude + km / KM_PER_DEGREE, center.longitude)


@pytest.fixture
def hub():
    return Coordinate(12.7402, 77.8240)


@pytest.fixture
def rings(hub):
    return [
        Zone(INNER_RING, hub, radius_km=5.0),
        Zone(OUTER_RING, hub, radius_km=15.0),
    ]


def test_zone_center_is_within_inner(hub, rings):
    assert classify_destination(hub, rings) is ZoneStatus.WITHIN_INNER


def test_between_rings(hub, rings):
    assert classify_destination(north_of(hub, 8.0), rings) is ZoneStatus.BETWEEN_INNER_AND_OUTER


def test_just_beyond_outer_radius_is_outside(hub, rings):
    assert classify_destination(north_of(hub, 15.01), rings) is ZoneStatus.OUTSIDE_OUTER


def test_empty_zone_set_is_unavailable(hub):
    assert classify_destination(hub, []) is ZoneStatus.ZONES_UNAVAILABLE
    assert classify_destination(hub, None) is ZoneStatus.ZONES_UNAVAILABLE


def test_inactive_ring_is_unavailable(hub):
    zones = [
        Zone(INNER_RING, hub, radius_km=5.0),
        Zone(OUTER_RING, hub, radius_km=15.0, active=False),
    ]
    assert classify_destination(north_of(hub, 8.0), zones) is ZoneStatus.ZONES_UNAVAILABLE


def test_duplicate_ring_names_are_order_independent(hub):
    """
    Two active inner zones: the point is inner if it sits in either of them,
    whatever order the repository returned them in.
    """
    far_center = north_of(hub, 30.0)
    zones = [
        Zone(INNER_RING, far_center, radius_km=2.0),
        Zone(INNER_RING, hub, radius_km=5.0),
        Zone(OUTER_RING, hub, radius_km=15.0),
    ]

    assert classify_destination(hub, zones) is ZoneStatus.WITHIN_INNER
    assert classify_destination(hub, list(reversed(zones))) is ZoneStatus.WITHIN_INNER


def test_custom_ring_names(hub):
    zones = [Zone("core", hub, 5.0), Zone("metro", hub, 15.0)]

    status = classify_destination(north_of(hub, 8.0), zones, inner_name="core", outer_name="metro")
    assert status is ZoneStatus.BETWEEN_INNER_AND_OUTER
    # default names are not present
    assert classify_destination(hub, zones) is ZoneStatus.ZONES_UNAVAILABLE


def test_zone_containment_reports_distances(hub, rings):
    containment = zone_containment(north_of(hub, 8.0), rings)

    assert containment.status is ZoneStatus.BETWEEN_INNER_AND_OUTER
    assert not containment.inside_inner
    assert containment.inside_outer
    assert containment.distance_to_inner_km == pytest.approx(8.0, abs=1e-6)
    assert containment.distance_to_outer_km == pytest.approx(8.0, abs=1e-6)


def test_zone_containment_missing_ring_has_no_distance(hub):
    containment = zone_containment(hub, [Zone(OUTER_RING, hub, 15.0)])

    assert containment.status is ZoneStatus.ZONES_UNAVAILABLE
    assert containment.distance_to_inner_km is None
    assert containment.distance_to_outer_km == 0.0


def test_is_serviceable(hub, rings):
    assert is_serviceable(north_of(hub, 10.0), rings)
    assert not is_serviceable(north_of(hub, 20.0), rings)


def test_is_serviceable_denies_without_outer_ring(hub):
    assert not is_serviceable(hub, [Zone(INNER_RING, hub, 5.0)])
