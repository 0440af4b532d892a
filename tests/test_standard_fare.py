import math

import pytest

from pricing.engine import FareCalculator
from pricing.models import CalculationMethod, FareRequest, ServiceType, VehicleClass
from pricing.policy import default_pricing_policy
from pricing.strategies import deadhead_surcharge, price_standard, round_currency
from pricing.tables import FareTables, StandardRate
from routing.geo import EARTH_RADIUS_KM, Coordinate
from routing.geofence import ZoneStatus
from routing.route_service import RouteEstimate

KM_PER_DEGREE = math.radians(1) * EARTH_RADIUS_KM


@pytest.fixture
def policy():
    return default_pricing_policy()


@pytest.fixture
def sedan_rate():
    return StandardRate(VehicleClass.SEDAN, base_fare=100, per_km_rate=14, minimum_fare=150)


@pytest.fixture
def sedan_request():
    return FareRequest(
        pickup=Coordinate(12.74, 77.82),
        destination=Coordinate(12.95, 77.59),
        vehicle_class=VehicleClass.SEDAN,
        service_type=ServiceType.STANDARD,
    )


@pytest.fixture
def calculator(sedan_rate, policy):
    return FareCalculator(FareTables.build(standard=[sedan_rate]), policy)


def test_deadhead_example(sedan_request, sedan_rate, policy):
    """
    40 km trip, destination between the rings, 8 km from the hub at 14/km:
    deadhead = (8 / 2) * 14 = 56 on top of base + 36 km * 14.
    """
    route = RouteEstimate(distance_km=40, duration_min=70)

    fare = price_standard(
        sedan_request,
        route,
        sedan_rate,
        policy,
        zone_status=ZoneStatus.BETWEEN_INNER_AND_OUTER,
        deadhead_distance_km=8,
    )

    assert fare.deadhead == 56
    assert fare.base == 100
    assert fare.distance == 36 * 14
    assert fare.surge == 0
    assert fare.total_fare == 100 + 36 * 14 + 56
    assert fare.deadhead_distance_km == 8
    assert fare.distance_km == 40
    assert fare.duration_min == 70
    assert fare.calculation_method is CalculationMethod.STANDARD


def test_calculator_measures_deadhead_from_hub(calculator, policy):
    hub = policy.service_hub
    request = FareRequest(
        pickup=hub,
        destination=Coordinate(hub.latitude + 8.0 / KM_PER_DEGREE, hub.longitude),
        vehicle_class=VehicleClass.SEDAN,
    )
    route = RouteEstimate(distance_km=40, duration_min=70)

    fare = calculator.price(request, route, zone_status=ZoneStatus.BETWEEN_INNER_AND_OUTER)

    assert fare.deadhead_distance_km == pytest.approx(8.0, abs=1e-6)
    assert fare.deadhead == pytest.approx(56.0, abs=1e-4)
    assert fare.total_fare == 660


@pytest.mark.parametrize(
    "zone_status",
    [ZoneStatus.WITHIN_INNER, ZoneStatus.OUTSIDE_OUTER, ZoneStatus.ZONES_UNAVAILABLE],
)
def test_no_deadhead_outside_the_ring_band(calculator, sedan_request, zone_status):
    route = RouteEstimate(distance_km=40, duration_min=70)

    fare = calculator.price(sedan_request, route, zone_status=zone_status)

    assert fare.deadhead == 0
    assert fare.deadhead_distance_km == 0
    assert fare.total_fare == 100 + 36 * 14


def test_deadhead_surcharge_only_between_rings():
    assert deadhead_surcharge(ZoneStatus.BETWEEN_INNER_AND_OUTER, 10, 12) == 60
    for status in (ZoneStatus.WITHIN_INNER, ZoneStatus.OUTSIDE_OUTER, ZoneStatus.ZONES_UNAVAILABLE):
        assert deadhead_surcharge(status, 10, 12) == 0


def test_trip_within_included_km_has_no_distance_charge(calculator, sedan_request):
    """
    3 km is inside the 4 km the base fare covers; the minimum fare tops it up.
    """
    fare = calculator.price(sedan_request, RouteEstimate(distance_km=3, duration_min=8))

    assert fare.distance == 0
    assert fare.extras == 50  # minimum-fare top-up: 150 - 100
    assert fare.total_fare == 150


def test_surge_applies_to_base_plus_distance(sedan_request, policy):
    rate = StandardRate(VehicleClass.SEDAN, base_fare=100, per_km_rate=10, minimum_fare=0, surge_multiplier=1.5)

    fare = price_standard(sedan_request, RouteEstimate(distance_km=14, duration_min=30), rate, policy)

    assert fare.distance == 100
    assert fare.surge == 100
    assert fare.total_fare == 300


def test_surge_below_one_is_not_negative(sedan_request, policy):
    rate = StandardRate(VehicleClass.SEDAN, base_fare=100, per_km_rate=10, minimum_fare=0, surge_multiplier=0.8)

    fare = price_standard(sedan_request, RouteEstimate(distance_km=14, duration_min=30), rate, policy)

    assert fare.surge == 0
    assert fare.total_fare == 200


def test_rounding_happens_once_on_the_total(sedan_request, policy):
    """
    0.3 + 0.3 rounds to 1; rounding each component first would give 0.
    """
    rate = StandardRate(VehicleClass.SEDAN, base_fare=0.3, per_km_rate=0.3, minimum_fare=0)

    fare = price_standard(sedan_request, RouteEstimate(distance_km=5, duration_min=10), rate, policy)

    assert round_currency(fare.base) + round_currency(fare.distance) == 0
    assert fare.total_fare == 1


def test_total_matches_components(calculator, sedan_request):
    fare = calculator.price(
        sedan_request,
        RouteEstimate(distance_km=23.37, duration_min=41),
        zone_status=ZoneStatus.BETWEEN_INNER_AND_OUTER,
    )
    assert fare.total_fare == round_currency(fare.components_sum)
    assert min(fare.base, fare.distance, fare.surge, fare.deadhead, fare.extras) >= 0


def test_round_currency_rounds_halves_up():
    assert round_currency(10.5) == 11
    assert round_currency(11.5) == 12
    assert round_currency(10.49) == 10
