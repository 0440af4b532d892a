import logging
import math

import pytest

from pricing.engine import FareCalculator
from pricing.exceptions import InvalidFareRequest, NoFareConfig
from pricing.models import FareRequest, ServiceType, VehicleClass
from pricing.policy import default_pricing_policy
from pricing.quote_service import QuoteService
from pricing.tables import FareTables, StandardRate, default_fare_tables
from routing.geo import EARTH_RADIUS_KM, Coordinate
from routing.geofence import INNER_RING, OUTER_RING, Zone, ZoneStatus
from routing.route_service import RouteEstimate

KM_PER_DEGREE = math.radians(1) * EARTH_RADIUS_KM
HUB = default_pricing_policy().service_hub


class MockRouteProvider:
    def __init__(self, distance_km=10.0, duration_min=20.0):
        self.route = RouteEstimate(distance_km=distance_km, duration_min=duration_min)
        self.calls = 0

    def get_route(self, pickup, destination):
        self.calls += 1
        return self.route


class MockZoneRepository:
    def __init__(self, zones=None, error=None):
        self.zones = zones or []
        self.error = error
        self.calls = 0

    def get_active_zones(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.zones


@pytest.fixture
def rings():
    return [Zone(INNER_RING, HUB, 5.0), Zone(OUTER_RING, HUB, 15.0)]


@pytest.fixture
def between_rings_request():
    return FareRequest(
        pickup=HUB,
        destination=Coordinate(HUB.latitude + 8.0 / KM_PER_DEGREE, HUB.longitude),
        vehicle_class=VehicleClass.HATCHBACK,
    )


def test_price_all_reports_partial_results():
    """
    Default tables price the six car classes; auto and bike have no row and
    come back as failures instead of aborting the batch.
    """
    calculator = FareCalculator(default_fare_tables())
    request = FareRequest(pickup=HUB, destination=Coordinate(12.95, 77.59), vehicle_class=VehicleClass.SEDAN)

    result = calculator.price_all(request, RouteEstimate(distance_km=10, duration_min=20))

    assert len(result.fares) == 6
    assert set(result.failures) == {VehicleClass.AUTO, VehicleClass.BIKE}
    assert all(isinstance(error, NoFareConfig) for error in result.failures.values())
    assert result.fares[VehicleClass.HATCHBACK].total_fare == 50 + 6 * 12
    assert result.cheapest.vehicle_class is VehicleClass.HATCHBACK


def test_price_all_with_explicit_classes():
    calculator = FareCalculator(default_fare_tables())
    request = FareRequest(pickup=HUB, destination=Coordinate(12.95, 77.59), vehicle_class=VehicleClass.SEDAN)

    result = calculator.price_all(
        request,
        RouteEstimate(distance_km=10, duration_min=20),
        vehicle_classes=[VehicleClass.SUV, VehicleClass.SUV_AC],
    )

    assert set(result.fares) == {VehicleClass.SUV, VehicleClass.SUV_AC}
    assert not result.failures


def test_price_all_empty_tables_has_no_cheapest():
    result = FareCalculator(FareTables()).price_all(
        FareRequest(pickup=HUB, destination=Coordinate(12.95, 77.59), vehicle_class=VehicleClass.SEDAN),
        RouteEstimate(10, 20),
    )
    assert result.cheapest is None
    assert len(result.failures) == len(VehicleClass)


def test_quote_applies_deadhead_from_zone_repository(rings, between_rings_request):
    service = QuoteService(
        FareCalculator(default_fare_tables()),
        MockRouteProvider(distance_km=10),
        MockZoneRepository(rings),
    )

    fare = service.quote(between_rings_request)

    # hatchback: 50 base + 6 km * 12, plus (8 / 2) * 12 deadhead
    assert fare.deadhead == pytest.approx(48.0, abs=1e-4)
    assert fare.total_fare == 50 + 72 + 48


def test_zone_failure_prices_without_deadhead(between_rings_request, caplog):
    service = QuoteService(
        FareCalculator(default_fare_tables()),
        MockRouteProvider(distance_km=10),
        MockZoneRepository(error=ConnectionError("zones down")),
    )

    with caplog.at_level(logging.WARNING):
        fare = service.quote(between_rings_request)

    assert fare.deadhead == 0
    assert fare.total_fare == 122
    assert "Zone lookup failed" in caplog.text


def test_zones_are_not_consulted_for_non_standard_trips(rings):
    zones = MockZoneRepository(rings)
    service = QuoteService(FareCalculator(default_fare_tables()), MockRouteProvider(300), zones)
    request = FareRequest(
        pickup=HUB,
        destination=Coordinate(13.0827, 80.2707),
        vehicle_class=VehicleClass.SEDAN,
        service_type=ServiceType.OUTSTATION,
        days=2,
    )

    assert service.zone_status_for(request) is ZoneStatus.ZONES_UNAVAILABLE
    assert zones.calls == 0
    assert service.quote(request).total_fare == 700 + 11 * 300 * 2 + 400 * 2


def test_zones_are_fetched_fresh_every_quote(rings, between_rings_request):
    zones = MockZoneRepository(rings)
    service = QuoteService(FareCalculator(default_fare_tables()), MockRouteProvider(), zones)

    service.quote(between_rings_request)
    service.quote(between_rings_request)

    assert zones.calls == 2


def test_quote_all_fetches_route_and_zones_once(rings, between_rings_request):
    routes = MockRouteProvider()
    zones = MockZoneRepository(rings)
    service = QuoteService(FareCalculator(default_fare_tables()), routes, zones)

    result = service.quote_all(between_rings_request)

    assert routes.calls == 1
    assert zones.calls == 1
    assert len(result.fares) == 6
    assert all(fare.deadhead > 0 for fare in result.fares.values())


def test_no_fare_config_propagates_without_fallback():
    service = QuoteService(FareCalculator(FareTables()), MockRouteProvider())
    request = FareRequest(pickup=HUB, destination=Coordinate(12.95, 77.59), vehicle_class=VehicleClass.SEDAN)

    with pytest.raises(NoFareConfig):
        service.quote(request)


def test_fallback_tables_are_used_only_on_request(caplog):
    service = QuoteService(FareCalculator(FareTables()), MockRouteProvider(distance_km=10))
    request = FareRequest(pickup=HUB, destination=Coordinate(12.95, 77.59), vehicle_class=VehicleClass.SEDAN)

    with caplog.at_level(logging.WARNING):
        fare = service.quote(request, allow_fallback=True)

    assert fare.total_fare == 60 + 6 * 15
    assert "FALLBACK" in caplog.text


def test_fallback_never_invents_missing_rows():
    service = QuoteService(FareCalculator(FareTables()), MockRouteProvider())
    request = FareRequest(pickup=HUB, destination=Coordinate(12.95, 77.59), vehicle_class=VehicleClass.BIKE)

    with pytest.raises(NoFareConfig):
        service.quote(request, allow_fallback=True)


def test_custom_fallback_tables():
    fallback = FareTables.build(
        standard=[StandardRate(VehicleClass.BIKE, base_fare=20, per_km_rate=5, minimum_fare=30)]
    )
    service = QuoteService(FareCalculator(FareTables()), MockRouteProvider(distance_km=10), fallback_tables=fallback)
    request = FareRequest(pickup=HUB, destination=Coordinate(12.95, 77.59), vehicle_class=VehicleClass.BIKE)

    assert service.quote(request, allow_fallback=True).total_fare == 50


def test_invalid_request_skips_route_lookup():
    routes = MockRouteProvider()
    service = QuoteService(FareCalculator(default_fare_tables()), routes)
    request = FareRequest(pickup=Coordinate(0.0, 0.0), destination=HUB, vehicle_class=VehicleClass.SEDAN)

    with pytest.raises(InvalidFareRequest):
        service.quote(request)
    assert routes.calls == 0
