"""
Purpose: The pricing "orchestrator" (single entry point for a priced fare).
What it does:

- validates the FareRequest (InvalidFareRequest)
- looks up the rate row for (service type, vehicle class, ...) (NoFareConfig)
- computes the deadhead distance to the service hub for standard trips
- dispatches to the matching strategy in pricing/strategies.py

Typical public calls:

- FareCalculator.price(request, route, zone_status=...) -> FareBreakdown
- FareCalculator.price_all(request, route, ...) -> BatchPricingResult

BatchPricingResult contains:

- fares: Dict[VehicleClass, FareBreakdown]
- failures: Dict[VehicleClass, PricingError]

Rule: The calculator holds only immutable tables and policy. It never fetches
routes or zones (see pricing/quote_service.py for that).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from routing.geo import haversine_km
from routing.geofence import ZoneStatus
from routing.route_service import RouteEstimate

from .exceptions import PricingError
from .models import FareBreakdown, FareRequest, ServiceType, SUPPORTED_VEHICLE_CLASSES, VehicleClass
from .policy import PricingPolicy, default_pricing_policy
from .strategies import price_airport, price_outstation, price_rental, price_standard
from .tables import FareTables


@dataclass(frozen=True)
class BatchPricingResult:
    """
    Output of pricing one trip across several vehicle classes.
    Classes that could not be priced are reported, not raised.
    """
    fares: Dict[VehicleClass, FareBreakdown] = field(default_factory=dict)
    failures: Dict[VehicleClass, PricingError] = field(default_factory=dict)

    @property
    def cheapest(self) -> Optional[FareBreakdown]:
        if not self.fares:
            return None
        return min(self.fares.values(), key=lambda fare: fare.total_fare)


class FareCalculator:
    """
    Stateless by construction: safe to share between threads without locking.
    """
    def __init__(self, tables: FareTables, policy: Optional[PricingPolicy] = None):
        self.tables = tables
        self.policy = policy or default_pricing_policy()

    def deadhead_distance_km(self, request: FareRequest) -> float:
        """Straight-line distance from the drop-off back to the service hub."""
        return haversine_km(request.destination, self.policy.service_hub)

    def price(
            self,
            request: FareRequest,
            route: RouteEstimate,
            *,
            zone_status: ZoneStatus = ZoneStatus.ZONES_UNAVAILABLE,
    ) -> FareBreakdown:
        """
        Price one request. Raises InvalidFareRequest or NoFareConfig.
        zone_status only matters for standard trips.
        """
        request.validate()
        service_type = request.service_type

        if service_type is ServiceType.STANDARD:
            rate = self.tables.standard_rate(request.vehicle_class)
            deadhead_km = 0.0
            if zone_status is ZoneStatus.BETWEEN_INNER_AND_OUTER:
                deadhead_km = self.deadhead_distance_km(request)
            return price_standard(
                request,
                route,
                rate,
                self.policy,
                zone_status=zone_status,
                deadhead_distance_km=deadhead_km,
            )

        if service_type is ServiceType.OUTSTATION:
            rate = self.tables.outstation_rate(request.vehicle_class)
            return price_outstation(request, route, rate, self.policy)

        if service_type is ServiceType.RENTAL:
            package = request.rental_package
            rate = self.tables.rental_rate(request.vehicle_class, package.hours, package.included_km)
            return price_rental(request, route, rate)

        fare = self.tables.airport_fare(request.vehicle_class)
        return price_airport(request, route, fare)

    def price_all(
            self,
            request: FareRequest,
            route: RouteEstimate,
            *,
            vehicle_classes: Optional[Iterable[VehicleClass]] = None,
            zone_status: ZoneStatus = ZoneStatus.ZONES_UNAVAILABLE,
    ) -> BatchPricingResult:
        """
        Price the same trip for several vehicle classes. Defaults to every class
        the service type supports. Failures are collected per class.
        """
        if vehicle_classes is None:
            vehicle_classes = [
                vehicle_class
                for vehicle_class in VehicleClass
                if vehicle_class in SUPPORTED_VEHICLE_CLASSES[request.service_type]
            ]

        fares: Dict[VehicleClass, FareBreakdown] = {}
        failures: Dict[VehicleClass, PricingError] = {}

        for vehicle_class in vehicle_classes:
            try:
                fares[vehicle_class] = self.price(
                    request.with_vehicle_class(vehicle_class),
                    route,
                    zone_status=zone_status,
                )
            except PricingError as error:
                failures[vehicle_class] = error

        return BatchPricingResult(fares=fares, failures=failures)
