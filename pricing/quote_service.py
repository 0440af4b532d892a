"""
Purpose: Glue between the external collaborators and the pure FareCalculator.
What it does:
Fetches the route (best effort, never raises) and the active zones (fresh on every
call, never cached), classifies the destination, and prices one or all vehicle
classes. Optionally retries a NoFareConfig against the fallback tables, loudly.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol

from routing.geo import Coordinate
from routing.geofence import Zone, ZoneStatus, classify_destination
from routing.route_service import RouteEstimate

from .engine import BatchPricingResult, FareCalculator
from .exceptions import NoFareConfig
from .models import FareBreakdown, FareRequest, ServiceType, VehicleClass
from .tables import FareTables, default_fare_tables

logger = logging.getLogger(__name__)


class RouteDistanceProvider(Protocol):
    def get_route(self, pickup: Coordinate, destination: Coordinate) -> RouteEstimate:
        ...


class ZoneRepository(Protocol):
    def get_active_zones(self) -> Iterable[Zone]:
        ...


class QuoteService:
    def __init__(
            self,
            calculator: FareCalculator,
            route_provider: RouteDistanceProvider,
            zone_repository: Optional[ZoneRepository] = None,
            fallback_tables: Optional[FareTables] = None,
    ):
        self.calculator = calculator
        self.route_provider = route_provider
        self.zone_repository = zone_repository
        self._fallback_calculator = FareCalculator(
            fallback_tables or default_fare_tables(), calculator.policy
        )

    def _active_zones(self) -> List[Zone]:
        if self.zone_repository is None:
            return []
        try:
            return list(self.zone_repository.get_active_zones() or [])
        except Exception:
            logger.warning("Zone lookup failed; pricing without deadhead surcharge", exc_info=True)
            return []

    def zone_status_for(self, request: FareRequest) -> ZoneStatus:
        # the deadhead surcharge only exists for standard trips
        if request.service_type is not ServiceType.STANDARD:
            return ZoneStatus.ZONES_UNAVAILABLE
        policy = self.calculator.policy
        return classify_destination(
            request.destination,
            self._active_zones(),
            inner_name=policy.inner_zone_name,
            outer_name=policy.outer_zone_name,
        )

    def quote(self, request: FareRequest, *, allow_fallback: bool = False) -> FareBreakdown:
        """
        Route + zones + price for a single vehicle class.

        Raises InvalidFareRequest, or NoFareConfig unless allow_fallback is set
        and the fallback tables carry the row.
        """
        request.validate()
        route = self.route_provider.get_route(request.pickup, request.destination)
        zone_status = self.zone_status_for(request)

        try:
            return self.calculator.price(request, route, zone_status=zone_status)
        except NoFareConfig as error:
            if not allow_fallback:
                raise
            logger.warning("%s; pricing with FALLBACK fare tables (degraded mode)", error)
            return self._fallback_calculator.price(request, route, zone_status=zone_status)

    def quote_all(
            self,
            request: FareRequest,
            *,
            vehicle_classes: Optional[Iterable[VehicleClass]] = None,
    ) -> BatchPricingResult:
        """
        Price the trip for every vehicle class. Route and zones are fetched once.
        """
        request.validate()
        route = self.route_provider.get_route(request.pickup, request.destination)
        zone_status = self.zone_status_for(request)

        result = self.calculator.price_all(
            request, route, vehicle_classes=vehicle_classes, zone_status=zone_status
        )
        if result.failures:
            logger.info(
                "Priced %d vehicle classes, %d without fare config: %s",
                len(result.fares),
                len(result.failures),
                ", ".join(vehicle_class.value for vehicle_class in result.failures),
            )
        return result
