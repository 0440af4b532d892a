"""
Purpose: Domain models for the Pricing capability.
What it does:
- Defines core data structures:
- FareRequest (pickup, destination, vehicle class, service type, trip options)
- RentalPackage (hours, included km)
- FareBreakdown (itemized components, total, distance, duration)

Defines enums/constants:
- VehicleClass = hatchback | hatchback_ac | sedan | sedan_ac | suv | suv_ac | auto | bike
- ServiceType = standard | outstation | rental | airport
- AirportDirection = hub_to_airport | airport_to_hub

Defines the request validation rules.

Rule: No HTTP calls, no rate tables, no pricing math. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from routing.geo import Coordinate, is_valid_coordinate

from .exceptions import InvalidFareRequest


class VehicleClass(str, Enum):
    HATCHBACK = "hatchback"
    HATCHBACK_AC = "hatchback_ac"
    SEDAN = "sedan"
    SEDAN_AC = "sedan_ac"
    SUV = "suv"
    SUV_AC = "suv_ac"
    AUTO = "auto"
    BIKE = "bike"


class ServiceType(str, Enum):
    STANDARD = "standard"
    OUTSTATION = "outstation"
    RENTAL = "rental"
    AIRPORT = "airport"


class AirportDirection(str, Enum):
    HUB_TO_AIRPORT = "hub_to_airport"
    AIRPORT_TO_HUB = "airport_to_hub"


CAR_CLASSES: FrozenSet[VehicleClass] = frozenset({
    VehicleClass.HATCHBACK,
    VehicleClass.HATCHBACK_AC,
    VehicleClass.SEDAN,
    VehicleClass.SEDAN_AC,
    VehicleClass.SUV,
    VehicleClass.SUV_AC,
})

# which vehicle classes each service type recognizes
SUPPORTED_VEHICLE_CLASSES: Dict[ServiceType, FrozenSet[VehicleClass]] = {
    ServiceType.STANDARD: frozenset(VehicleClass),
    ServiceType.OUTSTATION: CAR_CLASSES,
    ServiceType.RENTAL: CAR_CLASSES,
    ServiceType.AIRPORT: CAR_CLASSES,
}


class CalculationMethod(str, Enum):
    STANDARD = "standard"
    SLAB = "slab"
    PER_KM = "per_km"
    PACKAGE = "package"
    FIXED = "fixed"


@dataclass(frozen=True)
class RentalPackage:
    hours: int
    included_km: int


@dataclass(frozen=True)
class FareRequest:
    """
    Everything needed to price one vehicle class for one trip.
    Round-trip distance is the route provider's business; the flag is informational here.
    """
    pickup: Coordinate
    destination: Coordinate
    vehicle_class: VehicleClass
    service_type: ServiceType = ServiceType.STANDARD
    round_trip: bool = False
    days: int = 1
    rental_package: Optional[RentalPackage] = None
    airport_direction: Optional[AirportDirection] = None

    def with_vehicle_class(self, vehicle_class: VehicleClass) -> FareRequest:
        return FareRequest(
            pickup=self.pickup,
            destination=self.destination,
            vehicle_class=vehicle_class,
            service_type=self.service_type,
            round_trip=self.round_trip,
            days=self.days,
            rental_package=self.rental_package,
            airport_direction=self.airport_direction,
        )

    def validate(self) -> None:
        """
        Raise InvalidFareRequest before any pricing attempt.
        """
        if not is_valid_coordinate(self.pickup):
            raise InvalidFareRequest(f"Invalid pickup coordinate {self.pickup}")

        if not is_valid_coordinate(self.destination):
            raise InvalidFareRequest(f"Invalid destination coordinate {self.destination}")

        if self.days < 1:
            raise InvalidFareRequest(f"days must be >= 1, got {self.days}")

        is_rental = self.service_type is ServiceType.RENTAL
        if is_rental and self.rental_package is None:
            raise InvalidFareRequest("rental_package is required for rental bookings")
        if not is_rental and self.rental_package is not None:
            raise InvalidFareRequest(f"rental_package is only valid for rental bookings, not {self.service_type.value}")
        if is_rental and (self.rental_package.hours <= 0 or self.rental_package.included_km <= 0):
            raise InvalidFareRequest(f"Invalid rental package {self.rental_package}")

        is_airport = self.service_type is ServiceType.AIRPORT
        if is_airport and self.airport_direction is None:
            raise InvalidFareRequest("airport_direction is required for airport bookings")
        if not is_airport and self.airport_direction is not None:
            raise InvalidFareRequest(f"airport_direction is only valid for airport bookings, not {self.service_type.value}")

        if self.vehicle_class not in SUPPORTED_VEHICLE_CLASSES[self.service_type]:
            raise InvalidFareRequest(
                f"{self.vehicle_class.value} is not offered for {self.service_type.value} bookings"
            )


@dataclass(frozen=True)
class FareBreakdown:
    """
    Itemized, non-negative fare. Components are kept unrounded; total_fare is
    their sum rounded once to the nearest currency unit.
    """
    vehicle_class: VehicleClass
    service_type: ServiceType
    calculation_method: CalculationMethod
    base: float
    distance: float
    time: float
    surge: float
    deadhead: float
    driver_allowance: float
    extras: float
    total_fare: float
    distance_km: float
    duration_min: float
    deadhead_distance_km: float = 0.0

    @property
    def components_sum(self) -> float:
        return (
            self.base
            + self.distance
            + self.time
            + self.surge
            + self.deadhead
            + self.driver_allowance
            + self.extras
        )
