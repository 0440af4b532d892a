"""
Purpose: Fare rate tables (reference data) and their lookups.
What it does:

Holds one row type per service type:

- StandardRate: base fare, per-km rate, minimum fare, surge multiplier
- OutstationRate: per-km model rates plus the optional slab package rows
- RentalRate: fixed package keyed by (vehicle class, hours, included km)
- AirportFare: fixed fare per direction

FareTables is an immutable bundle of rows, injected into the calculator.
Every lookup raises NoFareConfig when the row is missing; nothing here invents a price.

default_fare_tables() returns the well-known fallback rows. They exist for the
explicitly-logged degraded mode only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import NoFareConfig
from .models import AirportDirection, ServiceType, VehicleClass


@dataclass(frozen=True)
class StandardRate:
    vehicle_class: VehicleClass
    base_fare: float
    per_km_rate: float
    minimum_fare: float
    surge_multiplier: float = 1.0


@dataclass(frozen=True)
class OutstationSlab:
    """A flat package price covering trips up to coverage_km."""
    coverage_km: float
    fare: float


@dataclass(frozen=True)
class OutstationRate:
    vehicle_class: VehicleClass
    base_fare: float
    per_km_rate: float
    driver_allowance_per_day: float
    slabs: Tuple[OutstationSlab, ...] = ()
    # rate for km beyond the largest slab; per_km_rate when unset
    extra_km_rate: Optional[float] = None

    def sorted_slabs(self) -> List[OutstationSlab]:
        return sorted(self.slabs, key=lambda slab: slab.coverage_km)


@dataclass(frozen=True)
class RentalRate:
    vehicle_class: VehicleClass
    hours: int
    included_km: int
    base_fare: float
    extra_km_rate: float = 0.0
    extra_minute_rate: float = 0.0


@dataclass(frozen=True)
class AirportFare:
    vehicle_class: VehicleClass
    hub_to_airport_fare: float
    airport_to_hub_fare: float

    def fare_for(self, direction: AirportDirection) -> float:
        if direction is AirportDirection.HUB_TO_AIRPORT:
            return self.hub_to_airport_fare
        return self.airport_to_hub_fare


@dataclass(frozen=True)
class FareTables:
    """
    Read-only rate tables keyed for O(1) lookup. Build with FareTables.build().
    """
    standard: Dict[VehicleClass, StandardRate] = field(default_factory=dict)
    outstation: Dict[VehicleClass, OutstationRate] = field(default_factory=dict)
    rental: Dict[Tuple[VehicleClass, int, int], RentalRate] = field(default_factory=dict)
    airport: Dict[VehicleClass, AirportFare] = field(default_factory=dict)

    @classmethod
    def build(
            cls,
            *,
            standard: Iterable[StandardRate] = (),
            outstation: Iterable[OutstationRate] = (),
            rental: Iterable[RentalRate] = (),
            airport: Iterable[AirportFare] = (),
    ) -> FareTables:
        return cls(
            standard={row.vehicle_class: row for row in standard},
            outstation={row.vehicle_class: row for row in outstation},
            rental={(row.vehicle_class, row.hours, row.included_km): row for row in rental},
            airport={row.vehicle_class: row for row in airport},
        )

    # --- Lookups ---

    def standard_rate(self, vehicle_class: VehicleClass) -> StandardRate:
        row = self.standard.get(vehicle_class)
        if row is None:
            raise NoFareConfig(ServiceType.STANDARD, vehicle_class)
        return row

    def outstation_rate(self, vehicle_class: VehicleClass) -> OutstationRate:
        row = self.outstation.get(vehicle_class)
        if row is None:
            raise NoFareConfig(ServiceType.OUTSTATION, vehicle_class)
        return row

    def rental_rate(self, vehicle_class: VehicleClass, hours: int, included_km: int) -> RentalRate:
        row = self.rental.get((vehicle_class, hours, included_km))
        if row is None:
            raise NoFareConfig(
                ServiceType.RENTAL, vehicle_class, f"{hours} h / {included_km} km package"
            )
        return row

    def airport_fare(self, vehicle_class: VehicleClass) -> AirportFare:
        row = self.airport.get(vehicle_class)
        if row is None:
            raise NoFareConfig(ServiceType.AIRPORT, vehicle_class)
        return row

    def vehicle_classes(self, service_type: ServiceType) -> List[VehicleClass]:
        """Vehicle classes that have at least one row for service_type."""
        if service_type is ServiceType.STANDARD:
            classes = set(self.standard)
        elif service_type is ServiceType.OUTSTATION:
            classes = set(self.outstation)
        elif service_type is ServiceType.RENTAL:
            classes = {key[0] for key in self.rental}
        else:
            classes = set(self.airport)
        return sorted(classes, key=lambda vehicle_class: list(VehicleClass).index(vehicle_class))


def default_fare_tables() -> FareTables:
    """
    Fallback rows for degraded mode. Car classes only; no rental packages and no
    outstation slabs, so those still fail with NoFareConfig.
    """
    standard = [
        StandardRate(VehicleClass.HATCHBACK, base_fare=50, per_km_rate=12, minimum_fare=80),
        StandardRate(VehicleClass.HATCHBACK_AC, base_fare=60, per_km_rate=15, minimum_fare=100),
        StandardRate(VehicleClass.SEDAN, base_fare=60, per_km_rate=15, minimum_fare=100),
        StandardRate(VehicleClass.SEDAN_AC, base_fare=70, per_km_rate=18, minimum_fare=120),
        StandardRate(VehicleClass.SUV, base_fare=80, per_km_rate=18, minimum_fare=120),
        StandardRate(VehicleClass.SUV_AC, base_fare=100, per_km_rate=22, minimum_fare=150),
    ]
    outstation = [
        OutstationRate(VehicleClass.HATCHBACK, base_fare=500, per_km_rate=10, driver_allowance_per_day=300),
        OutstationRate(VehicleClass.HATCHBACK_AC, base_fare=600, per_km_rate=10, driver_allowance_per_day=350),
        OutstationRate(VehicleClass.SEDAN, base_fare=700, per_km_rate=11, driver_allowance_per_day=400),
        OutstationRate(VehicleClass.SEDAN_AC, base_fare=800, per_km_rate=12, driver_allowance_per_day=450),
        OutstationRate(VehicleClass.SUV, base_fare=1000, per_km_rate=19, driver_allowance_per_day=500),
        OutstationRate(VehicleClass.SUV_AC, base_fare=1200, per_km_rate=20, driver_allowance_per_day=550),
    ]
    airport = [
        AirportFare(VehicleClass.HATCHBACK, hub_to_airport_fare=1850, airport_to_hub_fare=1600),
        AirportFare(VehicleClass.HATCHBACK_AC, hub_to_airport_fare=1700, airport_to_hub_fare=1700),
        AirportFare(VehicleClass.SEDAN, hub_to_airport_fare=1800, airport_to_hub_fare=1800),
        AirportFare(VehicleClass.SEDAN_AC, hub_to_airport_fare=1900, airport_to_hub_fare=1900),
        AirportFare(VehicleClass.SUV, hub_to_airport_fare=4000, airport_to_hub_fare=4000),
        AirportFare(VehicleClass.SUV_AC, hub_to_airport_fare=4500, airport_to_hub_fare=4500),
    ]
    return FareTables.build(standard=standard, outstation=outstation, airport=airport)
