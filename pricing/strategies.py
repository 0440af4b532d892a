"""
Purpose: One pure pricing strategy per service type.
What it does:

- price_standard: base + distance beyond included km + surge, floored at the
  minimum fare, plus the deadhead surcharge between the service rings
- price_outstation: slab package for short single-day trips, per-km model otherwise
- price_rental: fixed package fare, verbatim
- price_airport: fixed directional fare, verbatim

Every function takes the rate row it needs explicitly and returns a FareBreakdown.
No lookups, no I/O, no logging: safe to call from any thread.

Rounding happens once, on the total, never per component.
"""

from __future__ import annotations

import math

from routing.geofence import ZoneStatus
from routing.route_service import RouteEstimate

from .models import CalculationMethod, FareBreakdown, FareRequest
from .exceptions import NoFareConfig
from .policy import PricingPolicy
from .tables import AirportFare, OutstationRate, RentalRate, StandardRate


def round_currency(amount: float) -> float:
    """Nearest whole currency unit, halves rounded up."""
    return float(math.floor(amount + 0.5))


def deadhead_surcharge(zone_status: ZoneStatus, deadhead_distance_km: float, per_km_rate: float) -> float:
    """
    Half the unpaid return leg to the service hub. Only between the inner and
    outer rings; WithinInner, OutsideOuter and ZonesUnavailable pay nothing.
    """
    if zone_status is not ZoneStatus.BETWEEN_INNER_AND_OUTER:
        return 0.0
    return (deadhead_distance_km / 2.0) * per_km_rate


def price_standard(
        request: FareRequest,
        route: RouteEstimate,
        rate: StandardRate,
        policy: PricingPolicy,
        *,
        zone_status: ZoneStatus = ZoneStatus.ZONES_UNAVAILABLE,
        deadhead_distance_km: float = 0.0,
) -> FareBreakdown:
    base = rate.base_fare

    billable_km = max(0.0, route.distance_km - policy.included_km)
    distance = billable_km * rate.per_km_rate

    surge = (base + distance) * (rate.surge_multiplier - 1.0)
    # a multiplier below 1 is a discount, not a negative surge component
    surge = max(0.0, surge)

    raw_subtotal = base + distance + surge
    subtotal = max(raw_subtotal, rate.minimum_fare)
    minimum_fare_top_up = subtotal - raw_subtotal

    deadhead = deadhead_surcharge(zone_status, deadhead_distance_km, rate.per_km_rate)
    applied_deadhead_km = deadhead_distance_km if deadhead > 0 else 0.0

    return FareBreakdown(
        vehicle_class=request.vehicle_class,
        service_type=request.service_type,
        calculation_method=CalculationMethod.STANDARD,
        base=base,
        distance=distance,
        time=0.0,
        surge=surge,
        deadhead=deadhead,
        driver_allowance=0.0,
        extras=minimum_fare_top_up,
        total_fare=round_currency(subtotal + deadhead),
        distance_km=route.distance_km,
        duration_min=route.duration_min,
        deadhead_distance_km=applied_deadhead_km,
    )


def uses_slab_model(request: FareRequest, route: RouteEstimate, policy: PricingPolicy) -> bool:
    """Single-day AND within the slab cutoff. Fixed policy, not per request."""
    return (
        request.days <= policy.outstation_slab_max_days
        and route.distance_km <= policy.outstation_slab_max_km
    )


def price_outstation(
        request: FareRequest,
        route: RouteEstimate,
        rate: OutstationRate,
        policy: PricingPolicy,
) -> FareBreakdown:
    if uses_slab_model(request, route, policy):
        return _price_outstation_slab(request, route, rate)
    return _price_outstation_per_km(request, route, rate)


def _price_outstation_slab(request: FareRequest, route: RouteEstimate, rate: OutstationRate) -> FareBreakdown:
    slabs = rate.sorted_slabs()
    if not slabs:
        raise NoFareConfig(request.service_type, request.vehicle_class, "no slab packages")

    selected = next((slab for slab in slabs if route.distance_km <= slab.coverage_km), None)

    if selected is not None:
        base = selected.fare
        overage = 0.0
    else:
        # beyond the largest slab but still under the cutoff: largest slab + extra km
        largest = slabs[-1]
        extra_km_rate = rate.extra_km_rate if rate.extra_km_rate is not None else rate.per_km_rate
        base = largest.fare
        overage = (route.distance_km - largest.coverage_km) * extra_km_rate

    return FareBreakdown(
        vehicle_class=request.vehicle_class,
        service_type=request.service_type,
        calculation_method=CalculationMethod.SLAB,
        base=base,
        distance=overage,
        time=0.0,
        surge=0.0,
        deadhead=0.0,
        driver_allowance=0.0,
        extras=0.0,
        total_fare=round_currency(base + overage),
        distance_km=route.distance_km,
        duration_min=route.duration_min,
    )


def _price_outstation_per_km(request: FareRequest, route: RouteEstimate, rate: OutstationRate) -> FareBreakdown:
    distance = rate.per_km_rate * route.distance_km * request.days
    allowance = rate.driver_allowance_per_day * request.days
    base = rate.base_fare

    return FareBreakdown(
        vehicle_class=request.vehicle_class,
        service_type=request.service_type,
        calculation_method=CalculationMethod.PER_KM,
        base=base,
        distance=distance,
        time=0.0,
        surge=0.0,
        deadhead=0.0,
        driver_allowance=allowance,
        extras=0.0,
        total_fare=round_currency(base + distance + allowance),
        distance_km=route.distance_km,
        duration_min=route.duration_min,
    )


def price_rental(request: FareRequest, route: RouteEstimate, rate: RentalRate) -> FareBreakdown:
    # overage is settled at trip completion, not here
    return FareBreakdown(
        vehicle_class=request.vehicle_class,
        service_type=request.service_type,
        calculation_method=CalculationMethod.PACKAGE,
        base=rate.base_fare,
        distance=0.0,
        time=0.0,
        surge=0.0,
        deadhead=0.0,
        driver_allowance=0.0,
        extras=0.0,
        total_fare=round_currency(rate.base_fare),
        distance_km=route.distance_km,
        duration_min=route.duration_min,
    )


def price_airport(request: FareRequest, route: RouteEstimate, fare: AirportFare) -> FareBreakdown:
    table_fare = fare.fare_for(request.airport_direction)
    return FareBreakdown(
        vehicle_class=request.vehicle_class,
        service_type=request.service_type,
        calculation_method=CalculationMethod.FIXED,
        base=table_fare,
        distance=0.0,
        time=0.0,
        surge=0.0,
        deadhead=0.0,
        driver_allowance=0.0,
        extras=0.0,
        total_fare=round_currency(table_fare),
        distance_km=route.distance_km,
        duration_min=route.duration_min,
    )
