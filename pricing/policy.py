"""
Purpose: Central configuration for pricing behavior (single source of truth).
What it does:

Stores the fixed business-policy thresholds:

INCLUDED_KM = 4 (standard base fare covers the first 4 km)

OUTSTATION_SLAB_MAX_KM = 300 / OUTSTATION_SLAB_MAX_DAYS = 1

SERVICE_HUB = Hosur bus stand (12.7402, 77.8240)

Rule: No logic here, just parameters so you can tune without rewriting code.
Per-vehicle rates live in pricing/tables.py, not here.
"""

from __future__ import annotations

from dataclasses import dataclass

from routing.geo import Coordinate, is_valid_coordinate
from routing.geofence import INNER_RING, OUTER_RING


@dataclass(frozen=True)
class PricingPolicy:
    """
    Central configuration for fare calculation.

    Notes:
    - included_km is covered by the standard base fare; only distance beyond it is charged.
    - the outstation slab model applies only to trips of at most
      outstation_slab_max_days days AND at most outstation_slab_max_km km.
    - the deadhead surcharge is half the destination -> service_hub distance
      at the vehicle's per-km rate.
    """

    # --- Standard ---
    included_km: float = 4.0

    # --- Outstation slab cutoff ---
    outstation_slab_max_km: float = 300.0
    outstation_slab_max_days: int = 1

    # --- Deadhead ---
    service_hub: Coordinate = Coordinate(12.7402, 77.8240)
    inner_zone_name: str = INNER_RING
    outer_zone_name: str = OUTER_RING

    # --- Route fallback ---
    average_speed_kmh: float = 30.0

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup.
        """
        if self.included_km < 0:
            raise ValueError("included_km must be >= 0")

        if self.outstation_slab_max_km <= 0:
            raise ValueError("outstation_slab_max_km must be > 0")

        if self.outstation_slab_max_days < 1:
            raise ValueError("outstation_slab_max_days must be >= 1")

        if not is_valid_coordinate(self.service_hub):
            raise ValueError("service_hub must be a valid coordinate")

        if self.inner_zone_name == self.outer_zone_name:
            raise ValueError("inner and outer zone names must differ")

        if self.average_speed_kmh <= 0:
            raise ValueError("average_speed_kmh must be > 0")


def default_pricing_policy() -> PricingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = PricingPolicy()
    p.validate()
    return p
