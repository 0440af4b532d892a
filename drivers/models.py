"""
Purpose: Core data models for the drivers domain.
What it does:
Defines the read-only driver snapshot handed to the customer once a driver is
assigned, without relying on any backend payload format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DEFAULT_DRIVER_NAME = "Driver"
DEFAULT_DRIVER_RATING = 5.0


@dataclass(frozen=True)
class VehicleInfo:
    make: str = ""
    model: str = ""
    registration: str = ""
    color: str = ""
    vehicle_type: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.make} {self.model}".strip()


@dataclass(frozen=True)
class DriverSnapshot:
    """
    A purely stateless picture of the assigned driver at assignment time.
    """
    driver_id: str
    name: str = DEFAULT_DRIVER_NAME
    phone: Optional[str] = None
    vehicle: VehicleInfo = field(default_factory=VehicleInfo)
    rating: float = DEFAULT_DRIVER_RATING
    total_rides: int = 0

    @classmethod
    def placeholder(cls, driver_id: str) -> DriverSnapshot:
        """Used when the driver directory cannot be reached."""
        return cls(driver_id=driver_id)

    @classmethod
    def from_payload(cls, driver_id: str, payload: Dict[str, Any]) -> DriverSnapshot:
        """
        Build a snapshot from a loosely-typed directory payload of the shape
        {name, phone, rating, total_rides, vehicle: {make, model, registration, color, type}}.
        Missing fields fall back to the defaults.
        """
        vehicle = payload.get("vehicle") or {}
        if isinstance(vehicle, VehicleInfo):
            vehicle_info = vehicle
        else:
            vehicle_info = VehicleInfo(
                make=vehicle.get("make") or "",
                model=vehicle.get("model") or "",
                registration=vehicle.get("registration") or "",
                color=vehicle.get("color") or "",
                vehicle_type=vehicle.get("type") or "",
            )

        return cls(
            driver_id=driver_id,
            name=payload.get("name") or DEFAULT_DRIVER_NAME,
            phone=payload.get("phone"),
            vehicle=vehicle_info,
            rating=float(payload.get("rating") or DEFAULT_DRIVER_RATING),
            total_rides=int(payload.get("total_rides") or 0),
        )
