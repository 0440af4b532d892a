"""
Drivers domain package.

Public API:
- DriverSnapshot, VehicleInfo
"""
from .models import DriverSnapshot, VehicleInfo

__all__ = ["DriverSnapshot", "VehicleInfo"]
