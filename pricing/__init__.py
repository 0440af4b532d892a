"""
Pricing domain package.

Public API:
- Domain models: FareRequest, FareBreakdown, RentalPackage, VehicleClass, ServiceType, AirportDirection
- Rate tables: FareTables and its row types, default_fare_tables
- Entry points: FareCalculator, QuoteService
- Errors: PricingError, InvalidFareRequest, NoFareConfig
"""
from .engine import BatchPricingResult, FareCalculator
from .exceptions import InvalidFareRequest, NoFareConfig, PricingError
from .models import (
    AirportDirection,
    CalculationMethod,
    FareBreakdown,
    FareRequest,
    RentalPackage,
    ServiceType,
    VehicleClass,
)
from .policy import PricingPolicy, default_pricing_policy
from .quote_service import QuoteService
from .tables import (
    AirportFare,
    FareTables,
    OutstationRate,
    OutstationSlab,
    RentalRate,
    StandardRate,
    default_fare_tables,
)

__all__ = [
    "BatchPricingResult",
    "FareCalculator",
    "QuoteService",
    "PricingError",
    "InvalidFareRequest",
    "NoFareConfig",
    "AirportDirection",
    "CalculationMethod",
    "FareBreakdown",
    "FareRequest",
    "RentalPackage",
    "ServiceType",
    "VehicleClass",
    "PricingPolicy",
    "default_pricing_policy",
    "AirportFare",
    "FareTables",
    "OutstationRate",
    "OutstationSlab",
    "RentalRate",
    "StandardRate",
    "default_fare_tables",
]
