"""Custom exceptions for fare pricing."""


class PricingError(Exception):
    """Base class for every pricing failure."""
    pass


class InvalidFareRequest(PricingError, ValueError):
    """Raised when a fare request is rejected before any pricing attempt."""
    pass


class NoFareConfig(PricingError):
    """Raised when no rate, package or table row exists for the requested key."""

    def __init__(self, service_type, vehicle_class, detail=None):
        self.service_type = service_type
        self.vehicle_class = vehicle_class
        self.detail = detail
        message = f"No {getattr(service_type, 'value', service_type)} fare config for {getattr(vehicle_class, 'value', vehicle_class)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
