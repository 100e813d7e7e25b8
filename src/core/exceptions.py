"""Standardized exception hierarchy for the fleet tracking service."""

from typing import Any


class FleetError(Exception):
    """Base exception for all fleet tracking errors."""

    label = "Fleet error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(FleetError):
    """Requested entity does not exist."""

    label = "Not found"


class VehicleNotFoundError(NotFoundError):
    """No vehicle with the requested identifier."""

    label = "Vehicle not found"

    def __init__(self, vehicle_id: str):
        super().__init__(
            f"Vehicle with ID {vehicle_id} does not exist",
            details={"vehicle_id": vehicle_id},
        )
        self.vehicle_id = vehicle_id


class ValidationError(FleetError):
    """Invalid input or data format."""

    label = "Invalid input"


class InvalidStatusError(ValidationError):
    """Status filter is not one of the known vehicle statuses."""

    label = "Invalid status"

    def __init__(self, status: str, allowed: list[str]):
        super().__init__(
            f"Status must be one of: {', '.join(allowed)}",
            details={"status": status, "allowed": allowed},
        )
        self.status = status


class DeliveryError(FleetError):
    """A subscriber's delivery channel refused a message."""

    label = "Delivery failed"
