"""Shared builders and invariant checks for fleet tests."""

from datetime import UTC, datetime
from typing import Any

from fleet.vehicle import Location, Vehicle, VehicleStatus

FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


class VehicleFactory:
    """Builds vehicles with sequential ids and overridable fields."""

    def __init__(self) -> None:
        self._count = 0

    def vehicle(self, **overrides: Any) -> Vehicle:
        self._count += 1
        fields: dict[str, Any] = {
            "id": f"vehicle-{self._count}",
            "vehicle_number": f"FL-{self._count:03d}",
            "driver_name": "Jane Doe",
            "driver_phone": "+14155550100",
            "status": VehicleStatus.IDLE,
            "destination": "Retail Plaza",
            "current_location": Location(lat=37.7749, lng=-122.4194),
            "speed": 0,
            "last_updated": FIXED_NOW,
            "estimated_arrival": None,
            "battery_level": 80,
            "fuel_level": 50,
        }
        fields.update(overrides)
        return Vehicle(**fields)


def assert_vehicle_invariants(vehicle: Vehicle) -> None:
    assert vehicle.status in set(VehicleStatus)
    assert (vehicle.estimated_arrival is not None) == (vehicle.status is VehicleStatus.EN_ROUTE)
    if vehicle.status in (VehicleStatus.IDLE, VehicleStatus.DELIVERED):
        assert vehicle.speed == 0
    assert 0 <= vehicle.battery_level <= 100
    assert 0 <= vehicle.fuel_level <= 100
