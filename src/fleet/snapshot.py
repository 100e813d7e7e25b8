"""Immutable view of the whole fleet at one tick."""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from functools import cached_property
from typing import Any

from fleet.vehicle import Vehicle, VehicleStatus


@dataclass(frozen=True)
class FleetSnapshot:
    """All vehicle records as of ``taken_at``.

    Snapshots are never mutated after the simulator publishes them, so the
    wire form is computed at most once and shared by every subscriber.
    """

    vehicles: tuple[Vehicle, ...]
    taken_at: datetime
    tick: int = 0

    def __len__(self) -> int:
        return len(self.vehicles)

    def __iter__(self) -> Iterator[Vehicle]:
        return iter(self.vehicles)

    def get(self, vehicle_id: str) -> Vehicle | None:
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def by_status(self, status: VehicleStatus) -> list[Vehicle]:
        return [v for v in self.vehicles if v.status == status]

    def status_counts(self) -> dict[VehicleStatus, int]:
        counts = {status: 0 for status in VehicleStatus}
        for vehicle in self.vehicles:
            counts[vehicle.status] += 1
        return counts

    def average_speed(self) -> int:
        """Mean speed rounded half up; 0 for an empty fleet."""
        if not self.vehicles:
            return 0
        mean = sum(v.speed for v in self.vehicles) / len(self.vehicles)
        return int(mean + 0.5)

    @cached_property
    def wire(self) -> list[dict[str, Any]]:
        return [vehicle.to_wire() for vehicle in self.vehicles]
