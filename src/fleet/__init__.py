"""Simulated fleet: vehicle records, snapshot views and the tick simulator."""

from .generator import DESTINATIONS, generate_initial_fleet
from .simulator import VehicleSimulator
from .snapshot import FleetSnapshot
from .vehicle import Location, Vehicle, VehicleStatus, format_timestamp

__all__ = [
    "DESTINATIONS",
    "FleetSnapshot",
    "Location",
    "Vehicle",
    "VehicleSimulator",
    "VehicleStatus",
    "format_timestamp",
    "generate_initial_fleet",
]
