"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request

from fleet.simulator import VehicleSimulator
from fleet.snapshot import FleetSnapshot


def get_simulator(request: Request) -> VehicleSimulator:
    """Retrieve VehicleSimulator from app state."""
    return request.app.state.simulator


def get_snapshot(simulator: Annotated[VehicleSimulator, Depends(get_simulator)]) -> FleetSnapshot:
    """Current fleet snapshot; one consistent view per request."""
    return simulator.snapshot()


SnapshotDep = Annotated[FleetSnapshot, Depends(get_snapshot)]
