"""Fleet state owner and per-tick simulation rules."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from fleet.faker_provider import create_faker_instance
from fleet.generator import (
    DESTINATIONS,
    generate_initial_fleet,
    random_cruising_speed,
    random_eta,
)
from fleet.snapshot import FleetSnapshot
from fleet.vehicle import Vehicle, VehicleStatus, utc_now

if TYPE_CHECKING:
    from settings import FleetSettings

logger = logging.getLogger(__name__)

TRANSITION_ATTEMPT_PROBABILITY = 0.05
TRANSITION_PROBABILITIES = {
    VehicleStatus.IDLE: 0.7,
    VehicleStatus.EN_ROUTE: 0.3,
    VehicleStatus.DELIVERED: 0.4,
}
MOVEMENT_DELIVERY_PROBABILITY = 0.1

PARKED_JITTER_DEGREES = 0.00005
EN_ROUTE_JITTER_DEGREES = 0.001

BATTERY_DRAIN_FLOOR = 20


def mark_delivered(vehicle: Vehicle) -> None:
    vehicle.status = VehicleStatus.DELIVERED
    vehicle.estimated_arrival = None
    vehicle.speed = 0


def apply_status_transition(vehicle: Vehicle, rng: random.Random, now: datetime) -> None:
    """Occasionally move the vehicle along idle -> en_route -> delivered -> idle."""
    if rng.random() >= TRANSITION_ATTEMPT_PROBABILITY:
        return
    if rng.random() >= TRANSITION_PROBABILITIES[vehicle.status]:
        return

    if vehicle.status is VehicleStatus.IDLE:
        vehicle.status = VehicleStatus.EN_ROUTE
        vehicle.estimated_arrival = random_eta(rng, now)
    elif vehicle.status is VehicleStatus.EN_ROUTE:
        mark_delivered(vehicle)
    else:
        vehicle.status = VehicleStatus.IDLE
        vehicle.destination = rng.choice(DESTINATIONS)


def apply_movement(vehicle: Vehicle, rng: random.Random, now: datetime) -> None:
    """Jitter position according to status and refresh speed and timestamp."""
    location = vehicle.current_location
    if vehicle.status is VehicleStatus.EN_ROUTE:
        location.lat += rng.uniform(-EN_ROUTE_JITTER_DEGREES, EN_ROUTE_JITTER_DEGREES)
        location.lng += rng.uniform(-EN_ROUTE_JITTER_DEGREES, EN_ROUTE_JITTER_DEGREES)
        vehicle.speed = random_cruising_speed(rng)
        # Independent of the transition stage; both may deliver in one tick
        if rng.random() < MOVEMENT_DELIVERY_PROBABILITY:
            mark_delivered(vehicle)
    else:
        location.lat += rng.uniform(-PARKED_JITTER_DEGREES, PARKED_JITTER_DEGREES)
        location.lng += rng.uniform(-PARKED_JITTER_DEGREES, PARKED_JITTER_DEGREES)
        vehicle.speed = 0

    vehicle.last_updated = now


def drain_battery(vehicle: Vehicle, rng: random.Random) -> None:
    if vehicle.battery_level > BATTERY_DRAIN_FLOOR:
        vehicle.battery_level = max(0, vehicle.battery_level - rng.randint(0, 1))


class VehicleSimulator:
    """Owns the canonical fleet and advances it one tick at a time.

    Readers only ever see complete snapshots: ``advance`` mutates private
    copies of the current vehicles and swaps in a new ``FleetSnapshot`` once
    every vehicle has been updated.
    """

    def __init__(
        self,
        vehicles: Iterable[Vehicle],
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        vehicles = tuple(vehicles)
        ids = [vehicle.id for vehicle in vehicles]
        if len(set(ids)) != len(ids):
            raise ValueError("Vehicle identifiers must be unique")

        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot = FleetSnapshot(vehicles=vehicles, taken_at=clock(), tick=0)

    @classmethod
    def from_settings(cls, settings: FleetSettings) -> VehicleSimulator:
        """Build a simulator with a freshly generated fleet."""
        rng = random.Random(settings.seed)
        fake = create_faker_instance(settings.seed)
        vehicles = generate_initial_fleet(settings.size, rng=rng, fake=fake)
        logger.info(f"Generated fleet of {len(vehicles)} vehicles")
        return cls(vehicles, rng=rng)

    @property
    def tick_count(self) -> int:
        return self._snapshot.tick

    def snapshot(self) -> FleetSnapshot:
        """Current published snapshot."""
        return self._snapshot

    def advance(self) -> FleetSnapshot:
        """Run one simulation tick over every vehicle and publish the result."""
        with self._lock:
            now = self._clock()
            current = self._snapshot
            updated = tuple(self._step(vehicle.model_copy(deep=True), now) for vehicle in current)
            self._snapshot = FleetSnapshot(vehicles=updated, taken_at=now, tick=current.tick + 1)
            return self._snapshot

    def _step(self, vehicle: Vehicle, now: datetime) -> Vehicle:
        apply_status_transition(vehicle, self._rng, now)
        apply_movement(vehicle, self._rng, now)
        drain_battery(vehicle, self._rng)
        return vehicle
