"""Initial fleet generation around the San Francisco Bay Area."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from fleet.faker_provider import create_faker_instance
from fleet.vehicle import Location, Vehicle, VehicleStatus, utc_now

if TYPE_CHECKING:
    from faker.proxy import Faker

DEFAULT_FLEET_SIZE = 25

DESTINATIONS: list[str] = [
    "Downtown Office Building",
    "Residential Complex A",
    "Shopping Mall West",
    "Industrial District",
    "Airport Terminal 1",
    "Hospital Center",
    "University Campus",
    "Tech Park North",
    "Warehouse District",
    "Business Center East",
    "Retail Plaza",
    "Convention Center",
    "Sports Stadium",
    "Hotel Downtown",
    "Manufacturing Plant",
    "Distribution Center",
    "Corporate Headquarters",
    "Medical Center",
    "Shopping District",
    "Financial District",
]

BASE_LAT = 37.7749
BASE_LNG = -122.4194
SPAWN_SPREAD_DEGREES = 0.1  # roughly an 11 km radius

# Estimated arrival lands 10 to 70 minutes out
ETA_MIN_MS = 600_000
ETA_SPAN_MS = 3_600_000

EN_ROUTE_MIN_SPEED = 20
EN_ROUTE_MAX_SPEED = 79


def random_eta(rng: random.Random, now: datetime) -> datetime:
    return now + timedelta(milliseconds=ETA_MIN_MS + rng.randrange(ETA_SPAN_MS))


def random_cruising_speed(rng: random.Random) -> int:
    return rng.randint(EN_ROUTE_MIN_SPEED, EN_ROUTE_MAX_SPEED)


def generate_vehicle(
    index: int,
    rng: random.Random,
    fake: Faker,
    now: datetime | None = None,
) -> Vehicle:
    """Build vehicle number ``index`` (0-based) with randomized state."""
    now = now or utc_now()
    status = rng.choice(list(VehicleStatus))
    en_route = status is VehicleStatus.EN_ROUTE

    return Vehicle(
        id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
        vehicle_number=f"FL-{index + 1:03d}",
        driver_name=fake.driver_name(),
        driver_phone=fake.driver_phone_us(),
        status=status,
        destination=DESTINATIONS[index % len(DESTINATIONS)],
        current_location=Location(
            lat=BASE_LAT + rng.uniform(-SPAWN_SPREAD_DEGREES, SPAWN_SPREAD_DEGREES),
            lng=BASE_LNG + rng.uniform(-SPAWN_SPREAD_DEGREES, SPAWN_SPREAD_DEGREES),
        ),
        speed=random_cruising_speed(rng) if en_route else 0,
        last_updated=now,
        estimated_arrival=random_eta(rng, now) if en_route else None,
        battery_level=rng.randint(60, 99),
        fuel_level=rng.randint(30, 79),
    )


def generate_initial_fleet(
    size: int = DEFAULT_FLEET_SIZE,
    rng: random.Random | None = None,
    fake: Faker | None = None,
    now: datetime | None = None,
) -> list[Vehicle]:
    """Generate the startup fleet. Passing a seeded rng and faker makes it reproducible."""
    rng = rng or random.Random()
    fake = fake or create_faker_instance()
    now = now or utc_now()
    return [generate_vehicle(index, rng, fake, now) for index in range(size)]
