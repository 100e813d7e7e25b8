import random

import pytest

from fleet.faker_provider import create_faker_instance
from fleet.generator import generate_initial_fleet
from fleet.simulator import VehicleSimulator
from fleet.vehicle import Vehicle
from settings import FleetSettings, Settings, WebSocketSettings
from tests.factories import FIXED_NOW, VehicleFactory


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for deterministic fleets."""
    return random.Random(42)


@pytest.fixture
def fake():
    """Seeded Faker instance for deterministic driver identities."""
    return create_faker_instance(seed=42)


@pytest.fixture
def vehicle_factory() -> VehicleFactory:
    """Factory for vehicles with overridable fields."""
    return VehicleFactory()


@pytest.fixture
def fleet(rng, fake) -> list[Vehicle]:
    return generate_initial_fleet(5, rng=rng, fake=fake, now=FIXED_NOW)


@pytest.fixture
def simulator(fleet, rng) -> VehicleSimulator:
    return VehicleSimulator(fleet, rng=rng)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        fleet=FleetSettings(size=5, seed=42, initial_update_delay_seconds=0.3),
        websocket=WebSocketSettings(keepalive_interval_seconds=30.0, queue_size=8),
    )


@pytest.fixture
def test_client(test_settings, simulator):
    """FastAPI test client backed by a seeded five-vehicle fleet."""
    from fastapi.testclient import TestClient

    from api.app import create_app

    app = create_app(settings=test_settings, simulator=simulator)
    return TestClient(app, raise_server_exceptions=False)
