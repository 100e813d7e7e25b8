"""End-to-end tests for the WebSocket subscription channel."""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from fleet.simulator import VehicleSimulator
from settings import FleetSettings, ServerSettings, Settings


@pytest.mark.unit
class TestInitialData:
    """Tests for the snapshot sent on connect."""

    @pytest.mark.parametrize("path", ["/", "/ws"])
    def test_connect_receives_initial_data(self, test_client, path):
        with test_client.websocket_connect(path) as websocket:
            message = websocket.receive_json()

        assert message["type"] == "initial_data"
        assert len(message["data"]) == 5
        assert message["message"] == (
            "Connected to Fleet Tracking WebSocket. Updates every 3 minutes."
        )
        assert message["timestamp"].endswith("Z")

    def test_matches_rest_listing(self, test_client):
        vehicles = test_client.get("/api/vehicles").json()["data"]

        with test_client.websocket_connect("/ws") as websocket:
            message = websocket.receive_json()

        assert message["data"] == vehicles

    def test_development_greeting_uses_short_interval(self, simulator):
        settings = Settings(server=ServerSettings(environment="development"))
        client = TestClient(create_app(settings=settings, simulator=simulator))

        with client.websocket_connect("/ws") as websocket:
            message = websocket.receive_json()

        assert message["message"].endswith("Updates every 30 seconds.")


@pytest.mark.unit
class TestInboundMessages:
    """Tests for client-to-server messages."""

    def test_ping_pong(self, test_client):
        with test_client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_json({"type": "ping"})
            response = websocket.receive_json()

        assert response["type"] == "pong"

    def test_malformed_message_keeps_connection_open(self, test_client):
        with test_client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_text("{not json")
            websocket.send_json({"type": "ping"})
            response = websocket.receive_json()

        assert response["type"] == "pong"


@pytest.mark.unit
class TestSubscriberLifecycle:
    """Tests for registration, removal and scheduled delivery."""

    def test_multiple_clients_are_registered(self, test_client):
        registry = test_client.app.state.registry

        with test_client.websocket_connect("/ws") as first:
            first.receive_json()
            with test_client.websocket_connect("/") as second:
                second.receive_json()
                assert len(registry) == 2

    def test_disconnect_removes_subscriber(self, test_client):
        registry = test_client.app.state.registry

        with test_client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            assert len(registry) == 1

        assert len(registry) == 0
        assert test_client.app.state.connection_manager.active_connections == set()

    def test_scheduled_update_reaches_subscriber(self):
        settings = Settings(
            fleet=FleetSettings(
                size=3,
                seed=7,
                update_interval_seconds=1.0,
                initial_update_delay_seconds=0.2,
            )
        )
        simulator = VehicleSimulator.from_settings(settings.fleet)
        app = create_app(settings=settings, simulator=simulator)

        with TestClient(app) as client, client.websocket_connect("/ws") as websocket:
            initial = websocket.receive_json()
            update = websocket.receive_json()

        assert initial["type"] == "initial_data"
        assert update["type"] == "vehicle_update"
        assert update["message"] == "Vehicle positions updated automatically"
        assert [v["id"] for v in update["data"]] == [v["id"] for v in initial["data"]]
        assert simulator.tick_count >= 1
