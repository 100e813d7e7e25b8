from unittest.mock import AsyncMock, patch

import pytest
import uvicorn
from fastapi import FastAPI

import main
from broadcast.registry import CLOSE_GOING_AWAY, Subscriber
from settings import Settings, WebSocketSettings


@pytest.mark.unit
class TestMain:
    @pytest.fixture(autouse=True)
    def _no_logging_setup(self):
        with patch.object(main, "setup_logging") as setup:
            yield setup

    def test_runs_server_with_settings(self, monkeypatch, _no_logging_setup):
        monkeypatch.setenv("SERVER_PORT", "4000")
        monkeypatch.setenv("WS_KEEPALIVE_INTERVAL_SECONDS", "15")

        with patch.object(main.FleetServer, "run") as run:
            main.main()

        run.assert_called_once()
        _no_logging_setup.assert_called_once()

    def test_json_logging_selected_from_settings(self, monkeypatch, _no_logging_setup):
        monkeypatch.setenv("SERVER_LOG_FORMAT", "json")

        with patch.object(main.FleetServer, "run"):
            main.main()

        assert _no_logging_setup.call_args.kwargs["json_output"] is True


@pytest.mark.unit
class TestBuildServer:
    def test_server_config(self):
        settings = Settings(websocket=WebSocketSettings(keepalive_interval_seconds=15))

        server = main.build_server(settings)

        assert isinstance(server, uvicorn.Server)
        config = server.config
        assert isinstance(config.app, FastAPI)
        assert config.port == 3001
        assert config.log_config is None
        assert config.timeout_graceful_shutdown == 5

    def test_transport_keepalive_uses_keepalive_interval(self):
        """Ping frames and their timeout both follow the keepalive setting."""
        settings = Settings(websocket=WebSocketSettings(keepalive_interval_seconds=15))

        config = main.build_server(settings).config

        assert config.ws_ping_interval == 15.0
        assert config.ws_ping_timeout == 15.0

    @pytest.mark.parametrize(
        ("grace", "expected"),
        [(5.0, 5), (2.5, 3), (0.5, 1), (0.0, 1)],
    )
    def test_graceful_shutdown_is_always_bounded(self, grace, expected):
        settings = Settings(websocket=WebSocketSettings(close_grace_seconds=grace))

        config = main.build_server(settings).config

        assert config.timeout_graceful_shutdown == expected


@pytest.mark.unit
class TestFleetServerShutdown:
    @pytest.mark.asyncio
    async def test_closes_subscribers_before_connections(self):
        server = main.build_server(Settings())
        app = server.config.app
        calls = []

        async def stop_scheduler():
            calls.append("scheduler")

        async def close_subscribers(grace):
            calls.append(("subscribers", grace))

        async def server_shutdown(self, sockets=None):
            calls.append("connections")

        with (
            patch.object(app.state.scheduler, "stop", side_effect=stop_scheduler),
            patch.object(
                app.state.connection_manager, "shutdown", side_effect=close_subscribers
            ),
            patch.object(uvicorn.Server, "shutdown", server_shutdown),
        ):
            await server.shutdown()

        assert calls == ["scheduler", ("subscribers", 5.0), "connections"]

    @pytest.mark.asyncio
    async def test_subscribers_get_going_away_code(self):
        server = main.build_server(Settings())
        subscriber = Subscriber("c1")
        server.config.app.state.registry.register(subscriber)

        with patch.object(uvicorn.Server, "shutdown", AsyncMock()) as server_shutdown:
            await server.shutdown()

        assert subscriber.close_code == CLOSE_GOING_AWAY
        assert len(server.config.app.state.registry) == 0
        server_shutdown.assert_awaited_once()
