import pytest
from pydantic import ValidationError

from settings import (
    CORSSettings,
    FleetSettings,
    ServerSettings,
    Settings,
    WebSocketSettings,
    get_settings,
)


@pytest.mark.unit
class TestFleetSettings:
    def test_defaults(self):
        settings = FleetSettings()
        assert settings.size == 25
        assert settings.seed is None
        assert settings.update_interval_seconds == 180.0
        assert settings.initial_update_delay_seconds == 5.0
        assert settings.development_update_interval_seconds == 30.0

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("FLEET_SIZE", "10")
        monkeypatch.setenv("FLEET_SEED", "7")
        monkeypatch.setenv("FLEET_UPDATE_INTERVAL_SECONDS", "60")

        settings = FleetSettings()
        assert settings.size == 10
        assert settings.seed == 7
        assert settings.update_interval_seconds == 60.0

    def test_validation(self):
        with pytest.raises(ValidationError):
            FleetSettings(size=0)

        with pytest.raises(ValidationError):
            FleetSettings(size=1001)

        with pytest.raises(ValidationError):
            FleetSettings(update_interval_seconds=0.5)


@pytest.mark.unit
class TestWebSocketSettings:
    def test_defaults(self):
        settings = WebSocketSettings()
        assert settings.keepalive_interval_seconds == 30.0
        assert settings.queue_size == 16

    def test_queue_size_bounds(self):
        with pytest.raises(ValidationError):
            WebSocketSettings(queue_size=0)

    def test_keepalive_must_be_positive(self):
        with pytest.raises(ValidationError):
            WebSocketSettings(keepalive_interval_seconds=0)


@pytest.mark.unit
class TestServerSettings:
    def test_defaults(self):
        settings = ServerSettings()
        assert settings.port == 3001
        assert settings.environment == "production"
        assert settings.log_format == "text"

    def test_rejects_unknown_environment(self):
        with pytest.raises(ValidationError):
            ServerSettings(environment="staging")

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "8080")
        monkeypatch.setenv("SERVER_LOG_LEVEL", "DEBUG")

        settings = ServerSettings()
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"


@pytest.mark.unit
class TestSettings:
    def test_get_settings_returns_all_groups(self):
        settings = get_settings()
        assert isinstance(settings.fleet, FleetSettings)
        assert isinstance(settings.websocket, WebSocketSettings)
        assert isinstance(settings.server, ServerSettings)
        assert isinstance(settings.cors, CORSSettings)

    def test_tick_interval_in_production(self):
        settings = Settings(server=ServerSettings(environment="production"))
        assert settings.tick_interval_seconds == 180.0

    def test_tick_interval_in_development(self):
        settings = Settings(server=ServerSettings(environment="development"))
        assert settings.tick_interval_seconds == 30.0
