from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FleetSettings(BaseSettings):
    size: int = Field(default=25, ge=1, le=1000)
    seed: int | None = None
    update_interval_seconds: float = Field(default=180.0, ge=1.0)
    initial_update_delay_seconds: float = Field(default=5.0, ge=0.0)
    development_update_interval_seconds: float = Field(
        default=30.0,
        ge=1.0,
        description="Tick period used instead of update_interval_seconds in development",
    )

    model_config = SettingsConfigDict(env_prefix="FLEET_")


class WebSocketSettings(BaseSettings):
    keepalive_interval_seconds: float = Field(default=30.0, gt=0.0)
    queue_size: int = Field(
        default=16,
        ge=1,
        le=1024,
        description="Outbound messages buffered per subscriber before it is dropped",
    )
    close_grace_seconds: float = Field(default=5.0, ge=0.0)

    model_config = SettingsConfigDict(env_prefix="WS_")


class ServerSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = Field(default=3001, ge=1, le=65535)
    environment: Literal["development", "production"] = "production"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class CORSSettings(BaseSettings):
    origins: str = "*"

    model_config = SettingsConfigDict(env_prefix="CORS_")


class Settings(BaseSettings):
    fleet: FleetSettings = Field(default_factory=FleetSettings)
    websocket: WebSocketSettings = Field(default_factory=WebSocketSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @property
    def tick_interval_seconds(self) -> float:
        if self.server.environment == "development":
            return self.fleet.development_update_interval_seconds
        return self.fleet.update_interval_seconds


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
