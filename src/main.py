"""
Fleet Tracking Service - Entry Point

Runs the fleet simulator, the broadcast scheduler and the FastAPI
REST/WebSocket surface in a single asyncio process under uvicorn.
"""

import logging
import math
import socket

import uvicorn

from api.app import create_app, stop_broadcasting
from settings import Settings, get_settings
from sim_logging import setup_logging

logger = logging.getLogger(__name__)


class FleetServer(uvicorn.Server):
    """uvicorn server that closes subscribers before dropping connections.

    uvicorn shuts open WebSockets down with 1012 and only then runs the
    lifespan shutdown, so the scheduler and the 1001 close have to happen
    here first.
    """

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        await stop_broadcasting(self.config.app)
        await super().shutdown(sockets=sockets)


def graceful_shutdown_timeout(grace_seconds: float) -> int:
    """Whole seconds uvicorn waits for connections; never unbounded."""
    return max(1, math.ceil(grace_seconds))


def build_server(settings: Settings) -> FleetServer:
    app = create_app(settings)
    keepalive = settings.websocket.keepalive_interval_seconds
    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
        ws_ping_interval=keepalive,
        ws_ping_timeout=keepalive,
        timeout_graceful_shutdown=graceful_shutdown_timeout(
            settings.websocket.close_grace_seconds
        ),
    )
    return FleetServer(config)


def main() -> None:
    """Main entry point - initializes and runs the service."""
    settings = get_settings()

    setup_logging(
        level=settings.server.log_level,
        json_output=settings.server.log_format == "json",
        environment=settings.server.environment,
    )

    server = build_server(settings)

    if settings.server.environment == "development":
        logger.info(
            f"Development mode: vehicle updates every {settings.tick_interval_seconds:g} seconds"
        )

    logger.info(f"Fleet Tracking API listening on http://{settings.server.host}:{settings.server.port}")
    logger.info(f"API documentation: http://localhost:{settings.server.port}/docs")
    logger.info(f"WebSocket: ws://localhost:{settings.server.port}")

    server.run()


if __name__ == "__main__":
    main()
