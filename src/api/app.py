"""FastAPI application factory for the fleet tracking service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from api.errors import register_exception_handlers
from api.routes import docs, metrics, statistics, vehicles
from api.websocket import ConnectionManager
from api.websocket import router as websocket_router
from broadcast.registry import SubscriberRegistry
from broadcast.scheduler import BroadcastScheduler
from fleet.simulator import VehicleSimulator
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


async def stop_broadcasting(app: FastAPI) -> None:
    """Stop the update scheduler, then close every subscriber with 1001.

    Runs from the server before it tears down open connections, and again
    from the lifespan; the second call finds nothing left to do.
    """
    state = app.state
    if state.scheduler.running or state.registry:
        logger.info("Shutting down gracefully...")
    await state.scheduler.stop()
    await state.connection_manager.shutdown(state.settings.websocket.close_grace_seconds)


def create_app(
    settings: Settings | None = None,
    simulator: VehicleSimulator | None = None,
) -> FastAPI:
    """Create FastAPI application with injected dependencies.

    Args:
        settings: Service settings; loaded from the environment when omitted
        simulator: Pre-built simulator (tests pass a seeded one); generated
            from the fleet settings when omitted
    """
    settings = settings or get_settings()
    simulator = simulator or VehicleSimulator.from_settings(settings.fleet)
    registry = SubscriberRegistry()
    connection_manager = ConnectionManager(registry)
    scheduler = BroadcastScheduler(
        simulator,
        registry,
        interval=settings.tick_interval_seconds,
        initial_delay=settings.fleet.initial_update_delay_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        """Manage application startup and shutdown."""
        await scheduler.start()
        yield
        await stop_broadcasting(app)

    app = FastAPI(
        title="Fleet Tracking API",
        version="1.0.0",
        description="REST API for fleet tracking with real-time WebSocket vehicle updates",
        lifespan=lifespan,
    )

    # Set core dependencies immediately (not in lifespan) so they're available for testing
    app.state.settings = settings
    app.state.simulator = simulator
    app.state.registry = registry
    app.state.scheduler = scheduler
    app.state.connection_manager = connection_manager

    origins = [origin.strip() for origin in settings.cors.origins.split(",")]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(vehicles.router, prefix="/api/vehicles", tags=["vehicles"])
    app.include_router(statistics.router, prefix="/api/statistics", tags=["statistics"])
    app.include_router(docs.router, prefix="/api", tags=["docs"])
    app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])
    app.include_router(websocket_router)

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/docs")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    return app
