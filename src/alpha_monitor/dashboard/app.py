"""FastAPI dashboard application factory with JSON API and WebSocket hub."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from alpha_monitor.dashboard.routes import api, ws
from alpha_monitor.dashboard.routes.ws import DashboardHub


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.

    Returns:
        Configured FastAPI application with API routes and the WebSocket hub.
    """
    app = FastAPI(
        title="Alpha Stability Monitor",
        lifespan=lifespan,
    )

    app.state.hub = DashboardHub()

    app.include_router(api.router, prefix="/api")
    app.include_router(ws.router)

    return app
