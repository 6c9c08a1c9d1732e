"""FastAPI application that hosts the browser map widget.

This module provides the application factory used by the embedded map
server. The app serves the map pages, their map-state JSON and static
assets, keeps the WebSocket live sessions, and exposes a health check.

Example:
    The embedded server is normally started by ``geoplot``, but the app can
    also be run on its own with uvicorn:
        $ uvicorn eemaps.main:create_app --factory --port 8765

    Or imported and used programmatically:
        >>> from eemaps.main import create_app
        >>> app = create_app(registry)
"""

from __future__ import annotations

import fastapi
from fastapi import staticfiles

from eemaps.api import maps
from eemaps.core import config
from eemaps.core import logging as eemaps_logging
from eemaps.services import bridge


def create_app(registry: bridge.SessionRegistry | None = None) -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Args:
        registry: Registry of map-states and live sessions to serve. The
            process-wide registry is used when omitted.

    Returns:
        Configured FastAPI application instance ready for an ASGI server.
    """
    settings = config.get_settings()
    eemaps_logging.setup_logging(settings.log_level)

    app = fastapi.FastAPI(title="eemaps", version="0.1.0")
    app.state.registry = registry if registry is not None else bridge.get_registry()

    app.include_router(maps.router)
    app.mount(
        "/static",
        staticfiles.StaticFiles(directory=maps.STATIC_DIR),
        name="static",
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint.

        Returns:
            Dictionary with status "ok" if the server is running.
        """
        return {"status": "ok"}

    return app
