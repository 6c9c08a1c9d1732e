"""Embedded map server and the ``geoplot`` entry point.

A single uvicorn server per process hosts every plotted map. It runs in a
daemon thread with its own event loop, so notebook and script code keeps
running synchronously while pages stay connected in the background.

Example:
    Plot a map and keep working with it:
        >>> from eemaps.services.server import geoplot
        >>> app = geoplot(gm, open_browser=True)
        >>> app.url
        'http://127.0.0.1:53817/maps/3f9a1c2b7d4e'
"""

from __future__ import annotations

import functools
import threading
import time
import webbrowser
from typing import TYPE_CHECKING

import uvicorn
from loguru import logger

from eemaps import main
from eemaps.core import config, errors
from eemaps.services import bridge

if TYPE_CHECKING:
    from eemaps.models import geomap as geomap_models


class MapServer:
    """Background uvicorn server hosting the map app.

    Attributes:
        settings: Settings providing host, port, log level and timeouts.
        registry: Registry shared by the app and the MapApp handles.
        port: Bound port, known once the server has started.
    """

    def __init__(
        self,
        settings: config.Settings,
        registry: bridge.SessionRegistry,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.port: int | None = None
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return (
            self._server is not None
            and self._server.started
            and self._thread is not None
            and self._thread.is_alive()
        )

    @property
    def base_url(self) -> str:
        return f"http://{self.settings.host}:{self.port}"

    def start(self) -> None:
        """Start the server thread if it is not running yet.

        Raises:
            ServerStartError: If the server does not start within
                ``server_start_timeout_seconds``.
        """
        with self._lock:
            if self.is_running:
                return

            server_config = uvicorn.Config(
                main.create_app(self.registry),
                host=self.settings.host,
                port=self.settings.port,
                log_level=self.settings.log_level.lower(),
            )
            self._server = uvicorn.Server(server_config)
            self._thread = threading.Thread(
                target=self._server.run,
                name="eemaps-server",
                daemon=True,
            )
            self._thread.start()

            deadline = time.monotonic() + self.settings.server_start_timeout_seconds
            while not self._server.started:
                if not self._thread.is_alive() or time.monotonic() > deadline:
                    raise errors.ServerStartError(
                        f"The map server could not start on "
                        f"{self.settings.host}:{self.settings.port}"
                    )
                time.sleep(0.05)

            sockets = self._server.servers[0].sockets
            self.port = sockets[0].getsockname()[1]
            logger.info("Map server listening on {}", self.base_url)

    def stop(self) -> None:
        """Ask the server to exit and wait for its thread."""
        with self._lock:
            if self._server is None or self._thread is None:
                return
            self._server.should_exit = True
            self._thread.join(self.settings.server_start_timeout_seconds)
            self._server = None
            self._thread = None
            self.port = None


@functools.lru_cache
def get_server() -> MapServer:
    """Return the process-wide map server (not started)."""
    return MapServer(config.get_settings(), bridge.get_registry())


def geoplot(
    gm: geomap_models.GeoMap,
    *,
    open_browser: bool | None = None,
) -> bridge.MapApp:
    """Serve a map-state in the browser and return its live handle.

    Starts the embedded server on first use. In a notebook the returned
    handle renders itself as an inline frame; elsewhere open ``app.url``
    (or pass ``open_browser=True``).

    Args:
        gm: Map-state to render.
        open_browser: Open a browser tab; defaults to the
            ``EEMAPS_OPEN_BROWSER`` setting.

    Returns:
        MapApp handle accepted by ``add_layer``, ``get_features`` and
        ``add_drawn_layer``.

    Raises:
        ServerStartError: If the embedded server cannot start.
    """
    server = get_server()
    server.start()

    map_id = server.registry.register(gm)
    app = bridge.MapApp(
        map_id=map_id,
        url=f"{server.base_url}/maps/{map_id}",
        registry=server.registry,
        height=server.settings.map_height,
    )
    logger.info("Map {} available at {}", map_id, app.url)

    if server.settings.open_browser if open_browser is None else open_browser:
        webbrowser.open(app.url)
    return app
