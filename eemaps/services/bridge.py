"""Live-session bridge between Python and open map pages.

Each map page opened in a browser connects back to the embedded server over
a WebSocket. The connection is wrapped in a :class:`BrowserSession`, which
lets caller-side (synchronous) code push typed messages into the server's
event loop and wait for the page's replies. A :class:`SessionRegistry` keeps
the map-states served by the process and the session currently attached to
each of them.

Caller-facing operations (:func:`add_layer`, :func:`get_features`,
:func:`add_drawn_layer`) take the :class:`MapApp` handle returned by
``geoplot`` and always verify, before touching the page, that the handle is
a GeoMap and that its page is connected.

Example:
    Push a layer into an open map and read back what the user drew:
        >>> app = geoplot(geomap(osm))
        >>> app.wait_until_open()
        >>> add_layer(app, layer(parcels, color="#ff7800"))
        >>> drawn = get_features(app)  # GeoDataFrame in EPSG:4326
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import dataclasses
import enum
import functools
import html
import threading
import uuid
from typing import TYPE_CHECKING

import fastapi
from loguru import logger

from eemaps.core import config, errors
from eemaps.models import layers as layer_models
from eemaps.models import messages
from eemaps.services import conversion

if TYPE_CHECKING:
    import geopandas as gpd

    from eemaps.models import geomap as geomap_models

GEOMAP_TITLE = "GeoMap"

_CLOSED_REMEDY = (
    "The provided GeoMap's browser session is not open. Please ensure the map "
    "is displayed by re-running geoplot (e.g., app = geoplot(my_geo_map)) or "
    "reassign the variable. If the map is displayed in a separate window, keep "
    "that window open for interactive functionality."
)


class SessionStatus(enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


class BrowserSession:
    """One connected map page.

    The session is created on the server's event loop when the page opens
    its WebSocket; :meth:`send` and :meth:`request` are meant to be called
    from any other thread and block until the loop has done the work.
    """

    def __init__(
        self,
        map_id: str,
        websocket: fastapi.WebSocket,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.map_id = map_id
        self.status = SessionStatus.OPEN
        self._websocket = websocket
        self._loop = loop
        self._lock = threading.Lock()
        self._pending: dict[str, concurrent.futures.Future[messages.Features]] = {}

    @property
    def is_open(self) -> bool:
        return self.status is SessionStatus.OPEN

    def send(
        self,
        message: messages.AddOverlay | messages.AddDrawnOverlay | messages.GetFeatures,
        timeout: float | None = None,
    ) -> None:
        """Send a message to the page and wait until it is written.

        Raises:
            SessionClosedError: If the page disconnected.
            BridgeTimeoutError: If the write did not complete in time.
        """
        if not self.is_open:
            raise errors.SessionClosedError(_CLOSED_REMEDY)

        timeout = timeout or config.get_settings().bridge_timeout_seconds
        future = asyncio.run_coroutine_threadsafe(
            self._websocket.send_text(message.model_dump_json()),
            self._loop,
        )
        try:
            future.result(timeout)
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            raise errors.BridgeTimeoutError(
                f"Timed out after {timeout}s sending {message.type!r} to the map"
            ) from exc
        except (RuntimeError, OSError, fastapi.WebSocketDisconnect) as exc:
            self.close()
            raise errors.SessionClosedError(_CLOSED_REMEDY) from exc

    def request(
        self,
        message: messages.GetFeatures,
        timeout: float | None = None,
    ) -> messages.Features:
        """Send a request and block until the page answers it."""
        timeout = timeout or config.get_settings().bridge_timeout_seconds
        reply: concurrent.futures.Future[messages.Features] = (
            concurrent.futures.Future()
        )
        with self._lock:
            self._pending[message.request_id] = reply
        try:
            self.send(message, timeout)
            try:
                return reply.result(timeout)
            except concurrent.futures.TimeoutError as exc:
                raise errors.BridgeTimeoutError(
                    f"The map did not answer {message.type!r} within {timeout}s"
                ) from exc
        finally:
            with self._lock:
                self._pending.pop(message.request_id, None)

    def dispatch(self, message: messages.Features) -> None:
        """Resolve the pending request a reply from the page answers."""
        with self._lock:
            reply = self._pending.get(message.request_id)
        if reply is None:
            logger.warning(
                "Dropping reply to unknown request {} on map {}",
                message.request_id,
                self.map_id,
            )
            return
        if not reply.done():
            reply.set_result(message)

    def close(self) -> None:
        """Mark the session closed and fail every pending request."""
        self.status = SessionStatus.CLOSED
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for reply in pending:
            if not reply.done():
                reply.set_exception(errors.SessionClosedError(_CLOSED_REMEDY))


class SessionRegistry:
    """In-memory store of served map-states and their attached sessions.

    A map page that is reloaded, or opened a second time, replaces the
    previous session of that map; the previous one is closed.
    """

    def __init__(self) -> None:
        self._maps: dict[str, geomap_models.GeoMap] = {}
        self._sessions: dict[str, BrowserSession] = {}
        self._changed = threading.Condition()

    def register(self, gm: geomap_models.GeoMap) -> str:
        """Store a map-state and return its new id."""
        map_id = uuid.uuid4().hex[:12]
        with self._changed:
            self._maps[map_id] = gm
        return map_id

    def get_map(self, map_id: str) -> geomap_models.GeoMap | None:
        with self._changed:
            return self._maps.get(map_id)

    def map_ids(self) -> list[str]:
        with self._changed:
            return list(self._maps)

    def session_for(self, map_id: str) -> BrowserSession | None:
        with self._changed:
            return self._sessions.get(map_id)

    def open_session(
        self,
        map_id: str,
        websocket: fastapi.WebSocket,
        loop: asyncio.AbstractEventLoop,
    ) -> BrowserSession:
        """Attach a newly connected page to its map."""
        session = BrowserSession(map_id, websocket, loop)
        with self._changed:
            previous = self._sessions.get(map_id)
            self._sessions[map_id] = session
            self._changed.notify_all()
        if previous is not None:
            previous.close()
        logger.info("Map {} connected (session {})", map_id, session.id)
        return session

    def close_session(self, session: BrowserSession) -> None:
        """Detach a disconnected page, unless it was already replaced."""
        with self._changed:
            if self._sessions.get(session.map_id) is session:
                del self._sessions[session.map_id]
            self._changed.notify_all()
        session.close()
        logger.info("Map {} disconnected (session {})", session.map_id, session.id)

    def wait_for_session(
        self,
        map_id: str,
        timeout: float | None = None,
    ) -> BrowserSession | None:
        """Block until ``map_id`` has an open session or ``timeout`` passes."""
        with self._changed:
            self._changed.wait_for(
                lambda: map_id in self._sessions,
                timeout=timeout,
            )
            return self._sessions.get(map_id)


@functools.lru_cache
def get_registry() -> SessionRegistry:
    """Return the process-wide registry used by ``geoplot``."""
    return SessionRegistry()


@dataclasses.dataclass
class MapApp:
    """Handle to a map served to the browser.

    Attributes:
        map_id: Id of the map-state in the registry.
        url: Address of the map page.
        registry: Registry holding the map-state and its session.
        title: Widget type marker; live-session calls require ``"GeoMap"``.
        height: CSS height used when embedded in a notebook.
    """

    map_id: str
    url: str
    registry: SessionRegistry
    title: str = GEOMAP_TITLE
    height: str = "500px"

    @property
    def geomap(self) -> geomap_models.GeoMap | None:
        return self.registry.get_map(self.map_id)

    @property
    def session(self) -> BrowserSession | None:
        return self.registry.session_for(self.map_id)

    def wait_until_open(self, timeout: float | None = None) -> BrowserSession:
        """Block until the map page has connected.

        Raises:
            SessionClosedError: If no page connected within ``timeout``.
        """
        timeout = timeout or config.get_settings().bridge_timeout_seconds
        session = self.registry.wait_for_session(self.map_id, timeout)
        if session is None or not session.is_open:
            raise errors.SessionClosedError(_CLOSED_REMEDY)
        return session

    def _repr_html_(self) -> str:
        src = html.escape(self.url, quote=True)
        height = html.escape(self.height, quote=True)
        return (
            f'<iframe src="{src}" style="width:100%;height:{height};'
            'border:none;"></iframe>'
        )


def ensure_geomap(app: object) -> BrowserSession:
    """Verify that ``app`` is a GeoMap with an open page.

    Returns:
        The open session of the map.

    Raises:
        WidgetTypeError: If ``app`` is not a GeoMap handle.
        SessionClosedError: If the map page is not connected.
    """
    if not isinstance(app, MapApp) or app.title != GEOMAP_TITLE:
        raise errors.WidgetTypeError(
            "The provided app must be of type GeoMap. Please create it with "
            "geoplot (e.g., app = geoplot(geomap(...)))."
        )
    session = app.session
    if session is None or not session.is_open:
        raise errors.SessionClosedError(_CLOSED_REMEDY)
    return session


def add_layer(app: MapApp, layer: layer_models.Layer) -> None:
    """Add a layer to an open map as a new overlay."""
    session = ensure_geomap(app)
    session.send(messages.AddOverlay(layer=layer.describe()))
    logger.info("Added layer {!r} to map {}", layer.name, app.map_id)


def get_features(app: MapApp) -> gpd.GeoDataFrame:
    """Read the features drawn by hand on an open map.

    Returns:
        GeoDataFrame in EPSG:4326, empty when nothing has been drawn.

    Raises:
        BridgeTimeoutError: If the page does not answer in time.
    """
    session = ensure_geomap(app)
    reply = session.request(messages.GetFeatures())
    geotable = conversion.features_to_geotable(reply.features)
    if geotable.empty:
        logger.info("No features drawn on map {}", app.map_id)
    return geotable


def add_drawn_layer(
    app: MapApp,
    *,
    name: str = "Drawn Features",
    shown: bool = True,
    opacity: float = 1.0,
    color: str | None = None,
    weight: int | None = None,
    fill_color: str | None = None,
    fill_opacity: float | None = None,
    dash_array: str | None = None,
    multicolor: bool | None = None,
) -> None:
    """Turn the features drawn on an open map into a styled overlay.

    The drawn items are taken directly from the page, so nothing travels
    back to Python.
    """
    session = ensure_geomap(app)
    style = layer_models.VectorStyle(
        color=color,
        weight=weight,
        fill_color=fill_color,
        fill_opacity=fill_opacity,
        dash_array=dash_array,
        multicolor=multicolor,
    )
    layer_models.check_unit_interval("opacity", opacity)
    session.send(
        messages.AddDrawnOverlay(
            name=name,
            shown=shown,
            opacity=opacity,
            options=style.to_options(),
        )
    )
