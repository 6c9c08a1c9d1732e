"""Map page, map-state and live-session endpoints.

This module serves everything the browser needs to render a registered
map: the HTML page (which loads Leaflet, Leaflet.draw, turf and chroma-js
from their CDNs together with ``/static/geomap.js``), the map-state JSON the
page fetches on load, and the WebSocket the page keeps open so Python can
add overlays and read hand-drawn features.

Example:
    Fetch a map-state:
        >>> response = client.get("/api/maps/3f9a1c2b7d4e")
        >>> response.json()
        >>> # Returns: {"lat": -14.235004, "lon": -51.92528, "zoom": 4.0,
        >>> #           "layers": [{"type": "Tile Url", "data": "https://...",
        >>> #                       "name": "OSM", "shown": true, ...}]}

    Open the live session (what geomap.js does):
        >>> const ws = new WebSocket(`ws://${location.host}/ws/maps/${mapId}`);
        >>> ws.send(JSON.stringify({type: "features", request_id: id, features: fc}));
"""

import asyncio
import functools
import pathlib

import fastapi
import pydantic
from fastapi import requests, responses, status
from loguru import logger

from eemaps.models import geomap as geomap_models
from eemaps.models import messages
from eemaps.services import bridge

STATIC_DIR = pathlib.Path(__file__).resolve().parent.parent / "static"

router = fastapi.APIRouter(tags=["maps"])


def _get_registry(connection: requests.HTTPConnection) -> bridge.SessionRegistry:
    """Resolve the session registry attached to the application.

    Args:
        connection: Incoming HTTP request or WebSocket.

    Returns:
        The SessionRegistry the application was created with.
    """
    return connection.app.state.registry


@functools.lru_cache
def _page_html() -> str:
    return (STATIC_DIR / "map.html").read_text(encoding="utf-8")


def _require_map(
    registry: bridge.SessionRegistry,
    map_id: str,
) -> geomap_models.GeoMap:
    gm = registry.get_map(map_id)
    if gm is None:
        raise fastapi.HTTPException(
            status_code=404,
            detail="Map not found",
        )
    return gm


@router.get("/maps/{map_id}", response_class=responses.HTMLResponse)
async def map_page(
    map_id: str,
    registry: bridge.SessionRegistry = fastapi.Depends(_get_registry),  # noqa: B008
) -> responses.HTMLResponse:
    """Serve the Leaflet page of a registered map.

    The page is static; it reads the map id from its own URL, fetches the
    map-state from ``/api/maps/{map_id}`` and connects to
    ``/ws/maps/{map_id}``.

    Raises:
        HTTPException: If the map is not registered (404 status code).
    """
    _require_map(registry, map_id)
    return responses.HTMLResponse(_page_html())


@router.get("/api/maps")
async def list_maps(
    registry: bridge.SessionRegistry = fastapi.Depends(_get_registry),  # noqa: B008
) -> list[str]:
    """List the ids of all registered maps."""
    return registry.map_ids()


@router.get("/api/maps/{map_id}")
async def get_map_state(
    map_id: str,
    registry: bridge.SessionRegistry = fastapi.Depends(_get_registry),  # noqa: B008
) -> geomap_models.GeoMap:
    """Return the map-state (center, zoom, layer descriptors) of a map.

    Raises:
        HTTPException: If the map is not registered (404 status code).
    """
    return _require_map(registry, map_id)


@router.websocket("/ws/maps/{map_id}")
async def map_socket(
    websocket: fastapi.WebSocket,
    map_id: str,
    registry: bridge.SessionRegistry = fastapi.Depends(_get_registry),  # noqa: B008
) -> None:
    """Keep the live session of one map page.

    Unknown maps are refused with a policy-violation close code. Frames
    from the page are parsed as inbound bridge messages and dispatched to
    the session; malformed frames are logged and skipped.
    """
    if registry.get_map(map_id) is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    session = registry.open_session(map_id, websocket, asyncio.get_running_loop())
    try:
        while True:
            frame = await websocket.receive_text()
            try:
                message = messages.parse_inbound(frame)
            except pydantic.ValidationError as exc:
                logger.warning("Ignoring malformed frame from map {}: {}", map_id, exc)
                continue
            session.dispatch(message)
    except fastapi.WebSocketDisconnect:
        pass
    finally:
        registry.close_session(session)
