"""Typed messages exchanged with the map page over the WebSocket bridge.

Outbound messages are sent from Python to the page and are discriminated on
the ``type`` field, so a single ``TypeAdapter`` parses any of them. The page
only ever sends replies to requests.

Outbound:
    - ``add_overlay``: add one layer descriptor as a new overlay.
    - ``add_drawn_overlay``: turn the hand-drawn items into an overlay.
    - ``get_features``: ask for the hand-drawn items; answered by
      ``features`` carrying the same ``request_id``.

Inbound:
    - ``features``: reply to ``get_features``.
"""

from __future__ import annotations

import uuid
from typing import Annotated, Any, Literal

import pydantic

from eemaps.models import layers as layer_models


def _empty_collection() -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": []}


class AddOverlay(pydantic.BaseModel):
    type: Literal["add_overlay"] = "add_overlay"
    layer: layer_models.LayerDescriptor


class AddDrawnOverlay(pydantic.BaseModel):
    type: Literal["add_drawn_overlay"] = "add_drawn_overlay"
    name: str = "Drawn Features"
    shown: bool = True
    opacity: float = 1.0
    options: dict[str, Any] = pydantic.Field(default_factory=dict)


class GetFeatures(pydantic.BaseModel):
    type: Literal["get_features"] = "get_features"
    request_id: str = pydantic.Field(default_factory=lambda: uuid.uuid4().hex)


class Features(pydantic.BaseModel):
    type: Literal["features"] = "features"
    request_id: str
    features: dict[str, Any] = pydantic.Field(default_factory=_empty_collection)


OutboundMessage = Annotated[
    AddOverlay | AddDrawnOverlay | GetFeatures,
    pydantic.Field(discriminator="type"),
]

_inbound_adapter: pydantic.TypeAdapter[Features] = pydantic.TypeAdapter(Features)
_outbound_adapter: pydantic.TypeAdapter[
    AddOverlay | AddDrawnOverlay | GetFeatures
] = pydantic.TypeAdapter(OutboundMessage)


def parse_inbound(text: str | bytes) -> Features:
    """Parse a frame sent by the page.

    Raises:
        pydantic.ValidationError: If the frame is not a known message.
    """
    return _inbound_adapter.validate_json(text)


def parse_outbound(text: str | bytes) -> AddOverlay | AddDrawnOverlay | GetFeatures:
    """Parse a frame sent to the page (used by tests and tooling)."""
    return _outbound_adapter.validate_json(text)
