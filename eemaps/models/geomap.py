"""Map-state model aggregating layer descriptors with a map view.

A :class:`GeoMap` is the declarative value handed to the browser renderer:
map center, zoom level and the ordered layer descriptors. It is frozen;
adding layers produces a new map-state.

Example:
    Build a map-state centered on Lisbon:
        >>> from eemaps.models.geomap import geomap
        >>> gm = geomap(osm_layer, lat=38.72, lon=-9.14, zoom=10)
        >>> len(gm.layers)
        1
"""

from __future__ import annotations

import json

import pydantic

from eemaps.core import config
from eemaps.models import layers as layer_models

DEFAULT_LAT = -14.235004
DEFAULT_LON = -51.92528
DEFAULT_ZOOM = 4


class GeoMap(pydantic.BaseModel):
    """Center, zoom and ordered layer descriptors of one map.

    Attributes:
        lat: Map center latitude.
        lon: Map center longitude.
        zoom: Initial zoom level.
        layers: Layer descriptors, bottom-most first.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    lat: float = pydantic.Field(default=DEFAULT_LAT, ge=-90, le=90)
    lon: float = pydantic.Field(default=DEFAULT_LON, ge=-180, le=180)
    zoom: float = pydantic.Field(default=DEFAULT_ZOOM, ge=0)
    layers: tuple[layer_models.LayerDescriptor, ...] = ()

    def with_layers(self, *layers: layer_models.Layer) -> GeoMap:
        """Return a copy with the given layers appended."""
        added = tuple(layer.describe() for layer in layers)
        return self.model_copy(update={"layers": self.layers + added})

    def __str__(self) -> str:
        lines = [
            "GeoMap:",
            f"  lat: {self.lat}",
            f"  lon: {self.lon}",
            f"  zoom: {self.zoom}",
        ]
        if not self.layers:
            lines.append("  (No layer descriptors)")
            return "\n".join(lines)

        lines.append("  Layers:")
        for index, descriptor in enumerate(self.layers, start=1):
            lines.append(f"    Layer {index}:")
            lines.append(f"      type: {descriptor.type}")
            lines.append(f"      name: {descriptor.name}")
            lines.append(f"      shown: {descriptor.shown}")
            lines.append(f"      opacity: {descriptor.opacity}")
            options = json.dumps(descriptor.options, separators=(",", ":"))
            lines.append(f"      options: {options}")
        return "\n".join(lines)


def geomap(
    *layers: layer_models.Layer,
    lat: float | None = None,
    lon: float | None = None,
    zoom: float | None = None,
) -> GeoMap:
    """Construct a map-state from any number of layers.

    Omitted view arguments fall back to the configured defaults
    (``EEMAPS_DEFAULT_LAT``, ``EEMAPS_DEFAULT_LON``, ``EEMAPS_DEFAULT_ZOOM``),
    which in turn default to Brazil's centroid at zoom 4.

    Args:
        *layers: Layers in drawing order (first is bottom-most).
        lat: Map center latitude.
        lon: Map center longitude.
        zoom: Initial zoom level.

    Returns:
        GeoMap holding one descriptor per layer.
    """
    settings = config.get_settings()
    return GeoMap(
        lat=settings.default_lat if lat is None else lat,
        lon=settings.default_lon if lon is None else lon,
        zoom=settings.default_zoom if zoom is None else zoom,
        layers=tuple(layer.describe() for layer in layers),
    )
