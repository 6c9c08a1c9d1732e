"""Layer construction from vector tables, Earth Engine objects and tile URLs.

This module provides :func:`layer`, the single entry point that turns a data
source plus explicit style/visualization arguments into an immutable
:class:`~eemaps.models.layers.Layer`:

- a ``geopandas.GeoDataFrame`` becomes a GeoJSON overlay,
- a tile URL template (``https://`` with ``{x}``, ``{y}``, ``{z}``) becomes
  a tile overlay,
- an ``ee.Feature``, ``ee.FeatureCollection``, ``ee.Image`` or
  ``ee.ImageCollection`` becomes a tile overlay whose URL comes from
  Earth Engine's ``getMapId``.

Example:
    A tile layer from OSM:
        >>> osm = layer(
        ...     "https://tile.openstreetmap.org/{z}/{x}/{y}.png",
        ...     attribution='<a href="https://openstreetmap.org">OSM</a>',
        ...     max_zoom=19,
        ... )

    A GeoJSON layer with per-feature coloring:
        >>> parcels = layer(gdf, multicolor=True, weight=1, fill_opacity=0.6)

    An Earth Engine layer:
        >>> srtm = layer(
        ...     ee.Image("USGS/SRTMGL1_003"),
        ...     min=0, max=3000, palette=["blue", "green", "red"],
        ... )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import geopandas as gpd

from eemaps.core import errors
from eemaps.models import layers as layer_models
from eemaps.services import conversion, earthengine

if TYPE_CHECKING:
    from collections.abc import Sequence

TILE_PLACEHOLDERS = ("{x}", "{y}", "{z}")


def is_valid_tile_url(url: str) -> bool:
    """Check that ``url`` is an https tile template with x/y/z placeholders."""
    return url.startswith("https://") and all(
        placeholder in url for placeholder in TILE_PLACEHOLDERS
    )


def _resolve_data(
    data: gpd.GeoDataFrame | str | object,
    vis: layer_models.VisParams,
) -> str:
    if isinstance(data, gpd.GeoDataFrame):
        return conversion.geotable_to_geojson(data)
    if isinstance(data, str):
        if not is_valid_tile_url(data):
            raise errors.InvalidTileURLError(
                f"invalid tile URL: {data!r} (expected https:// with "
                "{x}, {y} and {z} placeholders)"
            )
        return data
    return earthengine.eeobject_to_url(data, vis)


def layer(
    data: gpd.GeoDataFrame | str | object,
    *,
    name: str = "",
    shown: bool = True,
    opacity: float = 1.0,
    color: str | None = None,
    weight: int | None = None,
    fill_color: str | None = None,
    fill_opacity: float | None = None,
    dash_array: str | None = None,
    multicolor: bool | None = None,
    attribution: str | None = None,
    min_zoom: int | None = None,
    max_zoom: int | None = None,
    subdomains: Sequence[str] | None = None,
    min: float | None = None,  # noqa: A002
    max: float | None = None,  # noqa: A002
    bands: Sequence[str] | None = None,
    palette: Sequence[str] | None = None,
    gain: float | None = None,
    bias: float | None = None,
    gamma: float | None = None,
) -> layer_models.Layer:
    """Wrap a data source and its display options into a Layer.

    Options are validated before any remote call is made, so an invalid
    option never costs an Earth Engine round trip.

    Args:
        data: ``GeoDataFrame``, tile URL template, or Earth Engine object.
        name: Overlay name in the layer control.
        shown: Initial visibility.
        opacity: Overall layer opacity (0.0-1.0).
        color: Stroke color of vector features.
        weight: Stroke width in pixels.
        fill_color: Fill color of vector features.
        fill_opacity: Fill opacity of vector features (0.0-1.0).
        dash_array: Stroke dash pattern (e.g. ``"5,10"``).
        multicolor: Color each feature from a sequential palette.
        attribution: Attribution HTML for tile layers.
        min_zoom: Minimum zoom of tile layers.
        max_zoom: Maximum zoom of tile layers.
        subdomains: Values substituted for ``{s}`` in tile URLs.
        min: Earth Engine stretch minimum.
        max: Earth Engine stretch maximum.
        bands: One or three Earth Engine band names.
        palette: Earth Engine color palette.
        gain: Earth Engine gain factor.
        bias: Earth Engine bias offset.
        gamma: Earth Engine gamma correction.

    Returns:
        Immutable Layer whose options bag holds every supplied option.

    Raises:
        InvalidTileURLError: If a string source is not a valid tile URL.
        UnsupportedDataSourceError: If the source type is not supported.
        InvalidLayerOptionError: If an option is out of range.
    """
    style = layer_models.VectorStyle(
        color=color,
        weight=weight,
        fill_color=fill_color,
        fill_opacity=fill_opacity,
        dash_array=dash_array,
        multicolor=multicolor,
    )
    tile = layer_models.TileOptions(
        attribution=attribution,
        min_zoom=min_zoom,
        max_zoom=max_zoom,
        subdomains=subdomains,  # type: ignore[arg-type]
    )
    vis = layer_models.VisParams(
        min=min,
        max=max,
        bands=bands,  # type: ignore[arg-type]
        palette=palette,  # type: ignore[arg-type]
        gain=gain,
        bias=bias,
        gamma=gamma,
    )
    layer_models.check_unit_interval("opacity", opacity)

    return layer_models.Layer(
        data=_resolve_data(data, vis),
        name=name,
        shown=shown,
        opacity=opacity,
        style=style,
        tile=tile,
        vis=vis,
    )
