"""Layer data models and their wire descriptors.

This module defines the immutable records that describe a single map
overlay. A :class:`Layer` holds the payload (GeoJSON text or a tile URL
template) together with three explicit option structs, one per layer kind:

- :class:`VectorStyle` for GeoJSON overlays (``L.geoJSON`` options),
- :class:`TileOptions` for tile overlays (``L.tileLayer`` options),
- :class:`VisParams` for Earth Engine visualization (``getMapId``).

:class:`LayerDescriptor` is what actually travels to the browser: the
payload is parsed into a JSON object for vector layers and kept as a plain
string for tile layers, and the option structs are flattened into a single
options bag using the JavaScript option names.

Example:
    Describe a tile layer:
        >>> from eemaps.models.layers import Layer, TileOptions
        >>> osm = Layer(
        ...     data="https://tile.openstreetmap.org/{z}/{x}/{y}.png",
        ...     name="OSM",
        ...     tile=TileOptions(max_zoom=19),
        ... )
        >>> osm.describe().type
        'Tile Url'
        >>> osm.options
        {'maxZoom': 19}
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, ClassVar, Literal

import pydantic

from eemaps.core import errors

LayerType = Literal["GeoJSON", "Tile Url"]
Number = int | float


def check_unit_interval(name: str, value: float | None) -> None:
    """Raise if an opacity-like value falls outside [0, 1]."""
    if value is not None and not 0.0 <= value <= 1.0:
        raise errors.InvalidLayerOptionError(
            f"{name} must be between 0.0 and 1.0, got {value!r}"
        )


def _as_tuple(name: str, value: object) -> tuple[str, ...] | None:
    """Coerce a sequence option to a tuple, refusing a bare string."""
    if value is None:
        return None
    if isinstance(value, str):
        raise errors.InvalidLayerOptionError(
            f"{name} must be a list of strings, not the string {value!r}"
        )
    return tuple(value)  # type: ignore[arg-type]


def _collect(struct: object, keys: dict[str, str]) -> dict[str, Any]:
    """Map the non-None fields of ``struct`` to their option keys."""
    options: dict[str, Any] = {}
    for field_name, key in keys.items():
        value = getattr(struct, field_name)
        if value is None:
            continue
        options[key] = list(value) if isinstance(value, tuple) else value
    return options


@dataclasses.dataclass(frozen=True)
class VectorStyle:
    """Style options for GeoJSON overlays.

    Attributes:
        color: Stroke color (e.g. ``"#3388ff"``).
        weight: Stroke width in pixels.
        fill_color: Fill color.
        fill_opacity: Fill opacity (0.0-1.0).
        dash_array: Dash pattern (e.g. ``"5,10"``).
        multicolor: Color each feature from a sequential palette.
    """

    OPTION_KEYS: ClassVar[dict[str, str]] = {
        "color": "color",
        "weight": "weight",
        "fill_color": "fillColor",
        "fill_opacity": "fillOpacity",
        "dash_array": "dashArray",
        "multicolor": "multicolor",
    }

    color: str | None = None
    weight: int | None = None
    fill_color: str | None = None
    fill_opacity: float | None = None
    dash_array: str | None = None
    multicolor: bool | None = None

    def __post_init__(self) -> None:
        check_unit_interval("fill_opacity", self.fill_opacity)
        if self.weight is not None and self.weight < 0:
            raise errors.InvalidLayerOptionError(
                f"weight must be non-negative, got {self.weight!r}"
            )

    def to_options(self) -> dict[str, Any]:
        return _collect(self, self.OPTION_KEYS)


@dataclasses.dataclass(frozen=True)
class TileOptions:
    """Options for tile overlays.

    Attributes:
        attribution: Attribution HTML text.
        min_zoom: Minimum zoom level.
        max_zoom: Maximum zoom level.
        subdomains: Values substituted for ``{s}`` in the URL template.
    """

    OPTION_KEYS: ClassVar[dict[str, str]] = {
        "attribution": "attribution",
        "min_zoom": "minZoom",
        "max_zoom": "maxZoom",
        "subdomains": "subdomains",
    }

    attribution: str | None = None
    min_zoom: int | None = None
    max_zoom: int | None = None
    subdomains: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "subdomains", _as_tuple("subdomains", self.subdomains)
        )
        if (
            self.min_zoom is not None
            and self.max_zoom is not None
            and self.min_zoom > self.max_zoom
        ):
            raise errors.InvalidLayerOptionError(
                f"min_zoom ({self.min_zoom}) exceeds max_zoom ({self.max_zoom})"
            )

    def to_options(self) -> dict[str, Any]:
        return _collect(self, self.OPTION_KEYS)


@dataclasses.dataclass(frozen=True)
class VisParams:
    """Earth Engine visualization parameters.

    These are the only keys ever forwarded to ``getMapId``.

    Attributes:
        min: Lower bound for stretching (e.g. ``0``).
        max: Upper bound for stretching (e.g. ``3000``).
        bands: One or three band names (e.g. ``("B4", "B3", "B2")``).
        palette: Color palette (e.g. ``("red", "green", "blue")``).
        gain: Gain factor.
        bias: Bias offset.
        gamma: Gamma correction.
    """

    OPTION_KEYS: ClassVar[dict[str, str]] = {
        "min": "min",
        "max": "max",
        "bands": "bands",
        "palette": "palette",
        "gain": "gain",
        "bias": "bias",
        "gamma": "gamma",
    }

    min: Number | None = None
    max: Number | None = None
    bands: tuple[str, ...] | None = None
    palette: tuple[str, ...] | None = None
    gain: Number | None = None
    bias: Number | None = None
    gamma: Number | None = None

    def __post_init__(self) -> None:
        for name in ("bands", "palette"):
            object.__setattr__(self, name, _as_tuple(name, getattr(self, name)))
        if self.bands is not None and len(self.bands) not in (1, 3):
            raise errors.InvalidLayerOptionError(
                f"bands must name one or three bands, got {len(self.bands)}"
            )

    def to_options(self) -> dict[str, Any]:
        return _collect(self, self.OPTION_KEYS)


class LayerDescriptor(pydantic.BaseModel):
    """Rendered form of a layer, as sent to the browser.

    Attributes:
        type: ``"GeoJSON"`` for vector payloads, ``"Tile Url"`` otherwise.
        data: Parsed GeoJSON object, or the tile URL template string.
        name: Overlay name shown in the layer control.
        shown: Whether the overlay is added to the map immediately.
        opacity: Overall overlay opacity.
        options: Merged style, tile and visualization options.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    type: LayerType
    data: dict[str, Any] | str
    name: str = ""
    shown: bool = True
    opacity: float = 1.0
    options: dict[str, Any] = pydantic.Field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class Layer:
    """An immutable map overlay built from user input.

    Attributes:
        data: GeoJSON text or a tile URL template.
        name: Overlay name; the browser picks ``Layer N`` when empty.
        shown: Initial visibility.
        opacity: Overall layer opacity (0.0-1.0).
        style: Vector style options.
        tile: Tile layer options.
        vis: Earth Engine visualization parameters.
    """

    data: str
    name: str = ""
    shown: bool = True
    opacity: float = 1.0
    style: VectorStyle = dataclasses.field(default_factory=VectorStyle)
    tile: TileOptions = dataclasses.field(default_factory=TileOptions)
    vis: VisParams = dataclasses.field(default_factory=VisParams)

    def __post_init__(self) -> None:
        check_unit_interval("opacity", self.opacity)

    @property
    def kind(self) -> LayerType:
        """Classify the payload by sniffing for a JSON object."""
        return "GeoJSON" if self.data.strip().startswith("{") else "Tile Url"

    @property
    def options(self) -> dict[str, Any]:
        """The merged options bag of every supplied option."""
        return {
            **self.style.to_options(),
            **self.tile.to_options(),
            **self.vis.to_options(),
        }

    def describe(self) -> LayerDescriptor:
        """Render the layer into its wire descriptor."""
        kind = self.kind
        data: dict[str, Any] | str = (
            json.loads(self.data) if kind == "GeoJSON" else self.data
        )
        return LayerDescriptor(
            type=kind,
            data=data,
            name=self.name,
            shown=self.shown,
            opacity=self.opacity,
            options=self.options,
        )

    def __str__(self) -> str:
        lines = ["Layer Parameters:"]
        lines.append(f"type: {self.kind!r}")
        lines.append(f"name: {self.name!r}")
        lines.append(f"shown: {self.shown!r}")
        lines.append(f"opacity: {self.opacity!r}")
        lines.append(f"options: {self.options!r}")
        return "\n".join(lines)
