"""Tests for the layer builder.

This module validates eemaps.services.layers.layer for each supported data
source (GeoDataFrame, tile URL template, Earth Engine object) and the
checks applied before any Earth Engine call is made.

See Also:
    - eemaps/services/layers.py for the layer builder.
    - tests/conftest.py for the in-process ``ee`` stand-in.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from eemaps.core import errors
from eemaps.services import layers

if TYPE_CHECKING:
    import geopandas as gpd

    from conftest import FakeEEModule

OSM_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"


@pytest.mark.parametrize(
    "url",
    [
        "https://tile.openstreetmap.org/{y}/{x}.png",
        "https://tile.openstreetmap.org/{z}/{y}.png",
        "https://tile.openstreetmap.org/{z}/{x}.png",
        "http://tile.openstreetmap.org/{z}/{x}/{y}.png",
        "tile.openstreetmap.org/{z}/{x}/{y}.png",
    ],
)
def test_invalid_tile_url_rejected(url: str) -> None:
    """Test that URLs without https or a placeholder are refused."""
    assert layers.is_valid_tile_url(url) is False
    with pytest.raises(errors.InvalidTileURLError, match="invalid tile URL"):
        layers.layer(url)


def test_tile_url_layer() -> None:
    """Test that a valid tile URL becomes a tile layer unchanged."""
    osm = layers.layer(OSM_URL, name="OSM", attribution="OSM", max_zoom=19)
    assert osm.kind == "Tile Url"
    assert osm.data == OSM_URL
    assert osm.options == {"attribution": "OSM", "maxZoom": 19}


def test_options_bag_holds_only_supplied_keys() -> None:
    """Test that unsupplied keyword arguments never reach the options."""
    osm = layers.layer(OSM_URL, subdomains=["a", "b"], gamma=0)
    assert osm.options == {"subdomains": ["a", "b"], "gamma": 0}


def test_geotable_layer(points_gdf: gpd.GeoDataFrame) -> None:
    """Test that a GeoDataFrame becomes a GeoJSON layer with its rows."""
    pts = layers.layer(points_gdf, name="cities", color="#ff7800", multicolor=True)
    assert pts.kind == "GeoJSON"
    collection = json.loads(pts.data)
    assert collection["type"] == "FeatureCollection"
    assert len(collection["features"]) == 3
    assert pts.options == {"color": "#ff7800", "multicolor": True}


def test_geotable_layer_reprojected(points_gdf: gpd.GeoDataFrame) -> None:
    """Test that frames in another CRS are sent as longitude/latitude."""
    pts = layers.layer(points_gdf.to_crs("EPSG:3857"))
    first = json.loads(pts.data)["features"][0]["geometry"]["coordinates"]
    assert first[0] == pytest.approx(-47.93)
    assert first[1] == pytest.approx(-15.78)


def test_earth_engine_layer(fake_ee: FakeEEModule, tile_url: str) -> None:
    """Test that Earth Engine objects become tile layers via getMapId."""
    image = fake_ee.Image("USGS/SRTMGL1_003")
    srtm = layers.layer(
        image,
        name="SRTM",
        min=0,
        max=3000,
        palette=["blue", "green", "red"],
        color="red",
        max_zoom=12,
    )
    assert srtm.kind == "Tile Url"
    assert srtm.data == tile_url
    assert image.vis_calls == [
        {"min": 0, "max": 3000, "palette": ["blue", "green", "red"]}
    ]


def test_unsupported_source(fake_ee: FakeEEModule) -> None:
    """Test that other objects are refused."""
    with pytest.raises(errors.UnsupportedDataSourceError):
        layers.layer(fake_ee.Number(42))
    with pytest.raises(errors.UnsupportedDataSourceError):
        layers.layer(42)


def test_unsupported_source_is_type_error(fake_ee: FakeEEModule) -> None:
    """Test that the error can also be caught as a builtin TypeError."""
    with pytest.raises(TypeError):
        layers.layer({"type": "FeatureCollection"})


def test_invalid_opacity_checked_before_earth_engine(fake_ee: FakeEEModule) -> None:
    """Test that option checks happen before any getMapId round trip."""
    image = fake_ee.Image("USGS/SRTMGL1_003")
    with pytest.raises(errors.InvalidLayerOptionError):
        layers.layer(image, opacity=2)
    with pytest.raises(errors.InvalidLayerOptionError):
        layers.layer(image, bands=["B4", "B3"])
    assert image.vis_calls == []


@pytest.mark.usefixtures("no_ee")
def test_unsupported_source_without_earth_engine() -> None:
    """Test that plain objects are refused even when ee is not installed."""
    with pytest.raises(errors.UnsupportedDataSourceError):
        layers.layer(42)
    with pytest.raises(errors.UnsupportedDataSourceError):
        layers.layer({"type": "FeatureCollection", "features": []})


@pytest.mark.parametrize("option", ["palette", "bands", "subdomains"])
def test_bare_string_option_rejected(option: str) -> None:
    """Test that comma-joined strings are refused instead of split."""
    with pytest.raises(errors.InvalidLayerOptionError, match=option):
        layers.layer(OSM_URL, **{option: "FF0000,00FF00"})
