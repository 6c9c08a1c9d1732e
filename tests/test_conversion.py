"""Tests for GeoDataFrame, GeoJSON and Earth Engine conversions.

See Also:
    - eemaps/services/conversion.py for the conversion helpers.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from eemaps.services import conversion

if TYPE_CHECKING:
    import geopandas as gpd

    from conftest import FakeEEModule


def test_geotable_to_geojson(points_gdf: gpd.GeoDataFrame) -> None:
    """Test that every row becomes a feature with its properties."""
    collection = json.loads(conversion.geotable_to_geojson(points_gdf))
    assert collection["type"] == "FeatureCollection"
    names = [f["properties"]["name"] for f in collection["features"]]
    assert names == ["Brasilia", "Manaus", "Recife"]


def test_geotable_to_geojson_reprojects(polygon_gdf: gpd.GeoDataFrame) -> None:
    """Test that projected frames are converted to EPSG:4326."""
    projected = polygon_gdf.to_crs("EPSG:3857")
    collection = json.loads(conversion.geotable_to_geojson(projected))
    ring = collection["features"][0]["geometry"]["coordinates"][0]
    xs = [point[0] for point in ring]
    assert min(xs) == pytest.approx(-47.0)
    assert max(xs) == pytest.approx(-46.0)


def test_single_row_becomes_feature(
    fake_ee: FakeEEModule,
    polygon_gdf: gpd.GeoDataFrame,
) -> None:
    """Test that a one-row table becomes an ee.Feature."""
    result = conversion.geotable_to_ee(polygon_gdf)
    assert isinstance(result, fake_ee.Feature)
    assert result.args[0]["type"] == "Feature"
    assert result.args[0]["properties"]["name"] == "field"


def test_many_rows_become_collection(
    fake_ee: FakeEEModule,
    points_gdf: gpd.GeoDataFrame,
) -> None:
    """Test that a multi-row table becomes an ee.FeatureCollection."""
    result = conversion.geotable_to_ee(points_gdf)
    assert isinstance(result, fake_ee.FeatureCollection)
    assert len(result.args[0]["features"]) == len(points_gdf)


def test_features_to_geotable() -> None:
    """Test that drawn features come back as a GeoDataFrame in EPSG:4326."""
    collection = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
                },
            },
            {
                "type": "Feature",
                "properties": {},
                "geometry": {"type": "Point", "coordinates": [2, 3]},
            },
        ],
    }
    geotable = conversion.features_to_geotable(collection)
    assert len(geotable) == 2
    assert geotable.crs.to_epsg() == 4326
    assert list(geotable.geometry.geom_type) == ["Polygon", "Point"]


def test_features_to_geotable_empty() -> None:
    """Test that an empty collection gives an empty frame."""
    geotable = conversion.features_to_geotable(
        {"type": "FeatureCollection", "features": []}
    )
    assert geotable.empty
    assert geotable.crs.to_epsg() == 4326
