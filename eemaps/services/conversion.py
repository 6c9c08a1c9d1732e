"""Conversions between GeoDataFrames, GeoJSON and Earth Engine features.

All GeoJSON produced here is in EPSG:4326 (WGS84 longitude/latitude), the
only coordinate system both Leaflet's GeoJSON layer and Earth Engine's
client-side feature constructors accept.

Example:
    Send a table to Earth Engine:
        >>> import geopandas as gpd
        >>> from eemaps.services import conversion
        >>> parcels = gpd.read_file("parcels.gpkg")
        >>> fc = conversion.geotable_to_ee(parcels)
        >>> # ee.FeatureCollection, or ee.Feature for a single row
"""

from __future__ import annotations

import json
from typing import Any

import geopandas as gpd

from eemaps.services import earthengine

WGS84 = "EPSG:4326"


def _to_wgs84(geotable: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    if geotable.crs is None or geotable.crs.equals(WGS84):
        return geotable
    return geotable.to_crs(WGS84)


def geotable_to_geojson(geotable: gpd.GeoDataFrame) -> str:
    """Serialize a GeoDataFrame as FeatureCollection GeoJSON text.

    Frames in another CRS are reprojected to EPSG:4326 first; frames
    without a CRS are assumed to be in EPSG:4326 already.
    """
    return _to_wgs84(geotable).to_json()


def geotable_to_ee(geotable: gpd.GeoDataFrame) -> Any:
    """Convert a GeoDataFrame into an Earth Engine object.

    Args:
        geotable: Table to convert.

    Returns:
        ``ee.Feature`` when the table has exactly one row, otherwise an
        ``ee.FeatureCollection`` with one feature per row.
    """
    ee = earthengine.get_module()
    collection = json.loads(geotable_to_geojson(geotable))
    if len(geotable) == 1:
        return ee.Feature(collection["features"][0])
    return ee.FeatureCollection(collection)


def features_to_geotable(collection: dict[str, Any]) -> gpd.GeoDataFrame:
    """Build a GeoDataFrame in EPSG:4326 from a GeoJSON FeatureCollection.

    An empty collection gives an empty frame that still has a geometry
    column.
    """
    features = collection.get("features") or []
    if not features:
        return gpd.GeoDataFrame(geometry=[], crs=WGS84)
    return gpd.GeoDataFrame.from_features(features, crs=WGS84)
