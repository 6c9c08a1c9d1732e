"""Earth Engine layers on an interactive Leaflet map.

eemaps lets Python scripts and notebooks drive the Earth Engine API and look
at the results on a browser-embedded Leaflet map:

- ``initialize`` authenticates an Earth Engine session (with one
  authentication fallback),
- ``layer`` wraps a GeoDataFrame, an Earth Engine object or a tile URL
  template together with explicit style/visualization options,
- ``geomap`` aggregates layers with a center and zoom into a map-state,
- ``geoplot`` serves the map-state from an embedded FastAPI server and
  returns a live handle,
- ``add_layer``, ``add_drawn_layer`` and ``get_features`` talk to the open
  page over a WebSocket bridge.

Example:
    >>> import eemaps
    >>> ee = eemaps.initialize("my-gcp-project")
    >>> srtm = eemaps.layer(
    ...     ee.Image("USGS/SRTMGL1_003"), name="SRTM", min=0, max=3000,
    ...     palette=["blue", "green", "red"],
    ... )
    >>> app = eemaps.geoplot(eemaps.geomap(srtm, lat=46.8, lon=8.2, zoom=7))
    >>> app.wait_until_open()
    >>> drawn = eemaps.get_features(app)
"""

from eemaps.core.errors import (
    EEMapsError,
    SessionClosedError,
    UsageError,
    WidgetTypeError,
)
from eemaps.models.geomap import GeoMap, geomap
from eemaps.models.layers import Layer, LayerDescriptor
from eemaps.services.bridge import (
    MapApp,
    add_drawn_layer,
    add_layer,
    get_features,
)
from eemaps.services.conversion import (
    features_to_geotable,
    geotable_to_ee,
    geotable_to_geojson,
)
from eemaps.services.earthengine import authenticate, initialize, version
from eemaps.services.layers import layer
from eemaps.services.server import geoplot

__all__ = [
    "EEMapsError",
    "GeoMap",
    "Layer",
    "LayerDescriptor",
    "MapApp",
    "SessionClosedError",
    "UsageError",
    "WidgetTypeError",
    "add_drawn_layer",
    "add_layer",
    "authenticate",
    "features_to_geotable",
    "geomap",
    "geoplot",
    "geotable_to_ee",
    "geotable_to_geojson",
    "get_features",
    "initialize",
    "layer",
    "version",
]
