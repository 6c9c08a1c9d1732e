"""Services that build layers and talk to Earth Engine and the browser.

Submodules:
    - earthengine: Session initialization and tile URL generation.
    - layers: The layer() builder.
    - conversion: GeoDataFrame, GeoJSON and Earth Engine conversions.
    - bridge: Live sessions with open map pages.
    - server: Embedded uvicorn server and geoplot().
"""
