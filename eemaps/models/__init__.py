"""Immutable data models: layers, map-states and bridge messages.

Submodules:
    - layers: Layer option structs, Layer and its wire LayerDescriptor.
    - geomap: GeoMap map-state and the geomap() constructor.
    - messages: Typed WebSocket messages exchanged with the map page.
"""
