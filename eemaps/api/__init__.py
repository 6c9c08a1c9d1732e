"""API router subpackage for the embedded map server.

Submodules:
    - maps: Map page, map-state JSON and the live-session WebSocket.
"""
