from __future__ import annotations

from .view import DEFAULT_ZOOM, MapView, Marker, tile_xy

__all__ = ["DEFAULT_ZOOM", "MapView", "Marker", "tile_xy"]
