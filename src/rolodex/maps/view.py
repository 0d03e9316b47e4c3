"""Read-only map for a contact's position.

Produces what a tile widget needs to draw one marker on an OpenStreetMap
view: centre, zoom, slippy-map tile indices, a tile URL and a browsable link.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from rolodex.contacts.model import Contact

DEFAULT_ZOOM = 13
TILE_URL_TEMPLATE = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_SUBDOMAINS = ("a", "b", "c")

# Web Mercator stops here
MAX_LATITUDE = 85.0511287798


def normalize_longitude(lon: float) -> float:
    if -180.0 <= lon <= 180.0:
        return lon
    return ((lon + 180.0) % 360.0) - 180.0


def tile_xy(lat: float, lon: float, zoom: int) -> tuple[int, int]:
    """Slippy-map tile containing ``(lat, lon)`` at ``zoom``."""
    n = 2 ** int(zoom)
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    lon = normalize_longitude(lon)

    x = int((lon + 180.0) / 360.0 * n)
    lat_rad = math.radians(lat)
    y = int((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)
    return min(max(x, 0), n - 1), min(max(y, 0), n - 1)


@dataclass(frozen=True)
class Marker:
    latitude: float
    longitude: float
    label: str = ""


@dataclass(frozen=True)
class MapView:
    latitude: float
    longitude: float
    zoom: int = DEFAULT_ZOOM
    marker: Optional[Marker] = None

    @classmethod
    def for_position(
        cls,
        latitude: float,
        longitude: float,
        *,
        label: str = "",
        zoom: int = DEFAULT_ZOOM,
    ) -> Optional["MapView"]:
        """Centre on a position with a single marker; ``None`` if not drawable."""
        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None
        return cls(
            latitude=lat,
            longitude=lon,
            zoom=int(zoom),
            marker=Marker(latitude=lat, longitude=lon, label=label),
        )

    @classmethod
    def for_contact(cls, contact: Contact, *, zoom: int = DEFAULT_ZOOM) -> Optional["MapView"]:
        return cls.for_position(
            contact.latitude,
            contact.longitude,
            label=contact.display_name,
            zoom=zoom,
        )

    @property
    def tile(self) -> tuple[int, int]:
        return tile_xy(self.latitude, self.longitude, self.zoom)

    def tile_url(self, subdomain: Optional[str] = None) -> str:
        x, y = self.tile
        # Same subdomain rotation Leaflet uses
        s = subdomain or TILE_SUBDOMAINS[abs(x + y) % len(TILE_SUBDOMAINS)]
        return TILE_URL_TEMPLATE.format(s=s, z=self.zoom, x=x, y=y)

    @property
    def link(self) -> str:
        lat = f"{self.latitude:.5f}"
        lon = f"{self.longitude:.5f}"
        return f"https://www.openstreetmap.org/?mlat={lat}&mlon={lon}#map={self.zoom}/{lat}/{lon}"

    def to_dict(self) -> dict[str, Any]:
        x, y = self.tile
        return {
            "center": [self.latitude, self.longitude],
            "zoom": self.zoom,
            "tile": {"x": x, "y": y},
            "tile_url": self.tile_url(),
            "link": self.link,
            "marker": (
                {
                    "position": [self.marker.latitude, self.marker.longitude],
                    "label": self.marker.label,
                }
                if self.marker
                else None
            ),
        }
