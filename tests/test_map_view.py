from __future__ import annotations

import math

import pytest

from rolodex.contacts.model import Contact
from rolodex.maps.view import (
    DEFAULT_ZOOM,
    MapView,
    normalize_longitude,
    tile_xy,
)


class TestTileMath:
    def test_whole_world_is_one_tile_at_zoom_zero(self):
        assert tile_xy(51.5, -0.12, 0) == (0, 0)

    @pytest.mark.parametrize(
        "lat, lon, expected",
        [
            (10.0, 10.0, (1, 0)),
            (10.0, -10.0, (0, 0)),
            (-10.0, -10.0, (0, 1)),
            (-10.0, 10.0, (1, 1)),
        ],
    )
    def test_quadrants_at_zoom_one(self, lat, lon, expected):
        assert tile_xy(lat, lon, 1) == expected

    def test_poles_are_clamped_into_range(self):
        assert tile_xy(90.0, 0.0, 2)[1] == 0
        assert tile_xy(-90.0, 0.0, 2)[1] == 3

    def test_antimeridian_stays_in_range(self):
        assert tile_xy(0.0, 180.0, 3)[0] == 7

    @pytest.mark.parametrize(
        "lon, expected",
        [(0.0, 0.0), (180.0, 180.0), (190.0, -170.0), (-190.0, 170.0), (540.0, -180.0)],
    )
    def test_normalize_longitude(self, lon, expected):
        assert normalize_longitude(lon) == pytest.approx(expected)


class TestMapView:
    def test_contact_map_has_single_marker(self):
        contact = Contact(first_name="Grace", last_name="Hopper", latitude=38.8, longitude=-77.1)
        view = MapView.for_contact(contact)

        assert view.zoom == DEFAULT_ZOOM
        assert (view.latitude, view.longitude) == (38.8, -77.1)
        assert view.marker.label == "Grace Hopper"
        assert (view.marker.latitude, view.marker.longitude) == (38.8, -77.1)

    def test_zero_coordinates_still_draw(self):
        view = MapView.for_contact(Contact(first_name="Null", last_name="Island"))
        assert view is not None
        assert view.tile == tile_xy(0.0, 0.0, DEFAULT_ZOOM)

    @pytest.mark.parametrize("bad", [math.nan, math.inf, "north", None])
    def test_undrawable_positions(self, bad):
        assert MapView.for_position(bad, 0.0) is None

    def test_tile_url_rotates_subdomains(self):
        view = MapView.for_position(10.0, 10.0, zoom=1)
        x, y = view.tile
        assert view.tile_url() == "https://b.tile.openstreetmap.org/1/1/0.png"
        assert view.tile_url("c") == f"https://c.tile.openstreetmap.org/1/{x}/{y}.png"

    def test_link_points_at_marker(self):
        view = MapView.for_position(38.8, -77.1)
        assert view.link == (
            "https://www.openstreetmap.org/?mlat=38.80000&mlon=-77.10000"
            "#map=13/38.80000/-77.10000"
        )

    def test_to_dict(self):
        view = MapView.for_position(10.0, 10.0, label="Here", zoom=1)
        assert view.to_dict() == {
            "center": [10.0, 10.0],
            "zoom": 1,
            "tile": {"x": 1, "y": 0},
            "tile_url": "https://b.tile.openstreetmap.org/1/1/0.png",
            "link": view.link,
            "marker": {"position": [10.0, 10.0], "label": "Here"},
        }
