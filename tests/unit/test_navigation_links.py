"""Unit tests for navigation and embedded map links."""
from routeready.models.address import OptimizedStop
from routeready.models.route_config import RouteConfig
from routeready.utils.navigation_links import (
    TACTICAL_FILTER,
    embed_target,
    embedded_map_iframe,
    embedded_map_url,
    stop_directions_link,
)


def make_stop(seq, raw, completed=False):
    return OptimizedStop(id=f"s{seq}", raw=raw, sequence_order=seq, is_completed=completed)


class TestNavigationLinks:
    """Test suite for navigation link helpers."""

    def test_stop_directions_link(self):
        link = stop_directions_link(make_stop(1, "12 Oak Ave, Springfield"))
        assert link == (
            "https://www.google.com/maps/dir/?api=1"
            "&destination=12%20Oak%20Ave%2C%20Springfield"
        )

    def test_embed_target_is_next_stop(self):
        stops = [make_stop(0, "Depot", completed=True), make_stop(1, "A St"), make_stop(2, "B St")]
        assert embed_target(stops, RouteConfig(depot="Depot")) == "A St"

    def test_embed_target_falls_back_to_depot(self):
        stops = [make_stop(0, "Depot", completed=True), make_stop(1, "A St", completed=True)]
        assert embed_target(stops, RouteConfig(depot="HQ")) == "HQ"
        assert embed_target([], RouteConfig(depot="HQ")) == "HQ"

    def test_embedded_map_url(self):
        url = embedded_map_url("1 Main St", zoom=16)
        assert url == (
            "https://maps.google.com/maps?q=1%20Main%20St&t=k"
            "&z=16&ie=UTF8&iwloc=&output=embed"
        )

    def test_embedded_map_iframe(self):
        html = embedded_map_iframe("1 Main St", height=300)

        assert html.startswith("<iframe")
        assert 'height="300"' in html
        assert TACTICAL_FILTER in html
        assert "z=18" in html

    def test_embedded_map_iframe_default_height(self):
        html = embedded_map_iframe("1 Main St")

        assert 'height="400"' in html
        assert "None" not in html
