"""Unit tests for the interactive route map."""
import pytest
import folium

from routeready.models.address import OptimizedStop
from routeready.models.route_config import RouteConfig
from routeready.visualization.map_visualizer import MapVisualizer


def make_stop(seq, lat, lng, depot=False, completed=False):
    return OptimizedStop(
        id=f"s{seq}",
        raw=f"{seq} Harbor Rd",
        lat=lat,
        lng=lng,
        sequence_order=seq,
        is_depot=depot,
        is_completed=completed,
    )


class TestMapVisualizer:
    """Test suite for MapVisualizer class."""

    @pytest.fixture
    def visualizer(self):
        return MapVisualizer(RouteConfig(depot="Harbor Depot"))

    @pytest.fixture
    def stops(self):
        return [
            make_stop(0, -6.20, 106.80, depot=True),
            make_stop(1, -6.21, 106.82, completed=True),
            make_stop(2, -6.25, 106.85),
        ]

    def children_of(self, m, kind):
        return [c for c in m._children.values() if isinstance(c, kind)]

    def test_create_map(self, visualizer, stops):
        m = visualizer.create_map(stops)

        assert isinstance(m, folium.Map)
        assert len(self.children_of(m, folium.PolyLine)) == 1
        circles = self.children_of(m, folium.CircleMarker)
        pins = [c for c in self.children_of(m, folium.Marker) if c not in circles]
        assert len(pins) == 1
        assert len(circles) == 2

    def test_rendered_html_mentions_stops(self, visualizer, stops):
        html = visualizer.create_map(stops).get_root().render()

        assert "Harbor Depot" in html
        assert "2 Harbor Rd" in html

    def test_popup_text_is_escaped(self):
        """Address, phone and depot text are shown literally, not as markup."""
        visualizer = MapVisualizer(RouteConfig(depot="Depot <Gate 2>"))
        stops = [
            make_stop(0, -6.20, 106.80, depot=True),
            OptimizedStop(
                id="s1",
                raw="Smith & Sons <Unit 3>",
                phone="<b>555</b>",
                lat=-6.21,
                lng=106.82,
                sequence_order=1,
            ),
        ]
        html = visualizer.create_map(stops).get_root().render()

        assert "&lt;Unit 3&gt;" in html
        assert "Smith &amp; Sons" in html
        assert "<Unit 3>" not in html
        assert "&lt;b&gt;555&lt;/b&gt;" in html
        assert "&lt;Gate 2&gt;" in html

    def test_skips_fallback_and_missing_coordinates(self, visualizer, stops):
        stops = stops + [
            make_stop(3, 0.0, 0.0),
            make_stop(4, None, None),
        ]

        assert [s.id for s in visualizer.mappable_stops(stops)] == ["s0", "s1", "s2"]

    def test_no_mappable_stops(self, visualizer):
        fallback = [make_stop(0, 0.0, 0.0), make_stop(1, 0.0, 0.0)]

        assert visualizer.create_map(fallback) is None
        assert visualizer.create_map([]) is None
