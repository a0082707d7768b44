"""
Map Visualization Module for optimized routes

This module provides interactive map visualization of an optimized stop
sequence using Folium, showing the depot, stops by completion state and
the visiting order.
"""

import logging
from html import escape
from typing import List, Optional

import folium
from folium import plugins

from ..models.address import OptimizedStop
from ..models.route_config import RouteConfig
from ..solver.route_optimizer import FALLBACK_COORDINATES

logger = logging.getLogger(__name__)


class MapVisualizer:
    """Creates interactive maps for optimized routes using Folium"""

    ROUTE_COLOR = '#f59e0b'
    COMPLETED_COLOR = '#64748b'

    def __init__(self, config: RouteConfig):
        """
        Initialize the map visualizer

        Args:
            config: Route configuration (depot name for popups)
        """
        self.config = config

    @staticmethod
    def mappable_stops(stops: List[OptimizedStop]) -> List[OptimizedStop]:
        """Stops with real coordinates (fallback sentinels excluded)."""
        return [
            s for s in stops
            if s.has_coordinates and (s.lat, s.lng) != FALLBACK_COORDINATES
        ]

    def create_map(self, stops: List[OptimizedStop], zoom_start: int = 12) -> Optional[folium.Map]:
        """
        Create an interactive Folium map of the route

        Args:
            stops: Ordered stop list
            zoom_start: Initial zoom level (default: 12)

        Returns:
            Folium map object, or None if no stop can be placed on a map
        """
        located = self.mappable_stops(stops)
        if not located:
            logger.info("No geocoded stops, skipping interactive map")
            return None

        m = folium.Map(
            location=[located[0].lat, located[0].lng],
            zoom_start=zoom_start,
            tiles='OpenStreetMap'
        )

        folium.PolyLine(
            locations=[[s.lat, s.lng] for s in located],
            color=self.ROUTE_COLOR,
            weight=4,
            opacity=0.8,
            tooltip="Planned route"
        ).add_to(m)

        for stop in located:
            if stop.is_depot:
                self._add_depot_marker(m, stop)
            else:
                self._add_stop_marker(m, stop)

        plugins.Fullscreen().add_to(m)

        if len(located) > 1:
            m.fit_bounds([[s.lat, s.lng] for s in located])

        return m

    def _add_depot_marker(self, m: folium.Map, stop: OptimizedStop):
        """Add depot marker to map"""
        folium.Marker(
            location=[stop.lat, stop.lng],
            popup=folium.Popup(
                f"<b>🏭 DEPOT</b><br>"
                f"{escape(self.config.depot)}<br>"
                f"<i>{stop.lat:.6f}, {stop.lng:.6f}</i>",
                max_width=300
            ),
            tooltip="🏭 Depot",
            icon=folium.Icon(
                color='green',
                icon='home',
                prefix='fa'
            )
        ).add_to(m)

    def _add_stop_marker(self, m: folium.Map, stop: OptimizedStop):
        """Add a marker for a delivery stop"""
        color = self.COMPLETED_COLOR if stop.is_completed else self.ROUTE_COLOR
        distance = (
            f"{stop.distance_from_previous:.2f} km"
            if stop.distance_from_previous is not None else "-"
        )

        popup_html = f"""
        <div style='min-width: 220px'>
            <h4 style='margin: 0 0 10px 0; color: {color};'>
                Stop #{stop.sequence_order}
            </h4>
            <table style='width: 100%; font-size: 12px;'>
                <tr><td><b>Address:</b></td><td>{escape(stop.raw)}</td></tr>
                <tr><td><b>Phone:</b></td><td>{escape(stop.phone or 'N/A')}</td></tr>
                <tr><td><b>Status:</b></td><td>{'✅ Done' if stop.is_completed else 'Pending'}</td></tr>
                <tr><td><b>Distance from prev:</b></td><td>{distance}</td></tr>
            </table>
        </div>
        """

        folium.CircleMarker(
            location=[stop.lat, stop.lng],
            radius=9,
            color=color,
            fill=True,
            fillColor=color,
            fillOpacity=0.3 if stop.is_completed else 0.8,
            weight=2,
            popup=folium.Popup(popup_html, max_width=300),
            tooltip=f"Stop {stop.sequence_order}: {escape(stop.raw)}"
        ).add_to(m)
