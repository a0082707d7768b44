"""
Route Projection Renderer

Projects stop coordinates onto a fixed-size drawing surface and renders the
route miniature as SVG: a smoothed path, a dashed highlight over it, and
one marker plus label per stop reflecting completion state.
"""
import logging
from html import escape
from typing import List, Sequence, Tuple

import numpy as np

from ..models.address import OptimizedStop

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

EPSILON = 1e-12


class LinearScale:
    """Maps a numeric domain linearly onto a pixel range."""

    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.d0, self.d1 = domain
        self.r0, self.r1 = range_

    def __call__(self, value: float) -> float:
        span = self.d1 - self.d0
        if span == 0:
            # Degenerate domain sits in the middle of the range
            return (self.r0 + self.r1) / 2
        t = (value - self.d0) / span
        return self.r0 + t * (self.r1 - self.r0)


def catmull_rom_path(points: Sequence[Point], alpha: float = 0.5) -> str:
    """
    SVG path data for a Catmull-Rom spline through the points.

    Uses the centripetal parameterization (alpha=0.5) expressed as cubic
    Bezier segments, with duplicated end points so the curve passes
    through the first and last point.
    """
    if not points:
        return ""
    if len(points) == 1:
        x, y = points[0]
        return f"M{x:.2f},{y:.2f}"
    if len(points) == 2:
        (x0, y0), (x1, y1) = points
        return f"M{x0:.2f},{y0:.2f}L{x1:.2f},{y1:.2f}"

    padded = [points[0]] + list(points) + [points[-1]]
    commands = [f"M{points[0][0]:.2f},{points[0][1]:.2f}"]

    for i in range(1, len(padded) - 2):
        p0, p1, p2, p3 = padded[i - 1], padded[i], padded[i + 1], padded[i + 2]

        l01 = np.hypot(p1[0] - p0[0], p1[1] - p0[1])
        l12 = np.hypot(p2[0] - p1[0], p2[1] - p1[1])
        l23 = np.hypot(p3[0] - p2[0], p3[1] - p2[1])
        l01_a, l12_a, l23_a = l01 ** alpha, l12 ** alpha, l23 ** alpha
        l01_2a, l12_2a, l23_2a = l01_a ** 2, l12_a ** 2, l23_a ** 2

        c1x, c1y = p1
        if l01_a > EPSILON:
            a = 2 * l01_2a + 3 * l01_a * l12_a + l12_2a
            n = 3 * l01_a * (l01_a + l12_a)
            c1x = (p1[0] * a - p0[0] * l12_2a + p2[0] * l01_2a) / n
            c1y = (p1[1] * a - p0[1] * l12_2a + p2[1] * l01_2a) / n

        c2x, c2y = p2
        if l23_a > EPSILON:
            b = 2 * l23_2a + 3 * l23_a * l12_a + l12_2a
            m = 3 * l23_a * (l23_a + l12_a)
            c2x = (p2[0] * b + p1[0] * l23_2a - p3[0] * l12_2a) / m
            c2y = (p2[1] * b + p1[1] * l23_2a - p3[1] * l12_2a) / m

        commands.append(
            f"C{c1x:.2f},{c1y:.2f},{c2x:.2f},{c2y:.2f},{p2[0]:.2f},{p2[1]:.2f}"
        )

    return "".join(commands)


class RouteProjectionRenderer:
    """Renders the route miniature as an SVG document."""

    PATH_COLOR = "#334155"
    HIGHLIGHT_COLOR = "#f59e0b"

    COMPLETED_FILL = "#1e293b"
    DEPOT_FILL = "#10b981"
    ACTIVE_FILL = "#f59e0b"
    COMPLETED_STROKE = "#475569"
    ACTIVE_STROKE = "#0f172a"
    COMPLETED_GLYPH = "#64748b"
    ACTIVE_GLYPH = "#0f172a"
    COMPLETED_LABEL = "#475569"
    ACTIVE_LABEL = "#94a3b8"

    DEPOT_RADIUS = 12
    STOP_RADIUS = 10

    def __init__(self, width: int = 400, height: int = 400, padding: int = 50):
        """
        Initialize the renderer.

        Args:
            width: Surface width in pixels
            height: Surface height in pixels
            padding: Margin kept free on every side
        """
        self.width = width
        self.height = height
        self.padding = padding

    def scales(self, stops: List[OptimizedStop]):
        """
        Build the x (longitude) and y (latitude) scales.

        Returns:
            (x_scale, y_scale), or None when no stop has coordinates
        """
        located = [s for s in stops if s.lat is not None and s.lng is not None]
        if not located:
            return None

        lngs = np.array([s.lng for s in located], dtype=float)
        lats = np.array([s.lat for s in located], dtype=float)

        x_scale = LinearScale(
            (float(lngs.min()), float(lngs.max())),
            (self.padding, self.width - self.padding),
        )
        # Inverted: higher latitude toward the top
        y_scale = LinearScale(
            (float(lats.min()), float(lats.max())),
            (self.height - self.padding, self.padding),
        )
        return x_scale, y_scale

    def project(self, stops: List[OptimizedStop]) -> List[Point]:
        """
        Project every stop to pixel space.

        The scale domain comes from stops with coordinates only; stops
        without coordinates are projected as if at (0, 0).
        """
        scales = self.scales(stops)
        if scales is None:
            return []
        x_scale, y_scale = scales
        return [(x_scale(s.lng or 0), y_scale(s.lat or 0)) for s in stops]

    def render(self, stops: List[OptimizedStop]) -> str:
        """
        Render the full SVG for the stop list.

        Args:
            stops: Ordered stop list

        Returns:
            SVG markup; an empty surface when no stop has coordinates
        """
        points = self.project(stops)
        if not points:
            logger.debug("No stops with coordinates, rendering empty route miniature")
            return self._svg([])

        path_data = catmull_rom_path(points)
        elements = [
            f'<path d="{path_data}" fill="none" stroke="{self.PATH_COLOR}" '
            f'stroke-width="4" stroke-linecap="round"/>',
            f'<path d="{path_data}" fill="none" stroke="{self.HIGHLIGHT_COLOR}" '
            f'stroke-width="2" stroke-dasharray="8,4"/>',
        ]
        for index, (stop, (x, y)) in enumerate(zip(stops, points)):
            elements.append(self._marker(stop, index, x, y))

        return self._svg(elements)

    def _marker(self, stop: OptimizedStop, index: int, x: float, y: float) -> str:
        """Marker group: circle, centered glyph and label above."""
        radius = self.DEPOT_RADIUS if index == 0 else self.STOP_RADIUS

        if stop.is_completed:
            fill = self.COMPLETED_FILL
        elif index == 0:
            fill = self.DEPOT_FILL
        else:
            fill = self.ACTIVE_FILL

        stroke = self.COMPLETED_STROKE if stop.is_completed else self.ACTIVE_STROKE
        glyph_color = self.COMPLETED_GLYPH if stop.is_completed else self.ACTIVE_GLYPH
        label_color = self.COMPLETED_LABEL if stop.is_completed else self.ACTIVE_LABEL

        if stop.is_completed:
            glyph = "✓"
        elif index == 0:
            glyph = "H"
        else:
            glyph = str(index)
        label = "DEPOT" if index == 0 else f"STOP {index}"

        return (
            f'<g class="node" transform="translate({x:.2f}, {y:.2f})">'
            f'<title>{escape(stop.raw)}</title>'
            f'<circle r="{radius}" fill="{fill}" stroke="{stroke}" stroke-width="2"/>'
            f'<text text-anchor="middle" dy=".3em" fill="{glyph_color}" font-size="10px" '
            f'font-weight="900" font-family="sans-serif">{glyph}</text>'
            f'<text y="-18" text-anchor="middle" fill="{label_color}" font-size="9px" '
            f'font-weight="bold" letter-spacing="0.1em">{label}</text>'
            f'</g>'
        )

    def _svg(self, elements: List[str]) -> str:
        """Wrap elements in an SVG root sized to the surface."""
        body = "".join(elements)
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width}" height="{self.height}" '
            f'viewBox="0 0 {self.width} {self.height}">{body}</svg>'
        )
