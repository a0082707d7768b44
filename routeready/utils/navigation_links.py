"""
Links into the external mapping service: single-stop directions and the
embedded satellite view shown above the active stop.
"""
from typing import List

from ..models.address import OptimizedStop
from ..models.route_config import RouteConfig
from .trip_progress import DIRECTIONS_URL, encode_component, next_stop

EMBED_URL = "https://maps.google.com/maps"
EMBED_MAP_TYPE = "k"  # satellite
DEFAULT_EMBED_ZOOM = 18

# High-contrast monochrome look applied to the embedded iframe
TACTICAL_FILTER = "invert(90%) hue-rotate(180deg) brightness(0.8)"


def stop_directions_link(stop: OptimizedStop) -> str:
    """Directions from the current position to a single stop."""
    return f"{DIRECTIONS_URL}&destination={encode_component(stop.raw)}"


def embed_target(stops: List[OptimizedStop], config: RouteConfig) -> str:
    """Address the embedded map should center on: next stop, else the depot."""
    upcoming = next_stop(stops)
    return upcoming.raw if upcoming is not None else config.depot


def embedded_map_url(target: str, zoom: int = DEFAULT_EMBED_ZOOM) -> str:
    """Read-only embeddable map URL for an address."""
    return (
        f"{EMBED_URL}?q={encode_component(target)}&t={EMBED_MAP_TYPE}"
        f"&z={zoom}&ie=UTF8&iwloc=&output=embed"
    )


def embedded_map_iframe(target: str, zoom: int = DEFAULT_EMBED_ZOOM, height: int = 400) -> str:
    """HTML iframe for the embedded map view with the tactical filter."""
    return (
        f'<iframe title="Current Target" width="100%" height="{height}" '
        f'style="border: 0; filter: {TACTICAL_FILTER};" '
        f'src="{embedded_map_url(target, zoom)}"></iframe>'
    )
