"""
Trip progress tracking.

Progress lives entirely in the is_completed flags of an ordered stop list;
every function here is pure and returns new lists instead of mutating.
"""
import math
from dataclasses import replace
from typing import List, Optional
from urllib.parse import quote

from ..models.address import OptimizedStop
from ..models.route_config import RouteConfig

DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1"
TRAVEL_MODE = "driving"

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


def encode_component(value: str) -> str:
    """URL-encode a single query value (spaces become %20)."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def toggle_complete(stops: List[OptimizedStop], stop_id: str) -> List[OptimizedStop]:
    """
    Flip the completion flag of one stop.

    Args:
        stops: Current ordered stop list
        stop_id: Id of the stop to toggle

    Returns:
        New list with only the matching stop changed, or the input list
        itself when no stop has that id
    """
    if not any(stop.id == stop_id for stop in stops):
        return stops

    return [
        replace(stop, is_completed=not stop.is_completed) if stop.id == stop_id else stop
        for stop in stops
    ]


def next_stop(stops: List[OptimizedStop]) -> Optional[OptimizedStop]:
    """Get the lowest-sequence stop that is not yet completed."""
    for stop in sorted(stops, key=lambda s: s.sequence_order):
        if not stop.is_completed:
            return stop
    return None


def completed_count(stops: List[OptimizedStop]) -> int:
    """Number of completed stops."""
    return sum(1 for stop in stops if stop.is_completed)


def progress_percent(stops: List[OptimizedStop]) -> int:
    """
    Completion percentage, rounded half up.

    Returns:
        0 for an empty list, otherwise round(100 * completed / total)
    """
    if not stops:
        return 0
    return int(math.floor(100 * completed_count(stops) / len(stops) + 0.5))


def full_route_link(stops: List[OptimizedStop], config: RouteConfig) -> str:
    """
    Build a turn-by-turn directions link for the whole route.

    The origin is always the depot. For a round trip the destination is the
    depot as well and the closing depot entry is left out of the waypoints;
    for a one-way trip the destination is the last stop, which is therefore
    not repeated as a waypoint.

    Args:
        stops: Ordered stop list
        config: Route configuration (depot, return_to_start)

    Returns:
        Directions URL, or empty string for an empty route
    """
    if not stops:
        return ""

    origin = encode_component(config.depot)
    body = list(stops)

    # Depot start is the origin, never a waypoint
    if body[0].is_depot or body[0].raw == config.depot:
        body = body[1:]

    if config.return_to_start:
        destination = origin
        if body and (body[-1].is_depot or body[-1].raw == config.depot):
            body = body[:-1]
    else:
        destination = encode_component(body[-1].raw) if body else origin
        body = body[:-1]

    waypoints = "|".join(encode_component(stop.raw) for stop in body)

    return (
        f"{DIRECTIONS_URL}&origin={origin}&destination={destination}"
        f"&waypoints={waypoints}&travelmode={TRAVEL_MODE}"
    )
