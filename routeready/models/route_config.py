"""
Route configuration and application state models.
"""
from dataclasses import dataclass
from enum import Enum


@dataclass
class RouteConfig:
    """
    User route preferences set on the configuration screen.

    Attributes:
        depot: Start (and optional end) address of the route
        vehicle_count: Number of vehicles available (>= 1)
        return_to_start: Whether the route ends back at the depot
    """
    depot: str = ""
    vehicle_count: int = 1
    return_to_start: bool = True

    def __post_init__(self):
        """Validate route configuration."""
        if self.vehicle_count < 1:
            raise ValueError(f"Vehicle count must be at least 1, got {self.vehicle_count}")

    @property
    def has_depot(self) -> bool:
        """Whether a non-blank depot address is set."""
        return bool(self.depot and self.depot.strip())


class AppState(Enum):
    """Screens of the single-page flow."""
    LANDING = "LANDING"
    ERROR_REVIEW = "ERROR_REVIEW"  # reserved, nothing transitions here
    CONFIG = "CONFIG"
    PROCESSING = "PROCESSING"
    RESULTS = "RESULTS"
