"""
Application settings model.
Holds values loaded from conf.yaml and the environment.
"""
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class OptimizerSettings:
    """
    Settings for the external optimization service.

    Attributes:
        model: Generative model name
        endpoint: Base URL of the generateContent API
        timeout_seconds: HTTP timeout for one optimization request
        use_maps_grounding: Ask the service to ground answers with Google Maps
        api_key: Service credential (from environment only)
    """
    model: str = "gemini-2.5-flash"
    endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_seconds: float = 60.0
    use_maps_grounding: bool = True
    api_key: Optional[str] = None

    def __post_init__(self):
        """Validate optimizer settings."""
        if self.timeout_seconds <= 0:
            raise ValueError(f"Optimizer timeout must be positive, got {self.timeout_seconds}")

    @property
    def is_configured(self) -> bool:
        """Whether a credential is available."""
        return bool(self.api_key)


@dataclass
class MapSettings:
    """Sizes for the route miniature and the embedded map."""
    width: int = 400
    height: int = 400
    padding: int = 50
    embed_zoom: int = 18
    embed_height: int = 400

    def __post_init__(self):
        """Validate map settings."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Map width and height must be positive")
        if self.padding < 0 or 2 * self.padding >= min(self.width, self.height):
            raise ValueError(f"Map padding {self.padding} does not fit a {self.width}x{self.height} surface")


@dataclass
class AppSettings:
    """All settings of the application."""
    optimizer: OptimizerSettings = field(default_factory=OptimizerSettings)
    map: MapSettings = field(default_factory=MapSettings)
    default_return_to_start: bool = True
    default_vehicle_count: int = 1
