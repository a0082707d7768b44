"""
Address models for the route planner.
Represents delivery addresses from intake and their optimized stop form.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Address:
    """
    Represents a single delivery address entered by the user.

    Attributes:
        id: Unique, stable identifier (join key across the pipeline)
        raw: Free-text address as entered
        name: Recipient name (optional)
        phone: Recipient phone number (optional)
        lat: Latitude, absent until optimized
        lng: Longitude, absent until optimized
        is_valid: Whether the address is usable for routing
        is_completed: Whether the delivery has been completed
        error: Reason the address was flagged (optional)
    """
    id: str
    raw: str
    name: Optional[str] = None
    phone: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    is_valid: bool = True
    is_completed: bool = False
    error: Optional[str] = None

    def __post_init__(self):
        """Validate address data."""
        if not self.id:
            raise ValueError("Address id is required")
        if self.lat is not None and not (-90 <= self.lat <= 90):
            raise ValueError(f"Address {self.id}: Invalid latitude {self.lat}")
        if self.lng is not None and not (-180 <= self.lng <= 180):
            raise ValueError(f"Address {self.id}: Invalid longitude {self.lng}")

    @property
    def has_coordinates(self) -> bool:
        """Whether both latitude and longitude are known."""
        return self.lat is not None and self.lng is not None

    def __repr__(self) -> str:
        """String representation of the address."""
        done_flag = " [DONE]" if self.is_completed else ""
        return f"Address({self.id}, {self.raw!r}{done_flag})"


@dataclass
class OptimizedStop(Address):
    """
    An address placed in the optimized visiting order.

    sequence_order is zero-based and unique within a route; the stop at 0
    is the depot whenever the optimizer returned one.
    """
    sequence_order: int = 0
    distance_from_previous: Optional[float] = None  # km
    is_depot: bool = False

    def __post_init__(self):
        """Validate stop data."""
        super().__post_init__()
        if self.sequence_order < 0:
            raise ValueError(
                f"Stop {self.id}: sequence_order must be non-negative, got {self.sequence_order}"
            )

    @classmethod
    def from_address(cls, address: Address, sequence_order: int, **overrides) -> "OptimizedStop":
        """Build a stop from an intake address, keeping its original fields."""
        fields = {
            "id": address.id,
            "raw": address.raw,
            "name": address.name,
            "phone": address.phone,
            "lat": address.lat,
            "lng": address.lng,
            "is_valid": address.is_valid,
            "is_completed": address.is_completed,
            "error": address.error,
        }
        fields.update(overrides)
        return cls(sequence_order=sequence_order, **fields)

    def __repr__(self) -> str:
        """String representation of the stop."""
        kind = "Depot" if self.is_depot else "Stop"
        return f"{kind}({self.sequence_order}: {self.raw!r}, completed={self.is_completed})"
