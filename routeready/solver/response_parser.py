"""
Parser for optimization service replies.

The reply is free text that should contain a JSON array of
{"id", "lat", "lng", "sequenceOrder", "isValid"} objects. Items are
validated into StopRecord before anything is merged onto an Address.
"""
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ResponseParseError(Exception):
    """Custom exception for unusable service replies."""
    pass


@dataclass
class StopRecord:
    """
    One validated item of the service reply.

    Attributes:
        id: Address id (or "depot" for depot entries)
        lat: Latitude, None if missing or invalid
        lng: Longitude, None if missing or invalid
        sequence_order: Position requested by the service, None if missing
        is_valid: Validity reported by the service, forced False when the
            coordinates are unusable
        error: Reason the record was flagged
        position: Index of the item in the reply array
    """
    id: str
    lat: Optional[float]
    lng: Optional[float]
    sequence_order: Optional[int]
    is_valid: bool
    error: Optional[str] = None
    position: int = 0

    @property
    def has_coordinates(self) -> bool:
        """Whether both coordinates are usable."""
        return self.lat is not None and self.lng is not None


def extract_json_array(text: str) -> list:
    """
    Find the first well-formed JSON array in a text reply.

    Args:
        text: Reply text, possibly wrapped in prose or markdown fences

    Returns:
        Decoded list

    Raises:
        ResponseParseError: If no JSON array is found
    """
    if not text:
        raise ResponseParseError("Empty response")

    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, list):
            return value
        start = text.find("[", start + 1)

    raise ResponseParseError("No JSON found in response")


def _parse_coordinate(value: Any, low: float, high: float) -> Optional[float]:
    """Return value as float if it is a finite number inside [low, high]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if not math.isfinite(value) or not (low <= value <= high):
        return None
    return value


def _parse_sequence(value: Any) -> Optional[int]:
    """Return value as int if it is a whole, non-negative number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0 or value != int(value):
        return None
    return int(value)


def parse_record(item: Any, position: int) -> StopRecord:
    """
    Validate a single reply item.

    Args:
        item: Decoded JSON value
        position: Index of the item in the reply array

    Returns:
        StopRecord

    Raises:
        ValueError: If the item is not an object or has no id
    """
    if not isinstance(item, dict):
        raise ValueError(f"Item {position} is not an object")

    raw_id = item.get("id")
    if raw_id is None or isinstance(raw_id, bool) or str(raw_id).strip() == "":
        raise ValueError(f"Item {position} has no id")

    lat = _parse_coordinate(item.get("lat"), -90.0, 90.0)
    lng = _parse_coordinate(item.get("lng"), -180.0, 180.0)
    is_valid = item.get("isValid", True)
    is_valid = is_valid if isinstance(is_valid, bool) else True

    error = None
    if lat is None or lng is None:
        lat = lng = None
        is_valid = False
        error = "Missing or invalid coordinates"

    return StopRecord(
        id=str(raw_id).strip(),
        lat=lat,
        lng=lng,
        sequence_order=_parse_sequence(item.get("sequenceOrder")),
        is_valid=is_valid,
        error=error,
        position=position,
    )


def parse_response(text: str) -> Tuple[List[StopRecord], int]:
    """
    Parse a service reply into validated records.

    Args:
        text: Raw reply text

    Returns:
        Tuple of (records, rejected_count)

    Raises:
        ResponseParseError: If no JSON array is found
    """
    data = extract_json_array(text)

    records = []
    rejected = 0
    for position, item in enumerate(data):
        try:
            records.append(parse_record(item, position))
        except ValueError as e:
            rejected += 1
            logger.warning(f"Rejected optimizer record: {e}")

    return records, rejected
