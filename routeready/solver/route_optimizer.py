"""
Route optimizer adapter.

Geocoding and sequencing are delegated to a generative service through a
natural-language prompt. This module builds the prompt, maps the validated
reply back onto the original addresses and falls back to input order
whenever the round trip fails.
"""
import logging
import time
from dataclasses import replace
from typing import List, Optional, Protocol

from ..models.address import Address, OptimizedStop
from ..models.route_config import RouteConfig
from ..utils.distance import haversine_distance
from .response_parser import ResponseParseError, StopRecord, parse_response

logger = logging.getLogger(__name__)

DEPOT_ID = "depot"
FALLBACK_COORDINATES = (0.0, 0.0)
NOT_RETURNED_ERROR = "Not returned by optimizer"


class TextGenerator(Protocol):
    """Anything that turns a prompt into reply text (e.g. GeminiClient)."""

    def generate(self, prompt: str) -> str:
        ...


class RouteOptimizer:
    """
    Prompt-and-parse adapter around the external optimization service.

    optimize() never raises for service or parse failures; it returns the
    input addresses in their original order instead and records the reason
    in last_error.
    """

    def __init__(self, client: TextGenerator):
        """
        Initialize the optimizer.

        Args:
            client: Text generator used to reach the service
        """
        self.client = client
        self.last_error: Optional[str] = None
        self.last_rejected = 0
        self.computation_time = 0.0

    @property
    def used_fallback(self) -> bool:
        """Whether the last optimize() call returned the fallback order."""
        return self.last_error is not None

    def build_prompt(self, addresses: List[Address], config: RouteConfig) -> str:
        """
        Build the natural-language request for the service.

        Args:
            addresses: Addresses to geocode and sequence
            config: Route configuration

        Returns:
            Prompt text
        """
        address_lines = "\n".join(
            f"- {a.raw} (ID: {a.id}, Phone: {a.phone or 'N/A'})" for a in addresses
        )
        return (
            "You are a professional logistics optimization engine.\n"
            "1. Geocode the following addresses into [lat, lng] coordinates with high precision.\n"
            f'2. Optimize the delivery sequence starting from the Depot: "{config.depot}".\n'
            f'3. Respect the "Return to Depot" setting: {"YES" if config.return_to_start else "NO"}.\n'
            "\n"
            "Addresses:\n"
            f"{address_lines}\n"
            "\n"
            "Return a JSON array of stops in optimized order.\n"
            'Format: [{"id": "...", "lat": 0.0, "lng": 0.0, "sequenceOrder": 0, "isValid": true}]\n'
            f'Ensure the sequence starts with the depot at order 0 using id "{DEPOT_ID}", '
            "and include coordinates for every stop.\n"
        )

    def optimize(self, addresses: List[Address], config: RouteConfig) -> List[OptimizedStop]:
        """
        Geocode and order the addresses.

        Args:
            addresses: Addresses from intake
            config: Route configuration (depot must be set)

        Returns:
            Stops with contiguous sequence_order 0..N-1

        Raises:
            ValueError: If the depot is empty
        """
        if not config.has_depot:
            raise ValueError("A depot address is required to optimize a route")

        self.last_error = None
        self.last_rejected = 0
        if not addresses:
            return []

        start_time = time.time()
        try:
            reply = self.client.generate(self.build_prompt(addresses, config))
            records, self.last_rejected = parse_response(reply)
            stops = self._merge(records, addresses, config)
        except Exception as e:
            logger.error(f"Failed to parse optimizer response: {e}")
            self.last_error = str(e) or type(e).__name__
            stops = self.fallback(addresses)
        finally:
            self.computation_time = time.time() - start_time

        logger.info(
            f"Optimized {len(addresses)} addresses into {len(stops)} stops in "
            f"{self.computation_time:.2f}s (fallback={self.used_fallback}, rejected={self.last_rejected})"
        )
        return stops

    def fallback(self, addresses: List[Address]) -> List[OptimizedStop]:
        """Input order, sequence_order = index, coordinates at the sentinel."""
        lat, lng = FALLBACK_COORDINATES
        return [
            OptimizedStop.from_address(address, sequence_order=idx, lat=lat, lng=lng)
            for idx, address in enumerate(addresses)
        ]

    def _merge(
        self, records: List[StopRecord], addresses: List[Address], config: RouteConfig
    ) -> List[OptimizedStop]:
        """
        Join reply records onto the original addresses.

        Raises:
            ResponseParseError: If no record matches an input address
        """
        by_id = {address.id: address for address in addresses}
        matched = set()
        depot_count = 0
        ranked = []

        for record in records:
            if record.id in by_id:
                if record.id in matched:
                    logger.warning(f"Duplicate optimizer record for {record.id}, keeping the first")
                    continue
                matched.add(record.id)
                stop = OptimizedStop.from_address(
                    by_id[record.id],
                    sequence_order=0,
                    lat=record.lat,
                    lng=record.lng,
                    is_valid=record.is_valid,
                    error=record.error,
                )
            elif record.id.lower().startswith(DEPOT_ID):
                stop = OptimizedStop(
                    id=f"{DEPOT_ID}-{depot_count}",
                    raw=config.depot,
                    lat=record.lat,
                    lng=record.lng,
                    is_valid=record.is_valid,
                    error=record.error,
                    is_depot=True,
                )
                depot_count += 1
            else:
                self.last_rejected += 1
                logger.warning(f"Rejected optimizer record with unknown id {record.id}")
                continue

            order = record.sequence_order if record.sequence_order is not None else float("inf")
            ranked.append((order, record.position, stop))

        if not matched:
            raise ResponseParseError("Response did not reference any input address")

        ranked.sort(key=lambda item: (item[0], item[1]))
        stops = [stop for _, _, stop in ranked]

        # Keep every input address, flagged when the service dropped it
        for address in addresses:
            if address.id not in matched:
                logger.warning(f"Optimizer did not return address {address.id}")
                stops.append(
                    OptimizedStop.from_address(
                        address, sequence_order=0, is_valid=False, error=NOT_RETURNED_ERROR
                    )
                )

        return self._renumber(stops)

    def _renumber(self, stops: List[OptimizedStop]) -> List[OptimizedStop]:
        """Assign contiguous sequence orders and distances from the previous stop."""
        result = []
        previous = None
        for idx, stop in enumerate(stops):
            distance = None
            if previous is not None and previous.has_coordinates and stop.has_coordinates:
                distance = haversine_distance((previous.lat, previous.lng), (stop.lat, stop.lng))
            result.append(replace(stop, sequence_order=idx, distance_from_previous=distance))
            previous = stop
        return result
