"""
View controller for the single-page flow.

Owns the only mutable session state and applies user events to it:
LANDING -> CONFIG -> PROCESSING -> RESULTS -> LANDING. The presentation
layer reads snapshots from here and calls back into these methods.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from ..models.address import Address, OptimizedStop
from ..models.route_config import AppState, RouteConfig
from ..output.snapshot_csv import SnapshotCSVGenerator
from ..solver.route_optimizer import RouteOptimizer
from ..utils import trip_progress
from ..utils.address_intake import AddressIntake, AddressIntakeError

logger = logging.getLogger(__name__)

MISSING_DEPOT_MESSAGE = "Please provide a starting depot address."
NO_ADDRESSES_MESSAGE = "Please add at least one delivery address."
OPTIMIZATION_FAILED_MESSAGE = "Optimization failed. Please try again."
FALLBACK_MESSAGE = (
    "The optimization service could not be used ({reason}). "
    "Stops are shown in the order they were entered, without map positions."
)


@dataclass
class Alert:
    """A dismissible user-facing message."""
    level: str  # "info", "warning" or "error"
    message: str


@dataclass
class SessionState:
    """
    All top-level state of one browser session.

    Attributes:
        step: Active screen
        addresses: Addresses collected at intake
        optimized_route: Current stop list (replaced, never mutated in place)
        config: Route configuration
        alerts: Pending user-facing messages
        last_optimization_fallback: Whether the last result is the fallback order
    """
    step: AppState = AppState.LANDING
    addresses: List[Address] = field(default_factory=list)
    optimized_route: List[OptimizedStop] = field(default_factory=list)
    config: RouteConfig = field(default_factory=RouteConfig)
    alerts: List[Alert] = field(default_factory=list)
    last_optimization_fallback: bool = False


class ViewController:
    """Finite state machine over AppState driven by user events."""

    def __init__(
        self,
        optimizer: RouteOptimizer,
        intake: Optional[AddressIntake] = None,
        state: Optional[SessionState] = None,
    ):
        """
        Initialize the controller.

        Args:
            optimizer: Route optimizer adapter
            intake: Address intake (default: new AddressIntake)
            state: Existing session state to resume (default: fresh state)
        """
        self.optimizer = optimizer
        self.intake = intake or AddressIntake()
        self.state = state or SessionState()
        self.snapshot_generator = SnapshotCSVGenerator()

    @property
    def step(self) -> AppState:
        """Active screen."""
        return self.state.step

    def _alert(self, level: str, message: str):
        """Queue an alert for the presentation layer."""
        logger.info(f"[{level}] {message}")
        self.state.alerts.append(Alert(level=level, message=message))

    def _goto(self, step: AppState):
        """Switch screens."""
        if step != self.state.step:
            logger.debug(f"Transition {self.state.step.value} -> {step.value}")
        self.state.step = step

    # Intake -----------------------------------------------------------

    def upload_file(self, data: bytes, filename: str = "") -> int:
        """
        Add addresses from an uploaded file.

        Returns:
            Number of addresses added (0 on read failure)
        """
        if self.state.step not in (AppState.LANDING, AppState.CONFIG):
            return 0

        try:
            new_addresses = self.intake.from_upload(data, filename)
        except AddressIntakeError as e:
            self._alert("error", str(e))
            return 0

        self.state.addresses = self.state.addresses + new_addresses
        self._goto(AppState.CONFIG)
        return len(new_addresses)

    def add_manual_address(self, text: str) -> Optional[Address]:
        """Add one typed address; blank text is ignored silently."""
        if self.state.step not in (AppState.LANDING, AppState.CONFIG):
            return None

        address = self.intake.from_manual_text(text)
        if address is None:
            return None

        self.state.addresses = self.state.addresses + [address]
        self._goto(AppState.CONFIG)
        return address

    def remove_address(self, address_id: str):
        """Drop an address before optimizing."""
        if self.state.step != AppState.CONFIG:
            return
        self.state.addresses = [a for a in self.state.addresses if a.id != address_id]

    # Configuration ------------------------------------------------------

    def update_config(self, **changes):
        """
        Replace the route configuration with the given fields changed.
        Only applied on the configuration screen.

        Raises:
            ValueError: If the new configuration is invalid
        """
        if self.state.step != AppState.CONFIG:
            logger.debug(f"Ignoring config change in {self.state.step.value}")
            return
        self.state.config = replace(self.state.config, **changes)

    # Optimization -------------------------------------------------------

    def start_optimization(self) -> bool:
        """
        Request optimization of the collected addresses.

        Only honoured from CONFIG, so a request while one is in flight is
        ignored.

        Returns:
            True if the controller moved to PROCESSING
        """
        if self.state.step != AppState.CONFIG:
            logger.debug(f"Ignoring optimize request in {self.state.step.value}")
            return False

        if not self.state.config.has_depot:
            self._alert("warning", MISSING_DEPOT_MESSAGE)
            return False

        if not self.state.addresses:
            self._alert("warning", NO_ADDRESSES_MESSAGE)
            return False

        self._goto(AppState.PROCESSING)
        return True

    def run_optimization(self) -> bool:
        """
        Run the optimizer for a pending request.

        Returns:
            True if results are available
        """
        if self.state.step != AppState.PROCESSING:
            return False

        try:
            route = self.optimizer.optimize(self.state.addresses, self.state.config)
        except Exception as e:
            logger.exception(f"Optimization failed: {e}")
            self._alert("error", OPTIMIZATION_FAILED_MESSAGE)
            self._goto(AppState.CONFIG)
            return False

        self.state.optimized_route = route
        self.state.last_optimization_fallback = self.optimizer.used_fallback
        if self.optimizer.used_fallback:
            self._alert("warning", FALLBACK_MESSAGE.format(reason=self.optimizer.last_error))

        self._goto(AppState.RESULTS)
        return True

    # Results --------------------------------------------------------------

    def toggle_complete(self, stop_id: str):
        """Flip completion of one stop."""
        if self.state.step != AppState.RESULTS:
            return
        self.state.optimized_route = trip_progress.toggle_complete(
            self.state.optimized_route, stop_id
        )

    def reset(self):
        """
        Start over from LANDING.

        Addresses, route and alerts are cleared; the route configuration is
        kept so the depot does not need to be typed again.
        """
        self.state.addresses = []
        self.state.optimized_route = []
        self.state.alerts = []
        self.state.last_optimization_fallback = False
        self._goto(AppState.LANDING)

    def dismiss_alert(self, index: int):
        """Remove one alert."""
        if 0 <= index < len(self.state.alerts):
            self.state.alerts = self.state.alerts[:index] + self.state.alerts[index + 1:]

    # Derived views ------------------------------------------------------------

    @property
    def next_stop(self) -> Optional[OptimizedStop]:
        return trip_progress.next_stop(self.state.optimized_route)

    @property
    def progress(self) -> int:
        return trip_progress.progress_percent(self.state.optimized_route)

    @property
    def full_route_link(self) -> str:
        return trip_progress.full_route_link(self.state.optimized_route, self.state.config)

    def snapshot_csv(self) -> str:
        """Snapshot CSV of the current route."""
        return self.snapshot_generator.generate(self.state.optimized_route)
