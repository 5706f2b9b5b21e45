"""
Docking State Machine

Evaluates the vehicle against a fixed reference pose after every physics
step and owns the session pause gate and the mission clock.

States:
- DOCKED: initial state, session paused.
- UNDOCKED: after a manual undock; the vehicle has not left the box yet.
- ELIGIBLE: the vehicle has left the docking box at least once since the
  last undock, so re-entry may dock.

Docking requires ELIGIBLE and all four criteria at once:
- in_box: every axis of the position error within the box half-size
- in_angle: shortest-rotation attitude error within the threshold
- within_speed_limits: X-Z plane speed within the lateral limit and
  signed Z velocity below the axial limit (no lower bound)
- within_angular_speed_limit: angular speed (deg/s) within the limit

Speeds are world-frame. Docking zeroes both velocities, pauses the session
and freezes the clock.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np

from ..config.models import DockingParams
from ..utils.orientation_utils import quat_angle_error
from .backend import SimulationBackend

logger = logging.getLogger(__name__)

TimeSource = Callable[[], float]


class DockingState(Enum):
    UNDOCKED = "undocked"
    ELIGIBLE = "eligible"
    DOCKED = "docked"


@dataclass
class DockingStatus:
    """Per-step docking criteria."""

    position_error: np.ndarray
    distance: float
    angle_error_deg: float
    lateral_speed: float
    axial_speed: float
    speed: float
    angular_speed: float
    in_box: bool
    in_angle: bool
    within_speed_limits: bool
    within_angular_speed_limit: bool

    @property
    def all_criteria_met(self) -> bool:
        return (
            self.in_box
            and self.in_angle
            and self.within_speed_limits
            and self.within_angular_speed_limit
        )


def format_elapsed(seconds: float) -> str:
    """Format seconds as ``H:MM:SS.mmm``."""
    total_ms = int(max(seconds, 0.0) * 1000.0)
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return f"{hours}:{minutes:02d}:{secs:02d}.{millis:03d}"


class MissionClock:
    """
    Wall time since undock minus time spent paused.

    Reads 0 before the first undock, freezes at the pause instant while
    paused and at the docking instant while docked.
    """

    def __init__(self, time_source: TimeSource = time.monotonic):
        self._now = time_source
        self.reset()

    def reset(self) -> None:
        self.undock_time: Optional[float] = None
        self.pause_started: Optional[float] = None
        self.accumulated_paused = 0.0
        self.docked_elapsed: Optional[float] = None

    def _running_elapsed(self) -> float:
        if self.undock_time is None:
            return 0.0
        now = self.pause_started if self.pause_started is not None else self._now()
        return now - self.undock_time - self.accumulated_paused

    def start(self, paused: bool) -> None:
        """Begin timing at an undock."""
        now = self._now()
        self.undock_time = now
        self.accumulated_paused = 0.0
        self.docked_elapsed = None
        self.pause_started = now if paused else None

    def pause(self) -> None:
        if self.pause_started is None:
            self.pause_started = self._now()

    def resume(self) -> None:
        if self.pause_started is not None:
            self.accumulated_paused += self._now() - self.pause_started
            self.pause_started = None

    def freeze(self) -> None:
        """Record the docking instant."""
        self.docked_elapsed = self._running_elapsed()

    def elapsed(self) -> float:
        if self.docked_elapsed is not None:
            return self.docked_elapsed
        return self._running_elapsed()

    def formatted(self) -> str:
        return format_elapsed(self.elapsed())


class DockingStateMachine:
    """Docking criteria, state transitions and the pause gate."""

    def __init__(
        self,
        params: Optional[DockingParams] = None,
        time_source: TimeSource = time.monotonic,
    ):
        self.params = params or DockingParams()
        self.reference_position = np.array(self.params.position, dtype=float)
        self.reference_orientation = np.array(self.params.orientation, dtype=float)
        self.clock = MissionClock(time_source)
        self.reset()

    def reset(self) -> None:
        """Back to DOCKED and paused with the clock and latch cleared."""
        self.state = DockingState.DOCKED
        self.paused = True
        self.has_left_docking_box_once = False
        self.last_status: Optional[DockingStatus] = None
        self.clock.reset()

    @property
    def is_docked(self) -> bool:
        return self.state == DockingState.DOCKED

    def compute_status(self, body: SimulationBackend) -> DockingStatus:
        error = body.position - self.reference_position
        velocity = body.velocity
        angle_deg = float(np.degrees(quat_angle_error(self.reference_orientation, body.quaternion)))
        lateral = float(np.hypot(velocity[0], velocity[2]))
        axial = float(velocity[2])
        angular_speed = float(np.degrees(np.linalg.norm(body.angular_velocity)))

        p = self.params
        return DockingStatus(
            position_error=error,
            distance=float(np.linalg.norm(error)),
            angle_error_deg=angle_deg,
            lateral_speed=lateral,
            axial_speed=axial,
            speed=float(np.linalg.norm(velocity)),
            angular_speed=angular_speed,
            in_box=bool(np.all(np.abs(error) <= p.box_size)),
            in_angle=angle_deg <= p.angle_threshold,
            within_speed_limits=lateral <= p.max_lateral_speed and axial <= p.max_axial_speed,
            within_angular_speed_limit=angular_speed <= p.max_angular_speed,
        )

    def evaluate(self, body: SimulationBackend) -> DockingStatus:
        """
        Observe the body after a physics step and advance the state.

        Leaving the box sets the eligibility latch. Docking zeroes the
        body's velocities.
        """
        status = self.compute_status(body)
        self.last_status = status

        if self.state == DockingState.DOCKED:
            return status

        if not status.in_box:
            self.has_left_docking_box_once = True
            if self.state == DockingState.UNDOCKED:
                self.state = DockingState.ELIGIBLE
                logger.debug("Left docking box; docking enabled")

        if self.state == DockingState.ELIGIBLE and status.all_criteria_met:
            self._dock(body)
        return status

    def _dock(self, body: SimulationBackend) -> None:
        body.set_state(velocity=np.zeros(3), angular_velocity=np.zeros(3))
        self.state = DockingState.DOCKED
        self.clock.freeze()
        self.pause()
        logger.info("DOCKED (elapsed %s)", self.clock.formatted())

    def undock(self) -> bool:
        """
        Manual undock; only allowed while docked and paused.

        Returns:
            True if the vehicle undocked
        """
        if not (self.state == DockingState.DOCKED and self.paused):
            logger.debug("Undock ignored (state=%s, paused=%s)", self.state.value, self.paused)
            return False
        self.state = DockingState.UNDOCKED
        self.has_left_docking_box_once = False
        self.clock.start(paused=self.paused)
        logger.info("Undocked")
        return True

    def pause(self) -> None:
        if not self.paused:
            self.paused = True
            self.clock.pause()

    def resume(self) -> None:
        if self.paused:
            self.paused = False
            self.clock.resume()

    def toggle_pause(self) -> bool:
        """
        Operator pause toggle. Undocks first when docked and paused.

        Returns:
            New paused flag
        """
        if self.state == DockingState.DOCKED and self.paused:
            self.undock()
        if self.paused:
            self.resume()
        else:
            self.pause()
        return self.paused

    def elapsed_seconds(self) -> float:
        return self.clock.elapsed()

    def formatted_elapsed(self) -> str:
        return self.clock.formatted()

