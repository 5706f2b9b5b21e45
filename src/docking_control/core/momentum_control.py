"""
Momentum Actuator Controller

Arbitrates torque requests across the reaction-wheel and CMG banks.

Momentum bookkeeping uses its own fixed step (1/60 s by default),
independent of the rigid-body integration step.

Reaction wheels
    The request is projected on each spin axis. The torque a wheel may
    absorb is bounded by ``headroom / dt`` in the requested direction (a
    graceful roll-off near saturation) and by ``max_torque``. The wheel
    stores ``+applied * dt``; the body receives ``-axis * applied``.

CMGs
    Every CMG takes the full request as a body torque. If storing
    ``-torque * dt`` would push ``|h|`` past capacity, the torque is scaled
    so that ``|h|`` lands exactly on the limit; its magnitude is then
    clamped to ``max_torque``.

Body torques are rotated from the vehicle frame to the world frame before
they are applied.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union

import numpy as np

from ..config.constants import Constants
from ..utils.orientation_utils import rotate_vector
from .backend import SimulationBackend
from .vehicle_state import CMG, ReactionWheel

logger = logging.getLogger(__name__)


class ControlMode(Enum):
    """Active attitude actuator bank."""

    THRUSTERS = "thrusters"
    REACTION_WHEELS = "reactionwheels"
    CMGS = "cmgs"

    @property
    def display_name(self) -> str:
        return {
            ControlMode.THRUSTERS: "Thrusters",
            ControlMode.REACTION_WHEELS: "Reaction Wheels",
            ControlMode.CMGS: "CMGs",
        }[self]


@dataclass
class TorqueResult:
    """Outcome of ``apply_control_torque``."""

    mode: ControlMode
    requested: np.ndarray
    body_torque_local: np.ndarray = field(default_factory=lambda: np.zeros(3))
    body_torque_world: np.ndarray = field(default_factory=lambda: np.zeros(3))
    actuator_torques: List[Union[float, np.ndarray]] = field(default_factory=list)
    saturated: bool = False


@dataclass
class WheelStatus:
    name: str
    momentum: float
    max_momentum: float
    percentage: float


@dataclass
class CMGStatus:
    name: str
    momentum: float
    max_momentum: float
    momentum_vector: np.ndarray
    percentage: float


@dataclass
class ActuatorStatus:
    mode: ControlMode
    loaded: bool
    desaturation_active: bool = False
    reaction_wheels: List[WheelStatus] = field(default_factory=list)
    cmgs: List[CMGStatus] = field(default_factory=list)


def wheel_torque_bound(wheel: ReactionWheel, requested: float, dt: float) -> float:
    """Clamp a spin-axis torque request to momentum headroom and max torque."""
    if requested > 0:
        headroom = wheel.max_angular_momentum - wheel.current_angular_momentum
        applied = min(requested, max(headroom, 0.0) / dt, wheel.max_torque)
    elif requested < 0:
        headroom = wheel.current_angular_momentum + wheel.max_angular_momentum
        applied = max(requested, -max(headroom, 0.0) / dt, -wheel.max_torque)
    else:
        applied = 0.0
    return applied


def cmg_headroom_scale(momentum: np.ndarray, delta: np.ndarray, limit: float) -> float:
    """
    Largest ``s`` in [0, 1] with ``|momentum + s * delta| <= limit``.

    Returns 1.0 when the full delta fits.
    """
    if np.linalg.norm(momentum + delta) <= limit:
        return 1.0
    a = float(np.dot(delta, delta))
    if a <= 0.0:
        return 1.0
    b = 2.0 * float(np.dot(momentum, delta))
    c = float(np.dot(momentum, momentum)) - limit * limit
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return 0.0
    s = (-b + math.sqrt(disc)) / (2.0 * a)
    return min(max(s, 0.0), 1.0)


class MomentumActuatorController:
    """
    Mode state machine and torque dispatch for the momentum banks.

    The mode only changes through ``toggle_mode`` (and ``reset``).
    """

    def __init__(
        self,
        body: SimulationBackend,
        reaction_wheels: Sequence[ReactionWheel] = (),
        cmgs: Sequence[CMG] = (),
        dt: float = Constants.MOMENTUM_DT,
    ):
        self.body = body
        self.reaction_wheels = list(reaction_wheels)
        self.cmgs = list(cmgs)
        self.dt = dt
        self.mode = ControlMode.THRUSTERS

    @property
    def loaded(self) -> bool:
        return bool(self.reaction_wheels or self.cmgs)

    def toggle_mode(self) -> ControlMode:
        """
        Cycle THRUSTERS -> REACTION_WHEELS -> CMGS -> THRUSTERS.

        Banks with no actuators are skipped. Without any momentum actuators
        the mode stays THRUSTERS.
        """
        if not self.loaded:
            logger.warning("No attitude control actuators loaded; staying in thruster mode")
            self.mode = ControlMode.THRUSTERS
            return self.mode

        order = [ControlMode.THRUSTERS]
        if self.reaction_wheels:
            order.append(ControlMode.REACTION_WHEELS)
        if self.cmgs:
            order.append(ControlMode.CMGS)

        current = order.index(self.mode) if self.mode in order else 0
        self.mode = order[(current + 1) % len(order)]
        logger.info("Control mode: %s", self.mode.display_name)
        return self.mode

    def average_max_torque(self) -> Optional[float]:
        """Mean ``max_torque`` of the active bank, or None in thruster mode or when empty."""
        if self.mode == ControlMode.REACTION_WHEELS and self.reaction_wheels:
            return sum(w.max_torque for w in self.reaction_wheels) / len(self.reaction_wheels)
        if self.mode == ControlMode.CMGS and self.cmgs:
            return sum(c.max_torque for c in self.cmgs) / len(self.cmgs)
        return None

    def apply_control_torque(self, requested) -> TorqueResult:
        """
        Dispatch a vehicle-frame torque request to the active bank.

        In thruster mode nothing is applied. Non-finite requests are
        ignored so stored momentum stays finite.
        """
        requested = np.asarray(requested, dtype=float).reshape(3)
        if not np.all(np.isfinite(requested)):
            logger.warning("Ignoring non-finite torque request %s", requested)
            return TorqueResult(mode=self.mode, requested=requested)
        if self.mode == ControlMode.REACTION_WHEELS:
            result = self._apply_reaction_wheels(requested)
        elif self.mode == ControlMode.CMGS:
            result = self._apply_cmgs(requested)
        else:
            return TorqueResult(mode=self.mode, requested=requested)

        if np.any(result.body_torque_local):
            result.body_torque_world = rotate_vector(self.body.quaternion, result.body_torque_local)
            self.body.apply_torque(result.body_torque_world)
        return result

    def _apply_reaction_wheels(self, requested: np.ndarray) -> TorqueResult:
        result = TorqueResult(mode=self.mode, requested=requested)
        body_torque = np.zeros(3)
        for wheel in self.reaction_wheels:
            along_axis = float(np.dot(wheel.orientation, requested))
            applied = wheel_torque_bound(wheel, along_axis, self.dt)
            if abs(applied) < abs(along_axis) - 1e-12:
                result.saturated = True

            wheel.current_angular_momentum = float(
                np.clip(
                    wheel.current_angular_momentum + applied * self.dt,
                    -wheel.max_angular_momentum,
                    wheel.max_angular_momentum,
                )
            )
            body_torque -= wheel.orientation * applied
            result.actuator_torques.append(applied)

        result.body_torque_local = body_torque
        return result

    def _apply_cmgs(self, requested: np.ndarray) -> TorqueResult:
        result = TorqueResult(mode=self.mode, requested=requested)
        body_torque = np.zeros(3)
        for cmg in self.cmgs:
            torque = requested.copy()
            scale = cmg_headroom_scale(
                cmg.current_angular_momentum, -torque * self.dt, cmg.max_angular_momentum
            )
            torque *= scale

            magnitude = float(np.linalg.norm(torque))
            if magnitude > cmg.max_torque:
                torque *= cmg.max_torque / magnitude
            if np.linalg.norm(torque) < np.linalg.norm(requested) - 1e-12:
                result.saturated = True

            cmg.current_angular_momentum = cmg.current_angular_momentum - torque * self.dt
            body_torque += torque
            result.actuator_torques.append(torque)

        result.body_torque_local = body_torque
        return result

    def total_wheel_momentum(self) -> np.ndarray:
        total = np.zeros(3)
        for wheel in self.reaction_wheels:
            total += wheel.momentum_vector
        return total

    def total_cmg_momentum(self) -> np.ndarray:
        total = np.zeros(3)
        for cmg in self.cmgs:
            total += cmg.current_angular_momentum
        return total

    def get_status(self, desaturation_active: bool = False) -> ActuatorStatus:
        return ActuatorStatus(
            mode=self.mode,
            loaded=self.loaded,
            desaturation_active=desaturation_active,
            reaction_wheels=[
                WheelStatus(
                    name=w.name or f"RW{w.index}",
                    momentum=w.current_angular_momentum,
                    max_momentum=w.max_angular_momentum,
                    percentage=w.saturation_percentage,
                )
                for w in self.reaction_wheels
            ],
            cmgs=[
                CMGStatus(
                    name=c.name or f"CMG{c.index}",
                    momentum=c.momentum_magnitude,
                    max_momentum=c.max_angular_momentum,
                    momentum_vector=c.current_angular_momentum.copy(),
                    percentage=c.saturation_percentage,
                )
                for c in self.cmgs
            ],
        )

    def reset(self) -> None:
        """Thruster mode with every momentum store emptied."""
        self.mode = ControlMode.THRUSTERS
        for wheel in self.reaction_wheels:
            wheel.current_angular_momentum = 0.0
        for cmg in self.cmgs:
            cmg.current_angular_momentum = np.zeros(3)
