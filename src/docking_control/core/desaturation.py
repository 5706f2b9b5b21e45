"""
Momentum Desaturation

Offloads stored momentum from the active momentum bank with thrusters.

Each pass sums the bank's momentum, takes the opposing unit direction and
fires every thruster whose unit-thrust torque (``position x direction``)
aligns with it by more than 0.5. Every aligned firing bleeds a fixed
increment from the bank. This is a proportional heuristic, not an
allocator.

The controller stays active (and is re-run every step by the session)
until the bank drops below its stop threshold.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..config.constants import Constants
from .momentum_control import ControlMode, MomentumActuatorController
from .propulsion import PropulsionFuelModel
from .vehicle_state import Thruster

logger = logging.getLogger(__name__)


@dataclass
class DesaturationResult:
    """Outcome of one desaturation pass."""

    active: bool
    mode: ControlMode
    fired_thrusters: List[int] = field(default_factory=list)
    momentum_before: float = 0.0
    momentum_after: float = 0.0


class DesaturationController:
    """Thruster-based momentum dump with hysteresis."""

    def __init__(
        self,
        momentum: MomentumActuatorController,
        propulsion: PropulsionFuelModel,
        thrusters: List[Thruster],
    ):
        self.momentum = momentum
        self.propulsion = propulsion
        self.thrusters = thrusters
        self.active = False

    def start(self, dt: float = Constants.MOMENTUM_DT) -> DesaturationResult:
        """Operator trigger: activate and run one pass."""
        if self.momentum.mode == ControlMode.THRUSTERS:
            logger.info("Desaturation requested in thruster mode; nothing to do")
            self.active = False
            return DesaturationResult(active=False, mode=self.momentum.mode)

        self.active = True
        logger.info("Desaturation started (%s)", self.momentum.mode.display_name)
        return self.step(dt, triggered=True)

    def step(self, dt: float, triggered: bool = False) -> DesaturationResult:
        """Run one pass if active; ``dt`` is the firing duration for fuel accounting."""
        mode = self.momentum.mode
        if not self.active or mode == ControlMode.THRUSTERS:
            self.active = False
            return DesaturationResult(active=False, mode=mode)

        if mode == ControlMode.REACTION_WHEELS:
            result = self._wheel_pass(dt)
        else:
            result = self._cmg_pass(dt, triggered)

        if not result.active:
            logger.info("Desaturation complete (%.3f N*m*s)", result.momentum_after)
        return result

    def stop(self) -> None:
        self.active = False

    def _aligned_thrusters(self, opposing: np.ndarray):
        for thruster in self.thrusters:
            alignment = float(np.dot(thruster.torque_arm, opposing))
            if alignment > Constants.DESAT_ALIGNMENT_THRESHOLD:
                yield thruster, alignment

    def _wheel_pass(self, dt: float) -> DesaturationResult:
        wheels = self.momentum.reaction_wheels
        total = self.momentum.total_wheel_momentum()
        result = DesaturationResult(
            active=True,
            mode=ControlMode.REACTION_WHEELS,
            momentum_before=float(np.linalg.norm(total)),
        )

        if result.momentum_before > Constants.RW_DESAT_TRIGGER:
            opposing = -total / result.momentum_before
            for thruster, alignment in self._aligned_thrusters(opposing):
                firing = self.propulsion.fire(thruster, dt, Constants.RW_DESAT_THROTTLE)
                if not firing.fired:
                    continue
                result.fired_thrusters.append(thruster.index)
                bleed = alignment * Constants.RW_DESAT_BLEED
                for wheel in wheels:
                    h = wheel.current_angular_momentum
                    wheel.current_angular_momentum = float(np.sign(h) * max(abs(h) - bleed, 0.0))

        result.momentum_after = float(np.linalg.norm(self.momentum.total_wheel_momentum()))
        peak = max((abs(w.current_angular_momentum) for w in wheels), default=0.0)
        if peak < Constants.RW_DESAT_STOP:
            self.active = False
        elif result.momentum_before <= Constants.RW_DESAT_TRIGGER:
            # Wheel momenta cancel; there is no net direction to dump along
            logger.info(
                "Desaturation stopped: net wheel momentum %.3f N*m*s, largest wheel %.3f N*m*s",
                result.momentum_before,
                peak,
            )
            self.active = False
        result.active = self.active
        return result

    def _cmg_pass(self, dt: float, triggered: bool) -> DesaturationResult:
        cmgs = self.momentum.cmgs
        total = self.momentum.total_cmg_momentum()
        magnitude = float(np.linalg.norm(total))
        result = DesaturationResult(
            active=True, mode=ControlMode.CMGS, momentum_before=magnitude
        )

        # Trigger level gates the first pass; later passes run down to the stop level.
        threshold = Constants.CMG_DESAT_TRIGGER if triggered else Constants.CMG_DESAT_STOP
        if magnitude > threshold:
            opposing = -total / magnitude
            for thruster, _alignment in self._aligned_thrusters(opposing):
                firing = self.propulsion.fire(thruster, dt, Constants.CMG_DESAT_THROTTLE)
                if not firing.fired:
                    continue
                result.fired_thrusters.append(thruster.index)
                for cmg in cmgs:
                    cmg.current_angular_momentum = (
                        cmg.current_angular_momentum + opposing * Constants.CMG_DESAT_BLEED
                    )

        result.momentum_after = float(np.linalg.norm(self.momentum.total_cmg_momentum()))
        if result.momentum_after < Constants.CMG_DESAT_STOP or magnitude <= threshold:
            self.active = False
        result.active = self.active
        return result
