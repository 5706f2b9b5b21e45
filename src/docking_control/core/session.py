"""
Simulation Session

Owns one vehicle and runs the fixed-phase control loop:

1. expire timed firings
2. channel forces/torques, momentum control and desaturation
3. one rigid-body step of ``physics_dt``
4. presentation sync (optional hook)
5. docking evaluation
6. clear per-frame activation state

While paused, phases 2 and 3 are skipped. A step never raises; failures
are logged and reported on the returned context.

Channel semantics: a rotation channel always means a body torque of that
sign about its axis. In thruster mode it fires the bound thrusters. In the
momentum modes it becomes a torque request of ``torque_percentage`` of the
bank's mean max torque, and only translation channels fire thrusters.

Usage:
    from docking_control.core.session import SimulationSession

    session = SimulationSession()
    session.toggle_pause()          # undock and resume
    session.press_channel(ControlChannel.PLUS_Z)
    context = session.step(1 / 60)
"""

import logging
import time
from typing import Callable, Dict, List, Optional

import numpy as np

from ..config.constants import Constants
from ..config.simulation_config import SimulationConfig
from .desaturation import DesaturationController, DesaturationResult
from .docking import DockingStateMachine, DockingStatus
from .error_handling import with_error_context
from .momentum_control import (
    ActuatorStatus,
    ControlMode,
    MomentumActuatorController,
    TorqueResult,
)
from .propulsion import FiringResult, FuelStatus, PropulsionFuelModel
from .simulation_context import SimulationContext
from .thruster_binding import ControlChannel, bind_thruster_channels
from .thruster_manager import ThrusterManager
from .vehicle_state import VehicleState

logger = logging.getLogger(__name__)


def _contained_step_result(session: "SimulationSession", frame_dt: float = 0.0) -> SimulationContext:
    context = session.snapshot(frame_dt)
    context.error = "step failed"
    return context


class SimulationSession:
    """
    In-memory docking session for a single vehicle.

    Args:
        config: Simulation configuration (defaults to the built-in vehicle)
        time_source: Wall clock for the mission clock and timed firing
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        time_source: Callable[[], float] = time.monotonic,
    ):
        self.config = config or SimulationConfig.create_default()
        app = self.config.app_config

        self.vehicle = VehicleState.from_config(app)
        self.propulsion = PropulsionFuelModel(self.vehicle.fuel, self.vehicle.body)
        self.momentum = MomentumActuatorController(
            self.vehicle.body,
            self.vehicle.reaction_wheels,
            self.vehicle.cmgs,
            dt=app.simulation.momentum_dt,
        )
        self.desaturation = DesaturationController(
            self.momentum, self.propulsion, self.vehicle.thrusters
        )
        self.docking = DockingStateMachine(app.docking, time_source=time_source)
        self.thruster_manager = ThrusterManager(
            firing_duration=app.simulation.firing_duration,
            time_source=time_source,
        )

        self.physics_dt = app.simulation.physics_dt
        self.torque_percentage = app.simulation.torque_percentage
        self.step_number = 0
        self.presentation_hook: Optional[Callable[[VehicleState], None]] = None

        self.bind_thruster_channels()
        self._place_at_reference()

        logger.info(
            "Session ready: %d thrusters, %d wheels, %d CMGs",
            len(self.vehicle.thrusters),
            len(self.vehicle.reaction_wheels),
            len(self.vehicle.cmgs),
        )

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def body(self):
        return self.vehicle.body

    @property
    def paused(self) -> bool:
        return self.docking.paused

    @property
    def mode(self) -> ControlMode:
        return self.momentum.mode

    @property
    def channel_map(self) -> Dict[ControlChannel, List[int]]:
        return self.vehicle.channel_map

    # ------------------------------------------------------------------
    # Exposed operations
    # ------------------------------------------------------------------

    def bind_thruster_channels(self) -> Dict[ControlChannel, List[int]]:
        """(Re)classify the thrusters into control channels."""
        channel_map = bind_thruster_channels(self.vehicle.thrusters)
        self.vehicle.channel_map = channel_map
        self.thruster_manager.set_channel_map(channel_map)
        return channel_map

    def fire_thruster(self, index: int, dt: float, throttle: float = 1.0) -> FiringResult:
        if not 0 <= index < len(self.vehicle.thrusters):
            logger.warning("fire_thruster: no thruster with index %s", index)
            return FiringResult(index, fired=False, active=False, reason="unknown thruster")
        return self.propulsion.fire(self.vehicle.thrusters[index], dt, throttle)

    def apply_control_torque(self, torque) -> TorqueResult:
        return self.momentum.apply_control_torque(torque)

    def toggle_mode(self) -> ControlMode:
        mode = self.momentum.toggle_mode()
        if mode == ControlMode.THRUSTERS:
            self.desaturation.stop()
        return mode

    def desaturate(self, dt: Optional[float] = None) -> DesaturationResult:
        """Operator-triggered desaturation of the active momentum bank."""
        return self.desaturation.start(self.momentum.dt if dt is None else dt)

    def evaluate_docking(self) -> DockingStatus:
        return self.docking.evaluate(self.vehicle.body)

    def get_fuel_status(self) -> FuelStatus:
        return self.propulsion.get_fuel_status()

    def get_actuator_status(self) -> ActuatorStatus:
        return self.momentum.get_status(self.desaturation.active)

    def reset_all(self) -> SimulationContext:
        """Reference pose, full tank, thruster mode, empty momentum stores, docked and paused."""
        self._place_at_reference()
        self.propulsion.reset_fuel()
        self.momentum.reset()
        self.desaturation.stop()
        self.docking.reset()
        self.thruster_manager.reset()
        self.vehicle.deactivate_thrusters()
        self.step_number = 0
        logger.info("Session reset")
        return self.snapshot()

    # ------------------------------------------------------------------
    # Operator input
    # ------------------------------------------------------------------

    def press_channel(self, channel: ControlChannel) -> None:
        self.thruster_manager.press(channel)

    def release_channel(self, channel: ControlChannel) -> None:
        self.thruster_manager.release(channel)

    def toggle_fine_control(self) -> bool:
        return self.thruster_manager.toggle_fine_control()

    def set_timed_firing(self, enabled: bool, duration: Optional[float] = None) -> None:
        self.thruster_manager.set_timed_firing(enabled, duration)

    def set_torque_percentage(self, percentage: float) -> int:
        self.torque_percentage = int(min(max(round(percentage), 1), 100))
        return self.torque_percentage

    def toggle_pause(self) -> bool:
        return self.docking.toggle_pause()

    def undock(self) -> bool:
        return self.docking.undock()

    def stop_all_motion(self) -> None:
        """Zero linear and angular velocity and switch every thruster off."""
        self.vehicle.body.stop()
        self.vehicle.deactivate_thrusters()

    def formatted_elapsed(self) -> str:
        return self.docking.formatted_elapsed()

    # ------------------------------------------------------------------
    # Step loop
    # ------------------------------------------------------------------

    def torque_per_axis(self) -> float:
        max_torque = self.momentum.average_max_torque()
        if max_torque is None:
            max_torque = Constants.FALLBACK_AXIS_TORQUE
        return max_torque * self.torque_percentage / 100.0

    def _rotation_request(self, channels: List[ControlChannel]) -> np.ndarray:
        """Desired body torque from the engaged rotation channels."""
        desired = np.zeros(3)
        per_axis = self.torque_per_axis()
        for channel in channels:
            if channel.is_rotation:
                desired[channel.axis] += channel.sign * per_axis
        return desired

    @with_error_context("Simulation step", reraise=False, default_factory=_contained_step_result)
    def step(self, frame_dt: float) -> SimulationContext:
        """
        Advance the session by one frame.

        Args:
            frame_dt: Wall time covered by this frame; used for fuel accounting

        Returns:
            SimulationContext describing the frame
        """
        # 1. timed firing expirations
        expired = self.thruster_manager.expire_timed_firings()

        channels = self.thruster_manager.active_channels()
        firings: List[FiringResult] = []
        torque_result: Optional[TorqueResult] = None
        desat_result: Optional[DesaturationResult] = None

        if not self.paused:
            # 2. control
            if self.momentum.mode == ControlMode.THRUSTERS:
                fire_channels = channels
            else:
                desired = self._rotation_request(channels)
                if np.any(desired):
                    # Wheels take the torque they absorb; the body gets the reaction
                    request = -desired if self.momentum.mode == ControlMode.REACTION_WHEELS else desired
                    torque_result = self.momentum.apply_control_torque(request)
                if self.desaturation.active:
                    desat_result = self.desaturation.step(frame_dt)
                fire_channels = [c for c in channels if c.is_translation]

            for index in self.thruster_manager.thruster_indices(fire_channels):
                firings.append(self.propulsion.fire(self.vehicle.thrusters[index], frame_dt))

            # 3. physics
            self.vehicle.body.update_physics(self.physics_dt)

        # 4. presentation sync
        if self.presentation_hook is not None:
            self.presentation_hook(self.vehicle)

        # 5. docking
        status = self.docking.evaluate(self.vehicle.body)

        # 6. transient activation state
        fired_now = {f.thruster_index for f in firings if f.active}
        for thruster in self.vehicle.thrusters:
            if thruster.index not in fired_now:
                thruster.active = False
        self.thruster_manager.end_frame()

        self.step_number += 1
        context = self.snapshot(frame_dt)
        context.docking_status = status
        context.active_channels = channels
        context.expired_channels = expired
        context.firings = firings
        context.torque_result = torque_result
        context.desaturation = desat_result
        return context

    def snapshot(self, frame_dt: float = 0.0) -> SimulationContext:
        body = self.vehicle.body
        return SimulationContext(
            simulation_time=body.simulation_time,
            frame_dt=frame_dt,
            step_number=self.step_number,
            elapsed=self.docking.formatted_elapsed(),
            current_state=body.get_state(),
            paused=self.paused,
            docking_state=self.docking.state,
            docking_status=self.docking.last_status,
            mode=self.momentum.mode,
            fuel_mass=self.vehicle.fuel.fuel_mass,
        )

    def _place_at_reference(self) -> None:
        docking = self.config.app_config.docking
        body = self.vehicle.body
        body.set_state(
            position=docking.position,
            velocity=np.zeros(3),
            quaternion=docking.orientation,
            angular_velocity=np.zeros(3),
        )
        body.clear_loads()
