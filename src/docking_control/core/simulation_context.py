"""
Simulation Context Module

Defines the SimulationContext data class returned by every session step.
It snapshots what happened during the frame so callers do not have to
query several components.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .desaturation import DesaturationResult
from .docking import DockingState, DockingStatus
from .momentum_control import ControlMode, TorqueResult
from .propulsion import FiringResult
from .thruster_binding import ControlChannel


@dataclass
class SimulationContext:
    """
    Holds the state of the session after a step.
    """

    # Time
    simulation_time: float = 0.0
    frame_dt: float = 0.0
    step_number: int = 0
    elapsed: str = "0:00:00.000"
    # State [x, y, z, qw, qx, qy, qz, vx, vy, vz, wx, wy, wz]
    current_state: np.ndarray = field(default_factory=lambda: np.zeros(13))
    # Session
    paused: bool = True
    docking_state: DockingState = DockingState.DOCKED
    docking_status: Optional[DockingStatus] = None
    mode: ControlMode = ControlMode.THRUSTERS
    # Control
    active_channels: List[ControlChannel] = field(default_factory=list)
    expired_channels: List[ControlChannel] = field(default_factory=list)
    firings: List[FiringResult] = field(default_factory=list)
    torque_result: Optional[TorqueResult] = None
    desaturation: Optional[DesaturationResult] = None
    fuel_mass: float = 0.0
    # Set when the step raised and was contained
    error: Optional[str] = None

    @property
    def active_thrusters(self) -> List[int]:
        return [f.thruster_index for f in self.firings if f.fired]
