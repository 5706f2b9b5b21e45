"""
Rigid-Body Backend

A single free-flying rigid body with no gravity and no damping.

Integration is semi-implicit Euler: velocities are updated from the
accumulated force/torque first, then the pose is advanced with the new
velocities. The world-frame inverse inertia is ``R diag(1/I) R^T``.

Usage:
    from docking_control.core.rigid_body import RigidBodyBackend

    body = RigidBodyBackend(mass=10.0, inertia=(3, 3, 3), dt=1 / 170)
    body.apply_local_force([0, 0, 50], [0, 0.3, -0.5])
    body.update_physics()
"""

from typing import Iterable, Optional

import numpy as np

from ..utils.orientation_utils import integrate_quaternion, normalize_quat, rotation_matrix
from .backend import SimulationBackend


class RigidBodyBackend(SimulationBackend):
    """numpy rigid-body integrator with explicit diagonal inertia."""

    def __init__(
        self,
        mass: float,
        inertia: Iterable[float],
        dt: float = 1.0 / 170.0,
    ):
        """
        Initialize backend.

        Args:
            mass: Total mass in kg (> 0)
            inertia: Principal moments (Ixx, Iyy, Izz) in kg*m^2
            dt: Default integration step in seconds
        """
        self._dt = float(dt)
        self._simulation_time = 0.0

        self._position = np.zeros(3)
        self._quaternion = np.array([1.0, 0.0, 0.0, 0.0])
        self._velocity = np.zeros(3)
        self._angular_velocity = np.zeros(3)

        self._force = np.zeros(3)
        self._torque = np.zeros(3)

        self._mass = 0.0
        self._inv_mass = 0.0
        self._inertia = np.zeros(3)
        self._inv_inertia = np.zeros(3)
        self.set_mass(mass)
        self.set_inertia(inertia)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def simulation_time(self) -> float:
        return self._simulation_time

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def velocity(self) -> np.ndarray:
        return self._velocity.copy()

    @property
    def quaternion(self) -> np.ndarray:
        return self._quaternion.copy()

    @property
    def angular_velocity(self) -> np.ndarray:
        return self._angular_velocity.copy()

    @property
    def mass(self) -> float:
        return self._mass

    @property
    def inverse_mass(self) -> float:
        return self._inv_mass

    @property
    def inertia(self) -> np.ndarray:
        return self._inertia.copy()

    @property
    def accumulated_force(self) -> np.ndarray:
        """World-frame force pending for the next step."""
        return self._force.copy()

    @property
    def accumulated_torque(self) -> np.ndarray:
        """World-frame torque pending for the next step."""
        return self._torque.copy()

    # ------------------------------------------------------------------
    # Mass properties
    # ------------------------------------------------------------------

    def set_mass(self, mass: float) -> None:
        mass = float(mass)
        self._mass = mass
        self._inv_mass = 1.0 / mass if mass > 0 else 0.0

    def set_inertia(self, inertia: Iterable[float]) -> None:
        values = np.array(list(inertia), dtype=float)
        if values.shape != (3,):
            raise ValueError(f"Inertia must have 3 components, got shape {values.shape}")
        self._inertia = values
        # A zero moment locks that axis
        self._inv_inertia = np.where(values > 0, 1.0 / np.where(values > 0, values, 1.0), 0.0)

    # ------------------------------------------------------------------
    # Loads
    # ------------------------------------------------------------------

    def apply_local_force(self, force: Iterable[float], point: Iterable[float]) -> None:
        rot = rotation_matrix(self._quaternion)
        world_force = rot @ np.asarray(list(force), dtype=float)
        world_point = rot @ np.asarray(list(point), dtype=float)
        self._force += world_force
        self._torque += np.cross(world_point, world_force)

    def apply_torque(self, torque: Iterable[float]) -> None:
        self._torque += np.asarray(list(torque), dtype=float)

    def clear_loads(self) -> None:
        self._force = np.zeros(3)
        self._torque = np.zeros(3)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def get_state(self) -> np.ndarray:
        """Get current state vector [x, y, z, qw, qx, qy, qz, vx, vy, vz, wx, wy, wz]."""
        return np.concatenate(
            [self._position, self._quaternion, self._velocity, self._angular_velocity]
        )

    def set_state(
        self,
        position: Optional[Iterable[float]] = None,
        velocity: Optional[Iterable[float]] = None,
        quaternion: Optional[Iterable[float]] = None,
        angular_velocity: Optional[Iterable[float]] = None,
    ) -> None:
        if position is not None:
            self._position = np.array(list(position), dtype=float)
        if velocity is not None:
            self._velocity = np.array(list(velocity), dtype=float)
        if quaternion is not None:
            self._quaternion = normalize_quat(quaternion)
        if angular_velocity is not None:
            self._angular_velocity = np.array(list(angular_velocity), dtype=float)

    def stop(self) -> None:
        """Zero linear and angular velocity."""
        self._velocity = np.zeros(3)
        self._angular_velocity = np.zeros(3)

    def world_inverse_inertia(self) -> np.ndarray:
        rot = rotation_matrix(self._quaternion)
        return rot @ np.diag(self._inv_inertia) @ rot.T

    def update_physics(self, dt: Optional[float] = None) -> None:
        """
        Advance one step and clear the load accumulators.

        Args:
            dt: Timestep (uses self.dt if None)
        """
        step_dt = self._dt if dt is None else float(dt)

        self._velocity = self._velocity + self._force * self._inv_mass * step_dt
        self._angular_velocity = (
            self._angular_velocity + self.world_inverse_inertia() @ self._torque * step_dt
        )
        self._position = self._position + self._velocity * step_dt
        self._quaternion = integrate_quaternion(
            self._quaternion, self._angular_velocity, step_dt
        )

        self.clear_loads()
        self._simulation_time += step_dt
