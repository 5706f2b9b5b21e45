"""
Rigid-Body Backend Interface
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

import numpy as np


class SimulationBackend(ABC):
    """
    Abstract base class for single rigid-body physics backends.

    Defines the interface required by the session step loop. Forces and
    torques accumulate between steps and are cleared by ``update_physics``.
    """

    @property
    @abstractmethod
    def dt(self) -> float:
        """Physics timestep in seconds."""
        pass

    @property
    @abstractmethod
    def simulation_time(self) -> float:
        """Current simulation time in seconds."""
        pass

    @property
    @abstractmethod
    def position(self) -> np.ndarray:
        """Get position [x, y, z] (world frame)."""
        pass

    @property
    @abstractmethod
    def velocity(self) -> np.ndarray:
        """Get velocity [vx, vy, vz] (world frame)."""
        pass

    @property
    @abstractmethod
    def quaternion(self) -> np.ndarray:
        """Get quaternion [w, x, y, z] (body to world)."""
        pass

    @property
    @abstractmethod
    def angular_velocity(self) -> np.ndarray:
        """Get angular velocity [wx, wy, wz] (world frame, rad/s)."""
        pass

    @property
    @abstractmethod
    def mass(self) -> float:
        """Current total mass in kg."""
        pass

    @abstractmethod
    def set_mass(self, mass: float) -> None:
        """Update mass and inverse mass. Inertia is not touched."""
        pass

    @abstractmethod
    def set_inertia(self, inertia: Iterable[float]) -> None:
        """Set principal moments of inertia (Ixx, Iyy, Izz)."""
        pass

    @abstractmethod
    def apply_local_force(self, force: Iterable[float], point: Iterable[float]) -> None:
        """Apply a body-frame force at a body-frame point."""
        pass

    @abstractmethod
    def apply_torque(self, torque: Iterable[float]) -> None:
        """Apply a world-frame torque."""
        pass

    @abstractmethod
    def get_state(self) -> np.ndarray:
        """Get full state vector (13 elements)."""
        pass

    @abstractmethod
    def set_state(
        self,
        position: Optional[Iterable[float]] = None,
        velocity: Optional[Iterable[float]] = None,
        quaternion: Optional[Iterable[float]] = None,
        angular_velocity: Optional[Iterable[float]] = None,
    ) -> None:
        """Set rigid-body state (unspecified parts are kept)."""
        pass

    @abstractmethod
    def update_physics(self, dt: Optional[float] = None) -> None:
        """Update physics for one timestep."""
        pass
