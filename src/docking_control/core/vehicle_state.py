"""
Vehicle State

Session-owned runtime records for the vehicle: thrusters, momentum
actuators, propellant and the rigid body they act on. Built once from an
``AppConfig``; nothing here is module-level state.

Mount positions are stored relative to the centre of mass (the configured
``center_of_mass`` offset is subtracted at build time).
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import numpy as np

from ..config.constants import Constants
from ..config.models import AppConfig
from .rigid_body import RigidBodyBackend

if TYPE_CHECKING:
    from .thruster_binding import ControlChannel

logger = logging.getLogger(__name__)


@dataclass
class Thruster:
    """A single thruster in the vehicle frame."""

    index: int
    position: np.ndarray
    direction: np.ndarray
    thrust: float = Constants.DEFAULT_THRUST
    isp: float = Constants.DEFAULT_ISP
    name: Optional[str] = None
    auto_bind: bool = True
    keybind: Tuple[str, ...] = ()
    active: bool = False

    @property
    def torque_arm(self) -> np.ndarray:
        """Unit-thrust torque ``position x direction``."""
        return np.cross(self.position, self.direction)

    @property
    def label(self) -> str:
        return self.name or f"T{self.index}"


@dataclass
class ReactionWheel:
    """Single-axis momentum store."""

    index: int
    orientation: np.ndarray
    position: np.ndarray
    max_angular_momentum: float = Constants.DEFAULT_RW_MAX_MOMENTUM
    max_torque: float = Constants.DEFAULT_RW_MAX_TORQUE
    current_angular_momentum: float = 0.0
    name: Optional[str] = None

    @property
    def momentum_vector(self) -> np.ndarray:
        return self.orientation * self.current_angular_momentum

    @property
    def saturation_percentage(self) -> float:
        """Signed fill level in percent of capacity."""
        return self.current_angular_momentum / self.max_angular_momentum * 100.0


@dataclass
class CMG:
    """Three-axis momentum store limited by vector magnitude."""

    index: int
    max_angular_momentum: float = Constants.DEFAULT_CMG_MAX_MOMENTUM
    max_torque: float = Constants.DEFAULT_CMG_MAX_TORQUE
    current_angular_momentum: np.ndarray = field(default_factory=lambda: np.zeros(3))
    name: Optional[str] = None

    @property
    def momentum_magnitude(self) -> float:
        return float(np.linalg.norm(self.current_angular_momentum))

    @property
    def saturation_percentage(self) -> float:
        return self.momentum_magnitude / self.max_angular_momentum * 100.0


@dataclass
class FuelState:
    """
    Propellant bookkeeping.

    ``fuel_mass`` only ever decreases, except through ``reset``.
    """

    dry_mass: float
    fuel_mass: float
    max_fuel_mass: float

    @property
    def total_mass(self) -> float:
        return self.dry_mass + self.fuel_mass

    @property
    def is_empty(self) -> bool:
        return self.fuel_mass <= 0.0

    @property
    def percentage(self) -> float:
        if self.max_fuel_mass <= 0:
            return 0.0
        return self.fuel_mass / self.max_fuel_mass * 100.0

    def consume(self, amount: float) -> float:
        """Debit ``amount`` kg (clamped at empty) and return remaining fuel."""
        if amount > 0:
            self.fuel_mass = max(0.0, self.fuel_mass - amount)
        return self.fuel_mass

    def reset(self) -> None:
        self.fuel_mass = self.max_fuel_mass


@dataclass
class VehicleState:
    """Everything the control core mutates during a session."""

    body: RigidBodyBackend
    fuel: FuelState
    thrusters: List[Thruster] = field(default_factory=list)
    reaction_wheels: List[ReactionWheel] = field(default_factory=list)
    cmgs: List[CMG] = field(default_factory=list)
    channel_map: Dict["ControlChannel", List[int]] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: AppConfig) -> "VehicleState":
        """Build runtime records from a validated configuration."""
        craft = config.spacecraft
        com = np.array(craft.center_of_mass, dtype=float)

        thrusters = [
            Thruster(
                index=i,
                position=np.array(t.position, dtype=float) - com,
                direction=np.array(t.direction, dtype=float),
                thrust=t.thrust,
                isp=t.isp,
                name=t.name,
                auto_bind=t.auto_bind,
                keybind=tuple(t.keybind),
            )
            for i, t in enumerate(config.thrusters)
        ]
        wheels = [
            ReactionWheel(
                index=i,
                orientation=np.array(w.orientation, dtype=float),
                position=np.array(w.position, dtype=float) - com,
                max_angular_momentum=w.max_angular_momentum,
                max_torque=w.max_torque,
                name=w.name or f"RW{i}",
            )
            for i, w in enumerate(config.reaction_wheels)
        ]
        cmgs = [
            CMG(
                index=i,
                max_angular_momentum=c.max_angular_momentum,
                max_torque=c.max_torque,
                name=c.name or f"CMG{i}",
            )
            for i, c in enumerate(config.cmgs)
        ]

        fuel = FuelState(
            dry_mass=craft.dry_mass,
            fuel_mass=craft.fuel_mass,
            max_fuel_mass=craft.max_fuel_mass,
        )
        body = RigidBodyBackend(
            mass=fuel.total_mass,
            inertia=craft.inertia,
            dt=config.simulation.physics_dt,
        )

        logger.debug(
            "Vehicle built: %d thrusters, %d wheels, %d CMGs, mass %.2f kg",
            len(thrusters),
            len(wheels),
            len(cmgs),
            fuel.total_mass,
        )
        return cls(
            body=body,
            fuel=fuel,
            thrusters=thrusters,
            reaction_wheels=wheels,
            cmgs=cmgs,
        )

    def deactivate_thrusters(self) -> None:
        for thruster in self.thrusters:
            thruster.active = False

    @property
    def active_thruster_indices(self) -> List[int]:
        return [t.index for t in self.thrusters if t.active]
