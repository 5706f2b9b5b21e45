"""
Propulsion and Fuel Model

Turns a thruster firing into a body-frame force at the mount point and
debits propellant at ``thrust / (isp * g0)`` kg/s.

Body mass tracks ``dry + fuel`` after every debit. The inertia tensor is
configured explicitly and is never recomputed from mass here.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config.constants import Constants
from .backend import SimulationBackend
from .vehicle_state import FuelState, Thruster

logger = logging.getLogger(__name__)


@dataclass
class FiringResult:
    """Outcome of a single ``fire`` call."""

    thruster_index: int
    fired: bool
    active: bool
    fuel_consumed: float = 0.0
    remaining_fuel: float = 0.0
    reason: Optional[str] = None


@dataclass
class FuelStatus:
    dry_mass: float
    fuel_mass: float
    max_fuel_mass: float
    total_mass: float
    percentage: float


def mass_flow_rate(thrust: float, isp: float) -> float:
    """Propellant mass flow in kg/s."""
    return thrust / (isp * Constants.G0)


def _valid_performance(thruster: Thruster) -> bool:
    return (
        math.isfinite(thruster.thrust)
        and math.isfinite(thruster.isp)
        and thruster.thrust > 0
        and thruster.isp > 0
    )


class PropulsionFuelModel:
    """Fuel-limited thruster firing against a rigid body."""

    def __init__(self, fuel: FuelState, body: SimulationBackend):
        self.fuel = fuel
        self.body = body

    def fire(self, thruster: Thruster, dt: float, throttle: float = 1.0) -> FiringResult:
        """
        Fire one thruster for ``dt`` seconds at ``throttle`` of nominal thrust.

        Never raises. An empty tank or invalid thrust/ISP rejects the firing
        and marks the thruster inactive. A firing that empties the tank is
        still applied, and the thruster is deactivated right after.
        """
        if self.fuel.is_empty:
            thruster.active = False
            return FiringResult(
                thruster.index, fired=False, active=False, reason="out of fuel"
            )

        if not _valid_performance(thruster):
            logger.warning(
                "Thruster %s has invalid properties (thrust=%r, isp=%r); skipping.",
                thruster.label,
                thruster.thrust,
                thruster.isp,
            )
            thruster.active = False
            return FiringResult(
                thruster.index,
                fired=False,
                active=False,
                remaining_fuel=self.fuel.fuel_mass,
                reason="invalid thrust/isp",
            )

        throttle = min(max(float(throttle), 0.0), 1.0)
        dt = max(float(dt), 0.0)

        force = np.asarray(thruster.direction, dtype=float) * thruster.thrust * throttle
        self.body.apply_local_force(force, thruster.position)

        before = self.fuel.fuel_mass
        remaining = self.fuel.consume(mass_flow_rate(thruster.thrust, thruster.isp) * throttle * dt)
        self.body.set_mass(self.fuel.total_mass)

        exhausted = remaining <= 0.0
        thruster.active = not exhausted
        if exhausted:
            logger.info("Fuel exhausted while firing %s", thruster.label)

        return FiringResult(
            thruster.index,
            fired=True,
            active=thruster.active,
            fuel_consumed=before - remaining,
            remaining_fuel=remaining,
            reason="fuel exhausted" if exhausted else None,
        )

    def get_fuel_status(self) -> FuelStatus:
        return FuelStatus(
            dry_mass=self.fuel.dry_mass,
            fuel_mass=self.fuel.fuel_mass,
            max_fuel_mass=self.fuel.max_fuel_mass,
            total_mass=self.fuel.total_mass,
            percentage=self.fuel.percentage,
        )

    def reset_fuel(self) -> None:
        """Refill the tank and restore body mass."""
        self.fuel.reset()
        self.body.set_mass(self.fuel.total_mass)
