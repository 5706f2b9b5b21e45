"""
Pydantic Configuration Models for the Docking Control Core

Type-safe configuration models with validation, range checks,
and descriptive error messages.

Thruster thrust/ISP and actuator limits are sanitized rather than rejected:
a non-numeric or non-positive value is replaced by a safe fallback and a
warning is logged, so a slightly broken vehicle file still loads.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import Constants

logger = logging.getLogger(__name__)

Vector3 = Tuple[float, float, float]
QuaternionWXYZ = Tuple[float, float, float, float]


def coerce_vector3(value: Any, default: Vector3 = (0.0, 0.0, 0.0)) -> Vector3:
    """
    Accept ``{x, y, z}`` mappings or 3-element sequences.

    Missing components fall back to the matching component of ``default``.
    String numbers are parsed.
    """
    if value is None:
        return default
    if isinstance(value, dict):
        components = [value.get(axis) for axis in ("x", "y", "z")]
    elif isinstance(value, (list, tuple)) and len(value) == 3:
        components = list(value)
    else:
        raise ValueError(f"Expected {{x, y, z}} or [x, y, z], got {value!r}")

    result = []
    for component, fallback in zip(components, default):
        if component is None:
            result.append(float(fallback))
        else:
            result.append(float(component))
    return (result[0], result[1], result[2])


def _positive_or_default(value: Any, default: float, label: str, owner: str) -> float:
    """Parse a positive finite number, substituting ``default`` on failure."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = float("nan")
    if not math.isfinite(number) or number <= 0:
        logger.warning(
            "Invalid %s value for %s: %r. Defaulting to %s.", label, owner, value, default
        )
        return default
    return number


def _normalize(vector: Vector3, fallback: Vector3) -> Vector3:
    norm = math.sqrt(sum(c * c for c in vector))
    if norm <= 1e-12:
        return fallback
    return (vector[0] / norm, vector[1] / norm, vector[2] / norm)


class ThrusterParams(BaseModel):
    """Configuration for a single thruster."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, description="Display name")
    position: Vector3 = Field(
        ...,
        description="Mount position (x, y, z) in meters, vehicle frame",
    )
    direction: Vector3 = Field(
        ...,
        description="Fire direction (dx, dy, dz), normalized at load",
    )
    thrust: float = Field(
        Constants.DEFAULT_THRUST,
        description="Nominal thrust in Newtons",
    )
    isp: float = Field(
        Constants.DEFAULT_ISP,
        description="Specific impulse in seconds",
    )
    auto_bind: bool = Field(
        True,
        alias="autoBind",
        description="Bind channels from geometry (False: use keybind labels)",
    )
    keybind: List[str] = Field(
        default_factory=list,
        description="Explicit channel labels used when auto_bind is False",
    )

    @field_validator("position", mode="before")
    @classmethod
    def parse_position(cls, v: Any) -> Vector3:
        return coerce_vector3(v)

    @field_validator("direction", mode="before")
    @classmethod
    def parse_direction(cls, v: Any) -> Vector3:
        # Zero vectors are left as-is; geometry is validated upstream.
        vec = coerce_vector3(v)
        return _normalize(vec, vec)

    @field_validator("thrust", mode="before")
    @classmethod
    def sanitize_thrust(cls, v: Any, info) -> float:
        owner = f"thruster {info.data.get('name') or '?'}"
        return _positive_or_default(v, Constants.DEFAULT_THRUST, "thrust", owner)

    @field_validator("isp", mode="before")
    @classmethod
    def sanitize_isp(cls, v: Any, info) -> float:
        owner = f"thruster {info.data.get('name') or '?'}"
        return _positive_or_default(v, Constants.DEFAULT_ISP, "ISP", owner)

    @field_validator("keybind", mode="before")
    @classmethod
    def parse_keybind(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [str(label) for label in v]


class ReactionWheelParams(BaseModel):
    """Configuration for a single reaction wheel."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    orientation: Vector3 = Field(
        (0.0, 0.0, 1.0),
        description="Spin axis, normalized at load",
    )
    position: Vector3 = Field(
        (0.0, 0.0, 0.0),
        description="Mount position in meters (not used for torque)",
    )
    max_angular_momentum: float = Field(
        Constants.DEFAULT_RW_MAX_MOMENTUM,
        alias="maxAngularMomentum",
        description="Momentum storage capacity in N*m*s",
    )
    max_torque: float = Field(
        Constants.DEFAULT_RW_MAX_TORQUE,
        alias="maxTorque",
        description="Maximum wheel torque in N*m",
    )

    @field_validator("orientation", mode="before")
    @classmethod
    def parse_orientation(cls, v: Any) -> Vector3:
        vec = coerce_vector3(v, default=(0.0, 0.0, 1.0))
        return _normalize(vec, (0.0, 0.0, 1.0))

    @field_validator("position", mode="before")
    @classmethod
    def parse_position(cls, v: Any) -> Vector3:
        return coerce_vector3(v)

    @field_validator("max_angular_momentum", mode="before")
    @classmethod
    def sanitize_momentum(cls, v: Any, info) -> float:
        owner = f"reaction wheel {info.data.get('name') or '?'}"
        return _positive_or_default(
            v, Constants.DEFAULT_RW_MAX_MOMENTUM, "maxAngularMomentum", owner
        )

    @field_validator("max_torque", mode="before")
    @classmethod
    def sanitize_torque(cls, v: Any, info) -> float:
        owner = f"reaction wheel {info.data.get('name') or '?'}"
        return _positive_or_default(v, Constants.DEFAULT_RW_MAX_TORQUE, "maxTorque", owner)


class CMGParams(BaseModel):
    """Configuration for a single control moment gyroscope."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    max_angular_momentum: float = Field(
        Constants.DEFAULT_CMG_MAX_MOMENTUM,
        alias="maxAngularMomentum",
        description="Momentum storage capacity (vector magnitude) in N*m*s",
    )
    max_torque: float = Field(
        Constants.DEFAULT_CMG_MAX_TORQUE,
        alias="maxTorque",
        description="Maximum output torque magnitude in N*m",
    )

    @field_validator("max_angular_momentum", mode="before")
    @classmethod
    def sanitize_momentum(cls, v: Any, info) -> float:
        owner = f"CMG {info.data.get('name') or '?'}"
        return _positive_or_default(
            v, Constants.DEFAULT_CMG_MAX_MOMENTUM, "maxAngularMomentum", owner
        )

    @field_validator("max_torque", mode="before")
    @classmethod
    def sanitize_torque(cls, v: Any, info) -> float:
        owner = f"CMG {info.data.get('name') or '?'}"
        return _positive_or_default(v, Constants.DEFAULT_CMG_MAX_TORQUE, "maxTorque", owner)


class SpacecraftProperties(BaseModel):
    """
    Vehicle mass properties.

    Inertia is given explicitly per principal axis and is never derived
    from the mass.
    """

    model_config = ConfigDict(populate_by_name=True)

    dry_mass: float = Field(
        Constants.DEFAULT_DRY_MASS,
        gt=0,
        alias="dryMass",
        description="Structure mass without propellant in kg",
    )
    fuel_mass: float = Field(
        Constants.DEFAULT_FUEL_MASS,
        ge=0,
        alias="fuelMass",
        description="Initial propellant mass in kg",
    )
    max_fuel_mass: float = Field(
        Constants.DEFAULT_FUEL_MASS,
        ge=0,
        alias="maxFuelMass",
        description="Tank capacity in kg (reset refills to this)",
    )
    inertia: Vector3 = Field(
        Constants.DEFAULT_INERTIA,
        description="Principal moments of inertia (Ixx, Iyy, Izz) in kg*m^2",
    )
    center_of_mass: Vector3 = Field(
        (0.0, 0.0, 0.0),
        alias="centerOfMass",
        description="Centre-of-mass offset subtracted from mount positions",
    )

    @field_validator("inertia", mode="before")
    @classmethod
    def parse_inertia(cls, v: Any) -> Vector3:
        return coerce_vector3(v, default=(0.0, 0.0, 0.0))

    @field_validator("center_of_mass", mode="before")
    @classmethod
    def parse_center_of_mass(cls, v: Any) -> Vector3:
        return coerce_vector3(v)

    @model_validator(mode="after")
    def clamp_fuel_to_capacity(self) -> "SpacecraftProperties":
        if self.fuel_mass > self.max_fuel_mass:
            logger.warning(
                "fuelMass %.3f exceeds maxFuelMass %.3f; clamping to capacity.",
                self.fuel_mass,
                self.max_fuel_mass,
            )
            self.fuel_mass = self.max_fuel_mass
        return self


class DockingParams(BaseModel):
    """Docking reference pose and acceptance envelope."""

    model_config = ConfigDict(populate_by_name=True)

    position: Vector3 = Field(
        Constants.DOCKING_POSITION,
        description="Reference (and reset) position in meters, world frame",
    )
    orientation: QuaternionWXYZ = Field(
        Constants.DOCKING_ORIENTATION,
        description="Reference orientation quaternion [w, x, y, z]",
    )
    box_size: float = Field(
        Constants.DOCKING_BOX_SIZE,
        gt=0,
        alias="dockingBoxSize",
        description="Docking box half-size per axis in meters",
    )
    angle_threshold: float = Field(
        Constants.DOCKING_ANGLE_THRESHOLD,
        gt=0,
        le=180,
        alias="dockingAngleThreshold",
        description="Maximum attitude error in degrees",
    )
    max_angular_speed: float = Field(
        Constants.MAX_ANGULAR_SPEED,
        gt=0,
        description="Maximum angular speed in deg/s",
    )
    max_lateral_speed: float = Field(
        Constants.MAX_LATERAL_SPEED,
        gt=0,
        description="Maximum speed in the X-Z plane in m/s",
    )
    max_axial_speed: float = Field(
        Constants.MAX_AXIAL_SPEED,
        gt=0,
        description="Upper bound on signed Z velocity in m/s",
    )

    @field_validator("position", mode="before")
    @classmethod
    def parse_position(cls, v: Any) -> Vector3:
        return coerce_vector3(v)

    @field_validator("orientation")
    @classmethod
    def normalize_orientation(cls, v: QuaternionWXYZ) -> QuaternionWXYZ:
        norm = math.sqrt(sum(c * c for c in v))
        if norm <= 1e-12:
            raise ValueError("Docking orientation quaternion must be non-zero")
        return (v[0] / norm, v[1] / norm, v[2] / norm, v[3] / norm)


class SimulationParams(BaseModel):
    """Step-loop timing and operator input settings."""

    physics_dt: float = Field(
        Constants.PHYSICS_DT,
        gt=0,
        le=0.1,
        description="Rigid-body integration sub-step in seconds",
    )
    momentum_dt: float = Field(
        Constants.MOMENTUM_DT,
        gt=0,
        le=0.1,
        description="Nominal momentum bookkeeping step in seconds",
    )
    torque_percentage: int = Field(
        Constants.DEFAULT_TORQUE_PERCENTAGE,
        ge=1,
        le=100,
        description="Per-axis torque request as % of the bank's max torque",
    )
    firing_duration: float = Field(
        Constants.DEFAULT_FIRING_DURATION,
        gt=0,
        le=10.0,
        description="Timed-firing pulse length in seconds",
    )


class AppConfig(BaseModel):
    """
    Root configuration container.

    Holds the canonical (already normalized) vehicle description. Use
    ``config.adapter.normalize_configuration`` on raw upload shapes first.
    """

    spacecraft: SpacecraftProperties = Field(default_factory=SpacecraftProperties)
    thrusters: List[ThrusterParams] = Field(default_factory=list)
    reaction_wheels: List[ReactionWheelParams] = Field(default_factory=list)
    cmgs: List[CMGParams] = Field(default_factory=list)
    docking: DockingParams = Field(default_factory=DockingParams)
    simulation: SimulationParams = Field(default_factory=SimulationParams)

    @model_validator(mode="after")
    def check_timing(self) -> "AppConfig":
        if self.simulation.physics_dt > self.simulation.momentum_dt:
            logger.warning(
                "Physics dt (%.4fs) is coarser than momentum dt (%.4fs).",
                self.simulation.physics_dt,
                self.simulation.momentum_dt,
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create configuration from dictionary."""
        return cls.model_validate(data)
