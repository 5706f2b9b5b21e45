"""
Configuration Package for the Docking Control Core

Configuration modules:
- constants: Physical constants, fallbacks, thresholds and reference pose
- models: Pydantic models for vehicle, actuators, docking and step loop
- adapter: Parse-time normalization of historical upload shapes
- defaults: Built-in default vehicle
- simulation_config: Immutable container passed to sessions
- io: JSON/YAML load and save

Usage:
    from docking_control.config import SimulationConfig

    config = SimulationConfig.create_default()
    dry_mass = config.app_config.spacecraft.dry_mass
"""

from .adapter import normalize_configuration, normalize_initial_position
from .constants import Constants
from .defaults import create_default_app_config
from .io import ConfigIO
from .models import (
    AppConfig,
    CMGParams,
    DockingParams,
    ReactionWheelParams,
    SimulationParams,
    SpacecraftProperties,
    ThrusterParams,
)
from .simulation_config import SimulationConfig

__all__ = [
    "AppConfig",
    "CMGParams",
    "ConfigIO",
    "Constants",
    "DockingParams",
    "ReactionWheelParams",
    "SimulationConfig",
    "SimulationParams",
    "SpacecraftProperties",
    "ThrusterParams",
    "create_default_app_config",
    "normalize_configuration",
    "normalize_initial_position",
]
