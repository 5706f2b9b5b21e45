"""
Default Configuration Factory

Provides factory functions to create default configuration objects.
The default vehicle is a 2 m cube with twelve thrusters (two per face
direction, offset so that single firings produce pitch, yaw or roll), three
orthogonal reaction wheels and one CMG.
"""

from typing import List

from .constants import Constants
from .models import (
    AppConfig,
    CMGParams,
    DockingParams,
    ReactionWheelParams,
    SimulationParams,
    SpacecraftProperties,
    ThrusterParams,
)

# (name, position, direction)
DEFAULT_THRUSTER_LAYOUT = [
    ("T1", (-1.0, 0.0, 0.7), (1.0, 0.0, 0.0)),
    ("T2", (-1.0, 0.0, -0.7), (1.0, 0.0, 0.0)),
    ("T3", (1.0, 0.0, 0.7), (-1.0, 0.0, 0.0)),
    ("T4", (1.0, 0.0, -0.7), (-1.0, 0.0, 0.0)),
    ("T5", (0.7, -1.0, 0.0), (0.0, 1.0, 0.0)),
    ("T6", (-0.7, -1.0, 0.0), (0.0, 1.0, 0.0)),
    ("T7", (0.7, 1.0, 0.0), (0.0, -1.0, 0.0)),
    ("T8", (-0.7, 1.0, 0.0), (0.0, -1.0, 0.0)),
    ("T9", (0.0, 0.7, -1.0), (0.0, 0.0, 1.0)),
    ("T10", (0.0, -0.7, -1.0), (0.0, 0.0, 1.0)),
    ("T11", (0.0, 0.7, 1.0), (0.0, 0.0, -1.0)),
    ("T12", (0.0, -0.7, 1.0), (0.0, 0.0, -1.0)),
]


def create_default_thrusters() -> List[ThrusterParams]:
    """Twelve 50 N / 300 s thrusters covering all channels."""
    return [
        ThrusterParams(
            name=name,
            position=position,
            direction=direction,
            thrust=Constants.DEFAULT_THRUST,
            isp=Constants.DEFAULT_ISP,
        )
        for name, position, direction in DEFAULT_THRUSTER_LAYOUT
    ]


def create_default_app_config() -> AppConfig:
    """
    Create default application configuration.

    Returns:
        AppConfig with the built-in default vehicle
    """
    wheels = [
        ReactionWheelParams(name="RW-X", orientation=(1.0, 0.0, 0.0)),
        ReactionWheelParams(name="RW-Y", orientation=(0.0, 1.0, 0.0)),
        ReactionWheelParams(name="RW-Z", orientation=(0.0, 0.0, 1.0)),
    ]

    return AppConfig(
        spacecraft=SpacecraftProperties(),
        thrusters=create_default_thrusters(),
        reaction_wheels=wheels,
        cmgs=[CMGParams(name="CMG-1")],
        docking=DockingParams(),
        simulation=SimulationParams(),
    )
