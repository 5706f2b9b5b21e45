"""
Docking Control

Attitude and propulsion control core for a free-flying vehicle docking
with a fixed target frame.

Usage:
    from docking_control import SimulationSession, ControlChannel

    session = SimulationSession()
    session.toggle_pause()
    session.press_channel(ControlChannel.MINUS_Z)
    session.step(1 / 60)
"""

from .config.simulation_config import SimulationConfig
from .core.docking import DockingState
from .core.momentum_control import ControlMode
from .core.session import SimulationSession
from .core.thruster_binding import ControlChannel

__version__ = "1.0.0"

__all__ = [
    "ControlChannel",
    "ControlMode",
    "DockingState",
    "SimulationConfig",
    "SimulationSession",
]
