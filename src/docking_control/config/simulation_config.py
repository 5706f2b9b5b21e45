"""
Immutable Simulation Configuration Container

Provides a dependency-injection friendly configuration container so that
sessions never read mutable global state.

Usage:
    from docking_control.config.simulation_config import SimulationConfig

    # Create default config
    config = SimulationConfig.create_default()

    # Use in a session
    session = SimulationSession(config=config)

    # Create with overrides
    config = SimulationConfig.create_with_overrides({
        "simulation": {"torque_percentage": 80}
    })
"""

from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .defaults import create_default_app_config
from .models import AppConfig


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration container for sessions.

    Attributes:
        app_config: Vehicle, docking and step-loop configuration
    """

    app_config: AppConfig

    @classmethod
    def create_default(cls) -> "SimulationConfig":
        """Create a configuration with the built-in default vehicle."""
        return cls(app_config=create_default_app_config())

    @classmethod
    def create_with_overrides(
        cls,
        overrides: Dict[str, Any],
        base_config: Optional["SimulationConfig"] = None,
    ) -> "SimulationConfig":
        """
        Create configuration with overrides applied.

        Dictionary sections (``spacecraft``, ``docking``, ``simulation``) are
        merged key by key; list sections (``thrusters``, ``reaction_wheels``,
        ``cmgs``) are replaced wholesale.

        Args:
            overrides: Dictionary of configuration overrides
            base_config: Base configuration (defaults to create_default() if None)

        Returns:
            SimulationConfig with overrides applied
        """
        if base_config is None:
            base_config = cls.create_default()

        app_config_dict = base_config.app_config.model_dump()

        for section, section_overrides in overrides.items():
            if isinstance(app_config_dict.get(section), dict) and isinstance(
                section_overrides, dict
            ):
                app_config_dict[section].update(section_overrides)
            else:
                app_config_dict[section] = section_overrides

        return cls(app_config=AppConfig.from_dict(app_config_dict))

    def clone(self) -> "SimulationConfig":
        """Create a deep copy of this configuration (AppConfig is mutable)."""
        return deepcopy(self)
