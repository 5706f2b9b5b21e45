"""
Configuration I/O Module

Load and save vehicle configurations (JSON or YAML) and docking reference
files.

Usage:
    from docking_control.config.io import ConfigIO

    config = ConfigIO.load("vehicle.json")
    ConfigIO.save(config, "vehicle.yaml")
    docking = ConfigIO.load_initial_position("initialPosition.json")
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ..core.exceptions import ConfigurationError
from .adapter import normalize_configuration, normalize_initial_position
from .models import AppConfig, DockingParams
from .simulation_config import SimulationConfig

logger = logging.getLogger(__name__)

CONFIG_VERSION = "1.0.0"


class ConfigIO:
    """
    Configuration I/O handler.

    Raw documents go through the shape adapter before validation, so any of
    the historical upload layouts can be loaded.
    """

    @staticmethod
    def _detect_format(file_path: Path, format: str) -> str:
        if format != "auto":
            if format not in ("yaml", "json"):
                raise ConfigurationError(f"Unsupported config format: {format}")
            return format
        suffix = file_path.suffix.lower()
        if suffix in (".yaml", ".yml"):
            return "yaml"
        if suffix == ".json":
            return "json"
        raise ConfigurationError(
            f"Cannot infer config format from extension '{suffix}' ({file_path})"
        )

    @staticmethod
    def read_document(file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Parse a JSON or YAML document.

        Raises:
            ConfigurationError: If the file is missing, unreadable or not an object
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise ConfigurationError(f"Config file not found: {file_path}")

        fmt = ConfigIO._detect_format(file_path, "auto")
        try:
            with open(file_path, "r") as f:
                if fmt == "yaml":
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read config file {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {file_path} must contain an object")
        return data

    @staticmethod
    def load(file_path: Union[str, Path]) -> AppConfig:
        """
        Load and validate a vehicle configuration.

        Args:
            file_path: Path to config file (.yaml, .yml, or .json)

        Returns:
            Validated AppConfig

        Raises:
            ConfigurationError: If the file cannot be read or fails validation
        """
        data = ConfigIO.read_document(file_path)
        data.pop("_metadata", None)
        normalized = normalize_configuration(data)
        try:
            config = AppConfig.from_dict(normalized)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {file_path}: {e}") from e

        logger.info(
            "Loaded configuration from %s (%d thrusters, %d wheels, %d CMGs)",
            file_path,
            len(config.thrusters),
            len(config.reaction_wheels),
            len(config.cmgs),
        )
        return config

    @staticmethod
    def load_simulation_config(
        file_path: Union[str, Path],
        initial_position_path: Optional[Union[str, Path]] = None,
    ) -> SimulationConfig:
        """Load a vehicle file (and optional docking reference) into a SimulationConfig."""
        app_config = ConfigIO.load(file_path)
        if initial_position_path is not None:
            app_config.docking = ConfigIO.load_initial_position(
                initial_position_path, base=app_config.docking
            )
        return SimulationConfig(app_config=app_config)

    @staticmethod
    def load_initial_position(
        file_path: Union[str, Path],
        base: Optional[DockingParams] = None,
    ) -> DockingParams:
        """
        Load a docking reference / session file.

        Fields absent from the file keep the values of ``base`` (or the
        defaults).
        """
        data = ConfigIO.read_document(file_path)
        try:
            fields = normalize_initial_position(data)
            merged = (base or DockingParams()).model_dump()
            merged.update(fields)
            docking = DockingParams.model_validate(merged)
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid initial position file {file_path}: {e}") from e

        logger.info("Loaded docking reference from %s", file_path)
        return docking

    @staticmethod
    def save(
        config: Union[AppConfig, SimulationConfig],
        file_path: Union[str, Path],
        format: str = "auto",
        include_metadata: bool = True,
    ) -> None:
        """
        Save a configuration to file.

        Args:
            config: AppConfig or SimulationConfig to save
            file_path: Path to output file (.yaml, .yml, or .json)
            format: "yaml", "json", or "auto" to detect from extension
            include_metadata: Include a version block

        Raises:
            ConfigurationError: If the format is invalid or the file cannot be written
        """
        file_path = Path(file_path)
        fmt = ConfigIO._detect_format(file_path, format)

        if isinstance(config, SimulationConfig):
            config = config.app_config
        config_dict = config.to_dict()
        if include_metadata:
            config_dict = {"_metadata": {"config_version": CONFIG_VERSION}, **config_dict}

        try:
            with open(file_path, "w") as f:
                if fmt == "yaml":
                    yaml.safe_dump(
                        _to_plain(config_dict), f, default_flow_style=False, sort_keys=False
                    )
                else:
                    json.dump(config_dict, f, indent=2, sort_keys=False)
        except OSError as e:
            raise ConfigurationError(f"Failed to write config file {file_path}: {e}") from e

        logger.info(f"Configuration saved to {file_path}")


def _to_plain(value: Any) -> Any:
    """Tuples become lists so safe_dump emits plain YAML sequences."""
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value
