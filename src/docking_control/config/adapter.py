"""
Configuration Shape Adapter

Uploaded vehicle files come in several historical shapes: flat lists,
wrapper objects (``{"thrusters": [...]}``, ``{"wheels": [...]}``,
``{"cmgs": [...]}``) and a legacy single-CMG object (``{"cmg": {...}}``).
This module folds all of them into the one canonical dictionary accepted by
``AppConfig.from_dict``. Nothing downstream ever sees the raw shapes.

Malformed actuator sections become empty lists with a warning.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .constants import Constants

logger = logging.getLogger(__name__)

_THRUSTER_KEYS = ("thrusters",)
_WHEEL_KEYS = ("reactionwheels", "reactionWheels", "reaction_wheels")
_CMG_KEYS = ("cmg", "cmgs")
_SPACECRAFT_KEYS = ("spacecraftProperties", "spacecraft")


def _first_present(raw: Dict[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _unwrap_list(section: Any, wrapper_key: str, label: str) -> List[Dict[str, Any]]:
    """Return the record list from a flat list or ``{wrapper_key: [...]}``."""
    if section is None:
        return []
    if isinstance(section, list):
        records = section
    elif isinstance(section, dict) and isinstance(section.get(wrapper_key), list):
        records = section[wrapper_key]
    else:
        logger.warning("Malformed %s section (%s); treating as empty.", label, type(section).__name__)
        return []

    valid = [record for record in records if isinstance(record, dict)]
    if len(valid) != len(records):
        logger.warning(
            "Dropped %d non-object %s entries.", len(records) - len(valid), label
        )
    return valid


def _unwrap_cmgs(section: Any) -> List[Dict[str, Any]]:
    if isinstance(section, dict):
        # Legacy single-object form
        if isinstance(section.get("cmg"), dict):
            return [section["cmg"]]
        if "cmgs" not in section and "maxAngularMomentum" in section:
            return [section]
    return _unwrap_list(section, "cmgs", "CMG")


def default_spacecraft_properties() -> Dict[str, Any]:
    """Vehicle properties used when the file omits them."""
    return {
        "dryMass": Constants.DEFAULT_DRY_MASS,
        "fuelMass": Constants.DEFAULT_FUEL_MASS,
        "maxFuelMass": Constants.DEFAULT_FUEL_MASS,
        "inertia": {
            "x": Constants.DEFAULT_INERTIA[0],
            "y": Constants.DEFAULT_INERTIA[1],
            "z": Constants.DEFAULT_INERTIA[2],
        },
    }


def normalize_configuration(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Fold a raw vehicle configuration into the canonical AppConfig layout.

    Args:
        raw: Parsed JSON/YAML document (any supported shape)

    Returns:
        Dictionary with ``spacecraft``, ``thrusters``, ``reaction_wheels``,
        ``cmgs`` and, when present, ``docking`` and ``simulation`` keys.
    """
    if not isinstance(raw, dict):
        logger.warning("Configuration root is not an object; using an empty vehicle.")
        raw = {}

    spacecraft = _first_present(raw, _SPACECRAFT_KEYS)
    if not isinstance(spacecraft, dict):
        if spacecraft is not None:
            logger.warning("Malformed spacecraftProperties; using defaults.")
        spacecraft = default_spacecraft_properties()

    cmg_section = _first_present(raw, _CMG_KEYS)

    normalized: Dict[str, Any] = {
        "spacecraft": spacecraft,
        "thrusters": _unwrap_list(_first_present(raw, _THRUSTER_KEYS), "thrusters", "thruster"),
        "reaction_wheels": _unwrap_list(
            _first_present(raw, _WHEEL_KEYS), "wheels", "reaction wheel"
        ),
        "cmgs": _unwrap_cmgs(cmg_section),
    }

    docking = raw.get("docking")
    if docking is None and "initialPosition" in raw:
        docking = normalize_initial_position(raw["initialPosition"])
    if isinstance(docking, dict):
        normalized["docking"] = docking

    if isinstance(raw.get("simulation"), dict):
        normalized["simulation"] = raw["simulation"]

    logger.debug(
        "Normalized configuration: %d thrusters, %d wheels, %d CMGs",
        len(normalized["thrusters"]),
        len(normalized["reaction_wheels"]),
        len(normalized["cmgs"]),
    )
    return normalized


def normalize_initial_position(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a docking reference file into ``DockingParams`` fields.

    The file stores the orientation as ``{x, y, z, w}``; the canonical form
    is a ``(w, x, y, z)`` tuple.
    """
    if not isinstance(raw, dict):
        raise ValueError("Initial position document must be an object")

    result: Dict[str, Any] = {}
    if "position" in raw:
        result["position"] = raw["position"]

    orientation = raw.get("orientation")
    if isinstance(orientation, dict):
        result["orientation"] = (
            float(orientation.get("w", 1.0)),
            float(orientation.get("x", 0.0)),
            float(orientation.get("y", 0.0)),
            float(orientation.get("z", 0.0)),
        )
    elif orientation is not None:
        raise ValueError("orientation must be an {x, y, z, w} object")

    if raw.get("dockingBoxSize") is not None:
        result["box_size"] = raw["dockingBoxSize"]
    if raw.get("dockingAngleThreshold") is not None:
        result["angle_threshold"] = raw["dockingAngleThreshold"]
    return result
