"""
Core control modules.

This package contains the rigid-body backend, the thruster channel
classifier, the propulsion/fuel model, the momentum actuator controller,
desaturation, the docking state machine and the session that ties them
together.
"""

from .exceptions import (
    ConfigurationError,
    DockingControlException,
    OperationError,
    ParameterValidationError,
)
from .error_handling import with_error_context

__all__ = [
    "ConfigurationError",
    "DockingControlException",
    "OperationError",
    "ParameterValidationError",
    "with_error_context",
]
