"""
Custom Exception Hierarchy for the Docking Control Core

Exceptions are reserved for loader-side failures (missing or malformed
configuration files). Control-step operations never raise; they return
result values and clamp or deactivate on limit violations.

See also: error_handling.py for the decorator that keeps the step loop
exception-free.
"""

from typing import Any


class DockingControlException(Exception):
    """Base exception for all docking control errors."""

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(DockingControlException):
    """Raised when configuration is invalid or cannot be read."""

    pass


class ParameterValidationError(ConfigurationError):
    """Raised when a parameter fails validation."""

    def __init__(self, parameter_name: str, value: Any, reason: str) -> None:
        message = f"Invalid parameter '{parameter_name}' = {value}: {reason}"
        super().__init__(message)
        self.parameter_name = parameter_name
        self.value = value
        self.reason = reason


# ============================================================================
# Runtime Errors
# ============================================================================


class OperationError(DockingControlException):
    """
    Raised when an operation fails and we want to propagate contextual info.

    Wraps arbitrary exceptions with the operation name.
    """

    def __init__(self, operation: str, original_exc: Exception) -> None:
        message = f"{operation} failed: {original_exc}"
        super().__init__(message)
        self.operation = operation
        self.original_exc = original_exc
