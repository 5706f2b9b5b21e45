"""
Error Handling Utilities for the Docking Control Core

Usage:
    from docking_control.core.error_handling import with_error_context

    @with_error_context("Simulation step", reraise=False)
    def step(self, frame_dt):
        ...
"""

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from .exceptions import DockingControlException, OperationError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def with_error_context(
    operation: str,
    reraise: bool = True,
    log_level: int = logging.ERROR,
    capture_args: bool = False,
    default_factory: Optional[Callable[..., Any]] = None,
) -> Callable[[F], F]:
    """
    Decorator to add error context to function calls.

    Catches exceptions, logs them with the operation name and either
    re-raises them wrapped in OperationError or swallows them and returns
    a fallback value.

    Args:
        operation: Description of the operation (e.g., "Simulation step")
        reraise: If True, re-raise (wrapped if needed). If False, log and
            return the fallback value.
        log_level: Logging level for errors (default: ERROR)
        capture_args: If True, log function arguments in error messages
        default_factory: Called with the original arguments to build the
            return value when an error is swallowed. None returns None.

    Returns:
        Decorated function
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                raise
            except Exception as e:
                error_msg = f"{operation} failed: {e}"
                if capture_args:
                    error_msg += f" (args={args}, kwargs={kwargs})"
                logger.log(log_level, error_msg, exc_info=True)

                if reraise:
                    if isinstance(e, DockingControlException):
                        raise
                    raise OperationError(operation, e) from e
                if default_factory is None:
                    return None
                return default_factory(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
