"""Fixed-window throttling of actions per identity."""

from throttling.core.errors import AppError, ConfigurationError, StorageError
from throttling.services.throttle import Throttle, ThrottleContext

__all__ = [
    "AppError",
    "ConfigurationError",
    "StorageError",
    "Throttle",
    "ThrottleContext",
]
