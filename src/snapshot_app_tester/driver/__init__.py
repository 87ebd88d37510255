"""Driver domain exports."""

from .app_driver import (
    AppDriver,
    DriverAlreadyInitializedError,
    DriverClosedError,
    DriverState,
    UninitializedDriverError,
)

__all__ = [
    "AppDriver",
    "DriverAlreadyInitializedError",
    "DriverClosedError",
    "DriverState",
    "UninitializedDriverError",
]
