"""Input application domain exports."""

from .input_applier import (
    InputApplier,
    InputApplyTimeout,
    UnknownInputBindingError,
    UnknownInputBindingWarning,
    UploadFixtureNotFoundError,
)
from .input_assignments import InputApplyResult, InputAssignment, build_assignments

__all__ = [
    "InputApplier",
    "InputApplyTimeout",
    "UnknownInputBindingError",
    "UnknownInputBindingWarning",
    "UploadFixtureNotFoundError",
    "InputApplyResult",
    "InputAssignment",
    "build_assignments",
]
