"""Core components for the quiesce stabilization engine."""

from quiesce.core.config import Settings, get_settings
from quiesce.core.exceptions import (
    ElementNotFoundError,
    ErrorKind,
    InstructionNotInvokedError,
    MaxAttemptsReachedError,
    NoMatchingInstructionError,
    OutsideSimulatedTimeError,
    ResponseGenerationError,
    StabilizationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "ErrorKind",
    "StabilizationError",
    "NoMatchingInstructionError",
    "ResponseGenerationError",
    "InstructionNotInvokedError",
    "MaxAttemptsReachedError",
    "ElementNotFoundError",
    "OutsideSimulatedTimeError",
]
