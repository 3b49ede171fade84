"""quiesce: drive units under test to a stable state on a virtual clock."""

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
from quiesce.core.logging import configure_from_settings, configure_logging
from quiesce.fakes import (
    ComponentFixture,
    HttpClient,
    HttpErrorResponse,
    HttpTestingController,
    VirtualClock,
    current_clock,
    fake_async,
)
from quiesce.models import CallInstruction, CapturedRequest, ResponseDescriptor
from quiesce.services import (
    complete_http_calls,
    pass_time,
    predefined_instructions,
    stabilize,
)

__version__ = "0.1.0"

__all__ = [
    "stabilize",
    "configure_logging",
    "configure_from_settings",
    "complete_http_calls",
    "pass_time",
    "predefined_instructions",
    "CallInstruction",
    "CapturedRequest",
    "ResponseDescriptor",
    "ComponentFixture",
    "HttpClient",
    "HttpErrorResponse",
    "HttpTestingController",
    "VirtualClock",
    "current_clock",
    "fake_async",
    "ErrorKind",
    "StabilizationError",
    "NoMatchingInstructionError",
    "ResponseGenerationError",
    "InstructionNotInvokedError",
    "MaxAttemptsReachedError",
    "ElementNotFoundError",
    "OutsideSimulatedTimeError",
]
