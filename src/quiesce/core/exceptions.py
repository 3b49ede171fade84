"""Exception hierarchy for the stabilization engine.

Every failure the engine can report carries an ``ErrorKind`` so callers
(and CI log collectors) can tell the categories apart without parsing
messages. All kinds are fatal; nothing here is retried.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Categories of stabilization failures."""

    UNMATCHED_REQUEST = "UNMATCHED_REQUEST"
    RESPONSE_GENERATION_FAILED = "RESPONSE_GENERATION_FAILED"
    UNUSED_INSTRUCTION = "UNUSED_INSTRUCTION"
    MAX_ATTEMPTS_EXCEEDED = "MAX_ATTEMPTS_EXCEEDED"
    ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
    OUTSIDE_SIMULATED_TIME = "OUTSIDE_SIMULATED_TIME"


class StabilizationError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description.
        kind: Failure category.
        details: Additional structured details.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize StabilizationError.

        Args:
            message: Human-readable error description.
            kind: Failure category.
            details: Optional list of additional error details.
        """
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or []

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a structured error payload.

        Returns:
            Dictionary with message, kind and details.
        """
        return {
            "error": {
                "message": self.message,
                "kind": self.kind.value,
                "details": self.details,
            }
        }


class NoMatchingInstructionError(StabilizationError):
    """A captured request had no matching call instruction."""

    def __init__(self, url: str, method: str) -> None:
        """Initialize NoMatchingInstructionError.

        Args:
            url: URL of the unmatched request.
            method: HTTP method of the unmatched request.
        """
        super().__init__(
            message=(
                f'No matching call instruction found for request with URL "{url}" '
                f'and method "{method}". Please ensure you have provided call '
                "instructions for all expected requests."
            ),
            kind=ErrorKind.UNMATCHED_REQUEST,
            details=[{"url": url, "method": method}],
        )
        self.url = url
        self.method = method


class ResponseGenerationError(StabilizationError):
    """A response producer raised instead of returning a response.

    The original exception is available as ``__cause__`` when raised with
    ``raise ... from``.
    """

    def __init__(self, cause: BaseException | str) -> None:
        """Initialize ResponseGenerationError.

        Args:
            cause: The underlying exception, or a description of the failure.
        """
        reason = str(cause) if str(cause) else type(cause).__name__
        super().__init__(
            message=(
                "Check your response producer. "
                f"Failed to generate HTTP response: {reason}."
            ),
            kind=ErrorKind.RESPONSE_GENERATION_FAILED,
            details=[{"reason": reason}],
        )
        self.reason = reason


class InstructionNotInvokedError(StabilizationError):
    """A declared call instruction was never used during stabilization.

    Only raised once the unit is otherwise stable, so it never hides a
    hang behind a missing-call report.
    """

    def __init__(self, index: int, instruction: str) -> None:
        """Initialize InstructionNotInvokedError.

        Args:
            index: Position of the unused instruction in the caller's list.
            instruction: Printable form of the unused instruction.
        """
        super().__init__(
            message=(
                "A call instruction was not executed during stabilization "
                f"at index {index}. This may indicate that the expected request "
                "was never made by the unit under test, or that it was made "
                "with a different URL or method than expected. "
                f"The call instruction is -> {instruction}"
            ),
            kind=ErrorKind.UNUSED_INSTRUCTION,
            details=[{"index": index, "instruction": instruction}],
        )
        self.index = index
        self.instruction = instruction


class MaxAttemptsReachedError(StabilizationError):
    """The unit did not become stable within the configured bound."""

    def __init__(self, max_attempts: int) -> None:
        """Initialize MaxAttemptsReachedError.

        Args:
            max_attempts: The iteration bound that was exhausted.
        """
        super().__init__(
            message=(
                f"Maximum stabilization attempts ({max_attempts}) reached. "
                "The unit under test could not be stabilized. This may be "
                "caused by continuous asynchronous operations like repeating "
                "timers. Check the logs for repeating timer warnings and "
                "consider stubbing the code that schedules them."
            ),
            kind=ErrorKind.MAX_ATTEMPTS_EXCEEDED,
            details=[{"max_attempts": max_attempts}],
        )
        self.max_attempts = max_attempts


class ElementNotFoundError(StabilizationError):
    """Raised by element lookup helpers layered on top of the engine."""

    def __init__(self, test_id: str) -> None:
        """Initialize ElementNotFoundError.

        Args:
            test_id: The identifier that could not be resolved.
        """
        super().__init__(
            message=f'Element with test ID "{test_id}" not found',
            kind=ErrorKind.ELEMENT_NOT_FOUND,
            details=[{"test_id": test_id}],
        )
        self.test_id = test_id


class OutsideSimulatedTimeError(StabilizationError):
    """The virtual clock was used outside of a ``fake_async`` context."""

    def __init__(
        self,
        message: str = (
            "pass_time() can only be called within a simulated-time context. "
            "Make sure your test is wrapped with fake_async()."
        ),
    ) -> None:
        """Initialize OutsideSimulatedTimeError.

        Args:
            message: Description of the misuse.
        """
        super().__init__(
            message=message,
            kind=ErrorKind.OUTSIDE_SIMULATED_TIME,
        )
