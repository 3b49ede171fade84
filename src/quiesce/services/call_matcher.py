"""Mock call matcher: answers captured requests from call instructions.

Requests are processed in capture order. For each one the instruction
list is scanned in order and the first matching checker wins; the
producer's response is then handed to the testing controller verbatim.
"""

from collections.abc import Sequence

from quiesce.core.exceptions import NoMatchingInstructionError, ResponseGenerationError
from quiesce.core.logging import get_logger
from quiesce.core.metrics import RESOLVED_CALLS, SKIPPED_CANCELLED_CALLS
from quiesce.fakes.http import HttpTestingController
from quiesce.models.http import CapturedRequest, ResponseDescriptor
from quiesce.models.instructions import CallInstruction
from quiesce.utils.query import extract_query_params

logger = get_logger(__name__)


def get_requests_from_queue(controller: HttpTestingController) -> list[CapturedRequest]:
    """Return every queued request in capture order, cancelled ones included."""
    return controller.list_pending()


def find_instruction(
    instructions: Sequence[CallInstruction],
    request: CapturedRequest,
) -> CallInstruction | None:
    """Return the first instruction whose checker accepts ``request``."""
    for instruction in instructions:
        if instruction.checker.matches(request):
            return instruction
    return None


def generate_response(
    instruction: CallInstruction,
    request: CapturedRequest,
) -> ResponseDescriptor:
    """Run an instruction's producer for ``request``.

    Raises:
        ResponseGenerationError: If the producer raises or returns
            something other than a ResponseDescriptor.
    """
    params = extract_query_params(request.url_with_params)
    try:
        response = instruction.respond(request, params)
    except ResponseGenerationError:
        raise
    except Exception as e:
        logger.error(
            "Response producer failed",
            method=request.method,
            url=request.url,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise ResponseGenerationError(e) from e

    if not isinstance(response, ResponseDescriptor):
        raise ResponseGenerationError(
            f"expected a ResponseDescriptor, got {type(response).__name__}"
        )
    return response


def complete_http_calls(
    instructions: Sequence[CallInstruction],
    controller: HttpTestingController,
) -> int:
    """Resolve every queued, uncancelled request from ``instructions``.

    Args:
        instructions: Ordered call instructions; first match wins.
        controller: Testing controller holding the captured requests.

    Returns:
        Number of requests resolved.

    Raises:
        NoMatchingInstructionError: If a request matches no instruction.
        ResponseGenerationError: If a producer fails.
    """
    resolved = 0

    for request in get_requests_from_queue(controller):
        if request.cancelled:
            SKIPPED_CANCELLED_CALLS.inc()
            logger.debug(
                "Skipping cancelled request",
                method=request.method,
                url=request.url,
            )
            continue

        instruction = find_instruction(instructions, request)
        if instruction is None:
            raise NoMatchingInstructionError(request.url, request.method)

        response = generate_response(instruction, request)
        controller.resolve(request, response)
        resolved += 1

        RESOLVED_CALLS.labels(method=request.method, status=str(response.status)).inc()
        logger.debug(
            "Request completed from instruction",
            method=request.method,
            url=request.url_with_params,
            status=response.status,
            instruction=str(instruction),
        )

    return resolved
