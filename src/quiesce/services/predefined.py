"""Ready-made call instructions for common methods and outcomes.

Example:
    get_users = predefined_instructions.get.success("api/users", lambda req, params: users)
    post_fails = predefined_instructions.post.error("api/users")
    stabilize(fixture, call_instructions=[get_users, post_fails])
"""

from collections.abc import Callable
from typing import Any, Literal

from quiesce.models.http import CapturedRequest, ResponseDescriptor
from quiesce.models.instructions import (
    CallInstruction,
    EndpointPath,
    PathMethodChecker,
    ResponseProducer,
)
from quiesce.utils.query import QueryParams

HTTP_METHODS = ("head", "options", "get", "post", "put", "patch", "delete")
HTTP_STATUSES = ("success", "error")

Outcome = Literal["success", "error"]
ResponseGetter = Callable[[CapturedRequest, QueryParams], Any]

_STATUS_LINES: dict[str, tuple[int, str]] = {
    "success": (200, "OK"),
    "error": (500, "Internal Server Error"),
}


def predefined_response_producer(
    outcome: Outcome,
    response_getter: ResponseGetter | None = None,
) -> ResponseProducer:
    """Build a producer answering with a fixed success or error status.

    Args:
        outcome: ``success`` (200 OK) or ``error`` (500).
        response_getter: Optional ``(request, params)`` callable. A returned
            ResponseDescriptor contributes its body and headers, any other
            value is used as the body.

    Returns:
        ResponseProducer with the status forced to the outcome's.
    """
    status, status_text = _STATUS_LINES[outcome]

    def produce(request: CapturedRequest, params: QueryParams) -> ResponseDescriptor:
        payload = response_getter(request, params) if response_getter else None

        if isinstance(payload, ResponseDescriptor):
            return ResponseDescriptor(
                status=status,
                status_text=status_text,
                body=payload.body,
                headers=payload.headers,
            )
        return ResponseDescriptor(status=status, status_text=status_text, body=payload)

    produce.__qualname__ = f"predefined_{outcome}_response"
    return produce


class MethodInstructions:
    """Instruction factories for one HTTP method."""

    def __init__(self, method: str) -> None:
        self.method = method.upper()

    def success(
        self, path: EndpointPath, response_getter: ResponseGetter | None = None
    ) -> CallInstruction:
        return self._build(path, "success", response_getter)

    def error(
        self, path: EndpointPath, response_getter: ResponseGetter | None = None
    ) -> CallInstruction:
        return self._build(path, "error", response_getter)

    def _build(
        self,
        path: EndpointPath,
        outcome: Outcome,
        response_getter: ResponseGetter | None,
    ) -> CallInstruction:
        return CallInstruction(
            checker=PathMethodChecker(path=path, method=self.method),
            respond=predefined_response_producer(outcome, response_getter),
        )


class PredefinedInstructions:
    """Namespace with one ``MethodInstructions`` per HTTP method."""

    head: MethodInstructions
    options: MethodInstructions
    get: MethodInstructions
    post: MethodInstructions
    put: MethodInstructions
    patch: MethodInstructions
    delete: MethodInstructions

    def __init__(self) -> None:
        for method in HTTP_METHODS:
            setattr(self, method, MethodInstructions(method))


predefined_instructions = PredefinedInstructions()
