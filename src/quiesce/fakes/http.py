"""Mock network layer: an HTTP client that captures instead of sending.

``HttpClient`` is what the unit under test talks to. Every call it makes
lands in the ``HttpTestingController`` queue, where tests (or the call
matcher) resolve it with a canned ``ResponseDescriptor``. Responses are
delivered to the unit's callbacks as microtasks on the virtual clock.
"""

import itertools
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from quiesce.core.logging import get_logger
from quiesce.fakes.clock import VirtualClock, current_clock
from quiesce.models.http import CapturedRequest, ResponseDescriptor

logger = get_logger(__name__)

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[["HttpErrorResponse"], None]


class HttpErrorResponse(Exception):
    """A non-2xx response delivered to the unit under test.

    Raised out of the clock when the unit subscribed without an error
    callback.

    Attributes:
        url: URL of the failed request, including query parameters.
        status: HTTP status code.
        status_text: Reason phrase.
        error: Response body.
        headers: Response headers.
    """

    def __init__(self, url: str, response: ResponseDescriptor) -> None:
        super().__init__(
            f"Http failure response for {url}: {response.status} {response.status_text}"
        )
        self.url = url
        self.status = response.status
        self.status_text = response.status_text
        self.error = response.body
        self.headers = dict(response.headers)


@dataclass(eq=False)
class _PendingCall:
    request: CapturedRequest
    on_success: SuccessCallback | None
    on_error: ErrorCallback | None
    cancelled: bool = False
    completed: bool = False


class Subscription:
    """Handle returned to the unit for one outgoing call."""

    def __init__(self, call: _PendingCall) -> None:
        self._call = call

    @property
    def closed(self) -> bool:
        return self._call.cancelled or self._call.completed

    def cancel(self) -> None:
        """Cancel the call; its callbacks will never run."""
        if self.closed:
            return
        self._call.cancelled = True
        logger.debug(
            "Request cancelled",
            method=self._call.request.method,
            url=self._call.request.url,
        )


class HttpTestingController:
    """FIFO queue of captured calls waiting for a response.

    Args:
        clock: Clock used to deliver responses. Defaults to the clock of
            the enclosing ``fake_async`` context at resolve time.
    """

    def __init__(self, clock: VirtualClock | None = None) -> None:
        self._clock = clock
        self._queue: list[_PendingCall] = []
        self._sequence = itertools.count(1)

    def capture(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Record an outgoing call instead of sending it.

        Returns:
            Subscription the unit can use to cancel the call.
        """
        request = CapturedRequest(
            method=method,
            url=url,
            params=tuple((key, str(value)) for key, value in (params or {}).items()),
            body=body,
            headers=dict(headers or {}),
            sequence=next(self._sequence),
        )
        call = _PendingCall(request=request, on_success=on_success, on_error=on_error)
        self._queue.append(call)
        logger.debug(
            "Request captured",
            method=method,
            url=request.url_with_params,
            sequence=request.sequence,
        )
        return Subscription(call)

    def list_pending(self) -> list[CapturedRequest]:
        """Snapshot every queued call in capture order, cancelled ones included."""
        return [replace(call.request, cancelled=call.cancelled) for call in self._queue]

    def match(self, predicate: Callable[[CapturedRequest], bool]) -> list[CapturedRequest]:
        """Snapshot queued calls accepted by ``predicate``."""
        return [request for request in self.list_pending() if predicate(request)]

    @property
    def has_pending(self) -> bool:
        """Check if any uncancelled call is waiting for a response."""
        return any(not call.cancelled for call in self._queue)

    def resolve(self, request: CapturedRequest, response: ResponseDescriptor) -> None:
        """Answer a queued call with ``response``.

        The call leaves the queue immediately; its callback runs on the
        next microtask drain.

        Raises:
            ValueError: If the request is unknown, already resolved or cancelled.
            OutsideSimulatedTimeError: If the controller has no clock and no
                simulated-time context is active. The call stays queued.
        """
        call = self._find(request)
        if call.cancelled:
            raise ValueError(
                f"Cannot resolve a cancelled request: {request.method} {request.url}"
            )

        clock = self._clock or current_clock()
        self._queue.remove(call)
        clock.call_soon(self._deliver, call, response)
        logger.debug(
            "Request resolved",
            method=request.method,
            url=request.url_with_params,
            status=response.status,
        )

    def verify(self) -> None:
        """Assert that no uncancelled call is left unanswered.

        Raises:
            AssertionError: Listing every outstanding call.
        """
        outstanding = [call.request for call in self._queue if not call.cancelled]
        if outstanding:
            listing = ", ".join(
                f"{request.method} {request.url_with_params}" for request in outstanding
            )
            raise AssertionError(
                f"Expected no open requests, found {len(outstanding)}: {listing}"
            )

    def _find(self, request: CapturedRequest) -> _PendingCall:
        for call in self._queue:
            if call.request.sequence == request.sequence:
                return call
        raise ValueError(
            f"Request is not pending: {request.method} {request.url} "
            f"(sequence {request.sequence})"
        )

    def _deliver(self, call: _PendingCall, response: ResponseDescriptor) -> None:
        if call.cancelled:
            return
        call.completed = True

        if response.ok:
            if call.on_success is not None:
                call.on_success(response.body)
            return

        error = HttpErrorResponse(call.request.url_with_params, response)
        if call.on_error is None:
            raise error
        call.on_error(error)


class HttpClient:
    """HTTP client for units under test, backed by a testing controller."""

    def __init__(self, controller: HttpTestingController) -> None:
        self._controller = controller

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Issue a call; the response arrives through the callbacks.

        Args:
            method: HTTP method, normalized to upper case.
            url: Target URL, may carry an inline query string.
            params: Extra query parameters.
            body: Request payload.
            headers: Request headers.
            on_success: Receives the response body for 2xx statuses.
            on_error: Receives an HttpErrorResponse for other statuses.

        Returns:
            Subscription that can cancel the call.
        """
        return self._controller.capture(
            method.upper(),
            url,
            params=params,
            body=body,
            headers=headers,
            on_success=on_success,
            on_error=on_error,
        )

    def get(self, url: str, **kwargs: Any) -> Subscription:
        return self.request("GET", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> Subscription:
        return self.request("HEAD", url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> Subscription:
        return self.request("OPTIONS", url, **kwargs)

    def post(self, url: str, body: Any = None, **kwargs: Any) -> Subscription:
        return self.request("POST", url, body=body, **kwargs)

    def put(self, url: str, body: Any = None, **kwargs: Any) -> Subscription:
        return self.request("PUT", url, body=body, **kwargs)

    def patch(self, url: str, body: Any = None, **kwargs: Any) -> Subscription:
        return self.request("PATCH", url, body=body, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Subscription:
        return self.request("DELETE", url, **kwargs)
