"""Stabilization loop: drive a unit under test until it is quiescent.

The loop alternates between letting virtual time pass and answering the
calls that time produced, because one pass can create further calls
depending on how many requests the unit chains. Bounding the number of
iterations turns an infinite hang into a fast, readable failure.

States: initializing -> iterating -> stabilized | failed. The repeating
timer guard is held for the whole run and released on every exit path.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from quiesce.core.config import get_settings
from quiesce.core.exceptions import MaxAttemptsReachedError, StabilizationError
from quiesce.core.logging import get_logger
from quiesce.core.metrics import STABILIZATION_COUNT, STABILIZATION_ITERATIONS
from quiesce.fakes.clock import VirtualClock, current_clock
from quiesce.fakes.http import HttpErrorResponse, HttpTestingController
from quiesce.models.instructions import CallInstructionLike
from quiesce.models.unit import StabilizableUnit
from quiesce.services.call_matcher import complete_http_calls
from quiesce.services.instruction_tracker import InstructionTracker
from quiesce.services.interval_guard import IntervalGuard
from quiesce.services.pass_time import pass_time

logger = get_logger(__name__)


def _deliver_responses(iteration_ms: int, clock: VirtualClock | None, log: Any) -> None:
    """Pass one iteration of time, tolerating unhandled error responses.

    An error response delivered to a unit without an error handler stops
    the clock; the rest of the iteration is then passed so later
    deliveries still run. Any other error propagates.
    """
    clock = clock if clock is not None else current_clock()
    target_ms = clock.now_ms + iteration_ms

    while True:
        try:
            pass_time(max(0, target_ms - clock.now_ms), clock=clock)
            return
        except HttpErrorResponse as e:
            log.debug(
                "Unhandled error response delivered to unit",
                url=e.url,
                status=e.status,
            )


@dataclass
class StabilizationReport:
    """Summary of a successful stabilization run.

    Attributes:
        attempts: Loop iterations performed after the initial pass.
        instructions: Number of call instructions that were tracked.
        resolved_calls: Requests answered from call instructions.
    """

    attempts: int
    instructions: int
    resolved_calls: int


def stabilize(
    fixture: StabilizableUnit,
    *,
    iteration_ms: int | None = None,
    call_instructions: Sequence[CallInstructionLike] | None = None,
    controller: HttpTestingController | None = None,
    clock: VirtualClock | None = None,
    max_attempts: int | None = None,
) -> StabilizationReport:
    """Run update passes and advance time until ``fixture`` is stable.

    Must be called inside a simulated-time context (``fake_async``). Before
    the first update pass a freshly built unit counts as stable, so make
    every override and input assignment before calling this.

    Every instruction in ``call_instructions`` must be used at least once,
    and every captured request must match one of them; both conditions
    are enforced so a test states exactly which calls it expects.

    Example:
        with fake_async() as clock:
            fixture = ComponentFixture(component, clock, controller)
            stabilize(fixture, call_instructions=[
                (("api/users", "GET"), lambda request, params: ResponseDescriptor(body=users)),
            ])

    Args:
        fixture: Unit under test.
        iteration_ms: Virtual milliseconds per clock advance. Defaults to
            ``Settings.iteration_ms``.
        call_instructions: Ordered instructions answering captured requests.
        controller: Testing controller holding captured requests. Defaults
            to ``fixture.http_controller`` when the fixture has one.
        clock: Clock to advance. Defaults to the ``fake_async`` clock.
        max_attempts: Iteration bound. Defaults to ``Settings.max_attempts``.

    Returns:
        StabilizationReport describing the run.

    Raises:
        MaxAttemptsReachedError: If the unit is still unstable after
            ``max_attempts`` iterations.
        NoMatchingInstructionError: If a captured request matches no
            instruction.
        ResponseGenerationError: If a response producer fails.
        InstructionNotInvokedError: If an instruction was never used.
        OutsideSimulatedTimeError: If no simulated-time context is active.
        ValueError: If instructions are given but no controller is found.
    """
    settings = get_settings()
    iteration_ms = settings.iteration_ms if iteration_ms is None else iteration_ms
    max_attempts = settings.max_attempts if max_attempts is None else max_attempts

    tracker = InstructionTracker(call_instructions)
    if tracker.tracked and controller is None:
        controller = getattr(fixture, "http_controller", None)
        if controller is None:
            raise ValueError(
                "call_instructions were given but no HttpTestingController is "
                "available; pass controller= or use a fixture that has one"
            )

    log = logger.bind(
        iteration_ms=iteration_ms,
        max_attempts=max_attempts,
        instructions=len(tracker),
    )
    attempt = 0
    resolved_calls = 0

    try:
        with IntervalGuard():
            # The first pass surfaces the unit's initialization-time work
            fixture.detect_changes()

            while not fixture.is_stable():
                if attempt >= max_attempts:
                    raise MaxAttemptsReachedError(max_attempts)
                attempt += 1

                fixture.detect_changes()
                pass_time(iteration_ms, clock=clock)

                if tracker.tracked:
                    resolved_calls += complete_http_calls(tracker.tracked, controller)
                    fixture.detect_changes()
                    _deliver_responses(iteration_ms, clock, log.bind(attempt=attempt))

            tracker.verify_all_invoked()
    except StabilizationError as e:
        STABILIZATION_COUNT.labels(outcome=e.kind.value.lower()).inc()
        log.warning(
            "Stabilization failed",
            attempts=attempt,
            kind=e.kind.value,
            error=e.message,
        )
        raise

    STABILIZATION_COUNT.labels(outcome="stable").inc()
    STABILIZATION_ITERATIONS.observe(attempt)
    log.debug("Unit stabilized", attempts=attempt, resolved_calls=resolved_calls)

    return StabilizationReport(
        attempts=attempt,
        instructions=len(tracker),
        resolved_calls=resolved_calls,
    )
