"""Virtual clock driving timers and microtasks without real waiting.

Time only moves when ``advance`` is called. Due timers run in due-time
order, ties broken by scheduling order, and the microtask queue is
drained before the first timer and after every timer callback.

An exception raised by a callback stops the clock at once and propagates
to the caller. Time stays at the failing timer and the remaining work
stays queued for the next advance.
"""

import heapq
import itertools
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from quiesce.core.exceptions import OutsideSimulatedTimeError
from quiesce.core.logging import get_logger

logger = get_logger(__name__)

# Repeating timers are never rescheduled closer than this
_MIN_INTERVAL_MS = 1

_current_clock: ContextVar["VirtualClock | None"] = ContextVar(
    "quiesce_current_clock", default=None
)


@dataclass(eq=False)
class TimerHandle:
    """Handle for a scheduled timer.

    Attributes:
        id: Unique timer id within its clock.
        when_ms: Virtual time of the next run.
        callback: Function to call.
        args: Positional arguments for the callback.
        interval_ms: Repeat period, or None for one-shot timers.
        cancelled: Whether the timer was cancelled.
    """

    id: int
    when_ms: int
    callback: Callable[..., Any]
    args: tuple[Any, ...] = ()
    interval_ms: int | None = None
    cancelled: bool = field(default=False)

    @property
    def periodic(self) -> bool:
        return self.interval_ms is not None

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """Deterministic simulated clock measured in milliseconds."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now_ms = start_ms
        self._timers: list[tuple[int, int, TimerHandle]] = []
        self._microtasks: deque[tuple[Callable[..., Any], tuple[Any, ...]]] = deque()
        self._ids = itertools.count(1)
        self._order = itertools.count()
        self._active = False

    @property
    def now_ms(self) -> int:
        """Current virtual time in milliseconds."""
        return self._now_ms

    @property
    def is_active(self) -> bool:
        """Check if the clock belongs to a live ``fake_async`` context."""
        return self._active

    @property
    def pending_timers(self) -> int:
        """Number of scheduled, uncancelled timers."""
        return sum(1 for _, _, handle in self._timers if not handle.cancelled)

    @property
    def pending_microtasks(self) -> int:
        return len(self._microtasks)

    @property
    def has_pending_work(self) -> bool:
        """Check if any timer or microtask is still outstanding."""
        return bool(self._microtasks) or self.pending_timers > 0

    def call_later(
        self, delay_ms: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle:
        """Schedule ``callback`` to run once after ``delay_ms``.

        Args:
            delay_ms: Delay in virtual milliseconds (negative means 0).
            callback: Function to call.
            *args: Positional arguments for the callback.

        Returns:
            TimerHandle that can be cancelled.
        """
        handle = TimerHandle(
            id=next(self._ids),
            when_ms=self._now_ms + max(0, int(delay_ms)),
            callback=callback,
            args=args,
        )
        self._push(handle)
        return handle

    def call_every(
        self, interval_ms: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle:
        """Schedule ``callback`` to run every ``interval_ms`` until cancelled.

        Args:
            interval_ms: Repeat period in virtual milliseconds.
            callback: Function to call.
            *args: Positional arguments for the callback.

        Returns:
            TimerHandle that can be cancelled.
        """
        interval = max(_MIN_INTERVAL_MS, int(interval_ms))
        handle = TimerHandle(
            id=next(self._ids),
            when_ms=self._now_ms + interval,
            callback=callback,
            args=args,
            interval_ms=interval,
        )
        self._push(handle)
        return handle

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Queue ``callback`` as a microtask."""
        self._microtasks.append((callback, args))

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()

    def discard_periodic_tasks(self) -> int:
        """Cancel every repeating timer.

        Returns:
            Number of timers cancelled.
        """
        discarded = 0
        for _, _, handle in self._timers:
            if handle.periodic and not handle.cancelled:
                handle.cancel()
                discarded += 1
        return discarded

    def advance(self, ms: float) -> None:
        """Move time forward by ``ms``, running everything that falls due.

        Args:
            ms: Virtual milliseconds to advance (non-negative).

        Raises:
            OutsideSimulatedTimeError: If the clock's context has ended.
            ValueError: If ``ms`` is negative.
            Exception: The first error raised by a callback, unchanged.
        """
        self._require_active()
        if ms < 0:
            raise ValueError("Cannot advance a clock backwards")

        target = self._now_ms + int(ms)

        self._run_microtasks()
        while self._timers and self._timers[0][0] <= target:
            when, _, handle = heapq.heappop(self._timers)
            if handle.cancelled:
                continue

            self._now_ms = max(self._now_ms, when)
            if handle.interval_ms is not None:
                # Rescheduled first so the callback itself may cancel it
                handle.when_ms = when + handle.interval_ms
                self._push(handle)

            handle.callback(*handle.args)
            self._run_microtasks()

        self._now_ms = target

    def drain_microtasks(self) -> None:
        """Run queued microtasks until the queue is empty.

        Raises:
            OutsideSimulatedTimeError: If the clock's context has ended.
        """
        self._require_active()
        self._run_microtasks()

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._timers, (handle.when_ms, next(self._order), handle))

    def _run_microtasks(self) -> None:
        while self._microtasks:
            callback, args = self._microtasks.popleft()
            callback(*args)

    def _require_active(self) -> None:
        if not self._active:
            raise OutsideSimulatedTimeError()


@contextmanager
def fake_async(start_ms: int = 0) -> Iterator[VirtualClock]:
    """Open a simulated-time context backed by a fresh ``VirtualClock``.

    Usable as a ``with`` block or as a decorator on a test function.

    Args:
        start_ms: Initial virtual time in milliseconds.

    Yields:
        The active VirtualClock.
    """
    clock = VirtualClock(start_ms=start_ms)
    clock._active = True
    token = _current_clock.set(clock)
    try:
        yield clock
    finally:
        clock._active = False
        _current_clock.reset(token)
        if clock.has_pending_work:
            logger.debug(
                "Leaving simulated-time context with pending work",
                pending_timers=clock.pending_timers,
                pending_microtasks=clock.pending_microtasks,
            )


def current_clock() -> VirtualClock:
    """Return the clock of the enclosing ``fake_async`` context.

    Raises:
        OutsideSimulatedTimeError: If no simulated-time context is active.
    """
    clock = _current_clock.get()
    if clock is None:
        raise OutsideSimulatedTimeError()
    return clock
