"""Clock adapter used by the stabilization loop."""

from quiesce.fakes.clock import VirtualClock, current_clock

# Default virtual milliseconds advanced per call
TIME_MS = 1000


def pass_time(time_ms: float = TIME_MS, clock: VirtualClock | None = None) -> None:
    """Advance virtual time and flush every microtask scheduled so far.

    Example:
        with fake_async():
            component.start_timer()
            pass_time()        # 1000 ms
            pass_time(5000)    # custom amount

    Args:
        time_ms: Virtual milliseconds to advance.
        clock: Clock to drive. Defaults to the clock of the enclosing
            ``fake_async`` context.

    Raises:
        OutsideSimulatedTimeError: If called outside a simulated-time context.
    """
    clock = clock if clock is not None else current_clock()
    clock.advance(time_ms)
    clock.drain_microtasks()
