"""Process-wide timer primitives for units under test.

Units must call these through the module (``timers.set_interval(...)``),
never via ``from ... import``, so that a replacement installed at runtime
by the repeating-timer guard is seen by every caller.
"""

from collections.abc import Callable
from typing import Any

from quiesce.fakes.clock import TimerHandle, current_clock


def set_timeout(callback: Callable[..., Any], delay_ms: float = 0, *args: Any) -> TimerHandle:
    """Run ``callback`` once after ``delay_ms`` virtual milliseconds."""
    return current_clock().call_later(delay_ms, callback, *args)


def set_interval(callback: Callable[..., Any], interval_ms: float = 0, *args: Any) -> TimerHandle:
    """Run ``callback`` every ``interval_ms`` virtual milliseconds."""
    return current_clock().call_every(interval_ms, callback, *args)


def clear_timer(handle: TimerHandle | None) -> None:
    """Cancel a timer created by ``set_timeout`` or ``set_interval``."""
    if handle is not None:
        handle.cancel()
