"""Runaway-timer guard for the global repeating-timer primitive.

Repeating timers are the usual reason a unit never becomes stable. While
installed, the guard logs a warning with the call-site stack every time
the unit schedules one, then delegates to the original primitive
unchanged.
"""

import traceback
from collections.abc import Callable
from types import TracebackType
from typing import Any

from quiesce.core.config import get_settings
from quiesce.core.logging import get_logger
from quiesce.core.metrics import REPEATING_TIMER_WARNINGS
from quiesce.fakes import timers

logger = get_logger(__name__)


class IntervalGuard:
    """Scoped replacement of ``timers.set_interval``.

    Use as a context manager, or call ``install()`` and later the
    returned rollback. Rollback restores the exact original reference
    and only acts once.

    Args:
        warn: Log a warning per repeating timer. Defaults to
            ``Settings.warn_on_repeating_timers``.
    """

    def __init__(self, warn: bool | None = None) -> None:
        self._warn = get_settings().warn_on_repeating_timers if warn is None else warn
        self._original: Callable[..., Any] | None = None
        self._installed = False
        self.warnings_emitted = 0

    @property
    def is_installed(self) -> bool:
        return self._installed

    def install(self) -> Callable[[], None]:
        """Swap in the warning variant of ``set_interval``.

        Returns:
            Function restoring the original primitive.

        Raises:
            RuntimeError: If this guard is already installed.
        """
        if self._installed:
            raise RuntimeError("IntervalGuard is already installed")

        original = timers.set_interval
        self._original = original
        guard = self

        def set_interval(callback: Callable[..., Any], interval_ms: float = 0, *args: Any) -> Any:
            guard._report(interval_ms, traceback.format_stack()[:-1])
            return original(callback, interval_ms, *args)

        timers.set_interval = set_interval
        self._installed = True
        return self.rollback

    def rollback(self) -> None:
        """Restore the original primitive. Later calls do nothing."""
        if not self._installed:
            return
        timers.set_interval = self._original  # type: ignore[assignment]
        self._installed = False
        self._original = None

    def _report(self, interval_ms: float, stack: list[str]) -> None:
        if not self._warn:
            return
        self.warnings_emitted += 1
        REPEATING_TIMER_WARNINGS.inc()
        logger.warning(
            "Repeating timer scheduled during stabilization; it may prevent "
            "the unit from becoming stable",
            interval_ms=interval_ms,
            trace="".join(stack).rstrip(),
        )

    def __enter__(self) -> "IntervalGuard":
        self.install()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.rollback()
