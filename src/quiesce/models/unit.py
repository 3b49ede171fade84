"""Interface the stabilization loop needs from a unit under test."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class StabilizableUnit(Protocol):
    """A unit whose asynchronous work can be driven to quiescence.

    Both methods may have side effects and must be safe to call
    repeatedly.
    """

    def detect_changes(self) -> None:
        """Run one update pass, surfacing any newly scheduled work."""
        ...

    def is_stable(self) -> bool:
        """Report whether no timers, microtasks or calls are outstanding."""
        ...
