"""Adapter turning a plain component object into a stabilizable unit."""

from typing import Any

from quiesce.fakes.clock import VirtualClock
from quiesce.fakes.http import HttpTestingController


class ComponentFixture:
    """Drives a component's lifecycle hooks and reports its quiescence.

    The component may define ``on_init()`` (run on the first change
    detection pass only) and ``render()`` (run on every pass). The
    fixture is stable when neither the clock nor the controller has
    outstanding work.

    Attributes:
        component: The wrapped component instance.
        clock: Clock the component's timers run on.
        http_controller: Controller capturing the component's calls.
        change_detection_runs: Number of completed update passes.
    """

    def __init__(
        self,
        component: Any,
        clock: VirtualClock,
        http_controller: HttpTestingController | None = None,
    ) -> None:
        self.component = component
        self.clock = clock
        self.http_controller = http_controller
        self.change_detection_runs = 0
        self._initialized = False

    def detect_changes(self) -> None:
        if not self._initialized:
            self._initialized = True
            on_init = getattr(self.component, "on_init", None)
            if on_init is not None:
                on_init()

        render = getattr(self.component, "render", None)
        if render is not None:
            render()
        self.change_detection_runs += 1

    def is_stable(self) -> bool:
        if self.clock.has_pending_work:
            return False
        if self.http_controller is not None and self.http_controller.has_pending:
            return False
        return True
