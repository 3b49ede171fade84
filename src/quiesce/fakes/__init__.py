"""In-process doubles for the virtual clock and the mock network layer."""

from quiesce.fakes.clock import TimerHandle, VirtualClock, current_clock, fake_async
from quiesce.fakes.fixture import ComponentFixture
from quiesce.fakes.http import (
    HttpClient,
    HttpErrorResponse,
    HttpTestingController,
    Subscription,
)

__all__ = [
    "TimerHandle",
    "VirtualClock",
    "current_clock",
    "fake_async",
    "ComponentFixture",
    "HttpClient",
    "HttpErrorResponse",
    "HttpTestingController",
    "Subscription",
]
