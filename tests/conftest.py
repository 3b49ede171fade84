"""Shared pytest fixtures for all test layers.

Provides a simulated-time context and the mock network layer wired to
it, plus a clean settings cache per test.
"""

import pytest
import structlog

from quiesce.core.config import get_settings
from quiesce.fakes import ComponentFixture, HttpClient, HttpTestingController, fake_async


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test so environment patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults so capture_logs sees every event."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def clock():
    """Active virtual clock for the duration of the test.

    Yields:
        VirtualClock registered as the current simulated-time context.
    """
    with fake_async() as active_clock:
        yield active_clock


@pytest.fixture
def controller(clock):
    """Testing controller delivering responses on the test clock."""
    return HttpTestingController(clock)


@pytest.fixture
def http_client(controller):
    """HttpClient whose calls are captured by ``controller``."""
    return HttpClient(controller)


@pytest.fixture
def make_fixture(clock, controller):
    """Factory wrapping a component in a ComponentFixture on the test clock."""

    def factory(component):
        return ComponentFixture(component, clock, controller)

    return factory
