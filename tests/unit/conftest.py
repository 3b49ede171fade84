"""Fixtures specific to unit tests.

Provides request records and response producers for isolated tests of
the matcher, tracker and checker variants.
"""

import pytest

from quiesce.models import CapturedRequest, ResponseDescriptor


@pytest.fixture
def make_request():
    """Factory for CapturedRequest records with sensible defaults."""

    def factory(method="GET", url="/api/test", **kwargs):
        return CapturedRequest(method=method, url=url, **kwargs)

    return factory


@pytest.fixture
def ok_producer():
    """Response producer answering every request with 200 and an empty body."""

    def produce(request, params):
        return ResponseDescriptor(status=200, status_text="OK", body={})

    return produce
