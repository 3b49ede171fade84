"""Unit tests for the mock call matcher.

Tests cover FIFO resolution, first-match-wins ordering, cancelled
request handling, and the two hard-stop failures.
"""

import re
from unittest.mock import Mock

import pytest
from structlog.testing import capture_logs

from quiesce.core.exceptions import NoMatchingInstructionError, ResponseGenerationError
from quiesce.models import CallInstruction, PathMethodChecker, ResponseDescriptor, as_instruction
from quiesce.services.call_matcher import (
    complete_http_calls,
    find_instruction,
    get_requests_from_queue,
)
from quiesce.services.predefined import predefined_instructions


def respond_with(body, status=200):
    return Mock(return_value=ResponseDescriptor(status=status, body=body))


class TestFindInstruction:
    """Tests for instruction selection."""

    def test_first_matching_instruction_wins(self, make_request):
        """Instruction order breaks ties between matching rules."""
        first = as_instruction((("/api", "GET"), respond_with(1)))
        second = as_instruction((("/api/users", "GET"), respond_with(2)))

        assert find_instruction([first, second], make_request("GET", "/api/users")) is first

    def test_returns_none_without_match(self, make_request):
        """No matching rule yields None."""
        instruction = as_instruction((("/api/users", "POST"), respond_with(1)))

        assert find_instruction([instruction], make_request("GET", "/api/users")) is None


class TestCompleteHttpCalls:
    """Tests for draining and resolving queued requests."""

    def test_resolves_in_capture_order(self, clock, http_client, controller):
        """Requests are answered FIFO and producers run once each."""
        order = []

        def producer(name):
            def produce(request, params):
                order.append(name)
                return ResponseDescriptor(body=name)

            return produce

        received = []
        http_client.get("/api/b", on_success=received.append)
        http_client.get("/api/a", on_success=received.append)

        resolved = complete_http_calls(
            [
                as_instruction((("/api/a", "GET"), producer("a"))),
                as_instruction((("/api/b", "GET"), producer("b"))),
            ],
            controller,
        )
        clock.drain_microtasks()

        assert resolved == 2
        assert order == ["b", "a"]
        assert received == ["b", "a"]
        assert controller.list_pending() == []

    def test_producer_receives_request_and_query_params(self, http_client, controller):
        """Producers get the request and its parsed query string."""
        produce = respond_with([])
        http_client.get("/api/heroes?name=Bo", params={"page": "2"})

        complete_http_calls([as_instruction((("/api/heroes", "GET"), produce))], controller)

        request, params = produce.call_args.args
        assert request.url == "/api/heroes?name=Bo"
        assert params.get("name") == "Bo"
        assert params.get("page") == "2"

    def test_response_is_passed_through_verbatim(self, clock, http_client, controller):
        """Status, status text, body and headers reach the controller unchanged."""
        response = ResponseDescriptor(
            status=201, status_text="Created", body={"id": 1}, headers={"Location": "/1"}
        )
        resolve = Mock(wraps=controller.resolve)
        controller.resolve = resolve
        http_client.post("/api/heroes")

        complete_http_calls(
            [as_instruction((("/api/heroes", "POST"), Mock(return_value=response)))],
            controller,
        )

        assert resolve.call_args.args[1] is response

    def test_pattern_checker(self, http_client, controller):
        """Regular expression checkers select matching requests."""
        produce = respond_with({})
        http_client.get("/api/users/42")

        complete_http_calls(
            [as_instruction(((re.compile(r"^/api/users/\d+$"), "GET"), produce))],
            controller,
        )

        produce.assert_called_once()

    def test_function_checker(self, http_client, controller):
        """Predicate checkers select matching requests."""
        produce = respond_with({})
        http_client.put("/api/heroes", body={"id": 3})

        complete_http_calls(
            [as_instruction((lambda request: request.body == {"id": 3}, produce))],
            controller,
        )

        produce.assert_called_once()

    def test_unmatched_request_raises(self, http_client, controller):
        """A request with no matching rule stops the run."""
        http_client.get("/api/other?x=1")

        with pytest.raises(NoMatchingInstructionError) as exc_info:
            complete_http_calls([as_instruction((("/api/test", "GET"), respond_with(1)))], controller)

        assert exc_info.value.url == "/api/other?x=1"
        assert exc_info.value.method == "GET"

    def test_cancelled_requests_are_skipped(self, http_client, controller):
        """Cancelled requests need no instruction and are never resolved."""
        produce = respond_with(1)
        http_client.get("/api/unmatched").cancel()
        http_client.get("/api/test")

        resolved = complete_http_calls([as_instruction((("/api/test", "GET"), produce))], controller)

        assert resolved == 1
        produce.assert_called_once()
        assert [r.url for r in controller.list_pending()] == ["/api/unmatched"]

    def test_producer_failure_is_wrapped(self, http_client, controller):
        """Exceptions from producers become ResponseGenerationError."""
        cause = KeyError("hero")
        http_client.get("/api/test")

        with pytest.raises(ResponseGenerationError) as exc_info:
            complete_http_calls(
                [as_instruction((("/api/test", "GET"), Mock(side_effect=cause)))],
                controller,
            )

        assert exc_info.value.__cause__ is cause
        assert "'hero'" in exc_info.value.message

    def test_response_generation_error_not_double_wrapped(self, http_client, controller):
        """A producer raising ResponseGenerationError is propagated as is."""
        error = ResponseGenerationError("already wrapped")
        http_client.get("/api/test")

        with pytest.raises(ResponseGenerationError) as exc_info:
            complete_http_calls(
                [as_instruction((("/api/test", "GET"), Mock(side_effect=error)))],
                controller,
            )

        assert exc_info.value is error

    def test_response_getter_failure_logged_once(self, http_client, controller):
        """A failing predefined getter produces a single error log event."""

        def broken(request, params):
            raise ValueError("bad fixture data")

        http_client.get("/api/test")

        with capture_logs() as logs:
            with pytest.raises(ResponseGenerationError, match="bad fixture data"):
                complete_http_calls(
                    [predefined_instructions.get.success("/api/test", broken)],
                    controller,
                )

        errors = [log for log in logs if log["log_level"] == "error"]
        assert len(errors) == 1
        assert errors[0]["event"] == "Response producer failed"
        assert errors[0]["error_type"] == "ValueError"

    def test_non_descriptor_result_rejected(self, http_client, controller):
        """Producers must return a ResponseDescriptor."""
        http_client.get("/api/test")

        with pytest.raises(ResponseGenerationError, match="got dict"):
            complete_http_calls(
                [as_instruction((("/api/test", "GET"), Mock(return_value={"a": 1})))],
                controller,
            )

    def test_empty_queue_resolves_nothing(self, controller):
        """Nothing queued means nothing resolved."""
        assert complete_http_calls([], controller) == 0

    def test_get_requests_from_queue_includes_cancelled(self, http_client, controller):
        """The raw queue listing keeps cancelled requests."""
        http_client.get("/api/a").cancel()

        assert [r.cancelled for r in get_requests_from_queue(controller)] == [True]

    def test_accepts_instruction_objects(self, http_client, controller):
        """Pre-built CallInstruction objects are used directly."""
        produce = respond_with(1)
        http_client.delete("/api/heroes/1")

        complete_http_calls(
            [CallInstruction(PathMethodChecker("/api/heroes/", "DELETE"), produce)],
            controller,
        )

        produce.assert_called_once()
