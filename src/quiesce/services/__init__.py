"""Service layer: the stabilization loop and its collaborators."""

from quiesce.services.call_matcher import (
    complete_http_calls,
    find_instruction,
    get_requests_from_queue,
)
from quiesce.services.instruction_tracker import InstructionTracker, track_instructions
from quiesce.services.interval_guard import IntervalGuard
from quiesce.services.pass_time import TIME_MS, pass_time
from quiesce.services.predefined import (
    predefined_instructions,
    predefined_response_producer,
)
from quiesce.services.stabilizer import StabilizationReport, stabilize

__all__ = [
    "complete_http_calls",
    "find_instruction",
    "get_requests_from_queue",
    "InstructionTracker",
    "track_instructions",
    "IntervalGuard",
    "TIME_MS",
    "pass_time",
    "predefined_instructions",
    "predefined_response_producer",
    "StabilizationReport",
    "stabilize",
]
