"""Data model for call instructions, captured requests and units under test."""

from quiesce.models.http import CapturedRequest, ResponseDescriptor
from quiesce.models.instructions import (
    CallChecker,
    CallInstruction,
    CallInstructionLike,
    FunctionChecker,
    PathMethodChecker,
    ResponseProducer,
    as_checker,
    as_instruction,
)
from quiesce.models.unit import StabilizableUnit

__all__ = [
    "CapturedRequest",
    "ResponseDescriptor",
    "CallChecker",
    "CallInstruction",
    "CallInstructionLike",
    "FunctionChecker",
    "PathMethodChecker",
    "ResponseProducer",
    "as_checker",
    "as_instruction",
    "StabilizableUnit",
]
