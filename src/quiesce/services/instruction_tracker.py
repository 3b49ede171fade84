"""Instruction tracker: records which call instructions were used.

One ``InstructionTracker`` is built per stabilization run. It owns a
flag per instruction position; the tracked copies of the instructions
carry producers that raise their flag before delegating, so matching is
unchanged and only usage becomes observable.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial

from quiesce.core.exceptions import InstructionNotInvokedError
from quiesce.models.http import CapturedRequest, ResponseDescriptor
from quiesce.models.instructions import (
    CallInstruction,
    CallInstructionLike,
    ResponseProducer,
    as_instruction,
    describe_callable,
)
from quiesce.utils.query import QueryParams

CallTracker = tuple[Callable[[], bool], CallInstruction]


@dataclass(frozen=True, repr=False)
class _TrackedProducer:
    tracker: "InstructionTracker"
    index: int
    producer: ResponseProducer

    def __call__(self, request: CapturedRequest, params: QueryParams) -> ResponseDescriptor:
        self.tracker.mark_invoked(self.index)
        return self.producer(request, params)

    def __repr__(self) -> str:
        return f"tracked({describe_callable(self.producer)})"


class InstructionTracker:
    """Arena of usage flags indexed by instruction position.

    Attributes:
        instructions: The caller's instructions, normalized, in order.
        tracked: Copies whose producers record usage.
    """

    def __init__(self, instructions: Sequence[CallInstructionLike] | None = None) -> None:
        self.instructions: list[CallInstruction] = [
            as_instruction(instruction) for instruction in instructions or ()
        ]
        self._invoked = [False] * len(self.instructions)
        self.tracked: list[CallInstruction] = [
            CallInstruction(
                checker=instruction.checker,
                respond=_TrackedProducer(self, index, instruction.respond),
            )
            for index, instruction in enumerate(self.instructions)
        ]

    def __len__(self) -> int:
        return len(self.instructions)

    def mark_invoked(self, index: int) -> None:
        self._invoked[index] = True

    def was_invoked(self, index: int) -> bool:
        return self._invoked[index]

    @property
    def trackers(self) -> list[CallTracker]:
        """``(was_invoked, original_instruction)`` pairs in instruction order."""
        return [
            (partial(self.was_invoked, index), instruction)
            for index, instruction in enumerate(self.instructions)
        ]

    def unused(self) -> list[tuple[int, CallInstruction]]:
        """Positions and instructions whose producers never ran."""
        return [
            (index, instruction)
            for index, instruction in enumerate(self.instructions)
            if not self._invoked[index]
        ]

    def verify_all_invoked(self) -> None:
        """Raise for the first instruction that was never used.

        Raises:
            InstructionNotInvokedError: Identifying the unused instruction.
        """
        for index, instruction in self.unused():
            raise InstructionNotInvokedError(index, str(instruction))


def track_instructions(
    instructions: Sequence[CallInstructionLike] | None = None,
) -> tuple[list[CallInstruction], list[CallTracker]]:
    """Wrap instructions so their usage can be checked afterwards.

    Args:
        instructions: Caller's instructions; the sequence is not modified.

    Returns:
        Tuple of (tracked instructions, trackers) in instruction order.
    """
    tracker = InstructionTracker(instructions)
    return list(tracker.tracked), tracker.trackers
