"""Call instructions: request checkers paired with response producers.

A checker is resolved once, when the instruction is built, into one of two
variants so the matcher never has to inspect raw user input:

- ``FunctionChecker`` wraps a predicate over the captured request.
- ``PathMethodChecker`` pairs a URL fragment (plain substring or compiled
  regular expression) with a case-sensitive method token.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from quiesce.models.http import CapturedRequest, ResponseDescriptor
from quiesce.utils.query import QueryParams

ResponseProducer = Callable[[CapturedRequest, QueryParams], ResponseDescriptor]
EndpointPath = Union[str, "re.Pattern[str]"]


def describe_callable(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


@dataclass(frozen=True)
class FunctionChecker:
    """Matches requests for which ``predicate`` returns a truthy value."""

    predicate: Callable[[CapturedRequest], bool]

    def matches(self, request: CapturedRequest) -> bool:
        return bool(self.predicate(request))

    def __str__(self) -> str:
        return f"<checker {describe_callable(self.predicate)}>"


@dataclass(frozen=True)
class PathMethodChecker:
    """Matches requests by method and URL.

    A compiled pattern matches when ``pattern.search(url)`` succeeds; a
    plain string matches when it is contained in the URL.
    """

    path: EndpointPath
    method: str
    _match_url: Callable[[str], Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.path, re.Pattern):
            matcher: Callable[[str], Any] = self.path.search
        else:
            matcher = self._contains
        object.__setattr__(self, "_match_url", matcher)

    def _contains(self, url: str) -> bool:
        return self.path in url  # type: ignore[operator]

    def matches(self, request: CapturedRequest) -> bool:
        if request.method != self.method:
            return False
        return bool(self._match_url(request.url))

    def __str__(self) -> str:
        path = self.path.pattern if isinstance(self.path, re.Pattern) else self.path
        return f"[{path!r}, {self.method!r}]"


CallChecker = Union[FunctionChecker, PathMethodChecker]


def as_checker(spec: Any) -> CallChecker:
    """Resolve a checker specification into a checker variant.

    Args:
        spec: An existing checker, a ``(path, method)`` pair, or a
            predicate over ``CapturedRequest``.

    Returns:
        The matching checker variant.

    Raises:
        TypeError: If ``spec`` is none of the accepted forms.
    """
    if isinstance(spec, (FunctionChecker, PathMethodChecker)):
        return spec
    if isinstance(spec, (tuple, list)):
        if len(spec) != 2:
            raise TypeError(
                f"Path checker must be a (path, method) pair, got {len(spec)} items"
            )
        path, method = spec
        if not isinstance(path, (str, re.Pattern)) or not isinstance(method, str):
            raise TypeError(
                "Path checker must pair a str or compiled pattern with a method string"
            )
        return PathMethodChecker(path=path, method=method)
    if callable(spec):
        return FunctionChecker(predicate=spec)
    raise TypeError(f"Unsupported call checker: {spec!r}")


@dataclass(frozen=True)
class CallInstruction:
    """A request checker paired with the producer of its canned response.

    Attributes:
        checker: Decides whether a captured request is handled here.
        respond: Builds the response for a matched request.
    """

    checker: CallChecker
    respond: ResponseProducer

    def __str__(self) -> str:
        return f"{self.checker} -> {describe_callable(self.respond)}"


CallInstructionLike = Union[CallInstruction, Sequence[Any]]


def as_instruction(value: CallInstructionLike) -> CallInstruction:
    """Build a ``CallInstruction`` from an instruction or a raw pair.

    Args:
        value: A ``CallInstruction`` or a ``(checker_spec, producer)`` pair.

    Returns:
        The normalized instruction.

    Raises:
        TypeError: If the value cannot be interpreted as an instruction.
    """
    if isinstance(value, CallInstruction):
        return value
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        raise TypeError(
            f"Call instruction must be a (checker, producer) pair, got {value!r}"
        )
    checker, respond = value
    if not callable(respond):
        raise TypeError(f"Response producer must be callable, got {respond!r}")
    return CallInstruction(checker=as_checker(checker), respond=respond)
