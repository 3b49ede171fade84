"""Request and response records exchanged with the mock network layer."""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class CapturedRequest:
    """Immutable snapshot of an outgoing call seen by the testing controller.

    Attributes:
        method: Upper-case HTTP method token, e.g. ``GET``.
        url: URL as issued by the unit, possibly including a query string.
        params: Extra query parameters passed separately from the URL.
        body: Request payload, if any.
        headers: Request headers.
        cancelled: Whether the unit cancelled the call when the snapshot
            was taken.
        sequence: Capture order assigned by the controller.
    """

    method: str
    url: str
    params: tuple[tuple[str, str], ...] = ()
    body: Any = field(default=None, hash=False, compare=False)
    headers: dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    cancelled: bool = False
    sequence: int = 0

    @property
    def url_with_params(self) -> str:
        """Full URL with ``params`` appended to any inline query string."""
        if not self.params:
            return self.url
        separator = "&" if "?" in self.url else "?"
        return f"{self.url}{separator}{urlencode(self.params)}"


class ResponseDescriptor(BaseModel):
    """Canned response used to resolve a captured request.

    Attributes:
        status: HTTP status code (0 models a network-level failure).
        status_text: Reason phrase delivered with the status.
        body: Response payload handed to the unit.
        headers: Response headers.
    """

    model_config = ConfigDict(frozen=True)

    status: int = Field(
        default=200,
        ge=0,
        le=599,
        description="HTTP status code",
    )
    status_text: str = Field(
        default="OK",
        description="HTTP reason phrase",
    )
    body: Any = Field(
        default=None,
        description="Response payload",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Response headers",
    )

    @property
    def ok(self) -> bool:
        """Check if the status is in the 2xx success range."""
        return 200 <= self.status < 300
