"""Query string parsing for captured request URLs."""

from collections.abc import Iterator
from urllib.parse import parse_qsl


class QueryParams:
    """Read-only multimap of query parameters.

    Keeps every value for repeated keys, in the order they appear in the
    query string, mirroring how browsers expose search parameters.
    """

    def __init__(self, pairs: list[tuple[str, str]] | None = None) -> None:
        self._pairs: list[tuple[str, str]] = list(pairs or [])

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for ``key``, or ``default``."""
        for name, value in self._pairs:
            if name == key:
                return value
        return default

    def get_all(self, key: str) -> list[str]:
        """Return every value for ``key`` in query string order."""
        return [value for name, value in self._pairs if name == key]

    def keys(self) -> list[str]:
        """Return distinct keys in first-seen order."""
        return list(dict.fromkeys(name for name, _ in self._pairs))

    def items(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def to_dict(self) -> dict[str, list[str]]:
        return {key: self.get_all(key) for key in self.keys()}

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryParams):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"QueryParams({self._pairs!r})"


def extract_query_params(url: str) -> QueryParams:
    """Parse the query string portion of a URL.

    Everything after the first ``?`` is treated as the query string; a
    fragment, if present, is dropped. Blank values are kept so that
    ``?flag=`` is distinguishable from a missing ``flag``.

    Args:
        url: Full request URL, possibly without any query string.

    Returns:
        QueryParams holding the decoded key/value pairs.
    """
    _, sep, query = url.partition("?")
    if not sep:
        return QueryParams()
    query = query.split("#", 1)[0]
    return QueryParams(parse_qsl(query, keep_blank_values=True))
